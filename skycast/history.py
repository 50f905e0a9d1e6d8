"""Bounded, most-recent-first list of searched city names."""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple

DEFAULT_HISTORY_LIMIT = 5


class SearchHistory:
    """Immutable search history value.

    Entries are ordered most-recent-first and compared case-insensitively;
    ``push`` returns a new history with the city moved to the front and the
    oldest entries dropped past ``limit``.
    """

    __slots__ = ("_entries", "limit")

    def __init__(self, entries: Iterable[str] = (), limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be positive")
        self.limit = limit
        deduped: list[str] = []
        seen: set[str] = set()
        for entry in entries:
            key = entry.casefold()
            if key in seen:
                continue
            seen.add(key)
            deduped.append(entry)
        self._entries: Tuple[str, ...] = tuple(deduped[:limit])

    def push(self, city: str) -> "SearchHistory":
        """Return a history with ``city`` at index 0."""
        key = city.casefold()
        rest = [entry for entry in self._entries if entry.casefold() != key]
        return SearchHistory([city, *rest], limit=self.limit)

    def entries(self) -> list[str]:
        """Entries in display order."""
        return list(self._entries)

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchHistory):
            return NotImplemented
        return self._entries == other._entries and self.limit == other.limit

    def __repr__(self) -> str:
        return f"SearchHistory({list(self._entries)!r}, limit={self.limit})"
