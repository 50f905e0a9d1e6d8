"""Collapse 3-hour forecast samples into one card per day."""
from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, List

from skycast.domain import DailyForecastEntry, ForecastSample

DEFAULT_DAY_LIMIT = 5

# Fixed English labels so output does not depend on the process locale.
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def day_label(timestamp: int, tz: dt.tzinfo = dt.timezone.utc) -> str:
    """Short weekday name for an epoch timestamp in ``tz``."""
    return WEEKDAY_LABELS[dt.datetime.fromtimestamp(timestamp, tz=tz).weekday()]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def reduce_daily_forecast(
    samples: Iterable[ForecastSample],
    *,
    tz: dt.tzinfo = dt.timezone.utc,
    limit: int = DEFAULT_DAY_LIMIT,
) -> List[DailyForecastEntry]:
    """
    Return at most ``limit`` entries, one per day label, in encounter order.

    The first sample seen for a day represents that day; later samples with
    the same label are discarded, whatever their wall-clock order.
    """
    out: List[DailyForecastEntry] = []
    seen: set[str] = set()
    for sample in samples:
        if len(out) >= limit:
            break
        label = day_label(sample.timestamp, tz)
        if label in seen:
            continue
        seen.add(label)
        out.append(
            DailyForecastEntry(
                day=label,
                temperature=round_half_up(sample.temperature),
                icon=sample.icon,
                description=sample.description,
            )
        )
    return out
