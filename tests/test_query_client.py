import threading
import unittest

from skycast.data_sources.base import CallableWeatherDataSource
from skycast.domain import ForecastSample, QueryState, QueryStatus, ViewState, WeatherSnapshot
from skycast.errors import (
    EmptyQueryError,
    NothingToRefreshError,
    TransportError,
    UpstreamError,
    WeatherQueryError,
)
from skycast.query_client import WeatherQueryClient, fetch_joined


def _snapshot(location: str = "Paris", temperature: float = 18.6) -> WeatherSnapshot:
    return WeatherSnapshot(
        location=location,
        temperature=temperature,
        humidity=72,
        wind_speed=4.1,
        condition="Clouds",
        description="broken clouds",
        icon="04d",
    )


def _samples():
    return [
        ForecastSample(timestamp=1704067200, temperature=10.4, condition="Clear", description="clear sky", icon="01d"),
        ForecastSample(timestamp=1704078000, temperature=15.9, condition="Clouds", description="few clouds", icon="02d"),
    ]


def _source(current=None, forecast=None):
    return CallableWeatherDataSource(
        current=current or (lambda city: _snapshot(location=city)),
        forecast=forecast or (lambda city: _samples()),
    )


def _raise(exc):
    def _inner(_city):
        raise exc
    return _inner


class TestFetchJoined(unittest.TestCase):
    def test_calls_run_concurrently(self):
        barrier = threading.Barrier(2, timeout=5)

        def current(city):
            barrier.wait()
            return _snapshot(location=city)

        def forecast(city):
            barrier.wait()
            return _samples()

        weather, samples = fetch_joined(_source(current, forecast), "Paris")
        self.assertEqual(weather.location, "Paris")
        self.assertEqual(len(samples), 2)

    def test_waits_for_slow_half_before_failing(self):
        finished = threading.Event()

        def slow_forecast(city):
            finished.wait(0.2)
            finished.set()
            return _samples()

        with self.assertRaises(UpstreamError):
            fetch_joined(_source(current=_raise(UpstreamError(404, "city not found")), forecast=slow_forecast), "X")
        self.assertTrue(finished.is_set())


class TestWeatherQueryClient(unittest.TestCase):
    def test_initial_state_is_idle(self):
        client = WeatherQueryClient(_source())
        self.assertEqual(client.state.status, QueryStatus.IDLE)
        self.assertEqual(len(client.history), 0)

    def test_submit_success_commits_snapshot_and_history(self):
        client = WeatherQueryClient(_source())
        state = client.submit("  Paris  ")

        self.assertEqual(state.status, QueryStatus.SUCCESS)
        self.assertEqual(state.weather.location, "Paris")
        self.assertEqual(state.weather.temperature, 18.6)
        self.assertEqual(len(state.forecast), 2)
        self.assertIsNone(state.error)
        self.assertEqual(client.history[0], "Paris")
        self.assertEqual(client.city, "  Paris  ")

    def test_blank_submit_rejected_without_transition(self):
        calls = []
        client = WeatherQueryClient(_source(current=lambda c: calls.append(c) or _snapshot()))
        with self.assertRaises(EmptyQueryError):
            client.submit("   ")
        self.assertEqual(client.state.status, QueryStatus.IDLE)
        self.assertEqual(calls, [])

    def test_blank_submit_keeps_previous_success(self):
        client = WeatherQueryClient(_source())
        client.submit("Paris")
        before = client.state
        with self.assertRaises(EmptyQueryError):
            client.submit("")
        self.assertIs(client.state, before)

    def test_case_insensitive_history_dedup(self):
        client = WeatherQueryClient(_source())
        client.submit("Paris")
        client.submit("Lima")
        client.submit("paris")
        self.assertEqual(client.history.entries(), ["paris", "Lima"])

    def test_history_capped_at_five(self):
        client = WeatherQueryClient(_source())
        for city in ["A", "B", "C", "D", "E", "F", "G"]:
            client.submit(city)
        self.assertEqual(client.history.entries(), ["G", "F", "E", "D", "C"])

    def test_upstream_failure_uses_provider_message(self):
        client = WeatherQueryClient(_source(current=_raise(UpstreamError(404, "city not found"))))
        state = client.submit("Atlantis")
        self.assertEqual(state.status, QueryStatus.FAILED)
        self.assertEqual(state.error, "city not found")
        self.assertEqual(len(client.history), 0)

    def test_transport_failure_uses_generic_message(self):
        client = WeatherQueryClient(_source(forecast=_raise(TransportError())))
        state = client.submit("Paris")
        self.assertEqual(state.status, QueryStatus.FAILED)
        self.assertEqual(state.error, "Failed to fetch weather data")

    def test_unexpected_exception_becomes_failed_state(self):
        client = WeatherQueryClient(_source(current=_raise(RuntimeError("boom"))))
        state = client.submit("Paris")
        self.assertEqual(state.status, QueryStatus.FAILED)
        self.assertEqual(state.error, "Failed to fetch weather data")

    def test_partial_failure_commits_nothing(self):
        client = WeatherQueryClient(_source(forecast=_raise(UpstreamError(500, "forecast down"))))
        state = client.submit("Paris")
        self.assertEqual(state.status, QueryStatus.FAILED)
        self.assertIsNone(state.weather)
        self.assertEqual(state.forecast, ())
        self.assertEqual(len(client.history), 0)

    def test_partial_failure_keeps_earlier_snapshot_pair(self):
        responses = {"fail": False}

        def forecast(city):
            if responses["fail"]:
                raise UpstreamError(500, "forecast down")
            return _samples()

        client = WeatherQueryClient(_source(forecast=forecast))
        client.submit("Paris")
        responses["fail"] = True
        state = client.submit("Lima")

        self.assertEqual(state.status, QueryStatus.FAILED)
        self.assertEqual(state.weather.location, "Paris")
        self.assertEqual(len(state.forecast), 2)
        self.assertEqual(client.history.entries(), ["Paris"])

    def test_loading_keeps_previous_snapshot_and_clears_error(self):
        seen = []
        client = WeatherQueryClient(_source(), listener=seen.append)
        client.submit("Paris")
        client.state = client.state.failed("old error")

        client.refresh()

        loading = [v.query for v in seen if v.query.status is QueryStatus.LOADING][-1]
        self.assertIsNone(loading.error)
        self.assertEqual(loading.weather.location, "Paris")
        self.assertEqual(seen[-1].query.status, QueryStatus.SUCCESS)

    def test_select_history_copies_city_text(self):
        client = WeatherQueryClient(_source())
        client.submit("Paris")
        client.submit("Lima")
        state = client.select_history(1)
        self.assertEqual(client.city, "Paris")
        self.assertEqual(state.weather.location, "Paris")
        self.assertEqual(client.history.entries(), ["Paris", "Lima"])

    def test_select_history_out_of_range(self):
        client = WeatherQueryClient(_source())
        with self.assertRaises(IndexError):
            client.select_history(0)

    def test_select_history_rejects_negative_index(self):
        client = WeatherQueryClient(_source())
        client.submit("Paris")
        client.submit("Lima")
        with self.assertRaises(IndexError):
            client.select_history(-1)
        self.assertEqual(client.city, "Lima")
        self.assertEqual(client.state.weather.location, "Lima")

    def test_commit_merges_history_stored_by_another_controller(self):
        store = {"history": ()}

        def current(city):
            # Another controller on the same view commits while this fetch is in flight.
            store["history"] = ("Lima",)
            return _snapshot(location=city)

        client = WeatherQueryClient(
            _source(current=current),
            listener=lambda view: store.update(history=view.history),
            history_loader=lambda: store["history"],
        )
        client.submit("Paris")

        self.assertEqual(client.history.entries(), ["Paris", "Lima"])
        self.assertEqual(store["history"], ("Paris", "Lima"))

    def test_failed_query_keeps_history_stored_by_another_controller(self):
        store = {"history": ("Oslo",)}

        def current(city):
            store["history"] = ("Lima", "Oslo")
            raise UpstreamError(404, "city not found")

        client = WeatherQueryClient(
            _source(current=current),
            view=ViewState(history=("Oslo",)),
            listener=lambda view: store.update(history=view.history),
            history_loader=lambda: store["history"],
        )
        client.submit("Atlantis")

        self.assertEqual(store["history"], ("Lima", "Oslo"))

    def test_action_errors_share_the_query_error_base(self):
        client = WeatherQueryClient(_source())
        with self.assertRaises(WeatherQueryError):
            client.submit("   ")
        with self.assertRaises(WeatherQueryError):
            client.refresh()

    def test_refresh_reuses_location_name(self):
        queried = []

        def current(city):
            queried.append(city)
            return _snapshot(location="Paris")

        client = WeatherQueryClient(_source(current=current))
        client.submit("paris, fr")
        client.refresh()
        self.assertEqual(queried, ["paris, fr", "Paris"])

    def test_refresh_without_snapshot_rejected(self):
        client = WeatherQueryClient(_source())
        with self.assertRaises(NothingToRefreshError):
            client.refresh()
        self.assertEqual(client.state.status, QueryStatus.IDLE)

    def test_restores_from_view_state(self):
        view = ViewState(
            city="Lima",
            query=QueryState.success(_snapshot("Lima"), tuple(_samples())),
            history=("Lima", "Paris"),
        )
        client = WeatherQueryClient(_source(), view=view, history_limit=5)
        self.assertEqual(client.view_state(), view)


if __name__ == "__main__":
    unittest.main()
