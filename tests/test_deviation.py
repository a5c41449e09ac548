"""Tests for the debounced deviation monitor."""

from __future__ import annotations

from datetime import timedelta
import logging

import pytest

from route_progress.deviation import DeviationMonitor
from route_progress.models import Coordinate, ProgressResult
from route_progress.tracker import RouteProgressTracker


def _result(distance_m: float, segment_index: int = 0) -> ProgressResult:
    point = Coordinate(0.0, 0.0)
    return ProgressResult(
        segment_index=segment_index,
        interpolated_point=point,
        traveled=(point, point),
        remaining=(point, Coordinate(0.0, 0.001)),
        distance_from_route_m=distance_m,
    )


def test_off_route_example_emits_once_within_debounce(short_route, t0) -> None:
    tracker = RouteProgressTracker(short_route)
    monitor = DeviationMonitor(threshold_m=50.0)

    result = tracker.update(Coordinate(0.0005, 0.0005))
    assert result.distance_from_route_m == pytest.approx(55.0, abs=3.0)

    first = monitor.check(result, t0)
    assert first is not None
    assert first.distance_from_route_m == result.distance_from_route_m
    assert first.timestamp == t0

    second = monitor.check(tracker.update(Coordinate(0.0005, 0.0005)), t0 + timedelta(seconds=2))
    assert second is None


def test_within_threshold_never_emits(t0) -> None:
    monitor = DeviationMonitor(threshold_m=50.0)
    assert monitor.check(_result(50.0), t0) is None
    assert monitor.check(_result(12.0), t0) is None
    assert monitor.last_emitted_at is None
    assert not monitor.is_off_route


def test_emits_again_after_debounce_window(t0) -> None:
    monitor = DeviationMonitor(threshold_m=50.0, debounce=10)

    assert monitor.check(_result(80.0), t0) is not None
    assert monitor.check(_result(80.0), t0 + timedelta(seconds=10)) is None
    later = monitor.check(_result(90.0), t0 + timedelta(seconds=10.5))

    assert later is not None
    assert later.distance_from_route_m == 90.0
    assert monitor.last_emitted_at == t0 + timedelta(seconds=10.5)


def test_accepts_timedelta_debounce(t0) -> None:
    monitor = DeviationMonitor(threshold_m=10.0, debounce=timedelta(seconds=1))
    assert monitor.check(_result(20.0), t0) is not None
    assert monitor.check(_result(20.0), t0 + timedelta(seconds=2)) is not None


def test_reset_starts_fresh_cycle(t0) -> None:
    monitor = DeviationMonitor(threshold_m=50.0)
    assert monitor.check(_result(70.0), t0) is not None

    monitor.reset()

    assert monitor.last_emitted_at is None
    assert monitor.off_route_since is None
    assert monitor.check(_result(70.0), t0 + timedelta(seconds=1)) is not None


def test_tracks_off_route_excursion(t0, caplog) -> None:
    monitor = DeviationMonitor(threshold_m=50.0, debounce=5)

    with caplog.at_level(logging.INFO, logger="route_progress.deviation"):
        monitor.check(_result(60.0), t0)
        event = monitor.check(_result(65.0, segment_index=2), t0 + timedelta(seconds=8))
        monitor.check(_result(5.0), t0 + timedelta(seconds=9))

    assert event is not None
    assert event.segment_index == 2
    assert event.off_route_since == t0
    assert event.off_route_seconds == pytest.approx(8.0)
    assert not monitor.is_off_route
    messages = [record.getMessage() for record in caplog.records]
    assert any("Route deviation started" in message for message in messages)
    assert any("Back on route" in message for message in messages)


def test_back_on_route_keeps_debounce_clock(t0) -> None:
    monitor = DeviationMonitor(threshold_m=50.0, debounce=10)
    assert monitor.check(_result(60.0), t0) is not None
    assert monitor.check(_result(10.0), t0 + timedelta(seconds=3)) is None
    assert monitor.check(_result(60.0), t0 + timedelta(seconds=6)) is None


def test_default_clock_is_timezone_aware() -> None:
    event = DeviationMonitor(threshold_m=1.0).check(_result(2.0))
    assert event is not None
    assert event.timestamp.tzinfo is not None


@pytest.mark.parametrize("kwargs", [{"threshold_m": -1.0}, {"debounce": -5}])
def test_rejects_negative_configuration(kwargs) -> None:
    with pytest.raises(ValueError):
        DeviationMonitor(**kwargs)


def test_naive_and_aware_clocks_can_be_mixed(t0) -> None:
    monitor = DeviationMonitor(threshold_m=10.0, debounce=5)
    naive = t0.replace(tzinfo=None)

    first = monitor.check(_result(20.0), naive)
    assert first is not None
    assert first.timestamp == t0
    assert monitor.check(_result(20.0), t0 + timedelta(seconds=2)) is None
    assert monitor.check(_result(20.0)) is not None
