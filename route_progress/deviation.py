"""Debounced off-route detection on top of tracker results."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Optional, Union

from .config import DEVIATION_DEBOUNCE_SECONDS, DEVIATION_THRESHOLD_M
from .models import DeviationEvent, ProgressResult

LOGGER = logging.getLogger(__name__)

__all__ = ["DeviationMonitor"]

Debounce = Union[float, int, timedelta]


def _as_timedelta(value: Debounce) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=float(value))


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class DeviationMonitor:
    """Emit a :class:`DeviationEvent` when a result is too far from the route.

    Events are suppressed for ``debounce`` after each emission so a vehicle
    that stays off-route across several samples produces one event per
    window rather than one per sample.
    """

    def __init__(
        self,
        threshold_m: float = DEVIATION_THRESHOLD_M,
        debounce: Debounce = DEVIATION_DEBOUNCE_SECONDS,
    ) -> None:
        if threshold_m < 0:
            raise ValueError("threshold_m must be >= 0")
        debounce_td = _as_timedelta(debounce)
        if debounce_td < timedelta(0):
            raise ValueError("debounce must be >= 0")
        self.threshold_m = float(threshold_m)
        self.debounce = debounce_td
        self._last_emitted_at: Optional[datetime] = None
        self._off_route_since: Optional[datetime] = None

    @property
    def last_emitted_at(self) -> Optional[datetime]:
        return self._last_emitted_at

    @property
    def off_route_since(self) -> Optional[datetime]:
        return self._off_route_since

    @property
    def is_off_route(self) -> bool:
        return self._off_route_since is not None

    def reset(self) -> None:
        """Start a fresh deviation cycle, e.g. after a reroute."""
        self._last_emitted_at = None
        self._off_route_since = None

    def check(
        self,
        result: ProgressResult,
        now: Optional[datetime] = None,
    ) -> Optional[DeviationEvent]:
        """Return a deviation event for ``result`` or ``None`` when suppressed.

        ``now`` defaults to the current UTC time; naive datetimes are read as
        UTC so explicit and default clocks can be mixed.
        """

        now = datetime.now(timezone.utc) if now is None else _as_aware(now)
        distance = result.distance_from_route_m
        off_route = distance > self.threshold_m
        self._track_excursion(off_route, distance, now)
        if not off_route:
            return None

        if (
            self._last_emitted_at is not None
            and now - self._last_emitted_at <= self.debounce
        ):
            return None

        self._last_emitted_at = now
        LOGGER.info(
            "Deviation event: %.1f m from route (threshold %.1f m, segment %s)",
            distance,
            self.threshold_m,
            result.segment_index,
        )
        return DeviationEvent(
            distance_from_route_m=distance,
            timestamp=now,
            segment_index=result.segment_index,
            off_route_since=self._off_route_since,
        )

    def _track_excursion(self, off_route: bool, distance: float, now: datetime) -> None:
        if off_route and self._off_route_since is None:
            self._off_route_since = now
            LOGGER.info("Route deviation started: %.0f m from route", distance)
        elif not off_route and self._off_route_since is not None:
            elapsed = (now - self._off_route_since).total_seconds()
            LOGGER.info("Back on route after %.0f s", elapsed)
            self._off_route_since = None
