"""Trip-level wiring of the progress tracker and the deviation monitor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Optional, Sequence

from .config import DEVIATION_DEBOUNCE_SECONDS, DEVIATION_THRESHOLD_M
from .deviation import Debounce, DeviationMonitor
from .models import Coordinate, DeviationEvent, ProgressResult
from .projector import Projector
from .tracker import RouteProgressTracker

LOGGER = logging.getLogger(__name__)

__all__ = ["ProgressUpdate", "TripProgressSession"]


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """Result of processing one location sample."""

    result: ProgressResult
    deviation: Optional[DeviationEvent] = None


class TripProgressSession:
    """Own the tracker and deviation monitor for one active trip.

    The caller feeds location samples to :meth:`process` and, when a
    deviation event comes back, fetches a new route from its directions
    provider and installs it with :meth:`replace_route`. Sessions are
    single-owner objects.
    """

    def __init__(
        self,
        route: Sequence[Coordinate],
        *,
        threshold_m: float = DEVIATION_THRESHOLD_M,
        debounce: Debounce = DEVIATION_DEBOUNCE_SECONDS,
        projector: Optional[Projector] = None,
    ) -> None:
        self._projector = projector
        self._tracker = RouteProgressTracker(route, projector=projector)
        self._monitor = DeviationMonitor(threshold_m=threshold_m, debounce=debounce)
        self._route_version = 0

    @property
    def tracker(self) -> RouteProgressTracker:
        return self._tracker

    @property
    def monitor(self) -> DeviationMonitor:
        return self._monitor

    @property
    def route_version(self) -> int:
        return self._route_version

    @property
    def last_result(self) -> Optional[ProgressResult]:
        return self._tracker.last_result

    def process(
        self,
        position: Coordinate,
        now: Optional[datetime] = None,
    ) -> ProgressUpdate:
        """Run one sample through the tracker and the deviation monitor."""

        result = self._tracker.update(position)
        event = self._monitor.check(result, now)
        return ProgressUpdate(result=result, deviation=event)

    def replace_route(self, route: Sequence[Coordinate]) -> RouteProgressTracker:
        """Install a new route after a reroute and restart deviation tracking.

        Raises:
            InvalidRouteError: If ``route`` cannot be tracked; the current
                route stays active.
        """

        tracker = RouteProgressTracker(route, projector=self._projector)
        self._tracker = tracker
        self._monitor.reset()
        self._route_version += 1
        LOGGER.info(
            "Installed route version %s with %s points (%.0f m)",
            self._route_version,
            len(tracker.route),
            tracker.total_length_m,
        )
        return tracker
