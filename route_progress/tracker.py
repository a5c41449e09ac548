"""Route progress tracking: snap live positions onto a planned route."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from .errors import InvalidPositionError, InvalidRouteError
from .geo import cumulative_distances_m, distance_m, validate_coordinate
from .models import Coordinate, ProgressResult, Route, SegmentProjection
from .projector import Projector, SegmentProjector

LOGGER = logging.getLogger(__name__)

__all__ = ["RouteProgressTracker"]


class RouteProgressTracker:
    """Track a vehicle's progress along one fixed route.

    The tracker owns the route and the last effective segment index for a
    single trip. A replacement route needs a new tracker. Updates are
    serialised through an internal lock so a location thread and a render
    thread can share one instance.
    """

    def __init__(
        self,
        route: Sequence[Coordinate],
        projector: Optional[Projector] = None,
    ) -> None:
        points = tuple(route)
        if len(points) < 2:
            raise InvalidRouteError(
                f"Route must contain at least 2 points, got {len(points)}"
            )
        for index, point in enumerate(points):
            try:
                validate_coordinate(point)
            except ValueError as exc:
                raise InvalidRouteError(f"Invalid route point {index}: {exc}") from exc

        self._route: Route = points
        self._projector: Projector = projector or SegmentProjector()
        self._cumulative = cumulative_distances_m(points)
        self._total_length_m = float(self._cumulative[-1])
        self._lock = threading.Lock()
        self._last_segment_index = 0
        self._last_result: Optional[ProgressResult] = None

    @property
    def route(self) -> Route:
        return self._route

    @property
    def total_length_m(self) -> float:
        return self._total_length_m

    @property
    def last_segment_index(self) -> int:
        with self._lock:
            return self._last_segment_index

    @property
    def last_result(self) -> Optional[ProgressResult]:
        """Most recent accepted result; rejected updates leave it unchanged."""
        with self._lock:
            return self._last_result

    def reset(self) -> None:
        """Forget progress so the route can be replayed from its origin."""
        with self._lock:
            self._last_segment_index = 0
            self._last_result = None

    def update(self, position: Coordinate) -> ProgressResult:
        """Snap ``position`` onto the route and split it at the snapped point.

        Raises:
            InvalidPositionError: If the position is NaN or out of range. The
                tracker state is not modified in that case.
        """

        try:
            validate_coordinate(position)
        except ValueError as exc:
            raise InvalidPositionError(str(exc)) from exc

        with self._lock:
            best_index, best = self._nearest_segment(position)
            effective_index = max(best_index, self._last_segment_index)
            projection = best
            if effective_index != best_index:
                LOGGER.debug(
                    "Clamped backward snap from segment %s to %s (%.1f m off route)",
                    best_index,
                    effective_index,
                    best.distance_m,
                )
                projection = self._project(position, effective_index)

            result = self._build_result(effective_index, projection, best.distance_m)
            self._last_segment_index = effective_index
            self._last_result = result
            return result

    def _project(self, position: Coordinate, index: int) -> SegmentProjection:
        return self._projector.project(
            position, self._route[index], self._route[index + 1]
        )

    def _nearest_segment(self, position: Coordinate) -> tuple[int, SegmentProjection]:
        best_index = 0
        best = self._project(position, 0)
        for index in range(1, len(self._route) - 1):
            candidate = self._project(position, index)
            # "<=" lets the later segment win exact ties on shared vertices.
            if candidate.distance_m <= best.distance_m:
                best_index = index
                best = candidate
        return best_index, best

    def _build_result(
        self,
        index: int,
        projection: SegmentProjection,
        distance_from_route_m: float,
    ) -> ProgressResult:
        point = projection.closest
        traveled = self._route[: index + 1] + (point,)
        remaining = (point,) + self._route[index + 1 :]

        traveled_m = float(self._cumulative[index]) + distance_m(
            self._route[index], point
        )
        traveled_m = min(traveled_m, self._total_length_m)
        return ProgressResult(
            segment_index=index,
            interpolated_point=point,
            traveled=traveled,
            remaining=remaining,
            distance_from_route_m=distance_from_route_m,
            t=projection.t,
            distance_traveled_m=traveled_m,
            distance_remaining_m=max(self._total_length_m - traveled_m, 0.0),
        )
