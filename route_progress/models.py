"""Dataclasses describing route progress inputs and results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 position in decimal degrees."""

    latitude: float
    longitude: float

    def as_latlon(self) -> LatLon:
        return (self.latitude, self.longitude)


Route = Tuple[Coordinate, ...]


@dataclass(frozen=True, slots=True)
class SegmentProjection:
    """Closest point on a single route segment to a query position."""

    closest: Coordinate
    distance_m: float
    t: float


@dataclass(frozen=True, slots=True)
class ProgressResult:
    """Outcome of one tracker update.

    ``traveled`` ends with ``interpolated_point`` and ``remaining`` starts with
    it; together they cover the whole route with that single shared vertex.
    """

    segment_index: int
    interpolated_point: Coordinate
    traveled: Tuple[Coordinate, ...]
    remaining: Tuple[Coordinate, ...]
    distance_from_route_m: float
    t: float = 0.0
    distance_traveled_m: float = 0.0
    distance_remaining_m: float = 0.0

    @property
    def progress_ratio(self) -> float:
        total = self.distance_traveled_m + self.distance_remaining_m
        if total <= 0.0:
            return 0.0
        return self.distance_traveled_m / total


@dataclass(frozen=True, slots=True)
class DeviationEvent:
    """Emitted when the vehicle is further from the route than allowed."""

    distance_from_route_m: float
    timestamp: datetime
    segment_index: Optional[int] = None
    off_route_since: Optional[datetime] = None

    @property
    def off_route_seconds(self) -> float:
        if self.off_route_since is None:
            return 0.0
        return max((self.timestamp - self.off_route_since).total_seconds(), 0.0)


__all__ = [
    "Coordinate",
    "DeviationEvent",
    "LatLon",
    "ProgressResult",
    "Route",
    "SegmentProjection",
]
