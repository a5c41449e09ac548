"""Single-segment projection seam used by the progress tracker."""

from __future__ import annotations

from typing import Protocol

from .geo import closest_point_on_segment
from .models import Coordinate, SegmentProjection


class Projector(Protocol):
    """Anything able to project a position onto one route segment."""

    def project(
        self,
        point: Coordinate,
        seg_start: Coordinate,
        seg_end: Coordinate,
    ) -> SegmentProjection: ...


class SegmentProjector:
    """Default projector backed by :func:`closest_point_on_segment`."""

    def project(
        self,
        point: Coordinate,
        seg_start: Coordinate,
        seg_end: Coordinate,
    ) -> SegmentProjection:
        return closest_point_on_segment(point, seg_start, seg_end)


__all__ = ["Projector", "SegmentProjector"]
