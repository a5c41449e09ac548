"""Route progress matching engine for live-trip map views."""

from .deviation import DeviationMonitor
from .errors import InvalidPositionError, InvalidRouteError, RouteProgressError
from .geo import closest_point_on_segment, distance_m
from .models import Coordinate, DeviationEvent, ProgressResult, SegmentProjection
from .projector import SegmentProjector
from .session import ProgressUpdate, TripProgressSession
from .tracker import RouteProgressTracker

__all__ = [
    "Coordinate",
    "DeviationEvent",
    "DeviationMonitor",
    "InvalidPositionError",
    "InvalidRouteError",
    "ProgressResult",
    "ProgressUpdate",
    "RouteProgressError",
    "RouteProgressTracker",
    "SegmentProjection",
    "SegmentProjector",
    "TripProgressSession",
    "closest_point_on_segment",
    "distance_m",
]
