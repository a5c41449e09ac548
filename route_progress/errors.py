"""Central error types used across the engine."""

from __future__ import annotations


class RouteProgressError(ValueError):
    """Base error for rejected route progress inputs."""


class InvalidRouteError(RouteProgressError):
    """Raised when a route has fewer than two points or an invalid vertex."""


class InvalidPositionError(RouteProgressError):
    """Raised when a position is NaN or outside the valid lat/lon range."""


__all__ = [
    "RouteProgressError",
    "InvalidRouteError",
    "InvalidPositionError",
]
