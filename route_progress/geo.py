"""Geodesic helpers: Haversine distance and segment projection.

Segments are treated as locally planar in latitude/longitude space. Ride
segments are tens to low hundreds of metres long, so the distortion of linear
interpolation is far below GPS noise. Distances are always reported on the
sphere via the Haversine formula.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .config import EARTH_RADIUS_M
from .models import Coordinate, SegmentProjection

MetricArray = NDArray[np.float64]


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance between two coordinates in metres.

    NaN components propagate to a NaN result; callers validate beforehand.
    """

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push h marginally above 1 for antipodal points.
    h = min(h, 1.0)
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def closest_point_on_segment(
    point: Coordinate,
    seg_start: Coordinate,
    seg_end: Coordinate,
) -> SegmentProjection:
    """Project ``point`` onto the segment ``seg_start`` -> ``seg_end``.

    Returns the closest point, its Haversine distance to ``point`` and the
    clamped interpolation parameter ``t`` in ``[0, 1]``. A zero-length segment
    yields ``seg_start`` with ``t == 0``.
    """

    d_lat = seg_end.latitude - seg_start.latitude
    d_lon = seg_end.longitude - seg_start.longitude
    length_sq = d_lat * d_lat + d_lon * d_lon

    if length_sq == 0.0:
        return SegmentProjection(
            closest=seg_start, distance_m=distance_m(point, seg_start), t=0.0
        )

    raw_t = (
        (point.latitude - seg_start.latitude) * d_lat
        + (point.longitude - seg_start.longitude) * d_lon
    ) / length_sq
    t = min(max(raw_t, 0.0), 1.0)

    # Snap the clamped ends to the stored vertices so an exact vertex query
    # reports a distance of exactly zero.
    if t == 0.0:
        closest = seg_start
    elif t == 1.0:
        closest = seg_end
    else:
        closest = Coordinate(
            latitude=seg_start.latitude + t * d_lat,
            longitude=seg_start.longitude + t * d_lon,
        )
    return SegmentProjection(closest=closest, distance_m=distance_m(point, closest), t=t)


def validate_coordinate(coord: Coordinate) -> Coordinate:
    """Return ``coord`` unchanged or raise ``ValueError`` when it is invalid."""

    try:
        lat = float(coord.latitude)
        lon = float(coord.longitude)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"Not a coordinate: {coord!r}") from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"Coordinate has non-finite components: {coord!r}")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude out of range [-90,90]: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"longitude out of range [-180,180]: {lon}")
    return coord


def cumulative_distances_m(points: Sequence[Coordinate]) -> MetricArray:
    """Return running Haversine distances along a polyline (first entry 0)."""

    if len(points) == 0:
        return np.zeros(1, dtype=float)
    lats = np.radians(np.asarray([p.latitude for p in points], dtype=float))
    lons = np.radians(np.asarray([p.longitude for p in points], dtype=float))
    d_phi = np.diff(lats)
    d_lambda = np.diff(lons)
    h = (
        np.sin(d_phi / 2) ** 2
        + np.cos(lats[:-1]) * np.cos(lats[1:]) * np.sin(d_lambda / 2) ** 2
    )
    h = np.clip(h, 0.0, 1.0)
    lengths = 2 * EARTH_RADIUS_M * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
    return np.concatenate(([0.0], np.cumsum(lengths)))


def polyline_length_m(points: Sequence[Coordinate]) -> float:
    """Return the total Haversine length of a polyline."""

    return float(cumulative_distances_m(points)[-1])


__all__ = [
    "closest_point_on_segment",
    "cumulative_distances_m",
    "distance_m",
    "polyline_length_m",
    "validate_coordinate",
]
