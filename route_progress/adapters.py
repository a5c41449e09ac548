"""Conversions between engine coordinates and provider/renderer shapes."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import polyline

from .config import POLYLINE_PRECISION
from .models import Coordinate, LatLon

_LATITUDE_KEYS = ("latitude", "lat")
_LONGITUDE_KEYS = ("longitude", "lng", "lon")


def _lookup(mapping: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    raise KeyError(f"None of {keys} present in {sorted(mapping)}")


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} is not a number: {value!r}") from exc


def coordinate_from_mapping(mapping: Mapping[str, Any]) -> Coordinate:
    """Build a coordinate from ``latitude/longitude`` or ``lat/lng`` keys.

    Raises:
        KeyError: If no latitude or longitude key is present.
        ValueError: If a value is not numeric.
    """

    if not isinstance(mapping, Mapping):
        raise ValueError(f"Expected a coordinate mapping, got {mapping!r}")
    return Coordinate(
        latitude=_as_float(_lookup(mapping, _LATITUDE_KEYS), "latitude"),
        longitude=_as_float(_lookup(mapping, _LONGITUDE_KEYS), "longitude"),
    )


def coordinate_from_latlon(pair: Sequence[float]) -> Coordinate:
    try:
        lat, lon = pair
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected a (lat, lon) pair, got {pair!r}") from exc
    return Coordinate(
        latitude=_as_float(lat, "latitude"), longitude=_as_float(lon, "longitude")
    )


def coordinates_from_latlon(pairs: Iterable[Sequence[float]]) -> List[Coordinate]:
    return [coordinate_from_latlon(pair) for pair in pairs]


def route_from_encoded_polyline(
    encoded: str, precision: int = POLYLINE_PRECISION
) -> List[Coordinate]:
    """Decode a directions provider's encoded polyline into coordinates."""

    if not encoded:
        return []
    try:
        decoded = polyline.decode(encoded, precision)
    except (ValueError, TypeError, IndexError) as exc:
        raise ValueError("Unable to decode polyline") from exc
    return coordinates_from_latlon(decoded)


def encode_route(
    coords: Sequence[Coordinate], precision: int = POLYLINE_PRECISION
) -> str:
    return polyline.encode(to_latlon(coords), precision)


def route_from_geojson(geometry: Mapping[str, Any]) -> List[Coordinate]:
    """Convert a GeoJSON LineString (``[lon, lat]`` pairs) into coordinates."""

    if geometry.get("type") != "LineString":
        raise ValueError(f"Expected a LineString geometry, got {geometry.get('type')!r}")
    return [
        Coordinate(latitude=float(lat), longitude=float(lon))
        for lon, lat, *_ in geometry.get("coordinates", [])
    ]


def to_latlon(coords: Iterable[Coordinate]) -> List[LatLon]:
    return [coord.as_latlon() for coord in coords]


def to_mappings(coords: Iterable[Coordinate]) -> List[Dict[str, float]]:
    """Return renderer-friendly ``{"latitude", "longitude"}`` dictionaries."""

    return [
        {"latitude": float(coord.latitude), "longitude": float(coord.longitude)}
        for coord in coords
    ]


def to_geojson_linestring(coords: Iterable[Coordinate]) -> Dict[str, Any]:
    return {
        "type": "LineString",
        "coordinates": [[coord.longitude, coord.latitude] for coord in coords],
    }


__all__ = [
    "coordinate_from_latlon",
    "coordinate_from_mapping",
    "coordinates_from_latlon",
    "encode_route",
    "route_from_encoded_polyline",
    "route_from_geojson",
    "to_geojson_linestring",
    "to_latlon",
    "to_mappings",
]
