"""Tests for the Haversine and segment projection helpers."""

from __future__ import annotations

import math

import numpy as np
import pytest

from route_progress.geo import (
    closest_point_on_segment,
    cumulative_distances_m,
    distance_m,
    polyline_length_m,
    validate_coordinate,
)
from route_progress.models import Coordinate

# One degree of arc on a 6 371 km sphere.
DEGREE_M = 6_371_000.0 * math.pi / 180.0


def test_distance_one_degree_of_latitude() -> None:
    a = Coordinate(0.0, 0.0)
    b = Coordinate(1.0, 0.0)
    assert distance_m(a, b) == pytest.approx(DEGREE_M, rel=1e-9)


def test_distance_is_symmetric_and_zero_for_same_point() -> None:
    a = Coordinate(51.48, -3.18)
    b = Coordinate(51.49, -3.17)
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))
    assert distance_m(a, a) == 0.0


def test_distance_propagates_nan() -> None:
    assert math.isnan(distance_m(Coordinate(float("nan"), 0.0), Coordinate(0.0, 0.0)))


def test_projection_midpoint_of_segment() -> None:
    projection = closest_point_on_segment(
        Coordinate(0.0, 0.5), Coordinate(0.0, 0.0), Coordinate(0.0, 1.0)
    )
    assert projection.t == pytest.approx(0.5)
    assert projection.closest == Coordinate(0.0, 0.5)
    assert projection.distance_m == pytest.approx(0.0, abs=1e-6)


def test_projection_perpendicular_offset() -> None:
    projection = closest_point_on_segment(
        Coordinate(0.0005, 0.0005), Coordinate(0.0, 0.0), Coordinate(0.0, 0.001)
    )
    assert projection.t == pytest.approx(0.5)
    assert projection.closest.latitude == pytest.approx(0.0)
    assert projection.closest.longitude == pytest.approx(0.0005)
    assert projection.distance_m == pytest.approx(0.0005 * DEGREE_M, rel=1e-6)


def test_projection_clamps_past_segment_end() -> None:
    start = Coordinate(0.0, 0.0)
    end = Coordinate(0.0, 0.001)
    projection = closest_point_on_segment(Coordinate(0.0, 0.002), start, end)
    assert projection.t == 1.0
    assert projection.closest is end
    assert projection.distance_m == pytest.approx(0.001 * DEGREE_M, rel=1e-6)


def test_projection_clamps_before_segment_start() -> None:
    start = Coordinate(0.0, 0.0)
    end = Coordinate(0.0, 0.001)
    projection = closest_point_on_segment(Coordinate(0.0, -0.001), start, end)
    assert projection.t == 0.0
    assert projection.closest is start


def test_projection_degenerate_segment_does_not_divide_by_zero() -> None:
    vertex = Coordinate(1.0, 1.0)
    point = Coordinate(1.0, 2.0)
    projection = closest_point_on_segment(point, vertex, Coordinate(1.0, 1.0))
    assert projection.t == 0.0
    assert projection.closest is vertex
    assert projection.distance_m == pytest.approx(distance_m(point, vertex))


@pytest.mark.parametrize(
    "coord",
    [
        Coordinate(90.0, 180.0),
        Coordinate(-90.0, -180.0),
        Coordinate(0.0, 0.0),
    ],
)
def test_validate_accepts_boundaries(coord: Coordinate) -> None:
    assert validate_coordinate(coord) is coord


@pytest.mark.parametrize(
    "coord",
    [
        Coordinate(90.0001, 0.0),
        Coordinate(0.0, -180.5),
        Coordinate(float("nan"), 0.0),
        Coordinate(0.0, float("inf")),
    ],
)
def test_validate_rejects_invalid(coord: Coordinate) -> None:
    with pytest.raises(ValueError):
        validate_coordinate(coord)


def test_validate_rejects_non_numeric() -> None:
    with pytest.raises(ValueError):
        validate_coordinate(Coordinate("north", 0.0))  # type: ignore[arg-type]


def test_cumulative_distances_along_route(straight_route) -> None:
    cumulative = cumulative_distances_m(straight_route)
    step = 0.001 * DEGREE_M
    assert cumulative.shape == (5,)
    np.testing.assert_allclose(cumulative, [0.0, step, 2 * step, 3 * step, 4 * step], rtol=1e-6)
    assert polyline_length_m(straight_route) == pytest.approx(4 * step, rel=1e-6)


def test_cumulative_distances_empty() -> None:
    assert cumulative_distances_m([]).tolist() == [0.0]
