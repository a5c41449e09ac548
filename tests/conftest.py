"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable routes shared by the
tracker, monitor and session tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_progress.models import Coordinate


# --- Factory helpers -------------------------------------------------
def make_route(*pairs):
    return [Coordinate(latitude=lat, longitude=lon) for lat, lon in pairs]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def straight_route():
    """Five points due east along the equator, ~111 m apart."""
    return make_route(*[(0.0, 0.001 * i) for i in range(5)])


@pytest.fixture
def short_route():
    """Single ~111 m segment along the equator."""
    return make_route((0.0, 0.0), (0.0, 0.001))


@pytest.fixture
def l_shaped_route():
    """East for ~222 m, then north for ~222 m."""
    return make_route(
        (0.0, 0.0),
        (0.0, 0.001),
        (0.0, 0.002),
        (0.001, 0.002),
        (0.002, 0.002),
    )


@pytest.fixture
def t0():
    return datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
