"""Central configuration for the route progress engine.

All values are constants imported by the rest of the package. The engine
reads no environment variables or files; callers tune the deviation threshold
and debounce by passing explicit values. Only the developer tools resolve
environment overrides (optionally via a local `.env`), see :func:`env_float`.
"""

from __future__ import annotations

import os


def env_float(key: str, default: float) -> float:
    """Return ``key`` from the environment as a float, or ``default``."""

    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------
# Mean Earth radius (metres) used by the Haversine distance.
EARTH_RADIUS_M = 6_371_000.0

# Precision of encoded polylines returned by the directions provider.
# Google-style overview polylines use 5 decimal places.
POLYLINE_PRECISION = 5


# ---------------------------------------------------------------------------
# Deviation detection
# ---------------------------------------------------------------------------
# Distance (metres) from the route beyond which the vehicle counts as off-route.
DEVIATION_THRESHOLD_M = 50.0

# Minimum time (seconds) between two emitted deviation events.
DEVIATION_DEBOUNCE_SECONDS = 10.0


# ---------------------------------------------------------------------------
# Progress map tool
# ---------------------------------------------------------------------------
# Environment overrides honoured by the replay CLI only.
THRESHOLD_ENV_VAR = "ROUTE_DEVIATION_THRESHOLD_M"
DEBOUNCE_ENV_VAR = "ROUTE_DEVIATION_DEBOUNCE_SECONDS"

TRAVELED_COLOR = "#9ca3af"
REMAINING_COLOR = "#7c3aed"
DEVIATION_COLOR = "#d73027"
