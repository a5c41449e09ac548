"""Replay a recorded trip and render its progress on an interactive map."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

import folium
from dotenv import load_dotenv

from ..adapters import (
    coordinate_from_mapping,
    coordinates_from_latlon,
    route_from_encoded_polyline,
    to_latlon,
)
from ..config import (
    DEBOUNCE_ENV_VAR,
    DEVIATION_COLOR,
    DEVIATION_DEBOUNCE_SECONDS,
    DEVIATION_THRESHOLD_M,
    REMAINING_COLOR,
    THRESHOLD_ENV_VAR,
    TRAVELED_COLOR,
    env_float,
)
from ..errors import InvalidPositionError, RouteProgressError
from ..models import Coordinate, DeviationEvent, ProgressResult
from ..session import TripProgressSession

PathLike = Union[str, Path]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PositionSample:
    position: Coordinate
    timestamp: datetime


@dataclass(slots=True)
class DeviationMarker:
    """A deviation event together with where the vehicle actually was."""

    event: DeviationEvent
    position: Coordinate
    snapped: Coordinate


@dataclass(slots=True)
class ReplaySummary:
    """Final state of a replayed trip."""

    route: List[Coordinate]
    result: Optional[ProgressResult]
    markers: List[DeviationMarker] = field(default_factory=list)
    rejected: int = 0

    @property
    def events(self) -> List[DeviationEvent]:
        return [marker.event for marker in self.markers]


def _parse_timestamp(value: Any, fallback: datetime) -> datetime:
    if value is None or value == "":
        return fallback
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be an ISO 8601 string, got {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_route(payload: Mapping[str, Any]) -> List[Coordinate]:
    """Read the route from an encoded ``polyline`` or a ``route`` point list."""

    encoded = payload.get("polyline")
    if encoded:
        if not isinstance(encoded, str):
            raise ValueError("'polyline' must be an encoded string")
        return route_from_encoded_polyline(encoded)
    raw = payload.get("route")
    if not raw or not isinstance(raw, list):
        raise ValueError("Trip file needs a 'polyline' or a 'route' entry")
    if isinstance(raw[0], Mapping):
        return [coordinate_from_mapping(item) for item in raw]
    return coordinates_from_latlon(raw)


def load_samples(payload: Mapping[str, Any]) -> List[PositionSample]:
    """Read position samples; missing timestamps are spaced one second apart."""

    positions = payload.get("positions", [])
    if not isinstance(positions, list):
        raise ValueError("'positions' must be a list")
    base = datetime.now(timezone.utc)
    samples: List[PositionSample] = []
    for index, item in enumerate(positions):
        if not isinstance(item, Mapping):
            raise ValueError(f"Position {index} is not an object: {item!r}")
        fallback = base + timedelta(seconds=index)
        samples.append(
            PositionSample(
                position=coordinate_from_mapping(item),
                timestamp=_parse_timestamp(item.get("timestamp"), fallback),
            )
        )
    return samples


def load_trip(path: Path) -> tuple[List[Coordinate], List[PositionSample]]:
    """Read a trip JSON file into a route and its position samples."""

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError("Trip file must contain a JSON object")
    return load_route(payload), load_samples(payload)


def replay_trip(
    route: Sequence[Coordinate],
    samples: Sequence[PositionSample],
    *,
    threshold_m: float = DEVIATION_THRESHOLD_M,
    debounce_s: float = DEVIATION_DEBOUNCE_SECONDS,
) -> ReplaySummary:
    """Feed ``samples`` through a fresh session and collect the outcome.

    Invalid positions are skipped, matching how the live map keeps the last
    drawing for a rejected tick.
    """

    session = TripProgressSession(route, threshold_m=threshold_m, debounce=debounce_s)
    summary = ReplaySummary(route=list(route), result=None)
    for sample in samples:
        try:
            update = session.process(sample.position, sample.timestamp)
        except InvalidPositionError as exc:
            LOGGER.warning("Skipping sample at %s: %s", sample.timestamp, exc)
            summary.rejected += 1
            continue
        if update.deviation is not None:
            summary.markers.append(
                DeviationMarker(
                    event=update.deviation,
                    position=sample.position,
                    snapped=update.result.interpolated_point,
                )
            )
    summary.result = session.last_result
    return summary


def create_progress_map(
    route: Sequence[Coordinate],
    result: Optional[ProgressResult],
    markers: Sequence[DeviationMarker] = (),
    *,
    vehicle: Optional[Coordinate] = None,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create an interactive map with traveled and remaining route sections.

    Args:
        route: Full planned route.
        result: Latest progress result; without one the whole route is drawn
            as remaining.
        markers: Deviation events to mark at the vehicle's off-route position.
        vehicle: Optional raw vehicle position to mark.
        output_html_path: Optional path to persist the map as HTML.

    Returns:
        A :class:`folium.Map` instance containing the overlay.
    """

    if len(route) < 2:
        raise ValueError("Route needs at least 2 points to draw")

    if result is not None:
        traveled = to_latlon(result.traveled)
        remaining = to_latlon(result.remaining)
        center = result.interpolated_point.as_latlon()
    else:
        traveled = []
        remaining = to_latlon(route)
        center = route[0].as_latlon()

    folium_map = folium.Map(location=center, zoom_start=15, control_scale=True)
    if len(traveled) >= 2:
        folium.PolyLine(
            traveled,
            color=TRAVELED_COLOR,
            weight=5,
            opacity=0.9,
            tooltip="Traveled",
        ).add_to(folium_map)
    if len(remaining) >= 2:
        folium.PolyLine(
            remaining,
            color=REMAINING_COLOR,
            weight=5,
            opacity=0.9,
            tooltip="Remaining",
        ).add_to(folium_map)

    if result is not None:
        popup = folium.Popup(
            html=(
                f"<strong>Segment:</strong> {result.segment_index}<br>"
                f"<strong>Off route:</strong> {result.distance_from_route_m:.1f} m<br>"
                f"<strong>Progress:</strong> {result.progress_ratio:.0%}"
            ),
            max_width=300,
        )
        folium.CircleMarker(
            location=center,
            radius=6,
            color=REMAINING_COLOR,
            fill=True,
            fill_color=REMAINING_COLOR,
            tooltip="Snapped position",
            popup=popup,
        ).add_to(folium_map)

    if vehicle is not None:
        folium.Marker(location=vehicle.as_latlon(), tooltip="Vehicle").add_to(
            folium_map
        )

    for marker in markers:
        event = marker.event
        folium.PolyLine(
            [marker.snapped.as_latlon(), marker.position.as_latlon()],
            color=DEVIATION_COLOR,
            weight=2,
            dash_array="4",
            tooltip="Offset from route",
        ).add_to(folium_map)
        folium.CircleMarker(
            location=marker.position.as_latlon(),
            radius=7,
            color=DEVIATION_COLOR,
            fill=True,
            fill_color=DEVIATION_COLOR,
            tooltip=(
                f"Deviation {event.distance_from_route_m:.0f} m at "
                f"{event.timestamp.isoformat()}"
            ),
        ).add_to(folium_map)

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


def _build_parser() -> argparse.ArgumentParser:
    """Return the CLI argument parser for the progress map tool.

    Defaults honour ``ROUTE_DEVIATION_THRESHOLD_M`` and
    ``ROUTE_DEVIATION_DEBOUNCE_SECONDS`` when set.
    """

    threshold_default = env_float(THRESHOLD_ENV_VAR, DEVIATION_THRESHOLD_M)
    debounce_default = env_float(DEBOUNCE_ENV_VAR, DEVIATION_DEBOUNCE_SECONDS)
    parser = argparse.ArgumentParser(
        description=(
            "Replay a recorded trip through the route progress engine and"
            " write an HTML map of the final traveled/remaining split."
        )
    )
    parser.add_argument("trip_file", type=Path, help="JSON file with route and positions")
    parser.add_argument(
        "--threshold-m",
        type=float,
        default=threshold_default,
        help=f"Off-route distance (metres) that raises an event (default: {threshold_default:g})",
    )
    parser.add_argument(
        "--debounce-s",
        type=float,
        default=debounce_default,
        help=f"Minimum seconds between deviation events (default: {debounce_default:g})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional output HTML path; defaults to maps/<trip>.html",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m route_progress.tools.progress_map``."""

    # Load .env from the current directory or any parent folder.
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    try:
        route, samples = load_trip(args.trip_file)
    except (OSError, ValueError, KeyError) as exc:
        logging.error("Failed to load trip file '%s': %s", args.trip_file, exc)
        return 1

    try:
        summary = replay_trip(
            route,
            samples,
            threshold_m=args.threshold_m,
            debounce_s=args.debounce_s,
        )
    except RouteProgressError as exc:
        logging.error("Cannot replay trip: %s", exc)
        return 1

    output_path = args.output or Path("maps") / f"{args.trip_file.stem}.html"
    vehicle = samples[-1].position if samples else None
    create_progress_map(
        summary.route,
        summary.result,
        summary.markers,
        vehicle=vehicle,
        output_html_path=output_path,
    )

    logging.info(
        "Replayed %s samples (%s rejected), %s deviation events",
        len(samples),
        summary.rejected,
        len(summary.markers),
    )
    if summary.result is not None:
        logging.info(
            "Final segment %s, %.0f m traveled, %.0f m remaining",
            summary.result.segment_index,
            summary.result.distance_traveled_m,
            summary.result.distance_remaining_m,
        )
    logging.info("Progress map written to %s", output_path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
