"""
Routing ingestion client (OSRM).

This module is responsible only for:
- requesting a route between an origin and one or more ordered destinations,
- parsing the response into a `Route` (distance, duration, polyline).

The routing service's reported distance is authoritative; it is never recomputed
from the polyline.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from routescout.config.settings import Settings
from routescout.core.http import get_text
from routescout.domain.errors import PayloadError
from routescout.domain.models import Point, Route, TransportMode

logger = logging.getLogger(__name__)

OSRM_PROFILES: dict[TransportMode, str] = {
    TransportMode.CAR: "driving",
    TransportMode.BIKE: "bike",
    TransportMode.FOOT: "walking",
}


def _coordinates_param(points: Sequence[Point]) -> str:
    # OSRM expects lon,lat pairs separated by semicolons.
    return ";".join(f"{p.lon:.6f},{p.lat:.6f}" for p in points)


def parse_route_payload(raw: str, mode: TransportMode) -> Route | None:
    """Parse the first route of an OSRM response; None when the response has no route.

    Raises:
        PayloadError: If `raw` is not JSON or the route fields have the wrong types.
    """
    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise PayloadError("expected a JSON object at the root")

    routes = payload.get("routes")
    if not isinstance(routes, list) or not routes:
        return None
    first = routes[0]
    geometry = first.get("geometry") if isinstance(first, dict) else None
    coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(coordinates, list):
        return None

    try:
        points = [Point(lat=float(c[1]), lon=float(c[0])) for c in coordinates]
        return Route(
            points=points,
            distance_km=float(first.get("distance", 0.0)) / 1000.0,
            duration_sec=int(float(first.get("duration", 0))),
            mode=mode,
        )
    except (TypeError, ValueError, IndexError) as exc:
        raise PayloadError(f"malformed route: {exc}") from exc


class RoutingClient:
    """Fetches raw route JSON from an OSRM-compatible service."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _fetch(self, points: Sequence[Point], mode: TransportMode) -> str:
        base_url = self._settings.services.routing.base_url.rstrip("/")
        url = f"{base_url}/{OSRM_PROFILES[mode]}/{_coordinates_param(points)}"
        logger.info("Requesting %s route through %s points", mode.value, len(points))
        return get_text(
            url,
            params={"overview": "full", "geometries": "geojson"},
            user_agent=self._settings.app.user_agent,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )

    def get_route_text(self, origin: Point, destination: Point, mode: TransportMode) -> str:
        return self._fetch([origin, destination], mode)

    def get_route_text_with_waypoints(
        self, origin: Point, waypoints: Sequence[Point], mode: TransportMode
    ) -> str:
        """`waypoints` are visited in order; the last one is the destination."""
        return self._fetch([origin, *waypoints], mode)
