"""
Route export.

Two formats:
- JSON: totals, polyline, POIs and (optionally) the elevation profile
- GPX 1.1: one track/segment with the polyline, POIs as waypoints

Exports only read the models; they never modify a route.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import gpxpy
import gpxpy.gpx

from routescout.domain.models import ElevationProfile, Route


def route_to_dict(route: Route, profile: ElevationProfile | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "distance_km": route.distance_km,
        "duration_sec": route.duration_sec,
        "mode": route.mode.value,
        "route_points": [{"lat": p.lat, "lon": p.lon} for p in route.points],
        "pois": [
            {"name": poi.name, "category": poi.category, "lat": poi.lat, "lon": poi.lon}
            for poi in route.pois
        ],
    }
    if profile is not None:
        payload["elevation_profile"] = profile.model_dump(mode="json")
    return payload


def export_json(route: Route, path: str | Path, profile: ElevationProfile | None = None) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(route_to_dict(route, profile), ensure_ascii=False, indent=2), encoding="utf-8")
    return out


def route_to_gpx(route: Route, *, name: str = "Route Export") -> str:
    """Render `route` as a GPX 1.1 document."""
    gpx = gpxpy.gpx.GPX()
    gpx.creator = "RouteScout"
    gpx.description = f"{route.mode.value} route, {route.distance_km:.2f} km"

    track = gpxpy.gpx.GPXTrack(name=name)
    gpx.tracks.append(track)
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    for p in route.points:
        segment.points.append(gpxpy.gpx.GPXTrackPoint(p.lat, p.lon))

    for poi in route.pois:
        waypoint = gpxpy.gpx.GPXWaypoint(poi.lat, poi.lon, name=poi.name)
        waypoint.type = poi.category
        gpx.waypoints.append(waypoint)

    return gpx.to_xml(version="1.1")


def export_gpx(route: Route, path: str | Path, *, name: str = "Route Export") -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(route_to_gpx(route, name=name), encoding="utf-8")
    return out
