import json

import gpxpy

from routescout.domain.models import POI, ElevationProfile, Point, Route, TransportMode
from routescout.export.exporter import export_gpx, export_json, route_to_dict, route_to_gpx


def _route():
    return Route(
        points=[Point(lat=38.70, lon=-9.10), Point(lat=38.75, lon=-9.15), Point(lat=38.80, lon=-9.20)],
        distance_km=12.345,
        duration_sec=678,
        mode=TransportMode.BIKE,
        pois=[POI(name="Cafe X", category="amenity:cafe", lat=38.7001, lon=-9.1001)],
    )


def test_route_to_dict_shape():
    profile = ElevationProfile(elevations=[10, 20], distances=[0, 1.5])
    payload = route_to_dict(_route(), profile)

    assert payload["distance_km"] == 12.345
    assert payload["duration_sec"] == 678
    assert payload["mode"] == "bike"
    assert payload["route_points"][0] == {"lat": 38.70, "lon": -9.10}
    assert payload["pois"] == [{"name": "Cafe X", "category": "amenity:cafe", "lat": 38.7001, "lon": -9.1001}]
    assert payload["elevation_profile"]["total_ascent"] == 10
    assert "elevation_profile" not in route_to_dict(_route())


def test_export_json_writes_file(tmp_path):
    out = export_json(_route(), tmp_path / "nested" / "route.json")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["route_points"]) == 3


def test_gpx_contains_track_and_poi_waypoints(tmp_path):
    xml = route_to_gpx(_route())
    parsed = gpxpy.parse(xml)

    points = parsed.tracks[0].segments[0].points
    assert [(p.latitude, p.longitude) for p in points] == [(38.70, -9.10), (38.75, -9.15), (38.80, -9.20)]
    assert parsed.waypoints[0].name == "Cafe X"
    assert parsed.waypoints[0].type == "amenity:cafe"

    out = export_gpx(_route(), tmp_path / "route.gpx")
    assert "<trkpt" in out.read_text(encoding="utf-8")
