"""
RouteScout CLI entrypoint.

Quick local route planning without the API server. All planning logic is delegated
to `routescout.planner.service.RouteService`.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from routescout.config.settings import get_settings
from routescout.core.env import resolve_project_path
from routescout.core.logging import configure_logging
from routescout.domain.models import Point, TransportMode
from routescout.enrichment.categories import PoiCategory
from routescout.export.exporter import export_gpx, export_json, route_to_dict
from routescout.planner.history import HistoryEntry, HistoryManager
from routescout.planner.service import RouteService


def _history() -> HistoryManager:
    settings = get_settings()
    return HistoryManager(resolve_project_path(settings.history.path), max_entries=settings.history.max_entries)


def _resolve_place(service: RouteService, text: str) -> Point:
    """Accept `LAT,LON` literally; geocode anything else."""
    lat_s, sep, lon_s = text.partition(",")
    if sep:
        try:
            return Point(lat=float(lat_s), lon=float(lon_s), name=text)
        except ValueError:
            pass
    point = service.geocode(text)
    if point is None:
        raise ValueError(f"Could not find a location for '{text}'")
    return point


def _cmd_geocode(args: argparse.Namespace) -> int:
    with RouteService(get_settings()) as service:
        results = service.search_locations(args.query, limit=args.limit)
    if not results:
        print("No results.")
        return 1
    for p in results:
        print(f"{p.lat:.6f},{p.lon:.6f}  {p.name or ''}")
    return 0


def _cmd_route(args: argparse.Namespace) -> int:
    """Handle the `route` subcommand."""
    mode = TransportMode(args.mode)
    with RouteService(get_settings()) as service:
        try:
            origin = _resolve_place(service, args.origin)
            destination = _resolve_place(service, args.destination)
            via = [_resolve_place(service, v) for v in args.via]
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2

        if via:
            route = service.get_route_with_waypoints(origin, [*via, destination], mode)
        else:
            route = service.get_route(origin, destination, mode)
        if route is None:
            print("No route found.", file=sys.stderr)
            return 1
        _history().add(HistoryEntry(origin=origin, destination=destination, waypoints=via, mode=mode))

        pois_future = service.submit_pois(route, args.pois) if args.pois else None
        profile_future = service.submit_elevation_profile(route) if args.elevation else None
        if pois_future is not None:
            route = route.with_pois(pois_future.result())
        profile = profile_future.result() if profile_future is not None else None

    if args.gpx:
        print(f"Wrote: {export_gpx(route, args.gpx)}")
    if args.export_json:
        print(f"Wrote: {export_json(route, args.export_json, profile)}")

    if args.json:
        print(json.dumps(route_to_dict(route, profile), ensure_ascii=False, indent=2))
        return 0

    hours, rem = divmod(route.duration_sec, 3600)
    print(f"{origin} -> {destination} ({mode.value})")
    print(f"Distance: {route.distance_km:.2f} km  Duration: {hours}h{rem // 60:02d}m  Points: {len(route.points)}")
    if args.pois:
        print(f"POIs ({args.pois}): {len(route.pois)}")
        for poi in route.pois:
            print(f"  - {poi.name or '(unnamed)'} [{poi.category}] {poi.lat:.5f},{poi.lon:.5f}")
    if args.elevation:
        if profile is None:
            print("Elevation profile unavailable.")
        else:
            print(
                f"Elevation: min={profile.min_elevation:.0f} m max={profile.max_elevation:.0f} m "
                f"ascent={profile.total_ascent:.0f} m descent={profile.total_descent:.0f} m"
            )
    return 0


def _cmd_categories(_: argparse.Namespace) -> int:
    for label in PoiCategory.labels():
        print(label)
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    history = _history()
    if args.clear:
        history.clear()
        print("History cleared.")
        return 0
    for entry in history.entries():
        print(entry)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the RouteScout CLI."""
    parser = argparse.ArgumentParser(prog="routescout")
    sub = parser.add_subparsers(dest="command", required=True)

    geo = sub.add_parser("geocode", help="Search places by free text.")
    geo.add_argument("query")
    geo.add_argument("--limit", type=int, default=None)
    geo.set_defaults(func=_cmd_geocode)

    rt = sub.add_parser("route", help="Calculate a route and optionally enrich it.")
    rt.add_argument("--from", dest="origin", required=True, help="Place name or LAT,LON")
    rt.add_argument("--to", dest="destination", required=True, help="Place name or LAT,LON")
    rt.add_argument("--via", action="append", default=[], help="Repeatable intermediate stop.")
    rt.add_argument("--mode", choices=[m.value for m in TransportMode], default=TransportMode.CAR.value)
    rt.add_argument("--pois", type=str, default=None, help="POI category label (see `categories`).")
    rt.add_argument("--elevation", action="store_true", help="Build an elevation profile.")
    rt.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rt.add_argument("--gpx", type=str, default=None, help="Write a GPX file.")
    rt.add_argument("--export-json", type=str, default=None, help="Write a JSON export file.")
    rt.set_defaults(func=_cmd_route)

    cat = sub.add_parser("categories", help="List POI category labels.")
    cat.set_defaults(func=_cmd_categories)

    hist = sub.add_parser("history", help="Show recent route requests.")
    hist.add_argument("--clear", action="store_true")
    hist.set_defaults(func=_cmd_history)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m routescout.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
