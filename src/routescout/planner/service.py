"""
Route planning facade.

`RouteService` is what the API and CLI talk to. It wires the collaborator clients
into the enrichment pipeline and is the error boundary for it: the expected
failures (service down, malformed payload, unknown category, empty route, deadline
or cancellation) come back as `None` or `[]`, never as exceptions.

Enrichment can be run on a small worker pool (`submit_pois`,
`submit_elevation_profile`) so a slow external service never blocks the caller.
Each job is still one sequential, rate-limited flow.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Sequence

import httpx

from routescout.config.settings import Settings, get_settings
from routescout.core.rate_limit import CancellationToken
from routescout.domain.errors import EnrichmentCancelled, PayloadError
from routescout.domain.models import POI, ElevationProfile, Point, Route, TransportMode
from routescout.enrichment.categories import PoiCategory
from routescout.enrichment.checkpoints import select_checkpoints
from routescout.enrichment.elevation import build_profile
from routescout.enrichment.pois import find_pois
from routescout.ingestion.elevation_client import ElevationClient
from routescout.ingestion.geocoding_client import GeocodingClient, parse_geocoding_payload
from routescout.ingestion.overpass_client import OverpassClient
from routescout.ingestion.routing_client import RoutingClient, parse_route_payload

logger = logging.getLogger(__name__)

_COLLABORATOR_ERRORS = (httpx.HTTPError, PayloadError)


class RouteService:
    """Routes, geocoding and route enrichment behind one object."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        routing: Any | None = None,
        overpass: Any | None = None,
        geocoding: Any | None = None,
        elevation: Any | None = None,
        max_workers: int = 2,
    ):
        self._settings = settings or get_settings()
        self._routing = routing or RoutingClient(self._settings)
        self._overpass = overpass or OverpassClient(self._settings)
        self._geocoding = geocoding or GeocodingClient(self._settings)
        self._elevation = elevation or ElevationClient(self._settings)
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    # -- routing -----------------------------------------------------------

    def get_route(self, origin: Point, destination: Point, mode: TransportMode) -> Route | None:
        try:
            raw = self._routing.get_route_text(origin, destination, mode)
            route = parse_route_payload(raw, mode)
        except _COLLABORATOR_ERRORS as exc:
            logger.warning("Route request failed: %s: %s", type(exc).__name__, exc)
            return None
        if route is None:
            logger.info("Routing service returned no route from %s to %s", origin, destination)
        return route

    def get_route_with_waypoints(
        self, origin: Point, waypoints: Sequence[Point], mode: TransportMode
    ) -> Route | None:
        """Route from `origin` through `waypoints`; the last waypoint is the destination."""
        if not waypoints:
            return None
        try:
            raw = self._routing.get_route_text_with_waypoints(origin, list(waypoints), mode)
            route = parse_route_payload(raw, mode)
        except _COLLABORATOR_ERRORS as exc:
            logger.warning("Route request with waypoints failed: %s: %s", type(exc).__name__, exc)
            return None
        return route

    # -- geocoding ---------------------------------------------------------

    def search_locations(self, query: str, limit: int | None = None) -> list[Point]:
        if not query or not query.strip():
            return []
        limit = limit or self._settings.services.geocoding.search_limit
        try:
            raw = self._geocoding.search_text(query.strip(), limit)
            return parse_geocoding_payload(raw)[:limit]
        except _COLLABORATOR_ERRORS as exc:
            logger.warning("Geocoding '%s' failed: %s: %s", query, type(exc).__name__, exc)
            return []

    def geocode(self, query: str) -> Point | None:
        """Best match for `query`, or None."""
        results = self.search_locations(query, limit=1)
        return results[0] if results else None

    # -- enrichment --------------------------------------------------------

    def enrich_with_pois(
        self,
        route: Route | None,
        category_label: str,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[POI]:
        """POIs of one category along `route`; `[]` for empty routes and unknown labels.

        The route is not modified; attach the result with `route.with_pois(...)`.
        """
        if route is None or not route.points:
            return []
        category = PoiCategory.from_label(category_label)
        if category is PoiCategory.UNRECOGNIZED:
            logger.info("Unrecognized POI category '%s'; skipping search", category_label)
            return []

        cfg = self._settings.enrichment.pois
        checkpoints = select_checkpoints(route.points, cfg.checkpoint_segments)
        pois = find_pois(
            checkpoints,
            category.filter_expression,
            radius_m=cfg.radius_m,
            per_checkpoint_limit=cfg.per_checkpoint_limit,
            inter_query_delay_seconds=cfg.inter_query_delay_seconds,
            deadline_seconds=cfg.deadline_seconds,
            query_fn=self._overpass.query_around,
            cancel=cancel,
            epsilon_deg=cfg.dedup_epsilon_deg,
            max_results=cfg.max_results,
        )
        logger.info("Found %s '%s' POIs along route", len(pois), category.label)
        return pois

    def build_elevation_profile(
        self, route: Route | None, *, cancel: CancellationToken | None = None
    ) -> ElevationProfile | None:
        """Elevation profile for `route`; None when the route is empty or the profile could not be completed."""
        if route is None or not route.points:
            return None
        try:
            return build_profile(
                route.points,
                max_samples=self._settings.enrichment.elevation.max_samples,
                elevation_fn=self._elevation.lookup,
                cancel=cancel,
            )
        except EnrichmentCancelled:
            logger.info("Elevation profile cancelled")
            return None
        except _COLLABORATOR_ERRORS as exc:
            logger.warning("Elevation profile failed: %s: %s", type(exc).__name__, exc)
            return None

    # -- background execution ---------------------------------------------

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="routescout-enrich"
            )
        return self._executor

    def submit_pois(
        self, route: Route | None, category_label: str, *, cancel: CancellationToken | None = None
    ) -> Future[list[POI]]:
        return self._pool().submit(self.enrich_with_pois, route, category_label, cancel=cancel)

    def submit_elevation_profile(
        self, route: Route | None, *, cancel: CancellationToken | None = None
    ) -> Future[ElevationProfile | None]:
        return self._pool().submit(self.build_elevation_profile, route, cancel=cancel)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> "RouteService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
