"""
API routes.

Endpoints:
- GET  `/api/health`, `/api/categories`
- GET  `/api/geocode`, `/api/search`: free-text place lookup
- POST `/api/routes`: calculate a route, optionally enriched with POIs and an elevation profile
- POST `/api/pois`, `/api/elevation`: enrich an existing route
- GET/DELETE `/api/history`: recent route requests
- POST `/api/export/{fmt}`: JSON or GPX download
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from routescout.config.settings import get_settings
from routescout.core.env import resolve_project_path
from routescout.domain.models import POI, ElevationProfile, Point, Route, TransportMode
from routescout.enrichment.categories import PoiCategory
from routescout.export.exporter import route_to_dict, route_to_gpx
from routescout.planner.history import HistoryEntry, HistoryManager
from routescout.planner.service import RouteService

router = APIRouter()


class RouteRequest(BaseModel):
    origin: Point
    destination: Point
    waypoints: list[Point] = Field(default_factory=list)
    mode: TransportMode = TransportMode.CAR
    category: str | None = None
    elevation: bool = False


class RouteResponse(BaseModel):
    route: Route
    elevation_profile: ElevationProfile | None = None


class PoiRequest(BaseModel):
    route: Route
    category: str


class PoiResponse(BaseModel):
    category: str
    pois: list[POI]


class ElevationRequest(BaseModel):
    route: Route


class ExportRequest(BaseModel):
    route: Route
    elevation_profile: ElevationProfile | None = None


@lru_cache
def _service() -> RouteService:
    return RouteService(get_settings())


@lru_cache
def _history() -> HistoryManager:
    settings = get_settings()
    return HistoryManager(resolve_project_path(settings.history.path), max_entries=settings.history.max_entries)


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/categories")
def get_categories() -> dict:
    """Category labels accepted by POI search."""
    return {"categories": PoiCategory.labels()}


@router.get("/api/geocode")
def get_geocode(q: str = Query(..., min_length=1)) -> dict:
    return {"result": _service().geocode(q)}


@router.get("/api/search")
def get_search(q: str = Query(..., min_length=1), limit: int | None = Query(None, ge=1, le=50)) -> dict:
    return {"results": _service().search_locations(q, limit=limit)}


@router.post("/api/routes", response_model=RouteResponse)
def post_route(req: RouteRequest) -> RouteResponse:
    """Calculate a route; POIs and the elevation profile are fetched concurrently when requested."""
    service = _service()
    if req.waypoints:
        route = service.get_route_with_waypoints(req.origin, [*req.waypoints, req.destination], req.mode)
    else:
        route = service.get_route(req.origin, req.destination, req.mode)
    if route is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "ROUTE_NOT_FOUND", "message": "The routing service returned no route."},
        )

    _history().add(
        HistoryEntry(origin=req.origin, destination=req.destination, waypoints=req.waypoints, mode=req.mode)
    )

    pois_future = service.submit_pois(route, req.category) if req.category else None
    profile_future = service.submit_elevation_profile(route) if req.elevation else None
    if pois_future is not None:
        route = route.with_pois(pois_future.result())
    profile = profile_future.result() if profile_future is not None else None
    return RouteResponse(route=route, elevation_profile=profile)


@router.post("/api/pois", response_model=PoiResponse)
def post_pois(req: PoiRequest) -> PoiResponse:
    return PoiResponse(category=req.category, pois=_service().enrich_with_pois(req.route, req.category))


@router.post("/api/elevation")
def post_elevation(req: ElevationRequest) -> dict:
    return {"elevation_profile": _service().build_elevation_profile(req.route)}


@router.get("/api/history")
def get_history() -> dict:
    entries = _history().entries()
    return {
        "entries": [
            {**e.model_dump(mode="json"), "description": e.description} for e in entries
        ]
    }


@router.delete("/api/history")
def delete_history() -> dict:
    _history().clear()
    return {"entries": []}


@router.post("/api/export/{fmt}")
def post_export(fmt: str, req: ExportRequest) -> Response:
    """Download the route as `json` or `gpx`."""
    if fmt == "json":
        return JSONResponse(
            content=route_to_dict(req.route, req.elevation_profile),
            headers={"Content-Disposition": 'attachment; filename="route.json"'},
        )
    if fmt == "gpx":
        return Response(
            content=route_to_gpx(req.route),
            media_type="application/gpx+xml",
            headers={"Content-Disposition": 'attachment; filename="route.gpx"'},
        )
    raise HTTPException(
        status_code=400,
        detail={"code": "VALIDATION_ERROR", "message": f"Unsupported export format '{fmt}'"},
    )
