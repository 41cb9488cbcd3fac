"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- collaborator parsing (routing, geocoding, POI query, elevation)
- enrichment outputs (`POI`, `ElevationProfile`)
- API/CLI payloads and exports

All models are frozen: a route is replaced on every new calculation, and
enrichment results are attached by building a new `Route` (`Route.with_pois`).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from routescout.core.geo import Coordinate


class TransportMode(str, Enum):
    """How the route is travelled; selects the routing profile."""

    CAR = "car"
    BIKE = "bike"
    FOOT = "foot"


class Point(BaseModel):
    """A geographic point in decimal degrees with an optional display name."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    name: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)

    def __str__(self) -> str:
        return f"{self.name or '?'}({self.lat:.5f}, {self.lon:.5f})"


class POI(BaseModel):
    """A point of interest found near a route.

    `category` is `<tag key>:<tag value>` (e.g. `amenity:cafe`) or None when the
    element carried none of the recognized tag keys.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    category: str | None = None
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)


class Route(BaseModel):
    """A calculated route: ordered polyline, totals from the routing service, and POIs."""

    model_config = ConfigDict(frozen=True)

    points: tuple[Point, ...] = ()
    distance_km: float = Field(0.0, ge=0)
    duration_sec: int = Field(0, ge=0)
    mode: TransportMode = TransportMode.CAR
    pois: tuple[POI, ...] = ()

    def with_pois(self, pois: list[POI] | tuple[POI, ...]) -> "Route":
        """Return a copy of this route with `pois` attached (replacing any previous set)."""
        return self.model_copy(update={"pois": tuple(pois)})


def _profile_stats(elevations: list[float]) -> dict[str, float]:
    if not elevations:
        return {"max_elevation": 0.0, "min_elevation": 0.0, "total_ascent": 0.0, "total_descent": 0.0}

    ascent = 0.0
    descent = 0.0
    for prev, cur in zip(elevations, elevations[1:]):
        diff = cur - prev
        if diff > 0:
            ascent += diff
        else:
            descent += -diff

    return {
        "max_elevation": max(elevations),
        "min_elevation": min(elevations),
        "total_ascent": ascent,
        "total_descent": descent,
    }


class ElevationProfile(BaseModel):
    """Elevation samples (m) indexed by cumulative distance (km) along the route.

    Statistics are derived from `elevations` at construction; any values passed in
    for them are ignored.
    """

    model_config = ConfigDict(frozen=True)

    elevations: tuple[float, ...]
    distances: tuple[float, ...]
    max_elevation: float = 0.0
    min_elevation: float = 0.0
    total_ascent: float = 0.0
    total_descent: float = 0.0

    @model_validator(mode="after")
    def _validate_and_derive_stats(self) -> "ElevationProfile":
        if len(self.elevations) != len(self.distances):
            raise ValueError("elevations and distances must have the same length")
        if self.distances and self.distances[0] != 0:
            raise ValueError("distances must start at 0")
        for prev, cur in zip(self.distances, self.distances[1:]):
            if cur < prev:
                raise ValueError("distances must be non-decreasing")
        # Runs after field validation, so `elevations` already holds floats.
        for key, value in _profile_stats(list(self.elevations)).items():
            object.__setattr__(self, key, value)
        return self
