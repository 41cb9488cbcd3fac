from __future__ import annotations
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt

"""
Geospatial helpers.

Route geometry is small enough that a spherical Earth is good enough for
cumulative distances between sparse samples, so we avoid heavier GIS packages.
"""

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees (WGS84)."""

    lat: float
    lon: float


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance in kilometers between two coordinates."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))
