"""
User-facing POI categories.

Each label maps to one OpenStreetMap tag filter understood by the spatial-query
service. Unknown labels resolve to `PoiCategory.UNRECOGNIZED`, which has no
filter; callers treat it as "nothing to search for".
"""

from __future__ import annotations

import unicodedata
from enum import Enum


def _normalize_label(label: str) -> str:
    folded = unicodedata.normalize("NFKD", label.strip().casefold())
    return "".join(ch for ch in folded if not unicodedata.combining(ch))


class PoiCategory(Enum):
    CAFE = ("Café", "amenity", "cafe")
    RESTAURANT = ("Restaurant", "amenity", "restaurant")
    FAST_FOOD = ("Fast Food", "amenity", "fast_food")
    BAR = ("Bar", "amenity", "bar")
    PHARMACY = ("Pharmacy", "amenity", "pharmacy")
    HOSPITAL = ("Hospital", "amenity", "hospital")
    FUEL = ("Fuel Station", "amenity", "fuel")
    PARKING = ("Parking", "amenity", "parking")
    ATM = ("ATM", "amenity", "atm")
    TOILETS = ("Toilets", "amenity", "toilets")
    DRINKING_WATER = ("Drinking Water", "amenity", "drinking_water")
    MUSEUM = ("Museum", "tourism", "museum")
    HOTEL = ("Hotel", "tourism", "hotel")
    CAMPSITE = ("Campsite", "tourism", "camp_site")
    VIEWPOINT = ("Viewpoint", "tourism", "viewpoint")
    ATTRACTION = ("Attraction", "tourism", "attraction")
    SUPERMARKET = ("Supermarket", "shop", "supermarket")
    BAKERY = ("Bakery", "shop", "bakery")
    BICYCLE_SHOP = ("Bicycle Shop", "shop", "bicycle")
    UNRECOGNIZED = ("", None, None)

    def __init__(self, label: str, tag_key: str | None, tag_value: str | None) -> None:
        self.label = label
        self.tag_key = tag_key
        self.tag_value = tag_value

    @property
    def filter_expression(self) -> str | None:
        """`key=value` filter for the spatial-query service, or None when unrecognized."""
        if self.tag_key is None:
            return None
        return f"{self.tag_key}={self.tag_value}"

    @classmethod
    def from_label(cls, label: str | None) -> "PoiCategory":
        if not label:
            return cls.UNRECOGNIZED
        return _BY_LABEL.get(_normalize_label(label), cls.UNRECOGNIZED)

    @classmethod
    def labels(cls) -> list[str]:
        return [c.label for c in cls if c is not cls.UNRECOGNIZED]


_BY_LABEL: dict[str, PoiCategory] = {
    _normalize_label(c.label): c for c in PoiCategory if c is not PoiCategory.UNRECOGNIZED
}
