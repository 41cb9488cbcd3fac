"""
Spatial POI query client (Overpass API).

Builds a radius query around one coordinate for a single `key=value` tag filter
and returns the raw response. Parsing lives in `routescout.enrichment.pois`.
"""

from __future__ import annotations

import logging

from routescout.config.settings import Settings
from routescout.core.http import post_form_text

logger = logging.getLogger(__name__)


def build_around_query(lat: float, lon: float, filter_expression: str, radius_m: int, limit: int) -> str:
    """Overpass QL for nodes and ways matching `filter_expression` within `radius_m`.

    Ways are returned with a `center` so every element has a single coordinate.
    """
    key, _, value = filter_expression.partition("=")
    selector = f'["{key}"="{value}"]' if value else f'["{key}"]'
    around = f"(around:{int(radius_m)},{lat:.6f},{lon:.6f})"
    return (
        "[out:json][timeout:25];"
        f"(node{selector}{around};way{selector}{around};);"
        f"out center {int(limit)};"
    )


class OverpassClient:
    """POSTs Overpass QL queries and returns the raw response body."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def query_around(self, lat: float, lon: float, filter_expression: str, radius_m: int, limit: int) -> str:
        query = build_around_query(lat, lon, filter_expression, radius_m, limit)
        logger.debug("Overpass query: %s", query)
        return post_form_text(
            self._settings.services.overpass.base_url,
            data={"data": query},
            user_agent=self._settings.app.user_agent,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )
