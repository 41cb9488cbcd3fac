"""
Geocoding ingestion client (Nominatim).

Free-text place search. Nominatim's usage policy asks for a descriptive
User-Agent, which comes from `app.user_agent`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from routescout.config.settings import Settings
from routescout.core.http import get_text
from routescout.domain.errors import PayloadError
from routescout.domain.models import Point

logger = logging.getLogger(__name__)


def parse_geocoding_payload(raw: str) -> list[Point]:
    """Map Nominatim search results to named points, in ranking order.

    Entries whose coordinates are missing or not numeric are skipped.

    Raises:
        PayloadError: If `raw` is not a JSON list.
    """
    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"invalid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise PayloadError("expected a JSON list of candidates")

    out: list[Point] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            out.append(
                Point(
                    lat=float(item["lat"]),
                    lon=float(item["lon"]),
                    name=item.get("display_name"),
                )
            )
        except (KeyError, TypeError, ValueError):
            continue
    return out


class GeocodingClient:
    """Fetches raw search results from a Nominatim instance."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def search_text(self, query: str, limit: int) -> str:
        cfg = self._settings.services.geocoding
        return get_text(
            f"{cfg.base_url.rstrip('/')}/search",
            params={"q": query, "format": "json", "limit": int(limit)},
            headers={"Accept-Language": cfg.accept_language},
            user_agent=self._settings.app.user_agent,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )
