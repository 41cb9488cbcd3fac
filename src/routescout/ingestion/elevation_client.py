"""
Elevation ingestion client (Open-Elevation).

One batched lookup per profile: all sampled coordinates travel in a single
`locations=lat,lon|lat,lon|...` query parameter.
"""

from __future__ import annotations

import logging
from typing import Sequence

from routescout.config.settings import Settings
from routescout.core.geo import Coordinate
from routescout.core.http import get_text

logger = logging.getLogger(__name__)


def locations_param(locations: Sequence[Coordinate]) -> str:
    return "|".join(f"{c.lat:.6f},{c.lon:.6f}" for c in locations)


class ElevationClient:
    """Fetches raw elevation lookups for an ordered list of coordinates."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def lookup(self, locations: Sequence[Coordinate]) -> str:
        logger.info("Fetching elevations for %s locations", len(locations))
        return get_text(
            self._settings.services.elevation.base_url,
            params={"locations": locations_param(locations)},
            user_agent=self._settings.app.user_agent,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )
