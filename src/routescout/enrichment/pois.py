"""
POI discovery along a route.

Checkpoints are visited in route order, one spatial query each, paced by a fixed
delay and bounded by an overall deadline. A checkpoint whose query fails or whose
payload cannot be parsed is skipped; the loop never raises for those cases. The
accumulated POIs are then deduplicated by coordinate proximity and capped.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Iterable, Sequence

from routescout.core.rate_limit import CancellationToken, Clock, Deadline, FixedDelayRateLimiter
from routescout.domain.errors import PayloadError
from routescout.domain.models import POI, Point

logger = logging.getLogger(__name__)

# (lat, lon, filter_expression, radius_m, limit) -> raw response text
QueryFn = Callable[[float, float, str, int, int], str]

DEDUP_EPSILON_DEG = 1e-5
MAX_RESULTS = 100
CATEGORY_TAG_PRIORITY = ("amenity", "tourism", "shop")


def looks_like_error_payload(raw: str | None) -> bool:
    """True for empty bodies, error messages and markup pages instead of JSON."""
    if raw is None or not raw.strip():
        return True
    if "error" in raw:
        return True
    return raw.lstrip().startswith("<")


def _element_coordinate(element: dict[str, Any]) -> tuple[float, float] | None:
    lat = element.get("lat")
    lon = element.get("lon")
    if lat is None or lon is None:
        center = element.get("center")
        if not isinstance(center, dict):
            return None
        lat = center.get("lat")
        lon = center.get("lon")
    try:
        return float(lat), float(lon)
    except (TypeError, ValueError):
        return None


def _element_category(tags: dict[str, Any]) -> str | None:
    for key in CATEGORY_TAG_PRIORITY:
        value = tags.get(key)
        if value:
            return f"{key}:{value}"
    return None


def parse_poi_payload(raw: str) -> list[POI]:
    """Parse a spatial-query response into POIs, in response order.

    Elements without a resolvable coordinate (direct `lat`/`lon` or a nested
    `center`) are dropped.

    Raises:
        PayloadError: If `raw` is not a JSON object.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise PayloadError("expected a JSON object at the root")

    elements = payload.get("elements") or []
    if not isinstance(elements, list):
        raise PayloadError("'elements' must be a list")

    out: list[POI] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        coord = _element_coordinate(element)
        if coord is None:
            continue
        tags = element.get("tags")
        if not isinstance(tags, dict):
            tags = {}
        name = tags.get("name")
        try:
            out.append(
                POI(
                    name=str(name) if name else None,
                    category=_element_category(tags),
                    lat=coord[0],
                    lon=coord[1],
                )
            )
        except ValueError:
            # Out-of-range coordinates fail model validation.
            continue
    return out


def deduplicate_pois(pois: Iterable[POI], *, epsilon_deg: float = DEDUP_EPSILON_DEG) -> list[POI]:
    """Keep the first POI of every group closer than `epsilon_deg` in both axes."""
    kept: list[POI] = []
    for poi in pois:
        duplicate = any(
            abs(poi.lat - k.lat) < epsilon_deg and abs(poi.lon - k.lon) < epsilon_deg for k in kept
        )
        if not duplicate:
            kept.append(poi)
    return kept


def cap_pois(pois: Sequence[POI], *, max_results: int = MAX_RESULTS) -> list[POI]:
    return list(pois[:max_results])


def find_pois(
    checkpoints: Sequence[Point],
    filter_expression: str,
    *,
    radius_m: int,
    per_checkpoint_limit: int,
    inter_query_delay_seconds: float,
    deadline_seconds: float,
    query_fn: QueryFn,
    cancel: CancellationToken | None = None,
    clock: Clock | None = None,
    epsilon_deg: float = DEDUP_EPSILON_DEG,
    max_results: int = MAX_RESULTS,
) -> list[POI]:
    """Query each checkpoint in order and return deduplicated, capped POIs.

    Hitting the deadline or being cancelled is not an error: whatever was collected
    up to that point is returned.
    """
    cancel = cancel or CancellationToken()
    deadline = Deadline(deadline_seconds, clock=clock or time.monotonic)
    limiter = FixedDelayRateLimiter(inter_query_delay_seconds, cancel=cancel)

    collected: list[POI] = []
    for index, checkpoint in enumerate(checkpoints):
        if deadline.expired():
            logger.info(
                "POI search deadline of %.1fs reached after %s/%s checkpoints",
                deadline_seconds,
                index,
                len(checkpoints),
            )
            break
        # Waits out the inter-query delay; False means cancelled.
        if not limiter.acquire():
            logger.info("POI search cancelled after %s/%s checkpoints", index, len(checkpoints))
            break

        try:
            raw = query_fn(checkpoint.lat, checkpoint.lon, filter_expression, radius_m, per_checkpoint_limit)
        except Exception as exc:
            logger.warning("POI query failed at checkpoint %s: %s: %s", index, type(exc).__name__, exc)
            continue

        if looks_like_error_payload(raw):
            logger.warning("POI query at checkpoint %s returned an error-shaped payload; skipping", index)
            continue
        try:
            found = parse_poi_payload(raw)
        except PayloadError as exc:
            logger.warning("POI payload at checkpoint %s could not be parsed: %s", index, exc)
            continue

        collected.extend(found)

    unique = deduplicate_pois(collected, epsilon_deg=epsilon_deg)
    return cap_pois(unique, max_results=max_results)
