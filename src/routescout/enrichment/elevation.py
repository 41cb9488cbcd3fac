"""
Elevation profile construction.

The route is thinned to a bounded number of samples, elevations for all samples
are fetched in one batched call, and cumulative distance between samples is
approximated with straight great-circle chords. Unlike POI discovery there is no
partial result: a response that does not yield exactly one elevation per sample
fails the whole profile.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from pydantic import BaseModel, ValidationError

from routescout.core.geo import Coordinate, haversine_km
from routescout.core.rate_limit import CancellationToken
from routescout.domain.errors import EnrichmentCancelled, PayloadError
from routescout.domain.models import ElevationProfile, Point

logger = logging.getLogger(__name__)

ElevationFn = Callable[[list[Coordinate]], str]

DEFAULT_MAX_SAMPLES = 100


class _ElevationResult(BaseModel):
    elevation: float


class _ElevationLookupResponse(BaseModel):
    results: list[_ElevationResult]


def sample_path(path: Sequence[Point], max_samples: int = DEFAULT_MAX_SAMPLES) -> list[Point]:
    """Take every `len(path) // max_samples`-th point (at least every point), keeping the last."""
    if max_samples <= 0:
        raise ValueError("max_samples must be > 0")
    if not path:
        return []

    stride = max(1, len(path) // max_samples)
    sampled = list(path[::stride])
    if (len(path) - 1) % stride != 0:
        sampled.append(path[-1])
    return sampled


def parse_elevation_payload(raw: str, expected: int) -> list[float]:
    """Return one elevation per requested location, in request order.

    Raises:
        PayloadError: If the payload is malformed or the result count differs from `expected`.
    """
    if raw is None or not raw.strip():
        raise PayloadError("empty elevation response")
    try:
        parsed = _ElevationLookupResponse.model_validate_json(raw)
    except ValidationError as exc:
        raise PayloadError(f"unexpected elevation payload: {exc.error_count()} error(s)") from exc

    if len(parsed.results) != expected:
        raise PayloadError(f"expected {expected} elevations, got {len(parsed.results)}")
    return [r.elevation for r in parsed.results]


def cumulative_distances_km(points: Sequence[Point]) -> list[float]:
    """Running great-circle distance from the first point; starts at 0."""
    if not points:
        return []
    distances = [0.0]
    for prev, cur in zip(points, points[1:]):
        distances.append(distances[-1] + haversine_km(prev.coordinate, cur.coordinate))
    return distances


def _raise_if_cancelled(cancel: CancellationToken | None) -> None:
    if cancel is not None and cancel.cancelled:
        raise EnrichmentCancelled("elevation profile cancelled")


def build_profile(
    path: Sequence[Point],
    *,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    elevation_fn: ElevationFn,
    cancel: CancellationToken | None = None,
) -> ElevationProfile | None:
    """Build an elevation profile for `path`; None for an empty path.

    Cancellation is checked before and after the batched lookup; there is no
    partial profile.

    Raises:
        PayloadError: If the elevation response cannot be parsed.
        EnrichmentCancelled: If `cancel` was triggered.
        httpx.HTTPError: Propagated from `elevation_fn` on transport failures.
    """
    if not path:
        return None

    samples = sample_path(path, max_samples)
    logger.debug("Requesting elevations for %s of %s route points", len(samples), len(path))
    _raise_if_cancelled(cancel)
    raw = elevation_fn([p.coordinate for p in samples])
    _raise_if_cancelled(cancel)
    elevations = parse_elevation_payload(raw, expected=len(samples))

    return ElevationProfile(elevations=elevations, distances=cumulative_distances_km(samples))
