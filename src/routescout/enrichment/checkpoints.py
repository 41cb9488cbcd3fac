"""
Checkpoint selection.

POI lookups are expensive and rate-limited, so a route of any length is reduced to a
fixed number of representative points before querying.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

DEFAULT_SEGMENTS = 10


def checkpoint_indices(n: int, segments: int = DEFAULT_SEGMENTS) -> list[int]:
    """Return one index per segment, near the middle of each equal-count slice of `n` points.

    Slices are equal in vertex count, not in distance. When `n < segments` the same
    index can appear more than once.
    """
    if segments <= 0:
        raise ValueError("segments must be > 0")
    if n <= 0:
        return []

    half_slice = (n // segments) // 2
    return [min(n - 1, (i * n) // segments + half_slice) for i in range(segments)]


def select_checkpoints(path: Sequence[T], segments: int = DEFAULT_SEGMENTS) -> list[T]:
    """Pick `segments` points spread over `path` (see `checkpoint_indices`)."""
    return [path[i] for i in checkpoint_indices(len(path), segments)]
