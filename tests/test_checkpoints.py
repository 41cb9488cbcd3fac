import pytest

from routescout.domain.models import Point
from routescout.enrichment.checkpoints import checkpoint_indices, select_checkpoints


@pytest.mark.parametrize("n", [10, 20, 23, 37, 100, 1000, 4321])
def test_checkpoints_spread_over_whole_path(n):
    segments = 10
    idx = checkpoint_indices(n, segments)

    assert len(idx) == segments
    assert idx == sorted(idx)
    assert idx[0] < n // segments
    assert idx[-1] >= n - n // segments
    assert all(0 <= i < n for i in idx)


def test_checkpoints_use_midpoint_of_each_slice():
    # 100 points, 10 slices of 10 vertices: middle of each slice is offset 5.
    assert checkpoint_indices(100, 10) == [5, 15, 25, 35, 45, 55, 65, 75, 85, 95]


def test_short_path_repeats_indices_and_never_overflows():
    idx = checkpoint_indices(3, 10)
    assert len(idx) == 10
    assert max(idx) <= 2
    assert idx == [0, 0, 0, 0, 1, 1, 1, 2, 2, 2]


def test_select_checkpoints_returns_points_in_route_order():
    path = [Point(lat=0.0, lon=i * 0.01, name=f"p{i}") for i in range(50)]
    selected = select_checkpoints(path, segments=5)

    assert [p.name for p in selected] == ["p5", "p15", "p25", "p35", "p45"]


def test_select_checkpoints_on_empty_path():
    assert select_checkpoints([], segments=10) == []


def test_checkpoint_indices_rejects_non_positive_segments():
    with pytest.raises(ValueError):
        checkpoint_indices(10, 0)
