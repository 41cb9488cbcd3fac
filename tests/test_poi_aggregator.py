import json
import threading
import time

import httpx
import pytest

from routescout.core.rate_limit import CancellationToken
from routescout.domain.errors import PayloadError
from routescout.domain.models import POI, Point
from routescout.enrichment.pois import (
    cap_pois,
    deduplicate_pois,
    find_pois,
    looks_like_error_payload,
    parse_poi_payload,
)


def _payload(*elements: dict) -> str:
    return json.dumps({"elements": list(elements)})


def _checkpoints(n: int) -> list[Point]:
    return [Point(lat=38.70 + i * 0.01, lon=-9.10 - i * 0.01, name=f"c{i}") for i in range(n)]


def _find(checkpoints, query_fn, **overrides):
    kwargs = dict(
        radius_m=1000,
        per_checkpoint_limit=20,
        inter_query_delay_seconds=0.0,
        deadline_seconds=15.0,
        query_fn=query_fn,
    )
    kwargs.update(overrides)
    return find_pois(checkpoints, "amenity=cafe", **kwargs)


def test_parse_poi_payload_handles_nodes_and_way_centers():
    raw = _payload(
        {"lat": 1.0, "lon": 2.0, "tags": {"name": "Cafe A", "amenity": "cafe"}},
        {"center": {"lat": 3.0, "lon": 4.0}, "tags": {"shop": "bakery"}},
    )
    pois = parse_poi_payload(raw)

    assert len(pois) == 2
    assert pois[0] == POI(name="Cafe A", category="amenity:cafe", lat=1.0, lon=2.0)
    assert pois[1].name is None
    assert pois[1].category == "shop:bakery"
    assert (pois[1].lat, pois[1].lon) == (3.0, 4.0)


def test_parse_poi_payload_category_priority_and_missing_coordinates():
    raw = _payload(
        {"lat": 1.0, "lon": 1.0, "tags": {"shop": "gift", "tourism": "museum", "amenity": "cafe"}},
        {"lat": 2.0, "lon": 2.0, "tags": {"shop": "gift", "tourism": "museum"}},
        {"lat": 3.0, "lon": 3.0, "tags": {"leisure": "park", "name": "Park"}},
        {"lat": 4.0, "lon": 4.0},
        {"tags": {"amenity": "cafe", "name": "Nowhere"}},
        {"center": {"lat": 5.0}, "tags": {"amenity": "cafe"}},
    )
    pois = parse_poi_payload(raw)

    assert [p.category for p in pois] == ["amenity:cafe", "tourism:museum", None, None]
    assert pois[2].name == "Park"


def test_parse_poi_payload_without_elements_is_empty():
    assert parse_poi_payload("{}") == []


@pytest.mark.parametrize("raw", ["{", "[1, 2]", '{"elements": 3}'])
def test_parse_poi_payload_rejects_malformed_json(raw):
    with pytest.raises(PayloadError):
        parse_poi_payload(raw)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", True),
        ("   \n", True),
        ('{"remark": "runtime error: Query timed out"}', True),
        ("<?xml version='1.0'?><osm/>", True),
        ("  <html><body>Too Many Requests</body></html>", True),
        ('{"elements": []}', False),
    ],
)
def test_looks_like_error_payload(raw, expected):
    assert looks_like_error_payload(raw) is expected


def test_deduplicate_keeps_first_within_epsilon():
    pois = [
        POI(name="first", lat=38.700000, lon=-9.100000),
        POI(name="same place", lat=38.700005, lon=-9.100005),
        POI(name="other lat", lat=38.700020, lon=-9.100000),
        POI(name="other lon", lat=38.700000, lon=-9.100020),
    ]
    unique = deduplicate_pois(pois)

    assert [p.name for p in unique] == ["first", "other lat", "other lon"]


def test_deduplicate_is_idempotent():
    pois = [POI(lat=10 + (i % 7) * 1e-6, lon=20 + (i % 3) * 1e-3) for i in range(30)]
    once = deduplicate_pois(pois)
    assert deduplicate_pois(once) == once
    for i, a in enumerate(once):
        for b in once[i + 1 :]:
            assert not (abs(a.lat - b.lat) < 1e-5 and abs(a.lon - b.lon) < 1e-5)


def test_cap_preserves_order():
    pois = [POI(name=str(i), lat=0.0, lon=i * 0.001) for i in range(5)]
    assert [p.name for p in cap_pois(pois, max_results=3)] == ["0", "1", "2"]


def test_find_pois_queries_each_checkpoint_in_order():
    calls = []

    def query_fn(lat, lon, tag, radius, limit):
        calls.append((lat, lon, tag, radius, limit))
        return _payload()

    checkpoints = _checkpoints(3)
    assert _find(checkpoints, query_fn, radius_m=750, per_checkpoint_limit=5) == []
    assert calls == [(c.lat, c.lon, "amenity=cafe", 750, 5) for c in checkpoints]


def test_find_pois_deduplicates_across_checkpoints():
    raw = _payload(
        {"lat": 38.7001, "lon": -9.1001, "tags": {"name": "Cafe X", "amenity": "cafe"}},
        {"lat": 38.7002, "lon": -9.1002, "tags": {"name": "Rest Y", "amenity": "restaurant"}},
    )
    pois = _find(_checkpoints(10), lambda *_a: raw)

    assert [p.name for p in pois] == ["Cafe X", "Rest Y"]
    assert pois[0].category == "amenity:cafe"


def test_find_pois_skips_failed_and_error_shaped_checkpoints():
    responses = iter(
        [
            httpx.ConnectError("network down"),
            "<html>502 Bad Gateway</html>",
            '{"remark": "runtime error"}',
            "{",
            "",
            _payload({"lat": 1.0, "lon": 1.0, "tags": {"name": "Survivor", "amenity": "cafe"}}),
        ]
    )

    def query_fn(*_args):
        nxt = next(responses)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    pois = _find(_checkpoints(6), query_fn)
    assert [p.name for p in pois] == ["Survivor"]


def test_find_pois_caps_results():
    raw = _payload(*[{"lat": 10.0, "lon": i * 0.001, "tags": {"amenity": "cafe"}} for i in range(150)])
    pois = _find(_checkpoints(2), lambda *_a: raw)

    assert len(pois) == 100
    assert pois[0].lon == 0.0
    assert pois[-1].lon == pytest.approx(0.099)


def test_find_pois_stops_at_deadline_with_partial_results():
    now = {"t": 0.0}
    calls = []

    def clock():
        return now["t"]

    def slow_query(lat, lon, *_rest):
        calls.append((lat, lon))
        now["t"] += 2.5
        return _payload({"lat": lat, "lon": lon, "tags": {"amenity": "cafe"}})

    pois = _find(_checkpoints(10), slow_query, deadline_seconds=15.0, clock=clock)

    assert 0 < len(calls) < 10
    assert len(pois) == len(calls)


def test_find_pois_waits_between_checkpoints_but_not_before_the_first():
    class RecordingToken(CancellationToken):
        def __init__(self):
            super().__init__()
            self.waits = []

        def wait(self, seconds):
            self.waits.append(seconds)
            return False

    token = RecordingToken()
    _find(_checkpoints(3), lambda *_a: _payload(), inter_query_delay_seconds=1.25, cancel=token)

    assert token.waits == [1.25, 1.25]


def test_find_pois_cancelled_during_query_returns_what_was_collected():
    token = CancellationToken()
    calls = []

    def query_fn(lat, lon, *_rest):
        calls.append(lat)
        if len(calls) == 3:
            token.cancel()
        return _payload({"lat": lat, "lon": lon, "tags": {"amenity": "cafe"}})

    pois = _find(_checkpoints(10), query_fn, cancel=token)

    assert len(calls) == 3
    assert len(pois) == 3


def test_find_pois_cancel_interrupts_the_rate_limit_delay():
    token = CancellationToken()
    threading.Timer(0.05, token.cancel).start()

    started = time.monotonic()
    pois = _find(
        _checkpoints(5),
        lambda lat, lon, *_r: _payload({"lat": lat, "lon": lon}),
        inter_query_delay_seconds=10.0,
        cancel=token,
    )

    assert time.monotonic() - started < 5.0
    assert len(pois) == 1
