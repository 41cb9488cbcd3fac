import pytest

from routescout.core.rate_limit import CancellationToken, Deadline, FixedDelayRateLimiter


def test_deadline_uses_injected_clock():
    now = {"t": 100.0}
    deadline = Deadline(15.0, clock=lambda: now["t"])

    now["t"] = 115.0
    assert deadline.elapsed() == 15.0
    assert not deadline.expired()
    now["t"] = 115.5
    assert deadline.expired()


def test_deadline_rejects_negative_budget():
    with pytest.raises(ValueError):
        Deadline(-1)


def test_limiter_first_acquire_is_immediate_then_waits(monkeypatch):
    waits = []
    token = CancellationToken()
    monkeypatch.setattr(token, "wait", lambda seconds: waits.append(seconds) or False)

    limiter = FixedDelayRateLimiter(0.5, cancel=token)
    assert limiter.acquire()
    assert limiter.acquire()
    assert limiter.acquire()
    assert waits == [0.5, 0.5]


def test_limiter_refuses_after_cancel():
    token = CancellationToken()
    limiter = FixedDelayRateLimiter(0.0, cancel=token)
    assert limiter.acquire()

    token.cancel()
    assert token.cancelled
    assert not limiter.acquire()


def test_cancellation_token_wait_reports_cancel():
    token = CancellationToken()
    assert token.wait(0) is False
    token.cancel()
    assert token.wait(0) is True
    assert token.wait(0.01) is True
