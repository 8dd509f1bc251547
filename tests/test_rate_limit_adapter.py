"""Unit tests for the in-memory sliding-window rate limiter."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeClock

from app.adapters.rate_limit.base import RejectReason
from app.adapters.rate_limit.in_memory import (
    InMemorySlidingWindowRateLimiter,
    next_utc_midnight,
)


def _limiter(clock: FakeClock, *, per_client: int = 10, daily: int = 500) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(
        per_client_limit=per_client,
        window_seconds=60,
        daily_limit=daily,
        clock=clock,
    )


def test_allows_up_to_per_client_limit(clock: FakeClock) -> None:
    limiter = _limiter(clock)

    for _ in range(9):
        assert limiter.check("1.1.1.1").allowed is True
    result = limiter.check("1.1.1.1")
    assert result.allowed is True
    assert result.remaining == 0


def test_eleventh_request_in_window_is_rejected_per_client(clock: FakeClock) -> None:
    limiter = _limiter(clock)

    for _ in range(10):
        assert limiter.check("1.1.1.1").allowed is True

    blocked = limiter.check("1.1.1.1")
    assert blocked.allowed is False
    assert blocked.reason is RejectReason.PER_CLIENT
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 60
    assert blocked.message is not None


def test_window_slides(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=2)

    assert limiter.check("k").allowed is True
    clock.advance(30)
    assert limiter.check("k").allowed is True
    assert limiter.check("k").allowed is False

    # First timestamp is now older than 60s; one slot frees up.
    clock.advance(31)
    assert limiter.check("k").allowed is True
    assert limiter.check("k").allowed is False


def test_timestamp_exactly_at_window_edge_still_counts(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=1)

    assert limiter.check("k").allowed is True
    clock.advance(60)
    assert limiter.check("k").allowed is False
    clock.advance(0.001)
    assert limiter.check("k").allowed is True


def test_isolated_by_client(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=1)

    assert limiter.check("k1").allowed is True
    assert limiter.check("k1").allowed is False

    assert limiter.check("k2").allowed is True


def test_daily_limit_rejects_any_client(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=1000, daily=3)

    for i in range(3):
        assert limiter.check(f"client-{i}").allowed is True

    blocked = limiter.check("fresh-client")
    assert blocked.allowed is False
    assert blocked.reason is RejectReason.DAILY_LIMIT
    assert limiter.daily_count == 3


def test_per_client_rejection_still_consumes_daily_budget(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=1, daily=3)

    assert limiter.check("a").allowed is True
    assert limiter.check("a").reason is RejectReason.PER_CLIENT
    assert limiter.check("a").reason is RejectReason.PER_CLIENT
    assert limiter.daily_count == 3

    assert limiter.check("b").reason is RejectReason.DAILY_LIMIT
    assert limiter.daily_count == 3


def test_daily_rollover_forgets_counter_and_client_windows() -> None:
    clock = FakeClock(datetime(2024, 5, 1, 23, 59, 50, tzinfo=timezone.utc))
    limiter = _limiter(clock, per_client=1, daily=2)

    assert limiter.check("a").allowed is True
    assert limiter.check("a").allowed is False
    assert limiter.check("b").reason is RejectReason.DAILY_LIMIT

    clock.advance(10)  # 2024-05-02T00:00:00Z
    assert limiter.check("a").allowed is True
    assert limiter.daily_count == 1
    assert limiter.reset_at == datetime(2024, 5, 3, tzinfo=timezone.utc)


def test_daily_rejection_retry_after_points_at_midnight() -> None:
    clock = FakeClock(datetime(2024, 5, 1, 23, 0, 0, tzinfo=timezone.utc))
    limiter = _limiter(clock, daily=1)

    assert limiter.check("a").allowed is True
    blocked = limiter.check("a")
    assert blocked.reason is RejectReason.DAILY_LIMIT
    assert blocked.retry_after_seconds == 3600


def test_reset_clears_everything(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=1, daily=1)
    limiter.check("a")
    assert limiter.check("a").allowed is False

    limiter.reset()

    assert limiter.daily_count == 0
    assert limiter.check("a").allowed is True


def test_next_utc_midnight_normalizes_offsets() -> None:
    taipei = timezone(timedelta(hours=8))
    # 2024-05-02 07:00 in Taipei is still 2024-05-01 in UTC
    local = datetime(2024, 5, 2, 7, 0, tzinfo=taipei)
    assert next_utc_midnight(local) == datetime(2024, 5, 2, tzinfo=timezone.utc)


def test_concurrent_checks_for_same_client_lose_no_updates(clock: FakeClock) -> None:
    limiter = _limiter(clock, per_client=25, daily=10_000)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _worker() -> None:
        allowed = limiter.check("shared").allowed
        with results_lock:
            results.append(allowed)

    threads = [threading.Thread(target=_worker) for _ in range(100)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 25
    assert limiter.daily_count == 100


@pytest.mark.parametrize(
    "kwargs",
    [
        {"per_client_limit": 0, "window_seconds": 60, "daily_limit": 1},
        {"per_client_limit": 1, "window_seconds": 0, "daily_limit": 1},
        {"per_client_limit": 1, "window_seconds": 60, "daily_limit": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_empty_key_is_rejected(clock: FakeClock) -> None:
    limiter = _limiter(clock)

    with pytest.raises(ValueError):
        limiter.check("")
