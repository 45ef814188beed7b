"""Unit tests for the in-memory rate limit tracker."""

import logging
import threading

import pytest

from ratecache.adapters.rate_limit.in_memory import InMemoryRateLimitTracker
from ratecache.core.clock import MonotonicClock


def test_scenario_two_per_minute(tracker: InMemoryRateLimitTracker) -> None:
    results = [tracker.check("client", 2, 60, now=t) for t in (0, 10, 20, 70)]

    assert [r.admitted for r in results] == [True, True, False, True]
    assert [r.remaining for r in results] == [1, 0, 0, 1]
    assert results[2].reset_seconds == 40


def test_first_check_opens_window(tracker: InMemoryRateLimitTracker) -> None:
    result = tracker.check("client", 5, 30, now=100.0)

    assert result.admitted is True
    assert result.limit == 5
    assert result.remaining == 4
    assert result.reset_seconds == 30

    window = tracker.window("client")
    assert window is not None
    assert window.count == 1
    assert window.window_start == 100.0


def test_rejects_after_limit_admitted(tracker: InMemoryRateLimitTracker) -> None:
    for _ in range(4):
        assert tracker.check("client", 4, 60, now=5.0).admitted is True

    blocked = tracker.check("client", 4, 60, now=5.0)
    assert blocked.admitted is False
    assert blocked.remaining == 0


def test_count_is_held_at_limit_while_rejecting(tracker: InMemoryRateLimitTracker) -> None:
    for _ in range(10):
        tracker.check("client", 2, 60, now=1.0)

    window = tracker.window("client")
    assert window is not None
    assert window.count == 2


def test_window_resets_exactly_at_boundary(tracker: InMemoryRateLimitTracker) -> None:
    assert tracker.check("client", 1, 10, now=0.0).admitted is True
    assert tracker.check("client", 1, 10, now=9.9).admitted is False

    result = tracker.check("client", 1, 10, now=10.0)
    assert result.admitted is True
    assert tracker.window("client").count == 1


def test_reset_seconds_counts_down_and_rounds_up(tracker: InMemoryRateLimitTracker) -> None:
    tracker.check("client", 10, 60, now=0.0)

    assert tracker.check("client", 10, 60, now=15.0).reset_seconds == 45
    assert tracker.check("client", 10, 60, now=15.5).reset_seconds == 45
    assert tracker.check("client", 10, 60, now=59.9).reset_seconds == 1


def test_uses_clock_when_now_omitted(fake_clock, tracker: InMemoryRateLimitTracker) -> None:
    assert tracker.check("client", 1, 10).admitted is True
    assert tracker.check("client", 1, 10).admitted is False

    fake_clock.advance(10)
    assert tracker.check("client", 1, 10).admitted is True


def test_isolated_by_client(tracker: InMemoryRateLimitTracker) -> None:
    assert tracker.check("k1", 1, 60, now=0.0).admitted is True
    assert tracker.check("k1", 1, 60, now=0.0).admitted is False

    assert tracker.check("k2", 1, 60, now=0.0).admitted is True


@pytest.mark.parametrize("limit", [1, 2, 7])
def test_remaining_stays_within_bounds(tracker: InMemoryRateLimitTracker, limit: int) -> None:
    for step in range(limit * 3):
        result = tracker.check("client", limit, 60, now=float(step))
        assert 0 <= result.remaining <= limit


def test_prune_drops_only_expired_windows(tracker: InMemoryRateLimitTracker) -> None:
    tracker.check("old", 1, 10, now=0.0)
    tracker.check("fresh", 1, 10, now=8.0)

    assert tracker.prune(now=12.0) == 1
    assert tracker.window("old") is None
    assert tracker.window("fresh") is not None
    assert len(tracker) == 1


def test_window_snapshot_is_a_copy(tracker: InMemoryRateLimitTracker) -> None:
    tracker.check("client", 3, 60, now=0.0)

    snapshot = tracker.window("client")
    snapshot.count = 99

    assert tracker.window("client").count == 1


def test_concurrent_checks_admit_exactly_limit() -> None:
    tracker = InMemoryRateLimitTracker(clock=lambda: 0.0, stripes=4)
    limit = 25
    admitted: list[bool] = []
    admitted_lock = threading.Lock()

    def _worker() -> None:
        for _ in range(10):
            result = tracker.check("shared", limit, 60)
            with admitted_lock:
                admitted.append(result.admitted)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(admitted) == 80
    assert sum(admitted) == limit
    assert tracker.window("shared").count == limit


@pytest.mark.parametrize(
    "args",
    [
        ("", 1, 60),
        ("client", 0, 60),
        ("client", 1, 0),
    ],
)
def test_invalid_check_args(tracker: InMemoryRateLimitTracker, args: tuple) -> None:
    with pytest.raises(ValueError):
        tracker.check(*args)


def test_invalid_stripes() -> None:
    with pytest.raises(ValueError):
        InMemoryRateLimitTracker(stripes=0)


def test_monotonic_clock_never_goes_backwards() -> None:
    clock = MonotonicClock()
    readings = [clock() for _ in range(100)]

    assert readings == sorted(readings)


def test_prune_logs_windows_left_after_sweep(
    tracker: InMemoryRateLimitTracker, caplog: pytest.LogCaptureFixture
) -> None:
    tracker.check("old", 1, 10, now=0.0)
    tracker.check("fresh", 1, 10, now=8.0)

    with caplog.at_level(logging.DEBUG, logger="ratecache.adapters.rate_limit.in_memory"):
        tracker.prune(now=12.0)

    record = next(r for r in caplog.records if r.getMessage() == "rate_limit.pruned")
    assert record.pruned == 1
    assert record.windows == 1
