"""Unit tests for the per-process circuit breaker."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from procwarden.breakers.breaker import CircuitBreaker
from procwarden.breakers.models import CircuitStatus

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def breaker() -> CircuitBreaker:
    """Breaker with threshold 3 and a 60s reset."""
    return CircuitBreaker(failure_threshold=3, reset_duration=timedelta(seconds=60))


def _fail(breaker: CircuitBreaker, name: str, times: int, start: datetime = T0) -> datetime:
    now = start
    for i in range(times):
        now = start + timedelta(seconds=i)
        assert breaker.may_attempt(name, now)
        breaker.record_outcome(name, False, now)
    return now


def test_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError, match="failure_threshold"):
        CircuitBreaker(failure_threshold=0, reset_duration=timedelta(seconds=60))


def test_unknown_process_is_closed_and_allowed(breaker: CircuitBreaker) -> None:
    assert breaker.get_state("svc-x") is None
    assert breaker.may_attempt("svc-x", T0) is True

    state = breaker.get_state("svc-x")
    assert state is not None
    assert state.status == CircuitStatus.CLOSED
    assert state.consecutive_failures == 0
    assert state.last_failure_at is None


def test_failures_accumulate_while_closed(breaker: CircuitBreaker) -> None:
    opened = breaker.record_outcome("svc-x", False, T0)
    assert opened is False
    assert breaker.get_state("svc-x").consecutive_failures == 1

    breaker.record_outcome("svc-x", False, T0 + timedelta(seconds=5))
    state = breaker.get_state("svc-x")
    assert state.consecutive_failures == 2
    assert state.last_failure_at == T0 + timedelta(seconds=5)
    assert state.status == CircuitStatus.CLOSED


def test_success_resets_failure_count(breaker: CircuitBreaker) -> None:
    breaker.record_outcome("svc-x", False, T0)
    breaker.record_outcome("svc-x", False, T0)
    breaker.record_outcome("svc-x", True, T0)

    state = breaker.get_state("svc-x")
    assert state.consecutive_failures == 0
    assert state.status == CircuitStatus.CLOSED

    # An intervening success means two more failures do not open it
    breaker.record_outcome("svc-x", False, T0)
    breaker.record_outcome("svc-x", False, T0)
    assert not breaker.is_open("svc-x")


def test_opens_exactly_at_threshold(breaker: CircuitBreaker, caplog: pytest.LogCaptureFixture) -> None:
    assert breaker.record_outcome("svc-x", False, T0) is False
    assert breaker.record_outcome("svc-x", False, T0) is False
    with caplog.at_level(logging.WARNING):
        assert breaker.record_outcome("svc-x", False, T0) is True

    assert breaker.is_open("svc-x")
    assert breaker.get_state("svc-x").consecutive_failures == 3
    assert "Circuit breaker opened for svc-x after 3 failures" in caplog.text


def test_scenario_open_breaker_skips_attempt(breaker: CircuitBreaker, caplog: pytest.LogCaptureFixture) -> None:
    """Three failures open the breaker; a check 10s later is refused."""
    last_failure = _fail(breaker, "svc-x", 3)
    assert breaker.is_open("svc-x")

    with caplog.at_level(logging.WARNING):
        allowed = breaker.may_attempt("svc-x", last_failure + timedelta(seconds=10))

    assert allowed is False
    assert breaker.is_open("svc-x")
    assert "Circuit breaker open for svc-x. Skipping restart." in caplog.text


def test_scenario_open_breaker_resets_after_duration(breaker: CircuitBreaker) -> None:
    """A check 65s after the last failure closes the breaker and allows the attempt."""
    last_failure = _fail(breaker, "svc-x", 3)

    assert breaker.may_attempt("svc-x", last_failure + timedelta(seconds=65)) is True

    state = breaker.get_state("svc-x")
    assert state.status == CircuitStatus.CLOSED
    assert state.consecutive_failures == 0


def test_reset_boundary_is_inclusive(breaker: CircuitBreaker) -> None:
    last_failure = _fail(breaker, "svc-x", 3)

    assert breaker.may_attempt("svc-x", last_failure + timedelta(seconds=59, microseconds=999999)) is False
    assert breaker.may_attempt("svc-x", last_failure + timedelta(seconds=60)) is True


def test_failed_attempt_after_reset_reopens_immediately() -> None:
    """The reset happens on the check, so one failure with threshold 1 re-opens it."""
    breaker = CircuitBreaker(failure_threshold=1, reset_duration=timedelta(seconds=30))
    breaker.record_outcome("svc-x", False, T0)
    assert breaker.is_open("svc-x")

    retry_at = T0 + timedelta(seconds=30)
    assert breaker.may_attempt("svc-x", retry_at) is True
    assert breaker.record_outcome("svc-x", False, retry_at) is True
    assert breaker.may_attempt("svc-x", retry_at + timedelta(seconds=1)) is False


def test_failed_attempt_after_reset_counts_from_zero(breaker: CircuitBreaker) -> None:
    last_failure = _fail(breaker, "svc-x", 3)
    retry_at = last_failure + timedelta(seconds=60)

    assert breaker.may_attempt("svc-x", retry_at)
    breaker.record_outcome("svc-x", False, retry_at)

    state = breaker.get_state("svc-x")
    assert state.consecutive_failures == 1
    assert state.status == CircuitStatus.CLOSED


def test_breakers_are_independent_per_process(breaker: CircuitBreaker) -> None:
    _fail(breaker, "svc-x", 3)

    assert breaker.is_open("svc-x")
    assert not breaker.is_open("svc-y")
    assert breaker.may_attempt("svc-y", T0 + timedelta(seconds=5)) is True
