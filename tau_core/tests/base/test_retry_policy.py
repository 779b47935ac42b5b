from __future__ import annotations

import asyncio
import socket

import httpx
import pytest

from tau_core.base.cancellation import CancellationToken, CancelledError
from tau_core.base.errors import ErrorCode, HTTPStatusError, ProviderError, RetryExhaustedError
from tau_core.base.resilience import retry as retry_mod
from tau_core.base.resilience.retry import calculate_backoff, do_with_retry, is_retryable_error
from tau_core.config import RetryConfig


def _status_error(code: int) -> HTTPStatusError:
    return HTTPStatusError(code=ErrorCode.UNKNOWN, message="x", provider="p", status_code=code)


class _Flaky:
    def __init__(self, fail_times: int, exc_factory):
        self.calls = 0
        self.fail_times = fail_times
        self.exc_factory = exc_factory

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.fail_times:
            raise self.exc_factory()
        return "ok"


@pytest.fixture()
def no_sleep(monkeypatch):
    """Replace the backoff wait with a recorder."""
    delays = []

    async def fake_sleep(delay, token):
        delays.append(delay)

    monkeypatch.setattr(retry_mod, "sleep_cancellable", fake_sleep)
    return delays


def test_backoff_doubles_and_caps_without_jitter():
    cfg = RetryConfig(initial_backoff=1.0, max_backoff=30.0, jitter=False)
    delays = [calculate_backoff(i, cfg) for i in range(7)]
    assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]  # nosec B101 - asserts are appropriate in unit tests


def test_backoff_exponent_is_bounded():
    cfg = RetryConfig(initial_backoff=0.001, max_backoff=1e9, jitter=False)
    assert calculate_backoff(500, cfg) == pytest.approx(0.001 * 2**10)  # nosec B101 - asserts are appropriate in unit tests


def test_backoff_honors_multiplier():
    cfg = RetryConfig(initial_backoff=1.0, max_backoff=100.0, backoff_multiplier=3.0, jitter=False)
    assert calculate_backoff(2, cfg) == 9.0  # nosec B101 - asserts are appropriate in unit tests


def test_backoff_jitter_stays_within_a_quarter(monkeypatch):
    cfg = RetryConfig(initial_backoff=4.0, max_backoff=100.0, jitter=True)
    monkeypatch.setattr(retry_mod.random, "uniform", lambda a, b: a)
    assert calculate_backoff(0, cfg) == pytest.approx(3.0)  # nosec B101 - asserts are appropriate in unit tests
    monkeypatch.setattr(retry_mod.random, "uniform", lambda a, b: b)
    assert calculate_backoff(0, cfg) == pytest.approx(5.0)  # nosec B101 - asserts are appropriate in unit tests


def test_backoff_with_jitter_never_exceeds_cap():
    cfg = RetryConfig(initial_backoff=1.0, max_backoff=10.0, jitter=True)
    for attempt in range(15):
        delay = calculate_backoff(attempt, cfg)
        assert 0.0 <= delay <= 10.0  # nosec B101 - asserts are appropriate in unit tests
        assert delay >= min(0.75 * 2.0 ** min(attempt, 10), 10.0) - 1e-9  # nosec B101 - asserts are appropriate in unit tests


@pytest.mark.parametrize(
    "exc, expected",
    [
        (_status_error(429), True),
        (_status_error(502), True),
        (_status_error(503), True),
        (_status_error(504), True),
        (_status_error(400), False),
        (_status_error(401), False),
        (_status_error(404), False),
        (_status_error(500), False),
        (httpx.ConnectError("refused"), True),
        (httpx.ReadTimeout("slow"), True),
        (httpx.RemoteProtocolError("eof"), True),
        (ConnectionResetError("reset"), True),
        (TimeoutError("t"), True),
        (ValueError("bad input"), False),
        (socket.gaierror(socket.EAI_AGAIN, "temporary failure"), True),
        (socket.gaierror(socket.EAI_NONAME, "unknown host"), False),
        (CancelledError("stop"), False),
    ],
)
def test_is_retryable_error_classification(exc, expected):
    assert is_retryable_error(exc) is expected  # nosec B101 - asserts are appropriate in unit tests


def test_is_retryable_error_unwraps_wrappers():
    root = httpx.ConnectError("refused")
    wrapped = ProviderError(code=ErrorCode.UNKNOWN, message="send failed", provider="p", raw=root)
    outer = RuntimeError("outer")
    outer.__cause__ = wrapped
    assert is_retryable_error(outer) is True  # nosec B101 - asserts are appropriate in unit tests


def _connect_error_over(errno_value: int, text: str) -> httpx.ConnectError:
    outer = httpx.ConnectError(f"[Errno {errno_value}] {text}")
    outer.__cause__ = socket.gaierror(errno_value, text)
    return outer


def test_permanent_dns_failure_under_connect_error_is_final():
    err = _connect_error_over(socket.EAI_NONAME, "Name or service not known")
    assert is_retryable_error(err) is False  # nosec B101 - asserts are appropriate in unit tests

    wrapped = ProviderError(code=ErrorCode.TRANSIENT, message="send failed", provider="p", raw=err)
    assert is_retryable_error(wrapped) is False  # nosec B101 - asserts are appropriate in unit tests


def test_temporary_dns_failure_under_connect_error_is_retried():
    err = _connect_error_over(socket.EAI_AGAIN, "Temporary failure in name resolution")
    assert is_retryable_error(err) is True  # nosec B101 - asserts are appropriate in unit tests


async def test_unknown_host_is_attempted_once(no_sleep):
    calls = []

    async def resolve_fails():
        calls.append(1)
        raise _connect_error_over(socket.EAI_NONAME, "Name or service not known")

    with pytest.raises(httpx.ConnectError):
        await do_with_retry(resolve_fails, RetryConfig(max_retries=3, jitter=False))
    assert len(calls) == 1  # nosec B101 - asserts are appropriate in unit tests
    assert no_sleep == []  # nosec B101 - asserts are appropriate in unit tests


def test_cancellation_anywhere_in_chain_is_final():
    err = _status_error(503)
    err.__context__ = asyncio.CancelledError()
    assert is_retryable_error(err) is False  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_succeeds_after_transient(no_sleep):
    attempt_log = []

    def attempt_logger(**kw):
        attempt_log.append(kw)

    cfg = RetryConfig(max_retries=3, initial_backoff=1.0, max_backoff=30.0, jitter=False)
    flaky = _Flaky(2, lambda: _status_error(503))

    result = await do_with_retry(flaky, cfg, attempt_logger=attempt_logger)

    assert result == "ok"  # nosec B101 - asserts are appropriate in unit tests
    assert flaky.calls == 3  # nosec B101 - asserts are appropriate in unit tests
    assert no_sleep == [1.0, 2.0]  # nosec B101 - asserts are appropriate in unit tests
    assert attempt_log[-1]["error"] is None  # nosec B101 - asserts are appropriate in unit tests
    assert [e["attempt"] for e in attempt_log] == [0, 1, 2]  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_exhaustion_chains_last_error(no_sleep):
    cfg = RetryConfig(max_retries=2, initial_backoff=1.0, jitter=False)
    flaky = _Flaky(99, lambda: _status_error(429))

    with pytest.raises(RetryExhaustedError) as ei:
        await do_with_retry(flaky, cfg)

    assert flaky.calls == 3  # nosec B101 - asserts are appropriate in unit tests
    assert len(no_sleep) == 2  # nosec B101 - asserts are appropriate in unit tests
    assert ei.value.attempts == 3  # nosec B101 - asserts are appropriate in unit tests
    assert isinstance(ei.value.__cause__, HTTPStatusError)  # nosec B101 - asserts are appropriate in unit tests
    assert ei.value.raw is ei.value.__cause__  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_zero_retries_is_single_attempt(no_sleep):
    cfg = RetryConfig(max_retries=0)
    flaky = _Flaky(99, lambda: _status_error(503))

    with pytest.raises(RetryExhaustedError):
        await do_with_retry(flaky, cfg)

    assert flaky.calls == 1  # nosec B101 - asserts are appropriate in unit tests
    assert no_sleep == []  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_stops_on_non_retryable(no_sleep):
    cfg = RetryConfig(max_retries=4)
    flaky = _Flaky(99, lambda: ValueError("bad"))

    with pytest.raises(ValueError):
        await do_with_retry(flaky, cfg)

    assert flaky.calls == 1  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_checks_token_before_each_attempt():
    cfg = RetryConfig(max_retries=3, initial_backoff=0.001, jitter=False)
    token = CancellationToken()
    calls = 0

    async def operation():
        nonlocal calls
        calls += 1
        token.cancel("enough")
        raise _status_error(503)

    with pytest.raises(CancelledError):
        await do_with_retry(operation, cfg, token)

    assert calls == 1  # nosec B101 - asserts are appropriate in unit tests


async def test_do_with_retry_aborts_in_flight_attempt():
    cfg = RetryConfig(max_retries=3)
    token = CancellationToken()
    started = asyncio.Event()

    async def operation():
        started.set()
        await asyncio.sleep(60)

    async def cancel_soon():
        await started.wait()
        token.cancel()

    canceller = asyncio.ensure_future(cancel_soon())
    with pytest.raises(CancelledError):
        await asyncio.wait_for(do_with_retry(operation, cfg, token), timeout=5)
    await canceller
