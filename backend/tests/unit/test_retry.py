"""Unit tests for retry_with_backoff and error classification."""

import httpx
import pytest

from recipe_ai.models import MalformedResponseError, UpstreamError
from recipe_ai.utils.retry import (
    backoff_delay,
    error_status_code,
    is_retryable_error,
    retry_with_backoff,
)


class CountingOperation:
    """Zero-argument async callable that replays a list of outcomes."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class CodedError(Exception):
    def __init__(self, code: int) -> None:
        super().__init__(f"code {code}")
        self.code = code


class TestErrorClassification:
    """Tests for status code extraction."""

    @pytest.mark.parametrize("status", [429, 500, 503])
    def test_transient_statuses_are_retryable(self, status: int) -> None:
        assert is_retryable_error(UpstreamError(status, "boom"))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 502])
    def test_other_statuses_are_not_retryable(self, status: int) -> None:
        assert not is_retryable_error(UpstreamError(status, "boom"))

    def test_errors_without_status_are_not_retryable(self) -> None:
        assert not is_retryable_error(ValueError("bad"))
        assert not is_retryable_error(MalformedResponseError("no json"))
        assert not is_retryable_error(TimeoutError())
        assert not is_retryable_error(UpstreamError(None, "unknown"))

    def test_code_attribute(self) -> None:
        assert error_status_code(CodedError(500)) == 500
        assert is_retryable_error(CodedError(429))

    def test_httpx_status_error(self) -> None:
        request = httpx.Request("POST", "https://api.example.com/v1/generate")
        exc = httpx.HTTPStatusError("unavailable", request=request, response=httpx.Response(503, request=request))
        assert error_status_code(exc) == 503
        assert is_retryable_error(exc)

    def test_upstream_error_str(self) -> None:
        assert str(UpstreamError(429, "slow down", "Groq")) == "[Groq] 429: slow down"
        assert UpstreamError(503, "down").retryable
        assert not UpstreamError(400, "bad").retryable


class TestBackoffDelay:
    """Tests for the delay schedule."""

    def test_exponential_without_jitter(self) -> None:
        assert [backoff_delay(a, 1.0, 0) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_jitter_bounds(self) -> None:
        for _ in range(50):
            delay = backoff_delay(2, 0.5, 1.0)
            assert 2.0 <= delay <= 3.0


class TestRetryWithBackoff:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, sleeper) -> None:
        op = CountingOperation("ok")
        assert await retry_with_backoff(op, 3, sleep=sleeper) == "ok"
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, sleeper) -> None:
        op = CountingOperation(UpstreamError(503, "down"), UpstreamError(429, "slow"), "ok")
        assert await retry_with_backoff(op, 3, sleep=sleeper) == "ok"
        assert op.calls == 3
        assert len(sleeper.delays) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, sleeper) -> None:
        op = CountingOperation(UpstreamError(503, "down"))
        with pytest.raises(UpstreamError) as exc_info:
            await retry_with_backoff(op, 2, sleep=sleeper)

        assert exc_info.value.status_code == 503
        assert op.calls == 3
        assert len(sleeper.delays) == 2
        assert 1.0 <= sleeper.delays[0] <= 2.0
        assert 2.0 <= sleeper.delays[1] <= 3.0

    @pytest.mark.asyncio
    async def test_zero_retries_calls_once(self, sleeper) -> None:
        op = CountingOperation(UpstreamError(500, "oops"))
        with pytest.raises(UpstreamError):
            await retry_with_backoff(op, 0, sleep=sleeper)
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_permanent_upstream_error_is_not_retried(self, sleeper) -> None:
        op = CountingOperation(UpstreamError(400, "bad request"))
        with pytest.raises(UpstreamError):
            await retry_with_backoff(op, 3, sleep=sleeper)
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_non_upstream_error_is_not_retried(self, sleeper) -> None:
        op = CountingOperation(MalformedResponseError("no json"))
        with pytest.raises(MalformedResponseError):
            await retry_with_backoff(op, 3, sleep=sleeper)
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_custom_base_delay(self, sleeper) -> None:
        op = CountingOperation(UpstreamError(429, "slow"), "ok")
        await retry_with_backoff(op, 1, base_delay=0.1, max_jitter=0, sleep=sleeper)
        assert sleeper.delays == [pytest.approx(0.1)]

    @pytest.mark.asyncio
    async def test_negative_max_retries_rejected(self, sleeper) -> None:
        with pytest.raises(ValueError):
            await retry_with_backoff(CountingOperation("ok"), -1, sleep=sleeper)
