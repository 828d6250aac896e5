"""Unit tests for the retrying generation invoker."""
import pytest

from stockllm.services.gemini_exceptions import GeminiAPIError, GeminiOverloadedError
from stockllm.services.retry import (
    AttemptOutcome,
    RetryingInvoker,
    run_attempt,
)


class ScriptedGenerator:
    """Raises or returns the scripted values in order."""

    def __init__(self, *script):
        self.script = list(script)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def sleeps():
    return []


class TestRetryingInvoker:
    """Test RetryingInvoker."""

    def test_two_overloads_then_success(self, sleeps):
        """Two 503s followed by success return the text after sleeping twice."""
        generate = ScriptedGenerator(
            GeminiOverloadedError("overloaded"),
            GeminiOverloadedError("overloaded"),
            "report text",
        )
        invoker = RetryingInvoker(max_attempts=3, delay=3.0, sleep=sleeps.append)

        assert invoker.invoke(generate) == "report text"
        assert generate.calls == 3
        assert sleeps == [3.0, 3.0]

    def test_success_first_time_never_sleeps(self, sleeps):
        generate = ScriptedGenerator("ok")
        invoker = RetryingInvoker(max_attempts=3, delay=1.0, sleep=sleeps.append)

        assert invoker.invoke(generate) == "ok"
        assert sleeps == []

    def test_fatal_error_is_not_retried(self, sleeps):
        """Anything other than an overload propagates on the first attempt."""
        generate = ScriptedGenerator(GeminiAPIError("bad request", status_code=400), "never")
        invoker = RetryingInvoker(max_attempts=3, delay=1.0, sleep=sleeps.append)

        with pytest.raises(GeminiAPIError) as exc_info:
            invoker.invoke(generate)

        assert exc_info.value.status_code == 400
        assert generate.calls == 1
        assert sleeps == []

    def test_exhausted_attempts_raise_last_overload(self, sleeps):
        last = GeminiOverloadedError("third")
        generate = ScriptedGenerator(
            GeminiOverloadedError("first"),
            GeminiOverloadedError("second"),
            last,
        )
        invoker = RetryingInvoker(max_attempts=3, delay=2.5, sleep=sleeps.append)

        with pytest.raises(GeminiOverloadedError) as exc_info:
            invoker.invoke(generate)

        assert exc_info.value is last
        assert generate.calls == 3
        assert sleeps == [2.5, 2.5]

    def test_overload_then_fatal_stops(self, sleeps):
        generate = ScriptedGenerator(GeminiOverloadedError("busy"), ValueError("boom"))
        invoker = RetryingInvoker(max_attempts=5, delay=1.0, sleep=sleeps.append)

        with pytest.raises(ValueError):
            invoker.invoke(generate)

        assert generate.calls == 2
        assert sleeps == [1.0]

    def test_single_attempt_does_not_sleep(self, sleeps):
        generate = ScriptedGenerator(GeminiOverloadedError("busy"))
        invoker = RetryingInvoker(max_attempts=1, delay=1.0, sleep=sleeps.append)

        with pytest.raises(GeminiOverloadedError):
            invoker.invoke(generate)

        assert sleeps == []

    def test_custom_transient_predicate(self, sleeps):
        generate = ScriptedGenerator(ConnectionError("reset"), "ok")
        invoker = RetryingInvoker(
            max_attempts=2,
            delay=0.5,
            is_transient=lambda exc: isinstance(exc, ConnectionError),
            sleep=sleeps.append,
        )

        assert invoker.invoke(generate) == "ok"
        assert sleeps == [0.5]

    @pytest.mark.parametrize("max_attempts", [0, -1])
    def test_rejects_non_positive_attempts(self, max_attempts):
        with pytest.raises(ValueError):
            RetryingInvoker(max_attempts=max_attempts)


class TestRunAttempt:
    """Test single attempt classification."""

    def test_success(self):
        result = run_attempt(lambda: "text")
        assert result.outcome is AttemptOutcome.SUCCESS
        assert result.unwrap() == "text"
        assert not result.should_retry

    def test_overload_is_transient(self):
        result = run_attempt(ScriptedGenerator(GeminiOverloadedError("busy")))
        assert result.outcome is AttemptOutcome.TRANSIENT
        assert result.should_retry

    def test_other_error_is_fatal(self):
        result = run_attempt(ScriptedGenerator(GeminiAPIError("server", status_code=500)))
        assert result.outcome is AttemptOutcome.FATAL
        with pytest.raises(GeminiAPIError):
            result.unwrap()
