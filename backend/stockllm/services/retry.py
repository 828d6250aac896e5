"""Bounded retry for Gemini generation calls.

Gemini's dominant transient failure is a 503 "model is overloaded" response.
Those are retried a small fixed number of times with a fixed delay; anything
else is surfaced straight away.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from stockllm.services.gemini_exceptions import GeminiOverloadedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 3.0  # seconds


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of a single call to the generator."""

    outcome: AttemptOutcome
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def should_retry(self) -> bool:
        return self.outcome is AttemptOutcome.TRANSIENT

    def unwrap(self) -> Any:
        """Return the generated value or raise the captured error."""
        if self.outcome is AttemptOutcome.SUCCESS:
            return self.value
        raise self.error


def is_transient_overload(exc: BaseException) -> bool:
    """Only an overloaded (503) upstream is worth waiting for."""
    return isinstance(exc, GeminiOverloadedError)


def run_attempt(
    generate_fn: Callable[[], Any],
    is_transient: Callable[[BaseException], bool] = is_transient_overload,
) -> AttemptResult:
    """Call ``generate_fn`` once and classify what happened."""
    try:
        return AttemptResult(AttemptOutcome.SUCCESS, value=generate_fn())
    except Exception as exc:
        outcome = AttemptOutcome.TRANSIENT if is_transient(exc) else AttemptOutcome.FATAL
        return AttemptResult(outcome, error=exc)


class RetryingInvoker:
    """Calls a generator up to ``max_attempts`` times, sleeping ``delay`` between overloads."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY,
        is_transient: Callable[[BaseException], bool] = is_transient_overload,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the invoker.

        Args:
            max_attempts: Total number of calls allowed, including the first
            delay: Fixed wait in seconds between a transient failure and the next call
            is_transient: Predicate deciding whether a failure may be retried
            sleep: Sleep function, replaceable in tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.max_attempts = max_attempts
        self.delay = delay
        self.is_transient = is_transient
        self.sleep = sleep

    def invoke(self, generate_fn: Callable[[], Any]) -> Any:
        """
        Run ``generate_fn`` until it succeeds, fails fatally or attempts run out.

        Returns:
            Whatever ``generate_fn`` returned on its first successful call

        Raises:
            The fatal error as soon as it happens, or the last transient error
            once every attempt has been used.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.delay),
            retry=retry_if_result(lambda result: result.should_retry),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
            sleep=self.sleep,
        )
        result = retrying(run_attempt, generate_fn, self.is_transient)

        if result.outcome is AttemptOutcome.TRANSIENT:
            logger.error(
                "Generation still overloaded after %s attempts: %s",
                self.max_attempts,
                result.error,
            )
        return result.unwrap()
