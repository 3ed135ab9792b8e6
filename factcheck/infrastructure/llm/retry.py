"""
Bounded exponential-backoff retry for external calls.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ...config import RETRY_BASE_DELAY, RETRY_MAX_ATTEMPTS
from ...errors import RateLimitExceededError

logger = logging.getLogger("resilient_invoker")

T = TypeVar("T")

RESOURCE_EXHAUSTED_MARKER = "RESOURCE_EXHAUSTED"
RETRYABLE_STATUSES = (429, 503)


@dataclass(frozen=True)
class InvocationPolicy:
    """Retry budget for one call site."""
    max_attempts: int = RETRY_MAX_ATTEMPTS
    base_delay: float = RETRY_BASE_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")

    def delay_for(self, attempt_index: int) -> float:
        """Backoff before the retry that follows attempt ``attempt_index`` (0-based)."""
        return self.base_delay * (2 ** attempt_index)


def error_status(error: BaseException) -> Optional[int]:
    """Best-effort HTTP status of an exception."""
    for attr in ("status", "status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_rate_limit(error: BaseException) -> bool:
    return error_status(error) == 429 or RESOURCE_EXHAUSTED_MARKER in str(error)


def is_retryable(error: BaseException) -> bool:
    return error_status(error) in RETRYABLE_STATUSES or RESOURCE_EXHAUSTED_MARKER in str(error)


class ResilientInvoker:
    """Runs an operation, retrying transient failures with exponential backoff."""

    def __init__(self,
                 policy: Optional[InvocationPolicy] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.policy = policy or InvocationPolicy()
        self._sleep = sleep

    def invoke(self, operation: Callable[[], T], policy: Optional[InvocationPolicy] = None) -> T:
        """
        Call ``operation`` until it succeeds or the retry budget is spent.

        The whole operation is repeated on retry, so it must be safe to repeat.

        Args:
            operation: Zero-argument callable performing one external call
            policy: Overrides the invoker's default policy for this call site

        Returns:
            Whatever the operation returns

        Raises:
            RateLimitExceededError: Last failure was a rate-limit condition
            Exception: Any other last failure, re-raised unchanged
        """
        policy = policy or self.policy
        last_error: Optional[Exception] = None

        for attempt in range(policy.max_attempts):
            try:
                return operation()
            except Exception as e:  # noqa: BLE001 - classified below, re-raised unchanged
                last_error = e
                if is_retryable(e) and attempt < policy.max_attempts - 1:
                    delay = policy.delay_for(attempt)
                    logger.warning("Attempt %d/%d failed (%s); retrying in %.1fs",
                                   attempt + 1, policy.max_attempts, e, delay)
                    self._sleep(delay)
                    continue
                break

        if is_rate_limit(last_error):
            logger.error("Rate limit persisted after retries: %s", last_error)
            raise RateLimitExceededError() from last_error
        logger.error("Call failed: %s", last_error)
        raise last_error
