"""
Resilience Module: Circuit Breakers and Fault Tolerance.

Breakers let the engine fail fast when the completion service or the document
store keeps failing. They are created per engine instance and injected into the
collaborators that call out, so no breaker state is shared between engines.
"""
import pybreaker
from typing import Any, Callable, List, Optional, Union

from nl2cosmos.common.errors import StoreError
from nl2cosmos.common.logger import get_logger

logger = get_logger("resilience")

Exclusion = Union[type, Callable[[BaseException], bool]]


class ObservabilityListener(pybreaker.CircuitBreakerListener):
    """Listener to export circuit breaker state changes and failures to logs."""

    def state_change(self, cb, old_state, new_state):
        old_name = old_state.name if old_state else "none"
        logger.warning(
            f"Circuit Breaker '{cb.name}' changed state: {old_name} -> {new_state.name}"
        )

    def failure(self, cb, exc):
        logger.error(
            f"Circuit Breaker '{cb.name}' recorded failure: {type(exc).__name__}: {exc}"
        )


def create_breaker(
    name: str,
    fail_max: int = 5,
    reset_timeout: int = 60,
    exclude: Optional[List[Exclusion]] = None
) -> pybreaker.CircuitBreaker:
    """Factory to create a configured Circuit Breaker."""
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=name,
        listeners=[ObservabilityListener()],
        exclude=exclude or []
    )


def is_client_store_error(exc: BaseException) -> bool:
    """Store errors caused by the query itself (4xx other than timeout/throttle) are not outages."""
    if not isinstance(exc, StoreError) or exc.status_code is None:
        return False
    return 400 <= exc.status_code < 500 and exc.status_code not in (408, 429)


def _llm_excludes() -> List[Exclusion]:
    # Soft failures (rate limits, auth, bad requests) should not open the breaker.
    excludes: List[Exclusion] = []
    try:
        from openai import RateLimitError, AuthenticationError, BadRequestError
        excludes.extend([RateLimitError, AuthenticationError, BadRequestError])
    except ImportError:
        pass
    return excludes


def create_llm_breaker(fail_max: int = 5, reset_timeout: int = 60) -> pybreaker.CircuitBreaker:
    return create_breaker(
        name="LLM_BREAKER",
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        exclude=_llm_excludes(),
    )


def create_store_breaker(fail_max: int = 5, reset_timeout: int = 30) -> pybreaker.CircuitBreaker:
    return create_breaker(
        name="STORE_BREAKER",
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        exclude=[is_client_store_error],
    )
