import pytest
import pybreaker

from nl2cosmos.common.errors import StoreError
from nl2cosmos.common.resilience import (
    create_llm_breaker,
    create_store_breaker,
    is_client_store_error,
)


class TestBreakers:

    def test_names_and_thresholds(self):
        llm = create_llm_breaker(fail_max=3, reset_timeout=10)
        store = create_store_breaker(fail_max=4, reset_timeout=20)

        assert llm.name == "LLM_BREAKER"
        assert llm.fail_max == 3
        assert store.name == "STORE_BREAKER"
        assert store.reset_timeout == 20

    def test_breakers_are_independent(self):
        first = create_store_breaker(fail_max=1)
        second = create_store_breaker(fail_max=1)

        def outage():
            raise StoreError("Service unavailable", status_code=503)

        with pytest.raises((StoreError, pybreaker.CircuitBreakerError)):
            first.call(outage)

        assert first.current_state == "open"
        assert second.current_state == "closed"

    @pytest.mark.parametrize("status, expected", [
        (400, True),
        (404, True),
        (408, False),
        (429, False),
        (503, False),
        (None, False),
    ])
    def test_client_store_errors(self, status, expected):
        assert is_client_store_error(StoreError("x", status_code=status)) is expected

    def test_other_exceptions_are_not_client_errors(self):
        assert is_client_store_error(ValueError("x")) is False
