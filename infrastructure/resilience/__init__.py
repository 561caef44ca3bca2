"""
Resilience infrastructure - retry logic and circuit breakers for backend calls.
"""

from .retry_service import (
    RetryService,
    CircuitBreaker,
    CircuitBreakerState,
    CircuitBreakerError,
    RETRIABLE_ERRORS,
    NON_RETRIABLE_ERRORS,
    get_retry_service,
    get_api_circuit_breaker,
    retry_with_circuit_breaker,
    exponential_backoff_delay
)

__all__ = [
    'RetryService',
    'CircuitBreaker',
    'CircuitBreakerState',
    'CircuitBreakerError',
    'RETRIABLE_ERRORS',
    'NON_RETRIABLE_ERRORS',
    'get_retry_service',
    'get_api_circuit_breaker',
    'retry_with_circuit_breaker',
    'exponential_backoff_delay'
]
