"""
Resilience service for retry logic and circuit breakers around backend API calls.
"""

import time
import random
from typing import Callable, Any, Dict, Optional
from datetime import datetime
from enum import Enum
import threading

from infrastructure.external.errors import (
    NetworkError,
    ServerError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Transient failures: the same request may succeed a moment later
RETRIABLE_ERRORS = (
    NetworkError,
    ServerError,
)

# Permanent failures: retrying cannot change the answer
NON_RETRIABLE_ERRORS = (
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)


def exponential_backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (2 ** attempt), max_delay)

    # Jitter keeps several dashboards from hammering a recovering backend in lockstep
    jitter = random.uniform(0, 0.1 * delay)

    return delay + jitter


class CircuitBreakerState(Enum):
    """Circuit breaker states"""
    CLOSED = "closed"      # Normal operation, requests pass through
    OPEN = "open"          # Circuit is open, requests are blocked
    HALF_OPEN = "half_open"  # Testing if service has recovered


class CircuitBreakerError(NetworkError):
    """Raised instead of calling the backend while the circuit is open"""


class CircuitBreaker:
    """
    Circuit breaker implementation for backend API calls

    States:
    - CLOSED: Normal operation, all requests pass through
    - OPEN: Circuit is open, requests fail fast without hitting the API
    - HALF_OPEN: Testing recovery, limited requests allowed through
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 30,
        expected_exception: tuple = RETRIABLE_ERRORS,
        name: str = "CircuitBreaker"
    ):
        """
        Initialize circuit breaker

        Args:
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before attempting recovery
            expected_exception: Exceptions that count as failures
            name: Name for logging and identification
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name

        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = CircuitBreakerState.CLOSED

        self._lock = threading.Lock()

        logger.debug(f"CircuitBreaker '{name}' initialized with threshold={failure_threshold}, timeout={recovery_timeout}s")

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to attempt recovery"""
        if self.last_failure_time is None:
            return False

        time_since_failure = datetime.now() - self.last_failure_time
        return time_since_failure.total_seconds() >= self.recovery_timeout

    def _record_success(self):
        with self._lock:
            self.failure_count = 0
            self.success_count += 1

            if self.state == CircuitBreakerState.HALF_OPEN:
                self.state = CircuitBreakerState.CLOSED
                logger.info(f"CircuitBreaker '{self.name}' recovered - state: CLOSED")

    def _record_failure(self, exception: Exception):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = datetime.now()

            if self.state == CircuitBreakerState.HALF_OPEN:
                self.state = CircuitBreakerState.OPEN
                logger.warning(f"CircuitBreaker '{self.name}' recovery failed - state: OPEN")

            elif self.state == CircuitBreakerState.CLOSED and self.failure_count >= self.failure_threshold:
                self.state = CircuitBreakerState.OPEN
                logger.warning(
                    f"CircuitBreaker '{self.name}' opened - failures: {self.failure_count}, "
                    f"last error: {exception.__class__.__name__}"
                )

    def can_execute(self) -> bool:
        """Check if a request can be executed"""
        with self._lock:
            if self.state == CircuitBreakerState.CLOSED:
                return True

            if self.state == CircuitBreakerState.OPEN:
                if self._should_attempt_reset():
                    self.state = CircuitBreakerState.HALF_OPEN
                    logger.info(f"CircuitBreaker '{self.name}' attempting recovery - state: HALF_OPEN")
                    return True
                return False

            # HALF_OPEN lets one trial request through
            return True

    def execute(self, func: Callable) -> Any:
        """
        Execute a function with circuit breaker protection

        Args:
            func: Function to execute

        Returns:
            Function result if successful

        Raises:
            CircuitBreakerError: If circuit is open
            Original exception: If function fails
        """
        if not self.can_execute():
            remaining_time = self.recovery_timeout
            if self.last_failure_time:
                elapsed = (datetime.now() - self.last_failure_time).total_seconds()
                remaining_time = max(0, self.recovery_timeout - elapsed)

            raise CircuitBreakerError(
                f"Backend appears to be down. Retry in {remaining_time:.0f}s."
            )

        try:
            result = func()
        except self.expected_exception as e:
            self._record_failure(e)
            raise

        self._record_success()
        return result

    def get_state(self) -> dict:
        """Get current circuit breaker state for monitoring"""
        with self._lock:
            remaining_timeout = 0
            if self.last_failure_time and self.state == CircuitBreakerState.OPEN:
                elapsed = (datetime.now() - self.last_failure_time).total_seconds()
                remaining_timeout = max(0, self.recovery_timeout - elapsed)

            return {
                "name": self.name,
                "state": self.state.value,
                "failure_count": self.failure_count,
                "success_count": self.success_count,
                "failure_threshold": self.failure_threshold,
                "remaining_timeout": remaining_timeout,
                "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None
            }

    def reset(self):
        """Manually reset the circuit breaker to CLOSED state"""
        with self._lock:
            self.state = CircuitBreakerState.CLOSED
            self.failure_count = 0
            self.last_failure_time = None
            logger.info(f"CircuitBreaker '{self.name}' manually reset - state: CLOSED")


class RetryService:
    """
    Retry logic and named circuit breakers for outbound calls.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self.logger = get_logger(__name__)
        self._sleep = sleep
        self._circuit_breakers: Dict[str, CircuitBreaker] = {}

    def create_circuit_breaker(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: int = 30,
        expected_exception: tuple = RETRIABLE_ERRORS
    ) -> CircuitBreaker:
        """Create and register a new circuit breaker"""
        circuit_breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
            expected_exception=expected_exception,
            name=name
        )
        self._circuit_breakers[name] = circuit_breaker
        return circuit_breaker

    def get_circuit_breaker(self, name: str) -> Optional[CircuitBreaker]:
        """Get an existing circuit breaker by name"""
        return self._circuit_breakers.get(name)

    def retry_with_backoff(
        self,
        func: Callable,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        on_retry: Optional[Callable[[int, Exception], None]] = None
    ) -> Any:
        """
        Execute a function with retry logic and exponential backoff

        Args:
            func: Function to execute
            max_retries: Maximum number of retry attempts
            base_delay: Base delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            on_retry: Optional callback for retry events (attempt_number, exception)

        Returns:
            Function result if successful

        Raises:
            The last exception if all retries are exhausted
        """
        for attempt in range(max_retries + 1):  # +1 for initial attempt
            try:
                result = func()

                if attempt > 0:
                    self.logger.info(f"Request succeeded after {attempt} retries")

                return result

            except CircuitBreakerError:
                # Retrying an open circuit only burns the backoff budget
                raise

            except RETRIABLE_ERRORS as e:
                if attempt == max_retries:
                    self.logger.error(f"Request failed after {max_retries} retries: {str(e)}")
                    raise

                delay = exponential_backoff_delay(attempt, base_delay, max_delay)

                self.logger.warning(f"Attempt {attempt + 1} failed ({e.__class__.__name__}), retrying in {delay:.2f}s")

                if on_retry:
                    on_retry(attempt + 1, e)

                self._sleep(delay)

            except NON_RETRIABLE_ERRORS as e:
                self.logger.debug(f"Non-retriable error encountered: {e.__class__.__name__}: {str(e)}")
                raise

    def retry_with_circuit_breaker(
        self,
        func: Callable,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        on_retry: Optional[Callable[[int, Exception], None]] = None
    ) -> Any:
        """
        Execute a function with both retry logic and circuit breaker protection

        Args:
            func: Function to execute
            max_retries: Maximum number of retry attempts
            base_delay: Base delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            circuit_breaker: Circuit breaker instance (the API breaker when None)
            on_retry: Optional callback for retry events

        Returns:
            Function result if successful

        Raises:
            CircuitBreakerError: If circuit breaker is open
            The last exception if all retries are exhausted
        """
        if circuit_breaker is None:
            circuit_breaker = self.get_api_circuit_breaker()

        def wrapped_func():
            return circuit_breaker.execute(func)

        return self.retry_with_backoff(
            wrapped_func,
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay,
            on_retry=on_retry
        )

    def get_api_circuit_breaker(self) -> CircuitBreaker:
        """Get or create the backend API circuit breaker"""
        if "backend_api" not in self._circuit_breakers:
            self.create_circuit_breaker(
                name="backend_api",
                failure_threshold=5,
                recovery_timeout=30,
                expected_exception=RETRIABLE_ERRORS
            )
        return self._circuit_breakers["backend_api"]


# Global retry service instance
_retry_service: Optional[RetryService] = None


def get_retry_service() -> RetryService:
    """Get the global retry service instance"""
    global _retry_service
    if _retry_service is None:
        _retry_service = RetryService()
    return _retry_service


def get_api_circuit_breaker() -> CircuitBreaker:
    """Get the backend API circuit breaker"""
    return get_retry_service().get_api_circuit_breaker()


def retry_with_circuit_breaker(
    func: Callable,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    circuit_breaker: Optional[CircuitBreaker] = None,
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> Any:
    """Execute function with retry and circuit breaker using the global service"""
    return get_retry_service().retry_with_circuit_breaker(
        func, max_retries, base_delay, max_delay, circuit_breaker, on_retry
    )
