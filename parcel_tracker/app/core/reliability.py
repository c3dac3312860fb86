"""
Reliability utilities.

Circuit breaker guarding calls to the image storage backend, so a dead
disk or bucket fails uploads fast instead of tying up workers.
"""

import logging
import time
from typing import Callable, Any

from parcel_tracker.app.core.config import settings

logger = logging.getLogger(__name__)


class CircuitOpenError(Exception):
    pass


class CircuitState:
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    After `failure_threshold` consecutive failures the circuit opens and
    rejects calls for `reset_timeout` seconds. The next call after that is
    a trial: success closes the circuit, failure opens it again.
    """

    def __init__(self, name: str, failure_threshold: int = 5, reset_timeout: float = 60):
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.failures = 0
        self.last_failure_time = 0.0
        self.state = CircuitState.CLOSED

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        if self.state == CircuitState.OPEN:
            if time.monotonic() - self.last_failure_time <= self.reset_timeout:
                raise CircuitOpenError(f"{self.name} circuit is open")
            self.state = CircuitState.HALF_OPEN
            logger.info("Circuit %s half-open, trying one call", self.name)

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise

        if self.state == CircuitState.HALF_OPEN:
            logger.info("Circuit %s closed", self.name)
        self.reset_state()
        return result

    def record_failure(self) -> None:
        self.failures += 1
        self.last_failure_time = time.monotonic()
        if self.state == CircuitState.HALF_OPEN or self.failures >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                logger.warning(
                    "Circuit %s opened", self.name,
                    extra={"failures": self.failures, "reset_timeout": self.reset_timeout}
                )
            self.state = CircuitState.OPEN

    def reset_state(self) -> None:
        self.failures = 0
        self.state = CircuitState.CLOSED


storage_circuit_breaker = CircuitBreaker(
    "image-storage",
    failure_threshold=settings.storage_failure_threshold,
    reset_timeout=settings.storage_reset_timeout,
)
