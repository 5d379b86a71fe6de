"""
Circuit Breaker for the intent classifier's model calls.

After repeated failures the circuit opens and classification goes straight
to the heuristic fallback until the recovery timeout elapses.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from lead_scoring.config import get_settings
from lead_scoring.utils.metrics import metrics
from lead_scoring.utils.observability import logger

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"        # Calls flow through
    OPEN = "open"            # Calls short-circuit to the fallback
    HALF_OPEN = "half_open"  # Probing whether the backend recovered


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CircuitStats:
    consecutive_failures: int = 0
    total_failures: int = 0
    total_successes: int = 0
    short_circuited: int = 0
    last_failure_time: Optional[datetime] = None
    last_success_time: Optional[datetime] = None
    opened_at: Optional[datetime] = None
    state_changes: int = 0

    def success(self) -> None:
        self.consecutive_failures = 0
        self.total_successes += 1
        self.last_success_time = _now()

    def failure(self) -> None:
        self.consecutive_failures += 1
        self.total_failures += 1
        self.last_failure_time = _now()


class CircuitBreaker:
    """
    Closed -> open after `failure_threshold` consecutive failures,
    open -> half-open after `recovery_timeout` seconds,
    half-open -> closed on the first successful probe (or back to open on failure).

    Usage:
        breaker = CircuitBreaker(name="llm")
        result = await breaker.call_with_fallback(call_model, lambda: heuristic_result)
    """

    def __init__(
        self,
        name: str,
        failure_threshold: Optional[int] = None,
        recovery_timeout: Optional[float] = None,
        half_open_max_calls: Optional[int] = None,
    ):
        settings = get_settings()
        self.name = name
        self.failure_threshold = failure_threshold or settings.circuit_breaker_failure_threshold
        self.recovery_timeout = recovery_timeout or settings.circuit_breaker_recovery_timeout
        self.half_open_max_calls = half_open_max_calls or settings.circuit_breaker_half_open_max_calls

        self._state = CircuitState.CLOSED
        self._stats = CircuitStats()
        self._probes_in_flight = 0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def stats(self) -> CircuitStats:
        return self._stats

    async def _admit(self) -> bool:
        """Whether a call may reach the backend right now."""
        async with self._lock:
            if self._state == CircuitState.OPEN and self._recovery_due():
                self._set_state(CircuitState.HALF_OPEN)
                self._probes_in_flight = 0

            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.HALF_OPEN and self._probes_in_flight < self.half_open_max_calls:
                self._probes_in_flight += 1
                return True

            self._stats.short_circuited += 1
            logger.warning(f"⚡ {self.name}: {self._state.value}, short-circuiting to fallback")
            return False

    def _recovery_due(self) -> bool:
        if self._stats.opened_at is None:
            return False
        return (_now() - self._stats.opened_at).total_seconds() >= self.recovery_timeout

    async def call(
        self,
        func: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """
        Run `func` if the circuit admits it, otherwise return `fallback()`.

        Exceptions from `func` are recorded and re-raised.
        """
        if not await self._admit():
            return fallback()

        # The backend call runs outside the lock so concurrent scoring is not serialized
        try:
            result = await func()
        except Exception as e:
            await self._on_failure(e)
            raise

        await self._on_success()
        return result

    async def call_with_fallback(
        self,
        func: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """Like call(), but any exception also resolves to the fallback. Never raises."""
        try:
            return await self.call(func, fallback)
        except Exception as e:
            logger.error(f"⚡ {self.name}: call raised {type(e).__name__}, serving fallback")
            return fallback()

    async def _on_success(self) -> None:
        async with self._lock:
            self._stats.success()
            if self._state == CircuitState.HALF_OPEN:
                logger.info(f"⚡ {self.name}: probe succeeded")
                self._set_state(CircuitState.CLOSED)

    async def _on_failure(self, error: Exception) -> None:
        async with self._lock:
            self._stats.failure()
            logger.warning(
                f"⚡ {self.name}: failure {self._stats.consecutive_failures}/{self.failure_threshold} ({error})"
            )

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(f"⚡ {self.name}: probe failed")
                self._set_state(CircuitState.OPEN)
            elif self._stats.consecutive_failures >= self.failure_threshold:
                logger.error(f"⚡ {self.name}: {self.failure_threshold} consecutive failures")
                self._set_state(CircuitState.OPEN)

    def _set_state(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state
        self._stats.state_changes += 1

        if new_state == CircuitState.OPEN:
            self._stats.opened_at = _now()

        metrics.circuit_transitions.inc(circuit=self.name, state=new_state.value)
        logger.info(f"⚡ {self.name}: {old_state.value} → {new_state.value}")

    async def reset(self) -> None:
        """Manually close the circuit."""
        async with self._lock:
            self._set_state(CircuitState.CLOSED)
            self._stats.consecutive_failures = 0
            self._probes_in_flight = 0

    async def force_open(self) -> None:
        """Manually open the circuit (tests, maintenance)."""
        async with self._lock:
            self._set_state(CircuitState.OPEN)

    def get_status(self) -> dict:
        return {
            "name": self.name,
            "state": self._state.value,
            "consecutive_failures": self._stats.consecutive_failures,
            "total_failures": self._stats.total_failures,
            "total_successes": self._stats.total_successes,
            "short_circuited": self._stats.short_circuited,
            "failure_threshold": self.failure_threshold,
            "recovery_timeout_seconds": self.recovery_timeout,
            "opened_at": self._stats.opened_at.isoformat() if self._stats.opened_at else None,
        }


_llm_circuit: Optional[CircuitBreaker] = None


def get_llm_circuit() -> CircuitBreaker:
    """Get or create the circuit shared by all model-backed classifiers."""
    global _llm_circuit
    if _llm_circuit is None:
        _llm_circuit = CircuitBreaker(name="llm")
    return _llm_circuit
