"""
LLM Client with Retry Logic & Error Handling
Resilient agent execution: per-attempt timeout, exponential backoff, circuit breaker.
"""
import asyncio
import random
from typing import Any, Callable, TypeVar
from loguru import logger
from pydantic_ai import Agent
from lead_scoring.config import get_settings
from lead_scoring.utils.circuit_breaker import CircuitBreaker, get_llm_circuit, CircuitState

T = TypeVar('T')


class LLMError(Exception):
    """Recoverable LLM errors that should trigger retries."""
    pass


class LLMCriticalError(Exception):
    """Non-recoverable errors (auth failure, invalid prompt, etc.)."""
    pass


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


def _categorize(error: Exception) -> str:
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"

    error_msg = str(error).lower()
    if "rate" in error_msg and "limit" in error_msg:
        return "rate_limit"
    if "timeout" in error_msg or "timed out" in error_msg:
        return "timeout"
    if any(code in error_msg for code in ["500", "502", "503", "504"]):
        return "server_error"
    if "authentication" in error_msg or "api key" in error_msg or "401" in error_msg:
        return "auth"
    if "invalid" in error_msg and "request" in error_msg:
        return "invalid_request"
    return "unknown"


async def run_agent_with_retry(
    agent: Agent,
    prompt: str,
    max_retries: int | None = None,
    timeout_seconds: float | None = None,
) -> Any:
    """
    Executes an agent with a per-attempt timeout and exponential backoff.

    Args:
        agent: The PydanticAI agent to run
        prompt: The prompt to send to the agent
        max_retries: Override default attempt count from settings
        timeout_seconds: Override the per-attempt timeout from settings

    Returns:
        The agent's output

    Raises:
        LLMCriticalError: For non-recoverable failures
        LLMError: After max retries exhausted

    Example:
        >>> agent = Agent('openai:gpt-4o-mini', output_type=str)
        >>> text = await run_agent_with_retry(agent, "Classify this lead")
    """
    settings = get_settings()
    max_attempts = max_retries or settings.max_retries
    timeout = timeout_seconds or settings.classifier_timeout_seconds
    min_wait = settings.retry_min_wait_seconds
    max_wait = settings.retry_max_wait_seconds

    for attempt in range(1, max_attempts + 1):
        try:
            logger.debug(f"LLM attempt {attempt}/{max_attempts}")
            result = await asyncio.wait_for(agent.run(prompt), timeout=timeout)
            return result.output

        except Exception as e:
            error_type = _categorize(e)

            if error_type == "auth":
                logger.error(f"🚨 Authentication failure: {e}")
                raise LLMCriticalError(f"Authentication failed: {e}") from e

            if error_type == "invalid_request":
                logger.error(f"🚨 Invalid request: {e}")
                raise LLMCriticalError(f"Invalid request: {e}") from e

            logger.warning(f"⚠️ {error_type} (attempt {attempt}/{max_attempts}): {_describe(e)}")

            if attempt == max_attempts:
                logger.error(f"❌ Max retries ({max_attempts}) exhausted. Last error: {_describe(e)}")
                raise LLMError(f"Failed after {max_attempts} attempts: {_describe(e)}") from e

            wait_time = min(min_wait * (2 ** (attempt - 1)), max_wait)
            # 20% jitter
            wait_time = wait_time * (0.8 + 0.4 * random.random())

            logger.info(f"⏳ Retrying in {wait_time:.1f}s... (error: {error_type})")
            await asyncio.sleep(wait_time)

    raise LLMError("Unexpected retry loop exit")


async def run_agent_with_circuit_breaker(
    agent: Agent,
    prompt: str,
    fallback_factory: Callable[[], T],
    circuit: CircuitBreaker | None = None,
    on_output: Callable[[Any], T] | None = None,
    deadline_seconds: float | None = None,
) -> T:
    """
    Executes an agent behind the LLM circuit breaker. Never raises.

    `deadline_seconds` (default CLASSIFIER_TIMEOUT_SECONDS) bounds the whole
    retry loop, backoff included; when it expires the fallback is returned.

    `on_output` converts the raw agent output into the caller's type; an
    exception raised there counts as a failed call, so malformed responses
    trip the circuit just like transport errors.
    """
    circuit = circuit or get_llm_circuit()
    deadline = deadline_seconds or get_settings().classifier_timeout_seconds

    async def execute():
        try:
            output = await asyncio.wait_for(run_agent_with_retry(agent, prompt), timeout=deadline)
        except asyncio.TimeoutError as e:
            raise LLMError(f"No answer within {deadline}s") from e
        if on_output is None:
            return output
        return on_output(output)

    return await circuit.call_with_fallback(execute, fallback_factory)


def get_circuit_status() -> dict:
    """Current LLM circuit status for monitoring."""
    return get_llm_circuit().get_status()


def is_circuit_open() -> bool:
    return get_llm_circuit().state == CircuitState.OPEN
