"""
LLM provider and model selection.

This module wraps the OpenAI chat API with:
- Model types for different task complexities
- A per-call timeout
- Mapping of SDK errors onto the LLMError family
- Request metrics

Every call is a single attempt. Retrying is the job of the generation
orchestrator, which also decides when to fall back.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
import asyncio
import logging
import os
import threading
import time

from openai import AsyncOpenAI, APIError, RateLimitError, APIConnectionError

from ..config import get_settings
from ..exceptions import (
    LLMServiceUnavailableError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMResponseInvalidError,
    LLMError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

SERVICE_UNAVAILABLE_STATUS_CODES = {500, 502, 503, 504}


class ModelType(Enum):
    """Model types for different task complexities."""

    FAST = "fast"    # Per-exercise suggestions, cycle picks
    SMART = "smart"


class LLMMetrics:
    """Track LLM usage metrics."""

    def __init__(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.timed_out_requests = 0
        self.total_tokens_input = 0
        self.total_tokens_output = 0
        self._request_times: list[float] = []

    def record_request(
        self,
        success: bool,
        timed_out: bool = False,
        input_tokens: int = 0,
        output_tokens: int = 0,
        duration_ms: Optional[float] = None,
    ) -> None:
        """Record a request."""
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        if timed_out:
            self.timed_out_requests += 1
        self.total_tokens_input += input_tokens
        self.total_tokens_output += output_tokens
        if duration_ms is not None:
            self._request_times.append(duration_ms)
            # Keep only last 100 request times
            if len(self._request_times) > 100:
                self._request_times = self._request_times[-100:]

    @property
    def avg_request_time_ms(self) -> float:
        """Average request time in milliseconds."""
        if not self._request_times:
            return 0.0
        return sum(self._request_times) / len(self._request_times)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "timed_out_requests": self.timed_out_requests,
            "total_tokens_input": self.total_tokens_input,
            "total_tokens_output": self.total_tokens_output,
            "avg_request_time_ms": round(self.avg_request_time_ms, 2),
        }


class LLMClient:
    """
    LLM client with model routing, timeouts and error mapping.

    Raises only ``LLMError`` subclasses.
    """

    def __init__(self, api_key: Optional[str] = None) -> None:
        """
        Initialize the LLM client.

        Args:
            api_key: OpenAI API key (defaults to settings or env var)
        """
        settings = get_settings()
        api_key = api_key or settings.openai_api_key or os.environ.get("OPENAI_API_KEY")

        if not api_key:
            raise LLMServiceUnavailableError(
                message="OPENAI_API_KEY not configured",
                details={"configuration_missing": "openai_api_key"},
            )

        self.client = AsyncOpenAI(api_key=api_key)
        self.model_map = {
            ModelType.FAST: settings.llm_model_fast,
            ModelType.SMART: settings.llm_model_smart,
        }
        self.default_timeout = settings.llm_timeout_seconds
        self.metrics = LLMMetrics()

    def _get_model(self, model_type: ModelType) -> str:
        """Get the model ID for a model type."""
        return self.model_map.get(model_type, self.model_map[ModelType.SMART])

    async def _execute(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: float,
        operation_name: str = "LLM request",
    ) -> T:
        """
        Run one attempt of an operation and map failures.

        Args:
            operation: Async callable to execute
            timeout: Seconds before the attempt is abandoned
            operation_name: Name for logging

        Returns:
            The operation result

        Raises:
            LLMError: On any failure
        """
        start_time = time.time()

        try:
            result = await asyncio.wait_for(operation(), timeout=timeout)

        except asyncio.TimeoutError:
            self.metrics.record_request(success=False, timed_out=True)
            logger.warning(f"{operation_name} timed out after {timeout:.1f}s")
            raise LLMTimeoutError(timeout_seconds=timeout)

        except RateLimitError as e:
            self.metrics.record_request(success=False)
            retry_after = getattr(e, "retry_after", None)
            raise LLMRateLimitError(retry_after=int(retry_after) if retry_after else None)

        except APIConnectionError as e:
            self.metrics.record_request(success=False)
            raise LLMServiceUnavailableError(
                message=f"Connection to LLM service failed: {e}",
            )

        except APIError as e:
            self.metrics.record_request(success=False)
            status = getattr(e, "status_code", None)
            if status in SERVICE_UNAVAILABLE_STATUS_CODES:
                raise LLMServiceUnavailableError(
                    message=f"LLM API error: {e}",
                    details={"status_code": status},
                )
            raise LLMError(
                message=f"LLM API error: {e}",
                details={"status_code": status},
            )

        except LLMError:
            self.metrics.record_request(success=False)
            raise

        except Exception as e:
            self.metrics.record_request(success=False)
            logger.error(f"Unexpected error in {operation_name}: {e}")
            raise LLMError(message=f"Unexpected LLM error: {e}")

        duration_ms = (time.time() - start_time) * 1000
        self.metrics.record_request(success=True, duration_ms=duration_ms)
        return result

    async def completion(
        self,
        system: str,
        user: str,
        model: ModelType = ModelType.FAST,
        max_tokens: int = 1000,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Get a completion from the LLM.

        Args:
            system: System prompt
            user: User message
            model: Model type to use
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)

        Returns:
            The assistant's response text

        Raises:
            LLMError: On failure
        """
        if temperature is None:
            temperature = get_settings().llm_temperature

        async def _make_request() -> str:
            response = await self.client.chat.completions.create(
                model=self._get_model(model),
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
            content = response.choices[0].message.content
            if not content:
                raise LLMResponseInvalidError(message="Empty response from LLM")
            return content

        return await self._execute(
            _make_request,
            timeout=timeout if timeout is not None else self.default_timeout,
            operation_name="completion",
        )

    def get_model_name(self, model_type: ModelType = ModelType.FAST) -> str:
        """Get the model name for a given model type."""
        return self._get_model(model_type)

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.to_dict()


# Singleton instance with thread-safe locking
_llm_client: Optional[LLMClient] = None
_llm_client_lock = threading.Lock()


def get_llm_client() -> LLMClient:
    """
    Get the LLM client singleton (thread-safe).

    Returns:
        The LLM client instance

    Raises:
        LLMServiceUnavailableError: If no API key is configured
    """
    global _llm_client
    if _llm_client is None:
        with _llm_client_lock:
            if _llm_client is None:
                _llm_client = LLMClient()
    return _llm_client


def reset_llm_client() -> None:
    """Reset the LLM client singleton (for testing)."""
    global _llm_client
    with _llm_client_lock:
        _llm_client = None
