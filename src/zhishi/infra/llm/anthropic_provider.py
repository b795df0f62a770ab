"""Anthropic completion provider for zhishi.

Alternative to the GLM provider for deployments that point the
application at Claude instead. Same single-request contract.
"""

from typing import Any, Self

from anthropic import APIError, APIStatusError, AsyncAnthropic

from zhishi.config import LLMSettings
from zhishi.exceptions import RemoteCallError
from zhishi.interfaces.llm import CompletionInterface
from zhishi.logging import get_logger
from zhishi.utils.timing import PerformanceMonitor, performance_monitor

__all__ = [
    "AnthropicProvider",
]

logger = get_logger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


class AnthropicProvider(CompletionInterface):
    """Anthropic implementation of the completion interface."""

    config_class = LLMSettings

    def __init__(
        self,
        settings: LLMSettings,
        client: AsyncAnthropic | None = None,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        """Initialize Anthropic provider.

        Args:
            settings: LLM configuration settings
            client: Pre-built SDK client (tests inject a fake here)
            monitor: Timing monitor (defaults to the shared one)
        """
        self._settings = settings
        if client is None:
            api_key = settings.api_key.get_secret_value() if settings.api_key else None
            client_kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
            if settings.timeout is not None:
                client_kwargs["timeout"] = settings.timeout
            client = AsyncAnthropic(**client_kwargs)
        self._client = client
        # The GLM default model name means nothing to Anthropic
        model = settings.model
        self._model = model if model.startswith("claude") else DEFAULT_ANTHROPIC_MODEL
        self._monitor = monitor or performance_monitor

    @classmethod
    async def from_config(cls, config: LLMSettings) -> Self:
        """Factory method for Zhishi instantiation."""
        return cls(config)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict."""
        return cls(LLMSettings(**config))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    async def complete(self, prompt: str) -> str:
        """Send prompt as a single user turn and return the first text block."""
        return await self._monitor.measure_async("llm_completion", lambda: self._request(prompt))

    async def _request(self, prompt: str) -> str:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._settings.max_tokens,
                temperature=self._settings.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            logger.warning("completion_http_error", status=e.status_code, error=str(e))
            raise RemoteCallError(
                f"completion endpoint returned {e.status_code}", status_code=e.status_code
            ) from e
        except APIError as e:
            logger.warning("completion_transport_error", error=str(e))
            raise RemoteCallError(f"completion request failed: {e}") from e

        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text

        raise RemoteCallError("completion response contained no text block")
