"""GLM completion provider for zhishi.

The GLM chat-completion endpoint speaks the OpenAI wire format, so this
provider drives it through the OpenAI SDK pointed at the GLM base URL.
"""

from typing import Any, Self

from openai import APIError, APIStatusError, AsyncOpenAI

from zhishi.config import LLMSettings
from zhishi.exceptions import RemoteCallError
from zhishi.interfaces.llm import CompletionInterface
from zhishi.logging import get_logger
from zhishi.utils.timing import PerformanceMonitor, performance_monitor

__all__ = [
    "GLMProvider",
]

logger = get_logger(__name__)


class GLMProvider(CompletionInterface):
    """OpenAI-compatible implementation of the completion interface.

    Sends exactly one request per call: SDK retries are disabled, and
    the only timeout is the optional transport timeout from settings.
    """

    config_class = LLMSettings

    def __init__(
        self,
        settings: LLMSettings,
        client: AsyncOpenAI | None = None,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        """Initialize GLM provider.

        Args:
            settings: LLM configuration settings
            client: Pre-built SDK client (tests inject a fake here)
            monitor: Timing monitor (defaults to the shared one)
        """
        self._settings = settings
        if client is None:
            api_key = settings.api_key.get_secret_value() if settings.api_key else None
            client_kwargs: dict[str, Any] = {
                "api_key": api_key,
                "base_url": settings.base_url,
                "max_retries": 0,
            }
            if settings.timeout is not None:
                client_kwargs["timeout"] = settings.timeout
            client = AsyncOpenAI(**client_kwargs)
        self._client = client
        self._model = settings.model
        self._monitor = monitor or performance_monitor

    @classmethod
    async def from_config(cls, config: LLMSettings) -> Self:
        """Factory method for Zhishi instantiation.

        Args:
            config: LLM settings

        Returns:
            GLMProvider instance
        """
        return cls(config)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with LLM settings

        Returns:
            GLMProvider instance
        """
        return cls(LLMSettings(**config))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    async def complete(self, prompt: str) -> str:
        """Send prompt as a single user turn and return the first choice's text."""
        return await self._monitor.measure_async("llm_completion", lambda: self._request(prompt))

    async def _request(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._settings.temperature,
                max_tokens=self._settings.max_tokens,
            )
        except APIStatusError as e:
            logger.warning("completion_http_error", status=e.status_code, error=str(e))
            raise RemoteCallError(
                f"completion endpoint returned {e.status_code}", status_code=e.status_code
            ) from e
        except APIError as e:
            logger.warning("completion_transport_error", error=str(e))
            raise RemoteCallError(f"completion request failed: {e}") from e

        if not response.choices:
            raise RemoteCallError("completion response contained no choices")

        return response.choices[0].message.content or ""
