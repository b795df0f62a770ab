"""Configuration management for zhishi.

This module provides typed configuration classes using pydantic-settings.
Configuration is loaded from environment variables with optional .env file support.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "LLMSettings",
    "LoggingSettings",
    "RedisSettings",
    "SwipeSettings",
    "ZhishiConfig",
]


class LLMSettings(BaseSettings):
    """Completion endpoint settings.

    The default provider talks to the GLM chat-completion endpoint,
    which speaks the OpenAI wire format.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZHISHI_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "glm"  # "glm" or "anthropic"
    api_key: SecretStr | None = None
    base_url: str = "https://open.bigmodel.cn/api/paas/v4/"
    model: str = "glm-4-flash"
    temperature: float = 0.7
    max_tokens: int = 1000
    # None leaves the transport default in place
    timeout: float | None = None


class RedisSettings(BaseSettings):
    """Redis connection settings (optional).

    If url is not configured or connection fails, an in-process
    store is used instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZHISHI_REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str | None = None
    enabled: bool = True
    key_prefix: str = "zhishi:"


class LoggingSettings(BaseSettings):
    """Log output settings, read when logging is first configured."""

    model_config = SettingsConfigDict(
        env_prefix="ZHISHI_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    json_output: bool = False
    add_timestamp: bool = True
    # Longer string values (model output, prompts) are cut in log entries
    max_value_chars: int = 300


class SwipeSettings(BaseSettings):
    """Gesture tuning for the swipe controller."""

    model_config = SettingsConfigDict(
        env_prefix="ZHISHI_SWIPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    damping: float = 0.8
    min_threshold: float = 40.0
    max_threshold: float = 100.0
    max_speed_bonus: float = 60.0
    speed_factor: float = 250.0
    cursor_update_ms: int = 460
    transition_lock_ms: int = 640


class ZhishiConfig(BaseSettings):
    """Main configuration aggregating all settings.

    Example usage:
        config = ZhishiConfig()
        api_key = config.llm.api_key.get_secret_value()
    """

    model_config = SettingsConfigDict(
        env_prefix="ZHISHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    llm: LLMSettings = LLMSettings()
    redis: RedisSettings = RedisSettings()
    swipe: SwipeSettings = SwipeSettings()
    log: LoggingSettings = LoggingSettings()

    # Feed
    batch_size: int = 5
    related_ratio: float = 0.7
    card_cache_days: int = 7
    default_domains: list[str] = Field(
        default_factory=lambda: ["science", "history", "literature"]
    )

    # Sessions and history
    session_retention_days: int = 30
    learning_history_limit: int = 100

    default_theme: str = "light"

    @property
    def redis_enabled(self) -> bool:
        """Check if Redis storage is enabled and configured."""
        return self.redis.enabled and self.redis.url is not None
