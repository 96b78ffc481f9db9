import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Remote capability (OpenAI chat completions)
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY") or None
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    remote_timeout_seconds: float = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "20"))

    # Client facade
    proxy_base_url: str = os.getenv("PROXY_BASE_URL", "http://localhost:3000")

    # Auth
    api_key: str | None = os.getenv("API_KEY") or None
    basic_auth_user: str | None = os.getenv("BASIC_AUTH_USER") or None
    basic_auth_pass: str | None = os.getenv("BASIC_AUTH_PASS") or None

    # Rate limiting
    rate_limit_requests: int = int(os.getenv("RATE_LIMIT_REQUESTS", "60"))
    rate_limit_window_seconds: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Cache
    cache_ttl_ms: int = int(os.getenv("CACHE_TTL_MS", "300000"))  # 5 minutes
    fallback_ttl_ms: int = int(os.getenv("FALLBACK_TTL_MS", "60000"))  # 1 minute
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "0"))  # 0 = unbounded
    cache_backend: str = os.getenv("CACHE_BACKEND", "memory")  # "memory" or "redis"
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "ai_cache_")

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD") or None

    # Sessions
    session_history_limit: int = int(os.getenv("SESSION_HISTORY_LIMIT", "20"))

    # Request defaults
    default_max_tokens: int = int(os.getenv("DEFAULT_MAX_TOKENS", "400"))
    default_temperature: float = float(os.getenv("DEFAULT_TEMPERATURE", "0.6"))

    # Simulated streaming
    stream_chunk_size: int = int(os.getenv("STREAM_CHUNK_SIZE", "80"))
    stream_chunk_delay_ms: int = int(os.getenv("STREAM_CHUNK_DELAY_MS", "40"))
    sse_chunk_size: int = int(os.getenv("SSE_CHUNK_SIZE", "60"))
    sse_chunk_delay_ms: int = int(os.getenv("SSE_CHUNK_DELAY_MS", "60"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def remote_configured(self) -> bool:
        """Whether a hosted model key is available."""
        return bool(self.openai_api_key)

    @property
    def auth_configured(self) -> bool:
        """Whether any credential is configured (otherwise the API runs open)."""
        return bool(self.api_key or self.basic_auth_user)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.default_temperature <= 1:
            raise ValueError("DEFAULT_TEMPERATURE must be between 0 and 1")

        if self.cache_backend not in ("memory", "redis"):
            raise ValueError(f"CACHE_BACKEND must be 'memory' or 'redis', got {self.cache_backend!r}")

        for name in ("session_history_limit", "stream_chunk_size", "sse_chunk_size", "rate_limit_requests"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive")

        if self.cache_max_entries < 0:
            raise ValueError("CACHE_MAX_ENTRIES must be >= 0")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
