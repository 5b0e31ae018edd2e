"""Centralized configuration for hitomi-source using Pydantic Settings."""

import random

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every component receives the same Settings instance so timeouts,
    concurrency bounds and cache lifetimes stay consistent across a source.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Remote hosts
    base_url: str = Field(default="https://hitomi.la", description="Site host serving gallery pages")
    ltn_base_url: str = Field(
        default="https://ltn.hitomi.la", description="Static host serving nozomi indexes, blocks and scripts"
    )

    # HTTP/Request settings
    http_timeout: int = Field(default=30, ge=1, description="HTTP request timeout in seconds")
    max_concurrent_requests: int = Field(default=10, ge=1, description="Maximum concurrent HTTP requests")

    # Index version cache
    index_version_ttl_seconds: float = Field(
        default=600.0, ge=0.0, description="Lifetime of a cached tag/gallery index version"
    )

    # Listing settings
    use_high_quality_thumbs: bool = Field(
        default=False, description="Prefer the srcset thumbnail over the plain data-src image"
    )
    detail_fetch_fail_fast: bool = Field(
        default=True,
        description="Fail a whole listing page when any gallery block fails (False drops failed ids instead)",
    )

    # Descrambling sandbox
    script_memory_limit_bytes: int = Field(
        default=64 * 1024 * 1024, ge=1024 * 1024, description="Memory cap for the descrambling script sandbox"
    )
    script_time_limit_seconds: float = Field(
        default=5.0, gt=0.0, description="Wall-clock cap for a single descrambling evaluation"
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Class constant for user agents
    USER_AGENTS: list[str] = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:142.0) Gecko/20100101 Firefox/142.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/18.6 Safari/605.1.15",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36 Edg/140.0.0.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:143.0) Gecko/20100101 Firefox/143.0",
    ]

    @model_validator(mode="after")
    def _strip_trailing_slashes(self) -> "Settings":
        # URLs are joined with "/" everywhere, so a trailing slash would double up
        self.base_url = self.base_url.rstrip("/")
        self.ltn_base_url = self.ltn_base_url.rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("BASE_URL must be an absolute http(s) URL")
        if not self.ltn_base_url.startswith(("http://", "https://")):
            raise ValueError("LTN_BASE_URL must be an absolute http(s) URL")
        return self

    def get_random_user_agent(self) -> str:
        """Get a random User-Agent from the pool."""
        return random.choice(self.USER_AGENTS)

    def get_referer(self) -> str:
        """Referer header the static host expects on every request."""
        return f"{self.base_url}/"

    def ltn_url(self, path: str) -> str:
        """Build an absolute URL on the static index host."""
        return f"{self.ltn_base_url}/{path.lstrip('/')}"
