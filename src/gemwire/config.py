"""Configuration: Frozen Config with API key resolution and endpoint settings."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from gemwire._http import (
    API_VERSIONS,
    DEFAULT_BASE_URL,
    DEFAULT_RELEASE,
    DEFAULT_VERSION,
    RELEASE_PATTERN,
)
from gemwire.errors import ConfigurationError

load_dotenv()

API_KEY_ENV_VAR = "GEMINI_API_KEY"


@dataclass(frozen=True)
class Config:
    """Immutable configuration shared by every model object.

    The API key is an opaque string; gemwire never inspects or refreshes it.
    When omitted it is resolved from ``GEMINI_API_KEY``.

    Example:
        config = Config(version="v1", release="-001")
        # API key is automatically resolved from GEMINI_API_KEY
    """

    #: Auto-resolved from ``GEMINI_API_KEY`` when *None*.
    api_key: str | None = None
    #: API version segment of the endpoint URL.
    version: str = DEFAULT_VERSION
    #: ``-latest``, a pinned ``-NNN`` revision, or ``""`` for stable.
    release: str = DEFAULT_RELEASE
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 60.0

    def __post_init__(self) -> None:
        """Auto-resolve API key and validate configuration."""
        if self.version not in API_VERSIONS:
            raise ConfigurationError(
                f"Unknown API version: {self.version!r}",
                hint="Supported versions: 'v1', 'v1beta'",
            )
        if not isinstance(self.release, str) or not RELEASE_PATTERN.match(
            self.release
        ):
            raise ConfigurationError(
                f"Invalid release suffix: {self.release!r}",
                hint="Use '-latest', a pinned revision like '-001', or '' for stable.",
            )
        if not self.base_url.startswith(("https://", "http://")):
            raise ConfigurationError(
                f"base_url must be an http(s) URL, got {self.base_url!r}",
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This bounds each HTTP request in seconds.",
            )

        if self.api_key is None:
            object.__setattr__(self, "api_key", os.environ.get(API_KEY_ENV_VAR))

        if not self.api_key:
            raise ConfigurationError(
                "API key required",
                hint=f"Set {API_KEY_ENV_VAR} environment variable or pass api_key=...",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(api_key={'[REDACTED]' if self.api_key else None}, "
            f"version={self.version!r}, release={self.release!r}, "
            f"base_url={self.base_url!r})"
        )

    __repr__ = __str__
