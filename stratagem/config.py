"""
Configuration - Environment-driven settings.

All values are read once at process start by ``Settings.from_env()``.
There is no hot reload; restart the process to pick up changes.

Environment:
    CORS_ORIGIN            Allowed origins, comma separated (default "*")
    API_TOKEN              Shared bearer secret (default "dev-token")
    API_TOKENS             Extra token bindings, "token:user,token:user"
    DEFAULT_USER_ID        Identity bound to API_TOKEN (default "user1")
    HOST / PORT            Listening address (default 0.0.0.0:3020)
    API_BASE_URL           Public base URL advertised in the OpenAPI document
    STRATAGEM_ENV          development | production
    LOG_LEVEL              Root log level (default INFO)
    RATE_LIMIT_WINDOW_MS   Fixed window length (default 15 minutes)
    RATE_LIMIT_MAX         Requests admitted per window (default 100)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional
import os


def _parse_token_bindings(raw: str) -> dict[str, str]:
    """Parse "token:user,token:user" into a token -> user id mapping."""
    bindings: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        token, sep, user_id = entry.partition(":")
        if not sep or not token or not user_id:
            raise ValueError(f"Invalid API_TOKENS entry: {entry!r}")
        bindings[token.strip()] = user_id.strip()
    return bindings


@dataclass(frozen=True)
class Settings:
    """Process settings."""
    env: str = "development"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    api_token: str = "dev-token"
    extra_tokens: dict[str, str] = field(default_factory=dict)
    default_user_id: str = "user1"
    host: str = "0.0.0.0"
    port: int = 3020
    base_url: str = "http://localhost:3020/v1"
    log_level: str = "INFO"
    rate_limit_window_ms: int = 15 * 60 * 1000
    rate_limit_max: int = 100
    rate_limit_sweep_seconds: float = 60.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            env=env.get("STRATAGEM_ENV", "development"),
            cors_origins=[
                origin.strip()
                for origin in env.get("CORS_ORIGIN", "*").split(",")
                if origin.strip()
            ],
            api_token=env.get("API_TOKEN", "dev-token"),
            extra_tokens=_parse_token_bindings(env.get("API_TOKENS", "")),
            default_user_id=env.get("DEFAULT_USER_ID", "user1"),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3020")),
            base_url=env.get("API_BASE_URL", "http://localhost:3020/v1"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            rate_limit_window_ms=int(env.get("RATE_LIMIT_WINDOW_MS", str(15 * 60 * 1000))),
            rate_limit_max=int(env.get("RATE_LIMIT_MAX", "100")),
        )

    @property
    def token_bindings(self) -> dict[str, str]:
        """All known bearer tokens mapped to the identity they resolve to."""
        bindings = dict(self.extra_tokens)
        bindings[self.api_token] = self.default_user_id
        return bindings
