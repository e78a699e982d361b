from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List, Mapping, Optional

_DEFAULT_API_BASE_URL = "http://localhost:3002"
_DEFAULT_TIMEOUT_SECONDS = 10.0
_DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(env: Mapping[str, str], name: str, default: List[str]) -> List[str]:
    return [
        item.strip()
        for item in env.get(name, ",".join(default)).split(",")
        if item.strip()
    ]


@dataclass(frozen=True)
class Settings:
    """Process configuration for the datafeed proxy.

    Built once from the environment (or directly in tests) and handed to
    ``create_app``; nothing below the app factory reads ``os.environ``.
    """

    api_base_url: str = _DEFAULT_API_BASE_URL
    upstream_timeout: float = _DEFAULT_TIMEOUT_SECONDS
    allowed_origins: List[str] = field(default_factory=lambda: list(_DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"
    port: int = 8001

    def __post_init__(self) -> None:
        base = (self.api_base_url or "").strip().rstrip("/")
        if not base:
            raise ValueError("api_base_url must not be empty")
        if self.upstream_timeout <= 0:
            raise ValueError("upstream_timeout must be positive")
        object.__setattr__(self, "api_base_url", base)
        object.__setattr__(self, "log_level", self.log_level.strip().upper() or "INFO")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        base_url = (
            env.get("UDF_API_BASE_URL")
            or env.get("NEXT_PUBLIC_API_BASE_URL")
            or _DEFAULT_API_BASE_URL
        )
        raw_timeout = env.get("UDF_UPSTREAM_TIMEOUT", "").strip()
        timeout = float(raw_timeout) if raw_timeout else _DEFAULT_TIMEOUT_SECONDS
        return cls(
            api_base_url=base_url,
            upstream_timeout=timeout,
            allowed_origins=_env_list(env, "ALLOWED_ORIGINS", _DEFAULT_ALLOWED_ORIGINS),
            log_level=env.get("UDF_LOG_LEVEL", "INFO"),
            log_json=_env_bool(env, "UDF_LOG_JSON", False),
            host=env.get("UDF_HOST", "0.0.0.0"),
            port=int(env.get("UDF_PORT", "8001")),
        )
