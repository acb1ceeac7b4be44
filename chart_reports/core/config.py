from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:5000/api"


@dataclass
class Settings:
    api_base_url: str
    api_token: str | None
    request_timeout: float
    settle_delay_seconds: float
    export_dir: Path
    anthropic_api_key: str | None


def _read_env_file() -> dict[str, str]:
    """Load minimal .env to support CR_* keys if not in the environment.

    We intentionally do not overwrite existing os.environ values.
    """
    env_path = Path.cwd() / ".env"
    env: dict[str, str] = {}
    if not env_path.exists():
        return env
    try:
        text = env_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable .env file", extra={"path": str(env_path), "error": str(e)})
        return {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        env[k] = v
    return env


def _get_env(
    name: str,
    fallback_names: list[str] | None = None,
    env_file: dict[str, str] | None = None,
) -> str | None:
    # Priority: process env -> .env -> fallback names
    val = os.getenv(name)
    if val:
        return val
    if env_file and name in env_file:
        return env_file[name]
    if fallback_names:
        for fb in fallback_names:
            v = os.getenv(fb)
            if v:
                return v
            if env_file and fb in env_file:
                return env_file[fb]
    return None


def _as_float(name: str, raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value


def get_settings() -> Settings:
    env_file = _read_env_file()
    base_url = _get_env("CR_API_BASE_URL", ["API_BASE_URL"], env_file) or DEFAULT_API_BASE_URL
    token = _get_env("CR_API_TOKEN", ["API_TOKEN"], env_file)
    timeout = _as_float(
        "CR_REQUEST_TIMEOUT", _get_env("CR_REQUEST_TIMEOUT", env_file=env_file), 30.0
    )
    settle = _as_float(
        "CR_SETTLE_DELAY_SECONDS", _get_env("CR_SETTLE_DELAY_SECONDS", env_file=env_file), 0.0
    )
    export_dir = _get_env("CR_EXPORT_DIR", env_file=env_file) or "exports"
    anthropic_key = _get_env("CR_ANTHROPIC_API_KEY", ["ANTHROPIC_API_KEY"], env_file)
    return Settings(
        api_base_url=base_url.rstrip("/"),
        api_token=token,
        request_timeout=timeout,
        settle_delay_seconds=settle,
        export_dir=Path(export_dir),
        anthropic_api_key=anthropic_key,
    )
