"""Server configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

_VALID_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}

DEFAULT_RESULT_CAP = 100


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        msg = f"Environment variable {name} must be an integer, got {raw!r}."
        raise ValueError(msg) from None


def get_log_level() -> str:
    """Return the configured log level name, lowercased and unvalidated."""
    return os.environ.get("POD_STATUS_LOG_LEVEL", "info").lower()


@dataclass(frozen=True)
class ServerConfig:
    """Report limits and logging settings with environment variable overrides."""

    result_cap: int = field(default_factory=lambda: _int_from_env("POD_STATUS_RESULT_CAP", DEFAULT_RESULT_CAP))
    log_level: str = field(default_factory=get_log_level)


def _config_errors(config: ServerConfig) -> list[str]:
    errors: list[str] = []
    if config.result_cap < 1:
        errors.append(f"result_cap must be at least 1, got {config.result_cap}")
    if config.log_level not in _VALID_LOG_LEVELS:
        valid = ", ".join(sorted(_VALID_LOG_LEVELS))
        errors.append(f"log_level {config.log_level!r} is not one of: {valid}")
    return errors


def _raise_config_errors(errors: list[str]) -> None:
    if errors:
        detail = "; ".join(errors)
        msg = f"Server configuration errors: {detail}."
        raise RuntimeError(msg)


def get_server_config() -> ServerConfig:
    """Read configuration from the environment and validate it.

    Raises RuntimeError listing every invalid setting, including values that
    cannot be parsed.
    """
    errors: list[str] = []
    try:
        result_cap = _int_from_env("POD_STATUS_RESULT_CAP", DEFAULT_RESULT_CAP)
    except ValueError as e:
        errors.append(str(e).rstrip("."))
        result_cap = DEFAULT_RESULT_CAP

    config = ServerConfig(result_cap=result_cap)
    errors.extend(_config_errors(config))
    _raise_config_errors(errors)
    return config


def validate_server_config(config: ServerConfig) -> None:
    """Validate an already-built configuration.

    Raises RuntimeError listing every invalid setting.
    """
    _raise_config_errors(_config_errors(config))
