"""
Environment-driven server configuration.

Values come from the process environment (after the repo-root .env is
loaded once). `get_config()` returns a process-wide instance; tests use
`set_config()` / `reset_config()` to control it.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .env import ensure_dotenv_loaded
from .models.constants import DEFAULTS

logger = logging.getLogger(__name__)

# Threshold for this service's own log output. Unrelated to the device
# `LogLevel` vocabulary in models.constants.
CONFIG_LOG_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

DEFAULT_APPIUM_SERVER_URL = "http://127.0.0.1:4723"


@dataclass(frozen=True)
class SpecterConfig:
    server_name: str = "specter-mcp"
    server_version: str = "1.0.0"

    debug: bool = False
    log_level: str = "info"

    default_timeout_ms: int = 60000
    max_concurrency: int = 1

    android_sdk_path: Optional[str] = None
    xcode_path: Optional[str] = None

    default_android_device: Optional[str] = None
    default_ios_device: Optional[str] = None

    maestro_path: Optional[str] = None
    detekt_config_path: Optional[str] = None

    appium_server_url: str = DEFAULT_APPIUM_SERVER_URL
    screenshot_quality: int = DEFAULTS["SCREENSHOT_QUALITY"]


_DEFAULT_CONFIG = SpecterConfig()
_config_instance: Optional[SpecterConfig] = None


def _parse_log_level(value: Optional[str]) -> str:
    level = (value or "").strip().lower()
    if level in CONFIG_LOG_LEVELS:
        return level
    if level:
        logger.warning("Ignoring unknown log level %r (using %s)", value, _DEFAULT_CONFIG.log_level)
    return _DEFAULT_CONFIG.log_level


def _parse_int(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Ignoring non-integer config value %r (using %d)", value, default)
        return default


def _first(env: Mapping[str, str], *keys: str) -> Optional[str]:
    for key in keys:
        value = env.get(key)
        if value:
            return value
    return None


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> SpecterConfig:
    env = os.environ if environ is None else environ

    quality = _parse_int(env.get("SPECTER_SCREENSHOT_QUALITY"), _DEFAULT_CONFIG.screenshot_quality)
    quality = min(100, max(1, quality))

    return SpecterConfig(
        debug=env.get("SPECTER_DEBUG") == "true" or env.get("DEBUG") == "true",
        log_level=_parse_log_level(_first(env, "SPECTER_LOG_LEVEL", "LOG_LEVEL")),
        default_timeout_ms=_parse_int(env.get("SPECTER_TIMEOUT"), _DEFAULT_CONFIG.default_timeout_ms),
        max_concurrency=_parse_int(env.get("SPECTER_CONCURRENCY"), _DEFAULT_CONFIG.max_concurrency),
        android_sdk_path=_first(env, "ANDROID_SDK_ROOT", "ANDROID_HOME"),
        xcode_path=env.get("XCODE_PATH") or None,
        default_android_device=env.get("SPECTER_ANDROID_DEVICE") or None,
        default_ios_device=env.get("SPECTER_IOS_DEVICE") or None,
        maestro_path=env.get("MAESTRO_PATH") or None,
        detekt_config_path=env.get("DETEKT_CONFIG") or None,
        appium_server_url=env.get("SPECTER_APPIUM_URL") or _DEFAULT_CONFIG.appium_server_url,
        screenshot_quality=quality,
    )


def get_config() -> SpecterConfig:
    global _config_instance
    if _config_instance is None:
        ensure_dotenv_loaded()
        _config_instance = load_config_from_env()
    return _config_instance


def set_config(**overrides: object) -> SpecterConfig:
    """
    Override individual fields of the active configuration (mainly for tests).
    """
    global _config_instance
    _config_instance = replace(get_config(), **overrides)
    return _config_instance


def reset_config() -> None:
    global _config_instance
    _config_instance = None


def is_debug() -> bool:
    return get_config().debug


def get_timeout(override: Optional[int] = None) -> int:
    return override if override is not None else get_config().default_timeout_ms


def validate_config(config: Optional[SpecterConfig] = None) -> list[str]:
    cfg = config or get_config()
    warnings: list[str] = []
    if not cfg.android_sdk_path:
        warnings.append("ANDROID_SDK_ROOT not set - Android tools may not work")
    return warnings


def config_summary(config: Optional[SpecterConfig] = None) -> list[str]:
    cfg = config or get_config()
    return [
        "Configuration:",
        f"  Debug: {cfg.debug}",
        f"  Log Level: {cfg.log_level}",
        f"  Timeout: {cfg.default_timeout_ms}ms",
        f"  Android SDK: {cfg.android_sdk_path or 'not set'}",
        f"  Appium: {cfg.appium_server_url}",
    ]


def configure_logging(config: Optional[SpecterConfig] = None) -> logging.Logger:
    """
    Send `specter_service` logs to stderr at the configured threshold.

    stdout stays clean for the MCP stdio transport.
    """
    cfg = config or get_config()
    level = logging.DEBUG if cfg.debug else CONFIG_LOG_LEVELS[cfg.log_level]

    root = logging.getLogger("specter_service")
    root.setLevel(level)
    if not any(getattr(h, "_specter_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[specter:%(levelname)s] %(name)s: %(message)s"))
        handler._specter_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root
