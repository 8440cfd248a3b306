from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .exceptions import PluginConfigurationError

LOGGER_NAMESPACE = "kv_sign_plugin"
DEFAULT_LOG_FILE = Path("~/.cache/kv-sign-plugin/plugin.log")
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_MAX_BYTES = 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 3

_LOG_FORMAT = "%(asctime)s | %(process)d | %(levelname)s | %(name)s | %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise PluginConfigurationError(f"{name} must be an integer, got: {raw}") from exc
    if parsed < 0:
        raise PluginConfigurationError(f"{name} must be >= 0, got: {raw}")
    return parsed


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    normalized = level.strip().upper()
    if normalized.isdigit():
        return int(normalized)
    numeric_level = logging.getLevelName(normalized)
    if not isinstance(numeric_level, int):
        raise PluginConfigurationError(f"Invalid log level: {level}")
    return numeric_level


def configure_logging(
    *,
    log_file: str | Path | None = None,
    level: str | int | None = None,
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> logging.Logger:
    """
    Route the kv_sign_plugin logger namespace to a rotating log file.

    The host CLI reads plugin responses from stdout, so nothing is ever logged
    to a stream handler. Explicit arguments win over the environment:
    KV_SIGN_PLUGIN_LOG_FILE, KV_SIGN_PLUGIN_LOG_LEVEL,
    KV_SIGN_PLUGIN_LOG_MAX_BYTES and KV_SIGN_PLUGIN_LOG_BACKUP_COUNT.
    """
    target = Path(
        log_file or os.environ.get("KV_SIGN_PLUGIN_LOG_FILE") or DEFAULT_LOG_FILE
    ).expanduser()
    numeric_level = _resolve_level(
        level or os.environ.get("KV_SIGN_PLUGIN_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    )
    if max_bytes is None:
        max_bytes = _env_int("KV_SIGN_PLUGIN_LOG_MAX_BYTES", DEFAULT_LOG_MAX_BYTES)
    if backup_count is None:
        backup_count = _env_int(
            "KV_SIGN_PLUGIN_LOG_BACKUP_COUNT", DEFAULT_LOG_BACKUP_COUNT
        )
    if max_bytes < 0 or backup_count < 0:
        raise PluginConfigurationError("max_bytes and backup_count must be >= 0.")

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(numeric_level)
    logger.propagate = False

    resolved_target = target.resolve()
    for existing in logger.handlers:
        if (
            isinstance(existing, RotatingFileHandler)
            and Path(existing.baseFilename).resolve() == resolved_target
        ):
            existing.setLevel(numeric_level)
            return logger

    target.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        target,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)

    logger.debug(
        "Plugin logging configured path=%s level=%s",
        target,
        logging.getLevelName(numeric_level),
    )
    return logger
