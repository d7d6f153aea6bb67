"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Novella"
        return Path.home() / "Novella"
    return Path.home() / ".config" / "novella"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def default_config() -> Dict[str, object]:
    return {"block_on_errors": False, "log_level": _DEFAULT_LOG_LEVEL}


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize(raw: Dict[str, object]) -> Dict[str, object]:
    return {
        "block_on_errors": raw.get("block_on_errors") is True,
        "log_level": _normalize_log_level(raw.get("log_level")),
    }


def load_config(path: Path | None = None) -> Dict[str, object]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return _normalize(raw)


def save_config(config: Dict[str, object], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = _normalize(config)
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def log_level(config: Dict[str, object]) -> int:
    """Translate the configured level name into a logging constant."""
    return getattr(logging, _normalize_log_level(config.get("log_level")))
