from __future__ import annotations

"""Configuration loading and validation for quizsession.

This module loads YAML configuration, applies defaults, and validates
that values are sane before the pydantic models are built from it.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from analytics.config import AnalyticsConfig
from ..errors import ConfigError
from .settings import QuizSettings

_log = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).with_name("defaults.yml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    return _load_yaml(Path(path) if path else DEFAULTS_PATH)


def _positive(section: Dict[str, Any], key: str, default: Any, kind: type) -> None:
    value = section.get(key)
    try:
        ok = kind(value) > 0
    except (TypeError, ValueError):
        ok = False
    if not ok:
        _log.warning("Unsupported %s %r, using %r", key, value, default)
        section[key] = default
    else:
        section[key] = kind(value)


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Unsupported timer and history values are logged and replaced with their
    defaults; quiz and analytics values are checked by their pydantic models.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.

    Raises:
        ConfigError: when a quiz or analytics section is invalid.
    """
    # Shallow defaults for missing sections
    for name in ("quiz", "timer", "history", "analytics"):
        if not isinstance(cfg.get(name), dict):
            if cfg.get(name) is not None:
                _log.warning("Config section %r is not a mapping, ignoring it", name)
            cfg[name] = {}

    timer = cfg["timer"]
    history = cfg["history"]

    timer.setdefault("tick_seconds", 1.0)
    timer.setdefault("warning_threshold", 300)
    timer.setdefault("critical_threshold", 60)

    history.setdefault("enabled", True)
    history.setdefault("data_dir", "./quiz_history")
    history.setdefault("cap", 50)

    # tick_seconds may be 0 (manual ticking); negative is not meaningful
    try:
        timer["tick_seconds"] = max(0.0, float(timer["tick_seconds"]))
    except (TypeError, ValueError):
        _log.warning("Unsupported tick_seconds %r, using 1.0", timer["tick_seconds"])
        timer["tick_seconds"] = 1.0
    _positive(timer, "warning_threshold", 300, int)
    _positive(timer, "critical_threshold", 60, int)
    if timer["critical_threshold"] > timer["warning_threshold"]:
        _log.warning("critical_threshold above warning_threshold; swapping them")
        timer["critical_threshold"], timer["warning_threshold"] = timer["warning_threshold"], timer["critical_threshold"]

    _positive(history, "cap", 50, int)
    history["enabled"] = bool(history["enabled"])
    history["data_dir"] = str(history["data_dir"])

    # Build once to surface invalid values early
    settings_from_config(cfg)
    analytics_config(cfg)
    return cfg


def settings_from_config(cfg: Dict[str, Any]) -> QuizSettings:
    try:
        return QuizSettings.model_validate(cfg.get("quiz") or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid quiz settings: {e}") from e


def analytics_config(cfg: Dict[str, Any]) -> AnalyticsConfig:
    try:
        return AnalyticsConfig.model_validate(cfg.get("analytics") or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid analytics settings: {e}") from e
