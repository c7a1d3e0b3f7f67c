"""
================================================================================
Global Configuration for Pomkit
================================================================================

This module provides configuration loading and logging setup for the
page-object framework.

Features:
    - Immutable FrameworkConfig value threaded into pages and components
    - YAML-based configuration loading
    - Environment-specific overrides (config/{ENVIRONMENT}.yaml)
    - Environment variable support (SECTION__KEY naming)
    - Centralized Loguru logging configuration

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

from pomkit.exceptions import ConfigError


DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# Sections that may be overridden through SECTION__KEY environment variables
_ENV_SECTIONS = ("browser", "wait", "ui", "logging")

_SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

_logger_initialized: bool = False
_default_config: Optional["FrameworkConfig"] = None


@dataclass(frozen=True)
class FrameworkConfig:
    """
    Read-only framework settings.

    A single value is created at suite startup and passed to every page.
    Use ``with_overrides`` to derive a variant; instances are never mutated.

    Attributes:
        browser: Browser engine - 'chromium', 'firefox', 'webkit'
        headless: Run browser in headless mode
        wait_timeout_ms: Budget for every named wait, in milliseconds
        poll_interval_ms: Poll interval; None derives it from the timeout
        base_url: Base URL prepended to page paths
        screenshot_dir: Directory for screenshots
        log_level: Loguru level name
        log_file: Optional log file path
        log_rotation: Loguru rotation setting for the log file
        log_retention: Loguru retention setting for the log file
    """
    browser: str = "chromium"
    headless: bool = True
    wait_timeout_ms: int = 5000
    poll_interval_ms: Optional[int] = None
    base_url: str = "http://localhost:3000"
    screenshot_dir: str = "reports/screenshots"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "10 MB"
    log_retention: str = "7 days"

    def __post_init__(self) -> None:
        if self.browser not in _SUPPORTED_BROWSERS:
            raise ConfigError(
                f"Unsupported browser '{self.browser}'. "
                f"Expected one of: {', '.join(_SUPPORTED_BROWSERS)}"
            )
        if self.wait_timeout_ms < 0:
            raise ConfigError(f"wait_timeout_ms must be >= 0, got {self.wait_timeout_ms}")
        if self.poll_interval_ms is not None and self.poll_interval_ms <= 0:
            raise ConfigError(f"poll_interval_ms must be > 0, got {self.poll_interval_ms}")

    @property
    def effective_poll_interval_ms(self) -> int:
        """Configured poll interval, or one derived from the wait timeout."""
        if self.poll_interval_ms is not None:
            return self.poll_interval_ms
        return derive_poll_interval(self.wait_timeout_ms)

    def with_overrides(self, **changes: Any) -> "FrameworkConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def derive_poll_interval(timeout_ms: int) -> int:
    """
    Derive a poll interval from a wait timeout.

    Short waits poll five times over the budget, long waits ten times.
    """
    divisor = 5 if timeout_ms < 20000 else 10
    return max(1, timeout_ms // divisor)


# ============================================================
# Configuration Loading
# ============================================================

def load_config(
    path: Union[str, Path, None] = None,
    environment: Optional[str] = None,
) -> FrameworkConfig:
    """
    Loads configuration from YAML files and environment variables.

    Configuration loading order:
        1. Default configuration file (config/config.yaml, or ``path``)
        2. Environment-specific configuration (config/{ENV}.yaml)
        3. Environment variables (override YAML settings)

    Args:
        path: Explicit configuration file. Defaults to config/config.yaml.
        environment: Environment name. Defaults to $ENVIRONMENT, $ENV, "dev".

    Returns:
        A new immutable FrameworkConfig.

    Raises:
        ConfigError: If a file cannot be parsed or a value is invalid.
    """
    config_path = Path(path) if path else _find_config_file()

    raw: Dict[str, Any] = {}
    if config_path and config_path.exists():
        raw = _read_yaml(config_path)
        logger.debug(f"Loaded configuration from {config_path}")

        env = environment or os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
        env_config_path = config_path.parent / f"{env}.yaml"
        if env_config_path.exists() and env_config_path != config_path:
            raw = _deep_merge(raw, _read_yaml(env_config_path))
            logger.debug(f"Merged environment config: {env_config_path}")
    else:
        logger.warning("No configuration file found. Using defaults.")

    _apply_env_overrides(raw)
    config = _to_framework_config(raw)

    for field_name, value in vars(config).items():
        logger.debug(f"Config {field_name} = {value}")
    return config


def default_config() -> FrameworkConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _default_config
    if _default_config is None:
        _default_config = load_config()
    return _default_config


def _find_config_file() -> Optional[Path]:
    """Look for config/config.yaml in the usual places."""
    possible_config_dirs = [
        Path("config"),
        Path(__file__).parent.parent.parent / "config",
    ]
    for dir_path in possible_config_dirs:
        candidate = dir_path / "config.yaml"
        if candidate.exists():
            return candidate
    return None


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")
    return data


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(raw: Dict[str, Any]) -> None:
    """
    Applies environment variable overrides to the raw configuration.

    Environment variable naming convention:
        - Use double underscore to separate section and key
        - Example: WAIT__TIMEOUT_MS=8000 overrides wait.timeout_ms
    """
    for key, value in os.environ.items():
        if "__" not in key:
            continue
        section, _, name = key.lower().partition("__")
        if section in _ENV_SECTIONS and name:
            raw.setdefault(section, {})
            if not isinstance(raw[section], dict):
                raw[section] = {}
            raw[section][name] = _convert_type(value)


def _convert_type(value: str) -> Any:
    """Convert environment variable strings to bool/int/None where they look like one."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered in ("none", "null", ""):
        return None
    try:
        return int(value)
    except ValueError:
        return value


def _to_framework_config(raw: Dict[str, Any]) -> FrameworkConfig:
    browser = raw.get("browser") or {}
    wait = raw.get("wait") or {}
    ui = raw.get("ui") or {}
    logging_cfg = raw.get("logging") or {}
    defaults = FrameworkConfig()

    try:
        poll = wait.get("poll_interval_ms", defaults.poll_interval_ms)
        return FrameworkConfig(
            browser=str(browser.get("name", defaults.browser)).lower(),
            headless=_as_bool(browser.get("headless", defaults.headless)),
            wait_timeout_ms=int(wait.get("timeout_ms", defaults.wait_timeout_ms)),
            poll_interval_ms=int(poll) if poll is not None else None,
            base_url=str(ui.get("base_url", defaults.base_url)).rstrip("/"),
            screenshot_dir=str(ui.get("screenshot_dir", defaults.screenshot_dir)),
            log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
            log_file=logging_cfg.get("file", defaults.log_file),
            log_rotation=str(logging_cfg.get("rotation", defaults.log_rotation)),
            log_retention=str(logging_cfg.get("retention", defaults.log_retention)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


# ============================================================
# Logging Setup
# ============================================================

def init_logger(config: Optional[FrameworkConfig] = None, force: bool = False) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    This function should be called once at suite startup. Later calls are
    no-ops unless ``force`` is set.

    Args:
        config: Settings to use. Defaults to ``default_config()``.
        force: Re-install sinks even if already initialized.
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    config = config or default_config()

    # Remove default logger and add configured one
    logger.remove()
    logger.add(
        sys.stderr,
        level=config.log_level,
        format=DEFAULT_LOG_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.log_file,
            level=config.log_level,
            format=DEFAULT_LOG_FORMAT,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {config.log_level}")
