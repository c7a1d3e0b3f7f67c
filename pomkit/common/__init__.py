"""
================================================================================
Pomkit Common Utilities
================================================================================

This module provides shared configuration management and logging setup for
the page-object framework.

Exports:
    - FrameworkConfig: Immutable framework settings
    - load_config: Build a FrameworkConfig from YAML files and environment
    - default_config: Process-wide configuration loaded on first use
    - init_logger: Function to initialize loguru logger with standard settings

Usage:
    from pomkit.common import load_config, init_logger

    config = load_config()
    init_logger(config)

================================================================================
"""

from .global_config import (
    FrameworkConfig,
    default_config,
    derive_poll_interval,
    init_logger,
    load_config,
)

# Export public API
__all__ = [
    "FrameworkConfig",
    "default_config",
    "derive_poll_interval",
    "init_logger",
    "load_config",
]
