"""
Repository-level pytest configuration.

Why this exists:
  - Keep framework settings predictable for local runs
  - Route loguru output through one sink configured from config/config.yaml

Important:
  Per-key overrides go through SECTION__KEY environment variables
  (e.g. WAIT__TIMEOUT_MS=8000); see config/config.yaml.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from pomkit.common import FrameworkConfig, init_logger, load_config


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _default_env() -> Generator[None, None, None]:
    """
    Set environment defaults if not already provided by the user/CI.
    """
    defaults = {
        "ENVIRONMENT": "dev",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield


@pytest.fixture(scope="session")
def framework_config(_default_env, project_root: Path) -> FrameworkConfig:
    """Suite-wide configuration, loaded once and never mutated."""
    config = load_config(project_root / "config" / "config.yaml")
    init_logger(config.with_overrides(log_file=None))
    return config
