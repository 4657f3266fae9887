"""Shared fixtures for all tests."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

# Ensure repo root is on sys.path so tests can import the `micpipe` package
# when running pytest from the repository root without an editable install.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import numpy as np  # noqa: E402
import pytest  # noqa: E402
import structlog  # noqa: E402

from micpipe import logging as micpipe_logging  # noqa: E402
from micpipe.config.settings import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Settings are an lru_cache singleton; start every test from the environment."""
    get_settings.cache_clear()


@pytest.fixture
def mono_ramp() -> np.ndarray:
    """100 mono frames of a rising ramp (0, 100, 200, ...)."""
    return (np.arange(100, dtype=np.int16) * 100).astype(np.int16)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() so each test sees unconfigured logging."""
    yield
    package_logger = logging.getLogger(micpipe_logging.PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    micpipe_logging._configured = False
    structlog.reset_defaults()
