from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from tests._fixtures.crate_builder import CrateBuilder

FIXED_NOW = datetime(2024, 3, 15, 9, 30)


@pytest.fixture
def crate_builder(tmp_path: Path) -> CrateBuilder:
    """Provide a crate builder rooted at the pytest tmp_path."""
    return CrateBuilder(tmp_path)


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def _reset_cargocite_logger():
    """Undo handler/propagation changes made by ``configure_logging`` in CLI tests."""
    logger = logging.getLogger("cargocite")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
