# tests/conftest.py

"""Shared pytest fixtures for all pos_shop tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so store retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def instant_payment() -> Generator[None, None, None]:
    """Simulated payments complete without waiting."""
    with patch.object(Settings, "PAYMENT_DELAY", 0.0):
        yield


@pytest.fixture(autouse=True)
def temp_receipts_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Receipts written during tests land in a per-test temp dir."""
    receipts = tmp_path / "receipts"
    with patch.object(Settings, "RECEIPTS_DIR", receipts):
        yield receipts
