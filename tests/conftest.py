"""
Shared test fixtures.

Every test gets its own temporary data directory, so ledger files
never leak between tests or touch ./data.
"""

from pathlib import Path

import pytest

from ledger.codec import LedgerCodec
from ledger.services import LedgerService
from ledger.storage import FlatFileStorage


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir):
    return FlatFileStorage(data_dir)


@pytest.fixture
def codec(storage):
    return LedgerCodec(storage)


@pytest.fixture
def make_service(data_dir):
    """Build a fresh service over ``data_dir``, reloading whatever is on disk."""
    def factory():
        return LedgerService(LedgerCodec(FlatFileStorage(data_dir)))
    return factory


@pytest.fixture
def write_file(data_dir):
    """Write raw text into a ledger file under ``data_dir``."""
    def writer(name, text):
        data_dir.mkdir(parents=True, exist_ok=True)
        (data_dir / name).write_text(text, encoding="utf-8")
    return writer
