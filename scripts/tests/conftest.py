"""Pytest fixtures for disk_store testing."""

import pytest

from disk_store import Disk, log
from tests.test_utils import make_registry


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    """Keeps the store log inside the test's temporary directory."""
    log_file = tmp_path / "logs" / "disk_store.log"
    monkeypatch.setattr(log, "LOG_FILE", log_file)
    monkeypatch.setattr(log, "LOG", True)
    monkeypatch.setattr(log, "LOG_TO_STDERR", False)
    yield log_file


@pytest.fixture
def registry():
    return make_registry()


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "store"


@pytest.fixture
def disk(store_dir, registry):
    """A Disk over an empty, per-test directory."""
    return Disk(store_dir, registry=registry)
