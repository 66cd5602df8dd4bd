"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from bundlesync.adapters.mock import MockCatalog, MockExtractor
from bundlesync.core.config.loader import SyncConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's BUNDLESYNC_* settings out of tests."""
    for name in (
        "BUNDLESYNC_PACKAGES",
        "BUNDLESYNC_CONNECTION_STRING",
        "BUNDLESYNC_WORKING_DIRECTORY",
        "BUNDLESYNC_ALWAYS_INSTALL",
        "BUNDLESYNC_LOG_LEVEL",
        "BUNDLESYNC_LOG_FILE",
        "BUNDLESYNC_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo setup_logging() calls made by CLI tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.raiseExceptions = True


@pytest.fixture
def working_dir(tmp_path: Path) -> Path:
    """Return an existing working directory for extracted packages."""
    path = tmp_path / "apps"
    path.mkdir()
    return path


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Return a private directory for temporary downloads."""
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.fixture
def catalog() -> MockCatalog:
    return MockCatalog()


@pytest.fixture
def extractor() -> MockExtractor:
    return MockExtractor()


@pytest.fixture
def make_config(working_dir: Path, temp_dir: Path):
    """Build a SyncConfig pointing at the temp working directory."""

    def _make(packages: str = "", **overrides) -> SyncConfig:
        data = {
            "packages": packages,
            "connection": {},
            "working_directory": working_dir,
            "temp_directory": temp_dir,
            "run_hooks": False,
        }
        data.update(overrides)
        return SyncConfig.model_validate(data)

    return _make
