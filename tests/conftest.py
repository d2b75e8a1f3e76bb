"""
Pytest configuration and shared fixtures for the saved places search test suite.

This module provides common fixtures used across unit and integration tests.
"""

import sys
from pathlib import Path
from typing import Any

import pytest

# Add the project root and src directories to the Python path
PROJECT_ROOT = Path(__file__).parent.parent
SRC_ROOT = PROJECT_ROOT / "src"

for path in [str(SRC_ROOT), str(PROJECT_ROOT)]:
    if path not in sys.path:
        sys.path.insert(0, path)

from core.types import CanonicalRecord, RecordMetadata, SourceFormat  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Return the path to the config directory."""
    return project_root / "config"


@pytest.fixture(scope="session")
def fixtures_path() -> Path:
    """Return the path to the tests fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def sample_exports_path(fixtures_path: Path) -> Path:
    """Return the path to the sample export files."""
    return fixtures_path / "sample_exports"


@pytest.fixture
def make_record():
    """Factory for CanonicalRecords with sensible defaults."""
    counter = {"n": 0}

    def _make(name: str = "Blue Bottle Coffee", **fields: Any) -> CanonicalRecord:
        counter["n"] += 1
        fields.setdefault("id", f"rec-{counter['n']}")
        fields.setdefault("metadata", RecordMetadata(source_format=SourceFormat.CSV))
        return CanonicalRecord(name=name, **fields)

    return _make
