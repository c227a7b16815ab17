"""
pytest configuration for xerrors tests.

Adds src directory to Python path for imports and isolates configuration.
"""

import os
import sys
from pathlib import Path

import pytest

# Keep a developer's config file out of the test run
os.environ.pop("XERRORS_CONFIG", None)

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from xerrors.config import reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from default configuration."""
    reset_config()
    yield
    reset_config()
