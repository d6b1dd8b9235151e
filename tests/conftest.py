from __future__ import annotations

import random
from pathlib import Path

import pytest
from hypothesis import settings

from src.utils.io_utils import load_settings

# ---- Deterministic Testing Configuration ---------------------

# Global deterministic seed
DETERMINISTIC_SEED = 42


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "hypothesis: property-based tests")
    config.addinivalue_line("markers", "integration: end-to-end CLI tests")


@pytest.fixture(autouse=True)
def set_deterministic_seed():
    """Set deterministic seed for all tests"""
    random.seed(DETERMINISTIC_SEED)
    yield
    # Reset after test
    random.seed()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees freshly loaded settings."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


# Hypothesis settings for all property-based tests
settings.register_profile(
    "deterministic",
    deadline=None,
    max_examples=200,
    derandomize=True,
    database=None,
)
settings.load_profile("deterministic")


# ---- Shared fixtures ------------------------------------------


@pytest.fixture
def sample_lines() -> list[str]:
    """Enrollment lines covering duplicates, ties and two carriers."""
    return [
        "U1,John,Smith,1,Acme",
        "U1,John,Smith,2,Acme",
        "U2,Ann,Smith,1,Acme",
        "U3,Bo,Lee,1,Globex",
    ]


@pytest.fixture
def write_input(tmp_path: Path):
    """Write enrollment lines to a CSV file under tmp_path."""

    def _write(lines: list[str], name: str = "enrollments.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
