"""Shared test fixtures and configuration."""

import os
import sys
from pathlib import Path

# Add atakora_lib/ to Python path so `from atakora.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "atakora_lib"))

import pytest

os.environ["ATAKORA_DEV_MODE"] = "true"

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def valid_template_text(fixtures_dir: Path) -> str:
    return (fixtures_dir / "valid_template.json").read_text()


@pytest.fixture
def broken_template_text(fixtures_dir: Path) -> str:
    return (fixtures_dir / "broken_template.json").read_text()
