"""Pytest configuration for the zolc test suite."""

import sys
from pathlib import Path

import pytest

# Run against src/ without installing; tests/ holds the shared tree builder
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from ast_builder import TreeBuilder  # noqa: E402
from zolc.traverse import clear_path_caches  # noqa: E402


@pytest.fixture
def b() -> TreeBuilder:
    """A fresh tree builder, so node ids start at 1 in every test."""
    return TreeBuilder()


@pytest.fixture(autouse=True)
def fresh_path_caches():
    """Paths are cached per tree for the whole process; start each test clean."""
    clear_path_caches()
    yield
    clear_path_caches()
