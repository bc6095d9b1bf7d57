"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def simple_stream(fixtures_dir: Path) -> Path:
    """Return path to simple.jsonl fixture."""
    return fixtures_dir / "simple.jsonl"


@pytest.fixture
def with_subagent_stream(fixtures_dir: Path) -> Path:
    """Return path to with_subagent.jsonl fixture."""
    return fixtures_dir / "with_subagent.jsonl"


@pytest.fixture
def with_question_stream(fixtures_dir: Path) -> Path:
    """Return path to with_question.jsonl fixture."""
    return fixtures_dir / "with_question.jsonl"
