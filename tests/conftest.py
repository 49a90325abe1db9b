"""Global test fixtures and configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.lsif_builder import LsifGraphBuilder

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def lsif() -> LsifGraphBuilder:
	"""An empty LSIF dump builder."""
	return LsifGraphBuilder()


@pytest.fixture
def fixtures_dir() -> Path:
	"""Directory holding the JSONL fixtures."""
	return FIXTURES_DIR


@pytest.fixture(autouse=True)
def reset_root_logger() -> Iterator[None]:
	"""Drop handlers installed by the CLI so tests do not leak logging configuration."""
	yield
	root_logger = logging.getLogger()
	for handler in root_logger.handlers[:]:
		if not type(handler).__module__.startswith("_pytest"):
			root_logger.removeHandler(handler)
	root_logger.setLevel(logging.WARNING)

