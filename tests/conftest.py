from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.definition_tree import DefinitionTreeBuilder


@pytest.fixture
def tree(tmp_path: Path) -> DefinitionTreeBuilder:
    """Provide a reusable definition tree rooted at the pytest tmp_path."""
    return DefinitionTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_msggen_logger() -> Iterator[None]:
    """Undo configure_logging so caplog keeps seeing msggen records."""
    yield
    logger = logging.getLogger("msggen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
