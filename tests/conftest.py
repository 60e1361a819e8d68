"""Shared fixtures for the svg2pdc test suite."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from svg2pdc.utils.logging_config import pop_context, reset_logging

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(autouse=True)
def _clean_logging() -> Iterator[None]:
    """Drop handlers, context and level changes made by a test."""
    root = logging.getLogger()
    level = root.level
    yield
    reset_logging()
    pop_context()
    logging.captureWarnings(False)
    root.setLevel(level)


@pytest.fixture()
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture()
def write_svg(tmp_path: Path):
    """Write an SVG document into ``tmp_path`` and return its path."""

    def _write(body: str, name: str = "icon.svg", view_box: str = "0 0 50 50") -> Path:
        path = tmp_path / name
        path.write_text(
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{view_box}">{body}</svg>',
            encoding="utf-8",
        )
        return path

    return _write
