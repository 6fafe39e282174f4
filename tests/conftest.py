"""Shared pytest fixtures for anchormark tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from anchormark.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _fresh_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None]:
    """Keep the cached Settings from leaking between tests.

    Also points the log directory at a throwaway location so nothing that
    calls ``setup_logging`` writes into the working tree.
    """
    monkeypatch.delenv("STORE__PATH", raising=False)
    monkeypatch.setenv("APP__LOG_DIR", str(tmp_path / "logs"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
