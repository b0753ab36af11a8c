# tests/conftest.py
"""Shared test setup for project."""

from collections.abc import Iterator

import pytest
from pytest import Config, Item as PytestItem

from lua_inline.logs import get_logger


@pytest.fixture(autouse=True)
def reset_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts at the default level, colorless, with no env overrides."""
    for var in (
        "LOG_LEVEL",
        "LUA_INLINE_LOG_LEVEL",
        "WATCH_INTERVAL",
        "LUA_INLINE_WATCH_INTERVAL",
        "FORCE_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)

    logger = get_logger()
    prev_level = logger.level
    prev_color = logger.enable_color
    logger.setLevel("info")
    logger.enable_color = False
    yield
    logger.setLevel(prev_level)
    logger.enable_color = prev_color


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Automatically skip debug tests unless asked for."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return  # user explicitly requested them, don't skip

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
