"""Shared fixtures for the Inspector MCP tests."""

import logging

import pytest

from inspector_mcp.config import Settings
from inspector_mcp.observability.logging import ROOT_LOGGER
from tests.stubs import StubApi


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key")


@pytest.fixture
def anon_settings() -> Settings:
    return Settings(api_key=None)


@pytest.fixture
def stub() -> StubApi:
    return StubApi()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of settings loading."""
    for name in (
        "GRIDINSOFT_API_KEY",
        "INSPECTOR_MCP_CONFIG",
        "INSPECTOR_MCP_LOG_LEVEL",
        "INSPECTOR_MCP_LOG_FORMAT",
        "INSPECTOR_MCP_TIMEOUT_SECONDS",
        "INSPECTOR_MCP_SERVER_NAME",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by configure_logging during a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
