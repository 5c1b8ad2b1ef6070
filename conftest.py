"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

from smock import MockSession, SessionConfig

pytest_plugins = ("pytester", "smock.pytest_plugin")


@pytest.fixture
def session() -> t.Generator[MockSession, None, None]:
    """Provide a started session that does not verify on teardown.

    Unit tests inspect ``session.failures`` directly instead of relying on
    the ``smock`` fixture's teardown verification.
    """
    mock_session = MockSession(
        "unit", config=SessionConfig(default_timeout=0.2), verify_on_exit=False
    )
    mock_session.start()
    yield mock_session
    mock_session.end()
