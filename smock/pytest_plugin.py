"""Pytest plugin providing the ``smock`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .config import SessionConfig, parse_policy, parse_timeout
from .session import MockSession

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("smock")
    group.addoption(
        "--smock-auto-wait",
        action="store_true",
        dest="smock_auto_wait",
        default=None,
        help=(
            "Wait for outstanding expectations and verify the smock session "
            "during fixture teardown. Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-smock-auto-wait",
        action="store_false",
        dest="smock_auto_wait",
        default=None,
        help=(
            "Disable the automatic wait for outstanding expectations during "
            "teardown. Recorded failures still fail the test."
        ),
    )
    parser.addini(
        "smock_auto_wait",
        "Wait for outstanding smock expectations during fixture teardown.",
        type="bool",
        default=True,
    )
    parser.addini(
        "smock_default_timeout",
        "Default timeout in seconds for wait_for_expectations().",
        default="1.0",
    )
    parser.addini(
        "smock_unexpected_call",
        "Reaction to unexpected mock calls: 'fail' or 'warn'.",
        default="fail",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "smock(auto_wait: bool = True, timeout: float | None = None): "
            "override the smock fixture's teardown wait for a single test."
        ),
    )


class _SmockItem(t.Protocol):
    """pytest item carrying smock teardown metadata."""

    _smock_session: MockSession | None
    _smock_verify_error: Exception | None
    _smock_verify_should_fail: bool


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _marker_kwargs(request: pytest.FixtureRequest) -> dict[str, t.Any]:
    marker = request.node.get_closest_marker("smock")
    return {} if marker is None else dict(marker.kwargs)


def _auto_wait_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether teardown should wait for outstanding expectations."""
    # Priority order: marker > fixture param > CLI option > INI setting
    marker = _marker_kwargs(request)
    if "auto_wait" in marker:
        return bool(marker["auto_wait"])

    param_value = _get_param_auto_wait(request)
    if param_value is not None:
        return param_value

    config = request.config
    cli_value = config.getoption("smock_auto_wait")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("smock_auto_wait"))


def _get_param_auto_wait(request: pytest.FixtureRequest) -> bool | None:
    """Return fixture parameter override for auto wait if present."""
    param = getattr(request, "param", None)
    if param is None:
        return None
    if isinstance(param, dict):
        if "auto_wait" in param:
            return bool(param["auto_wait"])
        keys = list(param.keys())
        msg = f"smock fixture param dict must contain 'auto_wait' key, got keys: {keys}"
        raise TypeError(msg)
    if isinstance(param, bool):
        return param
    msg = (
        "smock fixture param must be a bool or dict with 'auto_wait' key, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


def _session_config(request: pytest.FixtureRequest) -> SessionConfig:
    """Build the session configuration from ini options and the marker."""
    config = request.config
    timeout = _marker_kwargs(request).get("timeout")
    if timeout is None:
        timeout = config.getini("smock_default_timeout")
    return SessionConfig(
        unexpected_call=parse_policy(config.getini("smock_unexpected_call")),
        default_timeout=parse_timeout(timeout),
    )


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a teardown verification error to an already failed test."""
    err: Exception | None = getattr(item, "_smock_verify_error", None)
    if err is None:
        return
    delattr(item, "_smock_verify_error")
    should_fail = getattr(item, "_smock_verify_should_fail", False)
    if hasattr(item, "_smock_verify_should_fail"):
        delattr(item, "_smock_verify_should_fail")
    if not should_fail:
        report.sections.append(("smock verification", f"{type(err).__name__}: {err}"))


@pytest.fixture
def smock(request: pytest.FixtureRequest) -> t.Generator[MockSession, None, None]:
    """Provide a started :class:`MockSession` bound to the current test."""
    session = MockSession(
        request.node.nodeid,
        config=_session_config(request),
        verify_on_exit=False,
    )
    auto_wait = _auto_wait_enabled(request)
    session.start()
    typed_item = t.cast("_SmockItem", request.node)
    typed_item._smock_session = session
    try:
        yield session
    finally:
        _teardown_smock(request.node, session, auto_wait=auto_wait)


def _teardown_smock(item: pytest.Item, session: MockSession, *, auto_wait: bool) -> None:
    """Wait for outstanding expectations, verify, and end the session."""
    typed_item = t.cast("_SmockItem", item)
    should_raise = False
    try:
        if auto_wait and session.pool.pending:
            session.wait_for_expectations()
        session.verify()
    except Exception as err:
        logger.exception("smock verification failed for %s", item.nodeid)
        typed_item._smock_verify_error = err
        should_fail = not _call_stage_failed(item)
        typed_item._smock_verify_should_fail = should_fail
        should_raise = should_fail
    finally:
        session.end()
        if getattr(typed_item, "_smock_session", None) is session:
            delattr(typed_item, "_smock_session")
    if should_raise:
        err = typed_item._smock_verify_error
        pytest.fail(f"{type(err).__name__}: {err}", pytrace=False)


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
