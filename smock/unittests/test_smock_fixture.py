"""Tests for the ``smock`` pytest fixture and its teardown verification."""

from __future__ import annotations

import textwrap
import typing as t

import pytest

if t.TYPE_CHECKING:  # pragma: no cover - used for type checking only
    from _pytest.pytester import Pytester

HEADER = textwrap.dedent(
    """
    import threading

    import pytest

    from smock import Raise, Return

    pytest_plugins = ("smock.pytest_plugin",)
    """
)


def _run(pytester: Pytester, body: str, *args: str) -> pytest.RunResult:
    pytester.makepyfile(HEADER + textwrap.dedent(body))
    # Command-line flags need the plug-in loaded before argument parsing.
    plugins = ("smock.pytest_plugin",) if args else ()
    return pytester.runpytest(*args, plugins=plugins)


def test_fixture_passes_when_expectations_are_met(pytester: Pytester) -> None:
    """Fulfilled expectations let the test pass."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            to_string = smock.method("to_string", default="")
            to_string.expect("e1").match(2).will_once(Return("two"))
            assert to_string.call(2) == "two"
        """,
    )
    result.assert_outcomes(passed=1)


def test_fixture_waits_for_background_calls(pytester: Pytester) -> None:
    """Teardown waits for calls made by worker threads."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            done = smock.closure("done")
            done.expect("done").will_once()
            threading.Timer(0.05, done).start()
        """,
    )
    result.assert_outcomes(passed=1)


def test_unexpected_call_fails_at_teardown(pytester: Pytester) -> None:
    """Unexpected calls surface as teardown errors naming the call."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            smock.method("to_string", default="").call(3)
        """,
    )
    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*UnexpectedCallError*", "*to_string(3)*"])


def test_unfulfilled_expectation_fails_at_teardown(pytester: Pytester) -> None:
    """Missing calls are reported once the wait times out."""
    result = _run(
        pytester,
        """
        @pytest.mark.smock(timeout=0.05)
        def test_example(smock):
            smock.method("save").expect("save once").will_once()
        """,
    )
    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*'save once' (called 0x, expected 1)*"])


def test_marker_can_disable_auto_wait(pytester: Pytester) -> None:
    """Without auto wait, pending expectations are not checked."""
    result = _run(
        pytester,
        """
        @pytest.mark.smock(auto_wait=False)
        def test_example(smock):
            smock.method("save").expect("save once").will_once()
        """,
    )
    result.assert_outcomes(passed=1)


def test_cli_option_disables_auto_wait(pytester: Pytester) -> None:
    """--no-smock-auto-wait overrides the ini default."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            smock.method("save").expect("save once").will_once()
        """,
        "--no-smock-auto-wait",
    )
    result.assert_outcomes(passed=1)


def test_ini_policy_warn_does_not_fail(pytester: Pytester) -> None:
    """smock_unexpected_call = warn only logs unexpected calls."""
    pytester.makeini(
        """
        [pytest]
        smock_unexpected_call = warn
        """
    )
    result = _run(
        pytester,
        """
        def test_example(smock):
            smock.method("f").call(1)
        """,
    )
    result.assert_outcomes(passed=1)


def test_failed_body_is_not_double_reported(pytester: Pytester) -> None:
    """A failing test keeps its own failure; verification goes to a section."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            smock.method("f").call(1)
            assert False, "body failed"
        """,
    )
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*body failed*"])


def test_usage_error_aborts_the_test(pytester: Pytester) -> None:
    """Non-raising calls into raising expectations abort with MockUsageError."""
    result = _run(
        pytester,
        """
        def test_example(smock):
            load = smock.method("load")
            load.expect("fails").will_once(Raise(OSError("gone")))
            load.call("path")
        """,
    )
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*MockUsageError*"])


def test_fixture_param_must_be_bool_or_dict(pytester: Pytester) -> None:
    """Indirect fixture params are validated."""
    result = _run(
        pytester,
        """
        @pytest.mark.parametrize("smock", ["yes"], indirect=True)
        def test_example(smock):
            pass
        """,
    )
    result.assert_outcomes(errors=1)
    result.stdout.fnmatch_lines(["*smock fixture param must be a bool*"])
