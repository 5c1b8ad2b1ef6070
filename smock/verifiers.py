"""Failure message formatting for unexpected calls and wait results."""

from __future__ import annotations

import typing as t
from textwrap import indent

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation
    from .waiter import WaitResult, WaitToken


def _format_args(args: tuple[object, ...]) -> str:
    return ", ".join(repr(arg) for arg in args)


def _format_call(name: str, args: tuple[object, ...]) -> str:
    return f"{name}({_format_args(args)})"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_token(token: WaitToken) -> str:
    if token.inverted:
        return f"{token.description!r} (never; called {token.fulfilled_count}x)"
    return (
        f"{token.description!r} "
        f"(called {token.fulfilled_count}x, expected {token.expected_count})"
    )


def describe_unexpected_call(
    label: str,
    args: tuple[object, ...],
    expectations: t.Sequence[Expectation],
) -> str:
    """Return the failure message for an unexpected call to *label*."""
    return _format_sections(
        "Unexpected call.",
        [
            ("Actual call", _format_call(label, args)),
            (
                "Registered expectations",
                _numbered([exp.describe() for exp in expectations]),
            ),
        ],
    )


def describe_usage_error(
    label: str, expectation: Expectation, exc: BaseException
) -> str:
    """Return the message for a raising action hit by a non-raising call."""
    return _format_sections(
        "Mock usage error.",
        [
            ("Mock", label),
            ("Expectation", expectation.describe()),
            ("Raised", f"{type(exc).__name__}: {exc}"),
            (
                "Hint",
                "the expectation raises; invoke the mock with its raising "
                "calling convention (call_raising / as_raising_callable)",
            ),
        ],
    )


def describe_unfulfilled(tokens: t.Sequence[WaitToken], *, timed_out: bool) -> str:
    """Return the message listing tokens that never reached their count."""
    title = "Unfulfilled expectations."
    if timed_out:
        title = "Unfulfilled expectations (wait timed out)."
    entries = [_describe_token(token) for token in tokens]
    return _format_sections(title, [("Expectations", _numbered(entries))])


def describe_inverted(tokens: t.Sequence[WaitToken]) -> str:
    """Return the message listing exercised never-expectations."""
    entries = [_describe_token(token) for token in tokens]
    return _format_sections(
        "Inverted expectations were fulfilled.",
        [("Expectations", _numbered(entries))],
    )


def describe_order_violations(pairs: t.Sequence[tuple[WaitToken, WaitToken]]) -> str:
    """Return the message listing out-of-order fulfilments."""
    entries = [
        f"{later.description!r} fulfilled before {earlier.description!r}"
        for earlier, later in pairs
    ]
    return _format_sections(
        "Ordered expectations violated.", [("Violations", _numbered(entries))]
    )


def describe_wait_result(result: WaitResult) -> list[tuple[str, str]]:
    """Return ``(kind, message)`` pairs for every failure in *result*."""
    failures: list[tuple[str, str]] = []
    if result.unfulfilled:
        failures.append(
            (
                "unfulfilled",
                describe_unfulfilled(result.unfulfilled, timed_out=result.timed_out),
            )
        )
    if result.inverted_fulfilled:
        failures.append(("inverted", describe_inverted(result.inverted_fulfilled)))
    if result.order_violations:
        failures.append(("order", describe_order_violations(result.order_violations)))
    return failures
