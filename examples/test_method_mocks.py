"""Example tests demonstrating method mocks and matchers."""

from __future__ import annotations

import typing as t

from smock import (
    AllOf,
    ArgumentCaptor,
    Ge,
    Lt,
    Perform,
    Raise,
    Return,
    SplitArgs,
    StartsWith,
)

pytest_plugins = ("smock.pytest_plugin",)

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from smock import MockSession


class Formatter:
    """Code under test: renders numbers through a pluggable speller."""

    def __init__(self, spell: t.Callable[[int], str | None]) -> None:
        self.spell = spell

    def render(self, values: list[int]) -> str:
        return ", ".join(self.spell(value) or "?" for value in values)


def test_once_then_repeatedly(smock: MockSession) -> None:
    """A once-expectation answers first; the repeated one takes over."""
    spell = smock.method("spell", default=None)
    spell.expect("first one").match(1).will_once(Return("one"))
    spell.expect("later ones").match(1).will_repeatedly(None, Return("uno"))
    spell.expect("small").match(AllOf(Ge(2), Lt(10))).will_repeatedly(
        None, Return("small")
    )

    formatter = Formatter(spell.call)

    assert formatter.render([1, 1, 3]) == "one, uno, small"


def test_multi_argument_matching(smock: MockSession) -> None:
    """Calls with several arguments are matched element-wise."""
    send = smock.method("send")
    captor: ArgumentCaptor[tuple[str, int]] = ArgumentCaptor()
    send.expect("to alice").match(SplitArgs(StartsWith("alice"), Ge(0))).capture(
        captor
    ).will_repeatedly(2)

    send.call("alice@example.org", 3)
    send.call("alice@example.com", 0)

    assert captor.captured == (("alice@example.org", 3), ("alice@example.com", 0))


def test_perform_computes_the_result(smock: MockSession) -> None:
    """Perform runs a callable with the call's arguments."""
    add = smock.method("add")
    add.expect("any sum").will_repeatedly(None, Perform(lambda a, b: a + b))

    assert add.call(2, 3) == 5
    assert add.call(10, -4) == 6


def test_raising_call_propagates_errors(smock: MockSession) -> None:
    """call_raising surfaces the configured exception to the caller."""
    load = smock.method("load")
    load.expect("missing file").match("cfg.toml").will_once(
        Raise(FileNotFoundError("cfg.toml"))
    )

    try:
        load.call_raising("cfg.toml")
    except FileNotFoundError as exc:
        assert str(exc) == "cfg.toml"
    else:  # pragma: no cover - the expectation must raise
        raise AssertionError("expected FileNotFoundError")
