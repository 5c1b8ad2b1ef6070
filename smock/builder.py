"""Fluent ``expect -> match -> will`` builder for expectations."""

from __future__ import annotations

import enum
import typing as t

from .actions import Action, ExactCount, Times, Unlimited, as_times
from .expectations import Expectation
from .errors import LifecycleError
from .matchers import Any, Matcher, as_matcher

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .captor import ArgumentCaptor
    from .mocks import MockFunction

M = t.TypeVar("M", bound="MockFunction")


class BuilderState(enum.StrEnum):
    """States of :class:`ExpectationBuilder`."""

    UNCONFIGURED = "UNCONFIGURED"
    MATCHED = "MATCHED"
    ARMED = "ARMED"


class ExpectationBuilder(t.Generic[M]):
    """Draft expectation committed to its mock point by a ``will*`` call.

    ``match()`` may be called once, before any ``on_match()`` or
    ``capture()``; when omitted the expectation matches any arguments. Committing returns the owning mock
    point so further expectations can be chained.
    """

    def __init__(self, mock: M, description: str) -> None:
        self._mock = mock
        self._description = description
        self._matcher: Matcher = Any()
        self._on_match: list[t.Callable[[object], object]] = []
        self._state = BuilderState.UNCONFIGURED

    @property
    def state(self) -> BuilderState:
        """Return the current builder state."""
        return self._state

    def _require_not_armed(self, action: str) -> None:
        if self._state is BuilderState.ARMED:
            msg = (
                f"Cannot call {action}(): expectation {self._description!r} "
                "is already armed"
            )
            raise LifecycleError(msg)

    def match(self, matcher: Matcher | object) -> ExpectationBuilder[M]:
        """Match calls with *matcher*, or by equality with a plain value."""
        self._require_not_armed("match")
        if self._state is not BuilderState.UNCONFIGURED:
            msg = f"Cannot call match(): {self._description!r} already has a matcher"
            raise LifecycleError(msg)
        self._matcher = as_matcher(matcher)
        self._state = BuilderState.MATCHED
        return self

    def on_match(
        self, callback: t.Callable[[object], object]
    ) -> ExpectationBuilder[M]:
        """Run *callback* with the packed arguments of every resolved call.

        Callbacks run in registration order, before the token is signalled
        and the response action runs.
        """
        self._require_not_armed("on_match")
        self._on_match.append(callback)
        self._state = BuilderState.MATCHED
        return self

    def capture(self, captor: ArgumentCaptor[t.Any]) -> ExpectationBuilder[M]:
        """Notify *captor* with the arguments of every resolved call."""
        self._require_not_armed("capture")
        return self.on_match(captor.capture)

    def will_once(self, action: Action | None = None) -> M:
        """Expect exactly one matching call, answered by *action*."""
        return self._commit(ExactCount(1), action, "will_once")

    def will_repeatedly(
        self, times: Times | int | None = None, action: Action | None = None
    ) -> M:
        """Expect *times* matching calls (default unlimited), answered by *action*."""
        policy = Unlimited() if times is None else as_times(times)
        return self._commit(policy, action, "will_repeatedly")

    def will_never(self) -> M:
        """Assert that no matching call happens."""
        return self._commit(ExactCount(0), None, "will_never")

    def _commit(self, times: Times, action: Action | None, name: str) -> M:
        self._require_not_armed(name)
        token = self._mock.session.pool.create_token(self._description, times)
        expectation = Expectation(
            description=self._description,
            matcher=self._matcher,
            times=times,
            action=action,
            on_match=tuple(self._on_match),
            token=token,
        )
        self._mock.registry.add(expectation)
        self._state = BuilderState.ARMED
        return self._mock
