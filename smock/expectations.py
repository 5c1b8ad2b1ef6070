"""Expectation records held by a mock point's registry."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .actions import Action, ExactCount, Times, Unlimited
from .matchers import Any, Matcher

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .waiter import WaitToken


@dc.dataclass(slots=True, eq=False)
class Expectation:
    """A registered rule: matcher, call budget and response.

    ``remaining`` starts at the budget of ``times`` and is only ever
    decremented, by :meth:`ExpectationRegistry.resolve` while it holds the
    registry lock. An expectation with ``remaining == 0`` never matches again.
    """

    description: str
    matcher: Matcher = dc.field(default_factory=Any)
    times: Times = dc.field(default_factory=Unlimited)
    action: Action | None = None
    on_match: tuple[t.Callable[[object], object], ...] = ()
    token: WaitToken | None = None
    remaining: int = dc.field(init=False)
    calls: int = dc.field(init=False, default=0)

    def __post_init__(self) -> None:
        self.remaining = self.times.budget

    @property
    def is_never(self) -> bool:
        """Return ``True`` if the expectation asserts a call must not happen."""
        return self.times.is_never

    @property
    def is_exhausted(self) -> bool:
        """Return ``True`` once no call budget remains."""
        return self.remaining <= 0

    @property
    def is_satisfied(self) -> bool:
        """Return ``True`` when the expected number of calls was observed."""
        if isinstance(self.times, ExactCount):
            return self.calls == self.times.count
        return True

    def matches(self, args: object) -> bool:
        """Return ``True`` if the matcher accepts *args*, ignoring budget."""
        return bool(self.matcher(args))

    def consume(self) -> bool:
        """Take one call from the budget; caller must hold the registry lock."""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        self.calls += 1
        return True

    def describe(self) -> str:
        """Return a one-line human readable summary."""
        if isinstance(self.times, ExactCount):
            times = "never" if self.is_never else f"times={self.times.count}"
        else:
            times = "times=unlimited"
        return f"{self.description!r} match={self.matcher!r} {times} calls={self.calls}"
