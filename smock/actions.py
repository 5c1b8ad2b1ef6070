"""Call-count policies and response actions for expectations."""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as t


@dc.dataclass(frozen=True, slots=True)
class ExactCount:
    """Expect exactly ``count`` matching calls; ``0`` means never."""

    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            msg = f"count must be non-negative, got {self.count}"
            raise ValueError(msg)

    @property
    def budget(self) -> int:
        """Return the number of calls this policy allows."""
        return self.count

    @property
    def is_never(self) -> bool:
        """Return ``True`` for the inverted ``ExactCount(0)`` policy."""
        return self.count == 0


@dc.dataclass(frozen=True, slots=True)
class Unlimited:
    """Allow any number of matching calls, including none."""

    @property
    def budget(self) -> int:
        """Return an effectively infinite call budget."""
        return sys.maxsize

    @property
    def is_never(self) -> bool:
        """Unlimited expectations are never inverted."""
        return False


Times = ExactCount | Unlimited


def as_times(value: Times | int) -> Times:
    """Normalise *value* into a :data:`Times` policy."""
    if isinstance(value, ExactCount | Unlimited):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"times must be an int, ExactCount or Unlimited, got {value!r}"
        raise TypeError(msg)
    return ExactCount(value)


@dc.dataclass(frozen=True, slots=True)
class Return:
    """Respond with ``value``."""

    value: object

    def __call__(self, *args: object) -> object:
        return self.value


@dc.dataclass(frozen=True, slots=True)
class Raise:
    """Respond by raising ``error``."""

    error: BaseException

    def __call__(self, *args: object) -> t.NoReturn:
        raise self.error


@dc.dataclass(frozen=True, slots=True)
class Perform:
    """Respond with ``func(*args)``; ``func`` may also raise."""

    func: t.Callable[..., object]

    def __call__(self, *args: object) -> object:
        return self.func(*args)


Action = Return | Raise | Perform


__all__ = [
    "Action",
    "ExactCount",
    "Perform",
    "Raise",
    "Return",
    "Times",
    "Unlimited",
    "as_times",
]
