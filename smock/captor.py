"""Argument captors recording the values observed at matched calls."""

from __future__ import annotations

import threading
import typing as t

T = t.TypeVar("T")


class ArgumentCaptor(t.Generic[T]):
    """Record arguments of every call resolved by the owning expectation.

    Captors may be shared between expectations and notified from any thread;
    appends are serialised by an internal lock.
    """

    def __init__(self) -> None:
        self._captured: list[T] = []
        self._lock = threading.Lock()

    def capture(self, value: T) -> None:
        """Append *value* to the captured sequence."""
        with self._lock:
            self._captured.append(value)

    @property
    def captured(self) -> tuple[T, ...]:
        """Return a snapshot of every captured value, oldest first."""
        with self._lock:
            return tuple(self._captured)

    @property
    def last_captured(self) -> T:
        """Return the most recent capture.

        Raises
        ------
        LookupError
            If nothing has been captured yet.
        """
        with self._lock:
            if not self._captured:
                msg = "No arguments captured"
                raise LookupError(msg)
            return self._captured[-1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._captured)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(captured={list(self.captured)!r})"


class InitedArgumentCaptor(ArgumentCaptor[T]):
    """Captor that falls back to ``initial`` when nothing was captured."""

    def __init__(self, initial: T) -> None:
        super().__init__()
        self.initial = initial

    @property
    def last_captured(self) -> T:
        """Return the most recent capture, or ``initial`` if there is none."""
        with self._lock:
            return self._captured[-1] if self._captured else self.initial


__all__ = ["ArgumentCaptor", "InitedArgumentCaptor"]
