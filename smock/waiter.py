"""Waitable tokens and the pool that collects them for ``wait_for_expectations``.

Every expectation with a finite count registers one :class:`WaitToken` in the
session's :class:`ExpectationPool`. The wait operation drains the pool, so
tokens created afterwards belong to the next batch, then blocks until every
drained token reaches its expected count or the timeout elapses.
"""

from __future__ import annotations

import dataclasses as dc
import itertools
import logging
import threading
import time
import typing as t

from .actions import ExactCount, Times

logger = logging.getLogger(__name__)


class WaitToken:
    """Fulfilment counter for one finite expectation.

    Inverted tokens belong to ``will_never()`` expectations: any fulfilment is
    a failure rather than progress.
    """

    def __init__(
        self,
        description: str,
        expected_count: int,
        *,
        inverted: bool,
        sequence: int,
        condition: threading.Condition,
        completion_counter: t.Iterator[int],
    ) -> None:
        self.description = description
        self.expected_count = expected_count
        self.inverted = inverted
        self.sequence = sequence
        self._condition = condition
        self._completion_counter = completion_counter
        self._fulfilled = 0
        self._completed_at: int | None = None

    @property
    def fulfilled_count(self) -> int:
        """Return the number of times the token was signalled."""
        with self._condition:
            return self._fulfilled

    @property
    def completed_at(self) -> int | None:
        """Return the completion sequence number, or ``None`` if pending."""
        with self._condition:
            return self._completed_at

    @property
    def is_satisfied(self) -> bool:
        """Return ``True`` once the token no longer holds up a wait."""
        with self._condition:
            return self._satisfied_locked()

    def _satisfied_locked(self) -> bool:
        if self.inverted:
            return self._fulfilled == 0
        return self._fulfilled >= self.expected_count

    def fulfill(self) -> None:
        """Record one fulfilment and wake any waiter."""
        with self._condition:
            self._fulfilled += 1
            if self._completed_at is None and (
                self.inverted or self._fulfilled >= self.expected_count
            ):
                self._completed_at = next(self._completion_counter)
            self._condition.notify_all()

    def __repr__(self) -> str:
        kind = "inverted" if self.inverted else f"expected={self.expected_count}"
        return (
            f"WaitToken({self.description!r}, {kind}, "
            f"fulfilled={self.fulfilled_count})"
        )


@dc.dataclass(slots=True)
class WaitResult:
    """Outcome of :meth:`ExpectationPool.wait`."""

    tokens: list[WaitToken] = dc.field(default_factory=list)
    timed_out: bool = False
    unfulfilled: list[WaitToken] = dc.field(default_factory=list)
    inverted_fulfilled: list[WaitToken] = dc.field(default_factory=list)
    order_violations: list[tuple[WaitToken, WaitToken]] = dc.field(
        default_factory=list
    )

    @property
    def completed(self) -> bool:
        """Return ``True`` when every regular token reached its count."""
        return not self.unfulfilled

    @property
    def ok(self) -> bool:
        """Return ``True`` when the wait found no failure of any kind."""
        return (
            not self.unfulfilled
            and not self.inverted_fulfilled
            and not self.order_violations
        )

    def __bool__(self) -> bool:
        return self.ok


class ExpectationPool:
    """Collect outstanding wait tokens and block on them with a timeout."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._condition = threading.Condition()
        self._pending: list[WaitToken] = []
        self._sequence = itertools.count()
        self._completion_counter = itertools.count()

    def create_token(self, description: str, times: Times) -> WaitToken | None:
        """Register a token for an expectation with policy *times*.

        Returns ``None`` for unlimited expectations, which can never be
        waited for. ``ExactCount(0)`` produces an inverted token.
        """
        if not isinstance(times, ExactCount):
            return None
        with self._lock:
            token = WaitToken(
                description,
                times.count,
                inverted=times.is_never,
                sequence=next(self._sequence),
                condition=self._condition,
                completion_counter=self._completion_counter,
            )
            self._pending.append(token)
        logger.debug("Registered wait token %r", token)
        return token

    @property
    def pending(self) -> list[WaitToken]:
        """Return a snapshot of tokens not yet drained by a wait."""
        with self._lock:
            return list(self._pending)

    def drain(self) -> list[WaitToken]:
        """Remove and return every pending token."""
        with self._lock:
            tokens, self._pending = self._pending, []
        return tokens

    def wait(self, timeout: float, *, enforce_order: bool = False) -> WaitResult:
        """Block until the drained tokens are fulfilled or *timeout* elapses.

        A batch holding inverted tokens keeps the wait open for the whole
        timeout, so forbidden calls made by other threads are still observed;
        it ends early only when an inverted token fires. Without inverted
        tokens the wait returns as soon as every regular token is satisfied.
        """
        if timeout < 0:
            msg = f"timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        tokens = self.drain()
        regular = [token for token in tokens if not token.inverted]
        inverted = [token for token in tokens if token.inverted]

        def done() -> bool:
            if any(token._fulfilled for token in inverted):  # noqa: SLF001
                return True
            if inverted:
                return False
            return all(token._satisfied_locked() for token in regular)  # noqa: SLF001

        deadline = time.monotonic() + timeout
        with self._condition:
            finished = self._condition.wait_for(
                done, timeout=max(0.0, deadline - time.monotonic())
            )

        result = WaitResult(
            tokens=tokens,
            timed_out=not finished,
            unfulfilled=[token for token in regular if not token.is_satisfied],
            inverted_fulfilled=[token for token in inverted if token.fulfilled_count],
        )
        if enforce_order:
            result.order_violations = _order_violations(regular)
        logger.debug(
            "Waited for %d token(s): ok=%s timed_out=%s",
            len(tokens),
            result.ok,
            result.timed_out,
        )
        return result


def _order_violations(tokens: list[WaitToken]) -> list[tuple[WaitToken, WaitToken]]:
    """Return every ``(earlier, later)`` pair where *later* completed first.

    Pairs are listed in creation order of *earlier*, then of *later*. Tokens
    that never completed take no part in the check.
    """
    ordered = sorted(tokens, key=lambda token: token.sequence)
    completed = [(token, token.completed_at) for token in ordered]
    completed = [(token, at) for token, at in completed if at is not None]
    return [
        (earlier, later)
        for index, (earlier, earlier_at) in enumerate(completed)
        for later, later_at in completed[index + 1 :]
        if later_at < earlier_at
    ]


__all__ = ["ExpectationPool", "WaitResult", "WaitToken"]
