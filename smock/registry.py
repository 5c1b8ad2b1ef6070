"""Ordered expectation registry resolving incoming calls."""

from __future__ import annotations

import dataclasses as dc
import logging
import threading
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .captor import ArgumentCaptor
    from .expectations import Expectation

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class Resolution:
    """Result of resolving one call against a registry."""

    expectation: Expectation | None

    @property
    def unexpected(self) -> bool:
        """Return ``True`` if no eligible expectation was found."""
        return self.expectation is None


class ExpectationRegistry:
    """Expectations of one mock point, in priority (registration) order."""

    def __init__(self, default_captor: ArgumentCaptor[t.Any] | None = None) -> None:
        self._expectations: list[Expectation] = []
        self._lock = threading.Lock()
        self.default_captor = default_captor

    @property
    def expectations(self) -> list[Expectation]:
        """Return a snapshot of the registered expectations."""
        with self._lock:
            return list(self._expectations)

    def add(self, expectation: Expectation) -> None:
        """Append *expectation* with the lowest priority so far."""
        with self._lock:
            self._expectations.append(expectation)
        logger.debug("Registered expectation %s", expectation.describe())

    def clear(self) -> None:
        """Discard every registered expectation."""
        with self._lock:
            self._expectations.clear()

    def _select(self, args: object) -> tuple[Expectation | None, list[Expectation]]:
        """Consume budget from the first eligible expectation.

        Returns the selected expectation (or ``None``) together with the
        exhausted ``will_never()`` expectations that matched along the way.
        """
        violated: list[Expectation] = []
        # Matchers run unlocked and may re-enter this mock point; only the
        # budget check and decrement are atomic.
        for expectation in self.expectations:
            if not expectation.matches(args):
                continue
            with self._lock:
                consumed = expectation.consume()
            if consumed:
                return expectation, violated
            if expectation.is_never:
                violated.append(expectation)
        return None, violated

    def resolve(self, args: object) -> Resolution:
        """Resolve a call with packed *args* to an expectation.

        The first expectation whose matcher accepts *args* and whose budget is
        not exhausted wins; exhausted matches are skipped and the scan goes
        on. The selected expectation's match callbacks (captors included),
        then the default captor, are run in registration order and its token
        is signalled before the caller runs the response action.
        """
        expectation, violated = self._select(args)
        for never in violated:
            logger.debug("Call matched never-expectation %r", never.description)
            if never.token is not None:
                never.token.fulfill()
        if expectation is None:
            return Resolution(None)

        for callback in expectation.on_match:
            callback(args)
        if self.default_captor is not None:
            self.default_captor.capture(args)
        if expectation.token is not None:
            expectation.token.fulfill()
        logger.debug("Call resolved by %r", expectation.description)
        return Resolution(expectation)

    def __len__(self) -> int:
        with self._lock:
            return len(self._expectations)
