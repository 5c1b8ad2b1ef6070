"""Mock session: the explicit per-test context shared by mock points."""

from __future__ import annotations

import dataclasses as dc
import logging
import threading
import types  # noqa: TC003
import typing as t

from .config import SessionConfig, UnexpectedCallPolicy
from .errors import (
    InvertedExpectationError,
    LifecycleError,
    MockUsageError,
    OrderViolationError,
    UnexpectedCallError,
    UnfulfilledExpectationError,
    VerificationError,
)
from .mocks import MockClosure, MockFunction, MockMethod, MockSetter
from .verifiers import (
    describe_unexpected_call,
    describe_usage_error,
    describe_wait_result,
)
from .waiter import ExpectationPool, WaitResult

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_ERROR_TYPES: dict[str, type[VerificationError]] = {
    "unexpected": UnexpectedCallError,
    "unfulfilled": UnfulfilledExpectationError,
    "inverted": InvertedExpectationError,
    "order": OrderViolationError,
    "usage": VerificationError,
}


class FailureSink(t.Protocol):
    """Receiver of test failures, typically bridged to the test framework."""

    def report_failure(self, message: str, location: str | None = None) -> None:
        """Record a failure described by *message*."""
        ...


@dc.dataclass(frozen=True, slots=True)
class Failure:
    """A failure reported during a session."""

    kind: str
    message: str
    location: str | None = None
    test_id: str = ""

    def __str__(self) -> str:
        prefix = f"[{self.location}] " if self.location else ""
        return f"{prefix}{self.message}"


class MockSession:
    """Own the configuration, token pool and failure record of one test.

    Mock points are created through :meth:`method`, :meth:`closure` and
    :meth:`setter` (or constructed directly with the session) and report
    every failure here, never as exceptions into the code under test.
    """

    def __init__(
        self,
        test_id: str = "",
        *,
        config: SessionConfig | None = None,
        sink: FailureSink | None = None,
        verify_on_exit: bool = True,
    ) -> None:
        """Create a session.

        Parameters
        ----------
        test_id:
            Identity of the test driving the session, attached to failures.
        config:
            Baseline configuration restored by :meth:`reset_config` and at
            every lifecycle transition. Defaults to :class:`SessionConfig`.
        sink:
            Optional :class:`FailureSink` notified of each failure in
            addition to the session's own record.
        verify_on_exit:
            When ``True``, leaving the ``with`` block without an exception
            waits for outstanding expectations and calls :meth:`verify`.
        """
        self.test_id = test_id
        self._baseline = config if config is not None else SessionConfig()
        self.config = self._baseline
        self.sink = sink
        self.pool = ExpectationPool()
        self._verify_on_exit = verify_on_exit
        self._mocks: list[MockFunction[t.Any]] = []
        self._failures: list[Failure] = []
        self._lock = threading.Lock()
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def is_started(self) -> bool:
        """Return ``True`` between :meth:`start` and :meth:`end`."""
        return self._started

    def start(self) -> None:
        """Begin the test: reset configuration and forget old failures."""
        if self._started:
            msg = f"Session {self.test_id!r} already started"
            raise LifecycleError(msg)
        self.reset_config()
        with self._lock:
            self._failures.clear()
        self._started = True
        logger.debug("Started mock session %r", self.test_id)

    def end(self) -> None:
        """Finish the test: discard expectations, tokens and configuration."""
        with self._lock:
            mocks, self._mocks = self._mocks, []
        for mock in mocks:
            mock.registry.clear()
        dropped = self.pool.drain()
        if dropped:
            logger.debug(
                "Discarded %d wait token(s) at end of %r", len(dropped), self.test_id
            )
        self.reset_config()
        self._started = False
        logger.debug("Ended mock session %r", self.test_id)

    def __enter__(self) -> MockSession:
        """Start the session."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Optionally wait and verify, then end the session."""
        try:
            if self._verify_on_exit and exc_type is None:
                if self.pool.pending:
                    self.wait_for_expectations()
                self.verify()
        finally:
            self.end()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def configure(self, **changes: object) -> SessionConfig:
        """Apply *changes* to the current configuration and return it."""
        self.config = self.config.replace(**changes)
        return self.config

    def reset_config(self) -> None:
        """Restore the baseline configuration."""
        self.config = self._baseline

    # ------------------------------------------------------------------
    # Mock point factories
    # ------------------------------------------------------------------
    def register(self, mock: MockFunction[T]) -> MockFunction[T]:
        """Track *mock* so :meth:`end` can discard its expectations."""
        with self._lock:
            self._mocks.append(mock)
        return mock

    def method(self, name: str, *, default: object = None) -> MockMethod[t.Any]:
        """Create a :class:`MockMethod` named *name*."""
        return MockMethod(self, name, default=default)

    def closure(
        self, label: str = MockClosure.DEFAULT_LABEL, *, default: object = None
    ) -> MockClosure[t.Any]:
        """Create a :class:`MockClosure` labelled *label*."""
        return MockClosure(self, label, default=default)

    def setter(self, name: str, initial: T) -> MockSetter[T]:
        """Create a :class:`MockSetter` named *name* holding *initial*."""
        return MockSetter(self, name, initial)

    # ------------------------------------------------------------------
    # Failure reporting
    # ------------------------------------------------------------------
    @property
    def failures(self) -> list[Failure]:
        """Return a snapshot of the failures reported so far."""
        with self._lock:
            return list(self._failures)

    def report_failure(
        self, kind: str, message: str, location: str | None = None
    ) -> None:
        """Record a failure and forward it to the configured sink."""
        failure = Failure(kind, message, location, self.test_id)
        with self._lock:
            self._failures.append(failure)
        logger.debug("Recorded %s failure for %r", kind, self.test_id)
        if self.sink is not None:
            self.sink.report_failure(message, location)

    def handle_unexpected_call(
        self,
        label: str,
        args: tuple[object, ...],
        expectations: t.Sequence[Expectation],
    ) -> None:
        """Apply the unexpected-call policy to a call of *label*."""
        policy = self.config.unexpected_call
        if policy is UnexpectedCallPolicy.WARN:
            logger.warning(
                "%s", describe_unexpected_call(label, args, expectations)
            )
        elif policy is UnexpectedCallPolicy.FAIL:
            message = describe_unexpected_call(label, args, expectations)
            self.report_failure("unexpected", message, label)
        else:
            packed = args[0] if len(args) == 1 else args
            policy(label, packed)

    def handle_usage_error(
        self, label: str, expectation: Expectation, exc: BaseException
    ) -> t.NoReturn:
        """Report a raising action hit through a non-raising call and abort."""
        message = describe_usage_error(label, expectation, exc)
        self.report_failure("usage", message, label)
        raise MockUsageError(message) from exc

    # ------------------------------------------------------------------
    # Waiting and verification
    # ------------------------------------------------------------------
    def wait_for_expectations(
        self, timeout: float | None = None, *, enforce_order: bool = False
    ) -> WaitResult:
        """Wait for every finite expectation registered since the last wait.

        Each failure found (unfulfilled, inverted or out-of-order
        expectations) is reported through :meth:`report_failure`.
        """
        if timeout is None:
            timeout = self.config.default_timeout
        result = self.pool.wait(timeout, enforce_order=enforce_order)
        for kind, message in describe_wait_result(result):
            self.report_failure(kind, message)
        return result

    def verify(self) -> None:
        """Raise if any failure was reported during the session.

        Raises
        ------
        VerificationError
            The subclass matching the failure kind when all failures share
            one kind, otherwise :class:`VerificationError` itself.
        """
        failures = self.failures
        if not failures:
            return
        kinds = {failure.kind for failure in failures}
        error_type = (
            _ERROR_TYPES.get(kinds.pop(), VerificationError)
            if len(kinds) == 1
            else VerificationError
        )
        raise error_type("\n\n".join(str(failure) for failure in failures))


__all__ = ["Failure", "FailureSink", "MockSession"]
