"""Exception hierarchy for smock."""

from __future__ import annotations


class SmockError(Exception):
    """Base class for all smock errors."""


class LifecycleError(SmockError):
    """Raised when a builder or session is used in the wrong state."""


class ConfigurationError(SmockError, ValueError):
    """Raised when session configuration values are invalid."""


class MockUsageError(SmockError):
    """Raised when a raising action is hit through a non-raising call.

    This signals a mistake in the test itself (the mock was invoked with the
    non-raising convention although the selected expectation raises), not a
    defect in the code under test.
    """


class VerificationError(SmockError):
    """Base class for failures found while verifying expectations."""


class UnexpectedCallError(VerificationError):
    """A mock point was invoked with no eligible expectation."""


class UnfulfilledExpectationError(VerificationError):
    """A finite expectation did not receive all of its calls in time."""


class InvertedExpectationError(VerificationError):
    """An expectation registered with ``will_never()`` was exercised."""


class OrderViolationError(VerificationError):
    """Expectations were fulfilled out of registration order."""


__all__ = [
    "ConfigurationError",
    "InvertedExpectationError",
    "LifecycleError",
    "MockUsageError",
    "OrderViolationError",
    "SmockError",
    "UnexpectedCallError",
    "UnfulfilledExpectationError",
    "VerificationError",
]
