"""Test doubles for Python: expectations, matchers, captors and waiting.

Declare expected calls on mock points owned by a :class:`MockSession`, let
the code under test invoke them (from any thread), then wait for the
expectations to be fulfilled::

    with MockSession("test_greeting") as session:
        to_string = session.method("to_string", default="")
        to_string.expect("two").match(2).will_once(Return("two"))
        assert to_string.call(2) == "two"
"""

from __future__ import annotations

from .actions import Action, ExactCount, Perform, Raise, Return, Times, Unlimited
from .builder import BuilderState, ExpectationBuilder
from .captor import ArgumentCaptor, InitedArgumentCaptor
from .config import SessionConfig, UnexpectedCallPolicy
from .errors import (
    ConfigurationError,
    InvertedExpectationError,
    LifecycleError,
    MockUsageError,
    OrderViolationError,
    SmockError,
    UnexpectedCallError,
    UnfulfilledExpectationError,
    VerificationError,
)
from .expectations import Expectation
from .matchers import (
    AllOf,
    Any,
    AnyOf,
    AtLeastOne,
    Contains,
    ContainsAllOf,
    ContainsAnyOf,
    Each,
    EndsWith,
    Eq,
    Field,
    Ge,
    Gt,
    In,
    IsEmpty,
    IsFalse,
    IsInstance,
    IsNone,
    IsTrue,
    Item,
    Le,
    Lt,
    Matcher,
    Ne,
    Not,
    NotNone,
    Optional,
    Predicate,
    Regex,
    SizeIs,
    SplitArgs,
    StartsWith,
    StrCaseEq,
    StrCaseNe,
)
from .mocks import MockClosure, MockFunction, MockMethod, MockProperty, MockSetter
from .registry import ExpectationRegistry, Resolution
from .session import Failure, FailureSink, MockSession
from .waiter import ExpectationPool, WaitResult, WaitToken

__all__ = [
    "Action",
    "AllOf",
    "Any",
    "AnyOf",
    "ArgumentCaptor",
    "AtLeastOne",
    "BuilderState",
    "ConfigurationError",
    "Contains",
    "ContainsAllOf",
    "ContainsAnyOf",
    "Each",
    "EndsWith",
    "Eq",
    "ExactCount",
    "Expectation",
    "ExpectationBuilder",
    "ExpectationPool",
    "ExpectationRegistry",
    "Failure",
    "FailureSink",
    "Field",
    "Ge",
    "Gt",
    "In",
    "InitedArgumentCaptor",
    "InvertedExpectationError",
    "IsEmpty",
    "IsFalse",
    "IsInstance",
    "IsNone",
    "IsTrue",
    "Item",
    "Le",
    "LifecycleError",
    "Lt",
    "Matcher",
    "MockClosure",
    "MockFunction",
    "MockMethod",
    "MockProperty",
    "MockSession",
    "MockSetter",
    "MockUsageError",
    "Ne",
    "Not",
    "NotNone",
    "Optional",
    "OrderViolationError",
    "Perform",
    "Predicate",
    "Raise",
    "Regex",
    "Resolution",
    "Return",
    "SessionConfig",
    "SizeIs",
    "SmockError",
    "SplitArgs",
    "StartsWith",
    "StrCaseEq",
    "StrCaseNe",
    "Times",
    "UnexpectedCallError",
    "UnexpectedCallPolicy",
    "UnfulfilledExpectationError",
    "Unlimited",
    "VerificationError",
    "WaitResult",
    "WaitToken",
]
