"""Matcher classes used to decide whether an expectation applies to a call.

Every matcher is a pure callable taking the packed call arguments (a single
value for one-argument calls, a tuple otherwise) and returning ``True`` when
they match. Matchers compose: container and projection matchers accept either
a nested matcher or a plain value, which is compared with :class:`Eq`.
"""

from __future__ import annotations

import dataclasses as dc
import operator
import re
import typing as t


class Matcher:
    """Callable returning ``True`` when a value matches."""

    __slots__ = ()

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* satisfies the matcher."""
        raise NotImplementedError


def as_matcher(value: object) -> Matcher:
    """Return *value* when it is a matcher, otherwise ``Eq(value)``."""
    if isinstance(value, Matcher):
        return value
    return Eq(value)


# ----------------------------------------------------------------------
# Composition
# ----------------------------------------------------------------------
@dc.dataclass(frozen=True, slots=True)
class Any(Matcher):
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True


class AllOf(Matcher):
    """Match when every sub-matcher matches."""

    __slots__ = ("matchers",)

    def __init__(self, *matchers: object) -> None:
        self.matchers = tuple(as_matcher(m) for m in matchers)

    def __call__(self, value: object) -> bool:
        """Return ``True`` when no sub-matcher rejects *value*."""
        return all(matcher(value) for matcher in self.matchers)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"AllOf({', '.join(repr(m) for m in self.matchers)})"


class AnyOf(Matcher):
    """Match when at least one sub-matcher matches."""

    __slots__ = ("matchers",)

    def __init__(self, *matchers: object) -> None:
        self.matchers = tuple(as_matcher(m) for m in matchers)

    def __call__(self, value: object) -> bool:
        """Return ``True`` when any sub-matcher accepts *value*."""
        return any(matcher(value) for matcher in self.matchers)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"AnyOf({', '.join(repr(m) for m in self.matchers)})"


@dc.dataclass(frozen=True, slots=True)
class Not(Matcher):
    """Invert ``matcher``."""

    matcher: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` when the wrapped matcher rejects *value*."""
        return not as_matcher(self.matcher)(value)


class SplitArgs(Matcher):
    """Apply one matcher per slot of a tuple of arguments.

    The number of matchers must equal the number of arguments; a call with a
    different arity never matches.
    """

    __slots__ = ("matchers",)

    def __init__(self, *matchers: object) -> None:
        self.matchers = tuple(as_matcher(m) for m in matchers)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if every argument satisfies its matcher."""
        if not isinstance(value, tuple) or len(value) != len(self.matchers):
            return False
        return all(
            matcher(arg) for matcher, arg in zip(self.matchers, value, strict=True)
        )

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"SplitArgs({', '.join(repr(m) for m in self.matchers)})"


# ----------------------------------------------------------------------
# Projection, optional values and casting
# ----------------------------------------------------------------------
@dc.dataclass(frozen=True, slots=True)
class Field(Matcher):
    """Apply ``matcher`` to a field derived from the value.

    ``field`` is either an attribute name or a callable computing the field.
    """

    field: str | t.Callable[[t.Any], object]
    matcher: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the projected field satisfies ``matcher``."""
        if callable(self.field):
            projected = self.field(value)
        else:
            try:
                projected = operator.attrgetter(self.field)(value)
            except AttributeError:
                return False
        return as_matcher(self.matcher)(projected)


@dc.dataclass(frozen=True, slots=True)
class Item(Matcher):
    """Apply ``matcher`` to ``value[key]``; missing keys never match."""

    key: object
    matcher: object

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if the item at ``key`` satisfies ``matcher``."""
        try:
            projected = value[self.key]
        except (KeyError, IndexError, TypeError):
            return False
        return as_matcher(self.matcher)(projected)


@dc.dataclass(frozen=True, slots=True)
class IsNone(Matcher):
    """Match ``None``."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* is ``None``."""
        return value is None


@dc.dataclass(frozen=True, slots=True)
class NotNone(Matcher):
    """Match anything except ``None``."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* is not ``None``."""
        return value is not None


@dc.dataclass(frozen=True, slots=True)
class Optional(Matcher):
    """Lift ``matcher`` over an optional value; ``None`` never matches."""

    matcher: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* is present and satisfies ``matcher``."""
        if value is None:
            return False
        return as_matcher(self.matcher)(value)


@dc.dataclass(frozen=True, slots=True)
class IsInstance(Matcher):
    """Match instances of ``typ`` that also satisfy ``matcher``."""

    typ: type | tuple[type, ...]
    matcher: object = dc.field(default_factory=Any)

    def __call__(self, value: object) -> bool:
        """Return ``False`` when the cast fails, else apply ``matcher``."""
        if not isinstance(value, self.typ):
            return False
        return as_matcher(self.matcher)(value)


# ----------------------------------------------------------------------
# Equality and ordering
# ----------------------------------------------------------------------
@dc.dataclass(frozen=True, slots=True)
class Eq(Matcher):
    """Match values equal to ``expected``."""

    expected: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* equals ``expected``."""
        return bool(value == self.expected)


@dc.dataclass(frozen=True, slots=True)
class Ne(Matcher):
    """Match values different from ``expected``."""

    expected: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* differs from ``expected``."""
        return bool(value != self.expected)


@dc.dataclass(frozen=True, slots=True)
class Gt(Matcher):
    """Match values greater than ``bound``."""

    bound: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* > ``bound``."""
        try:
            return bool(value > self.bound)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class Ge(Matcher):
    """Match values greater than or equal to ``bound``."""

    bound: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* >= ``bound``."""
        try:
            return bool(value >= self.bound)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class Lt(Matcher):
    """Match values less than ``bound``."""

    bound: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* < ``bound``."""
        try:
            return bool(value < self.bound)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class Le(Matcher):
    """Match values less than or equal to ``bound``."""

    bound: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* <= ``bound``."""
        try:
            return bool(value <= self.bound)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class IsTrue(Matcher):
    """Match the boolean ``True``."""

    def __call__(self, value: object) -> bool:
        return value is True


@dc.dataclass(frozen=True, slots=True)
class IsFalse(Matcher):
    """Match the boolean ``False``."""

    def __call__(self, value: object) -> bool:
        return value is False


# ----------------------------------------------------------------------
# Strings
# ----------------------------------------------------------------------
@dc.dataclass(frozen=True, slots=True)
class StrCaseEq(Matcher):
    """Match strings equal to ``expected`` ignoring case."""

    expected: str

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* casefolds to ``expected``."""
        return isinstance(value, str) and value.casefold() == self.expected.casefold()


@dc.dataclass(frozen=True, slots=True)
class StrCaseNe(Matcher):
    """Match strings that differ from ``expected`` ignoring case."""

    expected: str

    def __call__(self, value: object) -> bool:
        return isinstance(value, str) and value.casefold() != self.expected.casefold()


@dc.dataclass(frozen=True, slots=True)
class Regex(Matcher):
    """Match if *value* matches ``pattern``."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        return isinstance(value, str) and bool(self._compiled.search(value))


# ----------------------------------------------------------------------
# Collections
# ----------------------------------------------------------------------
@dc.dataclass(frozen=True, slots=True)
class Contains(Matcher):
    """Match containers holding ``element`` (substrings for strings)."""

    element: object

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if ``element`` is in *value*."""
        try:
            return self.element in value
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class ContainsAllOf(Matcher):
    """Match containers holding every element of ``elements``."""

    elements: tuple[object, ...]

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        try:
            return all(element in value for element in self.elements)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class ContainsAnyOf(Matcher):
    """Match containers holding at least one element of ``elements``."""

    elements: tuple[object, ...]

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        try:
            return any(element in value for element in self.elements)
        except TypeError:
            return False


def _as_sequence(value: t.Any) -> tuple[object, ...] | None:  # noqa: ANN401
    """Return *value* as a tuple, or ``None`` when it is not iterable."""
    try:
        return tuple(value)
    except TypeError:
        return None


@dc.dataclass(frozen=True, slots=True)
class StartsWith(Matcher):
    """Match sequences (or strings) beginning with ``prefix``."""

    prefix: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* starts with ``prefix``."""
        if isinstance(value, str):
            return isinstance(self.prefix, str) and value.startswith(self.prefix)
        items = _as_sequence(value)
        prefix = _as_sequence(self.prefix)
        if items is None or prefix is None:
            return False
        return items[: len(prefix)] == prefix


@dc.dataclass(frozen=True, slots=True)
class EndsWith(Matcher):
    """Match sequences (or strings) ending with ``suffix``."""

    suffix: t.Any

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* ends with ``suffix``."""
        if isinstance(value, str):
            return isinstance(self.suffix, str) and value.endswith(self.suffix)
        items = _as_sequence(value)
        suffix = _as_sequence(self.suffix)
        if items is None or suffix is None or len(suffix) > len(items):
            return False
        return items[len(items) - len(suffix) :] == suffix


@dc.dataclass(frozen=True, slots=True)
class IsEmpty(Matcher):
    """Match empty collections."""

    def __call__(self, value: object) -> bool:
        try:
            return len(value) == 0  # type: ignore[arg-type]
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class SizeIs(Matcher):
    """Match collections whose length satisfies ``size``.

    ``size`` is an integer or a matcher applied to the length.
    """

    size: object

    def __call__(self, value: object) -> bool:
        try:
            size = len(value)  # type: ignore[arg-type]
        except TypeError:
            return False
        return as_matcher(self.size)(size)


@dc.dataclass(frozen=True, slots=True)
class Each(Matcher):
    """Match collections whose every element satisfies ``matcher``."""

    matcher: object

    def __call__(self, value: object) -> bool:
        items = _as_sequence(value)
        if items is None:
            return False
        matcher = as_matcher(self.matcher)
        return all(matcher(element) for element in items)


@dc.dataclass(frozen=True, slots=True)
class AtLeastOne(Matcher):
    """Match collections with at least one element satisfying ``matcher``."""

    matcher: object

    def __call__(self, value: object) -> bool:
        items = _as_sequence(value)
        if items is None:
            return False
        matcher = as_matcher(self.matcher)
        return any(matcher(element) for element in items)


@dc.dataclass(frozen=True, slots=True)
class In(Matcher):
    """Match values that are members of ``collection``."""

    collection: t.Container[object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* is in ``collection``."""
        try:
            return value in self.collection
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class Predicate(Matcher):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))


__all__ = [
    "AllOf",
    "Any",
    "AnyOf",
    "AtLeastOne",
    "Contains",
    "ContainsAllOf",
    "ContainsAnyOf",
    "Each",
    "EndsWith",
    "Eq",
    "Field",
    "Ge",
    "Gt",
    "In",
    "IsEmpty",
    "IsFalse",
    "IsInstance",
    "IsNone",
    "IsTrue",
    "Item",
    "Le",
    "Lt",
    "Matcher",
    "Ne",
    "Not",
    "NotNone",
    "Optional",
    "Predicate",
    "Regex",
    "SizeIs",
    "SplitArgs",
    "StartsWith",
    "StrCaseEq",
    "StrCaseNe",
    "as_matcher",
]
