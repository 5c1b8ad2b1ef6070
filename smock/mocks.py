"""Mock points: the objects standing in for methods, callbacks and properties.

Arguments are packed before they reach matchers and captors: a call with a
single positional argument is represented by that argument, any other arity
by the tuple of arguments. ``Perform`` actions receive them unpacked.
"""

from __future__ import annotations

import typing as t

from .builder import ExpectationBuilder
from .captor import ArgumentCaptor, InitedArgumentCaptor
from .errors import LifecycleError
from .registry import ExpectationRegistry

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .session import MockSession

R = t.TypeVar("R")
T = t.TypeVar("T")


def pack_args(args: tuple[object, ...]) -> object:
    """Return the value matchers and captors see for *args*."""
    return args[0] if len(args) == 1 else args


class MockFunction(t.Generic[R]):
    """Shared engine behind every mock point variant."""

    def __init__(
        self,
        session: MockSession,
        label: str,
        *,
        default: R | None = None,
        default_captor: ArgumentCaptor[t.Any] | None = None,
    ) -> None:
        self.session = session
        self.label = label
        self.default = default
        self.registry = ExpectationRegistry(default_captor)
        session.register(self)

    def expect(self, description: str) -> ExpectationBuilder[t.Self]:
        """Start declaring an expectation labelled *description*."""
        return ExpectationBuilder(self, description)

    def invoke(self, args: tuple[object, ...], *, label: str | None = None) -> R | None:
        """Resolve a call using the non-raising convention.

        Returns the action's result, or :attr:`default` for unexpected calls
        and void expectations. An action that raises is a usage error: it is
        reported and :class:`~smock.errors.MockUsageError` is raised.
        """
        resolved = self._resolve(args, label)
        if resolved is None:
            return self.default
        action = resolved.action
        if action is None:
            return self.default
        try:
            return t.cast("R", action(*args))
        except Exception as exc:  # noqa: BLE001 - any raise is a usage error here
            self.session.handle_usage_error(label or self.label, resolved, exc)

    def invoke_raising(
        self, args: tuple[object, ...], *, label: str | None = None
    ) -> R | None:
        """Resolve a call, letting exceptions raised by the action propagate."""
        resolved = self._resolve(args, label)
        if resolved is None or resolved.action is None:
            return self.default
        return t.cast("R", resolved.action(*args))

    def _resolve(self, args: tuple[object, ...], label: str | None):  # noqa: ANN202
        resolution = self.registry.resolve(pack_args(args))
        if resolution.unexpected:
            self.session.handle_unexpected_call(
                label or self.label, args, self.registry.expectations
            )
            return None
        return resolution.expectation

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.label!r}, "
            f"expectations={len(self.registry)})"
        )


class MockMethod(MockFunction[R]):
    """Mock for a method; call it from the fake object's implementation."""

    def call(self, *args: object) -> R | None:
        """Invoke the mock with *args* (non-raising convention)."""
        return self.invoke(args)

    def call_raising(self, *args: object) -> R | None:
        """Invoke the mock with *args*, propagating raised exceptions."""
        return self.invoke_raising(args)


class MockClosure(MockFunction[R]):
    """Mock usable wherever a plain callable is expected."""

    DEFAULT_LABEL = "anonymous closure"

    def __init__(
        self,
        session: MockSession,
        label: str = DEFAULT_LABEL,
        *,
        default: R | None = None,
    ) -> None:
        super().__init__(session, label, default=default)

    def __call__(self, *args: object) -> R | None:
        return self.invoke(args)

    def as_callable(self) -> t.Callable[..., R | None]:
        """Return a plain function using the non-raising convention."""

        def closure(*args: object) -> R | None:
            return self.invoke(args)

        closure.__name__ = closure.__qualname__ = self.label
        return closure

    def as_raising_callable(self) -> t.Callable[..., R | None]:
        """Return a plain function that propagates exceptions from actions."""

        def closure(*args: object) -> R | None:
            return self.invoke_raising(args)

        closure.__name__ = closure.__qualname__ = self.label
        return closure


class MockSetter(MockFunction[None], t.Generic[T]):
    """Mock for a property: observe writes and read back the last one."""

    def __init__(self, session: MockSession, name: str, initial: T) -> None:
        self.captor: InitedArgumentCaptor[T] = InitedArgumentCaptor(initial)
        super().__init__(session, name, default_captor=self.captor)

    def get(self) -> T:
        """Return the last value set, or the initial value."""
        return self.captor.last_captured

    def set(self, value: T) -> None:
        """Resolve a write of *value* like a void method call."""
        self.invoke((value,))

    @property
    def value(self) -> T:
        """Alias for :meth:`get` and :meth:`set`."""
        return self.get()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)


class MockProperty(t.Generic[T]):
    """Descriptor exposing a :class:`MockSetter` as an attribute.

    The owning instance must provide a ``smock_session`` attribute. Use
    :meth:`of` to reach the underlying setter and declare expectations::

        class FakeThermostat:
            target = MockProperty("target", 20)

            def __init__(self, session):
                self.smock_session = session

        MockProperty.of(fake, "target").expect("set 22").match(22).will_once()
    """

    def __init__(self, name: str, initial: T) -> None:
        self.name = name
        self.initial = initial
        self._attr = f"_smock_property_{name}"

    def __set_name__(self, owner: type, name: str) -> None:
        self._attr = f"_smock_property_{name}"

    def setter_for(self, instance: object) -> MockSetter[T]:
        """Return (creating on first use) the setter mock of *instance*."""
        setter = instance.__dict__.get(self._attr)
        if setter is None:
            session = getattr(instance, "smock_session", None)
            if session is None:
                msg = (
                    f"{type(instance).__name__} has no smock_session; "
                    f"cannot create mock property {self.name!r}"
                )
                raise LifecycleError(msg)
            setter = MockSetter(session, self.name, self.initial)
            instance.__dict__[self._attr] = setter
        return setter

    @staticmethod
    def of(instance: object, attribute: str) -> MockSetter[t.Any]:
        """Return the setter mock behind *instance*'s *attribute*."""
        descriptor = getattr(type(instance), attribute)
        if not isinstance(descriptor, MockProperty):
            msg = f"{attribute!r} is not a MockProperty"
            raise TypeError(msg)
        return descriptor.setter_for(instance)

    @t.overload
    def __get__(self, instance: None, owner: type) -> MockProperty[T]: ...

    @t.overload
    def __get__(self, instance: object, owner: type) -> T: ...

    def __get__(self, instance: object | None, owner: type) -> MockProperty[T] | T:
        if instance is None:
            return self
        return self.setter_for(instance).get()

    def __set__(self, instance: object, value: T) -> None:
        self.setter_for(instance).set(value)


__all__ = [
    "MockClosure",
    "MockFunction",
    "MockMethod",
    "MockProperty",
    "MockSetter",
    "pack_args",
]
