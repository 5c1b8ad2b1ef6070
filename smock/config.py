"""Per-session configuration: unexpected-call policy and wait timeout."""

from __future__ import annotations

import dataclasses as dc
import enum
import math
import os
import typing as t

from .errors import ConfigurationError

UNEXPECTED_CALL_ENV = "SMOCK_UNEXPECTED_CALL"
DEFAULT_TIMEOUT_ENV = "SMOCK_DEFAULT_TIMEOUT"
DEFAULT_TIMEOUT = 1.0

UnexpectedCallHandler = t.Callable[[str, object], None]


class UnexpectedCallPolicy(enum.StrEnum):
    """Built-in reactions to a call with no eligible expectation."""

    WARN = "warn"
    FAIL = "fail"


@dc.dataclass(frozen=True, slots=True)
class SessionConfig:
    """Configuration applied to every mock point of a session.

    Parameters
    ----------
    unexpected_call:
        :class:`UnexpectedCallPolicy` member, or a callable receiving the
        mock label and the packed call arguments.
    default_timeout:
        Seconds :meth:`MockSession.wait_for_expectations` waits when no
        explicit timeout is given.
    """

    unexpected_call: UnexpectedCallPolicy | UnexpectedCallHandler = (
        UnexpectedCallPolicy.FAIL
    )
    default_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not callable(self.unexpected_call):
            object.__setattr__(
                self, "unexpected_call", parse_policy(self.unexpected_call)
            )
        object.__setattr__(self, "default_timeout", parse_timeout(self.default_timeout))

    def replace(self, **changes: object) -> SessionConfig:
        """Return a copy with *changes* applied."""
        return dc.replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def from_env(cls, environ: t.Mapping[str, str] | None = None) -> SessionConfig:
        """Build a configuration from ``SMOCK_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        policy = env.get(UNEXPECTED_CALL_ENV)
        if policy:
            config = config.replace(unexpected_call=parse_policy(policy))
        timeout = env.get(DEFAULT_TIMEOUT_ENV)
        if timeout:
            config = config.replace(default_timeout=parse_timeout(timeout))
        return config


def parse_policy(value: object) -> UnexpectedCallPolicy:
    """Convert *value* into an :class:`UnexpectedCallPolicy`."""
    if isinstance(value, UnexpectedCallPolicy):
        return value
    try:
        return UnexpectedCallPolicy(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(repr(p.value) for p in UnexpectedCallPolicy)
        msg = f"Invalid unexpected-call policy {value!r}; expected one of {choices}"
        raise ConfigurationError(msg) from None


def parse_timeout(value: object) -> float:
    """Convert *value* into a non-negative finite timeout in seconds."""
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        msg = f"Invalid timeout {value!r}; expected a number of seconds"
        raise ConfigurationError(msg) from None
    if not math.isfinite(timeout) or timeout < 0:
        msg = f"timeout must be a non-negative finite number, got {value!r}"
        raise ConfigurationError(msg)
    return timeout


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_TIMEOUT_ENV",
    "UNEXPECTED_CALL_ENV",
    "SessionConfig",
    "UnexpectedCallHandler",
    "UnexpectedCallPolicy",
    "parse_policy",
    "parse_timeout",
]
