"""Unit tests for the expectation registry's resolution algorithm."""

from __future__ import annotations

import threading

import pytest

from smock.actions import ExactCount, Return, Unlimited
from smock.captor import ArgumentCaptor, InitedArgumentCaptor
from smock.expectations import Expectation
from smock.matchers import Any, Eq, Gt, Predicate, Regex
from smock.registry import ExpectationRegistry, Resolution
from smock.waiter import ExpectationPool


def _registry(*expectations: Expectation) -> ExpectationRegistry:
    registry = ExpectationRegistry()
    for expectation in expectations:
        registry.add(expectation)
    return registry


@pytest.mark.parametrize("count", [1, 3, 8])
def test_disjoint_matchers_select_their_own_expectation(count: int) -> None:
    """A call matching expectation k is resolved by k and only k is consumed."""
    expectations = [
        Expectation(f"e{i}", Eq(i), ExactCount(1)) for i in range(count)
    ]
    registry = _registry(*expectations)
    target = count - 1

    resolution = registry.resolve(target)

    assert resolution.expectation is expectations[target]
    assert expectations[target].remaining == 0
    assert all(exp.remaining == 1 for exp in expectations[:target])


def test_exact_count_allows_n_calls_then_unexpected() -> None:
    """ExactCount(n) resolves n calls; call n+1 is unexpected."""
    exp = Expectation("e", Eq(2), ExactCount(3))
    registry = _registry(exp)

    results = [registry.resolve(2) for _ in range(4)]

    assert [r.unexpected for r in results] == [False, False, False, True]
    assert exp.calls == 3
    assert exp.remaining == 0


def test_exhausted_expectation_is_skipped_for_the_next_match() -> None:
    """A then B share a matcher: A answers once, B answers the rest."""
    first = Expectation("A", Eq("x"), ExactCount(1))
    second = Expectation("B", Eq("x"), Unlimited())
    registry = _registry(first, second)

    picks = [registry.resolve("x").expectation for _ in range(3)]

    assert picks == [first, second, second]


def test_registration_order_beats_specificity() -> None:
    """The first registered expectation with budget wins."""
    broad = Expectation("broad", Any(), ExactCount(1))
    narrow = Expectation("narrow", Eq(5), ExactCount(1))
    registry = _registry(broad, narrow)

    assert registry.resolve(5).expectation is broad
    assert registry.resolve(5).expectation is narrow


def test_unlimited_consumes_every_compatible_call() -> None:
    """An unlimited expectation keeps matching forever."""
    exp = Expectation("forever", Gt(0), Unlimited())
    registry = _registry(exp)
    for value in range(1, 50):
        assert registry.resolve(value).expectation is exp
    assert registry.resolve(0).unexpected


def test_never_expectation_is_not_selectable_but_fires_its_token() -> None:
    """A never-expectation is skipped and signals its inverted token."""
    pool = ExpectationPool()
    never = Expectation(
        "never", Eq(1), ExactCount(0), token=pool.create_token("never", ExactCount(0))
    )
    registry = _registry(never)

    assert registry.resolve(1).unexpected
    assert never.token is not None
    assert never.token.fulfilled_count == 1
    assert registry.resolve(2).unexpected
    assert never.token.fulfilled_count == 1


def test_never_expectation_falls_through_to_later_match() -> None:
    """A later expectation can still answer a call a never-rule matched."""
    never = Expectation("never", Eq(1), ExactCount(0))
    fallback = Expectation("fallback", Any(), Unlimited(), Return("ok"))
    registry = _registry(never, fallback)

    assert registry.resolve(1).expectation is fallback


def test_captors_and_token_run_on_selection() -> None:
    """Selected expectations notify their captors and the default captor."""
    pool = ExpectationPool()
    captor: ArgumentCaptor[object] = ArgumentCaptor()
    default = InitedArgumentCaptor(None)
    exp = Expectation(
        "e",
        Any(),
        ExactCount(2),
        on_match=(captor.capture,),
        token=pool.create_token("e", ExactCount(2)),
    )
    registry = ExpectationRegistry(default)
    registry.add(exp)

    registry.resolve((1, "a"))
    registry.resolve((2, "b"))
    registry.resolve((3, "c"))

    assert captor.captured == ((1, "a"), (2, "b"))
    assert default.captured == ((1, "a"), (2, "b"))
    assert exp.token is not None
    assert exp.token.is_satisfied


def test_unexpected_call_captures_nothing() -> None:
    """No captor is notified when no expectation is eligible."""
    default = InitedArgumentCaptor(0)
    registry = ExpectationRegistry(default)
    registry.add(Expectation("e", Eq(1), ExactCount(1)))

    assert registry.resolve(2).unexpected
    assert default.captured == ()


def test_clear_discards_expectations() -> None:
    """clear() empties the registry."""
    registry = _registry(Expectation("e", Any(), Unlimited()))
    registry.clear()
    assert len(registry) == 0
    assert registry.resolve(1).unexpected


def test_concurrent_resolution_never_overspends_budget() -> None:
    """Concurrent calls consume exactly the available budget."""
    exp = Expectation("e", Any(), ExactCount(50))
    registry = _registry(exp)
    successes: list[bool] = []
    lock = threading.Lock()
    barrier = threading.Barrier(10)

    def worker() -> None:
        barrier.wait()
        for _ in range(10):
            ok = not registry.resolve(None).unexpected
            with lock:
                successes.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert successes.count(True) == 50
    assert exp.remaining == 0


def test_type_mismatch_in_matcher_falls_through_to_later_match() -> None:
    """A string matcher rejects an int instead of aborting the scan."""
    name = Expectation("name", Regex("^a"), ExactCount(1))
    number = Expectation("num", Eq(5), ExactCount(1))
    registry = _registry(name, number)

    assert registry.resolve(5).expectation is number
    assert name.remaining == 1


def test_predicate_may_reenter_the_registry() -> None:
    """Matchers run outside the lock, so they can resolve nested calls."""
    registry = ExpectationRegistry()
    nested: list[bool] = []

    def reentrant(value: object) -> bool:
        if value == "outer":
            nested.append(registry.resolve("inner").unexpected)
            return True
        return False

    outer = Expectation("outer", Predicate(reentrant), ExactCount(1))
    registry.add(outer)
    results: list[Resolution] = []
    thread = threading.Thread(
        target=lambda: results.append(registry.resolve("outer")), daemon=True
    )
    thread.start()
    thread.join(timeout=2.0)

    assert not thread.is_alive()
    assert nested == [True]
    assert [r.expectation for r in results] == [outer]
