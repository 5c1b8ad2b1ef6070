"""Behavioural tests for mock points using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"
FEATURE = str(FEATURES_DIR / "mock_points.feature")


@scenario(FEATURE, "a once-expectation answers a single call")
def test_once_expectation() -> None:
    """A once-expectation answers one call; the next is unexpected."""


@scenario(FEATURE, "an exhausted expectation hands over to the next match")
def test_exhausted_expectation_skipped() -> None:
    """Exhausted expectations are skipped in favour of later matches."""


@scenario(FEATURE, "a property mock remembers the last matched value")
def test_property_mock() -> None:
    """Setter mocks read back their last matched write."""


@scenario(FEATURE, "a never-expectation fails the wait when exercised")
def test_never_expectation_exercised() -> None:
    """Exercised never-expectations fail the wait."""


@scenario(FEATURE, "a never-expectation that is not exercised passes")
def test_never_expectation_untouched() -> None:
    """Untouched never-expectations pass the wait."""


@scenario(FEATURE, "concurrent callers are all captured")
def test_concurrent_capture() -> None:
    """Captors keep every call made from concurrent threads."""
