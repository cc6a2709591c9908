from __future__ import annotations

import pytest

from spacetime_engine.analytics import Domain, DomainTracker


def test_preserved_domain_does_not_shrink() -> None:
    tracker = DomainTracker()
    tracker.observe_context(dataset=1, bounds=(0, 100), aggregation="SUM", key="value")
    assert tracker.update(Domain(0, 10), preserve=True) == Domain(0, 10)

    tracker.observe_context(dataset=1, bounds=(0, 50), aggregation="SUM", key="value")
    assert tracker.update(Domain(2, 4), preserve=True) == Domain(0, 10)


def test_preserved_domain_grows_once_per_cycle() -> None:
    tracker = DomainTracker()
    tracker.observe_context(dataset=1, bounds=(0, 100))
    tracker.update(Domain(0, 10), preserve=True)

    tracker.observe_context(dataset=1, bounds=(0, 50))
    assert tracker.update(Domain(5, 20), preserve=True) == Domain(0, 20)

    # Same cycle: later updates are no-ops
    assert tracker.update(Domain(-5, 50), preserve=True) == Domain(0, 20)


def test_unchanged_context_keeps_cycle() -> None:
    tracker = DomainTracker()
    assert tracker.observe_context(dataset=1, bounds=(0, 1)) is True
    assert tracker.observe_context(dataset=1, bounds=(0, 1)) is False
    assert tracker.observe_context(dataset=2, bounds=(0, 1)) is True


def test_turning_preserve_off_uses_fresh_extent() -> None:
    tracker = DomainTracker()
    tracker.observe_context(bounds=(0, 100))
    tracker.update(Domain(0, 10), preserve=True)

    tracker.observe_context(bounds=(0, 50))
    assert tracker.update(Domain(2, 4), preserve=False) == Domain(2, 4)


def test_categorical_domain_ignores_preserve() -> None:
    tracker = DomainTracker()

    assert tracker.update(Domain(0, 100), preserve=True, categorical_levels=4) == Domain(0, 3)
    assert tracker.update(Domain(0, 100), preserve=False, categorical_levels=4) == Domain(0, 3)


def test_empty_extent_leaves_domain_unset() -> None:
    tracker = DomainTracker()
    tracker.observe_context(bounds=(0, 1))

    assert tracker.update(None, preserve=True) is None
    assert not tracker.initialized_this_cycle

    assert tracker.update(Domain(1, 2), preserve=True) == Domain(1, 2)


def test_clear_forgets_everything() -> None:
    tracker = DomainTracker()
    tracker.observe_context(bounds=(0, 1))
    tracker.update(Domain(1, 2), preserve=True)

    tracker.clear()

    assert tracker.domain is None
    assert tracker.observe_context(bounds=(0, 1)) is True


def test_domain_invariants() -> None:
    with pytest.raises(ValueError):
        Domain(2, 1)
    assert Domain.from_values([3, "x", float("inf"), -1]) == Domain(-1, 3)
    assert Domain.from_values(["x"]) is None
    assert Domain(0, 2).union(Domain(-1, 1)) == Domain(-1, 2)
