"""Tests for the bounded top-k selector."""

import random

from flatvec.store.topk import BoundedTopK, Candidate


def _candidate(distance: float, offset: int = 0) -> Candidate:
    return Candidate(distance=distance, metadata_offset=offset, metadata_length=1)


def test_keeps_k_smallest_in_ascending_order():
    distances = [5.0, 1.0, 9.0, 3.0, 7.0, 0.5, 4.0]
    selector = BoundedTopK(3)
    for offset, distance in enumerate(distances):
        selector.offer(_candidate(distance, offset))

    drained = selector.drain_ascending()
    assert [c.distance for c in drained] == [0.5, 1.0, 3.0]
    assert [c.metadata_offset for c in drained] == [5, 1, 3]


def test_fewer_candidates_than_capacity():
    selector = BoundedTopK(10)
    for distance in (2.0, 1.0):
        selector.offer(_candidate(distance))
    assert [c.distance for c in selector.drain_ascending()] == [1.0, 2.0]


def test_drain_empties_the_selector():
    selector = BoundedTopK(2)
    selector.offer(_candidate(1.0))
    selector.drain_ascending()
    assert len(selector) == 0
    assert selector.worst_distance is None
    assert selector.drain_ascending() == []


def test_zero_and_negative_capacity_keep_nothing():
    for capacity in (0, -3):
        selector = BoundedTopK(capacity)
        selector.offer(_candidate(1.0))
        assert selector.drain_ascending() == []


def test_matches_full_sort_on_random_input():
    rng = random.Random(1234)
    distances = [rng.random() for _ in range(500)]
    selector = BoundedTopK(17)
    for distance in distances:
        selector.offer(_candidate(distance))
        assert len(selector) <= 17

    assert [c.distance for c in selector.drain_ascending()] == sorted(distances)[:17]


def test_nan_distance_never_displaces_real_candidates():
    selector = BoundedTopK(1)
    selector.offer(_candidate(float("nan"), 0))
    selector.offer(_candidate(0.0, 1))
    selector.offer(_candidate(4.0, 2))

    drained = selector.drain_ascending()
    assert [c.metadata_offset for c in drained] == [1]


def test_nan_distance_sorts_after_real_candidates():
    selector = BoundedTopK(3)
    for offset, distance in enumerate([2.0, float("nan"), 1.0]):
        selector.offer(_candidate(distance, offset))

    assert [c.metadata_offset for c in selector.drain_ascending()] == [2, 0, 1]
