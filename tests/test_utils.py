"""Tests for the shared helpers."""

import numpy as np

from utils import deep_merge, rand_range, rand_range_int


def test_rand_range_equal_bounds_are_exact():
    rng = np.random.default_rng(0)
    assert rand_range(rng, -1.1, -1.1) == -1.1


def test_rand_range_accepts_reversed_bounds():
    rng = np.random.default_rng(1)
    for _ in range(100):
        value = rand_range(rng, -1.5, -2.5)
        assert -2.5 <= value <= -1.5


def test_rand_range_int_stays_below_upper_bound():
    rng = np.random.default_rng(2)
    values = {rand_range_int(rng, 0, 3) for _ in range(200)}
    assert values == {0, 1, 2}


def test_deep_merge_recurses_into_mappings_only():
    base = {'a': {'x': 1, 'y': 2}, 'b': [1, 2], 'c': 1}
    override = {'a': {'y': 3}, 'b': [9]}

    merged = deep_merge(base, override)

    assert merged == {'a': {'x': 1, 'y': 3}, 'b': [9], 'c': 1}
    assert base == {'a': {'x': 1, 'y': 2}, 'b': [1, 2], 'c': 1}
    merged['a']['x'] = 100
    assert base['a']['x'] == 1
