import itertools
import math

import pytest

from sparsemcmc.pkk import pkk, pkk_update


def _all_seen(prob, size):
    k = len(prob)
    total = 0.0
    for draw in itertools.product(range(k), repeat=size):
        if len(set(draw)) == k:
            total += math.prod(prob[c] for c in draw)
    return total


@pytest.mark.parametrize("prob,size", [
    ([0.5, 0.5], 1), ([0.5, 0.5], 2), ([0.2, 0.3, 0.5], 3),
    ([0.2, 0.3, 0.5], 5), ([0.1, 0.2, 0.3, 0.4], 6),
])
def test_matches_enumeration(prob, size):
    assert pkk(prob, size) == pytest.approx(_all_seen(prob, size), abs=1e-12)


def test_single_category_is_certain():
    assert pkk([1.0], 4) == pytest.approx(1.0)


def test_more_categories_than_draws_is_impossible():
    assert pkk([0.3, 0.3, 0.4], 2) == pytest.approx(0.0, abs=1e-12)


def test_update_single_present():
    assert pkk_update([0.3, 0.1], 3, [0, 0, 1], 3, 1) == 1.0


def test_update_equal_weights():
    result = pkk_update([0.0, 0.0], 4, [1, 1, 1], 3, 1)
    assert result == pytest.approx(pkk([1 / 3, 1 / 3, 1 / 3], 4))


def test_update_skips_absent():
    result = pkk_update([0.0, 5.0], 3, [1, 0, 1], 3, 1)
    assert result == pytest.approx(pkk([0.5, 0.5], 3))


def test_update_floor():
    assert pkk_update([0.0, 0.0], 1, [1, 1, 1], 3, 1) == 1e-16