import math

import pytest

from sparsemcmc.cutpoints import dcutpoints

OLD = [-math.inf, 0.0, 1.0, 2.0, math.inf]
NEW = [-math.inf, 0.0, 1.2, 2.3, math.inf]
LIAB = [0.5, 1.5, 2.5, 0.2]
Y = [2, 3, 4, 0]


def _ratio(old, new, observed=(1, 1, 1, 1), y=Y):
    return dcutpoints(LIAB, y, list(observed), 0, 4, old, new, 0, 5, 0.3, 1.0)


def test_no_move_gives_zero():
    assert _ratio(OLD, OLD) == pytest.approx(0.0)


def test_antisymmetric():
    assert _ratio(OLD, NEW) == pytest.approx(-_ratio(NEW, OLD))


def test_lowest_categories_ignored():
    result = _ratio(OLD, NEW)
    assert math.isfinite(result)
    assert result == pytest.approx(_ratio(OLD, NEW, y=[2, 3, 4, 1]))


def test_unobserved_rows_ignored():
    assert _ratio(OLD, NEW, observed=(0, 0, 0, 0)) == pytest.approx(
        _ratio(OLD, NEW, y=[1, 1, 0, 1]))


def test_observations_change_ratio():
    with_data = _ratio(OLD, NEW)
    without = _ratio(OLD, NEW, observed=(0, 0, 0, 0))
    assert with_data != pytest.approx(without)