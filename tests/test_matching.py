import numpy as np
import pytest

from sparsemcmc.csc import CscMatrix
from sparsemcmc.matching import maxtrans, randperm


def _pattern(rows):
    matrix = CscMatrix.from_dense(rows)
    matrix.dropzeros()
    return matrix


def _check_matching(a, jmatch, imatch):
    dense = a.to_dense()
    assert len(jmatch) == a.m
    assert len(imatch) == a.n
    for row, col in enumerate(jmatch):
        if col >= 0:
            assert imatch[col] == row
            assert dense[row, col] != 0
    for col, row in enumerate(imatch):
        if row >= 0:
            assert jmatch[row] == col
    return sum(1 for col in jmatch if col >= 0)


def test_randperm_seed_zero_is_identity():
    assert randperm(5, 0) is None


def test_randperm_seed_minus_one_is_reverse():
    assert randperm(4, -1) == [3, 2, 1, 0]


def test_randperm_random_is_permutation():
    p = randperm(10, 3, np.random.default_rng(1))
    assert sorted(p) == list(range(10))


def test_randperm_reproducible_with_same_generator_seed():
    first = randperm(12, 5, np.random.default_rng(42))
    second = randperm(12, 5, np.random.default_rng(42))
    assert first == second


def test_maxtrans_diagonal_quick_return():
    a = _pattern([[1, 1, 0], [0, 1, 0], [0, 0, 1]])
    jmatch, imatch = maxtrans(a)
    assert jmatch == [0, 1, 2]
    assert imatch == [0, 1, 2]


def test_maxtrans_rectangular_diagonal():
    a = _pattern([[1, 0], [0, 1], [1, 1]])
    jmatch, imatch = maxtrans(a)
    assert jmatch == [0, 1, -1]
    assert imatch == [0, 1]


def test_maxtrans_permutation_matrix():
    a = _pattern([[0, 1, 0], [0, 0, 1], [1, 0, 0]])
    jmatch, imatch = maxtrans(a)
    assert jmatch == [1, 2, 0]
    assert _check_matching(a, jmatch, imatch) == 3


def test_maxtrans_needs_augmenting_path():
    a = _pattern([[1, 1, 0], [1, 0, 0], [0, 1, 1]])
    a = a.permute(None, [1, 0, 2], values=True)
    jmatch, imatch = maxtrans(a)
    assert _check_matching(a, jmatch, imatch) == 3


def test_maxtrans_empty_column_limits_matching():
    a = _pattern([[0, 1, 0], [1, 0, 0], [1, 1, 0]])
    jmatch, imatch = maxtrans(a)
    assert _check_matching(a, jmatch, imatch) == 2
    assert imatch[2] == -1


def test_maxtrans_transposed_branch():
    a = _pattern([[0, 1, 1], [1, 0, 0]])
    jmatch, imatch = maxtrans(a)
    assert _check_matching(a, jmatch, imatch) == 2


@pytest.mark.parametrize("seed", [-1, 7])
def test_maxtrans_with_column_orders(seed):
    a = _pattern([
        [0, 1, 0, 1],
        [1, 0, 1, 0],
        [0, 0, 1, 1],
        [1, 1, 0, 0],
    ])
    jmatch, imatch = maxtrans(a, seed, np.random.default_rng(3))
    assert _check_matching(a, jmatch, imatch) == 4