import numpy as np
import pytest

from sparsemcmc.csc import CscMatrix, SparseError
from sparsemcmc.dmperm import dmperm, scc


def _pattern(rows):
    matrix = CscMatrix.from_dense(rows)
    matrix.dropzeros()
    return matrix


def _blocks_of(bounds, count):
    return np.searchsorted(np.asarray(bounds), np.arange(count), side="right") - 1


def test_scc_two_cycle_and_singleton():
    a = _pattern([[1, 1, 0], [1, 1, 0], [0, 0, 1]])
    result = scc(a)
    blocks = {
        frozenset(result.p[result.r[k]:result.r[k + 1]]) for k in range(result.nb)
    }
    assert blocks == {frozenset({0, 1}), frozenset({2})}
    assert result.r[0] == 0
    assert result.r[-1] == 3


def test_scc_full_cycle_is_one_block():
    a = _pattern([[1, 0, 1], [1, 1, 0], [0, 1, 1]])
    result = scc(a)
    assert result.nb == 1
    assert result.p == [0, 1, 2]


def test_scc_triangular_gives_singletons_block_upper():
    a = _pattern([[1, 0, 0], [1, 1, 0], [1, 1, 1]])
    result = scc(a)
    assert result.nb == a.n
    assert sorted(result.p) == [0, 1, 2]
    permuted = a.to_dense()[np.ix_(result.p, result.p)]
    assert np.allclose(np.tril(permuted, -1), 0)


def test_scc_blocks_sorted_and_upper_triangular():
    a = _pattern([
        [1, 0, 0, 1, 0],
        [1, 1, 0, 0, 0],
        [0, 1, 1, 0, 1],
        [0, 0, 0, 1, 1],
        [0, 0, 0, 1, 1],
    ])
    result = scc(a)
    assert sorted(result.p) == list(range(5))
    block = {node: b for b, node in zip(_blocks_of(result.r, 5), result.p)}
    for k in range(result.nb):
        members = result.p[result.r[k]:result.r[k + 1]]
        assert members == sorted(members)
    dense = a.to_dense()
    for i, j in zip(*np.nonzero(dense)):
        assert block[i] <= block[j]


def test_scc_rejects_rectangular():
    with pytest.raises(SparseError):
        scc(_pattern([[1, 0, 1], [0, 1, 0]]))


def _check_square_dm(a, result):
    n = a.n
    assert sorted(result.p) == list(range(n))
    assert sorted(result.q) == list(range(n))
    assert result.r == result.s
    assert result.r[0] == 0 and result.r[-1] == n
    permuted = a.to_dense()[np.ix_(result.p, result.q)]
    assert all(permuted[k, k] != 0 for k in range(n))
    row_block = _blocks_of(result.r, n)
    col_block = _blocks_of(result.s, n)
    for i, j in zip(*np.nonzero(permuted)):
        assert row_block[i] <= col_block[j]


@pytest.mark.parametrize("seed", [0, -1, 5])
def test_dmperm_square_nonsingular(seed):
    a = _pattern([
        [0, 1, 0, 0],
        [1, 0, 0, 1],
        [0, 1, 1, 0],
        [0, 0, 1, 1],
    ])
    result = dmperm(a, seed, np.random.default_rng(11))
    _check_square_dm(a, result)


def test_dmperm_block_diagonal_finds_two_blocks():
    a = _pattern([[1, 1, 0, 0], [1, 1, 0, 0], [0, 0, 1, 1], [0, 0, 1, 1]])
    result = dmperm(a)
    _check_square_dm(a, result)
    assert result.nb == 2


def test_dmperm_rectangular_is_permutation():
    a = _pattern([[1, 0], [1, 1], [0, 1]])
    result = dmperm(a)
    assert sorted(result.p) == [0, 1, 2]
    assert sorted(result.q) == [0, 1]
    assert result.r[-1] == a.m
    assert result.s[-1] == a.n
    assert result.nb == len(result.r) - 1
    assert result.rr[4] == a.m
    assert result.cc[4] == a.n