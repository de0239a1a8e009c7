import pytest

from sparsemcmc.perm import cumsum, ipvec, pinv, pvec


@pytest.mark.parametrize("counts", [[], [3], [2, 0, 5, 1], [0, 0, 0]])
def test_cumsum_invariants(counts):
    pointers = cumsum(counts)
    assert len(pointers) == len(counts) + 1
    assert pointers[0] == 0
    assert pointers[-1] == sum(counts)
    assert [b - a for a, b in zip(pointers, pointers[1:])] == counts


def test_cumsum_leaves_input_untouched():
    counts = [4, 1, 2]
    cumsum(counts)
    assert counts == [4, 1, 2]


@pytest.mark.parametrize("p", [[0], [2, 0, 1], [3, 1, 0, 2, 4]])
def test_pinv_inverts(p):
    inverse = pinv(p)
    assert [inverse[target] for target in p] == list(range(len(p)))
    assert pinv(inverse) == p


def test_pinv_identity_is_none():
    assert pinv(None) is None


def test_pvec_ipvec_round_trip():
    p = [2, 0, 3, 1]
    b = [10.0, 20.0, 30.0, 40.0]
    assert ipvec(p, pvec(p, b)) == b
    assert pvec(p, ipvec(p, b)) == b


def test_pvec_gathers():
    p = [1, 2, 0]
    b = [5.0, 6.0, 7.0]
    x = pvec(p, b)
    assert x == [b[1], b[2], b[0]]


def test_identity_permutations_copy():
    b = [1.0, 2.0]
    assert pvec(None, b) == b
    assert ipvec(None, b) == b
    assert ipvec(None, b) is not b


def test_ipvec_pads_unreached_positions_with_zero():
    x = ipvec([3, 0], [8.0, 9.0])
    assert len(x) == 4
    assert x[3] == 8.0
    assert x[0] == 9.0
    assert x[1] == 0.0 and x[2] == 0.0