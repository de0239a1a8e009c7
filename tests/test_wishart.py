import numpy as np
import pytest

from sparsemcmc.csc import CscMatrix, SparseError
from sparsemcmc.wishart import (
    rcinvwishart,
    rcorr,
    riw,
    rinvwishart,
    rrsub_invwishart,
    rsinvwishart,
    rwishart,
)

A2 = np.array([[2.0, 0.5], [0.5, 1.0]])
A3 = np.array([[3.0, 0.4, 0.2], [0.4, 2.0, 0.3], [0.2, 0.3, 1.5]])


def _rng(seed):
    return np.random.default_rng(seed)


def test_rwishart_reproducible_symmetric_positive_definite():
    w1 = rwishart(A2, 5.0, _rng(3)).to_dense()
    w2 = rwishart(CscMatrix.from_dense(A2), 5.0, _rng(3)).to_dense()
    assert np.allclose(w1, w2)
    assert np.allclose(w1, w1.T)
    assert np.all(np.linalg.eigvalsh(w1) > 0)


def test_rwishart_mean_is_nu_times_scale():
    rng = _rng(0)
    draws = [rwishart(A2, 6.0, rng).to_dense() for _ in range(4000)]
    assert np.allclose(np.mean(draws, axis=0), 6.0 * A2, rtol=0.1, atol=0.2)


def test_rinvwishart_inverts_rwishart_draw():
    w = rwishart(A2, 5.0, _rng(7)).to_dense()
    iw = rinvwishart(A2, 5.0, _rng(7)).to_dense()
    assert np.allclose(iw, np.linalg.inv(w))


def test_rinvwishart_rejects_non_positive_definite_scale():
    with pytest.raises(SparseError):
        rinvwishart(np.array([[1.0, 2.0], [2.0, 1.0]]), 5.0, _rng(1))


def test_rwishart_rejects_small_degrees_of_freedom():
    with pytest.raises(SparseError):
        rwishart(A2, 0.5, _rng(1))


def test_rsinvwishart_blocks():
    iw = rsinvwishart(A3, 6.0, 2, _rng(5)).to_dense()
    lead = rinvwishart(A3[:2, :2], 6.0, _rng(5)).to_dense()
    assert np.allclose(iw[:2, :2], lead)
    assert np.allclose(iw[2:, 2:], np.eye(1))
    assert np.allclose(iw[:2, 2:], 0.0)
    assert np.allclose(iw[2:, :2], 0.0)


def test_rcinvwishart_keeps_conditional_block():
    cm = np.array([[1.0, 0.3], [0.3, 1.0]])
    iw1 = rcinvwishart(A3, 6.0, 1, cm, _rng(11)).to_dense()
    iw2 = rcinvwishart(A3, 6.0, 1, cm, _rng(11)).to_dense()
    assert np.allclose(iw1, iw2)
    assert np.allclose(iw1[1:, 1:], cm)
    assert np.allclose(iw1, iw1.T)


def test_rcinvwishart_rejects_bad_split():
    with pytest.raises(SparseError):
        rcinvwishart(A3, 6.0, 3, np.eye(1), _rng(1))


def test_rcorr_scales_by_prior_variances():
    a = np.array([[40.0, 5.0], [5.0, 50.0]])
    prior = np.diag([4.0, 9.0])
    r = rcorr(a, 10.0, 3.0, np.eye(2), 0.0, prior, _rng(2)).to_dense()
    assert np.allclose(np.diag(r), np.diag(prior))
    assert np.allclose(r, r.T)
    assert abs(r[0, 1]) <= np.sqrt(prior[0, 0] * prior[1, 1]) + 1e-12


def test_rrsub_invwishart_returns_new_block():
    a = 40.0 * np.eye(3) + 0.5
    iw, cm = rrsub_invwishart(a, 10.0, 1, 3.0, np.eye(3), np.eye(2), _rng(4))
    full = iw.to_dense()
    block = cm.to_dense()
    assert np.allclose(full[1:, 1:], block)
    assert np.allclose(np.diag(block), 1.0)
    assert np.allclose(full, full.T)


def test_riw_matches_repeated_rinvwishart():
    samples = riw(5.0, A2, 2, rng=_rng(9))
    rng = _rng(9)
    expected = [rinvwishart(A2, 5.0, rng).to_dense() for _ in range(2)]
    assert samples.shape == (2, 2, 2)
    assert np.allclose(samples, expected)


def test_riw_conditional_fixes_block():
    cm = np.array([[1.0, 0.2], [0.2, 1.0]])
    samples = riw(6.0, A3, 3, split=1, cm=cm, rng=_rng(8))
    assert samples.shape == (3, 3, 3)
    for sample in samples:
        assert np.allclose(sample[1:, 1:], cm)


def test_riw_split_without_block_raises():
    with pytest.raises(SparseError):
        riw(6.0, A3, 1, split=1, rng=_rng(1))