"""Wishart, inverse Wishart and conditional inverse Wishart sampling."""

from __future__ import annotations

import math

import numpy as np

from .csc import CscMatrix, SparseError
from .inverse import invert, invert_with_determinant

_DTOL = 1e-7
_CHOLESKY_FAILED = "ill-conditioned cross-product: can't form Cholesky factor"


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return np.random.default_rng() if rng is None else rng


def _dense(a) -> np.ndarray:
    full = a.to_dense() if isinstance(a, CscMatrix) else a
    full = np.array(full, dtype=float)
    if full.ndim != 2 or full.shape[0] != full.shape[1]:
        raise SparseError("expected a square matrix")
    return full


def _log(value: float) -> float:
    if value > 0:
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def _cholesky(a: np.ndarray, message: str) -> np.ndarray:
    try:
        return np.linalg.cholesky(a)
    except np.linalg.LinAlgError as exc:
        raise SparseError(message) from exc


def _inverse(a: np.ndarray) -> np.ndarray:
    return invert(CscMatrix.from_dense(a)).to_dense()


def _bartlett(m: int, nu: float, rng: np.random.Generator) -> np.ndarray:
    """Lower triangular Bartlett factor, drawn column by column."""
    t = np.zeros((m, m))
    df = nu
    for i in range(m):
        t[i, i] = math.sqrt(rng.chisquare(df))
        for j in range(i + 1, m):
            t[j, i] = rng.standard_normal()
        df -= 1
    return t


def _wishart(a: np.ndarray, nu: float, rng: np.random.Generator) -> np.ndarray:
    m = a.shape[0]
    if nu <= m - 1:
        raise SparseError("degrees of freedom must exceed the dimension minus one")
    t = _bartlett(m, nu, rng)
    chol = _cholesky(a, _CHOLESKY_FAILED)
    c = chol @ t
    return c @ c.T


def rwishart(a, nu: float, rng: np.random.Generator | None = None) -> CscMatrix:
    """Draw from a Wishart distribution with scale ``a`` and ``nu`` degrees of freedom."""
    return CscMatrix.from_dense(_wishart(_dense(a), nu, _rng(rng)))


def rinvwishart(a, nu: float, rng: np.random.Generator | None = None) -> CscMatrix:
    """Draw the inverse of a Wishart matrix with scale ``a`` and ``nu`` degrees of freedom."""
    return invert(CscMatrix.from_dense(_wishart(_dense(a), nu, _rng(rng))))


def _check_split(n: int, split: int) -> None:
    if not 0 < split < n:
        raise SparseError("split must leave a non-empty block on each side")


def _conditional(full: np.ndarray, nu: float, split: int, cond: np.ndarray,
                 rng: np.random.Generator) -> np.ndarray:
    n_a = full.shape[0]
    _check_split(n_a, split)
    n_c = n_a - split
    if cond.shape != (n_c, n_c):
        raise SparseError("the conditional block does not match the split")
    a11 = full[:split, :split]
    a12 = full[split:, :split]
    a22 = full[split:, split:]
    half = _inverse(a11) @ a12.T
    a11_schur = a22 - a12 @ half
    t1inv = _inverse(_wishart(a11, nu, rng))
    rv = rng.standard_normal(n_c * split)
    t1 = _inverse(t1inv)
    var_t2inv = np.kron(t1, _inverse(a11_schur))
    chol = _cholesky(var_t2inv, _CHOLESKY_FAILED)
    rv = np.linalg.solve(chol.T, rv)
    neg_t2 = -(half + rv.reshape((split, n_c), order="F"))
    half_c = cond @ neg_t2.T
    iw11 = t1inv + neg_t2 @ half_c
    return np.block([[iw11, half_c.T], [half_c, cond]])


def rcinvwishart(a, nu: float, split: int, cm,
                 rng: np.random.Generator | None = None) -> CscMatrix:
    """Draw an inverse Wishart matrix whose trailing block is fixed to ``cm``.

    ``a`` is the inverse scale matrix; the leading ``split`` rows and
    columns are sampled given the trailing block.
    """
    full = _dense(a)
    return CscMatrix.from_dense(_conditional(full, nu, split, _dense(cm), _rng(rng)))


def rsinvwishart(a, nu: float, split: int,
                 rng: np.random.Generator | None = None) -> CscMatrix:
    """Draw an inverse Wishart leading block; the trailing block is the identity."""
    full = _dense(a)
    n_a = full.shape[0]
    _check_split(n_a, split)
    iw11 = _inverse(_wishart(full[:split, :split], nu, _rng(rng)))
    out = np.eye(n_a)
    out[:split, :split] = iw11
    return CscMatrix.from_dense(out)


def _cov2cor(a: np.ndarray) -> np.ndarray:
    scale = np.sqrt(np.diag(a))
    out = a / np.outer(scale, scale)
    np.fill_diagonal(out, 1.0)
    return out


def _rcorr(full: np.ndarray, nu: float, nu_r: float, old_inv: np.ndarray,
           old_ldet: float, prior: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    dim = full.shape[0]
    if old_inv.shape != (dim, dim) or prior.shape != (dim, dim):
        raise SparseError("matrix dimensions do not agree")
    corr = _cov2cor(full - prior)
    ainv = _inverse(corr)
    rnew = _cov2cor(_inverse(_wishart(ainv, nu, rng)))
    rnew_inv, det = invert_with_determinant(CscMatrix.from_dense(rnew))
    rnew_ldet = _log(det)
    new_inv = rnew_inv.to_dense()
    mh = old_ldet - rnew_ldet
    for i in range(dim):
        mh += _log(float(old_inv[i, i]))
        mh -= _log(float(new_inv[i, i]))
    mh *= 0.5 * nu_r
    if mh < _log(float(rng.uniform(0.0, 1.0))) or rnew_ldet < math.log(_DTOL):
        rnew = invert_with_determinant(CscMatrix.from_dense(old_inv))[0].to_dense()
    scale = np.sqrt(np.diag(prior))
    return rnew * np.outer(scale, scale)


def rcorr(a, nu: float, nu_r: float, old_inv, old_ldet: float, prior,
          rng: np.random.Generator | None = None) -> CscMatrix:
    """Metropolis-Hastings update of a correlation matrix, scaled by the prior variances.

    A proposal is drawn from the inverse Wishart given the scale ``a`` less
    ``prior`` and accepted against the current correlation matrix, given by
    its inverse ``old_inv`` and log determinant ``old_ldet``. The kept
    matrix is scaled by the square roots of the diagonal of ``prior``.
    """
    return CscMatrix.from_dense(
        _rcorr(_dense(a), nu, nu_r, _dense(old_inv), old_ldet, _dense(prior), _rng(rng))
    )


def rrsub_invwishart(a, nu: float, split: int, nu_r: float, prior, old_cm,
                     rng: np.random.Generator | None = None) -> tuple[CscMatrix, CscMatrix]:
    """Draw an inverse Wishart matrix whose trailing block is a sampled correlation matrix.

    Returns the full matrix and the new trailing block, which replaces
    ``old_cm`` in the next iteration.
    """
    rng = _rng(rng)
    full = _dense(a)
    pg = _dense(prior)
    old = _dense(old_cm)
    n_a = full.shape[0]
    _check_split(n_a, split)
    if pg.shape != full.shape or old.shape != (n_a - split, n_a - split):
        raise SparseError("matrix dimensions do not agree")
    old_inv, det = invert_with_determinant(CscMatrix.from_dense(old))
    cm = _rcorr(full[split:, split:], nu - split, nu_r, old_inv.to_dense(),
                _log(det), pg[split:, split:], rng)
    ainv = _inverse(full)
    iw = _conditional(ainv, nu, split, cm, rng)
    return CscMatrix.from_dense(iw), CscMatrix.from_dense(cm)


def riw(nu: float, v, n: int = 1, split: int | None = None, cm=None,
        rng: np.random.Generator | None = None) -> np.ndarray:
    """Draw ``n`` inverse Wishart matrices, shaped ``(n, dim, dim)``.

    With ``split`` the trailing block of every draw is fixed to ``cm``.
    """
    rng = _rng(rng)
    g = _dense(v)
    if n < 0:
        raise SparseError("the number of samples must be non-negative")
    dim = g.shape[0]
    out = np.empty((n, dim, dim))
    if split is None:
        for k in range(n):
            out[k] = _inverse(_wishart(g, nu, rng))
        return out
    if cm is None:
        raise SparseError("a conditional draw needs the fixed block cm")
    cond = _dense(cm)
    for k in range(n):
        out[k] = _conditional(g, nu, split, cond, rng)
    return out