"""Gibbs sampling of covariance matrices with antedependence structure."""

from __future__ import annotations

import numpy as np

from .csc import CscMatrix, SparseError
from .inverse import invert


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return np.random.default_rng() if rng is None else rng


def _vector(v) -> np.ndarray:
    if isinstance(v, CscMatrix):
        return np.array(v.to_dense(), dtype=float).ravel()
    return np.array(v, dtype=float).ravel()


def _square(a, size: int, name: str) -> np.ndarray:
    full = a.to_dense() if isinstance(a, CscMatrix) else a
    full = np.array(full, dtype=float)
    if full.shape != (size, size):
        raise SparseError(f"{name} must be a {size}x{size} matrix")
    return full


def _cholesky(a: np.ndarray, message: str) -> np.ndarray:
    try:
        return np.linalg.cholesky(a)
    except np.linalg.LinAlgError as exc:
        raise SparseError(message) from exc


def _coefficient_count(dim: int, order: int) -> int:
    return dim * order - order * (order + 1) // 2


def _design(loc: np.ndarray, dim: int, nlevels: int, order: int,
            common_beta: bool) -> np.ndarray:
    """Regression of each trait on the preceding traits up to lag ``order``."""
    columns: list[np.ndarray] = []
    for k in range(1, order + 1):
        lagged = []
        for j in range(k, dim):
            col = np.zeros(dim * nlevels)
            col[j * nlevels:(j + 1) * nlevels] = loc[(j - k) * nlevels:(j - k + 1) * nlevels]
            lagged.append(col)
        if common_beta:
            columns.append(np.sum(lagged, axis=0))
        else:
            columns.extend(lagged)
    return np.column_stack(columns)


def rante(location, dim: int, nlevels: int, order: int, prior_mean, prior_var,
          ainv=None, ivar=None, common_var: bool = False, prior_g=None,
          prior_nu: float = 0.0,
          rng: np.random.Generator | None = None) -> tuple[CscMatrix, list[float]]:
    """Draw an antedependence covariance matrix given the effects ``location``.

    ``location`` holds ``nlevels`` effects for each of ``dim`` traits, trait
    by trait. The lag coefficients have prior mean ``prior_mean`` and prior
    precision ``prior_var``; there is one per lag when ``prior_mean`` has
    ``order`` entries, else one per trait and lag. ``ainv`` is the inverse
    covariance among levels (identity if ``None``) and ``ivar`` the current
    innovation variances. Returns the covariance matrix and the new
    innovation variances.
    """
    rng = _rng(rng)
    if not 1 <= order < dim:
        raise SparseError("the antedependence order must lie between 1 and dim - 1")
    if nlevels < 1:
        raise SparseError("there must be at least one level")
    size = dim * nlevels
    loc = _vector(location)
    if loc.size != size:
        raise SparseError("location must hold nlevels effects for each trait")
    pmu = _vector(prior_mean)
    nbeta = pmu.size
    common_beta = nbeta == order
    if not common_beta and nbeta != _coefficient_count(dim, order):
        raise SparseError("prior_mean has the wrong number of coefficients")
    pv = _square(prior_var, nbeta, "prior_var")
    variances = np.ones(dim) if ivar is None else _vector(ivar)
    if variances.size != dim:
        raise SparseError("ivar must hold one variance per trait")
    pg = np.zeros((dim, dim)) if prior_g is None else _square(prior_g, dim, "prior_g")
    a = None if ainv is None else _square(ainv, nlevels, "ainv")

    pv_chol = _cholesky(pv, "the prior precision of the coefficients is not positive definite")
    x = _design(loc, dim, nlevels, order, common_beta)
    beta_star = np.linalg.solve(pv_chol.T, rng.standard_normal(nbeta)) + pmu

    precision = 1.0 / variances
    if a is not None:
        rinv = np.kron(np.diag(precision), a)
        r_chol = _cholesky(rinv, "problems with ginverse in antependence model")
        z = np.linalg.solve(r_chol.T, rng.standard_normal(size)) - loc
    else:
        rinv = np.diag(np.repeat(precision, nlevels))
        z = rng.normal(0.0, np.repeat(np.sqrt(1.0 / precision), nlevels)) - loc

    txr = x.T @ rinv
    mme = txr @ x + pv
    z = z + x @ beta_star
    rhs = -(txr @ z)
    m_chol = _cholesky(mme, "antedependence equations singular: use a (stronger) prior")
    beta = np.linalg.solve(m_chol.T, np.linalg.solve(m_chol, rhs)) + beta_star

    resid = (loc - x @ beta).reshape((dim, nlevels)).T
    ss = resid.T @ a @ resid if a is not None else resid.T @ resid
    if common_var:
        diagonal_sum = sum(float(ss[i, i]) for i in range(dim))
        shared = (diagonal_sum + pg[0, 0]) / rng.chisquare(size + prior_nu)
        new_var = np.full(dim, shared)
    else:
        new_var = np.array([
            (ss[i, i] + pg[i, i]) / rng.chisquare(nlevels + prior_nu) for i in range(dim)
        ])

    chol_ginv = np.diag(1.0 / np.sqrt(new_var))
    coefficients = iter(beta)
    for lag in range(1, order + 1):
        for i in range(dim - lag):
            coef = beta[lag - 1] if common_beta else next(coefficients)
            chol_ginv[i + lag, i] = -coef / np.sqrt(new_var[i + lag])
    g = invert(CscMatrix.from_dense(chol_ginv.T @ chol_ginv))
    return g, new_var.tolist()


def simulate_ante(location, dim: int, nlevels: int, order: int, n: int = 1,
                  common_beta: bool = False, common_var: bool = False, ainv=None,
                  rng: np.random.Generator | None = None) -> np.ndarray:
    """Run ``n`` successive draws of :func:`rante` under a vague prior.

    Returns the covariance matrices shaped ``(n, dim, dim)``.
    """
    rng = _rng(rng)
    if n < 0:
        raise SparseError("the number of samples must be non-negative")
    if not 1 <= order < dim:
        raise SparseError("the antedependence order must lie between 1 and dim - 1")
    nbeta = order if common_beta else _coefficient_count(dim, order)
    prior_mean = np.zeros(nbeta)
    prior_var = 10e-10 * np.eye(nbeta)
    prior_g = np.zeros((dim, dim))
    variances: list[float] = [1.0] * dim
    out = np.empty((n, dim, dim))
    for k in range(n):
        g, variances = rante(location, dim, nlevels, order, prior_mean, prior_var,
                             ainv, variances, common_var, prior_g, 0.0, rng)
        out[k] = g.to_dense()
    return out