"""Densities, probabilities and truncated draws for multivariate normals."""

from __future__ import annotations

import math
from collections.abc import Sequence
from statistics import NormalDist

import numpy as np

from .csc import CscMatrix, SparseError
from .inverse import invert_with_determinant
from .truncnorm import rtnorm

LOG_2PI = math.log(2.0 * math.pi)


def _matrix(m) -> np.ndarray:
    full = m.to_dense() if isinstance(m, CscMatrix) else np.asarray(m, dtype=float)
    if full.ndim != 2 or full.shape[0] != full.shape[1]:
        raise SparseError("expected a square matrix")
    return full


def _vector(v) -> np.ndarray:
    if isinstance(v, CscMatrix):
        return v.to_dense().ravel()
    return np.asarray(v, dtype=float).ravel()


def _log(value: float) -> float:
    if value > 0:
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def dmvnorm(beta, mu, ldet: float, minv) -> float:
    """Log density of ``beta`` under N(``mu``, V) given ``log|V|`` and ``inv(V)``."""
    inverse = _matrix(minv)
    dev = _vector(beta) - _vector(mu)
    n = inverse.shape[0]
    if dev.size != n:
        raise SparseError("vector length does not match the matrix")
    quad = float(dev @ inverse @ dev)
    return -(quad + LOG_2PI * n + ldet) / 2.0


def dcmvnorm(beta, mu, m, keep: Sequence[int], cond: Sequence[int] = ()) -> float:
    """Log density of ``beta[keep]`` given ``beta[cond]`` under N(``mu``, ``m``)."""
    full = _matrix(m)
    b = _vector(beta)
    mean = _vector(mu)
    keep = [int(k) for k in keep]
    cond = [int(c) for c in cond]
    if not keep:
        raise SparseError("at least one component must be kept")
    s11 = full[np.ix_(keep, keep)]
    shift = np.zeros(len(keep))
    if cond:
        s22 = full[np.ix_(cond, cond)]
        inv22 = invert_with_determinant(CscMatrix.from_dense(s22))[0].to_dense()
        s12 = full[np.ix_(keep, cond)]
        coef = s12 @ inv22
        s11 = s11 - coef @ s12.T
        shift = coef @ (b[cond] - mean[cond])
    inv11, det = invert_with_determinant(CscMatrix.from_dense(s11))
    dev = b[keep] - shift - mean[keep]
    quad = float(dev @ inv11.to_dense() @ dev)
    return -(quad + LOG_2PI * len(keep) + _log(det)) / 2.0


def _conditional(pred, link, g, keep: int) -> tuple[float, float]:
    """Mean and variance of component ``keep`` given the others at ``link``."""
    full = _matrix(g)
    p = _vector(pred)
    lk = _vector(link)
    n = full.shape[0]
    if not 0 <= keep < n:
        raise SparseError("component index out of range")
    if n == 1:
        return float(p[0]), float(full[0, 0])
    others = [i for i in range(n) if i != keep]
    s22 = full[np.ix_(others, others)]
    s12 = full[keep, others]
    chol = np.linalg.cholesky(s22)
    y = np.linalg.solve(chol.T, np.linalg.solve(chol, s12))
    cdev = lk[others] - p[others]
    mean = float(p[keep] + cdev @ y)
    var = float(full[keep, keep] - y @ s12)
    return mean, var


def pcmvnorm(pred, link, g, keep: int, lower: float, upper: float) -> float:
    """Log probability that component ``keep`` lies in ``(lower, upper)``.

    The other components are conditioned on their values in ``link``; the
    distribution is N(``pred``, ``g``).
    """
    mean, var = _conditional(pred, link, g, keep)
    dist = NormalDist(mean, math.sqrt(var))
    return _log(dist.cdf(upper) - dist.cdf(lower))


def rtcmvnorm(pred, link, g, keep: int, lower: float, upper: float,
              rng: np.random.Generator | None = None) -> float:
    """Draw component ``keep`` from its truncated conditional distribution."""
    mean, var = _conditional(pred, link, g, keep)
    return rtnorm(mean, math.sqrt(var), lower, upper, rng)


def rtcmvnorm_many(n: int, mu, mu2, g, keep: int, lower: float, upper: float,
                   rng: np.random.Generator | None = None) -> list[float]:
    """Draw ``n`` values of :func:`rtcmvnorm` with the same arguments."""
    if rng is None:
        rng = np.random.default_rng()
    mean, var = _conditional(mu, mu2, g, keep)
    sd = math.sqrt(var)
    return [rtnorm(mean, sd, lower, upper, rng) for _ in range(n)]