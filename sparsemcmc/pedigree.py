"""Pedigree-based relationship inverses and simulated breeding values."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .csc import CscMatrix, SparseError


def _parents(values: Sequence[int | None]) -> list[int | None]:
    return [None if v is None or v < 0 else int(v) for v in values]


def _check(dam: list[int | None], sire: list[int | None]) -> None:
    if len(dam) != len(sire):
        raise SparseError("dam and sire must have one entry per individual")
    for i, (d, s) in enumerate(zip(dam, sire)):
        if (d is not None and d >= i) or (s is not None and s >= i):
            raise SparseError("parents must precede their offspring")


def _inbreeding(dam: list[int | None], sire: list[int | None],
                d: Sequence[float]) -> tuple[list[float], list[float]]:
    """Adjust the Mendelian variances ``d`` and compute inbreeding coefficients."""
    n = len(dam)
    d = [float(v) for v in d]
    if len(d) != n:
        raise SparseError("one variance is needed per individual")
    f = [0.0] * n
    for i in range(n):
        for parent in (dam[i], sire[i]):
            if parent is not None:
                d[i] -= 0.25 * (1.0 + f[parent])
        weights = {i: 1.0}
        ai = 0.0
        pending: set[int] = set()
        j = i
        while j >= 0:
            for parent in (sire[j], dam[j]):
                if parent is not None:
                    pending.add(parent)
                    weights[parent] = weights.get(parent, 0.0) + 0.5 * weights[j]
            ai += weights[j] * weights[j] * d[j]
            j = max(pending, default=-1)
            pending.discard(j)
        f[i] = ai - 1.0
    return d, f


def inverse_a(dam: Sequence[int | None], sire: Sequence[int | None],
              tinv: CscMatrix) -> tuple[CscMatrix, list[float], list[float]]:
    """Return the inverse relationship matrix, inbreeding coefficients and variances.

    Unknown parents are ``None`` or negative. ``tinv`` is ``I - P/2`` with
    ``P[i, parent] = 1``. The inverse is ``tinv' inv(D) tinv`` where ``D``
    holds the Mendelian sampling variances, returned as the third item.
    """
    dam_ids, sire_ids = _parents(dam), _parents(sire)
    _check(dam_ids, sire_ids)
    n = len(dam_ids)
    if tinv.m != n or tinv.n != n:
        raise SparseError("tinv must be square with one row per individual")
    dii, f = _inbreeding(dam_ids, sire_ids, [1.0] * n)
    diag = CscMatrix(n, n, list(range(n + 1)), list(range(n)), [1.0 / v for v in dii])
    ainv = tinv.transpose().multiply(diag).multiply(tinv).transpose()
    return ainv, f, dii


def breeding_values(dam: Sequence[int | None], sire: Sequence[int | None],
                    d: Sequence[float], ginv, pedigree: bool = True,
                    groups: Sequence[int] | None = None, group_means=None,
                    rng: np.random.Generator | None = None) -> np.ndarray:
    """Simulate multivariate breeding values, one row per individual.

    ``ginv`` is the inverse genetic covariance matrix. With ``pedigree``
    each value is the parents' mean plus Mendelian noise scaled by the
    inbreeding-adjusted ``d``; an unknown parent contributes the mean of
    the individual's genetic group (``group_means[groups[i]]``, zero by
    default). Otherwise each value is its dam's value plus noise of
    variance ``d``.
    """
    if rng is None:
        rng = np.random.default_rng()
    dam_ids, sire_ids = _parents(dam), _parents(sire)
    _check(dam_ids, sire_ids)
    n = len(dam_ids)
    inverse = ginv.to_dense() if isinstance(ginv, CscMatrix) else np.asarray(ginv, float)
    if inverse.ndim != 2 or inverse.shape[0] != inverse.shape[1]:
        raise SparseError("ginv must be a square matrix")
    dim = inverse.shape[0]
    chol = np.linalg.cholesky(inverse)
    group_of = [0] * n if groups is None else [int(g) for g in groups]
    means = (np.zeros((1, dim)) if group_means is None
             else np.asarray(group_means, dtype=float).reshape(-1, dim))
    variances = _inbreeding(dam_ids, sire_ids, d)[0] if pedigree else [float(v) for v in d]
    if len(variances) != n:
        raise SparseError("one variance is needed per individual")
    out = np.zeros((n, dim))
    for i in range(n):
        noise = rng.normal(0.0, math.sqrt(variances[i]), size=dim)
        out[i] = np.linalg.solve(chol.T, noise)
        if pedigree:
            for parent in (sire_ids[i], dam_ids[i]):
                out[i] += 0.5 * (out[parent] if parent is not None else means[group_of[i]])
        elif dam_ids[i] is not None:
            out[i] += out[dam_ids[i]]
    return out