"""Householder reflections."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .csc import CscMatrix, SparseError


def house(x: Sequence[float]) -> tuple[list[float], float, float]:
    """Return ``(v, beta, s)`` with ``(I - beta v v') x = s e1``.

    ``v`` has the length of ``x`` and ``s`` is the norm of ``x``.
    """
    v = [float(value) for value in x]
    if not v:
        raise SparseError("a Householder reflection needs a non-empty vector")
    sigma = sum(value * value for value in v[1:])
    if sigma == 0:
        s = abs(v[0])
        beta = 2.0 if v[0] <= 0 else 0.0
        v[0] = 1.0
    else:
        s = math.sqrt(v[0] * v[0] + sigma)
        v[0] = v[0] - s if v[0] <= 0 else -sigma / (v[0] + s)
        beta = -1.0 / (s * v[0])
    return v, beta, s


def happly(v: CscMatrix, i: int, beta: float, x: Sequence[float]) -> list[float]:
    """Return ``(I - beta v v') x`` where ``v`` is column ``i`` of ``v``."""
    if v.x is None:
        raise SparseError("Householder vectors need values")
    if not 0 <= i < v.n:
        raise SparseError("column index out of range")
    if len(x) != v.m:
        raise SparseError("vector length does not match the matrix")
    out = [float(value) for value in x]
    span = range(v.p[i], v.p[i + 1])
    tau = beta * sum(v.x[t] * out[v.i[t]] for t in span)
    for t in span:
        out[v.i[t]] -= v.x[t] * tau
    return out