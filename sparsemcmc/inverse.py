"""Inversion of small dense matrices by Gauss-Jordan elimination with full pivoting."""

from __future__ import annotations

import sys

import numpy as np

from .csc import CscMatrix, SparseError

EPSILON = sys.float_info.epsilon


class SingularMatrixError(ArithmeticError):
    """Raised when a covariance structure cannot be inverted."""

    def __init__(self) -> None:
        super().__init__("Singular G/R structure: use proper priors")


class IllConditionedError(ArithmeticError):
    """Raised when the condition number of a covariance structure is too large."""

    def __init__(self, condition: float) -> None:
        self.condition = condition
        super().__init__(
            f"ill-conditioned G/R structure (CN = {condition:f}): use proper "
            "priors if you haven't or rescale data if you have"
        )


def _gauss_jordan(c: CscMatrix) -> tuple[np.ndarray, float, float]:
    """Return the inverse of ``c``, the product of the pivots and the 1-norm condition number."""
    if c.m != c.n:
        raise SparseError(f"only square matrices can be inverted, got {c.m}x{c.n}")
    if c.x is None:
        raise SparseError("the matrix needs numerical values")
    n = c.n
    if n == 0:
        raise SparseError("cannot invert an empty matrix")
    a = c.to_dense()
    ipiv = [0] * n
    swaps: list[tuple[int, int]] = []
    det = 1.0
    for _ in range(n):
        big = 0.0
        irow = icol = 0
        for j in range(n):
            if ipiv[j] == 1:
                continue
            for k in range(n):
                if ipiv[k] == 0:
                    if abs(a[j, k]) >= big:
                        big = abs(a[j, k])
                        irow, icol = j, k
                elif ipiv[k] > 1:
                    raise SingularMatrixError()
        ipiv[icol] += 1
        if irow != icol:
            a[[irow, icol], :] = a[[icol, irow], :]
        swaps.append((irow, icol))
        pivot = float(a[icol, icol])
        if pivot == 0.0:
            raise SingularMatrixError()
        det *= pivot
        a[icol, icol] = 1.0
        a[icol, :] *= 1.0 / pivot
        for row in range(n):
            if row != icol:
                factor = a[row, icol]
                a[row, icol] = 0.0
                a[row, :] -= a[icol, :] * factor
    for irow, icol in reversed(swaps):
        if irow != icol:
            a[:, [irow, icol]] = a[:, [icol, irow]]
    condition = c.norm() * float(np.abs(a).sum(axis=0).max())
    return a, det, condition


def _ill_conditioned(condition: float) -> bool:
    return 1.0 / abs(condition) < EPSILON


def invert(c: CscMatrix) -> CscMatrix:
    """Return the inverse of the square matrix ``c``, every entry stored.

    Raises :class:`SingularMatrixError` for a singular matrix and
    :class:`IllConditionedError` when the condition number exceeds
    ``1/EPSILON``; a 1-by-1 matrix is then clamped to ``1/EPSILON`` instead.
    """
    a, _, condition = _gauss_jordan(c)
    if _ill_conditioned(condition):
        if c.n == 1:
            a[0, 0] = 1.0 / EPSILON
        else:
            raise IllConditionedError(condition)
    return CscMatrix.from_dense(a)


def invert_with_determinant(c: CscMatrix) -> tuple[CscMatrix, float]:
    """Return the inverse of ``c`` and the product of its pivots.

    The product equals the determinant when no off-diagonal pivot is
    chosen, as for positive definite matrices. A 1-by-1 inverse above
    ``1/EPSILON`` is clamped to it.
    """
    a, det, condition = _gauss_jordan(c)
    if _ill_conditioned(condition):
        raise IllConditionedError(condition)
    if c.n == 1 and a[0, 0] > 1.0 / EPSILON:
        a[0, 0] = 1.0 / EPSILON
    return CscMatrix.from_dense(a), det