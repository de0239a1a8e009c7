"""Schur complement of a leading block of a dense symmetric matrix."""

from __future__ import annotations

from .csc import CscMatrix, SparseError
from .inverse import invert


def schur(a: CscMatrix, split: int) -> tuple[CscMatrix, list[float]]:
    """Return the Schur complement of ``A[:split, :split]`` and the regression coefficients.

    The complement is ``A22 - A21 inv(A11) A12``; the coefficients are the
    entries of ``A21 inv(A11)`` in column order.
    """
    if a.m != a.n:
        raise SparseError(f"expected a square matrix, got {a.m}x{a.n}")
    if a.x is None:
        raise SparseError("the matrix needs numerical values")
    n = a.n
    if not 0 < split < n:
        raise SparseError("split must leave a non-empty block on each side")
    full = a.to_dense()
    inv11 = invert(CscMatrix.from_dense(full[:split, :split])).to_dense()
    s12 = full[:split, split:]
    coefficients = s12.T @ inv11
    complement = full[split:, split:] - coefficients @ s12
    return CscMatrix.from_dense(complement), coefficients.T.reshape(-1).tolist()