"""Builders for dense, block-diagonal and Kronecker-structured sparse matrices.

Each builder has an ``*_update`` companion that refreshes the values of a
matrix it built earlier, keeping the sparsity pattern.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

import numpy as np

from .csc import CscMatrix, SparseError

_Column = tuple[list[int], list[float]]


def _values(a: CscMatrix) -> list[float]:
    if a.x is None:
        raise SparseError("the matrix needs numerical values")
    return a.x


def _require_square(a: CscMatrix) -> None:
    if a.m != a.n:
        raise SparseError(f"expected a square matrix, got {a.m}x{a.n}")


def _full_pattern(nrow: int, ncol: int) -> tuple[list[int], list[int]]:
    pointers = [j * nrow for j in range(ncol + 1)]
    rows = [r for _ in range(ncol) for r in range(nrow)]
    return pointers, rows


def _require_full(a: CscMatrix) -> None:
    """Check that every entry is stored, columns in order, rows sorted."""
    _values(a)
    pointers, rows = _full_pattern(a.m, a.n)
    if a.p != pointers or a.i != rows:
        raise SparseError("the matrix must store every entry in column order")


def _check_count(n_identity: int) -> None:
    if n_identity < 0:
        raise SparseError("the identity dimension must be non-negative")


def _assemble(m: int, n: int, columns: Iterable[_Column]) -> CscMatrix:
    pointers = [0]
    rows: list[int] = []
    vals: list[float] = []
    for col_rows, col_vals in columns:
        rows.extend(col_rows)
        vals.extend(col_vals)
        pointers.append(len(rows))
    return CscMatrix(m, n, pointers, rows, vals)


def _flat(columns: Iterable[_Column]) -> list[float]:
    return [v for _, vals in columns for v in vals]


def _store(c: CscMatrix, values: Sequence[float], offset: int = 0) -> None:
    """Overwrite ``c.x[offset:]`` with ``values``."""
    target = _values(c)
    if offset + len(values) != len(target):
        raise SparseError("the new values do not fit the target matrix")
    target[offset:] = [float(v) for v in values]


def dense(values, nrow: int, ncol: int, start: int = 0) -> CscMatrix:
    """Store ``values[start:start + nrow*ncol]`` column by column, zeros included."""
    if nrow < 0 or ncol < 0 or start < 0:
        raise SparseError("dimensions and start must be non-negative")
    data = np.asarray(values, dtype=float).ravel()
    end = start + nrow * ncol
    if data.size < end:
        raise SparseError("not enough values for the requested matrix")
    pointers, rows = _full_pattern(nrow, ncol)
    return CscMatrix(nrow, ncol, pointers, rows, data[start:end].tolist())


def zeros(nrow: int, ncol: int) -> CscMatrix:
    """Return an ``nrow``-by-``ncol`` matrix with every entry stored as zero."""
    return dense([0.0] * (nrow * ncol), nrow, ncol)


def _block_columns(blocks: Iterable[CscMatrix]) -> Iterator[_Column]:
    offset = 0
    for block in blocks:
        _require_square(block)
        x = _values(block)
        for j in range(block.n):
            start, end = block.p[j], block.p[j + 1]
            yield [r + offset for r in block.i[start:end]], x[start:end]
        offset += block.n


def _block_diagonal(blocks: list[CscMatrix]) -> CscMatrix:
    size = sum(block.n for block in blocks)
    return _assemble(size, size, _block_columns(blocks))


def direct_sum(blocks: Iterable[CscMatrix]) -> CscMatrix:
    """Return the block-diagonal matrix of the square ``blocks``."""
    return _block_diagonal(list(blocks))


def direct_sum_update(blocks: Iterable[CscMatrix], c: CscMatrix) -> None:
    """Refresh ``c``, built by :func:`direct_sum`, with the values of ``blocks``."""
    _store(c, [v for block in blocks for v in _values(block)])


def omega(blocks: Iterable[CscMatrix], fixed: CscMatrix) -> CscMatrix:
    """Return the block-diagonal matrix with ``fixed`` first, then ``blocks``."""
    return _block_diagonal([fixed, *blocks])


def omega_update(blocks: Iterable[CscMatrix], fixed: CscMatrix, c: CscMatrix) -> None:
    """Refresh the ``blocks`` part of ``c``, built by :func:`omega`; ``fixed`` is kept."""
    _store(c, [v for block in blocks for v in _values(block)], offset=fixed.nnz)


def _kron_a_columns(g: CscMatrix, a: CscMatrix) -> Iterator[_Column]:
    _require_square(g)
    _require_square(a)
    _values(g)
    ax = _values(a)
    gd = g.to_dense()
    for i in range(g.n):
        for j in range(a.n):
            start, end = a.p[j], a.p[j + 1]
            col_rows = a.i[start:end]
            col_vals = ax[start:end]
            yield (
                [r + k * a.n for k in range(g.n) for r in col_rows],
                [v * float(gd[k, i]) for k in range(g.n) for v in col_vals],
            )


def kronecker_a(g: CscMatrix, a: CscMatrix) -> CscMatrix:
    """Return ``G ⊗ A`` for a small square ``G`` and a sparse square ``A``."""
    size = g.n * a.n
    return _assemble(size, size, _kron_a_columns(g, a))


def kronecker_a_update(g: CscMatrix, a: CscMatrix, c: CscMatrix) -> None:
    """Refresh ``c``, built by :func:`kronecker_a`, with new values of ``g`` and ``a``."""
    _store(c, _flat(_kron_a_columns(g, a)))


def kronecker_da(d: Sequence[float], a: CscMatrix) -> CscMatrix:
    """Return ``diag(d) ⊗ A`` for a sparse square ``A``."""
    _require_square(a)
    ax = _values(a)
    an = a.n

    def columns() -> Iterator[_Column]:
        for i, di in enumerate(d):
            for j in range(an):
                start, end = a.p[j], a.p[j + 1]
                yield ([r + i * an for r in a.i[start:end]],
                       [v * float(di) for v in ax[start:end]])

    size = an * len(d)
    return _assemble(size, size, columns())


def kronecker_di(d: Sequence[float], n_identity: int) -> CscMatrix:
    """Return the diagonal matrix ``diag(d) ⊗ I`` with ``I`` of size ``n_identity``."""
    _check_count(n_identity)
    diagonal = [float(v) for v in d for _ in range(n_identity)]
    size = len(diagonal)
    return CscMatrix(size, size, list(range(size + 1)), list(range(size)), diagonal)


def _kron_i_columns(a: CscMatrix, n_identity: int) -> Iterator[_Column]:
    _check_count(n_identity)
    _require_square(a)
    _require_full(a)
    ad = a.to_dense()
    for i in range(a.n):
        for j in range(n_identity):
            yield ([k * n_identity + j for k in range(a.m)],
                   [float(ad[k, i]) for k in range(a.m)])


def kronecker_i(a: CscMatrix, n_identity: int) -> CscMatrix:
    """Return ``A ⊗ I`` for a fully stored square ``A``, every block entry stored."""
    return _assemble(a.m * n_identity, a.n * n_identity, _kron_i_columns(a, n_identity))


def kronecker_i_update(a: CscMatrix, n_identity: int, c: CscMatrix) -> None:
    """Refresh ``c``, built by :func:`kronecker_i`, with the values of ``a``."""
    _store(c, _flat(_kron_i_columns(a, n_identity)))


def kronecker_i_add(a: CscMatrix, n_identity: int, c: CscMatrix,
                    weights: Sequence[float]) -> None:
    """Add ``A ⊗ diag(weights)`` to ``c``, which has the pattern of :func:`kronecker_i`."""
    if len(weights) != n_identity:
        raise SparseError("one weight is needed per identity position")
    increments: list[float] = []
    for index, (_, vals) in enumerate(_kron_i_columns(a, n_identity)):
        w = float(weights[index % n_identity])
        increments.extend(v * w for v in vals)
    current = _values(c)
    if len(increments) != len(current):
        raise SparseError("the new values do not fit the target matrix")
    _store(c, [old + inc for old, inc in zip(current, increments)])


def _kron_si_columns(a: CscMatrix, n_identity: int) -> Iterator[_Column]:
    _check_count(n_identity)
    ax = _values(a)
    for i in range(a.n):
        start, end = a.p[i], a.p[i + 1]
        for j in range(n_identity):
            yield [r * n_identity + j for r in a.i[start:end]], ax[start:end]


def kronecker_si(a: CscMatrix, n_identity: int) -> CscMatrix:
    """Return ``A ⊗ I`` for a sparse ``A``, storing only its non-zero pattern."""
    return _assemble(a.m * n_identity, a.n * n_identity, _kron_si_columns(a, n_identity))


def kronecker_si_update(a: CscMatrix, n_identity: int, c: CscMatrix) -> None:
    """Refresh ``c``, built by :func:`kronecker_si`, with the values of ``a``."""
    _store(c, _flat(_kron_si_columns(a, n_identity)))


def sort_dense_vector(a: CscMatrix) -> None:
    """Reorder a fully stored column vector in place so its rows are ``0..m-1``."""
    if a.n != 1 or sorted(a.i) != list(range(a.m)):
        raise SparseError("expected a column vector storing every row once")
    ordered = [0.0] * a.m
    for row, value in zip(a.i, _values(a)):
        ordered[row] = value
    a.i = list(range(a.m))
    a.x = ordered


def cov2cor(a: CscMatrix) -> None:
    """Scale a fully stored covariance matrix to a correlation matrix in place."""
    _require_square(a)
    _require_full(a)
    full = a.to_dense()
    diagonal = np.diag(full)
    scaled = full / np.sqrt(np.outer(diagonal, diagonal))
    np.fill_diagonal(scaled, 1.0)
    a.x = scaled.T.reshape(-1).tolist()