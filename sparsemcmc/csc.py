"""Sparse matrices in compressed-column and triplet form."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TextIO

import numpy as np

from .perm import cumsum


class SparseError(ValueError):
    """Raised when a sparse matrix operation receives invalid input."""


@dataclass
class CscMatrix:
    """An ``m``-by-``n`` matrix in compressed-column form.

    ``p`` holds the ``n + 1`` column pointers, ``i`` the row index of each
    stored entry and ``x`` its value, or ``None`` for a pattern-only matrix.
    Duplicate entries are allowed and mean their sum.
    """

    m: int
    n: int
    p: list[int]
    i: list[int]
    x: list[float] | None = None

    def __post_init__(self) -> None:
        self.m = int(self.m)
        self.n = int(self.n)
        self.p = [int(v) for v in self.p]
        self.i = [int(v) for v in self.i]
        if self.x is not None:
            self.x = [float(v) for v in self.x]
        if self.m < 0 or self.n < 0:
            raise SparseError("matrix dimensions must be non-negative")
        if len(self.p) != self.n + 1 or self.p[0] != 0:
            raise SparseError("column pointers must have n+1 entries starting at 0")
        if any(b < a for a, b in zip(self.p, self.p[1:])):
            raise SparseError("column pointers must be non-decreasing")
        if len(self.i) != self.p[-1]:
            raise SparseError("number of row indices does not match column pointers")
        if self.x is not None and len(self.x) != len(self.i):
            raise SparseError("number of values does not match number of row indices")
        if any(r < 0 or r >= self.m for r in self.i):
            raise SparseError("row index out of range")

    @property
    def nnz(self) -> int:
        """Number of stored entries."""
        return self.p[-1]

    @classmethod
    def from_dense(cls, rows) -> "CscMatrix":
        """Store every entry of a two-dimensional array, zeros included."""
        array = np.asarray(rows, dtype=float)
        if array.ndim != 2:
            raise SparseError("a dense matrix must be two-dimensional")
        m, n = array.shape
        return cls(
            m,
            n,
            [j * m for j in range(n + 1)],
            [r for _ in range(n) for r in range(m)],
            array.T.reshape(-1).tolist(),
        )

    def to_dense(self) -> np.ndarray:
        """Return the matrix as a numpy array, duplicates summed."""
        out = np.zeros((self.m, self.n))
        columns = np.repeat(np.arange(self.n), np.diff(self.p))
        np.add.at(out, (np.asarray(self.i, dtype=int), columns), self._values())
        return out

    def _values(self) -> list[float]:
        return self.x if self.x is not None else [1.0] * self.nnz

    def _columns(self) -> Iterator[tuple[int, range]]:
        for j, (start, end) in enumerate(zip(self.p, self.p[1:])):
            yield j, range(start, end)

    def transpose(self, values: bool = True) -> "CscMatrix":
        """Return the transpose; values are copied only if asked and present."""
        counts = [0] * self.m
        for r in self.i:
            counts[r] += 1
        pointers = cumsum(counts)
        nxt = pointers[:-1]
        rows = [0] * self.nnz
        with_values = values and self.x is not None
        vals = [0.0] * self.nnz if with_values else None
        for j, span in self._columns():
            for k in span:
                q = nxt[self.i[k]]
                nxt[self.i[k]] += 1
                rows[q] = j
                if vals is not None:
                    vals[q] = self.x[k]
        return CscMatrix(self.n, self.m, pointers, rows, vals)

    def _scatter(self, col: int, beta: float, w: list[int], work: list[float] | None,
                 mark: int, rows: list[int]) -> None:
        for k in range(self.p[col], self.p[col + 1]):
            r = self.i[k]
            if w[r] < mark:
                w[r] = mark
                rows.append(r)
                if work is not None:
                    work[r] = beta * self.x[k]
            elif work is not None:
                work[r] += beta * self.x[k]

    def multiply(self, other: "CscMatrix") -> "CscMatrix":
        """Return the product ``self @ other``."""
        if self.n != other.m:
            raise SparseError(
                f"cannot multiply {self.m}x{self.n} by {other.m}x{other.n}"
            )
        with_values = self.x is not None and other.x is not None
        w = [0] * self.m
        work = [0.0] * self.m if with_values else None
        pointers = [0]
        rows: list[int] = []
        vals: list[float] | None = [] if with_values else None
        for j, span in other._columns():
            start = len(rows)
            for k in span:
                beta = other.x[k] if other.x is not None else 1.0
                self._scatter(other.i[k], beta, w, work, j + 1, rows)
            if vals is not None:
                vals.extend(work[r] for r in rows[start:])
            pointers.append(len(rows))
        return CscMatrix(self.m, other.n, pointers, rows, vals)

    def norm(self) -> float:
        """Return the 1-norm: the largest absolute column sum."""
        if self.x is None:
            raise SparseError("the 1-norm needs a matrix with values")
        return max(
            (sum(abs(self.x[k]) for k in span) for _, span in self._columns()),
            default=0.0,
        )

    def gaxpy(self, x: Sequence[float], y: Sequence[float]) -> list[float]:
        """Return ``self @ x + y`` as a new list."""
        if len(x) != self.n or len(y) != self.m:
            raise SparseError("vector lengths do not match the matrix")
        out = [float(v) for v in y]
        vals = self._values()
        for j, span in self._columns():
            for k in span:
                out[self.i[k]] += vals[k] * x[j]
        return out

    def sum_duplicates(self) -> None:
        """Merge duplicate entries of each column in place."""
        w = [-1] * self.m
        nz = 0
        pointers = [0]
        for _, span in self._columns():
            q = nz
            for k in span:
                r = self.i[k]
                if w[r] >= q:
                    if self.x is not None:
                        self.x[w[r]] += self.x[k]
                else:
                    w[r] = nz
                    self.i[nz] = r
                    if self.x is not None:
                        self.x[nz] = self.x[k]
                    nz += 1
            pointers.append(nz)
        self._truncate(pointers, nz)

    def _truncate(self, pointers: list[int], nz: int) -> None:
        self.p = pointers
        del self.i[nz:]
        if self.x is not None:
            del self.x[nz:]

    def fkeep(self, keep: Callable[[int, int, float], bool]) -> int:
        """Keep only entries for which ``keep(row, col, value)`` is true.

        Pattern-only entries are passed the value 1. Returns the number of
        entries left.
        """
        nz = 0
        pointers = [0]
        for j, span in self._columns():
            for k in span:
                value = self.x[k] if self.x is not None else 1.0
                if keep(self.i[k], j, value):
                    if self.x is not None:
                        self.x[nz] = self.x[k]
                    self.i[nz] = self.i[k]
                    nz += 1
            pointers.append(nz)
        self._truncate(pointers, nz)
        return nz

    def droptol(self, tol: float) -> int:
        """Drop entries whose absolute value is not above ``tol``."""
        return self.fkeep(lambda _i, _j, value: abs(value) > tol)

    def dropzeros(self) -> int:
        """Drop entries equal to zero."""
        return self.fkeep(lambda _i, _j, value: value != 0)

    def permute(self, pinv: Sequence[int] | None, q: Sequence[int] | None,
                values: bool = True) -> "CscMatrix":
        """Return ``A(p, q)`` given the inverse row permutation ``pinv``."""
        with_values = values and self.x is not None
        pointers = [0]
        rows: list[int] = []
        vals: list[float] | None = [] if with_values else None
        for k in range(self.n):
            j = q[k] if q is not None else k
            for t in range(self.p[j], self.p[j + 1]):
                if vals is not None:
                    vals.append(self.x[t])
                rows.append(pinv[self.i[t]] if pinv is not None else self.i[t])
            pointers.append(len(rows))
        return CscMatrix(self.m, self.n, pointers, rows, vals)

    def format(self, brief: bool = False) -> str:
        """Describe the matrix column by column; ``brief`` stops early."""
        norm_text = f"{self.norm():g}" if self.x is not None else "-1"
        lines = [
            f"{self.m}-by-{self.n}, nzmax: {len(self.i)} nnz: {self.nnz}, "
            f"1-norm: {norm_text}"
        ]
        vals = self._values()
        for j, span in self._columns():
            lines.append(f"    col {j} : locations {span.start} to {span.stop - 1}")
            for k in span:
                lines.append(f"      {self.i[k]} : {vals[k]:g}")
                if brief and k > 20:
                    lines.append("  ...")
                    return "\n".join(lines) + "\n"
        return "\n".join(lines) + "\n"


@dataclass
class TripletMatrix:
    """A matrix held as a list of ``(row, col, value)`` entries."""

    m: int = 0
    n: int = 0
    rows: list[int] = field(default_factory=list)
    cols: list[int] = field(default_factory=list)
    values: list[float] = field(default_factory=list)

    def entry(self, i: int, j: int, x: float) -> None:
        """Append an entry, growing the dimensions to hold it."""
        if i < 0 or j < 0:
            raise SparseError("triplet indices must be non-negative")
        self.rows.append(int(i))
        self.cols.append(int(j))
        self.values.append(float(x))
        self.m = max(self.m, i + 1)
        self.n = max(self.n, j + 1)

    def format(self, brief: bool = False) -> str:
        """Describe the entries in order; ``brief`` stops early."""
        nz = len(self.rows)
        lines = [f"triplet: {self.m}-by-{self.n}, nzmax: {nz} nnz: {nz}"]
        for k, (r, c, v) in enumerate(zip(self.rows, self.cols, self.values)):
            lines.append(f"    {r} {c} : {v:g}")
            if brief and k > 20:
                lines.append("  ...")
                break
        return "\n".join(lines) + "\n"


def load_triplet(stream: TextIO) -> TripletMatrix:
    """Read ``row col value`` triples until the text stops matching."""
    tokens = stream.read().split()
    triplet = TripletMatrix()
    for r, c, v in zip(tokens[0::3], tokens[1::3], tokens[2::3]):
        try:
            row, col, value = int(r), int(c), float(v)
        except ValueError:
            break
        triplet.entry(row, col, value)
    return triplet