"""Triangular solves, sparse reachability and Cholesky rank-one updates."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .csc import CscMatrix, SparseError


def _rhs(t: CscMatrix, b: Sequence[float]) -> list[float]:
    if t.x is None:
        raise SparseError("a triangular solve needs a matrix with values")
    if len(b) != t.n:
        raise SparseError("right-hand side length does not match the matrix")
    return [float(v) for v in b]


def lsolve(l: CscMatrix, b: Sequence[float]) -> list[float]:
    """Solve ``L x = b`` for lower triangular ``L`` with the diagonal first."""
    x = _rhs(l, b)
    for j in range(l.n):
        start, end = l.p[j], l.p[j + 1]
        x[j] /= l.x[start]
        for t in range(start + 1, end):
            x[l.i[t]] -= l.x[t] * x[j]
    return x


def ltsolve(l: CscMatrix, b: Sequence[float]) -> list[float]:
    """Solve ``L' x = b`` for lower triangular ``L`` with the diagonal first."""
    x = _rhs(l, b)
    for j in reversed(range(l.n)):
        start, end = l.p[j], l.p[j + 1]
        for t in range(start + 1, end):
            x[j] -= l.x[t] * x[l.i[t]]
        x[j] /= l.x[start]
    return x


def usolve(u: CscMatrix, b: Sequence[float]) -> list[float]:
    """Solve ``U x = b`` for upper triangular ``U`` with the diagonal last."""
    x = _rhs(u, b)
    for j in reversed(range(u.n)):
        start, end = u.p[j], u.p[j + 1]
        x[j] /= u.x[end - 1]
        for t in range(start, end - 1):
            x[u.i[t]] -= u.x[t] * x[j]
    return x


def utsolve(u: CscMatrix, b: Sequence[float]) -> list[float]:
    """Solve ``U' x = b`` for upper triangular ``U`` with the diagonal last."""
    x = _rhs(u, b)
    for j in range(u.n):
        start, end = u.p[j], u.p[j + 1]
        for t in range(start, end - 1):
            x[j] -= u.x[t] * x[u.i[t]]
        x[j] /= u.x[end - 1]
    return x


def _dfs(start: int, g: CscMatrix, visited: set[int],
         pinv: Sequence[int] | None, finished: list[int]) -> None:
    """Depth-first search of the graph of ``g`` from ``start``.

    Nodes are appended to ``finished`` as their search completes.
    """
    stack = [[start, 0]]
    while stack:
        top = stack[-1]
        node = top[0]
        col = pinv[node] if pinv is not None else node
        if node not in visited:
            visited.add(node)
            top[1] = g.p[col] if col >= 0 else 0
        end = g.p[col + 1] if col >= 0 else 0
        for t in range(top[1], end):
            neighbour = g.i[t]
            if neighbour in visited:
                continue
            top[1] = t
            stack.append([neighbour, 0])
            break
        else:
            stack.pop()
            finished.append(node)


def reach(g: CscMatrix, b: CscMatrix, k: int,
          pinv: Sequence[int] | None = None) -> list[int]:
    """Return the nodes reachable in the graph of ``g`` from column ``k`` of ``b``.

    The nodes come in topological order, each before those it reaches.
    """
    if not 0 <= k < b.n:
        raise SparseError("column index out of range")
    visited: set[int] = set()
    finished: list[int] = []
    for t in range(b.p[k], b.p[k + 1]):
        node = b.i[t]
        if node not in visited:
            _dfs(node, g, visited, pinv, finished)
    finished.reverse()
    return finished


def spsolve(g: CscMatrix, b: CscMatrix, k: int,
            pinv: Sequence[int] | None = None,
            lower: bool = True) -> tuple[list[int], list[float]]:
    """Solve ``G x = b(:, k)`` with sparse ``G`` triangular and sparse ``b``.

    ``G`` is lower triangular with the diagonal first in each column, or
    upper triangular with it last. Returns the pattern of ``x`` and ``x``
    itself as a dense list of length ``g.m``.
    """
    if g.x is None:
        raise SparseError("a triangular solve needs a matrix with values")
    pattern = reach(g, b, k, pinv)
    x = [0.0] * g.m
    for t in range(b.p[k], b.p[k + 1]):
        x[b.i[t]] = b.x[t] if b.x is not None else 1.0
    for j in pattern:
        col = pinv[j] if pinv is not None else j
        if col < 0:
            continue
        start, end = g.p[col], g.p[col + 1]
        x[j] /= g.x[start if lower else end - 1]
        first, last = (start + 1, end) if lower else (start, end - 1)
        for t in range(first, last):
            x[g.i[t]] -= g.x[t] * x[j]
    return pattern, x


def updown(l: CscMatrix, sigma: int, c: CscMatrix,
           parent: Sequence[int]) -> bool:
    """Update (``sigma=1``) or downdate (``sigma=-1``) ``L`` in place to ``LL' + sigma ww'``.

    ``w`` is the first column of ``c`` and ``parent`` the elimination tree
    of ``L``. Returns False if a downdate leaves the matrix not positive
    definite; ``L`` is then partly modified.
    """
    if l.x is None or c.x is None:
        raise SparseError("an update needs matrices with values")
    if c.p[0] >= c.p[1]:
        return True
    w = [0.0] * l.n
    for t in range(c.p[0], c.p[1]):
        w[c.i[t]] = c.x[t]
    beta = 1.0
    beta2 = 1.0
    j = min(c.i[c.p[0]:c.p[1]])
    while j != -1:
        p = l.p[j]
        alpha = w[j] / l.x[p]
        beta2 = beta * beta + sigma * alpha * alpha
        if beta2 <= 0:
            break
        beta2 = math.sqrt(beta2)
        delta = beta / beta2 if sigma > 0 else beta2 / beta
        gamma = sigma * alpha / (beta2 * beta)
        l.x[p] = delta * l.x[p] + (gamma * w[j] if sigma > 0 else 0.0)
        beta = beta2
        for t in range(p + 1, l.p[j + 1]):
            row = l.i[t]
            w1 = w[row]
            w2 = w1 - alpha * l.x[t]
            w[row] = w2
            l.x[t] = delta * l.x[t] + gamma * (w1 if sigma > 0 else w2)
        j = parent[j]
    return beta2 > 0