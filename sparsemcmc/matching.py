"""Random permutations and maximum transversals of sparse matrices."""

from __future__ import annotations

import numpy as np

from .csc import CscMatrix


def randperm(n: int, seed: int = 0,
             rng: np.random.Generator | None = None) -> list[int] | None:
    """Return a permutation of ``0..n-1``.

    ``seed=0`` gives ``None``, standing for the identity; ``seed=-1`` gives
    the reverse permutation; any other seed gives a random permutation
    drawn from ``rng``.
    """
    if seed == 0:
        return None
    p = list(range(n - 1, -1, -1))
    if seed == -1:
        return p
    if rng is None:
        rng = np.random.default_rng()
    for k in range(n):
        j = min(int(rng.uniform(k, n)), n - 1)
        p[j], p[k] = p[k], p[j]
    return p


def _augment(k: int, c: CscMatrix, jmatch: list[int], cheap: list[int],
             w: list[int], js: list[int], is_: list[int], ps: list[int]) -> None:
    """Look for an augmenting path from column ``k`` and extend the match."""
    found = False
    i = -1
    head = 0
    js[0] = k
    while head >= 0:
        j = js[head]
        end = c.p[j + 1]
        if w[j] != k:
            w[j] = k
            p = cheap[j]
            while p < end and not found:
                i = c.i[p]
                found = jmatch[i] == -1
                p += 1
            cheap[j] = p
            if found:
                is_[head] = i
                break
            ps[head] = c.p[j]
        p = ps[head]
        while p < end:
            i = c.i[p]
            if w[jmatch[i]] == k:
                p += 1
                continue
            ps[head] = p + 1
            is_[head] = i
            head += 1
            js[head] = jmatch[i]
            break
        if p == end:
            head -= 1
    if found:
        for level in range(head, -1, -1):
            jmatch[is_[level]] = js[level]


def _match(c: CscMatrix, seed: int,
           rng: np.random.Generator | None) -> tuple[list[int], list[int]]:
    n, m = c.n, c.m
    cheap = c.p[:n]
    w = [-1] * n
    jmatch = [-1] * m
    js = [0] * n
    is_ = [0] * n
    ps = [0] * n
    q = randperm(n, seed, rng)
    for k in range(n):
        _augment(q[k] if q is not None else k, c, jmatch, cheap, w, js, is_, ps)
    imatch = [-1] * n
    for row, col in enumerate(jmatch):
        if col >= 0:
            imatch[col] = row
    return jmatch, imatch


def maxtrans(a: CscMatrix, seed: int = 0,
             rng: np.random.Generator | None = None) -> tuple[list[int], list[int]]:
    """Find a maximum matching of rows to columns in the pattern of ``a``.

    Returns ``(jmatch, imatch)``: ``jmatch[i]`` is the column matched to
    row ``i`` and ``imatch[j]`` the row matched to column ``j``, -1 where
    unmatched. ``seed`` and ``rng`` choose the order columns are tried in,
    as in :func:`randperm`.
    """
    m, n = a.m, a.n
    row_used = [False] * m
    nonempty_cols = 0
    on_diagonal = 0
    for j in range(n):
        start, end = a.p[j], a.p[j + 1]
        if start < end:
            nonempty_cols += 1
        for t in range(start, end):
            row = a.i[t]
            row_used[row] = True
            if row == j:
                on_diagonal += 1
    if on_diagonal == min(m, n):
        jmatch = [i if i < on_diagonal else -1 for i in range(m)]
        imatch = [j if j < on_diagonal else -1 for j in range(n)]
        return jmatch, imatch
    transposed = sum(row_used) < nonempty_cols
    c = a.transpose(values=False) if transposed else a
    jmatch, imatch = _match(c, seed, rng)
    return (imatch, jmatch) if transposed else (jmatch, imatch)