"""Strongly connected components and Dulmage-Mendelsohn decomposition."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .csc import CscMatrix, SparseError
from .matching import maxtrans
from .perm import pinv as invert_permutation


@dataclass
class Decomposition:
    """Result of a block decomposition.

    Block ``k`` holds rows ``p[r[k]:r[k+1]]`` and columns ``q[s[k]:s[k+1]]``.
    ``rr`` and ``cc`` are the coarse row and column boundaries.
    """

    p: list[int]
    q: list[int]
    r: list[int]
    s: list[int]
    nb: int
    rr: list[int] = field(default_factory=lambda: [0] * 5)
    cc: list[int] = field(default_factory=lambda: [0] * 5)


def _dfs(g: CscMatrix, start: int, visited: set[int], finished: list[int]) -> None:
    """Depth-first search from ``start``; nodes are appended as they finish."""
    visited.add(start)
    stack = [[start, g.p[start]]]
    while stack:
        top = stack[-1]
        node, pos = top
        end = g.p[node + 1]
        while pos < end and g.i[pos] in visited:
            pos += 1
        if pos < end:
            neighbour = g.i[pos]
            top[1] = pos + 1
            visited.add(neighbour)
            stack.append([neighbour, g.p[neighbour]])
        else:
            stack.pop()
            finished.append(node)


def scc(a: CscMatrix) -> Decomposition:
    """Find the strongly connected components of the graph of square ``a``.

    ``A(p, p)`` is block upper triangular; block ``k`` holds the nodes
    ``p[r[k]:r[k+1]]`` in increasing order.
    """
    if a.m != a.n:
        raise SparseError("strongly connected components need a square matrix")
    n = a.n
    visited: set[int] = set()
    finished: list[int] = []
    for i in range(n):
        if i not in visited:
            _dfs(a, i, visited, finished)
    at = a.transpose(values=False)
    visited = set()
    components: list[list[int]] = []
    for i in reversed(finished):
        if i in visited:
            continue
        component: list[int] = []
        _dfs(at, i, visited, component)
        components.append(component)
    components.reverse()
    p: list[int] = []
    r = [0]
    for component in components:
        p.extend(sorted(component))
        r.append(len(p))
    return Decomposition(p=p, q=[], r=r, s=[], nb=len(components))


def _bfs(a: CscMatrix, count: int, wi: list[int], wj: list[int],
         imatch: list[int], jmatch: list[int], mark: int) -> None:
    """Breadth-first search along alternating paths from unmatched nodes."""
    queue = [j for j in range(count) if imatch[j] < 0]
    for j in queue:
        wj[j] = 0
    if not queue:
        return
    g = a if mark == 1 else a.transpose(values=False)
    head = 0
    while head < len(queue):
        j = queue[head]
        head += 1
        for i in g.i[g.p[j]:g.p[j + 1]]:
            if wi[i] >= 0:
                continue
            wi[i] = mark
            j2 = jmatch[i]
            if wj[j2] >= 0:
                continue
            wj[j2] = mark
            queue.append(j2)


def dmperm(a: CscMatrix, seed: int = 0,
           rng: np.random.Generator | None = None) -> Decomposition:
    """Return the coarse and fine Dulmage-Mendelsohn decomposition of ``a``.

    ``A(p, q)`` is block upper triangular with fine blocks given by ``r``
    and ``s``. ``seed`` and ``rng`` are passed to the matching.
    """
    m, n = a.m, a.n
    jmatch, imatch = maxtrans(a, seed, rng)
    wi = [-1] * m
    wj = [-1] * n
    _bfs(a, n, wi, wj, imatch, jmatch, 1)
    _bfs(a, m, wj, wi, jmatch, imatch, 3)

    cc = [0] * 5
    rr = [0] * 5
    q = [j for j in range(n) if wj[j] == 0]
    cc[1] = len(q)
    p: list[int] = []
    for block, mark in ((1, 1), (2, -1), (3, 3)):
        for j in range(n):
            if wj[j] == mark:
                p.append(imatch[j])
                q.append(j)
        cc[block + 1] = len(q)
        rr[block] = len(p)
    p.extend(i for i in range(m) if wi[i] == 0)
    rr[4] = len(p)

    c = a.permute(invert_permutation(p), q, values=False)
    nc = cc[3] - cc[2]
    lo, hi = rr[1], rr[2]
    pointers = [0]
    rows: list[int] = []
    for j in range(cc[2], cc[3]):
        rows.extend(i - lo for i in c.i[c.p[j]:c.p[j + 1]] if lo <= i < hi)
        pointers.append(len(rows))
    square = CscMatrix(nc, nc, pointers, rows, None)

    fine = scc(square)
    q[cc[2]:cc[3]] = [q[k + cc[2]] for k in fine.p]
    p[lo:lo + nc] = [p[k + lo] for k in fine.p]

    r: list[int] = []
    s: list[int] = []
    if cc[2] > 0:
        r.append(0)
        s.append(0)
    for start in fine.r[:fine.nb]:
        r.append(start + lo)
        s.append(start + cc[2])
    if rr[2] < m:
        r.append(rr[2])
        s.append(cc[3])
    r.append(m)
    s.append(n)
    return Decomposition(p=p, q=q, r=r, s=s, nb=len(r) - 1, rr=rr, cc=cc)