"""Elimination trees, postorderings and symbolic Cholesky column counts."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from .csc import CscMatrix, SparseError
from .perm import cumsum


def etree(a: CscMatrix, ata: bool = False) -> list[int]:
    """Return the elimination tree of ``triu(a)``, or of ``a'a`` if ``ata``.

    Entry ``j`` is the parent of node ``j``, or -1 for a root.
    """
    n = a.n
    parent = [-1] * n
    ancestor = [-1] * n
    prev = [-1] * a.m if ata else None
    for k in range(n):
        for t in range(a.p[k], a.p[k + 1]):
            row = a.i[t]
            i = prev[row] if prev is not None else row
            while i != -1 and i < k:
                inext = ancestor[i]
                ancestor[i] = k
                if inext == -1:
                    parent[i] = k
                i = inext
            if prev is not None:
                prev[row] = k
    return parent


def postorder(parent: Sequence[int]) -> list[int]:
    """Return a postordering of the forest given by ``parent``.

    Roots are taken in increasing order and the children of each node
    in increasing order.
    """
    n = len(parent)
    children: list[list[int]] = [[] for _ in range(n)]
    for j, pj in enumerate(parent):
        if pj != -1:
            children[pj].append(j)
    post: list[int] = []
    for root in (j for j in range(n) if parent[j] == -1):
        stack: list[tuple[int, Iterator[int]]] = [(root, iter(children[root]))]
        while stack:
            node, pending = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                post.append(node)
            else:
                stack.append((child, iter(children[child])))
    return post


def _leaf(i: int, j: int, first: list[int], maxfirst: list[int],
          prevleaf: list[int], ancestor: list[int]) -> tuple[int, int]:
    """Classify node ``j`` in the ``i``th row subtree.

    Returns ``(q, jleaf)``: ``jleaf`` is 0 if ``j`` is not a leaf, 1 for
    the first leaf and 2 for a later one, where ``q`` is the least common
    ancestor of the previous leaf and ``j``.
    """
    if i <= j or first[j] <= maxfirst[i]:
        return -1, 0
    maxfirst[i] = first[j]
    jprev = prevleaf[i]
    prevleaf[i] = j
    if jprev == -1:
        return i, 1
    q = jprev
    while q != ancestor[q]:
        q = ancestor[q]
    s = jprev
    while s != q:
        sparent = ancestor[s]
        ancestor[s] = q
        s = sparent
    return q, 2


def _linked(head: list[int], nxt: list[int], k: int) -> Iterator[int]:
    row = head[k]
    while row != -1:
        yield row
        row = nxt[row]


def column_counts(a: CscMatrix, parent: Sequence[int], post: Sequence[int],
                  ata: bool = False) -> list[int]:
    """Return the column counts of the Cholesky factor of ``a`` or ``a'a``.

    ``parent`` is the elimination tree and ``post`` a postordering of it.
    """
    m, n = a.m, a.n
    if len(parent) != n or len(post) != n:
        raise SparseError("parent and post must have one entry per column")
    at = a.transpose(values=False)
    maxfirst = [-1] * n
    prevleaf = [-1] * n
    first = [-1] * n
    delta = [0] * n
    for k, node in enumerate(post):
        delta[node] = 1 if first[node] == -1 else 0
        j = node
        while j != -1 and first[j] == -1:
            first[j] = k
            j = parent[j]
    head: list[int] = []
    nxt: list[int] = []
    if ata:
        order = [0] * n
        for k, node in enumerate(post):
            order[node] = k
        head = [-1] * (n + 1)
        nxt = [-1] * m
        for i in range(m):
            k = min((order[c] for c in at.i[at.p[i]:at.p[i + 1]]), default=n)
            nxt[i] = head[k]
            head[k] = i
    ancestor = list(range(n))
    for k, j in enumerate(post):
        if parent[j] != -1:
            delta[parent[j]] -= 1
        rows = _linked(head, nxt, k) if ata else (j,)
        for row in rows:
            for i in at.i[at.p[row]:at.p[row + 1]]:
                q, jleaf = _leaf(i, j, first, maxfirst, prevleaf, ancestor)
                if jleaf >= 1:
                    delta[j] += 1
                if jleaf == 2:
                    delta[q] -= 1
        if parent[j] != -1:
            ancestor[j] = parent[j]
    counts = delta
    for j in range(n):
        if parent[j] != -1:
            counts[parent[j]] += counts[j]
    return counts


def ereach(a: CscMatrix, k: int, parent: Sequence[int]) -> list[int]:
    """Return the pattern of row ``k`` of the Cholesky factor, diagonal excluded.

    Only the upper triangular part of column ``k`` of ``a`` is used.
    """
    if not 0 <= k < a.n:
        raise SparseError("column index out of range")
    visited = {k}
    paths: list[list[int]] = []
    for t in range(a.p[k], a.p[k + 1]):
        i = a.i[t]
        if i > k:
            continue
        path = []
        while i not in visited:
            path.append(i)
            visited.add(i)
            i = parent[i]
        paths.append(path)
    return [node for path in reversed(paths) for node in path]


def symmetric_permute(a: CscMatrix, pinv: Sequence[int] | None = None,
                      values: bool = True) -> CscMatrix:
    """Return the upper part of ``A(p, p)`` given the upper part of ``A``.

    ``pinv`` is the inverse of ``p``; ``None`` is the identity. Entries
    below the diagonal of ``a`` are ignored.
    """
    n = a.n
    if a.m != n:
        raise SparseError("symmetric permutation needs a square matrix")

    def placed() -> Iterator[tuple[int, int, int]]:
        for j in range(n):
            j2 = pinv[j] if pinv is not None else j
            for t in range(a.p[j], a.p[j + 1]):
                i = a.i[t]
                if i > j:
                    continue
                i2 = pinv[i] if pinv is not None else i
                yield t, min(i2, j2), max(i2, j2)

    counts = [0] * n
    for _, _, col in placed():
        counts[col] += 1
    pointers = cumsum(counts)
    nxt = pointers[:-1]
    rows = [0] * pointers[-1]
    with_values = values and a.x is not None
    vals = [0.0] * pointers[-1] if with_values else None
    for t, row, col in placed():
        q = nxt[col]
        nxt[col] += 1
        rows[q] = row
        if vals is not None:
            vals[q] = a.x[t]
    return CscMatrix(n, n, pointers, rows, vals)