"""Permutation vectors and cumulative sums used by the sparse routines."""

from __future__ import annotations

from collections.abc import Sequence


def cumsum(counts: Sequence[int]) -> list[int]:
    """Return the column pointers ``[0, c0, c0+c1, ...]`` for ``counts``.

    The result has ``len(counts) + 1`` entries and its last entry is the
    total of ``counts``.
    """
    pointers = [0]
    total = 0
    for count in counts:
        total += int(count)
        pointers.append(total)
    return pointers


def pinv(p: Sequence[int] | None) -> list[int] | None:
    """Invert a permutation; ``None`` stands for the identity."""
    if p is None:
        return None
    inverse = [0] * len(p)
    for k, target in enumerate(p):
        inverse[target] = k
    return inverse


def pvec(p: Sequence[int] | None, b: Sequence[float]) -> list[float]:
    """Return ``x`` with ``x[k] = b[p[k]]``; ``p=None`` is the identity."""
    if p is None:
        return list(b)
    return [b[source] for source in p]


def ipvec(p: Sequence[int] | None, b: Sequence[float]) -> list[float]:
    """Return ``x`` with ``x[p[k]] = b[k]``; ``p=None`` is the identity.

    Positions of ``x`` not reached by ``p`` are zero.
    """
    if p is None:
        return list(b)
    targets = list(p[: len(b)])
    size = max([len(b)] + [t + 1 for t in targets])
    x = [0.0] * size
    for target, value in zip(targets, b):
        x[target] = value
    return x