"""Probability that every category is observed in a multinomial sample."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import math

_FLOOR = 1e-16


def _subset_sums(prob: Sequence[float], start: int = 0, depth: int = 0,
                 partial: float = 0.0) -> Iterator[tuple[int, float]]:
    """Yield ``(size - 1, sum)`` for every non-empty subset, depth first."""
    for i in range(start, len(prob)):
        total = prob[i] if depth == 0 else partial + prob[i]
        yield depth, total
        yield from _subset_sums(prob, i + 1, depth + 1, total)


def pkk(prob: Sequence[float], size: float) -> float:
    """Probability that all categories with probabilities ``prob`` occur in ``size`` draws."""
    k = len(prob)
    prob = [float(p) for p in prob]
    total = 0.0
    for depth, s in _subset_sums(prob):
        sign = 1.0 if (k - depth + 1) % 2 == 0 else -1.0
        total += sign * s ** size
    return total


def pkk_update(link: Sequence[float], size: float, present: Sequence[int],
               k: int, final_i: int) -> float:
    """:func:`pkk` for the categories present among positions ``final_i-k+2 .. final_i+1``.

    Category probabilities are ``exp(link[i])`` for the listed positions
    and 1 for the baseline at ``final_i + 1``, normalised. A single present
    category gives 1; the result is never below ``1e-16``.
    """
    start_i = final_i - k + 2
    count = sum(1 for i in range(start_i, final_i + 2) if present[i] == 1)
    if count == 1:
        return 1.0
    weights = [math.exp(link[i]) for i in range(start_i, final_i + 1) if present[i] == 1]
    if present[final_i + 1] == 1:
        weights.append(1.0)
    total = sum(weights)
    probs = [w / total for w in weights]
    return max(pkk(probs, size), _FLOOR)