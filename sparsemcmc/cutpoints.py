"""Metropolis-Hastings log ratio for ordinal cutpoint proposals."""

from __future__ import annotations

import math
from collections.abc import Sequence
from statistics import NormalDist


def _log(value: float) -> float:
    if value > 0:
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def dcutpoints(liab: Sequence[float], y: Sequence[float], observed: Sequence[int],
               start: int, finish: int, old: Sequence[float], new: Sequence[float],
               st: int, ncutpoints: int, sdcp: float, sdl: float) -> float:
    """Log acceptance ratio for moving cutpoints from ``old`` to ``new``.

    Combines the proposal densities (random walk with sd ``sdcp``) with the
    likelihood of the observed categories ``y[start:finish]`` given the
    liabilities ``liab`` and residual sd ``sdl``. ``st`` is the offset of
    this trait's cutpoints in ``old`` and ``new``.
    """
    step = NormalDist(0.0, sdcp)
    llik = 0.0
    for j in range(2, ncutpoints - 2):
        llik += _log(step.cdf(old[st + j + 1] - old[j]) - step.cdf(new[st + j - 1] - old[j]))
        llik -= _log(step.cdf(new[st + j + 1] - new[j]) - step.cdf(old[st + j - 1] - new[j]))
    last, before = st + ncutpoints - 2, st + ncutpoints - 3
    llik += _log(1.0 - step.cdf(new[before] - old[last]))
    llik -= _log(1.0 - step.cdf(old[before] - new[last]))
    for i in range(start, finish):
        w = int(y[i])
        if w <= 1 or observed[i] != 1:
            continue
        dist = NormalDist(liab[i], sdl)
        if w == ncutpoints - 1:
            llik += _log(1.0 - dist.cdf(new[st + w - 1]))
            llik -= _log(1.0 - dist.cdf(old[st + w - 1]))
        else:
            llik += _log(dist.cdf(new[st + w]) - dist.cdf(new[st + w - 1]))
            llik -= _log(dist.cdf(old[st + w]) - dist.cdf(old[st + w - 1]))
    return llik