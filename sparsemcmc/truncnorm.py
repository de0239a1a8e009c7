"""Sampling from truncated normal distributions."""

from __future__ import annotations

import math
from collections.abc import Sequence
from statistics import NormalDist

import numpy as np

_BOUND = 1e32
_STANDARD = NormalDist()


def rtnorm(mu: float, sd: float, lower: float, upper: float,
           rng: np.random.Generator | None = None) -> float:
    """Draw one value from a normal distribution truncated to ``(lower, upper)``.

    Bounds beyond ``1e32`` in magnitude count as infinite. If ``lower`` is
    not below ``upper`` the midpoint of the two is returned.
    """
    if rng is None:
        rng = np.random.default_rng()
    if lower >= upper:
        return (lower + upper) / 2
    lower_open = lower < -_BOUND
    upper_open = upper > _BOUND
    if lower_open and upper_open:
        return float(rng.normal(mu, sd))
    if lower_open or upper_open:
        tr = (lower - mu) / sd if upper_open else (mu - upper) / sd
        if tr < 0:
            z = float(rng.standard_normal())
            while not z > tr:
                z = float(rng.standard_normal())
        else:
            alpha = (tr + math.sqrt(tr * tr + 4.0)) / 2.0
            while True:
                z = float(rng.exponential(1.0 / alpha)) + tr
                pz = -((alpha - z) * (alpha - z) / 2.0)
                u = -float(rng.exponential(1.0))
                if u <= pz:
                    break
    else:
        slower = (lower - mu) / sd
        supper = (upper - mu) / sd
        tr = _STANDARD.cdf(supper) - _STANDARD.cdf(slower)
        if tr > 0.5:
            z = float(rng.standard_normal())
            while not slower < z < supper:
                z = float(rng.standard_normal())
        else:
            while True:
                z = float(rng.uniform(slower, supper))
                if slower <= 0.0 <= supper:
                    pz = -z * z / 2.0
                elif supper < 0.0:
                    pz = (supper * supper - z * z) / 2.0
                else:
                    pz = (slower * slower - z * z) / 2.0
                u = -float(rng.exponential(1.0))
                if u < pz:
                    break
    if lower_open:
        return mu - z * sd
    return z * sd + mu


def rtnorm_many(mu: Sequence[float], sd: Sequence[float], lower: Sequence[float],
                upper: Sequence[float],
                rng: np.random.Generator | None = None) -> list[float]:
    """Draw one truncated normal value per position of the equal-length inputs."""
    if rng is None:
        rng = np.random.default_rng()
    return [
        rtnorm(m, s, lo, hi, rng)
        for m, s, lo, hi in zip(mu, sd, lower, upper, strict=True)
    ]