from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .config import FACTOR_KEYS, POST_PERIOD, PRE_PERIOD
from .records import YearlyObservation


def factor_maxima(observations: Iterable[YearlyObservation], keys: list[str] = FACTOR_KEYS) -> dict[str, float]:
    """Per-factor maximum over the whole dataset; 1.0 where a factor is never filled.

    Only used as a bar denominator, so an all-empty factor must not give 0.
    """
    observations = list(observations)
    out = {}
    for key in keys:
        vals = np.array([o.factors.get(key) for o in observations if o.factors.get(key) is not None], dtype=float)
        vals = vals[~np.isnan(vals)]
        out[key] = float(vals.max()) if vals.size else 1.0
    return out


def in_period(year: int, period: tuple[int, int | None]) -> bool:
    start, end = period
    return year >= start and (end is None or year <= end)


def period_average(observations: Iterable[YearlyObservation], period: tuple[int, int | None]) -> float | None:
    vals = [o.ladder for o in observations if in_period(o.year, period) and o.ladder is not None]
    if not vals:
        return None
    return float(np.mean(vals))


@dataclass(frozen=True)
class PeriodComparison:
    pre: float | None
    post: float | None
    pre_period: tuple[int, int | None] = PRE_PERIOD
    post_period: tuple[int, int | None] = POST_PERIOD

    @property
    def has_data(self) -> bool:
        return self.pre is not None or self.post is not None

    @property
    def change(self) -> float | None:
        if self.pre is None or self.post is None:
            return None
        return self.post - self.pre


def compare_periods(observations: Iterable[YearlyObservation],
                    pre: tuple[int, int | None] = PRE_PERIOD,
                    post: tuple[int, int | None] = POST_PERIOD) -> PeriodComparison:
    observations = list(observations)
    return PeriodComparison(
        pre=period_average(observations, pre),
        post=period_average(observations, post),
        pre_period=pre,
        post_period=post,
    )
