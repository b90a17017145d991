from __future__ import annotations

from collections.abc import Iterable

from .records import YearlyObservation

TemporalSeries = dict[str, list[YearlyObservation]]


def build_series(observations: Iterable[YearlyObservation]) -> TemporalSeries:
    series: TemporalSeries = {}
    for obs in observations:
        series.setdefault(obs.code, []).append(obs)
    for code, rows in series.items():
        # sorted() is stable: duplicate years keep their source order
        series[code] = sorted(rows, key=lambda o: o.year)
    return series


def lookup(series: TemporalSeries, code: str | None, year: int) -> YearlyObservation | None:
    """Observation shown for ``code`` at ``year``.

    Exact year first (first duplicate wins), else the latest earlier year.
    If ``year`` precedes every observation, the earliest one is shown rather
    than nothing. Unknown code or empty series gives None.
    """
    rows = series.get(code) if code is not None else None
    if not rows:
        return None
    for obs in rows:
        if obs.year == year:
            return obs
    prior = None
    for obs in rows:
        if obs.year < year and (prior is None or obs.year > prior.year):
            prior = obs
    if prior is not None:
        return prior
    return rows[0]
