"""Plain view models for the map and the country panel.

Everything here is rebuilt from scratch on each state change; the rendering
layer only reads these objects.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .aggregates import PeriodComparison, compare_periods
from .colors import rank_color
from .config import FACTORS, NEUTRAL_FILL, POST_PERIOD, PRE_PERIOD, RANK_DOMAIN
from .events import EventTimeline, visible_events
from .records import GeometryEntry, YearlyObservation
from .temporal import TemporalSeries, lookup

MAX_TICKS = 6


@dataclass(frozen=True)
class MapFill:
    code: str | None
    name: str
    color: str
    rank: int | None = None
    shown_year: int | None = None   # year of the observation actually used

    @property
    def selectable(self) -> bool:
        return self.code is not None

    @property
    def label(self) -> str:
        if self.rank is None:
            return self.name
        return f"{self.name} (#{self.rank}, {self.shown_year})"


@dataclass(frozen=True)
class MapView:
    year: int
    fills: tuple[MapFill, ...]

    def color_of(self, code: str) -> str | None:
        return next((f.color for f in self.fills if f.code == code), None)


@dataclass(frozen=True)
class TrendPoint:
    year: int
    ladder: float


@dataclass(frozen=True)
class TrendView:
    points: tuple[TrendPoint, ...]
    marker: TrendPoint | None
    ticks: tuple[int, ...]


@dataclass(frozen=True)
class FactorBar:
    key: str
    label: str
    value: float | None
    max: float

    @property
    def share(self) -> float:
        if self.value is None:
            return 0.0
        return max(0.0, min(1.0, self.value / (abs(self.max) or 1.0)))

    @property
    def text(self) -> str:
        return "–" if self.value is None else f"{self.value:.2f}"


@dataclass(frozen=True)
class PanelView:
    code: str
    title: str
    year: int
    observation: YearlyObservation | None
    trend: TrendView
    factors: tuple[FactorBar, ...]
    periods: PeriodComparison
    events: EventTimeline

    @property
    def empty(self) -> bool:
        return self.observation is None

    @property
    def ladder_text(self) -> str:
        if self.observation is None or self.observation.ladder is None:
            return ""
        return f"{self.observation.ladder:.2f}"

    @property
    def shown_year(self) -> int | None:
        return None if self.observation is None else self.observation.year


def build_map_view(series: TemporalSeries, geometries: list[GeometryEntry], year: int,
                   domain: tuple[int, int] = RANK_DOMAIN, neutral: str = NEUTRAL_FILL) -> MapView:
    fills = []
    for g in geometries:
        obs = lookup(series, g.code, year) if g.tagged else None
        if obs is None:
            fills.append(MapFill(code=g.code, name=g.name, color=neutral))
            continue
        fills.append(MapFill(
            code=g.code,
            name=g.name,
            color=rank_color(obs.rank, domain, neutral),
            rank=obs.rank,
            shown_year=obs.year,
        ))
    return MapView(year=year, fills=tuple(fills))


def year_ticks(years: list[int], max_ticks: int = MAX_TICKS) -> tuple[int, ...]:
    if len(years) <= max_ticks:
        return tuple(years)
    step = math.ceil(len(years) / max_ticks)
    return tuple(y for i, y in enumerate(years) if i % step == 0)


def build_trend(rows: list[YearlyObservation], current: YearlyObservation | None) -> TrendView:
    points = tuple(TrendPoint(o.year, o.ladder) for o in rows if o.ladder is not None)
    marker = None
    if current is not None and current.ladder is not None:
        marker = TrendPoint(current.year, current.ladder)
    return TrendView(points=points, marker=marker, ticks=year_ticks([o.year for o in rows]))


def build_factor_bars(current: YearlyObservation | None, maxima: dict[str, float]) -> tuple[FactorBar, ...]:
    if current is None:
        return ()
    return tuple(
        FactorBar(key=f.key, label=f.label, value=current.factors.get(f.key), max=maxima.get(f.key, 1.0))
        for f in FACTORS
    )


def build_panel_view(code: str, year: int, series: TemporalSeries, maxima: dict[str, float],
                     event_log: dict[str, dict[int, list[str]]], title: str | None = None,
                     periods: dict[str, tuple[int, int | None]] | None = None) -> PanelView:
    rows = series.get(code, [])
    current = lookup(series, code, year)
    periods = periods or {"pre": PRE_PERIOD, "post": POST_PERIOD}
    return PanelView(
        code=code,
        title=title or code,
        year=year,
        observation=current,
        trend=build_trend(rows, current),
        factors=build_factor_bars(current, maxima),
        periods=compare_periods(rows, periods["pre"], periods["post"]),
        events=visible_events(event_log, code, year),
    )
