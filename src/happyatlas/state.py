from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from .aggregates import factor_maxima
from .config import Settings
from .loaders import Dataset, DataLoadError, load_dataset
from .temporal import TemporalSeries, build_series
from .views import MapView, PanelView, build_map_view, build_panel_view


class Lifecycle(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


@dataclass(frozen=True)
class ViewState:
    year: int
    country: str | None = None


@dataclass(frozen=True)
class DashboardView:
    state: ViewState
    map: MapView
    panel: PanelView | None


Renderer = Callable[[DashboardView], None]


class Coordinator:
    """Owns the view state and pushes a full DashboardView to every renderer.

    Nothing is loaded until ``on_visible`` is called. Year and country
    triggers are ignored until then. After that, every accepted trigger
    rebuilds the map and the panel synchronously.
    """

    def __init__(self, loader: Callable[[], Dataset] | None = None, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._loader = loader or (lambda: load_dataset(self.settings))
        self._renderers: list[Renderer] = []
        self.lifecycle = Lifecycle.UNINITIALIZED
        self.state = ViewState(year=self.settings.default_year)
        self.dataset: Dataset | None = None
        self.series: TemporalSeries = {}
        self.maxima: dict[str, float] = {}
        self.load_error: DataLoadError | None = None
        self.view: DashboardView | None = None

    @property
    def ready(self) -> bool:
        return self.lifecycle is Lifecycle.READY

    def subscribe(self, renderer: Renderer) -> Callable[[], None]:
        self._renderers.append(renderer)
        if self.view is not None:
            renderer(self.view)

        def unsubscribe():
            if renderer in self._renderers:
                self._renderers.remove(renderer)
        return unsubscribe

    def on_visible(self) -> bool:
        """Run the one-time load. Returns False if already loaded."""
        if self.ready:
            return False
        try:
            dataset = self._loader()
        except DataLoadError as e:
            self.load_error = e
            raise
        self.dataset = dataset
        self.series = build_series(dataset.observations)
        self.maxima = factor_maxima(dataset.observations)
        self.load_error = None
        self.lifecycle = Lifecycle.READY
        self._dispatch()
        return True

    def set_year(self, year: int) -> bool:
        return self._update(year=int(year))

    def select_country(self, code: str | None) -> bool:
        if self.ready and code not in self.dataset.codes:
            print(f"[WARN] ignoring selection of {code!r}: no reconciled map shape")
            return False
        return self._update(country=code)

    def _update(self, **changes) -> bool:
        if not self.ready:
            print(f"[WARN] ignoring {changes}: data not loaded yet")
            return False
        self.state = replace(self.state, **changes)
        self._dispatch()
        return True

    def build_view(self) -> DashboardView:
        ds, s = self.dataset, self.state
        fills = build_map_view(self.series, ds.geometries, s.year,
                               self.settings.rank_domain, self.settings.neutral_fill)
        panel = None
        if s.country is not None:
            panel = build_panel_view(s.country, s.year, self.series, self.maxima, ds.events,
                                     title=ds.display_name(s.country), periods=self.settings.periods)
        return DashboardView(state=s, map=fills, panel=panel)

    def _dispatch(self) -> None:
        self.view = self.build_view()
        for renderer in list(self._renderers):
            renderer(self.view)
