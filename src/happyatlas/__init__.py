from .aggregates import compare_periods, factor_maxima, period_average
from .events import visible_events
from .loaders import DataLoadError, Dataset, load_dataset
from .names import NameReconciler
from .state import Coordinator, DashboardView, Lifecycle, ViewState
from .temporal import build_series, lookup

__version__ = "0.1.0"
