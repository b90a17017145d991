from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

HERE = Path(__file__).resolve()
DATA_DIR = HERE.parent.parent / "data"
DATA_CSV = DATA_DIR / "data_happinessreport.csv"
WORLD_GEOJSON = DATA_DIR / "world.geo.json"
EVENTS_JSON = DATA_DIR / "events.json"
SETTINGS_JSON = DATA_DIR / "settings.json"

CSV_SEP = ";"
COUNTRY_HEADERS = ["Country namegive", "Country name", "Country"]
LADDER_COLUMN = "Ladder score"


@dataclass(frozen=True)
class Factor:
    key: str
    label: str
    csv: str


FACTORS = [
    Factor("gdp", "GDP per capita", "Explained by: Log GDP per capita"),
    Factor("social", "Social support", "Explained by: Social support"),
    Factor("healthy", "Healthy life", "Explained by: Healthy life expectancy"),
    Factor("freedom", "Freedom", "Explained by: Freedom to make life choices"),
    Factor("generosity", "Generosity", "Explained by: Generosity"),
    Factor("corruption", "Corruption", "Explained by: Perceptions of corruption"),
]
FACTOR_KEYS = [f.key for f in FACTORS]

# inclusive year ranges, None = open end
PRE_PERIOD = (2015, 2019)
POST_PERIOD = (2020, None)

RANK_DOMAIN = (1, 100)          # rank 1 = best colour, rank 100 = worst
NEUTRAL_FILL = "#e0e3e7"
DEFAULT_YEAR = 2024


@dataclass
class Settings:
    data_csv: Path = DATA_CSV
    world_geojson: Path = WORLD_GEOJSON
    events_json: Path = EVENTS_JSON
    default_year: int = DEFAULT_YEAR
    rank_domain: tuple[int, int] = RANK_DOMAIN
    neutral_fill: str = NEUTRAL_FILL
    periods: dict[str, tuple[int, int | None]] = field(
        default_factory=lambda: {"pre": PRE_PERIOD, "post": POST_PERIOD}
    )


def load_settings(path: Path | None = None, **overrides) -> Settings:
    """Defaults, then keys from a JSON file, then keyword overrides."""
    cfg = Settings()
    values = {}
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            values.update(json.load(f))
    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {unknown}")

    for key in ("data_csv", "world_geojson", "events_json"):
        if key in values:
            values[key] = Path(values[key])
    if "default_year" in values:
        values["default_year"] = int(values["default_year"])
    if "rank_domain" in values:
        lo, hi = values["rank_domain"]
        values["rank_domain"] = (int(lo), int(hi))
    if "periods" in values:
        values["periods"] = {
            name: (int(rng[0]), None if rng[1] is None else int(rng[1]))
            for name, rng in values["periods"].items()
        }
    return replace(cfg, **values)
