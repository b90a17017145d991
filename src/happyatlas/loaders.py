from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd

from .config import COUNTRY_HEADERS, CSV_SEP, FACTORS, LADDER_COLUMN, Settings
from .names import NameReconciler
from .records import GeometryEntry, YearlyObservation

NAME_PROPERTIES = ["name", "NAME", "ADMIN"]


class DataLoadError(RuntimeError):
    """One of the three sources could not be loaded; nothing downstream can be built."""


def parse_comma(series: pd.Series) -> pd.Series:
    s = (series.fillna("").astype(str)
         .str.replace(",", ".", regex=False)
         .str.replace(r"\s", "", regex=True))
    return pd.to_numeric(s, errors="coerce")


def _require_file(path: Path) -> Path:
    path = Path(path)
    if not path.exists():
        msg = [f"Input not found: {path}"]
        parent = path.parent
        if parent.exists():
            msg.append(f"Files in {parent}: " + ", ".join(sorted(p.name for p in parent.iterdir())[:50]))
        else:
            msg.append(f"Directory does not exist: {parent}")
        raise FileNotFoundError("\n".join(msg))
    return path


def read_table(path: Path) -> pd.DataFrame:
    """Read the ';'-separated report into country/year/rank/ladder/<factor> columns.

    Numeric cells use a decimal comma; anything that does not parse becomes NaN.
    Rows without a usable year are dropped and counted in ``df.attrs["dropped_rows"]``.
    """
    path = _require_file(path)
    raw = pd.read_csv(path, sep=CSV_SEP, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    raw.columns = [str(c).strip() for c in raw.columns]

    name_cols = [c for c in COUNTRY_HEADERS if c in raw.columns]
    if not name_cols:
        raise ValueError(f"{path.name}: no country column (expected one of {COUNTRY_HEADERS})")
    if "Year" not in raw.columns:
        raise ValueError(f"{path.name}: missing required column 'Year'")

    df = pd.DataFrame(index=raw.index)
    # first non-empty spelling wins, per row
    names = raw[name_cols].apply(lambda s: s.str.strip()).replace("", np.nan)
    df["country"] = names.bfill(axis=1).iloc[:, 0]
    df["year"] = pd.to_numeric(raw["Year"].str.strip(), errors="coerce")
    df["rank"] = pd.to_numeric(raw["Rank"].str.strip(), errors="coerce") if "Rank" in raw.columns else np.nan

    numeric = {"ladder": LADDER_COLUMN, **{f.key: f.csv for f in FACTORS}}
    absent = [csv for csv in numeric.values() if csv not in raw.columns]
    if absent:
        print(f"[WARN] {path.name}: columns not found, values will be empty: {absent}")
    for key, csv in numeric.items():
        df[key] = parse_comma(raw[csv]) if csv in raw.columns else np.nan

    bad_year = df["year"].isna()
    df = df[~bad_year].copy()
    df["year"] = df["year"].astype(int)
    df.attrs["dropped_rows"] = int(bad_year.sum())
    return df


def _opt_float(v) -> float | None:
    return None if pd.isna(v) else float(v)


def build_observations(df: pd.DataFrame, reconciler: NameReconciler) -> list[YearlyObservation]:
    out = []
    for row in df.itertuples(index=False):
        code = reconciler.resolve(row.country, source="table")
        if code is None:
            continue
        out.append(YearlyObservation(
            code=code,
            year=int(row.year),
            rank=None if pd.isna(row.rank) else int(row.rank),
            ladder=_opt_float(row.ladder),
            factors={f.key: _opt_float(getattr(row, f.key)) for f in FACTORS},
            country=str(row.country),
        ))
    return out


def read_geojson(path: Path) -> dict:
    path = _require_file(path)
    with open(path, "r", encoding="utf-8") as f:
        geo = json.load(f)
    features = geo.get("features") if isinstance(geo, dict) else None
    if not isinstance(features, list) or not features:
        raise ValueError(f"{path.name}: not a feature collection with features")
    return geo


def feature_name(feature: dict) -> str | None:
    props = feature.get("properties")
    if not isinstance(props, dict):
        return None
    for key in NAME_PROPERTIES:
        v = props.get(key)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return None


def build_geometries(geo: dict, reconciler: NameReconciler) -> list[GeometryEntry]:
    out = []
    for i, feature in enumerate(geo["features"]):
        if not isinstance(feature, dict):
            print(f"[WARN] geo: skip feature {i}: not an object")
            continue
        name = feature_name(feature)
        code = reconciler.resolve(name, source="geo")
        out.append(GeometryEntry(code=code, name=name or "", geometry=feature.get("geometry")))
    return out


def read_events(path: Path) -> dict[str, dict[int, list[str]]]:
    path = _require_file(path)
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    if not isinstance(doc, dict):
        raise ValueError(f"{path.name}: expected an object keyed by country code")

    log: dict[str, dict[int, list[str]]] = {}
    for code, by_year in doc.items():
        if not isinstance(by_year, dict):
            print(f"[WARN] {path.name}: skip {code}: expected year -> texts")
            continue
        entries = {}
        for ykey, texts in by_year.items():
            try:
                year = int(str(ykey).strip())
            except ValueError:
                print(f"[WARN] {path.name}: skip {code}/{ykey}: not a year")
                continue
            if isinstance(texts, str):
                texts = [texts]
            if not isinstance(texts, list):
                print(f"[WARN] {path.name}: skip {code}/{ykey}: expected a list of texts")
                continue
            entries[year] = [str(t) for t in texts]
        log[str(code).strip().upper()] = entries
    return log


@dataclass
class Dataset:
    observations: list[YearlyObservation]
    geometries: list[GeometryEntry]
    events: dict[str, dict[int, list[str]]]
    reconciler: NameReconciler
    dropped_rows: int = 0
    unmatched_codes: set[str] = field(default_factory=set)

    @property
    def codes(self) -> set[str]:
        return {g.code for g in self.geometries if g.tagged}

    @property
    def years(self) -> list[int]:
        return sorted({o.year for o in self.observations})

    def display_name(self, code: str) -> str:
        for g in self.geometries:
            if g.code == code:
                return g.name
        return code


def join(observations: list[YearlyObservation], geometries: list[GeometryEntry]):
    """Keep observations whose code also has a map shape."""
    geo_codes = {g.code for g in geometries if g.tagged}
    kept = [o for o in observations if o.code in geo_codes]
    unmatched = {o.code for o in observations if o.code not in geo_codes}
    return kept, unmatched


def load_dataset(settings: Settings | None = None, reconciler: NameReconciler | None = None) -> Dataset:
    settings = settings or Settings()
    reconciler = reconciler or NameReconciler()
    try:
        table = read_table(settings.data_csv)
        geo = read_geojson(settings.world_geojson)
        events = read_events(settings.events_json)
        observations = build_observations(table, reconciler)
        geometries = build_geometries(geo, reconciler)
    except (OSError, ValueError, TypeError, AttributeError, KeyError, pd.errors.ParserError) as e:
        print(f"[ERROR] load failed: {e}")
        raise DataLoadError(str(e)) from e

    kept, unmatched = join(observations, geometries)

    for source in ("table", "geo"):
        missed = sorted(reconciler.misses(source))
        if missed:
            print(f"[WARN] {source}: {len(missed)} unresolved names: {', '.join(missed)}")
    if unmatched:
        print(f"[WARN] table: {len(unmatched)} codes without a map shape: {', '.join(sorted(unmatched))}")
    if table.attrs.get("dropped_rows"):
        print(f"[WARN] table: {table.attrs['dropped_rows']} rows without a valid year")

    ds = Dataset(
        observations=kept,
        geometries=geometries,
        events=events,
        reconciler=reconciler,
        dropped_rows=int(table.attrs.get("dropped_rows", 0)),
        unmatched_codes=unmatched,
    )
    print(f"[OK] {len(kept)} observations | {len({o.code for o in kept})} countries | {len(geometries)} shapes")
    return ds
