#!/usr/bin/env python
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse, json
from pathlib import Path
from datetime import datetime, timezone
import pandas as pd

from happyatlas.config import load_settings
from happyatlas.loaders import DataLoadError, load_dataset


def audit_frame(ds) -> pd.DataFrame:
    rows = []
    for source in ("table", "geo"):
        for name in sorted(ds.reconciler.misses(source)):
            rows.append({"source": source, "raw_name": name, "issue": "unresolved_name", "code": None})
    for code in sorted(ds.unmatched_codes):
        rows.append({"source": "table", "raw_name": None, "issue": "no_map_shape", "code": code})
    return pd.DataFrame(rows, columns=["source", "raw_name", "issue", "code"])


def coverage_frame(ds) -> pd.DataFrame:
    obs = pd.DataFrame([{"code": o.code, "year": o.year, "ladder": o.ladder} for o in ds.observations],
                       columns=["code", "year", "ladder"])
    if obs.empty:
        return pd.DataFrame(columns=["code", "name", "first_year", "last_year", "rows", "duplicate_years"])
    g = obs.groupby("code")
    out = pd.DataFrame({
        "first_year": g["year"].min(),
        "last_year": g["year"].max(),
        "rows": g.size(),
        "duplicate_years": g["year"].apply(lambda s: int(s.duplicated().sum())),
    }).reset_index()
    out.insert(1, "name", out["code"].map(ds.display_name))
    return out


def main():
    ap = argparse.ArgumentParser(description="Audit country-name reconciliation between the report and the map.")
    ap.add_argument("--settings_json", default=None, help="Optional JSON with data_csv / world_geojson / events_json.")
    ap.add_argument("--data_csv", default=None)
    ap.add_argument("--world_geojson", default=None)
    ap.add_argument("--events_json", default=None)
    ap.add_argument("--report_csv", required=True, help="Output CSV with one row per unresolved name / unmatched code")
    ap.add_argument("--coverage_csv", default=None, help="Optional CSV with per-country year coverage")
    ap.add_argument("--report_json", required=True, help="Output JSON with global summary")
    args = ap.parse_args()

    settings = load_settings(Path(args.settings_json) if args.settings_json else None,
                             data_csv=args.data_csv, world_geojson=args.world_geojson, events_json=args.events_json)
    try:
        ds = load_dataset(settings)
    except DataLoadError as e:
        raise SystemExit(f"[ERROR] {e}")

    report = audit_frame(ds)
    out_csv = Path(args.report_csv)
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    report.to_csv(out_csv, index=False)

    if args.coverage_csv:
        Path(args.coverage_csv).parent.mkdir(parents=True, exist_ok=True)
        coverage_frame(ds).to_csv(args.coverage_csv, index=False)

    meta = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data_csv": str(settings.data_csv),
        "world_geojson": str(settings.world_geojson),
        "events_json": str(settings.events_json),
        "observations_kept": len(ds.observations),
        "countries_kept": len({o.code for o in ds.observations}),
        "shapes": len(ds.geometries),
        "shapes_tagged": sum(1 for g in ds.geometries if g.tagged),
        "unresolved_table_names": len(ds.reconciler.misses("table")),
        "unresolved_geo_names": len(ds.reconciler.misses("geo")),
        "codes_without_shape": len(ds.unmatched_codes),
        "rows_without_year": ds.dropped_rows,
        "event_countries": len(ds.events),
    }
    out_json = Path(args.report_json)
    out_json.parent.mkdir(parents=True, exist_ok=True)
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)

    print("[OK] Name audit written:", str(out_csv))
    print(json.dumps(meta, indent=2))


if __name__ == "__main__":
    main()
