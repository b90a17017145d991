#!/usr/bin/env python
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse, json
from dataclasses import asdict
from pathlib import Path

from happyatlas.config import load_settings
from happyatlas.loaders import DataLoadError
from happyatlas.state import Coordinator, DashboardView


def panel_to_dict(panel) -> dict | None:
    if panel is None:
        return None
    return {
        "code": panel.code,
        "title": panel.title,
        "year": panel.year,
        "shown_year": panel.shown_year,
        "empty": panel.empty,
        "ladder": panel.ladder_text,
        "trend": [asdict(p) for p in panel.trend.points],
        "trend_marker": asdict(panel.trend.marker) if panel.trend.marker else None,
        "factors": [{"key": b.key, "label": b.label, "value": b.value, "share": round(b.share, 4)}
                    for b in panel.factors],
        "periods": {
            "pre": panel.periods.pre,
            "post": panel.periods.post,
            "has_data": panel.periods.has_data,
        },
        "events": {
            "has_events": panel.events.has_events,
            "fallback": panel.events.fallback,
            "entries": [{"year": e.year, "texts": list(e.texts), "active": e.is_active, "headline": e.headline}
                        for e in panel.events.entries],
        },
    }


def view_to_dict(view: DashboardView) -> dict:
    return {
        "year": view.state.year,
        "country": view.state.country,
        "map": [{"code": f.code, "name": f.name, "color": f.color, "rank": f.rank, "shown_year": f.shown_year}
                for f in view.map.fills],
        "panel": panel_to_dict(view.panel),
    }


def main():
    ap = argparse.ArgumentParser(description="Export the map colours and country panel for one year as JSON.")
    ap.add_argument("--settings_json", default=None)
    ap.add_argument("--year", type=int, required=True)
    ap.add_argument("--country", default=None, help="ISO3 code of the selected country")
    ap.add_argument("--out_json", required=True)
    args = ap.parse_args()

    settings = load_settings(Path(args.settings_json) if args.settings_json else None)
    coord = Coordinator(settings=settings)
    snapshots = []
    coord.subscribe(snapshots.append)
    try:
        coord.on_visible()
    except DataLoadError as e:
        raise SystemExit(f"[ERROR] {e}")

    coord.set_year(args.year)
    if args.country:
        if not coord.select_country(args.country.strip().upper()):
            raise SystemExit(f"[ERROR] unknown country code: {args.country}")

    out = Path(args.out_json)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(view_to_dict(snapshots[-1]), f, indent=2, ensure_ascii=False)
    print("[OK] Snapshot written:", out, "| views rendered:", len(snapshots))


if __name__ == "__main__":
    main()
