import json

import pytest

from happyatlas.config import FACTORS, Settings
from happyatlas.loaders import load_dataset
from happyatlas.records import YearlyObservation

HEADER = ["Country name", "Year", "Rank", "Ladder score"] + [f.csv for f in FACTORS]

# name, year, rank, ladder, gdp, social, healthy, freedom, generosity, corruption
ROWS = [
    ["Finland", "2015", "6", "7,4", "1,3", "1,3", "0,9", "0,6", "0,2", ""],
    ["Finland", "2017", "5", "7,5", "1,4", "1,5", "0,8", "0,6", "0,2", ""],
    ["Finland", "2020", "1", "7,8", "1,9", "1,2", "0,7", "0,7", "0,1", ""],
    ["Denmark", "2016", "3", "7,5", "abc", "1,4", "0,9", "0,6", "0,3", ""],
    ["Congo (Kinshasa)", "2018", "120", "4,3", "0,1", "0,8", "0,1", "0,2", "0,2", ""],
    ["Narnia", "2018", "1", "9,0", "2,0", "2,0", "2,0", "2,0", "2,0", ""],
    ["Luxembourg", "2019", "8", "7,2", "1,7", "1,3", "0,9", "0,6", "0,1", ""],
    ["", "2018", "50", "5,0", "", "", "", "", "", ""],
    ["Denmark", "n/a", "3", "7,6", "", "", "", "", "", ""],
]

FEATURES = ["Finland", "Denmark", "Dem. Rep. Congo", "Spain", "Atlantis"]

EVENTS = {
    "FIN": {"2010": ["a"], "2015": ["b1", "b2"], "2020": ["c"], "later": ["skipped"]},
    "dnk": {"2016": "single"},
}


def write_csv(path, rows, header=HEADER):
    lines = [";".join(header)] + [";".join(r) for r in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def square(x, y):
    return {"type": "Polygon", "coordinates": [[[x, y], [x, y + 1], [x + 1, y + 1], [x + 1, y], [x, y]]]}


def write_geojson(path, names):
    geo = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": n}, "geometry": square(i, i)}
            for i, n in enumerate(names)
        ],
    }
    path.write_text(json.dumps(geo), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path):
    csv = write_csv(tmp_path / "report.csv", ROWS)
    geo = write_geojson(tmp_path / "world.geo.json", FEATURES)
    events = tmp_path / "events.json"
    events.write_text(json.dumps(EVENTS), encoding="utf-8")
    return Settings(data_csv=csv, world_geojson=geo, events_json=events, default_year=2018)


@pytest.fixture
def dataset(settings):
    return load_dataset(settings)


@pytest.fixture
def obs():
    def make(year, code="AAA", ladder=None, rank=None, **factors):
        return YearlyObservation(code=code, year=year, rank=rank, ladder=ladder, factors=factors)
    return make
