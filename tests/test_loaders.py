import json

import pandas as pd
import pytest

from happyatlas.loaders import (DataLoadError, load_dataset, parse_comma, read_events, read_geojson,
                                read_table)

from conftest import ROWS, write_csv


def test_parse_comma():
    out = parse_comma(pd.Series(["7,406", " 1,2 ", "", "abc", None, "3.5"]))
    assert out.iloc[0] == pytest.approx(7.406)
    assert out.iloc[1] == pytest.approx(1.2)
    assert out.iloc[2:5].isna().all()
    assert out.iloc[5] == pytest.approx(3.5)


def test_read_table_normalizes_columns(settings):
    df = read_table(settings.data_csv)
    assert df.attrs["dropped_rows"] == 1
    assert len(df) == len(ROWS) - 1
    fin = df[df["country"] == "Finland"].iloc[0]
    assert fin["year"] == 2015
    assert fin["ladder"] == pytest.approx(7.4)
    assert fin["gdp"] == pytest.approx(1.3)
    assert pd.isna(fin["corruption"])
    den = df[df["country"] == "Denmark"].iloc[0]
    assert pd.isna(den["gdp"])


def test_read_table_alternative_country_headers(tmp_path):
    header = ["Country namegive", "Country", "Year", "Rank", "Ladder score"]
    path = write_csv(tmp_path / "r.csv", [["", "Finland", "2020", "1", "7,8"],
                                          ["Denmark", "", "2020", "2", "7,6"]], header=header)
    df = read_table(path)
    assert list(df["country"]) == ["Finland", "Denmark"]
    assert df["gdp"].isna().all()


def test_read_table_requires_year_and_country(tmp_path):
    with pytest.raises(ValueError):
        read_table(write_csv(tmp_path / "a.csv", [["Finland", "1"]], header=["Country name", "Rank"]))
    with pytest.raises(ValueError):
        read_table(write_csv(tmp_path / "b.csv", [["Finland", "2020"]], header=["Land", "Year"]))


def test_read_geojson_rejects_empty(tmp_path):
    path = tmp_path / "g.json"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        read_geojson(path)


def test_read_events(settings):
    log = read_events(settings.events_json)
    assert log["FIN"] == {2010: ["a"], 2015: ["b1", "b2"], 2020: ["c"]}
    assert log["DNK"] == {2016: ["single"]}


def test_load_dataset_joins_both_sources(dataset):
    codes = {o.code for o in dataset.observations}
    assert codes == {"FIN", "DNK", "COD"}
    assert len(dataset.observations) == 5
    assert dataset.unmatched_codes == {"LUX"}
    assert dataset.reconciler.misses("table") == {"Narnia"}
    assert dataset.reconciler.misses("geo") == {"Atlantis"}
    assert dataset.codes == {"FIN", "DNK", "COD", "ESP"}
    assert dataset.dropped_rows == 1
    assert dataset.years == [2015, 2016, 2017, 2018, 2020]


def test_load_dataset_keeps_untagged_shapes_for_background(dataset):
    untagged = [g for g in dataset.geometries if not g.tagged]
    assert [g.name for g in untagged] == ["Atlantis"]
    assert dataset.display_name("COD") == "Dem. Rep. Congo"
    assert dataset.display_name("XXX") == "XXX"


def test_load_dataset_null_rank_kept(tmp_path, settings):
    write_csv(settings.data_csv, [["Finland", "2020", "", "7,8", "", "", "", "", "", ""]])
    ds = load_dataset(settings)
    assert ds.observations[0].rank is None
    assert ds.observations[0].ladder == pytest.approx(7.8)


@pytest.mark.parametrize("attr", ["data_csv", "world_geojson", "events_json"])
def test_missing_source_is_fatal(settings, tmp_path, attr):
    setattr(settings, attr, tmp_path / "nope" / "missing.json")
    with pytest.raises(DataLoadError):
        load_dataset(settings)


def test_broken_json_is_fatal(settings):
    settings.events_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError):
        load_dataset(settings)


def test_unresolved_names_are_reported(dataset, capsys, settings):
    load_dataset(settings)
    out = capsys.readouterr().out
    assert "[WARN] table: 1 unresolved names: Narnia" in out
    assert "[WARN] geo: 1 unresolved names: Atlantis" in out


def test_read_events_skips_non_list_texts(settings, capsys):
    settings.events_json.write_text(json.dumps({"FIN": {"2018": 5, "2019": ["kept"], "2020": {"a": 1}}}),
                                    encoding="utf-8")
    log = read_events(settings.events_json)
    assert log["FIN"] == {2019: ["kept"]}
    out = capsys.readouterr().out
    assert "skip FIN/2018: expected a list of texts" in out
    assert "skip FIN/2020: expected a list of texts" in out


def test_malformed_features_are_skipped(settings, capsys):
    geo = json.loads(settings.world_geojson.read_text(encoding="utf-8"))
    geo["features"] = [None, "x", {"type": "Feature", "properties": "oops"}] + geo["features"]
    settings.world_geojson.write_text(json.dumps(geo), encoding="utf-8")
    ds = load_dataset(settings)
    assert len(ds.geometries) == 6
    assert ds.codes == {"FIN", "DNK", "COD", "ESP"}
    assert ds.geometries[0].name == "" and not ds.geometries[0].tagged
    out = capsys.readouterr().out
    assert "[WARN] geo: skip feature 0: not an object" in out
    assert "[WARN] geo: skip feature 1: not an object" in out
