import pytest

from happyatlas.names import COUNTRY_TO_ISO3, NameReconciler, normalize_name


def test_every_dictionary_name_resolves_to_its_code():
    r = NameReconciler()
    for name, code in COUNTRY_TO_ISO3.items():
        assert r.resolve(name) == code
    assert r.misses("table") == frozenset()


@pytest.mark.parametrize("raw, code", [
    ("Dem. Rep. Congo", "COD"),
    ("Bosnia and Herz.", "BIH"),
    ("Côte d’Ivoire", "CIV"),
    ("Cote d`Ivoire", "CIV"),
    ("  Finland  ", "FIN"),
    ("Hong Kong S.A.R. of China", "HKG"),
])
def test_resolve_after_trim_and_normalization(raw, code):
    assert NameReconciler().resolve(raw, source="geo") == code


def test_unknown_names_are_recorded_per_source():
    r = NameReconciler()
    assert r.resolve("Atlantis", source="geo") is None
    assert r.resolve(" Narnia ", source="table") is None
    assert r.resolve("Narnia", source="table") is None
    assert r.misses("geo") == {"Atlantis"}
    assert r.misses("table") == {"Narnia"}
    assert r.sources == ["geo", "table"]


def test_empty_or_missing_names_are_not_misses():
    r = NameReconciler()
    assert r.resolve(None) is None
    assert r.resolve("   ") is None
    assert r.resolve(float("nan")) is None
    assert r.misses("table") == frozenset()


def test_no_fuzzy_matching():
    r = NameReconciler()
    assert r.resolve("Finlan") is None
    assert r.resolve("finland") is None


def test_custom_mapping():
    r = NameReconciler({"Utopia": "UTO"})
    assert r.resolve("Utopia") == "UTO"
    assert r.resolve("Finland") is None


def test_normalize_name():
    assert normalize_name("St. Kitts ‘n’ Nevis") == "St Kitts 'n' Nevis"
