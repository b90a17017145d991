from happyatlas.events import visible_events

LOG = {"AAA": {2015: ["mid"], 2010: ["old"], 2020: ["new", "more"]}}


def years(timeline):
    return [e.year for e in timeline.entries]


def test_filters_to_years_up_to_active():
    t = visible_events(LOG, "AAA", 2012)
    assert years(t) == [2010]
    assert not t.fallback
    assert t.active is None


def test_descending_order():
    assert years(visible_events(LOG, "AAA", 2030)) == [2020, 2015, 2010]


def test_falls_back_to_full_list_before_first_event():
    t = visible_events(LOG, "AAA", 2005)
    assert years(t) == [2020, 2015, 2010]
    assert t.fallback
    assert t.has_events
    assert not any(e.is_active for e in t.entries)


def test_active_entry_headline():
    t = visible_events(LOG, "AAA", 2020)
    active = t.active
    assert active.year == 2020
    assert active.headline == "new"
    assert active.details == ("more",)
    others = [e for e in t.entries if not e.is_active]
    assert all(e.headline is None for e in others)
    assert others[0].details == ("mid",)


def test_country_without_events_is_explicitly_empty():
    for code in ("BBB", None):
        t = visible_events(LOG, code, 2020)
        assert t.entries == ()
        assert not t.has_events
        assert not t.fallback
    assert not visible_events({"CCC": {}}, "CCC", 2020).has_events
