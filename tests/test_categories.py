import pytest

from app.services.ranking.categories import (
    CategoryTable,
    MLB_STAT_CATEGORIES,
    Polarity,
    StatCategory,
    default_category_table,
)


def test_default_table_polarities():
    table = default_category_table()
    assert table.polarity_of("12") is Polarity.HIGHER  # HR
    assert table.polarity_of("3") is Polarity.HIGHER  # AVG
    assert table.polarity_of("26") is Polarity.LOWER  # ERA
    assert table.polarity_of("27") is Polarity.LOWER  # WHIP
    assert table.polarity_of("39") is Polarity.LOWER  # pitcher walks
    assert table.polarity_of("50") is Polarity.NEUTRAL  # IP
    assert table.polarity_of("60") is Polarity.NEUTRAL  # H/AB


def test_every_category_has_one_polarity():
    ids = [c.stat_id for c in MLB_STAT_CATEGORIES]
    assert len(ids) == len(set(ids))


def test_int_and_str_ids_resolve_the_same():
    table = default_category_table()
    assert table.polarity_of(26) is table.polarity_of("26")
    assert 26 in table


def test_unknown_category_policy():
    assert default_category_table().polarity_of("9999") is Polarity.HIGHER
    assert default_category_table(unknown_policy="exclude").polarity_of("9999") is Polarity.NEUTRAL


def test_rejects_bad_unknown_policy():
    with pytest.raises(ValueError):
        CategoryTable([], unknown_policy="lower")


def test_name_falls_back_for_unknown_ids():
    table = default_category_table()
    assert table.name_of("26") == "ERA"
    assert table.name_of("9999") == "Stat_9999"


def test_extend_without_replace_only_adds_unknown_ids():
    table = default_category_table()
    extended = table.extend(
        [
            StatCategory(stat_id="26", polarity=Polarity.HIGHER, name="ERA?"),
            StatCategory(stat_id="90", polarity=Polarity.LOWER, name="BLSV"),
        ],
        replace=False,
    )
    assert extended.polarity_of("26") is Polarity.LOWER
    assert extended.polarity_of("90") is Polarity.LOWER
    # source table untouched
    assert "90" not in table
    assert len(extended) == len(table) + 1


def test_overrides_change_polarity_and_keep_name():
    table = default_category_table(overrides={"50": "higher", "21": "higher"})
    assert table.polarity_of("50") is Polarity.HIGHER
    assert table.polarity_of("21") is Polarity.HIGHER
    assert table.name_of("50") == "IP"


def test_league_settings_merge(monkeypatch):
    from fastapi import HTTPException

    from app.services import power_index as service

    league_cats = [
        StatCategory(stat_id="26", polarity=Polarity.HIGHER, name="Earned Run Avg"),
        StatCategory(stat_id="90", polarity=Polarity.LOWER, name="BLSV"),
    ]
    monkeypatch.setattr(service, "fetch_league_stat_categories", lambda yahoo, key: league_cats)
    table = service.build_category_table(object(), "458.l.1000")
    assert table.polarity_of("26") is Polarity.LOWER
    assert table.name_of("26") == "Earned Run Avg"
    assert table.polarity_of("90") is Polarity.LOWER

    def unavailable(yahoo, key):
        raise HTTPException(status_code=500, detail="boom")

    monkeypatch.setattr(service, "fetch_league_stat_categories", unavailable)
    assert service.build_category_table(object(), "458.l.1000").name_of("26") == "ERA"

    def expired(yahoo, key):
        raise HTTPException(status_code=401, detail="expired")

    monkeypatch.setattr(service, "fetch_league_stat_categories", expired)
    with pytest.raises(HTTPException):
        service.build_category_table(object(), "458.l.1000")
