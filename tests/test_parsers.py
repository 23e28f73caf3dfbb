from app.services.ranking.categories import Polarity
from app.services.yahoo.parsers import (
    as_list,
    parse_league_meta,
    parse_leagues,
    parse_stat_categories,
    parse_stat_list,
    parse_team_stats,
    parse_teams,
    parse_user_profile,
)


def _team_json(key, tid, name, nickname):
    return {
        "team": [
            [
                {"team_key": key},
                {"team_id": tid},
                {"name": name},
                [],
                {"url": f"https://baseball.fantasysports.yahoo.com/b1/1000/{tid}"},
                {"team_logos": [{"team_logo": {"size": "large", "url": f"https://img/{tid}.png"}}]},
                {"managers": [{"manager": {"manager_id": tid, "nickname": nickname, "guid": f"G{tid}"}}]},
            ]
        ]
    }


def test_as_list_shapes():
    assert as_list(None) == []
    assert as_list([1, 2]) == [1, 2]
    assert as_list({"1": "b", "0": "a", "count": 2}) == ["a", "b"]
    assert as_list({"stat_id": "7"}) == [{"stat_id": "7"}]


def test_parse_teams_numeric_key_collection():
    payload = {
        "fantasy_content": {
            "league": [
                {"league_key": "458.l.1000", "name": "Dingers"},
                {
                    "teams": {
                        "0": _team_json("458.l.1000.t.1", "1", "Sluggers", "joe"),
                        "1": _team_json("458.l.1000.t.2", "2", "Aces", "sam"),
                        "count": 2,
                    }
                },
            ]
        }
    }
    teams = parse_teams(payload)
    assert [t.team_key for t in teams] == ["458.l.1000.t.1", "458.l.1000.t.2"]
    assert teams[0].name == "Sluggers"
    assert teams[0].team_id == "1"
    assert teams[0].manager_name == "joe"
    assert teams[0].logo_url == "https://img/1.png"


def test_parse_teams_xml_style_single_and_many():
    many = {"league": {"teams": {"team": [
        {"team_key": "458.l.1000.t.1", "name": "Sluggers", "managers": {"manager": {"nickname": "joe"}}},
        {"team_key": "458.l.1000.t.2", "name": "Aces"},
        {"team_key": "458.l.1000.t.2", "name": "Aces (dup)"},
    ]}}}
    teams = parse_teams(many)
    assert [t.name for t in teams] == ["Sluggers", "Aces"]
    assert teams[0].manager_name == "joe"

    single = {"league": {"teams": {"team": {"team_key": "458.l.1000.t.9", "name": "Solo"}}}}
    assert [t.team_key for t in parse_teams(single)] == ["458.l.1000.t.9"]


def test_parse_team_stats_json():
    payload = {
        "fantasy_content": {
            "team": [
                [{"team_key": "458.l.1000.t.1"}, {"name": "Sluggers"}],
                {
                    "team_stats": {
                        "coverage_type": "week",
                        "week": "3",
                        "stats": [
                            {"stat": {"stat_id": "60", "value": "25/80"}},
                            {"stat": {"stat_id": "7", "value": "14"}},
                            {"stat": {"stat_id": "3", "value": ".313"}},
                            {"stat": {"stat_id": "26", "value": "3.50"}},
                            {"stat": {"stat_id": "50", "value": "41.1"}},
                            {"stat": {"stat_id": "27", "value": "-"}},
                        ],
                    }
                },
            ]
        }
    }
    assert parse_team_stats(payload) == {
        "60": "25/80",
        "7": 14.0,
        "3": 0.313,
        "26": 3.5,
        "50": 41.1,
        "27": "-",
    }


def test_parse_stat_list_single_stat_and_numeric_keys():
    assert parse_stat_list({"stat": {"stat_id": "12", "value": "4"}}) == {"12": 4.0}
    assert parse_stat_list({"stat": [{"stat_id": "12", "value": "4"}, {"stat_id": 26, "value": 2.5}]}) == {
        "12": 4.0,
        "26": 2.5,
    }
    assert parse_stat_list({"0": {"stat": {"stat_id": "13", "value": "9"}}, "count": 1}) == {"13": 9.0}


def test_parse_team_stats_without_stats():
    assert parse_team_stats({"fantasy_content": {"team": [[{"team_key": "458.l.1000.t.1"}]]}}) == {}
    # stat entries with no value are skipped
    assert parse_stat_list([{"stat": {"stat_id": "12"}}]) == {}


def test_parse_leagues_from_users_games():
    payload = {
        "fantasy_content": {
            "users": {
                "0": {
                    "user": [
                        {"guid": "GUID"},
                        {"games": {"0": {"game": [
                            {"game_key": "458", "code": "mlb"},
                            {"leagues": {
                                "0": {"league": [{"league_key": "458.l.1000", "name": "Dingers", "season": "2024",
                                                  "game_code": "mlb", "scoring_type": "head", "current_week": 7}]},
                                "count": 1,
                            }},
                        ]}, "count": 1}},
                    ]
                },
                "count": 1,
            }
        }
    }
    leagues = parse_leagues(payload)
    assert leagues == [{
        "league_key": "458.l.1000",
        "name": "Dingers",
        "season": "2024",
        "game_code": "mlb",
        "scoring_type": "head",
        "current_week": 7,
    }]


def test_parse_league_meta():
    payload = {"fantasy_content": {"league": [{
        "league_key": "458.l.1000", "name": "Dingers", "season": "2024", "game_code": "mlb",
        "current_week": "12", "start_week": "1", "end_week": "24",
    }]}}
    meta = parse_league_meta(payload)
    assert meta["league_key"] == "458.l.1000"
    assert meta["current_week"] == 12
    assert meta["season"] == "2024"
    assert meta["end_week"] == 24


def test_parse_stat_categories_sort_order_and_display_only():
    payload = {"fantasy_content": {"league": [
        {"league_key": "458.l.1000"},
        {"settings": [{"stat_categories": {"stats": [
            {"stat": {"stat_id": 7, "name": "Runs", "display_name": "R", "sort_order": "1"}},
            {"stat": {"stat_id": 26, "name": "Earned Run Average", "display_name": "ERA", "sort_order": "0"}},
            {"stat": {"stat_id": 50, "name": "Innings Pitched", "display_name": "IP", "sort_order": "1",
                      "is_only_display_stat": "1"}},
        ]}}]},
    ]}}
    cats = {c.stat_id: c for c in parse_stat_categories(payload)}
    assert cats["7"].polarity is Polarity.HIGHER
    assert cats["26"].polarity is Polarity.LOWER
    assert cats["26"].name == "ERA"
    assert cats["50"].polarity is Polarity.NEUTRAL


def test_parse_user_profile():
    payload = {"fantasy_content": {"users": {"0": {"user": [
        {"guid": "ABC123"},
        {"profile": {"nickname": "joe", "image_url": "https://img/joe.png"}},
    ]}, "count": 1}}}
    assert parse_user_profile(payload) == {"guid": "ABC123", "nickname": "joe", "image_url": "https://img/joe.png"}
