from app.api import routes_teams
from app.db.models import League, Team
from app.services.yahoo import leagues as leagues_service

LEAGUE_KEY = "458.l.1000"

TEAMS_PAYLOAD = {
    "fantasy_content": {
        "league": [
            {"league_key": LEAGUE_KEY},
            {"teams": {
                "0": {"team": [[{"team_key": f"{LEAGUE_KEY}.t.1"}, {"team_id": "1"}, {"name": "Sluggers"}]]},
                "1": {"team": [[{"team_key": f"{LEAGUE_KEY}.t.2"}, {"team_id": "2"}, {"name": "Aces"}]]},
                "count": 2,
            }},
        ]
    }
}


def test_health(client):
    assert client.get("/health").json()["ok"] is True


def test_league_teams_cached_per_user(client, db_session, monkeypatch):
    calls = []

    def fake_get(db, user_id, path, params=None):
        calls.append(path)
        return TEAMS_PAYLOAD

    monkeypatch.setattr(routes_teams, "yahoo_get", fake_get)

    first = client.get(f"/teams/{LEAGUE_KEY}")
    assert first.status_code == 200
    assert [t["name"] for t in first.json()] == ["Sluggers", "Aces"]
    assert first.headers["X-Cache"] == "MISS"
    assert db_session.get(Team, f"{LEAGUE_KEY}.t.2").name == "Aces"

    second = client.get(f"/teams/{LEAGUE_KEY}")
    assert second.headers["X-Cache"] == "HIT"
    assert second.json() == first.json()
    assert calls == [f"/league/{LEAGUE_KEY}/teams"]


def test_team_week_stats(client, monkeypatch):
    def fake_get(db, user_id, path, params=None):
        assert path == f"/team/{LEAGUE_KEY}.t.1/stats;type=week;week=4"
        return {"fantasy_content": {"team": [
            [{"team_key": f"{LEAGUE_KEY}.t.1"}],
            {"team_stats": {"stats": [
                {"stat": {"stat_id": "12", "value": "6"}},
                {"stat": {"stat_id": "60", "value": "20/70"}},
            ]}},
        ]}}

    monkeypatch.setattr(routes_teams, "yahoo_get", fake_get)
    resp = client.get(f"/teams/{LEAGUE_KEY}/{LEAGUE_KEY}.t.1/stats", params={"week": 4})
    assert resp.status_code == 200
    assert resp.json() == {
        "league_key": LEAGUE_KEY,
        "team_key": f"{LEAGUE_KEY}.t.1",
        "week": 4,
        "stats": {"12": 6.0, "60": "20/70"},
    }


def test_user_leagues_are_stored(client, db_session, monkeypatch):
    payload = {"fantasy_content": {"users": {"0": {"user": [
        {"guid": "GUID-TEST-1"},
        {"games": {"0": {"game": [
            {"code": "mlb"},
            {"leagues": {"0": {"league": [{
                "league_key": LEAGUE_KEY, "name": "Dingers", "season": "2024",
                "game_code": "mlb", "current_week": "6",
            }]}, "count": 1}},
        ]}, "count": 1}},
    ]}, "count": 1}}}
    monkeypatch.setattr(leagues_service, "yahoo_get", lambda db, user_id, path, params=None: payload)

    resp = client.get("/leagues")
    assert resp.status_code == 200
    assert resp.json()[0]["league_key"] == LEAGUE_KEY
    assert resp.json()[0]["current_week"] == 6

    row = db_session.get(League, LEAGUE_KEY)
    assert row.name == "Dingers"
    assert row.current_week == 6
