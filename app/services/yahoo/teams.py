from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from app.db.models import Team
from app.schemas.team import TeamIdentity
from app.services.yahoo.client import YahooSession
from app.services.yahoo.parsers import parse_teams


def fetch_league_teams(yahoo: YahooSession, league_key: str) -> List[TeamIdentity]:
    """Teams of a league; falls back to /standings when /teams comes back empty."""
    teams = parse_teams(yahoo.get(f"/league/{league_key}/teams"))
    if teams:
        return teams
    return parse_teams(yahoo.get(f"/league/{league_key}/standings"))


def upsert_teams(db: Session, league_key: str, teams: List[TeamIdentity]) -> None:
    for t in teams:
        row = db.get(Team, t.team_key)
        if row is None:
            row = Team(team_key=t.team_key, league_key=league_key, name=t.name)
            db.add(row)
        row.league_key = league_key
        row.team_id = t.team_id
        row.name = t.name
        row.manager_name = t.manager_name
        row.logo_url = t.logo_url
    db.commit()
