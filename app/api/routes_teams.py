# app/api/routes_teams.py
from typing import List

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import LEAGUE_KEY_PATTERN, TEAM_KEY_PATTERN, get_current_user
from app.schemas.stats import TeamWeeklyStats
from app.schemas.team import TeamIdentity
from app.services.cache import cache_route, key_tuple
from app.services.yahoo.client import yahoo_get
from app.services.yahoo.parsers import parse_team_stats, parse_teams
from app.services.yahoo.stats import team_week_stats_path
from app.services.yahoo.teams import upsert_teams

router = APIRouter(prefix="/teams", tags=["teams"])


# ---------------- TEAMS (cache 6h) ----------------
@router.get("/{league_key}", response_model=List[TeamIdentity])
@cache_route(
    namespace="league_teams",
    ttl_seconds=6 * 60 * 60,
    key_builder=lambda *args, **kwargs: key_tuple("teams", kwargs["guid"], kwargs["league_key"]),
)
def league_teams(
    league_key: str = Path(..., pattern=LEAGUE_KEY_PATTERN),
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
    response: Response = None,
):
    """All teams in a Yahoo league."""
    teams = parse_teams(yahoo_get(db, guid, f"/league/{league_key}/teams"))
    upsert_teams(db, league_key, teams)
    return teams


@router.get("/{league_key}/{team_key}/stats", response_model=TeamWeeklyStats)
def team_stats(
    league_key: str = Path(..., pattern=LEAGUE_KEY_PATTERN),
    team_key: str = Path(..., pattern=TEAM_KEY_PATTERN),
    week: int = Query(..., ge=1, le=30),
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
):
    """One team's raw category totals for a scoring week."""
    stats = parse_team_stats(yahoo_get(db, guid, team_week_stats_path(team_key, week)))
    return TeamWeeklyStats(league_key=league_key, team_key=team_key, week=week, stats=stats)
