# app/api/routes_league.py
from __future__ import annotations

from datetime import date as _date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import LEAGUE_KEY_PATTERN, get_current_user
from app.schemas.league import League
from app.schemas.ranking import PowerIndexResponse
from app.services.cache import cache_route, invalidate, key_tuple
from app.services.power_index import build_week_power_index, sync_league
from app.services.yahoo.leagues import get_user_leagues

router = APIRouter(prefix="/leagues", tags=["leagues"])


# ---------------- LEAGUES (cache 12h) ----------------
@router.get("", response_model=List[League])
@cache_route(
    namespace="user_leagues",
    ttl_seconds=12 * 60 * 60,
    key_builder=lambda *args, **kwargs: key_tuple("leagues", kwargs["guid"]),
)
def user_leagues(
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
    response: Response = None,
):
    """The signed-in manager's MLB leagues; also refreshes the leagues table."""
    return [League(**lg) for lg in get_user_leagues(db, guid)]


@router.post("/{league_key}/sync")
def league_sync(
    league_key: str = Path(..., pattern=LEAGUE_KEY_PATTERN),
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
):
    """Recompute the league's current week from fresh Yahoo stats."""
    result = sync_league(db, guid, league_key)
    # team names/logos may have changed upstream
    invalidate("league_teams", lambda k: k[-1] == league_key)
    return result


@router.get("/{league_key}/power-index", response_model=PowerIndexResponse)
def league_power_index(
    league_key: str = Path(..., pattern=LEAGUE_KEY_PATTERN),
    week: int = Query(..., ge=1, le=30, description="Scoring week"),
    year: Optional[int] = Query(default=None, ge=2000, description="Season; defaults to the current year"),
    refresh: bool = Query(default=False, description="Ignore the weekly cache and recompute"),
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
):
    """
    Weekly power index: every team's category totals compared head-to-head
    against every other team, ranked by the sum of those results.
    """
    season = year or _date.today().year
    return build_week_power_index(db, guid, league_key, week, season, refresh=refresh).to_response()
