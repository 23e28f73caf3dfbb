from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models import League
from app.services.yahoo.client import YahooSession, yahoo_get
from app.services.yahoo.parsers import parse_league_meta, parse_leagues, parse_stat_categories
from app.services.ranking.categories import StatCategory

logger = logging.getLogger(__name__)


def get_user_leagues(db: Session, user_id: str) -> List[Dict[str, Any]]:
    """
    The signed-in user's leagues for the configured game (MLB by default),
    upserted into the leagues table.
    """
    game_code = settings.YAHOO_GAME_CODE
    payload = yahoo_get(db, user_id, f"/users;use_login=1/games;game_codes={game_code}/leagues")
    leagues = parse_leagues(payload)

    for lg in leagues:
        lg["game_code"] = lg.get("game_code") or game_code
        row = db.get(League, lg["league_key"])
        if row is None:
            row = League(league_key=lg["league_key"], name=lg["name"])
            db.add(row)
        row.name = lg["name"]
        row.season = lg["season"] or row.season
        row.game_code = lg["game_code"]
        row.current_week = lg.get("current_week") or row.current_week
    db.commit()
    return leagues


def fetch_league_meta(yahoo: YahooSession, league_key: str) -> Dict[str, Any]:
    meta = parse_league_meta(yahoo.get(f"/league/{league_key}/metadata"))
    if not meta.get("league_key"):
        raise HTTPException(status_code=404, detail=f"League {league_key} not found on Yahoo")
    return meta


def fetch_league_stat_categories(yahoo: YahooSession, league_key: str) -> List[StatCategory]:
    return parse_stat_categories(yahoo.get(f"/league/{league_key}/settings"))


def league_display_name(db: Session, league_key: str) -> str:
    row = db.get(League, league_key)
    return row.name if row is not None and row.name else f"League {league_key}"


def mark_league_synced(db: Session, meta: Dict[str, Any]) -> League:
    key = meta["league_key"]
    row = db.get(League, key)
    if row is None:
        row = League(league_key=key, name=meta.get("name") or key)
        db.add(row)
    row.name = meta.get("name") or row.name
    row.season = meta.get("season") or row.season
    row.game_code = meta.get("game_code") or row.game_code
    row.current_week = meta.get("current_week") or row.current_week
    row.last_synced = datetime.now(timezone.utc)
    db.commit()
    return row
