# app/services/power_index.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Literal, Optional, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.ranking import CategoryOut, PowerIndexResponse, PowerIndexResult
from app.services.ingest import StatsBatch, collect_team_stats
from app.services.ranking.categories import CategoryTable, StatCategory, default_category_table
from app.services.ranking.comparator import Comparator
from app.services.ranking.formatter import stat_columns, to_api_items
from app.services.ranking.power_index import compute_ranking, is_degenerate
from app.services.weekly_stats import load_period_categories, load_power_index, save_power_index
from app.services.yahoo.client import YahooSession, open_yahoo_session, refresh_yahoo_session
from app.services.yahoo.leagues import fetch_league_meta, fetch_league_stat_categories, mark_league_synced
from app.services.yahoo.stats import fetch_team_stats_for_week
from app.services.yahoo.teams import fetch_league_teams, upsert_teams

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WeekRanking:
    """A league week's ranking plus what the JSON and report callers need around it."""

    def __init__(
        self,
        league_key: str,
        week: int,
        year: int,
        results: List[PowerIndexResult],
        table: CategoryTable,
        *,
        source: Literal["cache", "computed"],
        failed_teams: Optional[List[str]] = None,
        calculated_at: Optional[datetime] = None,
    ):
        self.league_key = league_key
        self.week = week
        self.year = year
        self.results = results
        self.table = table
        self.source = source
        self.failed_teams = failed_teams or []
        self.calculated_at = calculated_at

    @property
    def status(self) -> Literal["ok", "insufficient_data"]:
        return "insufficient_data" if is_degenerate(self.results, Comparator(self.table)) else "ok"

    def to_response(self) -> PowerIndexResponse:
        return PowerIndexResponse(
            league_key=self.league_key,
            week=self.week,
            year=self.year,
            status=self.status,
            source=self.source,
            categories=[
                CategoryOut(
                    stat_id=sid,
                    name=self.table.name_of(sid),
                    polarity=self.table.polarity_of(sid).value,
                )
                for sid in stat_columns(self.results)
            ],
            failed_teams=self.failed_teams,
            calculated_at=self.calculated_at.isoformat() if self.calculated_at else None,
            items=to_api_items(self.results),
        )


def base_category_table() -> CategoryTable:
    return default_category_table(
        unknown_policy=settings.UNKNOWN_STAT_POLICY,
        overrides=settings.STAT_POLARITY_OVERRIDES,
    )


def build_category_table(yahoo: YahooSession, league_key: str) -> CategoryTable:
    """
    Static table merged with the league's scoring categories: league display
    names are used, ids the static table does not know take their polarity from
    the league's sort order, known ids keep the static polarity. Settings
    overrides apply last.
    """
    table = default_category_table(unknown_policy=settings.UNKNOWN_STAT_POLICY)
    try:
        league_cats = fetch_league_stat_categories(yahoo, league_key)
    except HTTPException as he:
        if he.status_code == 401:
            raise
        logger.warning("League settings unavailable for %s; using default categories (%s)", league_key, he.detail)
        league_cats = []
    table = table.extend(
        StatCategory(stat_id=c.stat_id, polarity=table.polarity_of(c.stat_id), name=c.name) if c.stat_id in table else c
        for c in league_cats
    )
    if settings.STAT_POLARITY_OVERRIDES:
        table = table.with_overrides(settings.STAT_POLARITY_OVERRIDES)
    return table


def _with_refresh(db: Session, user_id: str, yahoo: YahooSession, call: Callable[[YahooSession], T]) -> tuple[YahooSession, T]:
    try:
        return yahoo, call(yahoo)
    except HTTPException as he:
        if he.status_code != 401:
            raise
    yahoo = refresh_yahoo_session(db, user_id)
    return yahoo, call(yahoo)


def _collect(yahoo: YahooSession, teams, league_key: str, week: int, year: int) -> StatsBatch:
    return collect_team_stats(
        teams,
        league_key,
        week,
        partial(fetch_team_stats_for_week, yahoo),
        year=year,
        max_workers=settings.STAT_FETCH_MAX_WORKERS,
    )


def build_week_power_index(
    db: Session,
    user_id: str,
    league_key: str,
    week: int,
    year: int,
    *,
    refresh: bool = False,
) -> WeekRanking:
    """
    Ranking for one league week: served from the weekly cache unless `refresh`
    or nothing is cached, otherwise fetched from Yahoo, computed and stored.

    Raises HTTPException(502) when no team's stats could be retrieved, which
    is distinct from a computed-but-empty ranking (status "insufficient_data").
    """
    if not refresh:
        cached, calculated_at = load_power_index(db, league_key, week, year)
        if cached:
            table = base_category_table().extend(load_period_categories(db, league_key, week, year))
            return WeekRanking(
                league_key, week, year, cached, table,
                source="cache", calculated_at=calculated_at,
            )

    yahoo = open_yahoo_session(db, user_id)
    yahoo, teams = _with_refresh(db, user_id, yahoo, lambda y: fetch_league_teams(y, league_key))
    upsert_teams(db, league_key, teams)
    yahoo, table = _with_refresh(db, user_id, yahoo, lambda y: build_category_table(y, league_key))

    batch = _collect(yahoo, teams, league_key, week, year)
    if batch.token_expired:
        logger.info("Token expired during stat fan-out for %s week %s; refreshing once", league_key, week)
        yahoo = refresh_yahoo_session(db, user_id)
        batch = _collect(yahoo, teams, league_key, week, year)
        if batch.token_expired:
            raise HTTPException(status_code=401, detail="Authentication error with Yahoo. Please login again.")

    if batch.all_failed:
        raise HTTPException(
            status_code=502,
            detail=f"Could not retrieve stats for any team in league {league_key}, week {week}.",
        )

    results = compute_ranking(
        batch.teams,
        Comparator(table),
        tiebreak=settings.POWER_INDEX_TIEBREAK,
    )
    if not results:
        logger.warning("Not enough teams to rank league %s week %s (%d teams)", league_key, week, len(batch))
    elif batch.failed:
        logger.warning(
            "Not caching league %s week %s: stats missing for %d team(s)", league_key, week, len(batch.failed)
        )
    else:
        save_power_index(db, league_key, week, year, results, table)

    return WeekRanking(
        league_key, week, year, results, table,
        source="computed",
        failed_teams=[t.team.team_key for t in batch.failed],
        calculated_at=datetime.now(timezone.utc),
    )


def sync_league(db: Session, user_id: str, league_key: str) -> Dict[str, Any]:
    """Recompute the league's current week and stamp last_synced."""
    yahoo = open_yahoo_session(db, user_id)
    _, meta = _with_refresh(db, user_id, yahoo, lambda y: fetch_league_meta(y, league_key))

    week = meta.get("current_week") or 1
    season = meta.get("season")
    year = int(season) if season and str(season).isdigit() else datetime.now(timezone.utc).year

    ranking = build_week_power_index(db, user_id, league_key, week, year, refresh=True)
    league = mark_league_synced(db, meta)
    return {
        "message": f"Synced league {league_key}, week {week}",
        "league_key": league_key,
        "week": week,
        "year": year,
        "status": ranking.status,
        "last_synced": league.last_synced.isoformat() if league.last_synced else None,
    }

