# app/services/weekly_stats.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.db.models import Team, WeeklyStats
from app.schemas.ranking import OpponentScore, PowerIndexResult
from app.schemas.stats import TeamPeriodStats
from app.schemas.team import TeamIdentity
from app.services.ranking.categories import CategoryTable, StatCategory
from app.services.ranking.formatter import stat_columns

logger = logging.getLogger(__name__)


def _period_rows(db: Session, league_key: str, week: int, year: int) -> List[WeeklyStats]:
    return (
        db.query(WeeklyStats)
        .filter(
            WeeklyStats.league_key == league_key,
            WeeklyStats.week == week,
            WeeklyStats.year == year,
        )
        .order_by(WeeklyStats.position.asc())
        .all()
    )


def save_power_index(
    db: Session,
    league_key: str,
    week: int,
    year: int,
    results: Sequence[PowerIndexResult],
    table: Optional[CategoryTable] = None,
) -> int:
    """
    Upsert one row per ranked team keyed by (team_key, league_key, week, year).
    Rows of the same period for teams absent from `results` are dropped so the
    cache mirrors the latest computation. With `table`, the name and polarity
    of every stat in the period is stored too. Returns rows written.
    """
    categories = None
    if table is not None:
        categories = json.dumps([
            {"stat_id": sid, "name": table.name_of(sid), "polarity": table.polarity_of(sid).value}
            for sid in stat_columns(results)
        ])
    existing: Dict[str, WeeklyStats] = {r.team_key: r for r in _period_rows(db, league_key, week, year)}
    now = datetime.now(timezone.utc)

    for pos, res in enumerate(results, start=1):
        row = existing.pop(res.team.team_key, None)
        if row is None:
            row = WeeklyStats(team_key=res.team.team_key, league_key=league_key, week=week, year=year)
            db.add(row)
        row.position = pos
        row.power_index = float(res.power_index)
        row.stats = json.dumps(res.period_stats.stats)
        row.breakdown = json.dumps(
            [{"opponent": o.opponent.model_dump(), "score": o.score} for o in res.breakdown]
        )
        row.categories = categories
        row.calculated_at = now

    for stale in existing.values():
        db.delete(stale)

    db.commit()
    logger.info("Stored power index for league %s week %s/%s (%d teams)", league_key, week, year, len(results))
    return len(results)


def load_power_index(
    db: Session, league_key: str, week: int, year: int
) -> Tuple[List[PowerIndexResult], Optional[datetime]]:
    """Cached results in stored rank order, plus when they were computed. Empty list when none."""
    rows = _period_rows(db, league_key, week, year)
    if not rows:
        return [], None

    teams = {
        t.team_key: t
        for t in db.query(Team).filter(Team.team_key.in_([r.team_key for r in rows])).all()
    }

    results: List[PowerIndexResult] = []
    for row in rows:
        t = teams.get(row.team_key)
        ident = TeamIdentity(
            team_key=row.team_key,
            team_id=t.team_id if t else None,
            name=t.name if t else row.team_key,
            manager_name=t.manager_name if t else None,
            logo_url=t.logo_url if t else None,
        )
        breakdown = [
            OpponentScore(opponent=TeamIdentity(**b["opponent"]), score=int(b["score"]))
            for b in json.loads(row.breakdown or "[]")
        ]
        results.append(
            PowerIndexResult(
                team=ident,
                period_stats=TeamPeriodStats(
                    team=ident,
                    league_key=league_key,
                    week=week,
                    year=year,
                    stats=json.loads(row.stats or "{}"),
                ),
                power_index=int(row.power_index),
                breakdown=breakdown,
            )
        )
    calculated_at = max((r.calculated_at for r in rows if r.calculated_at is not None), default=None)
    return results, calculated_at


def load_period_categories(db: Session, league_key: str, week: int, year: int) -> List[StatCategory]:
    """Categories stored with a cached period; empty when none were recorded."""
    row = (
        db.query(WeeklyStats.categories)
        .filter(
            WeeklyStats.league_key == league_key,
            WeeklyStats.week == week,
            WeeklyStats.year == year,
            WeeklyStats.categories.is_not(None),
        )
        .first()
    )
    if row is None:
        return []
    return [StatCategory(**c) for c in json.loads(row[0])]
