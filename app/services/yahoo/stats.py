from __future__ import annotations

from typing import Any, Dict

from app.services.yahoo.client import YahooSession
from app.services.yahoo.parsers import parse_team_stats


def team_week_stats_path(team_key: str, week: int) -> str:
    return f"/team/{team_key}/stats;type=week;week={int(week)}"


def fetch_team_stats_for_week(yahoo: YahooSession, team_key: str, week: int) -> Dict[str, Any]:
    """{stat_id: value} for one team's scoring week. Raises HTTPException on upstream failure."""
    return parse_team_stats(yahoo.get(team_week_stats_path(team_key, week)))
