"""
Yahoo Fantasy Sports adapter: OAuth tokens, the HTTP client, response parsers
and the league/team/stat fetchers built on them.
"""

from app.services.yahoo.client import YahooSession, open_yahoo_session, refresh_yahoo_session, yahoo_get
from app.services.yahoo.leagues import (
    fetch_league_meta,
    fetch_league_stat_categories,
    get_user_leagues,
    league_display_name,
    mark_league_synced,
)
from app.services.yahoo.stats import fetch_team_stats_for_week, team_week_stats_path
from app.services.yahoo.teams import fetch_league_teams, upsert_teams

__all__ = [
    "YahooSession",
    "open_yahoo_session",
    "refresh_yahoo_session",
    "yahoo_get",
    "fetch_league_meta",
    "fetch_league_stat_categories",
    "get_user_leagues",
    "league_display_name",
    "mark_league_synced",
    "fetch_team_stats_for_week",
    "team_week_stats_path",
    "fetch_league_teams",
    "upsert_teams",
]
