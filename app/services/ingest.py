# app/services/ingest.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi import HTTPException
from requests import RequestException

from app.schemas.stats import TeamPeriodStats
from app.schemas.team import TeamIdentity

logger = logging.getLogger(__name__)

# (team_key, week) -> {stat_id: raw value}
StatsFetcher = Callable[[str, int], Dict[str, Any]]


class StatsBatch:
    """Fan-in of one league week: a TeamPeriodStats per team, in league order."""

    def __init__(self, teams: List[TeamPeriodStats]):
        self.teams = teams

    def __iter__(self):
        return iter(self.teams)

    def __len__(self) -> int:
        return len(self.teams)

    @property
    def failed(self) -> List[TeamPeriodStats]:
        return [t for t in self.teams if t.error]

    @property
    def token_expired(self) -> bool:
        return any(t.token_expired for t in self.teams)

    @property
    def all_failed(self) -> bool:
        return bool(self.teams) and all(t.error for t in self.teams)


def _fetch_one(
    fetch: StatsFetcher,
    team: TeamIdentity,
    league_key: str,
    week: int,
    year: Optional[int],
) -> TeamPeriodStats:
    base = {"team": team, "league_key": league_key, "week": week, "year": year}
    if not team.team_key:
        return TeamPeriodStats(**base, error=True, error_message="Missing team_key")
    try:
        stats = fetch(team.team_key, week)
    except HTTPException as he:
        logger.warning("Stats fetch failed for %s week %s: %s", team.team_key, week, he.detail)
        return TeamPeriodStats(
            **base,
            error=True,
            error_message=str(he.detail),
            token_expired=he.status_code == 401,
        )
    except (RequestException, ValueError) as e:
        logger.warning("Stats fetch failed for %s week %s: %s", team.team_key, week, e)
        return TeamPeriodStats(**base, error=True, error_message=str(e))
    return TeamPeriodStats(**base, stats=dict(stats or {}))


def collect_team_stats(
    teams: Sequence[TeamIdentity],
    league_key: str,
    week: int,
    fetch: StatsFetcher,
    *,
    year: Optional[int] = None,
    max_workers: int = 8,
) -> StatsBatch:
    """
    Fetch every team's week stats concurrently, one upstream call per team.

    A failing team never aborts the batch: it comes back with error=True and
    an empty stat mapping (token_expired=True when Yahoo answered 401).
    Output order matches `teams`.
    """
    if not teams:
        return StatsBatch([])

    workers = max(1, min(max_workers, len(teams)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="team-stats") as executor:
        futures = [executor.submit(_fetch_one, fetch, t, league_key, week, year) for t in teams]
        results = [f.result() for f in futures]

    batch = StatsBatch(results)
    if batch.failed:
        logger.info(
            "League %s week %s: %d/%d team stat fetches failed",
            league_key, week, len(batch.failed), len(batch),
        )
    return batch
