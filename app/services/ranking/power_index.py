# app/services/ranking/power_index.py
from __future__ import annotations

from typing import List, Literal, Sequence

from app.schemas.ranking import OpponentScore, PowerIndexResult
from app.schemas.stats import TeamPeriodStats
from app.services.ranking.comparator import Comparator, coerce_number

TieBreak = Literal["input", "name"]


def head_to_head(comparator: Comparator, team: TeamPeriodStats, opponent: TeamPeriodStats) -> int:
    """
    Sum of category comparisons for `team` against one opponent.

    Only the categories present in `team`'s own mapping are scored; a category
    the opponent lacks compares as 0.
    """
    score = 0
    opp_stats = opponent.stats
    for stat_id, value in team.stats.items():
        if not comparator.is_scored(stat_id):
            continue
        score += comparator.compare(stat_id, value, opp_stats.get(stat_id))
    return score


def compute_ranking(
    teams: Sequence[TeamPeriodStats],
    comparator: Comparator,
    *,
    tiebreak: TieBreak = "input",
) -> List[PowerIndexResult]:
    """
    All-pairs weekly power index.

    Every team plays every other team across its categories; the index is the
    sum of the N-1 head-to-head subscores. Results are sorted by index
    descending. Equal indices keep input order, or sort by team name when
    tiebreak="name".

    Fewer than two teams gives an empty list: there is nothing to rank.
    """
    if len(teams) < 2:
        return []

    results: List[PowerIndexResult] = []
    for i, team in enumerate(teams):
        breakdown: List[OpponentScore] = []
        for j, opponent in enumerate(teams):
            if i == j:
                continue
            breakdown.append(
                OpponentScore(opponent=opponent.team, score=head_to_head(comparator, team, opponent))
            )
        results.append(
            PowerIndexResult(
                team=team.team,
                period_stats=team,
                power_index=sum(o.score for o in breakdown),
                breakdown=breakdown,
            )
        )

    if tiebreak == "name":
        # stable: sort by the secondary key first, then by index
        results.sort(key=lambda r: (r.team.name or "").casefold())
    results.sort(key=lambda r: r.power_index, reverse=True)
    return results


def is_degenerate(results: Sequence[PowerIndexResult], comparator: Comparator) -> bool:
    """
    True when there is no usable ranking: fewer than two teams, or no scored
    category with a numeric value on both sides of any matchup. A league where
    every decided comparison tied is a real ranking, not a degenerate one.
    """
    if len(results) < 2:
        return True
    stats = [r.period_stats.stats for r in results]
    for i, own in enumerate(stats):
        for stat_id, value in own.items():
            if not comparator.is_scored(stat_id) or coerce_number(value) is None:
                continue
            if any(coerce_number(other.get(stat_id)) is not None for j, other in enumerate(stats) if j != i):
                return False
    return True
