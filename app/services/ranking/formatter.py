# app/services/ranking/formatter.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from app.schemas.ranking import OpponentScoreOut, PowerIndexItem, PowerIndexResult
from app.services.ranking.categories import CategoryTable
from app.services.ranking.comparator import coerce_number

MISSING_CELL = "-"
FIXED_HEADERS = ["Rank", "Team Name", "Manager", "Power Index"]


def _stat_sort_key(stat_id: str):
    # Yahoo ids are numeric strings; anything else sorts after them
    return (0, int(stat_id), "") if stat_id.isdigit() else (1, 0, stat_id)


def stat_columns(results: Sequence[PowerIndexResult]) -> List[str]:
    """Union of stat ids across all ranked teams, numerically ordered."""
    ids = {str(sid) for r in results for sid in r.period_stats.stats.keys()}
    return sorted(ids, key=_stat_sort_key)


def to_api_items(results: Sequence[PowerIndexResult]) -> List[PowerIndexItem]:
    return [
        PowerIndexItem(
            rank=pos,
            team=r.team,
            index=r.power_index,
            breakdown=[
                OpponentScoreOut(team_key=o.opponent.team_key, name=o.opponent.name, score=o.score)
                for o in r.breakdown
            ],
            stats=dict(r.period_stats.stats),
        )
        for pos, r in enumerate(results, start=1)
    ]


def to_api_rows(results: Sequence[PowerIndexResult]) -> List[Dict[str, Any]]:
    """JSON-ready [{rank, team, index, breakdown, stats}]."""
    return [item.model_dump(mode="json") for item in to_api_items(results)]


def to_report_table(results: Sequence[PowerIndexResult], table: CategoryTable) -> Dict[str, Any]:
    """
    Row-oriented view for the spreadsheet export.

    Returns {"stat_ids", "headers", "rows"}; each row is
    [rank, team name, manager, index, <one cell per stat id>]. Numeric stat
    cells are floats, anything Yahoo sent as text is passed through, and a
    stat the team has no reading for is "-".
    """
    stat_ids = stat_columns(results)
    headers = FIXED_HEADERS + [table.name_of(sid) for sid in stat_ids]

    rows: List[List[Any]] = []
    for pos, r in enumerate(results, start=1):
        row: List[Any] = [
            pos,
            r.team.name or "N/A",
            r.team.manager_name or "N/A",
            float(r.power_index),
        ]
        stats = r.period_stats.stats
        for sid in stat_ids:
            if sid not in stats or stats[sid] is None:
                row.append(MISSING_CELL)
                continue
            num = coerce_number(stats[sid])
            row.append(num if num is not None else str(stats[sid]))
        rows.append(row)

    return {"stat_ids": stat_ids, "headers": headers, "rows": rows}
