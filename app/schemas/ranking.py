from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict

from app.schemas.stats import TeamPeriodStats
from app.schemas.team import TeamIdentity

class OpponentScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    opponent: TeamIdentity
    score: int

class PowerIndexResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    team: TeamIdentity
    period_stats: TeamPeriodStats
    power_index: int
    breakdown: List[OpponentScore] = []

# ---- API shapes ----

class OpponentScoreOut(BaseModel):
    team_key: str
    name: str
    score: int

class PowerIndexItem(BaseModel):
    rank: int
    team: TeamIdentity
    index: int
    breakdown: List[OpponentScoreOut] = []
    stats: Dict[str, Any] = {}

class CategoryOut(BaseModel):
    stat_id: str
    name: str
    polarity: str

class PowerIndexResponse(BaseModel):
    league_key: str
    week: int
    year: int
    status: Literal["ok", "insufficient_data"]
    source: Literal["cache", "computed"]
    categories: List[CategoryOut] = []
    failed_teams: List[str] = []
    calculated_at: Optional[str] = None
    items: List[PowerIndexItem]
