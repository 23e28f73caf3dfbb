from __future__ import annotations
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.schemas.team import TeamIdentity

class TeamPeriodStats(BaseModel):
    """
    One team's raw stat readings for one scoring week.
    `stats` maps Yahoo stat_id -> value (float when Yahoo sent a number, the raw
    string otherwise, e.g. "25/80" for H/AB). A team whose fetch failed carries
    error=True and an empty mapping.
    """
    model_config = ConfigDict(frozen=True)

    team: TeamIdentity
    league_key: str
    week: int
    year: Optional[int] = None
    stats: Dict[str, Any] = Field(default_factory=dict)
    error: bool = False
    error_message: Optional[str] = None
    token_expired: bool = False

class TeamWeeklyStats(BaseModel):
    league_key: str
    team_key: str
    week: int
    stats: Dict[str, Any]
