from typing import Optional
from pydantic import BaseModel

class League(BaseModel):
    league_key: str
    name: str
    season: str
    game_code: str
    scoring_type: Optional[str] = None
    current_week: Optional[int] = None
