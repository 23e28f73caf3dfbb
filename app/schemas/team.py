from pydantic import BaseModel, ConfigDict

class TeamIdentity(BaseModel):
    """A team as the ranking sees it: Yahoo key plus the display bits the report needs."""
    model_config = ConfigDict(frozen=True)

    team_key: str
    team_id: str | None = None
    name: str
    manager_name: str | None = None
    logo_url: str | None = None
