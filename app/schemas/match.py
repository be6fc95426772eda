from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MatchResponse(BaseModel):
    """Match details returned by API"""

    id: str
    season_id: str
    user_a_identity: str
    user_b_identity: str
    user_a_display_name: str
    user_b_display_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MatchListResponse(BaseModel):
    matches: list[MatchResponse]
    total: int
