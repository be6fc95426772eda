from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.crush import VisibilityMode


class SeasonCreate(BaseModel):
    """Start a new season (admin only)"""

    id: str | None = Field(None, min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=100)
    start_at: datetime
    end_at: datetime
    default_visibility: VisibilityMode = VisibilityMode.MUTUAL_ONLY
    mutual_reveal_enabled: bool = True

    @model_validator(mode="after")
    def check_window(self) -> "SeasonCreate":
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class SeasonResponse(BaseModel):
    id: str
    name: str
    start_at: datetime
    end_at: datetime
    active: bool
    default_visibility: VisibilityMode
    mutual_reveal_enabled: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SeasonListResponse(BaseModel):
    seasons: list[SeasonResponse]
    total: int
