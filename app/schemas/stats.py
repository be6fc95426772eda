from pydantic import AliasChoices, BaseModel, Field


class AdmirerCountRequest(BaseModel):
    handle: str = Field(
        ...,
        max_length=100,
        validation_alias=AliasChoices("handle", "username"),
    )
    season_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("season_id", "periodId"),
    )


class AdmirerCountResponse(BaseModel):
    """Only the number is ever disclosed, never who the admirers are"""

    handle: str
    season_id: str
    count: int


class TargetCount(BaseModel):
    handle: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class SeasonStatsResponse(BaseModel):
    season_id: str
    total_crushes: int
    total_matches: int
    top_targets: list[TargetCount]
    daily_counts: list[DailyCount]

    # Admin only: submissions in the trailing activity window
    active_activity_7d: int | None = None


class ActiveSeasonSummary(BaseModel):
    id: str
    name: str


class GlobalStatsResponse(BaseModel):
    total_users: int
    total_crushes: int
    total_matches: int
    active_season: ActiveSeasonSummary | None = None
    season_stats: SeasonStatsResponse | None = None

    # Admin only
    active_activity_7d: int | None = None


class RecomputeResponse(BaseModel):
    success: bool = True
    seasons_recomputed: int
    global_stats: GlobalStatsResponse
