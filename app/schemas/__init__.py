from app.schemas.crush import (
    CrushCreate,
    CrushListResponse,
    CrushResponse,
    CrushStatus,
    CrushSubmitResponse,
    VisibilityMode,
)
from app.schemas.match import MatchListResponse, MatchResponse
from app.schemas.season import SeasonCreate, SeasonListResponse, SeasonResponse
from app.schemas.stats import (
    AdmirerCountRequest,
    AdmirerCountResponse,
    DailyCount,
    GlobalStatsResponse,
    RecomputeResponse,
    SeasonStatsResponse,
    TargetCount,
)
from app.schemas.user import Token, TokenPayload, UserCreate, UserResponse

__all__ = [
    "UserCreate",
    "UserResponse",
    "Token",
    "TokenPayload",
    "VisibilityMode",
    "CrushStatus",
    "CrushCreate",
    "CrushResponse",
    "CrushSubmitResponse",
    "CrushListResponse",
    "MatchResponse",
    "MatchListResponse",
    "SeasonCreate",
    "SeasonResponse",
    "SeasonListResponse",
    "AdmirerCountRequest",
    "AdmirerCountResponse",
    "TargetCount",
    "DailyCount",
    "SeasonStatsResponse",
    "GlobalStatsResponse",
    "RecomputeResponse",
]
