from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_optional_user
from app.core.identity import normalize
from app.database import get_db
from app.schemas.stats import (
    AdmirerCountRequest,
    AdmirerCountResponse,
    GlobalStatsResponse,
    SeasonStatsResponse,
)
from app.schemas.user import UserResponse
from app.services import stats_service

router = APIRouter(prefix="", tags=["stats"])


@router.get("/", response_model=GlobalStatsResponse, response_model_exclude_none=True)
async def get_stats(
    current_user: Annotated[UserResponse | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GlobalStatsResponse:
    """
    Global totals plus the active season's stats.

    Admins also get the 7-day activity volume.
    """
    stats = await stats_service.get_global_stats(db)
    if current_user and current_user.is_admin:
        stats.active_activity_7d = await stats_service.count_recent_activity(db)
    return stats


@router.get("/admirers", response_model=AdmirerCountResponse)
async def get_admirer_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    handle: str = Query(..., min_length=1, max_length=100),
    season_id: str = Query(..., min_length=1, max_length=64),
) -> AdmirerCountResponse:
    """How many people have a crush on this handle. Never says who."""
    count = await stats_service.get_admirer_count(db, handle, season_id)
    return AdmirerCountResponse(handle=normalize(handle), season_id=season_id, count=count)


@router.post("/admirers", response_model=AdmirerCountResponse)
async def check_admirer_count(
    data: AdmirerCountRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdmirerCountResponse:
    """Same as GET /admirers with a JSON body."""
    count = await stats_service.get_admirer_count(db, data.handle, data.season_id)
    return AdmirerCountResponse(
        handle=normalize(data.handle),
        season_id=data.season_id,
        count=count,
    )


@router.get(
    "/seasons/{season_id}",
    response_model=SeasonStatsResponse,
    response_model_exclude_none=True,
)
async def get_season_stats(
    season_id: str,
    current_user: Annotated[UserResponse | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonStatsResponse:
    """Totals, top 10 targets and per-day submissions for a season."""
    stats = await stats_service.get_season_stats(db, season_id)
    if current_user and current_user.is_admin:
        stats.active_activity_7d = await stats_service.count_recent_activity(db)
    return stats
