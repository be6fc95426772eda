from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.core.exceptions import AdminRequiredError
from app.database import get_db
from app.schemas.season import SeasonCreate, SeasonResponse
from app.schemas.stats import RecomputeResponse
from app.schemas.user import UserResponse
from app.services import season_service, stats_service, user_service

router = APIRouter(prefix="", tags=["admin"])


async def get_current_admin_user(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    """Dependency that checks if current user is admin."""
    # Re-read the flag; the token may predate a demotion
    user = await user_service.get_user_by_id(db, current_user.id)
    if not user or not user.is_admin:
        raise AdminRequiredError()
    return current_user


# ==================== Season Management ====================


@router.post("/seasons", response_model=SeasonResponse, status_code=status.HTTP_201_CREATED)
async def start_season(
    data: SeasonCreate,
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonResponse:
    """Start a season; the previously active one is deactivated."""
    season = await season_service.start_season(db, data)
    return SeasonResponse.model_validate(season)


@router.post("/seasons/{season_id}/end", response_model=SeasonResponse)
async def end_season(
    season_id: str,
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonResponse:
    season = await season_service.get_season_by_id(db, season_id)
    if not season:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Season not found",
        )

    season = await season_service.end_season(db, season)
    return SeasonResponse.model_validate(season)


# ==================== Stats Maintenance ====================


@router.post("/stats/recompute", response_model=RecomputeResponse)
async def recompute_stats(
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    season_id: str | None = Query(None, min_length=1, max_length=64),
) -> RecomputeResponse:
    """Rebuild every derived counter from crushes and matches."""
    seasons_recomputed = await stats_service.recompute(db, season_id)
    return RecomputeResponse(
        seasons_recomputed=seasons_recomputed,
        global_stats=await stats_service.get_global_stats(db),
    )
