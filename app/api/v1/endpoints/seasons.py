from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.season import SeasonListResponse, SeasonResponse
from app.services import season_service

router = APIRouter(prefix="", tags=["seasons"])


@router.get("/", response_model=SeasonListResponse)
async def list_seasons(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonListResponse:
    seasons = await season_service.list_seasons(db)
    return SeasonListResponse(
        seasons=[SeasonResponse.model_validate(s) for s in seasons],
        total=len(seasons),
    )


# NOTE: must stay above /{season_id}
@router.get("/active", response_model=SeasonResponse)
async def get_active_season(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonResponse:
    """The season currently accepting crushes."""
    season = await season_service.get_active_season(db)
    if not season:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active season",
        )
    return SeasonResponse.model_validate(season)


@router.get("/{season_id}", response_model=SeasonResponse)
async def get_season(
    season_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SeasonResponse:
    season = await season_service.get_season_by_id(db, season_id)
    if not season:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Season not found",
        )
    return SeasonResponse.model_validate(season)
