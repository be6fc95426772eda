from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.database import get_db
from app.schemas.match import MatchListResponse, MatchResponse
from app.schemas.user import UserResponse
from app.services import match_service

router = APIRouter(prefix="", tags=["matches"])


@router.get("/", response_model=MatchListResponse)
async def get_my_matches(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    season_id: str | None = Query(None, min_length=1, max_length=64),
) -> MatchListResponse:
    """Matches you are part of, optionally limited to one season."""
    matches = await match_service.find_by_participant(db, season_id, current_user.handle)
    return MatchListResponse(
        matches=[MatchResponse.model_validate(m) for m in matches],
        total=len(matches),
    )
