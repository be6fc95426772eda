from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.database import get_db
from app.schemas.crush import (
    CrushCreate,
    CrushListResponse,
    CrushResponse,
    CrushSubmitResponse,
)
from app.schemas.user import UserResponse
from app.services import crush_service, reconciliation_service

router = APIRouter(prefix="", tags=["crushes"])


@router.post("/", response_model=CrushSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_crush(
    data: CrushCreate,
    response: Response,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrushSubmitResponse:
    """
    Submit a crush on a handle for a season.

    - Handles are compared case-insensitively, with or without a leading '@'
    - A crush on yourself is rejected
    - Resubmitting the same handle returns the existing crush (200)
    - If they already have a crush on you, both crushes become a match
    """
    result = await reconciliation_service.submit_crush(
        db,
        current_user,
        data.target_handle,
        data.season_id,
        visibility_mode=data.visibility_mode,
        target_name_raw=data.target_name,
    )
    if result.duplicate:
        response.status_code = status.HTTP_200_OK

    return CrushSubmitResponse(
        matched=result.matched,
        duplicate=result.duplicate,
        match_id=result.match.id if result.match else None,
        crush=CrushResponse.model_validate(result.crush),
    )


@router.get("/mine", response_model=CrushListResponse)
async def get_my_crushes(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    season_id: str | None = Query(None, min_length=1, max_length=64),
) -> CrushListResponse:
    """Crushes you submitted, optionally limited to one season."""
    crushes = await crush_service.list_submissions_by_submitter(
        db, current_user.handle, season_id
    )
    return CrushListResponse(
        crushes=[CrushResponse.model_validate(c) for c in crushes],
        total=len(crushes),
    )


@router.delete("/{crush_id}", response_model=CrushResponse)
async def withdraw_crush(
    crush_id: UUID,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrushResponse:
    """Withdraw a pending crush you submitted."""
    crush = await crush_service.get_submission_by_id(db, crush_id)
    if not crush:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Crush not found",
        )

    # Must be the submitter to withdraw
    if crush.submitter_identity != current_user.handle:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not your crush to withdraw",
        )

    crush = await reconciliation_service.withdraw_crush(db, crush)
    return CrushResponse.model_validate(crush)
