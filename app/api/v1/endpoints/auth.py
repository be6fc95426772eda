import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidCredentialsError
from app.core.security import create_access_token, decode_access_token
from app.database import get_db
from app.schemas.user import Token, UserCreate, UserResponse
from app.services import stats_service, user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login", auto_error=False
)


async def _resolve_user(db: AsyncSession, token: str) -> UserResponse | None:
    payload = decode_access_token(token)
    if payload is None:
        return None

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        return None

    user = await user_service.get_user_by_id(db, user_id)
    if user is None:
        return None
    return UserResponse.model_validate(user)


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    user = await _resolve_user(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    token: Annotated[str | None, Depends(optional_oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse | None:
    """Current user for endpoints that are public but richer when signed in."""
    if not token:
        return None
    user = await _resolve_user(db, token)
    if user is None:
        logger.info("Ignoring invalid bearer token on public endpoint")
    return user


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    user = await user_service.create_user(db, user_data)
    await stats_service.apply_increments(db, user=True)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=Token)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    user = await user_service.authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise InvalidCredentialsError()

    return Token(access_token=create_access_token(str(user.id), user.handle))


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> UserResponse:
    return current_user
