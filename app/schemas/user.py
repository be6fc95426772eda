from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class UserCreate(BaseModel):
    handle: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("handle", "instagramUsername"),
    )
    password: str = Field(..., min_length=8, max_length=72)
    display_name: str | None = Field(None, max_length=100)


class UserResponse(BaseModel):
    id: UUID
    handle: str
    display_name: str | None
    is_admin: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    sub: str
    handle: str = ""
    exp: int
