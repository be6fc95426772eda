from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class VisibilityMode(str, Enum):
    ANON_COUNT = "ANON_COUNT"
    MUTUAL_ONLY = "MUTUAL_ONLY"
    REVEAL_AFTER_PERIOD = "REVEAL_AFTER_PERIOD"


class CrushStatus(str, Enum):
    PENDING = "PENDING"
    MATCHED = "MATCHED"


class CrushCreate(BaseModel):
    """
    Submit a crush on someone identified by their handle.

    Older clients send periodId / targetInstagram / targetName; those
    names are accepted here and nowhere else.
    """

    season_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("season_id", "periodId"),
    )
    target_handle: str = Field(
        ...,
        max_length=100,
        validation_alias=AliasChoices("target_handle", "targetInstagram"),
    )
    target_name: str | None = Field(
        None,
        max_length=100,
        validation_alias=AliasChoices("target_name", "targetNameDisplay", "targetName"),
    )
    visibility_mode: VisibilityMode | None = Field(
        None,
        validation_alias=AliasChoices("visibility_mode", "visibilityMode"),
    )


class CrushResponse(BaseModel):
    """Crush details returned to the submitter"""

    id: UUID
    season_id: str
    submitter_identity: str
    submitter_display_name: str
    target_identity: str
    target_display_name: str
    visibility_mode: VisibilityMode
    status: CrushStatus
    is_mutual: bool
    withdrawn: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CrushSubmitResponse(BaseModel):
    success: bool = True
    matched: bool
    # True when the same pair was already on file and nothing was written
    duplicate: bool = False
    match_id: str | None = None
    crush: CrushResponse


class CrushListResponse(BaseModel):
    crushes: list[CrushResponse]
    total: int
