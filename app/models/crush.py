import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utcnow
from app.schemas.crush import CrushStatus, VisibilityMode


class Crush(Base):
    """One-directional crush submission. Key fields are immutable once created."""

    __tablename__ = "crushes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    season_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("seasons.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Who submitted the crush
    submitter_identity: Mapped[str] = mapped_column(String(64), nullable=False)
    submitter_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    submitter_display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Who the crush is on; need not have an account yet
    target_identity: Mapped[str] = mapped_column(String(64), nullable=False)
    target_display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    visibility_mode: Mapped[str] = mapped_column(
        String(32),
        default=VisibilityMode.MUTUAL_ONLY.value,
        nullable=False,
    )

    # Status: PENDING, MATCHED
    status: Mapped[str] = mapped_column(
        String(20),
        default=CrushStatus.PENDING.value,
        nullable=False,
    )
    is_mutual: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    withdrawn: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "submitter_identity <> target_identity", name="no_self_crush_check"
        ),
        # At most one live submission per (season, submitter, target)
        Index(
            "uq_crushes_active_pair",
            "season_id",
            "submitter_identity",
            "target_identity",
            unique=True,
            postgresql_where=text("NOT withdrawn"),
            sqlite_where=text("NOT withdrawn"),
        ),
        Index("ix_crushes_season_target", "season_id", "target_identity", "withdrawn"),
        Index("ix_crushes_created_at", "created_at"),
    )
