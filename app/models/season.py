import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utcnow
from app.schemas.crush import VisibilityMode


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Applied when a submission does not choose a visibility mode
    default_visibility: Mapped[str] = mapped_column(
        String(32),
        default=VisibilityMode.MUTUAL_ONLY.value,
        nullable=False,
    )
    mutual_reveal_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def is_live(self, now: datetime | None = None) -> bool:
        """Active and inside its [start_at, end_at] window."""
        if not self.active:
            return False
        now = now or utcnow()
        return as_utc(self.start_at) <= now <= as_utc(self.end_at)
