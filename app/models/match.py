from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utcnow


class Match(Base):
    """
    A realized mutual pair within one season.

    The primary key is derived from the season and the sorted pair, so a
    second insert for the same pair collides instead of duplicating.
    """

    __tablename__ = "matches"

    # "{season_id}_{user_a_identity}_{user_b_identity}", "_" and "~" escaped with "~"
    id: Mapped[str] = mapped_column(String(400), primary_key=True)

    season_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("seasons.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Two identities in the match (user_a_identity < user_b_identity)
    user_a_identity: Mapped[str] = mapped_column(String(64), nullable=False)
    user_b_identity: Mapped[str] = mapped_column(String(64), nullable=False)
    user_a_display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_b_display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("user_a_identity < user_b_identity", name="user_order_check"),
        UniqueConstraint(
            "season_id", "user_a_identity", "user_b_identity", name="uq_matches_season_pair"
        ),
        Index("ix_matches_season_user_a", "season_id", "user_a_identity"),
        Index("ix_matches_season_user_b", "season_id", "user_b_identity"),
    )
