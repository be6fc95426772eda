"""
Derived aggregate tables.

Everything here can be rebuilt from crushes and matches by
stats_service.recompute; incremental updates are an optimization only.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utcnow

GLOBAL_STATS_ID = "main"


class GlobalStats(Base):
    __tablename__ = "stats_global"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=GLOBAL_STATS_ID)
    total_users: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_crushes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_matches: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class SeasonStats(Base):
    __tablename__ = "stats_seasons"

    season_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("seasons.id", ondelete="CASCADE"),
        primary_key=True,
    )
    total_crushes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_matches: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class SeasonDailyCount(Base):
    __tablename__ = "stats_season_daily"

    season_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("seasons.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # YYYY-MM-DD in UTC
    day: Mapped[str] = mapped_column(String(10), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class SeasonTargetCount(Base):
    __tablename__ = "stats_season_targets"

    season_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("seasons.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_identity: Mapped[str] = mapped_column(String(64), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
