"""
Aggregation reporter.

Counters in the stats_* tables are derived data. They are bumped after each
ledger or match write (at-least-once, drift tolerated) and can be rebuilt at
any time from the ledger and match store with recompute().
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundError
from app.core.identity import validate_identity
from app.models.crush import Crush
from app.models.match import Match
from app.models.season import Season, as_utc
from app.models.stats import (
    GLOBAL_STATS_ID,
    GlobalStats,
    SeasonDailyCount,
    SeasonStats,
    SeasonTargetCount,
)
from app.models.user import User, utcnow
from app.schemas.stats import (
    ActiveSeasonSummary,
    DailyCount,
    GlobalStatsResponse,
    SeasonStatsResponse,
    TargetCount,
)
from app.services import crush_service, season_service

logger = logging.getLogger(__name__)


def day_key(crush: Crush) -> str:
    return as_utc(crush.created_at).date().isoformat()


async def _increment(
    db: AsyncSession,
    model: type,
    key: dict[str, Any],
    **deltas: int,
) -> None:
    """Atomically add deltas to a counter row, creating it on first use."""
    criteria = [getattr(model, name) == value for name, value in key.items()]
    result = await db.execute(
        update(model)
        .where(*criteria)
        .values({name: getattr(model, name) + delta for name, delta in deltas.items()})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.add(model(**key, **{name: max(delta, 0) for name, delta in deltas.items()}))
        await db.flush()


# ==================== Incremental updates ====================


async def record_user(db: AsyncSession) -> None:
    await _increment(db, GlobalStats, {"id": GLOBAL_STATS_ID}, total_users=1)
    await db.commit()


async def record_crush(db: AsyncSession, crush: Crush, delta: int = 1) -> None:
    """Count a new submission (delta=1) or a withdrawal (delta=-1)."""
    await _increment(db, GlobalStats, {"id": GLOBAL_STATS_ID}, total_crushes=delta)
    await _increment(db, SeasonStats, {"season_id": crush.season_id}, total_crushes=delta)
    await _increment(
        db,
        SeasonDailyCount,
        {"season_id": crush.season_id, "day": day_key(crush)},
        count=delta,
    )
    await _increment(
        db,
        SeasonTargetCount,
        {"season_id": crush.season_id, "target_identity": crush.target_identity},
        count=delta,
    )
    await db.commit()


async def record_match(db: AsyncSession, match: Match) -> None:
    await _increment(db, GlobalStats, {"id": GLOBAL_STATS_ID}, total_matches=1)
    await _increment(db, SeasonStats, {"season_id": match.season_id}, total_matches=1)
    await db.commit()


# ==================== Full recompute ====================


async def _recompute_global(db: AsyncSession) -> GlobalStats:
    total_users = (await db.execute(select(func.count(User.id)))).scalar() or 0
    total_crushes = (
        await db.execute(select(func.count(Crush.id)).where(Crush.withdrawn.is_(False)))
    ).scalar() or 0
    total_matches = (await db.execute(select(func.count(Match.id)))).scalar() or 0

    row = await db.get(GlobalStats, GLOBAL_STATS_ID, populate_existing=True)
    if row is None:
        row = GlobalStats(id=GLOBAL_STATS_ID)
        db.add(row)
    row.total_users = total_users
    row.total_crushes = total_crushes
    row.total_matches = total_matches
    return row


async def _replace_rows(
    db: AsyncSession,
    model: type,
    season_id: str,
    key_column: str,
    counts: dict[str, int],
) -> None:
    """Make the season's rows of `model` equal to `counts`."""
    result = await db.execute(
        select(model)
        .where(model.season_id == season_id)
        .execution_options(populate_existing=True)
    )
    existing = {getattr(row, key_column): row for row in result.scalars()}

    for key, count in counts.items():
        row = existing.pop(key, None)
        if row is None:
            db.add(model(season_id=season_id, **{key_column: key}, count=count))
        else:
            row.count = count

    for stale in existing.values():
        await db.delete(stale)


async def _recompute_season(db: AsyncSession, season_id: str) -> None:
    result = await db.execute(
        select(Crush).where(
            and_(Crush.season_id == season_id, Crush.withdrawn.is_(False))
        )
    )
    crushes = list(result.scalars().all())

    daily = Counter(day_key(crush) for crush in crushes)
    targets = Counter(crush.target_identity for crush in crushes)
    total_matches = (
        await db.execute(select(func.count(Match.id)).where(Match.season_id == season_id))
    ).scalar() or 0

    row = await db.get(SeasonStats, season_id, populate_existing=True)
    if row is None:
        row = SeasonStats(season_id=season_id)
        db.add(row)
    row.total_crushes = len(crushes)
    row.total_matches = total_matches

    await _replace_rows(db, SeasonDailyCount, season_id, "day", dict(daily))
    await _replace_rows(db, SeasonTargetCount, season_id, "target_identity", dict(targets))


async def recompute(db: AsyncSession, season_id: str | None = None) -> int:
    """
    Rebuild derived counters from the ledger and match store.

    Recomputes the global row plus one season, or every season when
    season_id is None. Running it twice without writes in between gives the
    same result. Returns the number of seasons recomputed.
    """
    if season_id is not None:
        if await season_service.get_season_by_id(db, season_id) is None:
            raise NotFoundError("Season not found", resource="season")
        season_ids = [season_id]
    else:
        season_ids = list((await db.execute(select(Season.id))).scalars().all())

    await _recompute_global(db)
    for sid in season_ids:
        await _recompute_season(db, sid)

    await db.commit()
    logger.info("Recomputed stats for %d season(s)", len(season_ids))
    return len(season_ids)


# ==================== Read side ====================


async def get_admirer_count(db: AsyncSession, identity_raw: str, season_id: str) -> int:
    """
    Number of active submissions targeting an identity in a season.

    Only the count leaves this function; submitter identities never do.
    """
    identity = validate_identity(identity_raw, field="handle")
    return await crush_service.count_admirers(db, identity, season_id)


async def count_recent_activity(db: AsyncSession, days: int | None = None) -> int:
    """Submissions created in the trailing window, an activity-volume proxy."""
    days = days if days is not None else settings.ACTIVITY_WINDOW_DAYS
    since = utcnow() - timedelta(days=days)
    result = await db.execute(select(func.count(Crush.id)).where(Crush.created_at >= since))
    return result.scalar() or 0


async def get_season_stats(
    db: AsyncSession,
    season_id: str,
    top_n: int | None = None,
) -> SeasonStatsResponse:
    if await season_service.get_season_by_id(db, season_id) is None:
        raise NotFoundError("Season not found", resource="season")

    top_n = top_n or settings.STATS_TOP_TARGETS
    row = await db.get(SeasonStats, season_id, populate_existing=True)

    targets = await db.execute(
        select(SeasonTargetCount)
        .where(SeasonTargetCount.season_id == season_id, SeasonTargetCount.count > 0)
        .order_by(SeasonTargetCount.count.desc(), SeasonTargetCount.target_identity)
        .limit(top_n)
        .execution_options(populate_existing=True)
    )
    days = await db.execute(
        select(SeasonDailyCount)
        .where(SeasonDailyCount.season_id == season_id, SeasonDailyCount.count > 0)
        .order_by(SeasonDailyCount.day)
        .execution_options(populate_existing=True)
    )

    return SeasonStatsResponse(
        season_id=season_id,
        total_crushes=row.total_crushes if row else 0,
        total_matches=row.total_matches if row else 0,
        top_targets=[
            TargetCount(handle=t.target_identity, count=t.count) for t in targets.scalars()
        ],
        daily_counts=[DailyCount(date=d.day, count=d.count) for d in days.scalars()],
    )


async def get_global_stats(db: AsyncSession) -> GlobalStatsResponse:
    row = await db.get(GlobalStats, GLOBAL_STATS_ID, populate_existing=True)
    response = GlobalStatsResponse(
        total_users=row.total_users if row else 0,
        total_crushes=row.total_crushes if row else 0,
        total_matches=row.total_matches if row else 0,
    )

    active = await season_service.get_active_season(db)
    if active is not None:
        response.active_season = ActiveSeasonSummary(id=active.id, name=active.name)
        response.season_stats = await get_season_stats(db, active.id)
    return response


async def apply_increments(
    db: AsyncSession,
    *,
    user: bool = False,
    crush: Crush | None = None,
    crush_delta: int = 1,
    match: Match | None = None,
) -> bool:
    """
    Best-effort counter update after a primary write has committed.

    Failures are logged and left for recompute(); they never fail the
    request that triggered them.
    """
    try:
        if user:
            await record_user(db)
        if crush is not None:
            await record_crush(db, crush, crush_delta)
        if match is not None:
            await record_match(db, match)
    except SQLAlchemyError:
        await db.rollback()
        logger.warning(
            "Aggregate counters not updated, recompute will correct the drift",
            exc_info=True,
        )
        return False
    return True
