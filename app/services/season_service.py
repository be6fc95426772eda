import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyExistsError, ConflictError, SeasonNotActiveError
from app.models.season import Season, as_utc
from app.models.user import utcnow
from app.schemas.season import SeasonCreate

logger = logging.getLogger(__name__)


async def get_season_by_id(db: AsyncSession, season_id: str) -> Season | None:
    result = await db.execute(select(Season).where(Season.id == season_id))
    return result.scalar_one_or_none()


async def get_active_season(db: AsyncSession) -> Season | None:
    """Return the live season, if any. Most recently started wins."""
    result = await db.execute(
        select(Season).where(Season.active.is_(True)).order_by(Season.start_at.desc())
    )
    for season in result.scalars():
        if season.is_live():
            return season
    return None


async def list_seasons(db: AsyncSession) -> list[Season]:
    result = await db.execute(select(Season).order_by(Season.start_at.desc()))
    return list(result.scalars().all())


async def require_live_season(db: AsyncSession, season_id: str) -> Season:
    """Fetch a season that currently accepts submissions."""
    season = await get_season_by_id(db, season_id)
    if season is None:
        raise SeasonNotActiveError("Season not found", season_id=season_id)
    if not season.is_live():
        raise SeasonNotActiveError(season_id=season_id)
    return season


async def start_season(db: AsyncSession, data: SeasonCreate) -> Season:
    """
    Create a season and make it the active one.

    Any previously active season is deactivated in the same commit.
    Concurrent admin edits are not guarded against.
    """
    if data.id and await get_season_by_id(db, data.id):
        raise AlreadyExistsError("Season id already exists", field="id")

    await db.execute(update(Season).where(Season.active.is_(True)).values(active=False))

    season = Season(
        name=data.name.strip(),
        start_at=data.start_at,
        end_at=data.end_at,
        active=True,
        default_visibility=data.default_visibility.value,
        mutual_reveal_enabled=data.mutual_reveal_enabled,
    )
    if data.id:
        season.id = data.id
    db.add(season)
    await db.commit()
    await db.refresh(season)
    logger.info("Started season %s (%s)", season.id, season.name)
    return season


async def end_season(db: AsyncSession, season: Season) -> Season:
    """Deactivate a season and close its window at the current time."""
    if not season.active:
        raise ConflictError("Season has already ended")

    now = utcnow()
    season.active = False
    if as_utc(season.end_at) > now:
        season.end_at = now
    await db.commit()
    await db.refresh(season)
    logger.info("Ended season %s", season.id)
    return season
