"""
Crush ledger: the append-only record of one-directional submissions.

Writes here only flush; committing is the caller's job so that the
reconciliation engine can group several writes into one transaction.
"""

from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, SelfCrushError, ValidationError
from app.models.crush import Crush
from app.models.season import Season
from app.schemas.crush import CrushStatus


async def find_active_submission(
    db: AsyncSession,
    season_id: str,
    submitter_identity: str,
    target_identity: str,
) -> Crush | None:
    """
    Find the non-withdrawn submission for an ordered pair.

    Swap submitter and target to look up the reciprocal entry.
    """
    result = await db.execute(
        select(Crush).where(
            and_(
                Crush.season_id == season_id,
                Crush.submitter_identity == submitter_identity,
                Crush.target_identity == target_identity,
                Crush.withdrawn.is_(False),
            )
        )
    )
    return result.scalar_one_or_none()


async def append(db: AsyncSession, submission: Crush) -> Crush:
    """Add a new submission to the ledger."""
    if submission.submitter_identity == submission.target_identity:
        raise SelfCrushError()

    season = await db.get(Season, submission.season_id)
    if season is None:
        raise ValidationError("Unknown season", field="season_id")

    db.add(submission)
    await db.flush()
    return submission


async def mark_matched(db: AsyncSession, crush: Crush) -> Crush:
    """Flip a submission to MATCHED. Never reverts."""
    crush.status = CrushStatus.MATCHED.value
    crush.is_mutual = True
    await db.flush()
    return crush


async def get_submission_by_id(db: AsyncSession, crush_id: UUID) -> Crush | None:
    result = await db.execute(select(Crush).where(Crush.id == crush_id))
    return result.scalar_one_or_none()


async def list_submissions_by_submitter(
    db: AsyncSession,
    submitter_identity: str,
    season_id: str | None = None,
) -> list[Crush]:
    """Non-withdrawn submissions made by one identity, newest first."""
    query = select(Crush).where(
        and_(
            Crush.submitter_identity == submitter_identity,
            Crush.withdrawn.is_(False),
        )
    )
    if season_id:
        query = query.where(Crush.season_id == season_id)

    result = await db.execute(query.order_by(Crush.created_at.desc()))
    return list(result.scalars().all())


async def count_admirers(db: AsyncSession, target_identity: str, season_id: str) -> int:
    result = await db.execute(
        select(func.count(Crush.id)).where(
            and_(
                Crush.season_id == season_id,
                Crush.target_identity == target_identity,
                Crush.withdrawn.is_(False),
            )
        )
    )
    return result.scalar() or 0


async def withdraw_submission(db: AsyncSession, crush: Crush) -> Crush:
    """
    Soft-delete a pending submission.

    Matched submissions stay put so both sides of a match remain mutual.
    The flags are checked by the UPDATE itself, so a crush that became
    mutual after it was loaded is never withdrawn.
    """
    crush_id = crush.id
    result = await db.execute(
        update(Crush)
        .where(
            Crush.id == crush_id,
            Crush.withdrawn.is_(False),
            Crush.is_mutual.is_(False),
        )
        .values(withdrawn=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        current = await db.get(Crush, crush_id, populate_existing=True)
        if current is None:
            raise NotFoundError("Crush not found", resource="crush")
        if current.withdrawn:
            raise ConflictError("Crush is already withdrawn")
        raise ConflictError("A matched crush cannot be withdrawn")

    await db.commit()
    await db.refresh(crush)
    return crush
