from collections.abc import Callable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError
from app.core.identity import sorted_pair
from app.models.match import Match

MATCH_ID_SEPARATOR = "_"
MATCH_ID_ESCAPE = "~"


def _escape_id_part(value: str) -> str:
    # "~" and "_" inside a part are prefixed with "~"; a bare "_" always separates
    return value.replace(MATCH_ID_ESCAPE, MATCH_ID_ESCAPE * 2).replace(
        MATCH_ID_SEPARATOR, MATCH_ID_ESCAPE + MATCH_ID_SEPARATOR
    )


def match_id_for(season_id: str, identity_a: str, identity_b: str) -> str:
    """
    Deterministic id: season plus the alphabetically sorted pair.

    Parts are escaped so the id reads back one way only: {a_b, c} gives
    "s1_a~_b_c" and {a, b_c} gives "s1_a_b~_c". Plain handles keep the
    readable "s1_alice_bob" form.
    """
    first, second = sorted_pair(identity_a, identity_b)
    return MATCH_ID_SEPARATOR.join(
        _escape_id_part(part) for part in (season_id, first, second)
    )


async def get_match_by_id(db: AsyncSession, match_id: str) -> Match | None:
    return await db.get(Match, match_id)


async def get_or_create(
    db: AsyncSession,
    match_id: str,
    builder: Callable[[], Match],
) -> tuple[Match, bool]:
    """
    Create the match if no record with this id exists yet.

    Runs inside the caller's transaction. An existing record is returned
    untouched, provided it belongs to the same season and pair. Returns
    (match, created).
    """
    match = builder()
    existing = await db.get(Match, match_id)
    if existing is not None:
        if (existing.season_id, existing.user_a_identity, existing.user_b_identity) != (
            match.season_id,
            match.user_a_identity,
            match.user_b_identity,
        ):
            raise ConflictError("Match id is taken by a different pair")
        return existing, False

    match.id = match_id
    db.add(match)
    await db.flush()
    return match, True


async def find_by_participant(
    db: AsyncSession,
    season_id: str | None,
    identity: str,
) -> list[Match]:
    """All matches an identity is part of, newest first."""
    query = select(Match).where(
        or_(Match.user_a_identity == identity, Match.user_b_identity == identity)
    )
    if season_id:
        query = query.where(Match.season_id == season_id)

    result = await db.execute(query.order_by(Match.created_at.desc()))
    return list(result.scalars().all())


async def count_matches(db: AsyncSession, season_id: str | None = None) -> int:
    query = select(func.count(Match.id))
    if season_id:
        query = query.where(Match.season_id == season_id)
    result = await db.execute(query)
    return result.scalar() or 0
