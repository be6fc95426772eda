"""
Mutual-crush reconciliation.

Turns a one-way crush into a match when the mirror submission is already on
file. The idempotency read, the reciprocal read and the compound write
(new crush, reciprocal flip, match insert) run as one transaction while
holding a lock keyed by the season and the unordered pair, so the two halves
of a pair can never both miss each other or create two matches.
"""

import asyncio
import hashlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import SelfCrushError, TransientStorageError
from app.core.identity import sorted_pair, validate_identity
from app.models.crush import Crush
from app.models.match import Match
from app.schemas.crush import CrushStatus, VisibilityMode
from app.services import crush_service, match_service, season_service, stats_service

logger = logging.getLogger(__name__)

# Contention and timeouts on the atomic unit; anything else propagates as is
TRANSIENT_ERRORS = (IntegrityError, OperationalError, TimeoutError)

ANONYMOUS_NAME = "Anonymous"


class Submitter(Protocol):
    id: UUID | None
    handle: str
    display_name: str | None


@dataclass
class SubmissionResult:
    crush: Crush
    matched: bool
    # Same pair already on file; nothing was written
    duplicate: bool = False
    match: Match | None = None
    match_created: bool = False


class PairLocks:
    """In-process locks keyed by season and unordered pair."""

    def __init__(self) -> None:
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock, waiters = self._locks.get(key) or (asyncio.Lock(), 0)
        self._locks[key] = (lock, waiters + 1)
        try:
            async with lock:
                yield
        finally:
            lock, waiters = self._locks[key]
            if waiters <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, waiters - 1)

    def __len__(self) -> int:
        return len(self._locks)


pair_locks = PairLocks()


def advisory_lock_key(pair_key: str) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.blake2b(pair_key.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


async def _lock_pair_in_storage(db: AsyncSession, pair_key: str) -> None:
    # Serializes the pair across worker processes; released on commit/rollback
    if db.get_bind().dialect.name == "postgresql":
        await db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": advisory_lock_key(pair_key)},
        )


def _build_match(
    season_id: str,
    submitter_identity: str,
    submitter_name: str,
    reciprocal: Crush,
) -> Match:
    """Resolve display names: ours from this request, theirs from their crush."""
    names = {
        submitter_identity: submitter_name,
        reciprocal.submitter_identity: reciprocal.submitter_display_name,
    }
    user_a, user_b = sorted_pair(submitter_identity, reciprocal.submitter_identity)
    return Match(
        season_id=season_id,
        user_a_identity=user_a,
        user_b_identity=user_b,
        user_a_display_name=names[user_a],
        user_b_display_name=names[user_b],
    )


async def _reconcile(
    db: AsyncSession,
    submitter: Submitter,
    submitter_identity: str,
    target_identity: str,
    target_name: str,
    season_id: str,
    visibility_mode: VisibilityMode | None,
    pair_key: str,
) -> SubmissionResult:
    season = await season_service.require_live_season(db, season_id)
    await _lock_pair_in_storage(db, pair_key)

    existing = await crush_service.find_active_submission(
        db, season_id, submitter_identity, target_identity
    )
    if existing is not None:
        match = None
        if existing.is_mutual:
            match = await match_service.get_match_by_id(db, pair_key)
        await db.commit()
        return SubmissionResult(
            crush=existing,
            matched=existing.is_mutual,
            duplicate=True,
            match=match,
        )

    reciprocal = await crush_service.find_active_submission(
        db, season_id, target_identity, submitter_identity
    )
    matched = reciprocal is not None
    submitter_name = (submitter.display_name or "").strip() or ANONYMOUS_NAME

    crush = Crush(
        season_id=season_id,
        submitter_identity=submitter_identity,
        submitter_user_id=submitter.id,
        submitter_display_name=submitter_name,
        target_identity=target_identity,
        target_display_name=target_name,
        visibility_mode=VisibilityMode(visibility_mode or season.default_visibility).value,
        status=(CrushStatus.MATCHED if matched else CrushStatus.PENDING).value,
        is_mutual=matched,
    )
    await crush_service.append(db, crush)

    match = None
    created = False
    if matched:
        await crush_service.mark_matched(db, reciprocal)
        match, created = await match_service.get_or_create(
            db,
            pair_key,
            lambda: _build_match(season_id, submitter_identity, submitter_name, reciprocal),
        )

    await db.commit()

    if matched:
        logger.info(
            "Match %s (%s)",
            pair_key,
            "created" if created else "already present",
        )
    return SubmissionResult(
        crush=crush,
        matched=matched,
        match=match,
        match_created=created,
    )


async def submit_crush(
    db: AsyncSession,
    submitter: Submitter,
    target_identity_raw: str,
    season_id: str,
    visibility_mode: VisibilityMode | None = None,
    target_name_raw: str | None = None,
) -> SubmissionResult:
    """
    Record a crush and reconcile it against its mirror submission.

    Resubmitting the same pair returns the stored crush unchanged with
    duplicate=True. Validation, self-crush and season errors are raised
    before anything is written and are never retried. Storage conflicts are
    rolled back and retried with exponential backoff, then surfaced as
    TransientStorageError.
    """
    submitter_identity = validate_identity(submitter.handle, field="submitter")
    target_identity = validate_identity(target_identity_raw, field="target_handle")
    if submitter_identity == target_identity:
        raise SelfCrushError()

    target_name = (target_name_raw or "").strip() or target_identity
    pair_key = match_service.match_id_for(season_id, submitter_identity, target_identity)
    max_attempts = max(settings.RECONCILE_MAX_ATTEMPTS, 1)

    for attempt in range(1, max_attempts + 1):
        try:
            async with pair_locks.hold(pair_key):
                result = await _reconcile(
                    db,
                    submitter,
                    submitter_identity,
                    target_identity,
                    target_name,
                    season_id,
                    visibility_mode,
                    pair_key,
                )
        except TRANSIENT_ERRORS as e:
            await db.rollback()
            if attempt == max_attempts:
                logger.error(
                    "Reconciliation of %s failed after %d attempts: %s",
                    pair_key,
                    attempt,
                    e,
                )
                raise TransientStorageError(attempts=attempt) from e

            delay = settings.RECONCILE_BACKOFF_SECONDS * 2 ** (attempt - 1)
            logger.warning(
                "Transient storage error reconciling %s (attempt %d/%d), retrying in %.2fs: %s",
                pair_key,
                attempt,
                max_attempts,
                delay,
                e,
            )
            await asyncio.sleep(delay)
            continue
        except Exception:
            await db.rollback()
            raise

        if not result.duplicate:
            await stats_service.apply_increments(
                db,
                crush=result.crush,
                match=result.match if result.match_created else None,
            )
        return result

    raise TransientStorageError(attempts=max_attempts)


async def withdraw_crush(db: AsyncSession, crush: Crush) -> Crush:
    """
    Withdraw a pending crush and take it out of the counters.

    Serialized with submissions for the same pair, so a reciprocal crush
    either sees the withdrawal or turns this one mutual first (ConflictError).
    """
    pair_key = match_service.match_id_for(
        crush.season_id, crush.submitter_identity, crush.target_identity
    )
    async with pair_locks.hold(pair_key):
        try:
            await _lock_pair_in_storage(db, pair_key)
            crush = await crush_service.withdraw_submission(db, crush)
        except Exception:
            await db.rollback()
            raise

    await stats_service.apply_increments(db, crush=crush, crush_delta=-1)
    return crush
