import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, SelfCrushError, ValidationError
from app.models.crush import Crush
from app.models.match import Match
from app.services import crush_service, match_service

SEASON_ID = "s1"


def make_crush(submitter: str, target: str, season_id: str = SEASON_ID) -> Crush:
    return Crush(
        season_id=season_id,
        submitter_identity=submitter,
        submitter_display_name=submitter.title(),
        target_identity=target,
        target_display_name=target,
    )


@pytest.mark.asyncio
async def test_append_and_find(db_session: AsyncSession, active_season):
    crush = await crush_service.append(db_session, make_crush("alice", "bob"))
    await db_session.commit()

    found = await crush_service.find_active_submission(db_session, SEASON_ID, "alice", "bob")
    mirror = await crush_service.find_active_submission(db_session, SEASON_ID, "bob", "alice")

    assert found.id == crush.id
    assert found.status == "PENDING"
    assert found.withdrawn is False
    assert mirror is None


@pytest.mark.asyncio
async def test_append_rejects_self_crush(db_session: AsyncSession, active_season):
    with pytest.raises(SelfCrushError):
        await crush_service.append(db_session, make_crush("alice", "alice"))


@pytest.mark.asyncio
async def test_append_rejects_unknown_season(db_session: AsyncSession, active_season):
    with pytest.raises(ValidationError) as exc_info:
        await crush_service.append(db_session, make_crush("alice", "bob", season_id="nope"))

    assert exc_info.value.field == "season_id"


@pytest.mark.asyncio
async def test_storage_allows_one_active_pair(db_session: AsyncSession, active_season):
    await crush_service.append(db_session, make_crush("alice", "bob"))

    with pytest.raises(IntegrityError):
        await crush_service.append(db_session, make_crush("alice", "bob"))
    await db_session.rollback()


@pytest.mark.asyncio
async def test_storage_allows_pair_again_after_withdrawal(db_session: AsyncSession, active_season):
    first = await crush_service.append(db_session, make_crush("alice", "bob"))
    await db_session.commit()
    await crush_service.withdraw_submission(db_session, first)

    second = await crush_service.append(db_session, make_crush("alice", "bob"))
    await db_session.commit()

    assert second.id != first.id


@pytest.mark.asyncio
async def test_count_admirers_and_listing(db_session: AsyncSession, active_season):
    for submitter in ("alice", "bob", "dave"):
        await crush_service.append(db_session, make_crush(submitter, "carol"))
    await crush_service.append(db_session, make_crush("alice", "erin"))
    await db_session.commit()

    assert await crush_service.count_admirers(db_session, "carol", SEASON_ID) == 3
    assert await crush_service.count_admirers(db_session, "carol", "other") == 0

    mine = await crush_service.list_submissions_by_submitter(db_session, "alice")
    assert {c.target_identity for c in mine} == {"carol", "erin"}


@pytest.mark.asyncio
async def test_match_get_or_create_never_overwrites(db_session: AsyncSession, active_season):
    match_id = match_service.match_id_for(SEASON_ID, "bob", "alice")

    def builder(name: str):
        return lambda: Match(
            season_id=SEASON_ID,
            user_a_identity="alice",
            user_b_identity="bob",
            user_a_display_name=name,
            user_b_display_name="Bob",
        )

    first, created = await match_service.get_or_create(db_session, match_id, builder("Alice"))
    again, created_again = await match_service.get_or_create(db_session, match_id, builder("Other"))
    await db_session.commit()

    assert match_id == "s1_alice_bob"
    assert created is True
    assert created_again is False
    assert again is first
    assert again.user_a_display_name == "Alice"
    assert await match_service.count_matches(db_session, SEASON_ID) == 1


def test_match_id_is_unambiguous():
    assert match_service.match_id_for("s1", "bob", "alice") == "s1_alice_bob"
    assert match_service.match_id_for("s1", "a_b", "c") == "s1_a~_b_c"
    assert match_service.match_id_for("s1", "a", "b_c") == "s1_a_b~_c"
    assert match_service.match_id_for("s1", "a~", "b") == "s1_a~~_b"
    assert match_service.match_id_for("s1", "a", "~_b") != match_service.match_id_for(
        "s1", "a~", "b"
    )


@pytest.mark.asyncio
async def test_match_get_or_create_rejects_other_pair(db_session: AsyncSession, active_season):
    def builder(user_a: str, user_b: str):
        return lambda: Match(
            season_id=SEASON_ID,
            user_a_identity=user_a,
            user_b_identity=user_b,
            user_a_display_name=user_a,
            user_b_display_name=user_b,
        )

    await match_service.get_or_create(db_session, "s1_shared", builder("a_b", "c"))

    with pytest.raises(ConflictError):
        await match_service.get_or_create(db_session, "s1_shared", builder("a", "b_c"))


@pytest.mark.asyncio
async def test_storage_allows_one_match_per_pair(db_session: AsyncSession, active_season):
    for match_id in ("s1_alice_bob", "s1_alice_bob_again"):
        db_session.add(
            Match(
                id=match_id,
                season_id=SEASON_ID,
                user_a_identity="alice",
                user_b_identity="bob",
                user_a_display_name="Alice",
                user_b_display_name="Bob",
            )
        )

    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()
