import pytest

from app.core.exceptions import ValidationError
from app.core.identity import HANDLE_MAX_LENGTH, normalize, sorted_pair, validate_identity


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("@Bob ", "bob"),
        ("bob", "bob"),
        ("BOB", "bob"),
        ("  @alice.smith_ ", "alice.smith_"),
        ("", ""),
        (None, ""),
        ("   ", ""),
    ],
)
def test_normalize(raw, expected):
    assert normalize(raw) == expected


def test_normalize_strips_one_leading_at_only():
    assert normalize("@@bob") == "@bob"
    assert normalize("b@b") == "b@b"


@pytest.mark.parametrize("raw", ["@@bob", "@ bob"])
def test_non_fixed_points_are_rejected(raw):
    assert normalize(normalize(raw)) != normalize(raw)

    with pytest.raises(ValidationError):
        validate_identity(raw)


@pytest.mark.parametrize("raw", ["@Bob ", "carol", " DAVE.99 ", "@x"])
def test_validated_identities_are_stable(raw):
    identity = validate_identity(raw)
    assert normalize(identity) == identity
    assert validate_identity(identity) == identity


@pytest.mark.parametrize("raw", ["", "  ", "@", None])
def test_validate_rejects_empty(raw):
    with pytest.raises(ValidationError) as exc_info:
        validate_identity(raw, field="target_handle")

    assert exc_info.value.field == "target_handle"
    assert exc_info.value.status_code == 422


@pytest.mark.parametrize("raw", ["bob smith", "@@bob", "bob@mail"])
def test_validate_rejects_unmatchable_handles(raw):
    with pytest.raises(ValidationError):
        validate_identity(raw)


def test_validate_rejects_long_handle():
    assert validate_identity("a" * HANDLE_MAX_LENGTH) == "a" * HANDLE_MAX_LENGTH

    with pytest.raises(ValidationError):
        validate_identity("a" * (HANDLE_MAX_LENGTH + 1))


def test_sorted_pair():
    assert sorted_pair("bob", "alice") == ("alice", "bob")
    assert sorted_pair("alice", "bob") == ("alice", "bob")
