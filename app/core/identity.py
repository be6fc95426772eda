"""
Handle normalization.

A participant is identified by the canonical form of their social-media
handle, so "@Bob ", "bob" and "BOB" all refer to the same person.
"""

from app.core.exceptions import ValidationError

HANDLE_MAX_LENGTH = 64


def normalize(raw: str | None) -> str:
    """
    Trim, lowercase and strip a single leading '@'.

    Only identities accepted by validate_identity() are fixed points;
    inputs such as "@@bob" or "@ bob" still change on a second pass and
    are rejected there.
    """
    if not raw:
        return ""
    value = raw.strip().lower()
    if value.startswith("@"):
        value = value[1:]
    return value


def validate_identity(raw: str | None, field: str = "handle") -> str:
    """Normalize a handle and reject values that cannot be matched on."""
    identity = normalize(raw)
    if not identity:
        raise ValidationError("Handle is required", field=field)
    if len(identity) > HANDLE_MAX_LENGTH:
        raise ValidationError(
            f"Handle must be at most {HANDLE_MAX_LENGTH} characters",
            field=field,
        )
    # Accepted identities are fixed points of normalize()
    if "@" in identity or any(ch.isspace() for ch in identity):
        raise ValidationError(
            "Handle must not contain whitespace or '@'",
            field=field,
        )
    return identity


def sorted_pair(identity_a: str, identity_b: str) -> tuple[str, str]:
    if identity_a <= identity_b:
        return identity_a, identity_b
    return identity_b, identity_a
