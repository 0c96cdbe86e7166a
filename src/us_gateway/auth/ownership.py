"""Ownership authorization.

A resource is owned by the credentials id recorded on its user row; a card
is owned transitively through its user. Callers must confirm the resource
exists first (missing → 404) and only then call ensure_owner, before any
uniqueness check or write.
"""

from src.us_common.errors import AccessDeniedError

UPDATE_OWN_PROFILE = "update your own profile"
DELETE_OWN_PROFILE = "delete your own profile"
UPDATE_OWN_CARDS = "update your own cards"
DELETE_OWN_CARDS = "delete your own cards"


def is_owner(acting_credentials_id: int, owner_credentials_id: int | None) -> bool:
    return owner_credentials_id is not None and acting_credentials_id == owner_credentials_id


def ensure_owner(
    acting_credentials_id: int,
    owner_credentials_id: int | None,
    action: str,
) -> None:
    """Pass silently for the owner, raise AccessDeniedError naming `action` otherwise."""
    if not is_owner(acting_credentials_id, owner_credentials_id):
        raise AccessDeniedError(action)
