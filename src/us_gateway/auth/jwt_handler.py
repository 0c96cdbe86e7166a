"""JWT bearer token verification.

Tokens are issued by the external auth service and signed with the shared
JWT_SECRET (HS256). This service only verifies them: signature, expiry, and
the presence of a `sub` claim holding the caller's credentials id.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.us_common.errors import UnauthorizedError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str) -> dict[str, object]:
    """Decode and validate a JWT token.

    Raises:
        UnauthorizedError: bad signature, expired, or malformed token.
    """
    try:
        payload: dict[str, object] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise UnauthorizedError() from None
    return payload


def credentials_id_from_token(token: str) -> int:
    """Return the `sub` claim as the integer credentials id."""
    subject = decode_token(token).get("sub")
    if subject is None or subject == "":
        raise UnauthorizedError("User is not authenticated")
    try:
        return int(str(subject))
    except ValueError:
        raise UnauthorizedError("Invalid user ID in token") from None
