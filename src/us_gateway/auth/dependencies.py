"""FastAPI dependency: get_current_credentials_id.

Usage in any protected router:
    from src.us_gateway.auth.dependencies import CurrentCredentialsId

    @router.put("/{user_id}")
    async def update(user_id: int, credentials_id: CurrentCredentialsId):
        ...

The credentials id is passed explicitly into every service call; there is
no ambient "current user" state.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.us_common.errors import UnauthorizedError
from src.us_gateway.auth.jwt_handler import credentials_id_from_token

# auto_error=False so a missing header reaches our handler as a 401 ApiError
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_credentials_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int:
    """Extract and validate the Bearer token, return the caller's credentials id.

    Raises UnauthorizedError (401) if the token is missing, invalid, expired,
    or carries no usable subject.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return credentials_id_from_token(credentials.credentials)


CurrentCredentialsId = Annotated[int, Depends(get_current_credentials_id)]
