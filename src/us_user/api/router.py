"""us_user REST endpoints.

POST   /users                 — create the caller's user (201)
GET    /users/by-email?email= — lookup by email (cached)
GET    /users/all             — every user
GET    /users/me              — the user owned by the caller
GET    /users?ids=1,2         — bulk lookup
GET    /users/{user_id}       — lookup by id (cached)
PUT    /users/{user_id}       — owner-only update
DELETE /users/{user_id}       — owner-only delete, cascades to cards (204)

Fixed paths are declared before /{user_id} so they are not captured by it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.database import get_db_session
from src.us_common.query import id_list
from src.us_gateway.auth.dependencies import CurrentCredentialsId
from src.us_user.application.schemas import UserRequest, UserResponse
from src.us_user.application.service import UserApplicationService

router = APIRouter(prefix="/users", tags=["users"])

_service = UserApplicationService()

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def create_user(
    body: UserRequest,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> UserResponse:
    return await _service.create(db, body, credentials_id)


@router.get("/by-email", response_model=UserResponse)
async def get_user_by_email(
    credentials_id: CurrentCredentialsId,
    db: DbSession,
    email: str = Query(..., min_length=1),
) -> UserResponse:
    return await _service.get_by_email(db, email)


@router.get("/all", response_model=list[UserResponse])
async def get_all_users(
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> list[UserResponse]:
    return await _service.get_all(db)


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> UserResponse:
    return await _service.get_by_credentials_id(db, credentials_id)


@router.get("", response_model=list[UserResponse])
async def get_users_by_ids(
    credentials_id: CurrentCredentialsId,
    db: DbSession,
    ids: Annotated[list[int], Depends(id_list)],
) -> list[UserResponse]:
    return await _service.get_all_by_ids(db, ids)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> UserResponse:
    return await _service.get_by_id(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserRequest,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> UserResponse:
    return await _service.update(db, user_id, body, credentials_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> Response:
    await _service.delete(db, user_id, credentials_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
