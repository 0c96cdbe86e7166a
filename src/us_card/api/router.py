"""us_card REST endpoints.

POST   /cards                   — create a card for the caller's user (201)
GET    /cards/by-user/{user_id} — every card of one user
GET    /cards?ids=1,2           — bulk lookup
GET    /cards/{card_id}         — lookup by id (cached)
PUT    /cards/{card_id}         — owner-only update
DELETE /cards/{card_id}         — owner-only delete (204)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.application.schemas import CardInfoRequest, CardInfoResponse
from src.us_card.application.service import CardApplicationService
from src.us_common.database import get_db_session
from src.us_common.query import id_list
from src.us_gateway.auth.dependencies import CurrentCredentialsId

router = APIRouter(prefix="/cards", tags=["cards"])

_service = CardApplicationService()

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CardInfoResponse)
async def create_card(
    body: CardInfoRequest,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> CardInfoResponse:
    return await _service.create(db, body, credentials_id)


@router.get("/by-user/{user_id}", response_model=list[CardInfoResponse])
async def get_cards_by_user(
    user_id: int,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> list[CardInfoResponse]:
    return await _service.get_by_user_id(db, user_id)


@router.get("", response_model=list[CardInfoResponse])
async def get_cards_by_ids(
    credentials_id: CurrentCredentialsId,
    db: DbSession,
    ids: Annotated[list[int], Depends(id_list)],
) -> list[CardInfoResponse]:
    return await _service.get_all_by_ids(db, ids)


@router.get("/{card_id}", response_model=CardInfoResponse)
async def get_card(
    card_id: int,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> CardInfoResponse:
    return await _service.get_by_id(db, card_id)


@router.put("/{card_id}", response_model=CardInfoResponse)
async def update_card(
    card_id: int,
    body: CardInfoRequest,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> CardInfoResponse:
    return await _service.update(db, card_id, body, credentials_id)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: int,
    credentials_id: CurrentCredentialsId,
    db: DbSession,
) -> Response:
    await _service.delete(db, card_id, credentials_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
