"""HTTP-level tests: routing, auth, status codes and the error body.

Services are replaced by autospecced mocks; the DB session dependency is stubbed,
so no PostgreSQL/Redis is needed.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

import src.us_card.api.router as card_api
import src.us_user.api.router as user_api
from src.main import app
from src.us_card.application.schemas import CardInfoResponse
from src.us_card.application.service import CardApplicationService
from src.us_common.database import get_db_session
from src.us_common.errors import AccessDeniedError, AlreadyExistsError, NotFoundError
from src.us_user.application.schemas import UserResponse
from src.us_user.application.service import UserApplicationService

USER_BODY = {
    "name": "Max",
    "surname": "Ivanov",
    "birthDate": "1995-10-17",
    "email": "max@gmail.com",
}
CARD_BODY = {"number": "1234567812345678", "holder": "Test Holder", "expirationDate": "12/30"}


def _user_response(**kwargs) -> UserResponse:
    defaults = dict(
        id=1,
        name="Max",
        surname="Ivanov",
        birth_date=date(1995, 10, 17),
        email="max@gmail.com",
        cards=[],
    )
    defaults.update(kwargs)
    return UserResponse(**defaults)


def _card_response(**kwargs) -> CardInfoResponse:
    defaults = dict(
        id=10, user_id=1, number="1234567812345678", holder="Test Holder", expiration_date="12/30"
    )
    defaults.update(kwargs)
    return CardInfoResponse(**defaults)


@pytest.fixture(autouse=True)
def stub_db():
    app.dependency_overrides[get_db_session] = lambda: MagicMock()
    yield
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def user_service(monkeypatch) -> MagicMock:
    svc = MagicMock(spec=UserApplicationService)
    monkeypatch.setattr(user_api, "_service", svc)
    return svc


@pytest.fixture
def card_service(monkeypatch) -> MagicMock:
    svc = MagicMock(spec=CardApplicationService)
    monkeypatch.setattr(card_api, "_service", svc)
    return svc


class TestAuthentication:
    async def test_missing_token_is_401(self, client, user_service) -> None:
        resp = await client.get("/api/users/1")

        assert resp.status_code == 401
        body = resp.json()
        assert body["status"] == 401
        assert body["error"] == "Unauthorized"
        assert body["path"] == "/api/users/1"
        assert "errors" not in body
        user_service.get_by_id.assert_not_called()

    async def test_invalid_token_is_401(self, client, user_service) -> None:
        resp = await client.get("/api/users/1", headers={"Authorization": "Bearer nope"})

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    async def test_non_bearer_scheme_is_401(self, client, card_service) -> None:
        resp = await client.get("/api/cards/1", headers={"Authorization": "Basic Zm9vOmJhcg=="})

        assert resp.status_code == 401

    async def test_health_is_public(self, client) -> None:
        resp = await client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestUserEndpoints:
    async def test_create_returns_201_and_passes_caller(
        self, client, user_service, auth_headers
    ) -> None:
        user_service.create.return_value = _user_response()

        resp = await client.post("/api/users", json=USER_BODY, headers=auth_headers(100))

        assert resp.status_code == 201
        assert resp.json() == {
            "id": 1,
            "name": "Max",
            "surname": "Ivanov",
            "birthDate": "1995-10-17",
            "email": "max@gmail.com",
            "cards": [],
        }
        args = user_service.create.call_args.args
        assert args[1].email == "max@gmail.com"
        assert args[2] == 100

    async def test_validation_failure_lists_each_field(
        self, client, user_service, auth_headers
    ) -> None:
        bad = {"name": " ", "birthDate": "2999-01-01", "email": "nope"}

        resp = await client.post("/api/users", json=bad, headers=auth_headers(100))

        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Validation error"
        assert "name: Name is required" in body["errors"]
        assert "birthDate: Birth date can't be in the future" in body["errors"]
        assert any(e.startswith("email: ") for e in body["errors"])
        user_service.create.assert_not_called()

    async def test_duplicate_email_is_409(self, client, user_service, auth_headers) -> None:
        user_service.create.side_effect = AlreadyExistsError(
            "User with email 'max@gmail.com' already exists"
        )

        resp = await client.post("/api/users", json=USER_BODY, headers=auth_headers(100))

        assert resp.status_code == 409
        assert resp.json()["error"] == "Conflict"

    async def test_get_by_id_not_found_is_404(self, client, user_service, auth_headers) -> None:
        user_service.get_by_id.side_effect = NotFoundError("User id=7 not found")

        resp = await client.get("/api/users/7", headers=auth_headers(100))

        assert resp.status_code == 404
        assert resp.json()["message"] == "User id=7 not found"
        assert resp.json()["path"] == "/api/users/7"

    async def test_by_email_route_not_captured_by_id(
        self, client, user_service, auth_headers
    ) -> None:
        user_service.get_by_email.return_value = _user_response()

        resp = await client.get(
            "/api/users/by-email", params={"email": "max@gmail.com"}, headers=auth_headers(100)
        )

        assert resp.status_code == 200
        assert user_service.get_by_email.call_args.args[1] == "max@gmail.com"
        user_service.get_by_id.assert_not_called()

    async def test_all(self, client, user_service, auth_headers) -> None:
        user_service.get_all.return_value = [_user_response(), _user_response(id=2)]

        resp = await client.get("/api/users/all", headers=auth_headers(100))

        assert resp.status_code == 200
        assert [u["id"] for u in resp.json()] == [1, 2]

    async def test_me_uses_caller_credentials(self, client, user_service, auth_headers) -> None:
        user_service.get_by_credentials_id.return_value = _user_response()

        resp = await client.get("/api/users/me", headers=auth_headers(100))

        assert resp.status_code == 200
        assert user_service.get_by_credentials_id.call_args.args[1] == 100

    async def test_ids_accepts_both_forms(self, client, user_service, auth_headers) -> None:
        user_service.get_all_by_ids.return_value = []

        resp = await client.get("/api/users?ids=1,2&ids=3", headers=auth_headers(100))

        assert resp.status_code == 200
        assert user_service.get_all_by_ids.call_args.args[1] == [1, 2, 3]

    async def test_update_by_stranger_is_403(self, client, user_service, auth_headers) -> None:
        user_service.update.side_effect = AccessDeniedError("update your own profile")

        resp = await client.put("/api/users/1", json=USER_BODY, headers=auth_headers(200))

        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied: you can only update your own profile"
        assert user_service.update.call_args.args[3] == 200

    async def test_delete_returns_204(self, client, user_service, auth_headers) -> None:
        user_service.delete.return_value = None

        resp = await client.delete("/api/users/1", headers=auth_headers(100))

        assert resp.status_code == 204
        assert resp.content == b""
        user_service.delete.assert_called_once()

    async def test_non_integer_id_is_400(self, client, user_service, auth_headers) -> None:
        resp = await client.get("/api/users/abc", headers=auth_headers(100))

        assert resp.status_code == 400
        assert resp.json()["errors"][0].startswith("user_id: ")


class TestCardEndpoints:
    async def test_create_returns_201(self, client, card_service, auth_headers) -> None:
        card_service.create.return_value = _card_response()

        resp = await client.post("/api/cards", json=CARD_BODY, headers=auth_headers(100))

        assert resp.status_code == 201
        assert resp.json()["userId"] == 1
        assert resp.json()["expirationDate"] == "12/30"
        assert card_service.create.call_args.args[2] == 100

    async def test_bad_card_fields(self, client, card_service, auth_headers) -> None:
        resp = await client.post(
            "/api/cards",
            json={"number": "1234", "holder": "", "expirationDate": "13/30"},
            headers=auth_headers(100),
        )

        assert resp.status_code == 400
        errors = resp.json()["errors"]
        assert "number: Card number must be 16 digits" in errors
        assert "expirationDate: Expiration date format MM/yy" in errors
        assert "holder: Holder is required" in errors
        card_service.create.assert_not_called()

    async def test_update_by_stranger_is_403(self, client, card_service, auth_headers) -> None:
        card_service.update.side_effect = AccessDeniedError("update your own cards")

        resp = await client.put(
            "/api/cards/10", json={**CARD_BODY, "holder": "Other"}, headers=auth_headers(200)
        )

        assert resp.status_code == 403
        assert "update your own cards" in resp.json()["message"]

    async def test_update_missing_is_404_not_403(
        self, client, card_service, auth_headers
    ) -> None:
        card_service.update.side_effect = NotFoundError("Card id=99 not found")

        resp = await client.put("/api/cards/99", json=CARD_BODY, headers=auth_headers(100))

        assert resp.status_code == 404

    async def test_by_user(self, client, card_service, auth_headers) -> None:
        card_service.get_by_user_id.return_value = [_card_response(user_id=5)]

        resp = await client.get("/api/cards/by-user/5", headers=auth_headers(100))

        assert resp.status_code == 200
        assert resp.json()[0]["userId"] == 5
        assert card_service.get_by_user_id.call_args.args[1] == 5

    async def test_ids_with_garbage_is_400(self, client, card_service, auth_headers) -> None:
        resp = await client.get("/api/cards?ids=1,x", headers=auth_headers(100))

        assert resp.status_code == 400
        assert resp.json()["errors"] == ["ids: 'x' is not a valid id"]
        card_service.get_all_by_ids.assert_not_called()

    async def test_ids_required(self, client, card_service, auth_headers) -> None:
        resp = await client.get("/api/cards", headers=auth_headers(100))

        assert resp.status_code == 400
        assert resp.json()["errors"][0].startswith("ids: ")

    async def test_delete_returns_204(self, client, card_service, auth_headers) -> None:
        resp = await client.delete("/api/cards/10", headers=auth_headers(100))

        assert resp.status_code == 204
        assert card_service.delete.call_args.args[1:] == (10, 100)


class TestUnexpectedErrors:
    async def test_storage_failure_is_generic_500(self, card_service, auth_headers) -> None:
        card_service.get_by_id.side_effect = RuntimeError("connection refused to 10.0.0.5")
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/api/cards/10", headers=auth_headers(100))

        assert resp.status_code == 500
        body = resp.json()
        assert body["message"] == "Internal server error"
        assert "10.0.0.5" not in resp.text

    async def test_unknown_route_uses_error_body(self, client) -> None:
        resp = await client.get("/api/nothing-here")

        assert resp.status_code == 404
        assert resp.json()["path"] == "/api/nothing-here"

    async def test_request_id_header(self, client) -> None:
        resp = await client.get("/health")

        assert resp.headers["X-Request-ID"].startswith("req_")

    async def test_caller_request_id_is_echoed(self, client) -> None:
        resp = await client.get("/health", headers={"X-Request-ID": "trace-42.a"})

        assert resp.headers["X-Request-ID"] == "trace-42.a"

    async def test_unsafe_request_id_is_replaced(self, client) -> None:
        resp = await client.get("/health", headers={"X-Request-ID": "bad id with spaces"})

        assert resp.headers["X-Request-ID"].startswith("req_")
