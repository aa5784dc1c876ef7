from __future__ import annotations

import json

import httpx
import pytest

from setoran.auth_client import AuthClient
from setoran.config import Settings
from setoran.errors import AuthServiceError, AuthenticationFailedError, ConflictError, InputValidationError, http_error


def _settings(**overrides: object) -> Settings:
    values = {"SUPABASE_URL": "https://project.supabase.co/", "SUPABASE_ANON_KEY": "anon-key"}
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_sign_in_uses_password_grant() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["grant_type"] = request.url.params.get("grant_type")
        seen["apikey"] = request.headers.get("apikey")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "access_token": "token-1",
                "refresh_token": "refresh-1",
                "expires_in": 3600,
                "user": {"id": "user-1", "email": "aisyah@example.com"},
            },
        )

    session = AuthClient(_settings(), client=_client(handler)).sign_in("aisyah@example.com", "rahasia")

    assert session.access_token == "token-1"
    assert session.user_id == "user-1"
    assert seen["path"] == "/auth/v1/token"
    assert seen["grant_type"] == "password"
    assert seen["apikey"] == "anon-key"
    assert seen["body"] == {"email": "aisyah@example.com", "password": "rahasia"}


def test_sign_in_with_bad_credentials() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

    with pytest.raises(AuthenticationFailedError, match="Invalid login credentials"):
        AuthClient(_settings(), client=_client(handler)).sign_in("aisyah@example.com", "salah")


def test_sign_up_accepts_wrapped_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["data"]["role"] == "siswa"
        return httpx.Response(200, json={"access_token": "t", "user": {"id": "user-2", "email": body["email"]}})

    identity = AuthClient(_settings(), client=_client(handler)).sign_up(
        "umar@example.com", "rahasia", {"name": "Umar", "role": "siswa"}
    )
    assert identity.user_id == "user-2"
    assert identity.email == "umar@example.com"


def test_get_user_sends_bearer_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer token-9"
        return httpx.Response(200, json={"id": "user-9", "email": "guru@example.com"})

    identity = AuthClient(_settings(), client=_client(handler)).get_user("token-9")
    assert identity.user_id == "user-9"


def test_server_errors_are_collaborator_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"msg": "maintenance"})

    with pytest.raises(AuthServiceError, match="maintenance"):
        AuthClient(_settings(), client=_client(handler)).get_user("token")


def test_transport_errors_are_collaborator_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthServiceError):
        AuthClient(_settings(), client=_client(handler)).sign_out("token")


def test_invalid_payload_is_collaborator_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(AuthServiceError):
        AuthClient(_settings(), client=_client(handler)).get_user("token")


def test_missing_configuration() -> None:
    client = AuthClient(_settings(SUPABASE_URL=""), client=_client(lambda request: httpx.Response(200)))
    with pytest.raises(AuthServiceError, match="SUPABASE_URL"):
        client.get_user("token")


def test_sign_up_for_existing_email_is_a_conflict() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={"code": 422, "error_code": "user_already_exists", "msg": "User already registered"},
        )

    with pytest.raises(ConflictError, match="User already registered") as excinfo:
        AuthClient(_settings(), client=_client(handler)).sign_up("umar@example.com", "rahasia", {"role": "siswa"})

    error = http_error(excinfo.value)
    assert error.status_code == 409
    assert error.headers is None


def test_sign_up_with_weak_password_is_invalid_input() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={"code": 422, "error_code": "weak_password", "msg": "Password should be at least 6 characters."},
        )

    with pytest.raises(InputValidationError, match="at least 6 characters") as excinfo:
        AuthClient(_settings(), client=_client(handler)).sign_up("umar@example.com", "123", {"role": "siswa"})

    assert http_error(excinfo.value).status_code == 422
