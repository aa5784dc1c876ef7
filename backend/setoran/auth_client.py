"""Thin client for the hosted auth service (Supabase GoTrue REST API)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings, get_settings
from .errors import (
    AuthServiceError,
    AuthenticationFailedError,
    ConflictError,
    InputValidationError,
    SetoranError,
)

logger = logging.getLogger(__name__)

_EXISTING_ACCOUNT_CODES = frozenset({"user_already_exists", "email_exists"})


class AuthIdentity(BaseModel):
    user_id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user_id: str


class _GoTrueUser(BaseModel):
    id: str
    email: Optional[str] = None


class _GoTrueSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: _GoTrueUser


class AuthClient:
    """Session persistence and token refresh stay with the auth service."""

    def __init__(self, settings: Settings | None = None, *, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthIdentity:
        response = self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata},
            rejected=_sign_up_rejection,
        )
        try:
            payload = response.json()
            # GoTrue returns the user directly, or wrapped in a session when autoconfirm is on.
            if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
                payload = payload["user"]
            user = _GoTrueUser.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise AuthServiceError(f"Auth service returned an invalid sign-up payload: {exc}") from exc
        logger.info("Registered auth identity %s", user.id)
        return AuthIdentity(user_id=user.id, email=user.email)

    def sign_in(self, email: str, password: str) -> AuthSession:
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        try:
            session = _GoTrueSession.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthServiceError(f"Auth service returned an invalid session payload: {exc}") from exc
        return AuthSession(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_in=session.expires_in,
            user_id=session.user.id,
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)

    def get_user(self, access_token: str) -> AuthIdentity:
        response = self._request("GET", "/user", access_token=access_token)
        try:
            user = _GoTrueUser.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthServiceError(f"Auth service returned an invalid user payload: {exc}") from exc
        return AuthIdentity(user_id=user.id, email=user.email)

    def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: Optional[str] = None,
        rejected: Callable[[httpx.Response], SetoranError] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        base_url = self._settings.supabase_url
        api_key = self._settings.supabase_anon_key
        if not base_url or not api_key:
            raise AuthServiceError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured.")

        headers = {"apikey": api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        url = f"{base_url.rstrip('/')}/auth/v1{path}"

        local_client = self._client or httpx.Client(timeout=self._settings.http_timeout_seconds)
        close_client = self._client is None
        try:
            response = local_client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise AuthServiceError(f"Auth service call failed: {exc}") from exc
        finally:
            if close_client:
                local_client.close()

        if response.status_code in (400, 401, 403, 409, 422):
            raise (rejected or _credentials_rejection)(response)
        if response.is_error:
            raise AuthServiceError(f"Auth service responded with {response.status_code}: {_error_message(response)}")
        return response


def _credentials_rejection(response: httpx.Response) -> SetoranError:
    return AuthenticationFailedError(_error_message(response))


def _sign_up_rejection(response: httpx.Response) -> SetoranError:
    """Sign-up rejections are about the submitted account, not the caller's credentials."""
    message = _error_message(response)
    try:
        payload = response.json()
    except ValueError:
        payload = None
    error_code = payload.get("error_code") if isinstance(payload, dict) else None
    if response.status_code == 409 or error_code in _EXISTING_ACCOUNT_CODES or "already registered" in message.lower():
        return ConflictError(message)
    return InputValidationError(message)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        for key in ("error_description", "msg", "message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase


__all__ = ["AuthClient", "AuthIdentity", "AuthSession"]
