"""FastAPI dependencies: collaborators, the authenticated user and role checks."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from .capabilities import Capability, has_capability
from .domain import User
from .errors import SetoranError, http_error
from .media_upload import MediaUploader
from .registration import RegistrationService, registration_service


def get_registration_service() -> RegistrationService:
    return registration_service


def get_media_uploader() -> MediaUploader:
    return MediaUploader()


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


def get_current_user(
    token: str = Depends(bearer_token),
    service: RegistrationService = Depends(get_registration_service),
) -> User:
    try:
        return service.resolve_user(token)
    except SetoranError as exc:
        raise http_error(exc) from exc


def require_capability(*capabilities: Capability) -> Callable[..., User]:
    """Build a dependency that admits users whose role grants any of ``capabilities``."""

    def _dependency(user: User = Depends(get_current_user)) -> User:
        if not any(has_capability(user.role, capability) for capability in capabilities):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role.value}' cannot {capabilities[0].value.replace('_', ' ')}.",
            )
        return user

    return _dependency


__all__ = [
    "bearer_token",
    "get_current_user",
    "get_media_uploader",
    "get_registration_service",
    "require_capability",
]
