"""Workflow error hierarchy and its mapping onto HTTP responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class SetoranError(Exception):
    """Base class for every error raised by the setoran workflows."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "setoran_error"

    def detail(self) -> Any:
        return str(self)


class InputValidationError(SetoranError, ValueError):
    """Missing or malformed input, detected before any store or network call."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "invalid_input"


class NotFoundError(SetoranError, LookupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class PermissionDeniedError(SetoranError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class ConflictError(SetoranError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"

    def detail(self) -> Any:
        return {"code": self.code, "message": str(self)}


class AlreadyAnsweredError(ConflictError):
    code = "quiz_already_answered"


class InvalidTransitionError(ConflictError):
    code = "invalid_status_transition"


class DuplicateLabelError(ConflictError):
    code = "label_exists"


class CollaboratorError(SetoranError):
    """An external service (auth provider, media host) failed or misbehaved."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "collaborator_error"


class AuthServiceError(CollaboratorError):
    code = "auth_service_error"


class AuthenticationFailedError(SetoranError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class MediaUploadError(CollaboratorError):
    code = "media_upload_failed"


class LedgerConsistencyError(SetoranError):
    """A quiz answer was stored but the matching point award did not complete."""

    code = "ledger_consistency_gap"

    def __init__(self, message: str, *, answer_id: str, siswa_id: str, poin: int) -> None:
        super().__init__(message)
        self.answer_id = answer_id
        self.siswa_id = siswa_id
        self.poin = poin

    def detail(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": str(self),
            "answer_id": self.answer_id,
            "siswa_id": self.siswa_id,
            "poin": self.poin,
        }


def http_error(exc: SetoranError, *, headers: Optional[Dict[str, str]] = None) -> HTTPException:
    """Translate a workflow error into the HTTPException raised by a route."""
    if isinstance(exc, AuthenticationFailedError) and headers is None:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=exc.status_code, detail=exc.detail(), headers=headers)


__all__ = [
    "AlreadyAnsweredError",
    "AuthServiceError",
    "AuthenticationFailedError",
    "CollaboratorError",
    "ConflictError",
    "DuplicateLabelError",
    "InputValidationError",
    "InvalidTransitionError",
    "LedgerConsistencyError",
    "MediaUploadError",
    "NotFoundError",
    "PermissionDeniedError",
    "SetoranError",
    "http_error",
]
