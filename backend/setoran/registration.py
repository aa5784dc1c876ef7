"""Account registration, sign-in and token -> user resolution."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .auth_client import AuthClient, AuthSession
from .db.session import session_scope
from .domain import Organize, Role, User, UserType
from .errors import AuthenticationFailedError, ConflictError, InputValidationError, NotFoundError
from .repositories import organizes, users

logger = logging.getLogger(__name__)

# Only students and parents pick a class when registering.
_CLASS_MEMBER_ROLES = {Role.STUDENT, Role.PARENT}


class RegistrationService:
    def __init__(self, auth: AuthClient | None = None) -> None:
        self._auth = auth

    @property
    def auth(self) -> AuthClient:
        if self._auth is None:
            self._auth = AuthClient()
        return self._auth

    def register(
        self,
        *,
        email: str,
        password: str,
        name: str,
        role: Role | str = Role.STUDENT,
        user_type: UserType | str | None = UserType.NORMAL,
        organize_id: Optional[str] = None,
    ) -> User:
        email = (email or "").strip().lower()
        name = (name or "").strip()
        if not email or not password or not name:
            raise InputValidationError("Please fill in all required fields.")
        try:
            role = Role(role)
            user_type = UserType(user_type) if user_type else None
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc
        organize_id = organize_id if role in _CLASS_MEMBER_ROLES and organize_id else None

        with session_scope(commit=False) as session:
            if users.get_by_email(session, email) is not None:
                raise ConflictError("An account with this email already exists.")
            if organize_id and organizes.get(session, organize_id) is None:
                raise NotFoundError(f"Class '{organize_id}' was not found.")

        identity = self.auth.sign_up(
            email,
            password,
            {
                "name": name,
                "role": role.value,
                "type": user_type.value if user_type else None,
                "organize_id": organize_id,
            },
        )
        try:
            with session_scope() as session:
                user = users.create(
                    session,
                    user_id=identity.user_id,
                    email=email,
                    name=name,
                    role=role,
                    user_type=user_type,
                    organize_id=organize_id,
                )
        except SQLAlchemyError:
            logger.exception("Auth identity %s created but its profile row was not stored", identity.user_id)
            raise
        logger.info("Registered %s as %s", user.id, role.value)
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        if not email or not password:
            raise InputValidationError("Email and password are required.")
        return self.auth.sign_in(email.strip().lower(), password)

    def sign_out(self, access_token: str) -> None:
        self.auth.sign_out(access_token)

    def resolve_user(self, access_token: str) -> User:
        identity = self.auth.get_user(access_token)
        with session_scope(commit=False) as session:
            user = users.get(session, identity.user_id)
        if user is None:
            raise AuthenticationFailedError("No profile is registered for this account.")
        return user

    def list_organizes(self) -> List[Organize]:
        with session_scope(commit=False) as session:
            return organizes.list_all(session)


registration_service = RegistrationService()

__all__ = ["RegistrationService", "registration_service"]
