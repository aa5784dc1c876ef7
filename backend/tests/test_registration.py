from __future__ import annotations

from typing import Any, Dict, List

import pytest

from setoran.auth_client import AuthIdentity, AuthSession
from setoran.db.base import new_id
from setoran.domain import Role, UserType
from setoran.errors import AuthenticationFailedError, ConflictError, InputValidationError, NotFoundError
from setoran.registration import RegistrationService


class FakeAuth:
    def __init__(self) -> None:
        self.sign_ups: List[Dict[str, Any]] = []
        self.identities: Dict[str, str] = {}

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> AuthIdentity:
        identity = AuthIdentity(user_id=new_id(), email=email)
        self.sign_ups.append({"email": email, "metadata": metadata})
        self.identities[f"token-{email}"] = identity.user_id
        return identity

    def sign_in(self, email: str, password: str) -> AuthSession:
        return AuthSession(access_token=f"token-{email}", user_id=self.identities[f"token-{email}"])

    def sign_out(self, access_token: str) -> None:
        self.identities.pop(access_token, None)

    def get_user(self, access_token: str) -> AuthIdentity:
        if access_token not in self.identities:
            raise AuthenticationFailedError("Invalid token.")
        return AuthIdentity(user_id=self.identities[access_token])


def test_register_student_in_class(seed) -> None:
    guru = seed.user(Role.TEACHER)
    organize = seed.organize(guru)
    auth = FakeAuth()
    service = RegistrationService(auth=auth)  # type: ignore[arg-type]

    user = service.register(
        email=" Aisyah@Example.com ",
        password="rahasia",
        name="Aisyah",
        role="siswa",
        user_type="cadel",
        organize_id=organize.id,
    )

    assert user.email == "aisyah@example.com"
    assert user.role == Role.STUDENT
    assert user.type == UserType.CADEL
    assert user.organize_id == organize.id
    assert auth.sign_ups[0]["metadata"]["organize_id"] == organize.id

    session = service.sign_in("aisyah@example.com", "rahasia")
    assert service.resolve_user(session.access_token).id == user.id


def test_teachers_do_not_keep_a_class_on_registration(seed) -> None:
    guru = seed.user(Role.TEACHER)
    organize = seed.organize(guru)
    service = RegistrationService(auth=FakeAuth())  # type: ignore[arg-type]

    user = service.register(
        email="guru2@example.com", password="x", name="Guru", role=Role.TEACHER, organize_id=organize.id
    )
    assert user.organize_id is None


def test_register_validations(seed) -> None:
    auth = FakeAuth()
    service = RegistrationService(auth=auth)  # type: ignore[arg-type]

    with pytest.raises(InputValidationError, match="required fields"):
        service.register(email="", password="x", name="A")
    with pytest.raises(InputValidationError):
        service.register(email="a@example.com", password="x", name="A", role="kepala")
    with pytest.raises(NotFoundError):
        service.register(email="a@example.com", password="x", name="A", organize_id="missing")

    service.register(email="a@example.com", password="x", name="A")
    with pytest.raises(ConflictError):
        service.register(email="A@example.com", password="y", name="B")
    assert len(auth.sign_ups) == 1


def test_resolve_user_without_profile(seed) -> None:
    auth = FakeAuth()
    auth.identities["orphan"] = new_id()
    service = RegistrationService(auth=auth)  # type: ignore[arg-type]
    with pytest.raises(AuthenticationFailedError):
        service.resolve_user("orphan")


def test_list_organizes_sorted_by_name(seed) -> None:
    guru = seed.user(Role.TEACHER)
    seed.organize(guru, name="Kelas B")
    seed.organize(guru, name="Kelas A")
    names = [organize.name for organize in RegistrationService(auth=FakeAuth()).list_organizes()]  # type: ignore[arg-type]
    assert names == ["Kelas A", "Kelas B"]
