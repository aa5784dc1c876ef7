"""Registration, sign-in and "who am I" endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from .auth_client import AuthSession
from .capabilities import Capability, NavigationTab, capabilities_for, tabs_for
from .dependencies import bearer_token, get_current_user, get_registration_service
from .domain import Organize, Role, User, UserType
from .errors import SetoranError, http_error
from .registration import RegistrationService

router = APIRouter(prefix="/api", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str = Field(default="", max_length=255)
    password: str = Field(default="")
    name: str = Field(default="", max_length=255)
    role: Role = Role.STUDENT
    type: Optional[UserType] = UserType.NORMAL
    organize_id: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class MeResponse(BaseModel):
    user: User
    capabilities: List[Capability]
    tabs: List[NavigationTab]


@router.get("/organizes", response_model=List[Organize])
def list_organizes(service: RegistrationService = Depends(get_registration_service)) -> List[Organize]:
    return service.list_organizes()


@router.post("/auth/register", response_model=User, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> User:
    try:
        return service.register(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            role=payload.role,
            user_type=payload.type,
            organize_id=payload.organize_id,
        )
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.post("/auth/login", response_model=AuthSession)
def login(
    payload: LoginRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthSession:
    try:
        return service.sign_in(payload.email, payload.password)
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: str = Depends(bearer_token),
    service: RegistrationService = Depends(get_registration_service),
) -> Response:
    try:
        service.sign_out(token)
    except SetoranError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=MeResponse)
def me(user: User = Depends(get_current_user)) -> MeResponse:
    capabilities = sorted(capabilities_for(user.role), key=lambda capability: capability.value)
    return MeResponse(user=user, capabilities=capabilities, tabs=tabs_for(user.role))
