"""Request and response schemas for authentication endpoints."""

from typing import Any, Optional
from uuid import UUID

from fleet_manager.domain.entities.user import User

from .common import ApiModel


class CredentialsRequest(ApiModel):
    email: Optional[Any] = None
    password: Optional[Any] = None


class ProfileUpdateRequest(ApiModel):
    email: Optional[Any] = None


class ChangePasswordRequest(ApiModel):
    current_password: Optional[Any] = None
    new_password: Optional[Any] = None


class ForgotPasswordRequest(ApiModel):
    email: Optional[Any] = None


class RecoveryPasswordRequest(ApiModel):
    token: Optional[Any] = None
    new_password: Optional[Any] = None


class UserResponse(ApiModel):
    id: UUID
    email: str

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(id=user.id, email=user.email)


class UserData(ApiModel):
    user: UserResponse


class AuthData(ApiModel):
    user: UserResponse
    token: str
