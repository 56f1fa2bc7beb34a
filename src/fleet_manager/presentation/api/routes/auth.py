"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from ....domain.entities.user import User
from ....infrastructure.services import ServiceFactory
from ..middleware import get_current_user, get_service_factory
from ..schemas.auth_schemas import (
    AuthData,
    ChangePasswordRequest,
    CredentialsRequest,
    ForgotPasswordRequest,
    ProfileUpdateRequest,
    RecoveryPasswordRequest,
    UserData,
    UserResponse,
)
from ..schemas.common import envelope_response

router = APIRouter()


@router.post("/register", status_code=201)
async def register(
    request: CredentialsRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        session = await auth_service.register(request.email, request.password)

    return envelope_response(
        status_code=201,
        message="User registered successfully",
        data=AuthData(user=UserResponse.from_entity(session.user), token=session.token)
    )


@router.post("/login")
async def login(
    request: CredentialsRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        session = await auth_service.login(request.email, request.password)

    return envelope_response(
        message="Login successful",
        data=AuthData(user=UserResponse.from_entity(session.user), token=session.token)
    )


@router.put("/profile")
async def update_profile(
    request: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        user = await auth_service.update_profile(current_user.id, request.email)

    return envelope_response(
        message="Profile updated successfully",
        data=UserData(user=UserResponse.from_entity(user))
    )


@router.put("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        await auth_service.change_password(current_user.id, request.current_password, request.new_password)

    return envelope_response(message="Password updated successfully")


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        message = await auth_service.forgot_password(request.email)

    return envelope_response(message=message)


@router.post("/recovery-password")
async def recovery_password(
    request: RecoveryPasswordRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_auth_service() as auth_service:
        await auth_service.recover_password(request.token, request.new_password)

    return envelope_response(message="Password reset successfully")
