"""Bearer authentication dependencies for protected endpoints."""

from typing import Optional

from fastapi import Depends, Header, Request

from ....domain.entities.user import User
from ....infrastructure.services import ServiceFactory

BEARER_PREFIX = "Bearer "


def get_service_factory(request: Request) -> ServiceFactory:
    """Service factory installed on the application at creation time."""
    return request.app.state.service_factory


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Accept ``Bearer <token>`` or the bare token."""
    if not authorization:
        return None
    token = authorization[len(BEARER_PREFIX):] if authorization.startswith(BEARER_PREFIX) else authorization
    return token.strip() or None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> User:
    """Resolve the authenticated user; AuthenticationError becomes a 401 response."""
    async with service_factory.get_auth_service() as auth_service:
        return await auth_service.authenticate(extract_token(authorization))
