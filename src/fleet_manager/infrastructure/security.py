"""JWT bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from fleet_manager.application.ports.gateways import AccessTokenService
from fleet_manager.domain.exceptions import AuthenticationError


class JWTTokenService(AccessTokenService):
    """Signs and verifies access tokens whose subject is the user ID."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 7 * 24 * 60):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_delta = timedelta(minutes=expires_minutes)

    def issue(self, user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + (expires_delta or self._expires_delta),
            "type": "access_token",
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError("Authentication token has expired")
        except JWTError:
            raise AuthenticationError("Invalid authentication token")

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Invalid token: missing subject")
        try:
            return UUID(subject)
        except ValueError:
            raise AuthenticationError("Invalid token: malformed subject")
