"""Port interfaces for outbound services that are not storage."""

from abc import ABC, abstractmethod
from uuid import UUID


class AccessTokenService(ABC):
    """Issues and verifies bearer tokens."""

    @abstractmethod
    def issue(self, user_id: UUID) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> UUID:
        """Return the user ID a token was issued for.

        Raises AuthenticationError when the token is invalid or expired.
        """
        raise NotImplementedError


class PasswordRecoveryNotifier(ABC):
    """Delivers password recovery links to users."""

    @abstractmethod
    async def send_recovery_link(self, email: str, link: str) -> None:
        raise NotImplementedError
