"""User entity for API authentication."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from ..value_objects.references import UserRef


class User:
    """Back-office user able to manage the fleet."""

    def __init__(
        self,
        email: str,
        password_hash: str,
        id: Optional[UUID] = None,
        reset_password_token: Optional[str] = None,
        reset_password_expires: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        now = datetime.now(timezone.utc)
        self._id = id or uuid4()
        self._email = email.strip().lower()
        self._password_hash = password_hash
        self._reset_password_token = reset_password_token
        self._reset_password_expires = reset_password_expires
        self._created_at = created_at or now
        self._updated_at = updated_at or now

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def reset_password_token(self) -> Optional[str]:
        return self._reset_password_token

    @property
    def reset_password_expires(self) -> Optional[datetime]:
        return self._reset_password_expires

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def change_email(self, email: str) -> None:
        self._email = email.strip().lower()
        self._touch()

    def change_password_hash(self, password_hash: str) -> None:
        """Replace the password hash; any pending reset token is discarded."""
        self._password_hash = password_hash
        self._reset_password_token = None
        self._reset_password_expires = None
        self._touch()

    def start_password_reset(self, token: str, valid_for: timedelta) -> None:
        self._reset_password_token = token
        self._reset_password_expires = datetime.now(timezone.utc) + valid_for
        self._touch()

    def reset_token_valid(self, token: str, now: Optional[datetime] = None) -> bool:
        """Check that ``token`` is the pending reset token and has not expired."""
        if not token or token != self._reset_password_token or self._reset_password_expires is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires = self._reset_password_expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires > now

    def to_ref(self) -> UserRef:
        return UserRef(id=self._id, email=self._email)

    def _touch(self) -> None:
        self._updated_at = datetime.now(timezone.utc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"User({self._email})"
