"""Authentication-related value objects and services."""

from dataclasses import dataclass
from typing import Any
import hashlib
import re
import secrets

from ..exceptions import ValidationError

MIN_PASSWORD_LENGTH = 6
RESET_TOKEN_BYTES = 32

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Any) -> bool:
    """Check the basic ``local@domain.tld`` shape of an email address."""
    return isinstance(email, str) and bool(_EMAIL_PATTERN.match(email))


def require_email(email: Any) -> str:
    """Return the normalized email or raise ValidationError."""
    if not email:
        raise ValidationError("Email is required", field="email")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format", field="email")
    return email.strip().lower()


def require_new_password(password: Any, field: str = "newPassword") -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            field=field
        )
    return password


@dataclass(frozen=True)
class Credentials:
    """Value object for email/password credentials."""
    email: str
    password: str

    @classmethod
    def for_login(cls, email: Any, password: Any) -> "Credentials":
        """Require both fields without checking their format."""
        if not email or not password:
            raise ValidationError("Email and password are required")
        return cls(email=str(email).strip().lower(), password=str(password))

    @classmethod
    def for_registration(cls, email: Any, password: Any) -> "Credentials":
        """Require both fields, a well-formed email and a long enough password."""
        if not email or not password:
            raise ValidationError("Email and password are required")
        normalized = require_email(email)
        require_new_password(password, field="password")
        return cls(email=normalized, password=password)


class PasswordHasher:
    """Service for password hashing and verification."""

    ITERATIONS = 100000

    @staticmethod
    def hash_password(password: str, salt: str) -> str:
        # PBKDF2 with SHA-256
        hashed = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            PasswordHasher.ITERATIONS
        )
        return hashed.hex()

    @staticmethod
    def create_password_hash(password: str) -> str:
        """Create a complete password hash with embedded salt."""
        salt = secrets.token_hex(32)
        return f"{salt}:{PasswordHasher.hash_password(password, salt)}"

    @staticmethod
    def verify_password_hash(password: str, password_hash: str) -> bool:
        """Verify password against complete hash."""
        try:
            salt, hashed = password_hash.split(':', 1)
        except ValueError:
            return False
        return secrets.compare_digest(PasswordHasher.hash_password(password, salt), hashed)


def generate_reset_token() -> str:
    """Random hex token for password recovery links."""
    return secrets.token_hex(RESET_TOKEN_BYTES)
