"""Authentication service: accounts, sessions and password recovery."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, TYPE_CHECKING
from uuid import UUID

from fleet_manager.domain.entities.user import User
from fleet_manager.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from fleet_manager.domain.value_objects.auth import (
    Credentials,
    PasswordHasher,
    generate_reset_token,
    require_email,
    require_new_password,
)
from fleet_manager.infrastructure.logging import (
    get_logger,
    log_authentication_attempt,
    log_business_rule_violation
)

if TYPE_CHECKING:
    from fleet_manager.application.ports.gateways import AccessTokenService, PasswordRecoveryNotifier
    from fleet_manager.application.ports.repositories import UserRepository

RECOVERY_REQUESTED_MESSAGE = "If the email exists, a recovery link will be sent"


@dataclass(frozen=True)
class AuthSession:
    """A user together with a freshly issued bearer token."""
    user: User
    token: str


class AuthenticationService:
    """Service for user registration, login and credential management."""

    def __init__(
        self,
        user_repository: "UserRepository",
        token_service: "AccessTokenService",
        notifier: "PasswordRecoveryNotifier",
        frontend_url: str,
        reset_token_ttl: timedelta = timedelta(hours=1)
    ):
        self._user_repository = user_repository
        self._token_service = token_service
        self._notifier = notifier
        self._frontend_url = frontend_url.rstrip("/")
        self._reset_token_ttl = reset_token_ttl
        self._logger = get_logger(__name__)

    async def register(self, email: Any, password: Any) -> AuthSession:
        credentials = Credentials.for_registration(email, password)

        if await self._user_repository.find_by_email(credentials.email):
            log_business_rule_violation(self._logger, "unique_email", "Email already registered")
            raise ConflictError("Email is already registered", field="email")

        user = await self._user_repository.add(User(
            email=credentials.email,
            password_hash=PasswordHasher.create_password_hash(credentials.password)
        ))
        self._logger.info(f"Registered user {user.id}")
        return AuthSession(user=user, token=self._token_service.issue(user.id))

    async def login(self, email: Any, password: Any) -> AuthSession:
        credentials = Credentials.for_login(email, password)

        user = await self._user_repository.find_by_email(credentials.email)
        if user is None:
            log_authentication_attempt(self._logger, credentials.email, False, failure_reason="user_not_found")
            raise ValidationError("Invalid credentials")

        if not PasswordHasher.verify_password_hash(credentials.password, user.password_hash):
            log_authentication_attempt(self._logger, credentials.email, False,
                                       failure_reason="invalid_password", user_id=str(user.id))
            raise ValidationError("Invalid credentials")

        log_authentication_attempt(self._logger, credentials.email, True, user_id=str(user.id))
        return AuthSession(user=user, token=self._token_service.issue(user.id))

    async def authenticate(self, token: Optional[str]) -> User:
        """Resolve a bearer token to its user; raises AuthenticationError."""
        if not token:
            raise AuthenticationError("Authentication token not provided")
        user_id = self._token_service.verify(token)
        user = await self._user_repository.find_by_id(user_id)
        if user is None:
            self._logger.warning(f"Token presented for unknown user {user_id}")
            raise AuthenticationError("User not found")
        return user

    async def update_profile(self, user_id: UUID, email: Any) -> User:
        new_email = require_email(email)
        user = await self._get_user(user_id)

        if new_email != user.email:
            if await self._user_repository.find_by_email(new_email):
                raise ConflictError("Email is already registered", field="email")
            user.change_email(new_email)
            user = await self._user_repository.update(user)
            self._logger.info(f"User {user.id} changed email")
        return user

    async def change_password(self, user_id: UUID, current_password: Any, new_password: Any) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        require_new_password(new_password)

        user = await self._get_user(user_id)
        if not PasswordHasher.verify_password_hash(str(current_password), user.password_hash):
            log_authentication_attempt(self._logger, user.email, False, failure_reason="wrong_current_password")
            raise ValidationError("Current password is incorrect", field="currentPassword")

        user.change_password_hash(PasswordHasher.create_password_hash(new_password))
        await self._user_repository.update(user)
        self._logger.info(f"User {user.id} changed password")

    async def forgot_password(self, email: Any) -> str:
        """Start password recovery; the returned message never reveals whether the email exists."""
        normalized = require_email(email)
        user = await self._user_repository.find_by_email(normalized)
        if user is None:
            self._logger.info("Password recovery requested for unknown email")
            return RECOVERY_REQUESTED_MESSAGE

        token = generate_reset_token()
        user.start_password_reset(token, self._reset_token_ttl)
        await self._user_repository.update(user)

        link = f"{self._frontend_url}/recovery-password?token={token}"
        try:
            await self._notifier.send_recovery_link(user.email, link)
        except Exception:
            # The token is stored, the user can ask again
            self._logger.error(f"Failed to send recovery link to user {user.id}", exc_info=True)

        return RECOVERY_REQUESTED_MESSAGE

    async def recover_password(self, token: Any, new_password: Any) -> None:
        if not token or not new_password:
            raise ValidationError("Token and new password are required")
        require_new_password(new_password)

        user = await self._user_repository.find_by_reset_token(str(token))
        if user is None or not user.reset_token_valid(str(token)):
            raise ValidationError("Invalid or expired token", field="token")

        user.change_password_hash(PasswordHasher.create_password_hash(new_password))
        await self._user_repository.update(user)
        self._logger.info(f"User {user.id} reset password through recovery token")

    async def _get_user(self, user_id: UUID) -> User:
        user = await self._user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
