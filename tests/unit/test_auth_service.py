"""Unit tests for authentication service."""

from datetime import timedelta
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse
from uuid import uuid4

import pytest

from fleet_manager.application.services.auth_service import (
    RECOVERY_REQUESTED_MESSAGE,
    AuthenticationService,
)
from fleet_manager.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from fleet_manager.domain.value_objects.auth import PasswordHasher
from fleet_manager.infrastructure.repositories.memory_repositories import InMemoryUserRepository
from fleet_manager.infrastructure.security import JWTTokenService

# Mark all async tests in this module
pytestmark = pytest.mark.asyncio

PASSWORD = "secret123"


@pytest.fixture
def token_service():
    return JWTTokenService("unit-test-secret")


@pytest.fixture
def auth_service(store, token_service, notifier):
    return AuthenticationService(
        user_repository=InMemoryUserRepository(store),
        token_service=token_service,
        notifier=notifier,
        frontend_url="http://frontend.test/"
    )


def token_from(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


class TestRegisterAndLogin:
    """Test cases for registration and login."""

    async def test_register_issues_token(self, auth_service, token_service, store):
        session = await auth_service.register("New@Example.com", PASSWORD)

        assert session.user.email == "new@example.com"
        assert token_service.verify(session.token) == session.user.id
        assert session.user.id in store.users
        assert PasswordHasher.verify_password_hash(PASSWORD, session.user.password_hash)

    async def test_register_duplicate_email(self, auth_service, user):
        with pytest.raises(ConflictError, match="Email is already registered"):
            await auth_service.register("ADMIN@example.com", PASSWORD)

    @pytest.mark.parametrize("email,password,message", [
        ("", PASSWORD, "Email and password are required"),
        ("bad-email", PASSWORD, "Invalid email format"),
        ("a@b.co", "123", "Password must be at least 6 characters long"),
    ])
    async def test_register_invalid(self, auth_service, email, password, message):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register(email, password)
        assert exc_info.value.message == message

    async def test_login(self, auth_service, token_service, user):
        session = await auth_service.login("admin@example.com", PASSWORD)

        assert session.user == user
        assert token_service.verify(session.token) == user.id

    @pytest.mark.parametrize("email,password", [
        ("admin@example.com", "wrong-password"),
        ("nobody@example.com", PASSWORD),
    ])
    async def test_login_failure_is_generic(self, auth_service, user, email, password):
        """Test unknown email and wrong password fail the same way."""
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.login(email, password)
        assert exc_info.value.message == "Invalid credentials"


class TestAuthenticate:
    """Test cases for bearer token resolution."""

    async def test_authenticate(self, auth_service, token_service, user):
        assert await auth_service.authenticate(token_service.issue(user.id)) == user

    async def test_missing_token(self, auth_service):
        with pytest.raises(AuthenticationError, match="Authentication token not provided"):
            await auth_service.authenticate(None)

    async def test_unknown_user(self, auth_service, token_service):
        with pytest.raises(AuthenticationError, match="User not found"):
            await auth_service.authenticate(token_service.issue(uuid4()))


class TestProfileAndPassword:
    """Test cases for profile and password changes."""

    async def test_update_profile(self, auth_service, user):
        updated = await auth_service.update_profile(user.id, "Renamed@Example.com")
        assert updated.email == "renamed@example.com"

    async def test_update_profile_same_email(self, auth_service, user):
        updated = await auth_service.update_profile(user.id, "admin@example.com")
        assert updated.email == "admin@example.com"

    async def test_update_profile_taken_email(self, auth_service, user):
        await auth_service.register("other@example.com", PASSWORD)

        with pytest.raises(ConflictError):
            await auth_service.update_profile(user.id, "other@example.com")

    async def test_update_profile_unknown_user(self, auth_service):
        with pytest.raises(NotFoundError, match="User not found"):
            await auth_service.update_profile(uuid4(), "a@b.co")

    async def test_change_password(self, auth_service, user):
        await auth_service.change_password(user.id, PASSWORD, "brand-new")

        session = await auth_service.login(user.email, "brand-new")
        assert session.user == user

    async def test_change_password_wrong_current(self, auth_service, user):
        with pytest.raises(ValidationError, match="Current password is incorrect"):
            await auth_service.change_password(user.id, "nope", "brand-new")

    async def test_change_password_too_short(self, auth_service, user):
        with pytest.raises(ValidationError, match="at least 6 characters"):
            await auth_service.change_password(user.id, PASSWORD, "abc")


class TestPasswordRecovery:
    """Test cases for forgot/recover password."""

    async def test_unknown_email_gets_same_message(self, auth_service, notifier):
        message = await auth_service.forgot_password("ghost@example.com")

        assert message == RECOVERY_REQUESTED_MESSAGE
        assert notifier.sent == []

    async def test_recovery_link_sent(self, auth_service, notifier, user):
        message = await auth_service.forgot_password("admin@example.com")

        assert message == RECOVERY_REQUESTED_MESSAGE
        [(email, link)] = notifier.sent
        assert email == "admin@example.com"
        assert link.startswith("http://frontend.test/recovery-password?token=")
        assert token_from(link) == user.reset_password_token

    async def test_recovery_token_is_single_use(self, auth_service, notifier, user):
        await auth_service.forgot_password(user.email)
        token = token_from(notifier.sent[0][1])

        await auth_service.recover_password(token, "recovered")
        assert (await auth_service.login(user.email, "recovered")).user == user

        with pytest.raises(ValidationError, match="Invalid or expired token"):
            await auth_service.recover_password(token, "another1")

    async def test_expired_recovery_token(self, store, token_service, notifier, user):
        service = AuthenticationService(
            InMemoryUserRepository(store), token_service, notifier,
            frontend_url="http://frontend.test", reset_token_ttl=timedelta(seconds=-1)
        )
        await service.forgot_password(user.email)

        with pytest.raises(ValidationError, match="Invalid or expired token"):
            await service.recover_password(user.reset_password_token, "recovered")

    async def test_notifier_failure_is_swallowed(self, store, token_service, user):
        failing = AsyncMock()
        failing.send_recovery_link.side_effect = ConnectionError("smtp down")
        service = AuthenticationService(
            InMemoryUserRepository(store), token_service, failing, frontend_url="http://frontend.test"
        )

        message = await service.forgot_password(user.email)

        assert message == RECOVERY_REQUESTED_MESSAGE
        failing.send_recovery_link.assert_awaited_once()
        assert user.reset_password_token is not None

    async def test_recover_requires_fields(self, auth_service):
        with pytest.raises(ValidationError, match="Token and new password are required"):
            await auth_service.recover_password("", "whatever")
