"""Shared fixtures: in-memory service wiring and an HTTP client over the ASGI app."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fleet_manager.application.ports.gateways import PasswordRecoveryNotifier
from fleet_manager.domain.entities.user import User
from fleet_manager.domain.value_objects.auth import PasswordHasher
from fleet_manager.infrastructure.repositories.memory_repositories import (
    InMemoryCatalogRepository,
    InMemoryStore,
    InMemoryUserRepository,
    InMemoryVehicleIdAllocator,
    InMemoryVehicleRepository,
)
from fleet_manager.infrastructure.services import RepositoryBundle, ServiceFactory
from fleet_manager.presentation.api.config import Settings
from fleet_manager.presentation.api.main import create_app

TEST_PASSWORD = "secret123"


class RecordingNotifier(PasswordRecoveryNotifier):
    """Keeps recovery links in memory instead of sending them."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    async def send_recovery_link(self, email: str, link: str) -> None:
        self.sent.append((email, link))


class InMemoryServiceFactory(ServiceFactory):
    """Service factory whose repositories live in an InMemoryStore."""

    def __init__(self, settings: Settings, store: InMemoryStore, notifier: PasswordRecoveryNotifier):
        super().__init__(settings, notifier=notifier)
        self.store = store

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    @asynccontextmanager
    async def repositories(self) -> AsyncGenerator[RepositoryBundle, None]:
        yield RepositoryBundle(
            vehicles=InMemoryVehicleRepository(self.store),
            catalog=InMemoryCatalogRepository(self.store),
            users=InMemoryUserRepository(self.store),
            vehicle_ids=InMemoryVehicleIdAllocator(self.store)
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key="test-secret-key",
        frontend_url="http://frontend.test",
        log_level="WARNING",
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def catalog(store: InMemoryStore) -> dict:
    """Two marks with two models each."""
    toyota = store.add_mark("Toyota")
    ford = store.add_mark("Ford")
    return {
        "toyota": toyota,
        "ford": ford,
        "corolla": store.add_model("Corolla", toyota),
        "camry": store.add_model("Camry", toyota),
        "mustang": store.add_model("Mustang", ford),
        "ranger": store.add_model("Ranger", ford),
    }


@pytest.fixture
def user(store: InMemoryStore) -> User:
    user = User(email="admin@example.com", password_hash=PasswordHasher.create_password_hash(TEST_PASSWORD))
    store.users[user.id] = user
    return user


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service_factory(settings: Settings, store: InMemoryStore, notifier: RecordingNotifier) -> InMemoryServiceFactory:
    return InMemoryServiceFactory(settings, store, notifier)


@pytest.fixture
def app(settings: Settings, service_factory: InMemoryServiceFactory):
    return create_app(settings=settings, service_factory=service_factory)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth_headers(service_factory: InMemoryServiceFactory, user: User) -> dict:
    token = service_factory.token_service.issue(user.id)
    return {"Authorization": f"Bearer {token}"}
