"""Dependency injection and service factory."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import AsyncGenerator, Optional, TYPE_CHECKING

from fleet_manager.application.ports.gateways import AccessTokenService, PasswordRecoveryNotifier
from fleet_manager.application.ports.repositories import (
    CatalogRepository,
    UserRepository,
    VehicleIdAllocator,
    VehicleRepository,
)
from fleet_manager.application.services.auth_service import AuthenticationService
from fleet_manager.application.services.catalog_service import CatalogService
from fleet_manager.application.services.dashboard_service import DashboardService
from fleet_manager.application.services.vehicle_query_service import VehicleQueryService
from fleet_manager.application.services.vehicle_service import VehicleService
from fleet_manager.infrastructure.database.connection import DatabaseManager
from fleet_manager.infrastructure.logging import get_logger
from fleet_manager.infrastructure.notifications import LoggingRecoveryNotifier, SMTPRecoveryNotifier
from fleet_manager.infrastructure.repositories.sql_repositories import (
    SQLAlchemyCatalogRepository,
    SQLAlchemyUserRepository,
    SQLAlchemyVehicleIdAllocator,
    SQLAlchemyVehicleRepository,
)
from fleet_manager.infrastructure.security import JWTTokenService

if TYPE_CHECKING:
    from fleet_manager.presentation.api.config import Settings


@dataclass
class RepositoryBundle:
    """Repositories sharing one unit of work."""
    vehicles: VehicleRepository
    catalog: CatalogRepository
    users: UserRepository
    vehicle_ids: VehicleIdAllocator


def build_notifier(settings: "Settings") -> PasswordRecoveryNotifier:
    if not settings.smtp_host:
        return LoggingRecoveryNotifier()
    return SMTPRecoveryNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.smtp_from
    )


class ServiceFactory:
    """Builds application services around a request-scoped unit of work.

    Each ``get_*_service`` context opens one database session; it commits
    when the block exits normally and rolls back when it raises.
    """

    def __init__(
        self,
        settings: "Settings",
        notifier: Optional[PasswordRecoveryNotifier] = None,
        token_service: Optional[AccessTokenService] = None
    ):
        self.settings = settings
        self.database_manager = DatabaseManager(
            settings.database_url,
            echo=settings.db_echo,
            pool_pre_ping=settings.db_pool_pre_ping
        )
        self.notifier = notifier or build_notifier(settings)
        self.token_service = token_service or JWTTokenService(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            expires_minutes=settings.access_token_expire_minutes
        )
        self._connected = False
        self._logger = get_logger(__name__)

    async def initialize(self) -> None:
        if not self._connected:
            await self.database_manager.connect()
            self._connected = True
            self._logger.info("Service factory connected to database")

    async def shutdown(self) -> None:
        if self._connected:
            await self.database_manager.disconnect()
            self._connected = False
            self._logger.info("Service factory disconnected from database")

    @asynccontextmanager
    async def repositories(self) -> AsyncGenerator[RepositoryBundle, None]:
        async with self.database_manager.get_session() as session:
            yield RepositoryBundle(
                vehicles=SQLAlchemyVehicleRepository(session),
                catalog=SQLAlchemyCatalogRepository(session),
                users=SQLAlchemyUserRepository(session),
                vehicle_ids=SQLAlchemyVehicleIdAllocator(session)
            )

    @asynccontextmanager
    async def get_vehicle_query_service(self) -> AsyncGenerator[VehicleQueryService, None]:
        async with self.repositories() as repos:
            yield VehicleQueryService(
                vehicle_repository=repos.vehicles,
                catalog_repository=repos.catalog
            )

    @asynccontextmanager
    async def get_vehicle_service(self) -> AsyncGenerator[VehicleService, None]:
        async with self.repositories() as repos:
            yield VehicleService(
                vehicle_repository=repos.vehicles,
                catalog_repository=repos.catalog,
                id_allocator=repos.vehicle_ids
            )

    @asynccontextmanager
    async def get_catalog_service(self) -> AsyncGenerator[CatalogService, None]:
        async with self.repositories() as repos:
            yield CatalogService(catalog_repository=repos.catalog)

    @asynccontextmanager
    async def get_dashboard_service(self) -> AsyncGenerator[DashboardService, None]:
        async with self.repositories() as repos:
            yield DashboardService(user_repository=repos.users, vehicle_repository=repos.vehicles)

    @asynccontextmanager
    async def get_auth_service(self) -> AsyncGenerator[AuthenticationService, None]:
        async with self.repositories() as repos:
            yield AuthenticationService(
                user_repository=repos.users,
                token_service=self.token_service,
                notifier=self.notifier,
                frontend_url=self.settings.frontend_url,
                reset_token_ttl=timedelta(minutes=self.settings.password_reset_expire_minutes)
            )
