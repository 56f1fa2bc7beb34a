"""Integration tests for the SQLAlchemy repositories on a SQLite database."""

from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio

from fleet_manager.application.services.vehicle_query_service import VehicleQueryService
from fleet_manager.application.services.vehicle_service import VehicleService
from fleet_manager.domain.entities.user import User
from fleet_manager.domain.entities.vehicle import Vehicle, VehicleStatus
from fleet_manager.domain.exceptions import ConflictError, DuplicateVehicleIdError
from fleet_manager.domain.value_objects.vehicle_query import (
    SortField,
    VehicleCriteria,
    VehicleFilters,
    VehicleQuery,
)
from fleet_manager.infrastructure.database.connection import DatabaseManager, normalize_database_url
from fleet_manager.infrastructure.database.models import MarkRecord
from fleet_manager.infrastructure.database.seed import ADMIN_EMAIL, seed_database
from fleet_manager.infrastructure.repositories.sql_repositories import (
    SQLAlchemyCatalogRepository,
    SQLAlchemyUserRepository,
    SQLAlchemyVehicleIdAllocator,
    SQLAlchemyVehicleRepository,
)
from fleet_manager.infrastructure.services import ServiceFactory
from fleet_manager.presentation.api.config import Settings

# Mark all async tests in this module
pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def database(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'fleet.db'}")
    await manager.connect()
    await manager.create_tables()
    yield manager
    await manager.disconnect()


@pytest_asyncio.fixture
async def seeded(database):
    async with database.get_session() as session:
        await seed_database(session)
    return database


async def admin_id(session):
    admin = await SQLAlchemyUserRepository(session).find_by_email(ADMIN_EMAIL)
    return admin.id


async def toyota_corolla(session):
    catalog = SQLAlchemyCatalogRepository(session)
    toyota = next(m for m in await catalog.list_marks() if m.name == "Toyota")
    corolla = next(m for m in await catalog.list_models_by_mark(toyota.id) if m.name == "Corolla")
    return toyota, corolla


def search_query(term):
    return VehicleQuery.create(filters=VehicleFilters.from_raw(search=term))


async def test_normalize_database_url():
    assert normalize_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert normalize_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert normalize_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestSeed:
    """Test cases for the development seed."""

    async def test_seed_counts(self, database):
        async with database.get_session() as session:
            summary = await seed_database(session)

        assert (summary.users, summary.marks, summary.models, summary.vehicles) == (1, 15, 150, 25)

    async def test_seed_is_repeatable(self, seeded):
        async with seeded.get_session() as session:
            summary = await seed_database(session, vehicle_count=3)

        assert summary.vehicles == 3
        assert summary.users == 1


class TestSQLAlchemyVehicleRepository:
    """Test cases for vehicle storage."""

    async def test_count_and_status_filter(self, seeded):
        async with seeded.get_session() as session:
            repository = SQLAlchemyVehicleRepository(session)

            assert await repository.count(VehicleCriteria()) == 25
            # Statuses cycle available, maintenance, service
            assert await repository.count(VehicleCriteria(status=VehicleStatus.AVAILABLE)) == 9

    async def test_find_page_sorted_by_vehicle_id(self, seeded):
        async with seeded.get_session() as session:
            repository = SQLAlchemyVehicleRepository(session)

            page = await repository.find_page(VehicleCriteria(), SortField.VEHICLE_ID, False, 5, 3)

        assert [v.vehicle_id for v in page] == ["VEH-0006", "VEH-0007", "VEH-0008"]
        assert page[0].mark is not None
        assert page[0].created_by.email == ADMIN_EMAIL

    async def test_search_uses_mark_ids_and_identifier(self, seeded):
        async with seeded.get_session() as session:
            toyota, _ = await toyota_corolla(session)
            repository = SQLAlchemyVehicleRepository(session)

            by_mark = await repository.count(VehicleCriteria(search_term="zzz", mark_ids=frozenset({toyota.id})))
            by_identifier = await repository.count(VehicleCriteria(search_term="veh-002"))
            nothing = await repository.count(VehicleCriteria(search_term="%"))

        # Vehicles 1 and 16 are Toyotas
        assert by_mark == 2
        assert by_identifier == 6
        assert nothing == 0

    async def test_year_range(self, seeded):
        async with seeded.get_session() as session:
            repository = SQLAlchemyVehicleRepository(session)

            vehicles = await repository.find_page(
                VehicleCriteria(year_from=2016, year_to=2017), SortField.YEAR, True, 0, 50
            )

        assert {v.year for v in vehicles} == {2016, 2017}
        assert vehicles[0].year == 2017

    async def test_add_update_delete(self, seeded):
        async with seeded.get_session() as session:
            toyota, corolla = await toyota_corolla(session)
            creator = await admin_id(session)
            repository = SQLAlchemyVehicleRepository(session)

            saved = await repository.add(Vehicle("VEH-0100", toyota.id, corolla.id, 2020, creator))
            assert saved.mark.name == "Toyota"

            saved.change_status(VehicleStatus.SERVICE, creator)
            updated = await repository.update(saved)
            assert updated.status is VehicleStatus.SERVICE

            assert await repository.delete(saved.id) is True
            assert await repository.delete(saved.id) is False
            assert await repository.find_by_id(saved.id) is None

    async def test_duplicate_identifier(self, seeded):
        async with seeded.get_session() as session:
            toyota, corolla = await toyota_corolla(session)
            creator = await admin_id(session)
            repository = SQLAlchemyVehicleRepository(session)

            with pytest.raises(DuplicateVehicleIdError) as exc_info:
                await repository.add(Vehicle("VEH-0001", toyota.id, corolla.id, 2020, creator))

        assert exc_info.value.vehicle_id == "VEH-0001"


class TestSQLAlchemyVehicleIdAllocator:
    """Test cases for the identifier counter."""

    async def test_continues_after_seed(self, seeded):
        async with seeded.get_session() as session:
            allocator = SQLAlchemyVehicleIdAllocator(session)
            assert await allocator.next_id() == "VEH-0026"
            assert await allocator.next_id() == "VEH-0027"

    async def test_counter_seeds_itself_from_largest_identifier(self, seeded):
        async with seeded.get_session() as session:
            await SQLAlchemyVehicleIdAllocator(session, counter_name="fresh").next_id()

        async with seeded.get_session() as session:
            assert await SQLAlchemyVehicleIdAllocator(session, counter_name="fresh").next_id() == "VEH-0027"

    async def test_synchronize_after_counter_lags(self, seeded):
        async with seeded.get_session() as session:
            toyota, corolla = await toyota_corolla(session)
            creator = await admin_id(session)
            await SQLAlchemyVehicleRepository(session).add(
                Vehicle("VEH-10000", toyota.id, corolla.id, 2020, creator)
            )

        async with seeded.get_session() as session:
            allocator = SQLAlchemyVehicleIdAllocator(session)
            await allocator.synchronize()
            assert await allocator.next_id() == "VEH-10001"

    async def test_synchronize_never_moves_counter_backwards(self, seeded):
        async with seeded.get_session() as session:
            allocator = SQLAlchemyVehicleIdAllocator(session)
            await allocator.next_id()
            await allocator.next_id()

            # Largest stored identifier is still VEH-0025
            await allocator.synchronize()

            assert await allocator.next_id() == "VEH-0028"


class TestVehicleServicesOnSQL:
    """Test cases for the vehicle services over SQL storage."""

    async def test_create_skips_identifier_taken_outside_allocator(self, seeded):
        async with seeded.get_session() as session:
            toyota, corolla = await toyota_corolla(session)
            creator = await admin_id(session)
            await SQLAlchemyVehicleRepository(session).add(
                Vehicle("VEH-0026", toyota.id, corolla.id, 2020, creator)
            )

        async with seeded.get_session() as session:
            service = VehicleService(
                SQLAlchemyVehicleRepository(session),
                SQLAlchemyCatalogRepository(session),
                SQLAlchemyVehicleIdAllocator(session)
            )
            created = await service.create_vehicle(
                {"mark": str(toyota.id), "model": str(corolla.id), "year": 2021}, creator
            )

        assert created.vehicle_id == "VEH-0027"
        assert created.mark.name == "Toyota"
        assert created.model.name == "Corolla"
        assert created.created_by.email == ADMIN_EMAIL

        async with seeded.get_session() as session:
            assert await SQLAlchemyVehicleRepository(session).count(VehicleCriteria()) == 27
            assert await SQLAlchemyVehicleIdAllocator(session).next_id() == "VEH-0028"

    async def test_exact_and_case_varied_mark_search_agree(self, seeded):
        async with seeded.get_session() as session:
            service = VehicleQueryService(SQLAlchemyVehicleRepository(session), SQLAlchemyCatalogRepository(session))

            exact = await service.list_vehicles(search_query("Toyota"))
            varied = await service.list_vehicles(search_query("yOT"))

        exact_ids = {v.vehicle_id for v in exact.vehicles}
        assert exact_ids == {v.vehicle_id for v in varied.vehicles} == {"VEH-0001", "VEH-0016"}

    async def test_identifier_matches_kept_when_a_mark_also_matches(self, seeded):
        async with seeded.get_session() as session:
            session.add(MarkRecord(name="VEH Imports"))

        async with seeded.get_session() as session:
            service = VehicleQueryService(SQLAlchemyVehicleRepository(session), SQLAlchemyCatalogRepository(session))

            page = await service.list_vehicles(search_query("veh"))

        assert page.pagination.total_items == 25


class TestSQLAlchemyCatalogRepository:
    """Test cases for catalog queries."""

    async def test_marks_sorted(self, seeded):
        async with seeded.get_session() as session:
            marks = await SQLAlchemyCatalogRepository(session).list_marks()

        names = [m.name for m in marks]
        assert names == sorted(names)
        assert len(names) == 15

    async def test_marks_with_models(self, seeded):
        async with seeded.get_session() as session:
            marks = await SQLAlchemyCatalogRepository(session).list_marks_with_models()

        assert all(len(m.models) == 10 for m in marks)

    async def test_name_search_is_case_insensitive(self, seeded):
        async with seeded.get_session() as session:
            catalog = SQLAlchemyCatalogRepository(session)

            assert len(await catalog.find_mark_ids_by_name("TOYO")) == 1
            assert len(await catalog.find_model_ids_by_name("model ")) == 7
            assert await catalog.find_mark_ids_by_name("_") == set()

    async def test_unknown_mark(self, seeded):
        async with seeded.get_session() as session:
            catalog = SQLAlchemyCatalogRepository(session)

            assert await catalog.list_models_by_mark(uuid4()) == []
            assert await catalog.get_mark(uuid4()) is None


class TestSQLAlchemyUserRepository:
    """Test cases for user storage."""

    async def test_add_and_lookup(self, database):
        async with database.get_session() as session:
            repository = SQLAlchemyUserRepository(session)
            user = await repository.add(User(email="Someone@Example.com", password_hash="h"))

            assert (await repository.find_by_email("someone@example.com")).id == user.id
            assert await repository.count() == 1

    async def test_duplicate_email(self, seeded):
        async with seeded.get_session() as session:
            with pytest.raises(ConflictError):
                await SQLAlchemyUserRepository(session).add(User(email=ADMIN_EMAIL, password_hash="h"))

    async def test_reset_token_round_trip(self, seeded):
        async with seeded.get_session() as session:
            repository = SQLAlchemyUserRepository(session)
            user = await repository.find_by_email(ADMIN_EMAIL)
            user.start_password_reset("reset-token", timedelta(hours=1))
            await repository.update(user)

        async with seeded.get_session() as session:
            found = await SQLAlchemyUserRepository(session).find_by_reset_token("reset-token")

        assert found.email == ADMIN_EMAIL
        assert found.reset_token_valid("reset-token")


class TestServiceFactory:
    """Test cases for the database-backed service wiring."""

    async def test_create_vehicle_commits(self, tmp_path):
        settings = Settings(_env_file=None, database_url=f"sqlite+aiosqlite:///{tmp_path / 'factory.db'}")
        factory = ServiceFactory(settings)
        await factory.initialize()
        try:
            await factory.database_manager.create_tables()
            async with factory.database_manager.get_session() as session:
                await seed_database(session, vehicle_count=2)

            async with factory.database_manager.get_session() as session:
                toyota, corolla = await toyota_corolla(session)
                creator = await admin_id(session)

            async with factory.get_vehicle_service() as vehicle_service:
                created = await vehicle_service.create_vehicle(
                    {"mark": str(toyota.id), "model": str(corolla.id), "year": 2020}, creator
                )

            async with factory.get_dashboard_service() as dashboard_service:
                metrics = await dashboard_service.get_metrics()
        finally:
            await factory.shutdown()

        assert created.vehicle_id == "VEH-0003"
        assert metrics.total_vehicles == 3
