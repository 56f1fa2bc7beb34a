"""SQLAlchemy repository implementations."""

from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import and_, case, delete, func, or_, select, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from fleet_manager.application.ports.repositories import (
    CatalogRepository,
    UserRepository,
    VehicleIdAllocator,
    VehicleRepository,
)
from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel
from fleet_manager.domain.entities.user import User
from fleet_manager.domain.entities.vehicle import Vehicle
from fleet_manager.domain.exceptions import ConflictError, DuplicateVehicleIdError
from fleet_manager.domain.value_objects.references import MarkRef, ModelRef, UserRef
from fleet_manager.domain.value_objects.vehicle_id import (
    VEHICLE_ID_PREFIX,
    format_vehicle_id,
    parse_vehicle_id_number,
)
from fleet_manager.domain.value_objects.vehicle_query import SortField, VehicleCriteria
from fleet_manager.infrastructure.database.models import (
    CounterRecord,
    MarkRecord,
    ModelRecord,
    UserRecord,
    VehicleRecord,
)
from fleet_manager.infrastructure.logging import get_logger, log_database_operation

VEHICLE_ID_COUNTER = "vehicle_id"

_SORT_COLUMNS = {
    SortField.VEHICLE_ID: VehicleRecord.vehicle_id,
    SortField.YEAR: VehicleRecord.year,
    SortField.STATUS: VehicleRecord.status,
    SortField.CREATED_AT: VehicleRecord.created_at,
    SortField.UPDATED_AT: VehicleRecord.updated_at,
}


def _contains_ignore_case(column, term: str):
    """Literal, case-insensitive substring match; LIKE wildcards in term are escaped."""
    return func.lower(column).contains(term.lower(), autoescape=True)


class SQLAlchemyVehicleRepository(VehicleRepository):
    """SQLAlchemy implementation of vehicle repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def find_page(
        self,
        criteria: VehicleCriteria,
        sort_field: SortField,
        descending: bool,
        skip: int,
        limit: int
    ) -> List[Vehicle]:
        column = _SORT_COLUMNS.get(sort_field)
        if column is None:
            raise ValueError(f"Cannot sort vehicles in storage by {sort_field.value}")

        order = column.desc() if descending else column.asc()
        stmt = (
            select(VehicleRecord)
            .where(self._where(criteria))
            .order_by(order, VehicleRecord.id.asc())
            .offset(skip)
            .limit(limit)
        )
        log_database_operation(self._logger, "SELECT", "vehicles", skip=skip, limit=limit)
        result = await self._session.execute(stmt)
        return [self._record_to_entity(record) for record in result.scalars().all()]

    async def count(self, criteria: VehicleCriteria) -> int:
        stmt = select(func.count()).select_from(VehicleRecord).where(self._where(criteria))
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def find_by_id(self, vehicle_id: UUID) -> Optional[Vehicle]:
        stmt = (
            select(VehicleRecord)
            .where(VehicleRecord.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            return None
        return self._record_to_entity(record)

    async def add(self, vehicle: Vehicle) -> Vehicle:
        record = VehicleRecord(
            id=vehicle.id,
            vehicle_id=vehicle.vehicle_id,
            mark_id=vehicle.mark_id,
            model_id=vehicle.model_id,
            year=vehicle.year,
            status=vehicle.status,
            created_by_id=vehicle.created_by_id,
            updated_by_id=vehicle.updated_by_id,
            created_at=vehicle.created_at,
            updated_at=vehicle.updated_at
        )
        self._session.add(record)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            if "vehicle_id" in str(e.orig):
                raise DuplicateVehicleIdError(vehicle.vehicle_id) from e
            raise

        log_database_operation(self._logger, "INSERT", "vehicles", vehicle_id=vehicle.vehicle_id)
        return await self.find_by_id(vehicle.id)

    async def update(self, vehicle: Vehicle) -> Vehicle:
        stmt = (
            update(VehicleRecord)
            .where(VehicleRecord.id == vehicle.id)
            .values(
                mark_id=vehicle.mark_id,
                model_id=vehicle.model_id,
                year=vehicle.year,
                status=vehicle.status,
                updated_by_id=vehicle.updated_by_id,
                updated_at=vehicle.updated_at
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        log_database_operation(self._logger, "UPDATE", "vehicles", vehicle_id=vehicle.vehicle_id)
        return await self.find_by_id(vehicle.id)

    async def delete(self, vehicle_id: UUID) -> bool:
        stmt = delete(VehicleRecord).where(VehicleRecord.id == vehicle_id)
        result = await self._session.execute(stmt)
        log_database_operation(self._logger, "DELETE", "vehicles", id=str(vehicle_id))
        return result.rowcount > 0

    @staticmethod
    def _where(criteria: VehicleCriteria):
        clauses = []
        if criteria.search_term is not None:
            clauses.append(or_(
                VehicleRecord.mark_id.in_(list(criteria.mark_ids)),
                VehicleRecord.model_id.in_(list(criteria.model_ids)),
                _contains_ignore_case(VehicleRecord.vehicle_id, criteria.search_term)
            ))
        if criteria.year_from is not None:
            clauses.append(VehicleRecord.year >= criteria.year_from)
        if criteria.year_to is not None:
            clauses.append(VehicleRecord.year <= criteria.year_to)
        if criteria.status is not None:
            clauses.append(VehicleRecord.status == criteria.status)
        return and_(true(), *clauses)

    @staticmethod
    def _record_to_entity(record: VehicleRecord) -> Vehicle:
        return Vehicle(
            id=record.id,
            vehicle_id=record.vehicle_id,
            mark_id=record.mark_id,
            model_id=record.model_id,
            year=record.year,
            status=record.status,
            created_by_id=record.created_by_id,
            updated_by_id=record.updated_by_id,
            created_at=record.created_at,
            updated_at=record.updated_at,
            mark=MarkRef(id=record.mark.id, name=record.mark.name) if record.mark else None,
            model=ModelRef(id=record.model.id, name=record.model.name) if record.model else None,
            created_by=UserRef(id=record.created_by.id, email=record.created_by.email) if record.created_by else None,
            updated_by=UserRef(id=record.updated_by.id, email=record.updated_by.email) if record.updated_by else None
        )


class SQLAlchemyVehicleIdAllocator(VehicleIdAllocator):
    """Allocates identifiers from a counter row incremented in a single UPDATE."""

    def __init__(self, session: AsyncSession, counter_name: str = VEHICLE_ID_COUNTER):
        self._session = session
        self._counter_name = counter_name
        self._logger = get_logger(__name__)

    async def next_id(self) -> str:
        stmt = (
            update(CounterRecord)
            .where(CounterRecord.name == self._counter_name)
            .values(value=CounterRecord.value + 1)
            .returning(CounterRecord.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        value = result.scalar_one_or_none()

        if value is None:
            value = await self._largest_suffix() + 1
            self._session.add(CounterRecord(name=self._counter_name, value=value))
            try:
                await self._session.flush()
            except IntegrityError as e:
                # Another request seeded the counter first
                await self._session.rollback()
                raise DuplicateVehicleIdError(format_vehicle_id(value)) from e
            self._logger.info(f"Seeded vehicle identifier counter at {value}")

        return format_vehicle_id(value)

    async def synchronize(self) -> None:
        largest = await self._largest_suffix()
        stmt = (
            update(CounterRecord)
            .where(CounterRecord.name == self._counter_name)
            # Never moves backwards
            .values(value=case((CounterRecord.value < largest, largest), else_=CounterRecord.value))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            self._session.add(CounterRecord(name=self._counter_name, value=largest))
            await self._session.flush()
        self._logger.info(f"Vehicle identifier counter synchronized to at least {largest}")

    async def _largest_suffix(self) -> int:
        # Longer identifiers first, so VEH-10000 ranks above VEH-9999
        stmt = (
            select(VehicleRecord.vehicle_id)
            .where(VehicleRecord.vehicle_id.startswith(VEHICLE_ID_PREFIX, autoescape=True))
            .order_by(func.length(VehicleRecord.vehicle_id).desc(), VehicleRecord.vehicle_id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return parse_vehicle_id_number(result.scalar_one_or_none()) or 0


class SQLAlchemyCatalogRepository(CatalogRepository):
    """SQLAlchemy implementation of the mark/model catalog."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def find_mark_ids_by_name(self, term: str) -> Set[UUID]:
        stmt = select(MarkRecord.id).where(_contains_ignore_case(MarkRecord.name, term))
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def find_model_ids_by_name(self, term: str) -> Set[UUID]:
        stmt = select(ModelRecord.id).where(_contains_ignore_case(ModelRecord.name, term))
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def get_mark(self, mark_id: UUID) -> Optional[VehicleMark]:
        record = await self._session.get(MarkRecord, mark_id)
        return self._mark_to_entity(record) if record else None

    async def get_model(self, model_id: UUID) -> Optional[VehicleModel]:
        record = await self._session.get(ModelRecord, model_id)
        return self._model_to_entity(record) if record else None

    async def list_marks(self) -> List[VehicleMark]:
        result = await self._session.execute(select(MarkRecord).order_by(MarkRecord.name))
        return [self._mark_to_entity(record) for record in result.scalars().all()]

    async def list_models_by_mark(self, mark_id: UUID) -> List[VehicleModel]:
        stmt = (
            select(ModelRecord)
            .options(joinedload(ModelRecord.mark))
            .where(ModelRecord.mark_id == mark_id)
            .order_by(ModelRecord.name)
        )
        result = await self._session.execute(stmt)
        return [self._model_to_entity(record, with_mark=True) for record in result.scalars().all()]

    async def list_marks_with_models(self) -> List[VehicleMark]:
        stmt = select(MarkRecord).options(selectinload(MarkRecord.models)).order_by(MarkRecord.name)
        result = await self._session.execute(stmt)
        marks = []
        for record in result.scalars().all():
            models = [self._model_to_entity(model) for model in record.models]
            marks.append(self._mark_to_entity(record).with_models(models))
        return marks

    @staticmethod
    def _mark_to_entity(record: MarkRecord) -> VehicleMark:
        return VehicleMark(name=record.name, id=record.id, created_at=record.created_at)

    @staticmethod
    def _model_to_entity(record: ModelRecord, with_mark: bool = False) -> VehicleModel:
        mark = MarkRef(id=record.mark.id, name=record.mark.name) if with_mark else None
        return VehicleModel(
            name=record.name,
            mark_id=record.mark_id,
            id=record.id,
            created_at=record.created_at,
            mark=mark
        )


class SQLAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        record = await self._session.get(UserRecord, user_id)
        return self._record_to_entity(record) if record else None

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(UserRecord).where(UserRecord.email == email.strip().lower())
        result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        return self._record_to_entity(record) if record else None

    async def find_by_reset_token(self, token: str) -> Optional[User]:
        stmt = select(UserRecord).where(UserRecord.reset_password_token == token)
        result = await self._session.execute(stmt)
        record = result.scalars().first()
        return self._record_to_entity(record) if record else None

    async def add(self, user: User) -> User:
        self._session.add(UserRecord(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            reset_password_token=user.reset_password_token,
            reset_password_expires=user.reset_password_expires,
            created_at=user.created_at,
            updated_at=user.updated_at
        ))
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            raise ConflictError("Email is already registered", field="email") from e
        log_database_operation(self._logger, "INSERT", "users", user_id=str(user.id))
        return user

    async def update(self, user: User) -> User:
        record = await self._session.get(UserRecord, user.id)
        if record is None:
            raise LookupError(f"User {user.id} does not exist")
        record.email = user.email
        record.password_hash = user.password_hash
        record.reset_password_token = user.reset_password_token
        record.reset_password_expires = user.reset_password_expires
        record.updated_at = user.updated_at
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            raise ConflictError("Email is already registered", field="email") from e
        log_database_operation(self._logger, "UPDATE", "users", user_id=str(user.id))
        return user

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(UserRecord))
        return result.scalar_one()

    @staticmethod
    def _record_to_entity(record: UserRecord) -> User:
        return User(
            id=record.id,
            email=record.email,
            password_hash=record.password_hash,
            reset_password_token=record.reset_password_token,
            reset_password_expires=record.reset_password_expires,
            created_at=record.created_at,
            updated_at=record.updated_at
        )
