"""SQLAlchemy database models."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

from fleet_manager.domain.entities.vehicle import VehicleStatus

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(Base):
    """SQLAlchemy model for users."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid4)

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    # Password recovery
    reset_password_token = Column(String(128), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, email='{self.email}')>"


class MarkRecord(Base):
    """SQLAlchemy model for vehicle marks."""

    __tablename__ = "vehicle_marks"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    models = relationship("ModelRecord", back_populates="mark", order_by="ModelRecord.name")

    def __repr__(self) -> str:
        return f"<MarkRecord(id={self.id}, name='{self.name}')>"


class ModelRecord(Base):
    """SQLAlchemy model for vehicle models."""

    __tablename__ = "vehicle_models"
    __table_args__ = (
        UniqueConstraint("name", "mark_id", name="uq_vehicle_models_name_mark"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False, index=True)
    mark_id = Column(Uuid, ForeignKey("vehicle_marks.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    mark = relationship("MarkRecord", back_populates="models")

    def __repr__(self) -> str:
        return f"<ModelRecord(id={self.id}, name='{self.name}', mark_id={self.mark_id})>"


class VehicleRecord(Base):
    """SQLAlchemy model for vehicles."""

    __tablename__ = "vehicles"
    __table_args__ = (
        UniqueConstraint("vehicle_id", name="uq_vehicles_vehicle_id"),
        Index("ix_vehicles_created_at", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    vehicle_id = Column(String(20), nullable=False)

    mark_id = Column(Uuid, ForeignKey("vehicle_marks.id"), nullable=False, index=True)
    model_id = Column(Uuid, ForeignKey("vehicle_models.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    status = Column(
        SQLEnum(
            VehicleStatus,
            name="vehicle_status",
            native_enum=False,
            length=20,
            values_callable=lambda e: [s.value for s in e]
        ),
        nullable=False,
        default=VehicleStatus.AVAILABLE,
        index=True
    )

    # Audit
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    updated_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    mark = relationship("MarkRecord", lazy="joined")
    model = relationship("ModelRecord", lazy="joined")
    created_by = relationship("UserRecord", foreign_keys=[created_by_id], lazy="joined")
    updated_by = relationship("UserRecord", foreign_keys=[updated_by_id], lazy="joined")

    def __repr__(self) -> str:
        return f"<VehicleRecord(id={self.id}, vehicle_id='{self.vehicle_id}', status='{self.status}')>"


class CounterRecord(Base):
    """Named monotonic counter, used to allocate vehicle identifiers."""

    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<CounterRecord(name='{self.name}', value={self.value})>"
