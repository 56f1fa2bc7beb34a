"""Unit tests for vehicle, catalog and user entities."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel
from fleet_manager.domain.entities.user import User
from fleet_manager.domain.entities.vehicle import Vehicle, VehicleStatus, max_vehicle_year
from fleet_manager.domain.value_objects.references import MarkRef, UserRef


def make_vehicle(**overrides) -> Vehicle:
    fields = dict(
        vehicle_id="VEH-0001",
        mark_id=uuid4(),
        model_id=uuid4(),
        year=2020,
        created_by_id=uuid4(),
    )
    fields.update(overrides)
    return Vehicle(**fields)


class TestVehicleStatus:
    """Test cases for VehicleStatus."""

    def test_values_in_declaration_order(self):
        assert VehicleStatus.values() == ["available", "maintenance", "service"]

    def test_parse_known_value(self):
        assert VehicleStatus.parse("maintenance") is VehicleStatus.MAINTENANCE

    def test_parse_is_case_sensitive(self):
        """Test status values must match exactly."""
        assert VehicleStatus.parse("AVAILABLE") is None
        assert VehicleStatus.parse("retired") is None
        assert VehicleStatus.parse(None) is None


class TestVehicle:
    """Test cases for Vehicle entity."""

    def test_vehicle_creation_defaults(self):
        """Test new vehicles are available and stamped by their creator."""
        creator = uuid4()
        vehicle = make_vehicle(created_by_id=creator)

        assert vehicle.status is VehicleStatus.AVAILABLE
        assert vehicle.updated_by_id == creator
        assert vehicle.created_at == vehicle.updated_at
        assert vehicle.created_at.tzinfo is not None

    def test_replace_details_stamps_modifier(self):
        vehicle = make_vehicle()
        editor = uuid4()
        new_mark, new_model = uuid4(), uuid4()
        before = vehicle.updated_at

        vehicle.replace_details(new_mark, new_model, 2021, VehicleStatus.SERVICE, editor)

        assert vehicle.mark_id == new_mark
        assert vehicle.model_id == new_model
        assert vehicle.year == 2021
        assert vehicle.status is VehicleStatus.SERVICE
        assert vehicle.updated_by_id == editor
        assert vehicle.updated_at >= before

    def test_replace_details_drops_stale_references(self):
        """Test resolved refs are cleared when the underlying ids change."""
        mark_id = uuid4()
        vehicle = make_vehicle(mark_id=mark_id, mark=MarkRef(id=mark_id, name="Toyota"))

        vehicle.replace_details(mark_id, uuid4(), 2020, VehicleStatus.AVAILABLE, vehicle.created_by_id)
        assert vehicle.mark == MarkRef(id=mark_id, name="Toyota")

        vehicle.replace_details(uuid4(), uuid4(), 2020, VehicleStatus.AVAILABLE, vehicle.created_by_id)
        assert vehicle.mark is None

    def test_change_status_keeps_other_fields(self):
        creator = uuid4()
        editor = uuid4()
        vehicle = make_vehicle(year=2018, created_by_id=creator, updated_by=UserRef(id=creator, email="a@b.co"))

        vehicle.change_status(VehicleStatus.MAINTENANCE, editor)

        assert vehicle.status is VehicleStatus.MAINTENANCE
        assert vehicle.year == 2018
        assert vehicle.updated_by_id == editor
        assert vehicle.updated_by is None

    def test_equality_by_internal_id(self):
        vehicle = make_vehicle()
        same = make_vehicle(id=vehicle.id, vehicle_id="VEH-0099")

        assert vehicle == same
        assert hash(vehicle) == hash(same)
        assert vehicle != make_vehicle()

    def test_str(self):
        assert str(make_vehicle(vehicle_id="VEH-0042")) == "Vehicle(VEH-0042, available)"

    def test_max_vehicle_year_is_next_year(self):
        assert max_vehicle_year(datetime(2024, 6, 1, tzinfo=timezone.utc)) == 2025


class TestCatalog:
    """Test cases for marks and models."""

    def test_model_belongs_to_mark(self):
        mark = VehicleMark("Toyota")
        model = VehicleModel("Corolla", mark_id=mark.id)

        assert model.belongs_to(mark.id)
        assert not model.belongs_to(uuid4())

    def test_with_models_returns_copy(self):
        mark = VehicleMark("Toyota")
        model = VehicleModel("Corolla", mark_id=mark.id)

        loaded = mark.with_models([model])

        assert loaded == mark
        assert loaded.models == [model]
        assert mark.models == []

    def test_refs(self):
        mark = VehicleMark("Ford")
        assert mark.to_ref() == MarkRef(id=mark.id, name="Ford")
        assert VehicleModel("Ranger", mark_id=mark.id).to_ref().name == "Ranger"


class TestUser:
    """Test cases for User entity."""

    def test_email_is_normalized(self):
        user = User(email="  Admin@Example.COM ", password_hash="x")
        assert user.email == "admin@example.com"

    def test_reset_token_lifecycle(self):
        """Test a reset token is valid until expiry and cleared by a password change."""
        user = User(email="a@b.co", password_hash="old")
        user.start_password_reset("tok", timedelta(hours=1))

        assert user.reset_token_valid("tok")
        assert not user.reset_token_valid("other")
        assert not user.reset_token_valid("tok", now=datetime.now(timezone.utc) + timedelta(hours=2))

        user.change_password_hash("new")

        assert user.password_hash == "new"
        assert user.reset_password_token is None
        assert not user.reset_token_valid("tok")

    def test_reset_token_valid_with_naive_expiry(self):
        """Test expiries read back without a timezone are treated as UTC."""
        expires = (datetime.now(timezone.utc) + timedelta(minutes=5)).replace(tzinfo=None)
        user = User(email="a@b.co", password_hash="x", reset_password_token="tok",
                    reset_password_expires=expires)

        assert user.reset_token_valid("tok")
