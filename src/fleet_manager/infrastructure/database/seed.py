"""Development seed: catalog, an admin user and sample vehicles."""

from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_manager.domain.entities.vehicle import VehicleStatus
from fleet_manager.domain.value_objects.auth import PasswordHasher
from fleet_manager.domain.value_objects.vehicle_id import vehicle_id_from_index
from fleet_manager.infrastructure.database.models import (
    CounterRecord,
    MarkRecord,
    ModelRecord,
    UserRecord,
    VehicleRecord,
)
from fleet_manager.infrastructure.logging import get_logger

logger = get_logger(__name__)

ADMIN_EMAIL = "admin@ridery.com"
ADMIN_PASSWORD = "admin123"
SAMPLE_VEHICLE_COUNT = 25

CATALOG: Dict[str, List[str]] = {
    "Toyota": ["Corolla", "Camry", "RAV4", "Highlander", "Prius", "Tacoma", "Tundra", "4Runner", "Sienna", "Yaris"],
    "Honda": ["Civic", "Accord", "CR-V", "Pilot", "Odyssey", "HR-V", "Ridgeline", "Passport", "Fit", "Insight"],
    "Ford": ["F-150", "Mustang", "Explorer", "Escape", "Edge", "Expedition", "Ranger", "Bronco", "Fusion", "Focus"],
    "Chevrolet": ["Silverado", "Equinox", "Tahoe", "Suburban", "Traverse", "Malibu", "Camaro", "Corvette",
                  "Trailblazer", "Blazer"],
    "Nissan": ["Altima", "Sentra", "Rogue", "Pathfinder", "Armada", "Frontier", "Titan", "Murano", "Maxima", "Versa"],
    "Volkswagen": ["Jetta", "Passat", "Tiguan", "Atlas", "Golf", "Arteon", "Taos", "ID.4", "Beetle", "CC"],
    "BMW": ["3 Series", "5 Series", "7 Series", "X3", "X5", "X7", "1 Series", "4 Series", "X1", "X6"],
    "Mercedes-Benz": ["C-Class", "E-Class", "S-Class", "GLC", "GLE", "GLS", "A-Class", "B-Class", "GLA", "GLB"],
    "Audi": ["A3", "A4", "A6", "A8", "Q3", "Q5", "Q7", "Q8", "TT", "e-tron"],
    "Hyundai": ["Elantra", "Sonata", "Tucson", "Santa Fe", "Palisade", "Kona", "Venue", "Veloster", "Genesis", "Ioniq"],
    "Kia": ["Forte", "Optima", "Sorento", "Sportage", "Telluride", "Soul", "Rio", "Stinger", "Niro", "Carnival"],
    "Mazda": ["Mazda3", "Mazda6", "CX-5", "CX-9", "CX-30", "CX-3", "MX-5 Miata", "CX-50", "Tribute", "B-Series"],
    "Subaru": ["Outback", "Forester", "Crosstrek", "Ascent", "Impreza", "Legacy", "WRX", "BRZ", "Tribeca", "Baja"],
    "Jeep": ["Wrangler", "Grand Cherokee", "Cherokee", "Compass", "Renegade", "Gladiator", "Wagoneer",
             "Grand Wagoneer", "Patriot", "Liberty"],
    "Tesla": ["Model S", "Model 3", "Model X", "Model Y", "Roadster", "Cybertruck", "Semi", "Model 3 Performance",
              "Model S Plaid", "Model X Plaid"],
}


@dataclass(frozen=True)
class SeedSummary:
    users: int
    marks: int
    models: int
    vehicles: int


async def seed_database(session: AsyncSession, vehicle_count: int = SAMPLE_VEHICLE_COUNT) -> SeedSummary:
    """Replace all data with the development dataset.

    Vehicles cycle through marks, models, years 2015-2024 and statuses, and
    take identifiers VEH-0001 onwards. The identifier counter is reset so the
    next created vehicle continues after the seeded ones.
    """
    for model in (VehicleRecord, ModelRecord, MarkRecord, UserRecord, CounterRecord):
        await session.execute(delete(model))
    logger.info("Cleared existing data")

    admin = UserRecord(email=ADMIN_EMAIL, password_hash=PasswordHasher.create_password_hash(ADMIN_PASSWORD))
    session.add(admin)

    marks: Dict[str, MarkRecord] = {}
    models: Dict[str, List[ModelRecord]] = {}
    for mark_name, model_names in CATALOG.items():
        mark = MarkRecord(name=mark_name)
        marks[mark_name] = mark
        models[mark_name] = [ModelRecord(name=name, mark=mark) for name in model_names]
        session.add(mark)
        session.add_all(models[mark_name])
    await session.flush()

    statuses = list(VehicleStatus)
    mark_names = list(CATALOG)
    for index in range(vehicle_count):
        mark_name = mark_names[index % len(mark_names)]
        mark_models = models[mark_name]
        session.add(VehicleRecord(
            vehicle_id=vehicle_id_from_index(index),
            mark_id=marks[mark_name].id,
            model_id=mark_models[index % len(mark_models)].id,
            year=2015 + (index % 10),
            status=statuses[index % len(statuses)],
            created_by_id=admin.id,
            updated_by_id=admin.id
        ))
    session.add(CounterRecord(name="vehicle_id", value=vehicle_count))
    await session.flush()

    summary = SeedSummary(
        users=await _count(session, UserRecord),
        marks=await _count(session, MarkRecord),
        models=await _count(session, ModelRecord),
        vehicles=await _count(session, VehicleRecord)
    )
    logger.info(
        f"Seed completed: {summary.users} users, {summary.marks} marks, "
        f"{summary.models} models, {summary.vehicles} vehicles"
    )
    return summary


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()
