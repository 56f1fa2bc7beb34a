"""Human-readable vehicle identifiers (``VEH-NNNN``)."""

import re
from typing import Optional

VEHICLE_ID_PREFIX = "VEH-"
VEHICLE_ID_DIGITS = 4

_VEHICLE_ID_PATTERN = re.compile(r"VEH-(\d+)")


def format_vehicle_id(number: int) -> str:
    """Format a sequence number as a vehicle identifier.

    The numeric part is zero-padded to four digits and widens past 9999,
    e.g. ``VEH-0025`` or ``VEH-10000``.
    """
    if number < 1:
        raise ValueError("Vehicle sequence numbers start at 1")
    return f"{VEHICLE_ID_PREFIX}{number:0{VEHICLE_ID_DIGITS}d}"


def parse_vehicle_id_number(vehicle_id: Optional[str]) -> Optional[int]:
    """Extract the numeric suffix of an identifier, or None if it has none."""
    if not vehicle_id:
        return None
    match = _VEHICLE_ID_PATTERN.search(vehicle_id)
    if not match:
        return None
    return int(match.group(1))


def next_vehicle_id(last_vehicle_id: Optional[str]) -> str:
    """Identifier following ``last_vehicle_id``; ``VEH-0001`` when there is none."""
    last_number = parse_vehicle_id_number(last_vehicle_id) or 0
    return format_vehicle_id(last_number + 1)


def vehicle_id_from_index(index: int) -> str:
    """Identifier for a zero-based position, used when seeding."""
    return format_vehicle_id(index + 1)
