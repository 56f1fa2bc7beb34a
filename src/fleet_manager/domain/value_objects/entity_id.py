"""Parsing of internal entity identifiers taken from paths and bodies."""

from typing import Any
from uuid import UUID

from ..exceptions import InvalidArgumentError


def parse_entity_id(value: Any, message: str = "Invalid vehicle ID", field: str = "id") -> UUID:
    """Parse a path or body identifier, raising InvalidArgumentError when malformed."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidArgumentError(message, field=field)
