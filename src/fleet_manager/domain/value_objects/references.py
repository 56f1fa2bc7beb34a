"""Resolved references to entities a vehicle points at."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class MarkRef:
    """Display fields of a referenced vehicle mark."""
    id: UUID
    name: str


@dataclass(frozen=True)
class ModelRef:
    """Display fields of a referenced vehicle model."""
    id: UUID
    name: str


@dataclass(frozen=True)
class UserRef:
    """Display fields of a referenced user."""
    id: UUID
    email: str
