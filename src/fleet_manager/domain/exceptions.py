"""Domain exception taxonomy for the fleet management system."""

from typing import List, Optional


class FleetManagementError(Exception):
    """Base class for errors raised by the fleet management core."""

    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidArgumentError(FleetManagementError, ValueError):
    """Raised for malformed identifiers, bad enum values or out-of-range paging."""

    status_code = 400


class ValidationError(FleetManagementError, ValueError):
    """Raised when a domain rule is violated.

    ``errors`` itemizes every violated rule when more than one was detected.
    """

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.errors = list(errors) if errors else []


class AuthenticationError(FleetManagementError):
    """Raised when a bearer credential is missing, invalid or expired."""

    status_code = 401


class NotFoundError(FleetManagementError, LookupError):
    """Raised when no record exists for a given identifier."""

    status_code = 404


class ConflictError(FleetManagementError):
    """Raised when a unique key would be duplicated."""

    status_code = 409


class DuplicateVehicleIdError(ConflictError):
    """Raised by storage when an allocated vehicle identifier is already taken."""

    def __init__(self, vehicle_id: str):
        super().__init__(f"Vehicle identifier already exists: {vehicle_id}", field="vehicleId")
        self.vehicle_id = vehicle_id
