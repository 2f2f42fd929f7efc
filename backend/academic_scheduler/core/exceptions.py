from enum import Enum


class ErrorKind(str, Enum):
    not_found = "NotFound"
    validation_error = "ValidationError"
    duplicate_slot = "DuplicateSlot"
    availability_violation = "AvailabilityViolation"
    lecturer_conflict = "LecturerConflict"
    room_conflict = "RoomConflict"
    batch_errors = "BatchErrors"
    persistence_error = "PersistenceError"


class AppError(Exception):
    """Base class for all application exceptions."""
    kind: ErrorKind | None = None

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value if self.kind is not None else None,
            "message": self.message,
            "details": self.details,
        }


class ScheduleError(AppError):
    """Raised when a schedule placement breaks a scheduling rule."""
    kind = ErrorKind.validation_error
    status_code = 400

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=type(self).status_code, details=details)


class ResourceNotFoundError(ScheduleError):
    """Raised when a requested resource is not found."""
    kind = ErrorKind.not_found
    status_code = 404

    def __init__(self, resource_type: str, resource_id, details: dict = None):
        self.resource_type = resource_type
        self.resource_id = resource_id
        merged = {"resource": resource_type, "id": resource_id}
        merged.update(details or {})
        super().__init__(f"{resource_type} with id {resource_id} not found", details=merged)


class ScheduleValidationError(ScheduleError):
    kind = ErrorKind.validation_error
    status_code = 422


class DuplicateSlotError(ScheduleError):
    kind = ErrorKind.duplicate_slot
    status_code = 409


class AvailabilityViolationError(ScheduleError):
    kind = ErrorKind.availability_violation
    status_code = 400


class LecturerConflictError(ScheduleError):
    kind = ErrorKind.lecturer_conflict
    status_code = 409


class RoomConflictError(ScheduleError):
    kind = ErrorKind.room_conflict
    status_code = 409


class BatchErrors(ScheduleError):
    """Raised when one or more candidates of a bulk request are rejected.

    ``errors`` holds every problem found across the batch, each tagged with the
    candidate position so the caller can fix the whole request in one pass.
    """
    kind = ErrorKind.batch_errors
    status_code = 400

    def __init__(self, message: str, errors: list[dict]):
        self.errors = errors
        super().__init__(message, details={"errors": errors})


class PersistenceError(ScheduleError):
    """Raised when storage fails while committing validated placements."""
    kind = ErrorKind.persistence_error
    status_code = 500
