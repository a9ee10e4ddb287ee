"""Errors raised by the symptom tracking core."""


class TrackingError(Exception):
    """Base class for symptom tracking failures."""


class ValidationError(TrackingError, ValueError):
    """User input was rejected; ``field`` names the offending input."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFoundError(TrackingError, KeyError):
    """An operation referenced a record id that is not in the store."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(record_id)

    def __str__(self) -> str:
        return f"No symptom record with id {self.record_id!r}"


class PersistenceError(TrackingError):
    """Reading or writing the persistence slot failed."""
