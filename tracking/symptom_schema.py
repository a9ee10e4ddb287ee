from __future__ import annotations

import datetime as dt
import re
from typing import Any, List, Mapping, Optional, Union
from uuid import uuid4

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic import ValidationError as PydanticValidationError

from tracking.errors import ValidationError

__all__ = [
    "SymptomFields",
    "SymptomInput",
    "SymptomRecord",
    "new_record_id",
    "split_labels",
    "validate_symptom_input",
]

MIN_DATE = dt.date(1900, 1, 1)
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 2000
LABEL_MAX_LENGTH = 100
MAX_LABELS = 50

# Full calendar date, optionally followed by a time part.
_CALENDAR_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}(?:[T ].*)?")


def new_record_id() -> str:
    return str(uuid4())


def split_labels(value: Union[str, List[str], None]) -> List[str]:
    """Turn a comma-delimited string or a list into trimmed, non-empty labels."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ValueError("labels must be strings")
        parts = list(value)
    else:
        raise ValueError("expected a comma-separated string or a list of strings")
    return [part.strip() for part in parts if part.strip()]


class SymptomFields(BaseModel):
    """Shape shared by user input and stored records.

    Only the invariants every stored record must keep live here: a non-empty
    name, a real calendar date and an intensity in [0, 10]. Limits that apply to
    fresh user input are added by :class:`SymptomInput`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symptom_name: str = Field(alias="symptomName", min_length=1)
    date: dt.date
    time: Optional[dt.time] = None
    intensity: int
    notes: Optional[str] = None
    triggers: List[str] = Field(default_factory=list)
    relief_measures: List[str] = Field(default_factory=list, alias="reliefMeasures")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str):
            text = v.strip()
            if not _CALENDAR_DATE_RE.fullmatch(text):
                raise ValueError("Date must be a calendar date in YYYY-MM-DD format.")
            try:
                return isoparse(text).date()
            except (ValueError, OverflowError) as exc:
                raise ValueError("Date must be a calendar date in YYYY-MM-DD format.") from exc
        return v

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str):
            text = v.strip()
            if not text:
                return None
            for fmt in ("%H:%M", "%H:%M:%S"):
                try:
                    return dt.datetime.strptime(text, fmt).time()
                except ValueError:
                    continue
            raise ValueError("Time must be in HH:MM format.")
        return v

    @field_validator("time")
    @classmethod
    def _truncate_time(cls, v: Optional[dt.time]) -> Optional[dt.time]:
        # Stored as HH:MM, so anything finer would not survive a reload.
        if v is None:
            return None
        return v.replace(second=0, microsecond=0, tzinfo=None)

    @field_validator("intensity", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Intensity must be a whole number.")
        return v

    @field_validator("intensity")
    @classmethod
    def _check_intensity(cls, v: int) -> int:
        if not 0 <= v <= 10:
            raise ValueError("Intensity must be between 0 and 10.")
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def _blank_notes(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("triggers", "relief_measures", mode="before")
    @classmethod
    def _parse_labels(cls, v: Any) -> List[str]:
        return split_labels(v)

    @field_serializer("time")
    def _serialize_time(self, v: Optional[dt.time]) -> Optional[str]:
        return v.strftime("%H:%M") if v is not None else None


class SymptomInput(SymptomFields):
    """Validated user input for a symptom log entry (everything except the id)."""

    @field_validator("symptom_name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if len(v) < NAME_MIN_LENGTH:
            raise ValueError(f"Symptom name must be at least {NAME_MIN_LENGTH} characters.")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Symptom name must be at most {NAME_MAX_LENGTH} characters.")
        return v

    @field_validator("date")
    @classmethod
    def _check_date_range(cls, v: dt.date) -> dt.date:
        if v < MIN_DATE:
            raise ValueError(f"Date cannot be earlier than {MIN_DATE.isoformat()}.")
        if v > dt.date.today():
            raise ValueError("Date cannot be in the future.")
        return v

    @field_validator("notes")
    @classmethod
    def _check_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > NOTES_MAX_LENGTH:
            raise ValueError(f"Notes must be at most {NOTES_MAX_LENGTH} characters.")
        return v

    @field_validator("triggers", "relief_measures")
    @classmethod
    def _check_labels(cls, v: List[str]) -> List[str]:
        if len(v) > MAX_LABELS:
            raise ValueError(f"at most {MAX_LABELS} labels are allowed")
        for label in v:
            if len(label) > LABEL_MAX_LENGTH:
                raise ValueError(f"labels must be at most {LABEL_MAX_LENGTH} characters")
        return v


class SymptomRecord(SymptomFields):
    """One logged symptom occurrence, as held by the store and its slot."""

    id: str = Field(min_length=1)

    @classmethod
    def from_input(cls, data: SymptomInput, record_id: str) -> "SymptomRecord":
        return cls.model_validate({**data.model_dump(), "id": record_id})

    def to_storage(self) -> dict:
        """Serialise to the persisted JSON shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _first_error(exc: PydanticValidationError) -> ValidationError:
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err.get("loc", ())) or "input"
    message = err.get("msg", "Invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return ValidationError(field, message)


def validate_symptom_input(raw: Union[Mapping[str, Any], BaseModel]) -> SymptomInput:
    """Validate raw user input, raising ``ValidationError`` naming the bad field."""
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    try:
        return SymptomInput.model_validate(raw)
    except PydanticValidationError as exc:
        raise _first_error(exc) from exc
