"""Race schemas for CRUD operations"""

import re
from datetime import datetime, timezone
from uuid import UUID

from pydantic import (
    AnyUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)

# Field order matters: validation errors report the first failing field in this order.
REQUIRED_FIELDS = ("name", "date", "url")
OPTIONAL_FIELDS = ("source", "location", "distance", "description")
PREMIUM_FIELDS = ("level", "surface", "weather")
RACE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS + PREMIUM_FIELDS

FIELD_MESSAGES = {
    "name": "Race name is required",
    "date": "Invalid date, expected an ISO-8601 datetime",
    "url": "Invalid URL",
}

_url_adapter = TypeAdapter(AnyUrl)

# Date and time are both required; seconds, fraction and offset are optional
ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{1,6})?)?(Z|[+-]\d{2}:\d{2})?$"
)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC; naive input is taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class RaceFields(BaseModel):
    """Validated race payload.

    Creates validate the request body directly. Partial updates validate the
    stored record merged with the patch, so only touched fields can fail.
    """

    # Lengths match the columns in app/models/race.py
    name: str = Field(..., min_length=1, max_length=255)
    date: datetime
    url: str = Field(..., max_length=2048)
    source: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=255)
    distance: str | None = Field(None, max_length=100)
    description: str | None = None
    level: str | None = Field(None, max_length=100)
    surface: str | None = Field(None, max_length=100)
    weather: str | None = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Race name is required")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def date_is_iso_string(cls, value):
        # Stored values come back as datetimes; request input must be an ISO-8601 string
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not ISO_DATETIME.match(value.strip()):
            raise ValueError("Invalid date, expected an ISO-8601 datetime")
        return value.strip()

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, value: datetime) -> datetime:
        return to_utc_naive(value)

    @field_validator("url")
    @classmethod
    def url_well_formed(cls, value: str) -> str:
        # Parsed for validation only; the caller's spelling is what gets stored
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            raise ValueError("Invalid URL")
        return value

    def to_columns(self, fields=RACE_FIELDS) -> dict:
        """Column values for the given fields."""
        return {field: getattr(self, field) for field in fields}


class RaceFilters(BaseModel):
    """List query parameters"""

    search: str | None = None
    source: str | None = None
    level: str | None = None
    surface: str | None = None
    weather: str | None = None

    @field_validator("*")
    @classmethod
    def blank_as_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def premium(self) -> dict:
        return {
            field: getattr(self, field)
            for field in PREMIUM_FIELDS
            if getattr(self, field) is not None
        }

    def without_premium(self) -> "RaceFilters":
        return self.model_copy(update={field: None for field in PREMIUM_FIELDS})


class RaceResponse(BaseModel):
    """Race response"""
    id: UUID
    name: str
    date: datetime
    url: str
    source: str | None
    location: str | None
    distance: str | None
    description: str | None
    level: str | None
    surface: str | None
    weather: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("date", "created_at", "updated_at")
    def serialize_utc(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")


class RaceEnvelope(BaseModel):
    """Single race wrapper"""
    race: RaceResponse


class RaceListResponse(BaseModel):
    """List of a user's races"""
    races: list[RaceResponse]


class DeleteResponse(BaseModel):
    success: bool = True
