from __future__ import annotations

import re
from typing import List, Optional

from typing_extensions import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TransportType = Literal["walk", "car"]
Direction = Literal["+", "-", "="]
Department = Literal["dept-A", "dept-B"]

_HOUR_RE = re.compile(r"^(?:[01]\d|2[0-3])$")
_MINUTE_RE = re.compile(r"^[0-5]\d$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_hour(value: Optional[str]) -> Optional[str]:
    if value is not None and not _HOUR_RE.match(value):
        raise ValueError("hour must be a two-digit value between 00 and 23")
    return value


def _check_minute(value: Optional[str]) -> Optional[str]:
    if value is not None and not _MINUTE_RE.match(value):
        raise ValueError("minute must be a two-digit value between 00 and 59")
    return value


def _check_main_person(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError("mainPerson must not be empty")
    return stripped


# ----------------------------------------------------------------------
# Stored records
# ----------------------------------------------------------------------
class DetailFields(CamelModel):
    hour: str = "00"
    minute: str = "00"
    main_person: str = ""
    participants_count: Optional[int] = None
    coordinates: Optional[str] = None
    green_count: Optional[int] = None
    yellow_count: Optional[int] = None
    red_count: Optional[int] = None
    link: Optional[str] = None
    comment: Optional[str] = None


class DetailRecord(DetailFields):
    id: int


class ActivityFields(CamelModel):
    hour: str = "00"
    minute: str = "00"
    main_person: str = ""
    participants_count: Optional[int] = None
    transport_type: Optional[TransportType] = None
    green_count: Optional[int] = None
    yellow_count: Optional[int] = None
    red_count: Optional[int] = None
    direction: Optional[Direction] = None
    coordinates: Optional[str] = None
    establishment: Optional[str] = None
    department: Optional[Department] = None
    link: Optional[str] = None
    comment: Optional[str] = None


class ActivityUpdate(CamelModel):
    """Partial activity changes; only explicitly set fields are merged."""

    hour: Optional[str] = None
    minute: Optional[str] = None
    main_person: Optional[str] = None
    participants_count: Optional[int] = None
    transport_type: Optional[TransportType] = None
    green_count: Optional[int] = None
    yellow_count: Optional[int] = None
    red_count: Optional[int] = None
    direction: Optional[Direction] = None
    coordinates: Optional[str] = None
    establishment: Optional[str] = None
    department: Optional[Department] = None
    link: Optional[str] = None
    comment: Optional[str] = None


class ActivityRecord(ActivityFields):
    id: int
    details: List[DetailRecord] = Field(default_factory=list)


# ----------------------------------------------------------------------
# Request models (validation happens here, not in the store)
# ----------------------------------------------------------------------
class ActivityCreateRequest(ActivityFields):
    main_person: str
    participants_count: Optional[int] = Field(default=None, ge=1)
    green_count: Optional[int] = Field(default=None, ge=0)
    yellow_count: Optional[int] = Field(default=None, ge=0)
    red_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("hour")
    @classmethod
    def _validate_hour(cls, value: Optional[str]) -> Optional[str]:
        return _check_hour(value)

    @field_validator("minute")
    @classmethod
    def _validate_minute(cls, value: Optional[str]) -> Optional[str]:
        return _check_minute(value)

    @field_validator("main_person")
    @classmethod
    def _validate_main_person(cls, value: Optional[str]) -> Optional[str]:
        return _check_main_person(value)


class ActivityUpdateRequest(ActivityUpdate):
    participants_count: Optional[int] = Field(default=None, ge=1)
    green_count: Optional[int] = Field(default=None, ge=0)
    yellow_count: Optional[int] = Field(default=None, ge=0)
    red_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("hour")
    @classmethod
    def _validate_hour(cls, value: Optional[str]) -> Optional[str]:
        return _check_hour(value)

    @field_validator("minute")
    @classmethod
    def _validate_minute(cls, value: Optional[str]) -> Optional[str]:
        return _check_minute(value)

    @field_validator("main_person")
    @classmethod
    def _validate_main_person(cls, value: Optional[str]) -> Optional[str]:
        return _check_main_person(value)


class DetailCreateRequest(DetailFields):
    participants_count: Optional[int] = Field(default=None, ge=1)
    green_count: Optional[int] = Field(default=None, ge=0)
    yellow_count: Optional[int] = Field(default=None, ge=0)
    red_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("hour")
    @classmethod
    def _validate_hour(cls, value: Optional[str]) -> Optional[str]:
        return _check_hour(value)

    @field_validator("minute")
    @classmethod
    def _validate_minute(cls, value: Optional[str]) -> Optional[str]:
        return _check_minute(value)


class TextPayload(BaseModel):
    text: str


class LinkResponse(BaseModel):
    link: str


# ----------------------------------------------------------------------
# Derived views
# ----------------------------------------------------------------------
class DirectionCounts(CamelModel):
    plus: int = 0
    minus: int = 0
    equals: int = 0


class AggregateStats(CamelModel):
    total: int = 0
    car_people: int = 0
    walk_people: int = 0
    directions: DirectionCounts = Field(default_factory=DirectionCounts)


class EstablishmentStat(CamelModel):
    establishment: str
    events: int = 0
    people: int = 0
    directions: DirectionCounts = Field(default_factory=DirectionCounts)


class StatsResponse(CamelModel):
    aggregate: AggregateStats
    establishments: List[EstablishmentStat]


# ----------------------------------------------------------------------
# Clipboard parsing
# ----------------------------------------------------------------------
class ParsedActivity(CamelModel):
    """Raw string fields recognised in pasted text; unset fields stay None."""

    time: Optional[str] = None
    link: Optional[str] = None
    main_person: Optional[str] = None
    participants_count: Optional[str] = None
    comment: Optional[str] = None
    coordinates: Optional[str] = None
    transport_type: Optional[str] = None
    green_count: Optional[str] = None
    yellow_count: Optional[str] = None
    red_count: Optional[str] = None
