"""
Pydantic schemas for the pregnancy-tracking REST API.

Field names are snake_case in Python and camelCase on the wire. Timestamps
are parsed to timezone-aware datetimes; naive values are treated as UTC.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for every payload exchanged with the backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class ContractionStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class User(ApiModel):
    """Profile returned by the sign-in endpoint."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class SignInResponse(ApiModel):
    access_token: Optional[str] = None
    user: Optional[User] = None


class KickLog(ApiModel):
    id: str
    counter_id: str
    happened_at: UtcDatetime
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class KickSession(ApiModel):
    """A kick counting window of ``period`` hours."""

    id: str
    started_at: UtcDatetime
    finished_at: Optional[UtcDatetime] = None
    kick_count: int = Field(default=0, ge=0)
    period: int = Field(default=2, ge=1, le=24)
    is_active: bool = True
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
    kick_logs: Optional[List[KickLog]] = None

    @field_validator("period", mode="before")
    @classmethod
    def default_period(cls, value: object) -> object:
        return 2 if value is None else value

    @property
    def finished(self) -> bool:
        return self.finished_at is not None

    @property
    def status(self) -> str:
        return "finished" if self.finished else "active"

    @property
    def running(self) -> bool:
        """True while the session still accepts kicks and drives a countdown."""
        return self.is_active and not self.finished


class ContractionLog(ApiModel):
    id: str
    counter_id: str
    started_at: UtcDatetime
    ended_at: UtcDatetime
    duration: int = Field(ge=0)
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class ContractionSession(ApiModel):
    id: str
    user_id: Optional[str] = None
    status: ContractionStatus = ContractionStatus.ACTIVE
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
    contraction_logs: List[ContractionLog] = Field(default_factory=list)

    @field_validator("contraction_logs", mode="before")
    @classmethod
    def null_logs_as_empty(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def active(self) -> bool:
        return self.status is ContractionStatus.ACTIVE


class CreateKickSession(ApiModel):
    started_at: str
    period: Optional[int] = None


class CreateKickLog(ApiModel):
    counter_id: str
    happened_at: str


class CreateContractionSession(ApiModel):
    status: ContractionStatus = ContractionStatus.ACTIVE


class CreateContractionLog(ApiModel):
    counter_id: str
    started_at: str
    ended_at: str
    duration: int = Field(ge=0)


def to_ms(value: datetime) -> int:
    """Epoch milliseconds for a (possibly naive, then UTC) datetime."""
    aware = _as_utc(value)
    return int(round(aware.timestamp() * 1000))


def ms_to_iso(value: int) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    stamp = ms_to_datetime(value)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ms_to_datetime(value: int) -> datetime:
    seconds, millis = divmod(int(value), 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)


__all__ = [
    "ContractionLog",
    "ContractionSession",
    "ContractionStatus",
    "CreateContractionLog",
    "CreateContractionSession",
    "CreateKickLog",
    "CreateKickSession",
    "KickLog",
    "KickSession",
    "SignInResponse",
    "User",
    "ms_to_datetime",
    "ms_to_iso",
    "to_ms",
]
