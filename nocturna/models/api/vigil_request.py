# nocturna/models/api/vigil_request.py

from pydantic import AwareDatetime, BaseModel, Field, field_validator, model_validator

from nocturna.models.api.common import VersionedRequest
from nocturna.models.domain.base import ZERO, Money
from nocturna.models.domain.vigil_domain import (
    TIME_OF_DAY_PATTERN,
    Choir,
    SpecialRole,
    normalize_clock,
    to_utc,
)


class VigilCreateRequest(BaseModel):
    section_id: str = Field(..., min_length=1)
    turn_number: int = Field(..., ge=1)
    start_at: AwareDatetime
    end_at: AwareDatetime
    officiant: str = Field(..., min_length=1, max_length=200)
    chaplain: str | None = None
    parish: str | None = None
    notes: str | None = None

    check_instants = field_validator("start_at", "end_at")(to_utc)

    @model_validator(mode="after")
    def _check_times(self) -> "VigilCreateRequest":
        if self.end_at < self.start_at:
            raise ValueError("end_at must not be earlier than start_at")
        return self


class AttendanceAddRequest(VersionedRequest):
    member_id: str = Field(..., min_length=1)


class AttendanceSetRequest(VersionedRequest):
    present: bool


class MemberFinanceRequest(VersionedRequest):
    """Overwrites the member's finance record; omitted amounts become 0."""

    monthly_fee: Money = ZERO
    overdue_fee: Money = ZERO
    extra_donation: Money = ZERO


class AttendanceTimesRequest(VersionedRequest):
    """Overwrites both times; an omitted time is cleared."""

    arrived_at: AwareDatetime | None = None
    left_at: AwareDatetime | None = None

    @model_validator(mode="after")
    def _check_stay(self) -> "AttendanceTimesRequest":
        if self.arrived_at and self.left_at and self.left_at < self.arrived_at:
            raise ValueError("left_at must not be earlier than arrived_at")
        return self


class GuardSlotRequest(BaseModel):
    start_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    end_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)

    check_clock = field_validator("start_time", "end_time")(normalize_clock)


class HourBlockRequest(VersionedRequest):
    label: str = Field(..., min_length=1, max_length=80, description='e.g. "De 10 a 11"')
    slots: list[GuardSlotRequest] = Field(default_factory=list)


class SplitBlockRequest(VersionedRequest):
    """
    Replace a block's slots with ``parts`` equal slots.

    The span defaults to the first slot's start and the last slot's end.
    """

    parts: int = Field(..., ge=2, le=12)
    start_time: str | None = Field(None, pattern=TIME_OF_DAY_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_OF_DAY_PATTERN)

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_clock(cls, value: str | None) -> str | None:
        return normalize_clock(value) if value is not None else None


class GuardAssignmentRequest(VersionedRequest):
    block_id: str
    slot_id: str
    choir: Choir
    member_id: str


class SpecialRoleRequest(VersionedRequest):
    role: SpecialRole
    member_id: str
