# nocturna/models/api/minute_request.py
from pydantic import BaseModel, Field

from nocturna.models.api.common import VersionedRequest
from nocturna.models.domain.minute_domain import (
    ExtraordinaryAttendance,
    HonorariumDetail,
    MeetingSchedule,
    Movements,
    OtherConcept,
    Readings,
    Signatures,
)


class SignaturesRequest(VersionedRequest):
    """Member ids of the signers; omitted signatures are left as they are."""

    shift_chief: str | None = None
    secretary: str | None = None
    treasurer: str | None = None


class MinuteGenerateRequest(VersionedRequest):
    """
    What the board records by hand when closing a vigil.

    Attendance counts and fee totals are not accepted here; they are taken
    from the vigil itself. ``extraordinary`` defaults to the number of
    itemized extraordinary attendees.
    """

    schedule: MeetingSchedule
    readings: Readings = Field(default_factory=Readings)
    movements: Movements = Field(default_factory=Movements)
    other_business: str | None = None
    communions: int = Field(0, ge=0)
    extraordinary: int | None = Field(None, ge=0)
    extraordinary_detail: list[ExtraordinaryAttendance] = Field(default_factory=list)
    other_items: list[OtherConcept] = Field(default_factory=list)
    honoraria_detail: list[HonorariumDetail] = Field(default_factory=list)
    signatures: Signatures = Field(default_factory=Signatures)
