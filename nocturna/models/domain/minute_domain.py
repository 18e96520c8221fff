"""
Minute (acta) of the turn board meeting that closes a vigil.

A minute is a frozen snapshot: its attendance counters and finance summary
are computed once, when it is generated from the vigil, and never
recomputed afterwards. Only missing signatures may be filled in later.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, computed_field, field_validator

from nocturna.models.domain.base import ZERO, DocumentModel, Money
from nocturna.models.domain.vigil_domain import TIME_OF_DAY_PATTERN, normalize_clock


class MeetingSchedule(BaseModel):
    meeting_start: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    general_order_read: bool = False
    exposition: str | None = None
    reserved: str | None = None
    mass: str | None = None

    check_clock = field_validator("meeting_start")(normalize_clock)


class Readings(BaseModel):
    circulars: str | None = None
    correspondence: str | None = None


class TrialVigilCandidate(BaseModel):
    member_id: str | None = None
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    presented_by: str = Field(..., min_length=1)


class MembershipRequest(BaseModel):
    member_id: str | None = None
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class AddressChange(BaseModel):
    member_id: str | None = None
    new_address: str = Field(..., min_length=1)


class Discharge(BaseModel):
    member_id: str | None = None
    cause: str = Field(..., min_length=1)


class DistinctionProposal(BaseModel):
    member_id: str | None = None
    requested_on: date = Field(default_factory=lambda: datetime.now(UTC).date())


class Movements(BaseModel):
    trial_vigil: list[TrialVigilCandidate] = Field(default_factory=list)
    active_requests: list[MembershipRequest] = Field(default_factory=list)
    honorary_requests: list[MembershipRequest] = Field(default_factory=list)
    address_changes: list[AddressChange] = Field(default_factory=list)
    discharges: list[Discharge] = Field(default_factory=list)
    distinctions: list[DistinctionProposal] = Field(default_factory=list)


class ExtraordinaryAttendance(BaseModel):
    name: str = Field(..., min_length=1)
    section_or_turn: str = Field(..., min_length=1)
    authorization: str = Field(..., min_length=1)


class AttendanceStatistics(BaseModel):
    active: int = Field(0, ge=0)
    trial: int = Field(0, ge=0)
    communions: int = Field(0, ge=0)
    aspirants: int = Field(0, ge=0)
    extraordinary: int = Field(0, ge=0)
    extraordinary_detail: list[ExtraordinaryAttendance] = Field(default_factory=list)


class OtherConcept(BaseModel):
    concept: str = Field(..., min_length=1)
    amount: Money


class FinanceSummary(BaseModel):
    monthly_receipts: Money = ZERO
    overdue_receipts: Money = ZERO
    seeds: Money = ZERO
    honoraria: Money = ZERO
    other_items: list[OtherConcept] = Field(default_factory=list)
    total: Money = ZERO

    def calculated_total(self) -> Decimal:
        others = sum((item.amount for item in self.other_items), ZERO)
        return self.monthly_receipts + self.overdue_receipts + self.seeds + self.honoraria + others


class HonorariumDetail(BaseModel):
    name: str = Field(..., min_length=1)
    concept: str = Field(..., min_length=1)
    amount: Money


class Signatures(BaseModel):
    shift_chief: str | None = None
    secretary: str | None = None
    treasurer: str | None = None

    @property
    def complete(self) -> bool:
        return all((self.shift_chief, self.secretary, self.treasurer))


class Minute(DocumentModel):
    vigil_id: str
    section_id: str | None = None
    schedule: MeetingSchedule
    readings: Readings = Field(default_factory=Readings)
    movements: Movements = Field(default_factory=Movements)
    other_business: str | None = None
    attendance_stats: AttendanceStatistics = Field(default_factory=AttendanceStatistics)
    finance_summary: FinanceSummary = Field(default_factory=FinanceSummary)
    honoraria_detail: list[HonorariumDetail] = Field(default_factory=list)
    signatures: Signatures = Field(default_factory=Signatures)

    @computed_field
    @property
    def total_attendance(self) -> int:
        stats = self.attendance_stats
        return stats.active + stats.trial + stats.aspirants

    @computed_field
    @property
    def signatures_complete(self) -> bool:
        return self.signatures.complete

    @computed_field
    @property
    def calculated_total(self) -> Money:
        """Finance total recomputed from the line items; compare with ``finance_summary.total``."""
        return self.finance_summary.calculated_total()
