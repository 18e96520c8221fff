"""
Vigil record: the working document of one overnight vigil.

Attendance, per-member finance, the guard schedule and special roles are all
embedded in the vigil and mutated in place while the vigil is open
(scheduled or in progress). Totals are never stored here; see
``nocturna.services.aggregation``.
"""

from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, Field, field_validator, model_validator

from nocturna.errors import ConflictError, InvalidStateTransitionError, NotFoundError
from nocturna.models.domain.base import ZERO, DocumentModel, Money

TIME_OF_DAY_PATTERN = r"^\d{1,2}:\d{2}$"


class VigilState(StrEnum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[VigilState, frozenset[VigilState]] = {
    VigilState.SCHEDULED: frozenset({VigilState.IN_PROGRESS, VigilState.CANCELLED}),
    VigilState.IN_PROGRESS: frozenset({VigilState.FINISHED, VigilState.CANCELLED}),
    VigilState.FINISHED: frozenset(),
    VigilState.CANCELLED: frozenset(),
}


def accepts_changes(state: VigilState) -> bool:
    """Open vigils accept attendance, finance and guard changes."""
    match state:
        case VigilState.SCHEDULED | VigilState.IN_PROGRESS:
            return True
        case VigilState.FINISHED | VigilState.CANCELLED:
            return False


class Choir(StrEnum):
    FIRST = "first"
    SECOND = "second"


class SpecialRole(StrEnum):
    TORCH_BEARER = "torch_bearer"
    MASS_HELPER = "mass_helper"


def normalize_clock(value: str) -> str:
    """Validate an "H:MM" or "HH:MM" time of day and return it as "HH:MM"."""
    hours, minutes = (int(part) for part in value.split(":"))
    if hours > 23 or minutes > 59:
        raise ValueError("time must be between 00:00 and 23:59")
    return f"{hours:02d}:{minutes:02d}"


def to_utc(value: datetime) -> datetime:
    """Store every instant in UTC so ISO strings sort chronologically."""
    return value.astimezone(UTC)


def _short_id() -> str:
    return uuid4().hex[:12]


class MemberFinance(BaseModel):
    monthly_fee: Money = ZERO
    overdue_fee: Money = ZERO
    extra_donation: Money = ZERO

    @property
    def total(self):
        return self.monthly_fee + self.overdue_fee + self.extra_donation


class AttendanceEntry(BaseModel):
    member_id: str
    present: bool = False
    arrival_order: int | None = Field(None, ge=1)
    finance: MemberFinance = Field(default_factory=MemberFinance)
    arrived_at: AwareDatetime | None = None
    left_at: AwareDatetime | None = None

    @model_validator(mode="after")
    def _check_stay(self) -> "AttendanceEntry":
        if self.arrived_at and self.left_at and self.left_at < self.arrived_at:
            raise ValueError("left_at must not be earlier than arrived_at")
        return self


class GuardSlot(BaseModel):
    id: str = Field(default_factory=_short_id)
    start_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    end_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    first_choir: list[str] = Field(default_factory=list)
    second_choir: list[str] = Field(default_factory=list)

    check_clock = field_validator("start_time", "end_time")(normalize_clock)

    def choir_members(self, choir: Choir) -> list[str]:
        match choir:
            case Choir.FIRST:
                return self.first_choir
            case Choir.SECOND:
                return self.second_choir


class HourBlock(BaseModel):
    id: str = Field(default_factory=_short_id)
    label: str = Field(..., min_length=1, description='e.g. "De 10 a 11"')
    slots: list[GuardSlot] = Field(default_factory=list)


class SpecialRoles(BaseModel):
    torch_bearers: list[str] = Field(default_factory=list)
    mass_helpers: list[str] = Field(default_factory=list)

    def members(self, role: SpecialRole) -> list[str]:
        match role:
            case SpecialRole.TORCH_BEARER:
                return self.torch_bearers
            case SpecialRole.MASS_HELPER:
                return self.mass_helpers


class Vigil(DocumentModel):
    section_id: str
    turn_number: int = Field(..., ge=1)
    start_at: AwareDatetime
    end_at: AwareDatetime
    officiant: str = Field(..., min_length=1)
    chaplain: str | None = None
    parish: str | None = None
    notes: str | None = None
    state: VigilState = VigilState.SCHEDULED
    attendance: list[AttendanceEntry] = Field(default_factory=list)
    guard_schedule: list[HourBlock] = Field(default_factory=list)
    special_roles: SpecialRoles = Field(default_factory=SpecialRoles)
    minute_id: str | None = None
    state_changed_at: datetime | None = None

    check_instants = field_validator("start_at", "end_at")(to_utc)

    @model_validator(mode="after")
    def _check_consistency(self) -> "Vigil":
        if self.end_at < self.start_at:
            raise ValueError("end_at must not be earlier than start_at")

        member_ids = [entry.member_id for entry in self.attendance]
        if len(member_ids) != len(set(member_ids)):
            raise ValueError("a member may appear only once in the attendance list")
        return self

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return accepts_changes(self.state)

    def transition_to(self, target: VigilState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(self.state.value, target.value)
        self.state = target
        self.state_changed_at = datetime.now(UTC)

    def ensure_open(self) -> None:
        if not self.is_open:
            raise ConflictError(f"Vigil is {self.state.value} and can no longer be changed")

    # ------------------------------------------------------------------
    # Attendance & finance
    # ------------------------------------------------------------------

    def entry_for(self, member_id: str) -> AttendanceEntry | None:
        return next((entry for entry in self.attendance if entry.member_id == member_id), None)

    def add_attendance(self, member_id: str) -> AttendanceEntry:
        if self.entry_for(member_id) is not None:
            raise ConflictError("Member is already on this vigil's attendance list")
        entry = AttendanceEntry(member_id=member_id)
        self.attendance.append(entry)
        return entry

    def set_attendance(self, member_id: str, present: bool) -> bool:
        """
        Mark a seeded member present or absent.

        Returns False without touching anything when the member has no entry.
        """
        entry = self.entry_for(member_id)
        if entry is None:
            return False

        if present and not entry.present:
            entry.arrival_order = self._next_arrival_order()
        elif not present:
            entry.arrival_order = None
        entry.present = present
        return True

    def toggle_attendance(self, member_id: str) -> bool:
        entry = self.entry_for(member_id)
        if entry is None:
            return False
        return self.set_attendance(member_id, not entry.present)

    def _next_arrival_order(self) -> int:
        orders = [entry.arrival_order for entry in self.attendance if entry.arrival_order]
        return max(orders, default=0) + 1

    def set_finance(self, member_id: str, finance: MemberFinance) -> None:
        entry = self.entry_for(member_id)
        if entry is None:
            raise NotFoundError("Member is not on this vigil's attendance list")
        entry.finance = finance

    def set_times(
        self, member_id: str, arrived_at: datetime | None, left_at: datetime | None
    ) -> None:
        """Record when a member arrived and left; ``None`` clears a time."""
        entry = self.entry_for(member_id)
        if entry is None:
            raise NotFoundError("Member is not on this vigil's attendance list")
        entry.arrived_at = arrived_at
        entry.left_at = left_at

    # ------------------------------------------------------------------
    # Guard schedule & special roles
    # ------------------------------------------------------------------

    def find_block(self, block_id: str) -> HourBlock:
        block = next((b for b in self.guard_schedule if b.id == block_id), None)
        if block is None:
            raise NotFoundError("Hour block not found")
        return block

    def find_slot(self, block_id: str, slot_id: str) -> GuardSlot:
        slot = next((s for s in self.find_block(block_id).slots if s.id == slot_id), None)
        if slot is None:
            raise NotFoundError("Guard slot not found")
        return slot

    def assign_guard(self, block_id: str, slot_id: str, choir: Choir, member_id: str) -> None:
        # Multiple assignments of one member are allowed on purpose
        self.find_slot(block_id, slot_id).choir_members(choir).append(member_id)

    def unassign_guard(self, block_id: str, slot_id: str, choir: Choir, member_id: str) -> bool:
        members = self.find_slot(block_id, slot_id).choir_members(choir)
        if member_id not in members:
            return False
        members.remove(member_id)
        return True

    def assign_special_role(self, role: SpecialRole, member_id: str) -> None:
        self.special_roles.members(role).append(member_id)

    def remove_special_role(self, role: SpecialRole, member_id: str) -> bool:
        members = self.special_roles.members(role)
        if member_id not in members:
            return False
        members.remove(member_id)
        return True
