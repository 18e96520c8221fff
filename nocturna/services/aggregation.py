"""
Derived values over a vigil's embedded collections.

Everything here is a pure function of its arguments and is recomputed on
every read. Nothing computed here is written back onto the vigil.
"""

from collections import Counter
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from pydantic import BaseModel

from nocturna.models.domain.base import ZERO, Money
from nocturna.models.domain.member_domain import MemberStatus
from nocturna.models.domain.payment_domain import Payment, PaymentKind
from nocturna.models.domain.vigil_domain import AttendanceEntry, GuardSlot, Vigil


class FinanceTotals(BaseModel):
    monthly_fees: Money = ZERO
    overdue_fees: Money = ZERO
    extra_donations: Money = ZERO
    total: Money = ZERO


class SlotCoverage(BaseModel):
    block_id: str
    block_label: str
    slot_id: str
    start_time: str
    end_time: str
    duration_minutes: int
    first_choir: int
    second_choir: int

    @property
    def covered(self) -> bool:
        return self.first_choir > 0 or self.second_choir > 0


class LedgerBalance(BaseModel):
    paid: Money = ZERO
    owed: Money = ZERO
    outstanding: Money = ZERO
    credit: Money = ZERO


class VigilSummary(BaseModel):
    vigil_id: str | None
    state: str
    total_entries: int
    total_present: int
    attendance_rate: float
    total_money_collected: Money
    finance: FinanceTotals
    duration_hours: float
    average_stay_hours: float
    guard_slots: int
    uncovered_slots: int
    torch_bearers: int
    mass_helpers: int


def total_present(vigil: Vigil) -> int:
    return sum(1 for entry in vigil.attendance if entry.present)


def finance_totals(vigil: Vigil) -> FinanceTotals:
    monthly = sum((e.finance.monthly_fee for e in vigil.attendance), ZERO)
    overdue = sum((e.finance.overdue_fee for e in vigil.attendance), ZERO)
    donations = sum((e.finance.extra_donation for e in vigil.attendance), ZERO)
    return FinanceTotals(
        monthly_fees=monthly,
        overdue_fees=overdue,
        extra_donations=donations,
        total=monthly + overdue + donations,
    )


def total_money_collected(vigil: Vigil) -> Decimal:
    """Sum of every fee and donation recorded on the vigil, present or not."""
    return sum((entry.finance.total for entry in vigil.attendance), ZERO)


def attendance_rate(vigil: Vigil) -> float:
    """Share of seeded members marked present, 0.0 for an empty list."""
    if not vigil.attendance:
        return 0.0
    return round(total_present(vigil) / len(vigil.attendance), 4)


def present_by_status(
    vigil: Vigil, statuses: Mapping[str, MemberStatus]
) -> dict[MemberStatus, int]:
    """
    Count present members per status.

    Args:
        vigil: The vigil whose attendance is counted
        statuses: Member id -> current status; ids missing from it are skipped
    """
    counts = Counter(
        statuses[entry.member_id]
        for entry in vigil.attendance
        if entry.present and entry.member_id in statuses
    )
    return {status: counts.get(status, 0) for status in MemberStatus}


def stay_hours(entry: AttendanceEntry) -> float:
    """Hours between arrival and departure; 0.0 until both are recorded."""
    if entry.arrived_at is None or entry.left_at is None:
        return 0.0
    return round((entry.left_at - entry.arrived_at).total_seconds() / 3600, 2)


def average_stay_hours(vigil: Vigil) -> float:
    """Mean stay over the entries that have both times, 0.0 when none do."""
    stays = [stay_hours(e) for e in vigil.attendance if e.arrived_at and e.left_at]
    if not stays:
        return 0.0
    return round(sum(stays) / len(stays), 2)


def _parse_clock(value: str) -> time:
    hours, minutes = (int(part) for part in value.split(":"))
    return time(hour=hours, minute=minutes)


def shift_duration_minutes(slot: GuardSlot, on: date | None = None) -> int:
    """
    Length of a guard slot in minutes.

    Both ends are read as wall-clock times on ``on`` (the vigil's date).
    An end earlier than the start is taken on the following day, so
    23:30-00:30 lasts 60 minutes. Equal ends give 0.
    """
    day = on or date.today()
    start = datetime.combine(day, _parse_clock(slot.start_time))
    end = datetime.combine(day, _parse_clock(slot.end_time))
    if end < start:
        end += timedelta(days=1)
    return int((end - start).total_seconds() // 60)


def vigil_duration_hours(vigil: Vigil) -> float:
    return round((vigil.end_at - vigil.start_at).total_seconds() / 3600, 2)


def guard_coverage(vigil: Vigil) -> list[SlotCoverage]:
    vigil_date = vigil.start_at.date()
    return [
        SlotCoverage(
            block_id=block.id,
            block_label=block.label,
            slot_id=slot.id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            duration_minutes=shift_duration_minutes(slot, vigil_date),
            first_choir=len(slot.first_choir),
            second_choir=len(slot.second_choir),
        )
        for block in vigil.guard_schedule
        for slot in block.slots
    ]


def summarize(vigil: Vigil) -> VigilSummary:
    coverage = guard_coverage(vigil)
    finance = finance_totals(vigil)
    return VigilSummary(
        vigil_id=vigil.id,
        state=vigil.state.value,
        total_entries=len(vigil.attendance),
        total_present=total_present(vigil),
        attendance_rate=attendance_rate(vigil),
        total_money_collected=finance.total,
        finance=finance,
        duration_hours=vigil_duration_hours(vigil),
        average_stay_hours=average_stay_hours(vigil),
        guard_slots=len(coverage),
        uncovered_slots=sum(1 for slot in coverage if not slot.covered),
        torch_bearers=len(vigil.special_roles.torch_bearers),
        mass_helpers=len(vigil.special_roles.mass_helpers),
    )


def ledger_balance(payments: list[Payment]) -> LedgerBalance:
    """
    A member's standing from their fee ledger.

    ``outstanding`` is what is still owed once payments are set against
    debts; ``credit`` is what was paid beyond them. At most one is non-zero.
    """
    paid = sum((p.amount for p in payments if p.kind == PaymentKind.PAYMENT), ZERO)
    owed = sum((p.amount for p in payments if p.kind == PaymentKind.DEBT), ZERO)
    return LedgerBalance(
        paid=paid,
        owed=owed,
        outstanding=max(owed - paid, ZERO),
        credit=max(paid - owed, ZERO),
    )
