from decimal import Decimal

import pytest
from pydantic import ValidationError

from nocturna.models.domain.minute_domain import (
    AttendanceStatistics,
    FinanceSummary,
    MeetingSchedule,
    Minute,
    OtherConcept,
    Signatures,
)


def _minute(**overrides) -> Minute:
    fields = {
        "vigil_id": "vigil-1",
        "schedule": MeetingSchedule(meeting_start="21:30"),
    }
    fields.update(overrides)
    return Minute(**fields)


def test_total_attendance_counts_active_trial_and_aspirants():
    minute = _minute(
        attendance_stats=AttendanceStatistics(active=7, trial=2, aspirants=1, communions=9, extraordinary=3)
    )

    assert minute.total_attendance == 10


def test_calculated_total_includes_other_items():
    summary = FinanceSummary(
        monthly_receipts=Decimal("40"),
        overdue_receipts=Decimal("10"),
        seeds=Decimal("5.50"),
        honoraria=Decimal("20"),
        other_items=[OtherConcept(concept="Flowers", amount=Decimal("4.50"))],
    )
    minute = _minute(finance_summary=summary)

    assert minute.calculated_total == Decimal("80.00")
    assert minute.model_dump(mode="json")["calculated_total"] == "80.00"


def test_stored_total_is_independent_of_calculated_total():
    minute = _minute(finance_summary=FinanceSummary(monthly_receipts=Decimal("5"), total=Decimal("7")))

    assert minute.finance_summary.total == Decimal("7")
    assert minute.calculated_total == Decimal("5")


def test_signatures_complete_needs_all_three():
    assert _minute().signatures_complete is False
    partial = _minute(signatures=Signatures(shift_chief="m1", secretary="m2"))
    assert partial.signatures_complete is False
    full = _minute(signatures=Signatures(shift_chief="m1", secretary="m2", treasurer="m3"))
    assert full.signatures_complete is True


def test_computed_fields_are_not_persisted():
    document = _minute().to_document()

    assert "total_attendance" not in document
    assert "calculated_total" not in document
    assert "signatures_complete" not in document
    assert "id" not in document
    assert document["vigil_id"] == "vigil-1"


def test_meeting_start_is_normalized():
    assert MeetingSchedule(meeting_start="9:05").meeting_start == "09:05"


@pytest.mark.parametrize("meeting_start", ["99:99", "24:00", "21:60"])
def test_meeting_start_out_of_range_is_rejected(meeting_start):
    with pytest.raises(ValidationError):
        MeetingSchedule(meeting_start=meeting_start)
