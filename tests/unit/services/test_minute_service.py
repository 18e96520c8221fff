from datetime import UTC, datetime
from decimal import Decimal

import pytest

from nocturna.errors import (
    ConflictError,
    InvalidStateTransitionError,
    MinuteAlreadyExistsError,
    NotFoundError,
    VersionConflictError,
)
from nocturna.models.api.common import VersionedRequest
from nocturna.models.api.minute_request import MinuteGenerateRequest, SignaturesRequest
from nocturna.models.api.vigil_request import (
    AttendanceAddRequest,
    AttendanceSetRequest,
    MemberFinanceRequest,
    VigilCreateRequest,
)
from nocturna.models.domain.member_domain import Member, MemberStatus
from nocturna.models.domain.minute_domain import (
    ExtraordinaryAttendance,
    HonorariumDetail,
    MeetingSchedule,
    OtherConcept,
)
from nocturna.models.domain.section_domain import Section
from nocturna.models.domain.vigil_domain import VigilState
from nocturna.repositories.member_repository import MemberRepository
from nocturna.repositories.section_repository import SectionRepository
from nocturna.services import minute_service, vigil_service


async def _prepared_vigil():
    section = await SectionRepository.create(
        Section(name="Sección Segunda", parish="Santa Ana", turn_number=2, patron="Santa Ana")
    )
    members = {
        "active": await MemberRepository.create(Member(full_name="Ana", section_id=section.id)),
        "trial": await MemberRepository.create(
            Member(full_name="Blas", section_id=section.id, status=MemberStatus.TRIAL)
        ),
        "aspirant": await MemberRepository.create(
            Member(full_name="Ciro", section_id=section.id, status=MemberStatus.ASPIRANT)
        ),
        "absent": await MemberRepository.create(Member(full_name="Delia", section_id=section.id)),
    }
    vigil = await vigil_service.create_vigil(
        VigilCreateRequest(
            section_id=section.id,
            turn_number=2,
            start_at=datetime(2026, 7, 4, 22, 0, tzinfo=UTC),
            end_at=datetime(2026, 7, 5, 6, 0, tzinfo=UTC),
            officiant="Fr. Ramón",
        )
    )
    for key, member in members.items():
        await vigil_service.add_attendance_entry(vigil.id, AttendanceAddRequest(member_id=member.id))
        if key != "absent":
            await vigil_service.set_attendance(vigil.id, member.id, AttendanceSetRequest(present=True))

    await vigil_service.set_member_finance(
        vigil.id,
        members["active"].id,
        MemberFinanceRequest(monthly_fee=Decimal("10"), overdue_fee=Decimal("5")),
    )
    await vigil_service.set_member_finance(
        vigil.id, members["absent"].id, MemberFinanceRequest(extra_donation=Decimal("3.50"))
    )
    return await vigil_service.get_vigil(vigil.id), members


def _request(**overrides) -> MinuteGenerateRequest:
    fields = {"schedule": MeetingSchedule(meeting_start="21:30", general_order_read=True)}
    fields.update(overrides)
    return MinuteGenerateRequest(**fields)


async def test_generate_snapshots_counts_and_money(fake_store):
    vigil, members = await _prepared_vigil()

    minute = await minute_service.generate_minute(
        vigil.id,
        _request(
            communions=4,
            extraordinary_detail=[
                ExtraordinaryAttendance(name="Eloy", section_or_turn="Turno 5", authorization="President")
            ],
            honoraria_detail=[HonorariumDetail(name="Flora", concept="Annual", amount=Decimal("20"))],
            other_items=[OtherConcept(concept="Candles", amount=Decimal("1.50"))],
        ),
    )

    stats = minute.attendance_stats
    assert (stats.active, stats.trial, stats.aspirants) == (1, 1, 1)
    assert stats.communions == 4
    assert stats.extraordinary == 1
    assert minute.total_attendance == 3

    finance = minute.finance_summary
    assert finance.monthly_receipts == Decimal("10")
    assert finance.overdue_receipts == Decimal("5")
    assert finance.seeds == Decimal("3.50")
    assert finance.honoraria == Decimal("20")
    assert finance.total == Decimal("40.00")
    assert minute.calculated_total == finance.total

    closed = await vigil_service.get_vigil(vigil.id)
    assert closed.state == VigilState.FINISHED
    assert closed.minute_id == minute.id
    assert minute.section_id == vigil.section_id


async def test_minute_is_frozen_after_generation(fake_store):
    vigil, _ = await _prepared_vigil()
    minute = await minute_service.generate_minute(vigil.id, _request())

    stored = await minute_service.get_minute(minute.id)

    assert stored.finance_summary.total == minute.finance_summary.total
    assert stored.attendance_stats == minute.attendance_stats


async def test_second_minute_for_vigil_is_conflict(fake_store):
    vigil, _ = await _prepared_vigil()
    await minute_service.generate_minute(vigil.id, _request())

    with pytest.raises(MinuteAlreadyExistsError):
        await minute_service.generate_minute(vigil.id, _request())

    assert len(await minute_service.list_minutes(vigil.section_id)) == 1


async def test_store_level_duplicate_is_conflict_and_rolls_back(fake_store, monkeypatch):
    vigil, _ = await _prepared_vigil()
    await minute_service.generate_minute(vigil.id, _request())
    finished = await vigil_service.get_vigil(vigil.id)

    # Simulate a racing request that read the vigil before the first minute landed
    async def no_minute_yet(vigil_id):
        return None

    monkeypatch.setattr(
        "nocturna.services.minute_service.MinuteRepository.get_by_vigil", no_minute_yet
    )
    reopened = finished.model_copy(update={"minute_id": None, "state": VigilState.IN_PROGRESS})
    monkeypatch.setattr(
        "nocturna.services.minute_service.VigilRepository.get",
        lambda vigil_id: _async_value(reopened),
    )

    with pytest.raises(MinuteAlreadyExistsError):
        await minute_service.generate_minute(vigil.id, _request())

    assert fake_store.collections["vigils"][vigil.id]["version"] == finished.version
    assert len(fake_store.collections["minutes"]) == 1


async def _async_value(value):
    return value


async def test_generate_on_scheduled_vigil_passes_through_in_progress(fake_store):
    vigil, _ = await _prepared_vigil()
    assert vigil.state == VigilState.SCHEDULED

    await minute_service.generate_minute(vigil.id, _request())

    assert (await vigil_service.get_vigil(vigil.id)).state == VigilState.FINISHED


async def test_generate_on_cancelled_vigil_is_rejected(fake_store):
    vigil, _ = await _prepared_vigil()
    await vigil_service.cancel_vigil(vigil.id, VersionedRequest())

    with pytest.raises(InvalidStateTransitionError):
        await minute_service.generate_minute(vigil.id, _request())


async def test_generate_with_stale_version_is_rejected(fake_store):
    vigil, _ = await _prepared_vigil()

    with pytest.raises(VersionConflictError):
        await minute_service.generate_minute(vigil.id, _request(version=vigil.version - 1))


async def test_sign_fills_missing_signatures_only(fake_store):
    vigil, members = await _prepared_vigil()
    minute = await minute_service.generate_minute(vigil.id, _request())
    assert minute.signatures_complete is False

    signed = await minute_service.sign_minute(
        minute.id,
        SignaturesRequest(shift_chief=members["active"].id, secretary=members["trial"].id),
    )
    complete = await minute_service.sign_minute(
        minute.id, SignaturesRequest(treasurer=members["absent"].id, version=signed.version)
    )

    assert complete.signatures_complete is True
    assert complete.finance_summary.total == minute.finance_summary.total

    with pytest.raises(ConflictError):
        await minute_service.sign_minute(minute.id, SignaturesRequest(shift_chief=members["trial"].id))


async def test_sign_with_unknown_member_is_not_found(fake_store):
    vigil, _ = await _prepared_vigil()
    minute = await minute_service.generate_minute(vigil.id, _request())

    with pytest.raises(NotFoundError):
        await minute_service.sign_minute(minute.id, SignaturesRequest(secretary="ghost"))


async def test_get_minute_for_vigil(fake_store):
    vigil, _ = await _prepared_vigil()
    minute = await minute_service.generate_minute(vigil.id, _request())

    assert (await minute_service.get_minute_for_vigil(vigil.id)).id == minute.id
    with pytest.raises(NotFoundError):
        await minute_service.get_minute_for_vigil("missing")
