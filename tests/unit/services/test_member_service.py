import pytest

from nocturna.errors import NotFoundError, ValidationFailed, VersionConflictError
from nocturna.models.api.member_request import (
    MemberCreateRequest,
    MemberStatusChangeRequest,
    MemberUpdateRequest,
)
from nocturna.models.api.section_request import SectionCreateRequest, SectionUpdateRequest
from nocturna.models.domain.member_domain import MemberStatus
from nocturna.services import member_service, section_service


async def _section_id() -> str:
    section = await section_service.create_section(
        SectionCreateRequest(name="Sección Tercera", parish="San Pedro", turn_number=3, patron="San Pedro")
    )
    return section.id


async def test_create_defaults_to_active(fake_store):
    section_id = await _section_id()

    member = await member_service.create_member(MemberCreateRequest(full_name="Ana", section_id=section_id))

    assert member.status == MemberStatus.ACTIVE
    assert member.activation_date == member.join_date
    assert member.status_history == []


async def test_create_with_unknown_section_fails(fake_store):
    with pytest.raises(ValidationFailed):
        await member_service.create_member(MemberCreateRequest(full_name="Ana", section_id="missing"))


async def test_update_records_status_change_in_history(fake_store):
    member = await member_service.create_member(MemberCreateRequest(full_name="Ana"))

    updated = await member_service.update_member(
        member.id,
        MemberUpdateRequest(phone="600000000", status=MemberStatus.HONORARY, reason="Age", version=1),
    )

    assert updated.phone == "600000000"
    assert updated.status == MemberStatus.HONORARY
    assert len(updated.status_history) == 1
    assert updated.status_history[0].reason == "Age"
    assert updated.version == 2


async def test_update_rejects_blanking_required_field(fake_store):
    member = await member_service.create_member(MemberCreateRequest(full_name="Ana"))

    with pytest.raises(ValidationFailed):
        await member_service.update_member(member.id, MemberUpdateRequest(full_name=None))


async def test_change_status_appends_and_never_removes(fake_store):
    member = await member_service.create_member(MemberCreateRequest(full_name="Ana"))

    await member_service.change_status(member.id, MemberStatusChangeRequest(status=MemberStatus.INACTIVE))
    await member_service.change_status(member.id, MemberStatusChangeRequest(status=MemberStatus.ACTIVE))
    final = await member_service.change_status(
        member.id, MemberStatusChangeRequest(status=MemberStatus.DISCHARGED, authorized_by="Board")
    )

    assert [c.new_status for c in final.status_history] == [
        MemberStatus.INACTIVE,
        MemberStatus.ACTIVE,
        MemberStatus.DISCHARGED,
    ]
    assert final.status_history[-1].authorized_by == "Board"


async def test_change_to_same_status_writes_nothing(fake_store):
    member = await member_service.create_member(MemberCreateRequest(full_name="Ana"))
    writes = fake_store.writes

    result = await member_service.change_status(member.id, MemberStatusChangeRequest(status=MemberStatus.ACTIVE))

    assert result.status_history == []
    assert fake_store.writes == writes


async def test_stale_member_update_is_rejected(fake_store):
    member = await member_service.create_member(MemberCreateRequest(full_name="Ana"))
    await member_service.update_member(member.id, MemberUpdateRequest(notes="first"))

    with pytest.raises(VersionConflictError):
        await member_service.update_member(member.id, MemberUpdateRequest(notes="second", version=1))


async def test_list_filters_by_section_status_and_name(fake_store):
    section_id = await _section_id()
    await member_service.create_member(MemberCreateRequest(full_name="Ana Ruiz", section_id=section_id))
    await member_service.create_member(
        MemberCreateRequest(full_name="Anselmo Gil", section_id=section_id, status=MemberStatus.TRIAL)
    )
    await member_service.create_member(MemberCreateRequest(full_name="Ana Sanz"))

    in_section = await member_service.list_members(section_id=section_id)
    trial = await member_service.list_members(section_id=section_id, status=MemberStatus.TRIAL)
    named = await member_service.list_members(name_query="ana")

    assert [m.full_name for m in in_section] == ["Ana Ruiz", "Anselmo Gil"]
    assert [m.full_name for m in trial] == ["Anselmo Gil"]
    assert [m.full_name for m in named] == ["Ana Ruiz", "Ana Sanz"]


async def test_unknown_member_is_not_found(fake_store):
    with pytest.raises(NotFoundError):
        await member_service.get_member("missing")


async def test_section_update_and_listing(fake_store):
    section_id = await _section_id()

    updated = await section_service.update_section(section_id, SectionUpdateRequest(active=False, version=1))
    active = await section_service.list_sections(active=True)
    inactive = await section_service.list_sections(active=False)

    assert updated.active is False
    assert updated.name == "Sección Tercera"
    assert active == []
    assert [s.id for s in inactive] == [section_id]
