"""
Member registry service.

Members are never deleted. Every status change, whether through
``change_status`` or a partial update, appends to the member's history.
"""

from datetime import UTC, datetime

from nocturna.errors import NotFoundError, ValidationFailed
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.member_request import (
    MemberCreateRequest,
    MemberStatusChangeRequest,
    MemberUpdateRequest,
)
from nocturna.models.domain.member_domain import Member, MemberStatus
from nocturna.repositories.member_repository import MemberRepository
from nocturna.repositories.section_repository import SectionRepository
from nocturna.services.common import apply_changes, check_version

logger = get_logger(__name__)


async def _ensure_section(section_id: str | None) -> None:
    if section_id and await SectionRepository.get(section_id) is None:
        raise ValidationFailed.for_field("section_id", "Section not found")


async def create_member(data: MemberCreateRequest) -> Member:
    await _ensure_section(data.section_id)

    fields = data.model_dump(exclude_none=True)
    member = Member(**fields)
    now = datetime.now(UTC)
    if member.status == MemberStatus.TRIAL:
        member.trial_date = now.date()
    if member.status == MemberStatus.ACTIVE:
        member.activation_date = member.join_date

    created = await MemberRepository.create(member)
    logger.info(
        "Member registered",
        member_id=created.id,
        section_id=created.section_id,
        status=created.status.value,
    )
    return created


async def get_member(member_id: str) -> Member:
    member = await MemberRepository.get(member_id)
    if member is None:
        raise NotFoundError("Member not found")
    return member


async def list_members(
    section_id: str | None = None,
    status: MemberStatus | None = None,
    name_query: str | None = None,
) -> list[Member]:
    return await MemberRepository.list_members(section_id, status, name_query)


async def update_member(member_id: str, data: MemberUpdateRequest) -> Member:
    member = await get_member(member_id)
    check_version(member, MemberRepository.collection.name, data.version)

    changes = data.model_dump(exclude_unset=True, exclude={"version", "status", "reason", "authorized_by"})
    if "section_id" in changes:
        await _ensure_section(changes["section_id"])

    updated = apply_changes(member, changes)
    if data.status is not None:
        updated.change_status(data.status, reason=data.reason, authorized_by=data.authorized_by)

    saved = await MemberRepository.save(updated)
    logger.info("Member updated", member_id=member_id, fields=sorted(changes), status=saved.status.value)
    return saved


async def change_status(member_id: str, data: MemberStatusChangeRequest) -> Member:
    member = await get_member(member_id)
    check_version(member, MemberRepository.collection.name, data.version)

    if not member.change_status(data.status, reason=data.reason, authorized_by=data.authorized_by):
        logger.info("Member status unchanged", member_id=member_id, status=data.status.value)
        return member

    saved = await MemberRepository.save(member)
    previous = saved.status_history[-1].previous_status
    logger.info(
        "Member status changed",
        member_id=member_id,
        previous_status=previous.value,
        new_status=saved.status.value,
    )
    return saved
