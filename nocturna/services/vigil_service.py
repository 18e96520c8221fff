"""
Vigil service: lifecycle, attendance, finance and guard schedule.

Every mutation follows the same shape: load the vigil, check the caller's
expected version, refuse if the vigil is closed, mutate the embedded
collections, then write back with a version-checked replace. Two editors
working from the same copy cannot both win; the second gets a 409.
"""

from datetime import date, datetime, timedelta

from nocturna.errors import ConflictError, NotFoundError, ValidationFailed
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.common import VersionedRequest
from nocturna.models.api.vigil_request import (
    AttendanceAddRequest,
    AttendanceSetRequest,
    AttendanceTimesRequest,
    GuardAssignmentRequest,
    HourBlockRequest,
    MemberFinanceRequest,
    SpecialRoleRequest,
    SplitBlockRequest,
    VigilCreateRequest,
)
from nocturna.models.domain.member_domain import keeps_vigil_turn
from nocturna.models.domain.vigil_domain import (
    Choir,
    GuardSlot,
    HourBlock,
    MemberFinance,
    SpecialRole,
    Vigil,
    VigilState,
)
from nocturna.repositories.member_repository import MemberRepository
from nocturna.repositories.section_repository import SectionRepository
from nocturna.repositories.vigil_repository import VigilRepository
from nocturna.services.aggregation import VigilSummary, shift_duration_minutes, summarize
from nocturna.services.common import check_version

logger = get_logger(__name__)

_COLLECTION = VigilRepository.collection.name


async def create_vigil(data: VigilCreateRequest) -> Vigil:
    if await SectionRepository.get(data.section_id) is None:
        raise ValidationFailed.for_field("section_id", "Section not found")

    vigil = await VigilRepository.create(Vigil(**data.model_dump()))
    logger.info(
        "Vigil created",
        vigil_id=vigil.id,
        section_id=vigil.section_id,
        turn_number=vigil.turn_number,
        start_at=vigil.start_at.isoformat(),
    )
    return vigil


async def get_vigil(vigil_id: str) -> Vigil:
    vigil = await VigilRepository.get(vigil_id)
    if vigil is None:
        raise NotFoundError("Vigil not found")
    return vigil


async def list_vigils(section_id: str | None = None, state: VigilState | None = None) -> list[Vigil]:
    return await VigilRepository.list_vigils(section_id, state)


async def get_summary(vigil_id: str) -> VigilSummary:
    return summarize(await get_vigil(vigil_id))


async def _load_for_update(vigil_id: str, version: int | None, *, require_open: bool = True) -> Vigil:
    vigil = await get_vigil(vigil_id)
    check_version(vigil, _COLLECTION, version)
    if require_open:
        vigil.ensure_open()
    return vigil


async def _save(vigil: Vigil, event: str, **fields) -> Vigil:
    saved = await VigilRepository.save(vigil)
    logger.info(event, vigil_id=saved.id, version=saved.version, **fields)
    return saved


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------


async def start_vigil(vigil_id: str, data: VersionedRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version, require_open=False)
    vigil.transition_to(VigilState.IN_PROGRESS)
    return await _save(vigil, "Vigil started")


async def cancel_vigil(vigil_id: str, data: VersionedRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version, require_open=False)
    previous = vigil.state
    vigil.transition_to(VigilState.CANCELLED)
    return await _save(vigil, "Vigil cancelled", previous_state=previous.value)


# ----------------------------------------------------------------------
# Attendance & finance
# ----------------------------------------------------------------------


async def seed_attendance(vigil_id: str, data: VersionedRequest) -> Vigil:
    """
    Add an absent entry for every active or trial member of the vigil's section.

    Members already on the list keep their entry untouched, so seeding twice
    changes nothing.
    """
    vigil = await _load_for_update(vigil_id, data.version)

    members = await MemberRepository.list_members(section_id=vigil.section_id)
    turn_members = sorted(
        (m for m in members if keeps_vigil_turn(m.status)),
        key=lambda m: (m.vigil_order is None, m.vigil_order or 0, m.full_name),
    )

    added = 0
    for member in turn_members:
        if vigil.entry_for(member.id) is None:
            vigil.add_attendance(member.id)
            added += 1

    if not added:
        return vigil
    return await _save(vigil, "Attendance seeded", added=added)


async def add_attendance_entry(vigil_id: str, data: AttendanceAddRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    if await MemberRepository.get(data.member_id) is None:
        raise NotFoundError("Member not found")

    vigil.add_attendance(data.member_id)
    return await _save(vigil, "Attendance entry added", member_id=data.member_id)


async def set_attendance(vigil_id: str, member_id: str, data: AttendanceSetRequest) -> Vigil:
    """
    Mark a member present or absent.

    A member without an entry is ignored and the vigil is returned as it was.
    """
    vigil = await _load_for_update(vigil_id, data.version)
    if not vigil.set_attendance(member_id, data.present):
        logger.info("Attendance change ignored, member not seeded", vigil_id=vigil_id, member_id=member_id)
        return vigil
    return await _save(vigil, "Attendance recorded", member_id=member_id, present=data.present)


async def toggle_attendance(vigil_id: str, member_id: str, data: VersionedRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    if not vigil.toggle_attendance(member_id):
        logger.info("Attendance toggle ignored, member not seeded", vigil_id=vigil_id, member_id=member_id)
        return vigil
    present = vigil.entry_for(member_id).present
    return await _save(vigil, "Attendance toggled", member_id=member_id, present=present)


async def set_member_finance(vigil_id: str, member_id: str, data: MemberFinanceRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    finance = MemberFinance(**data.model_dump(exclude={"version"}))
    vigil.set_finance(member_id, finance)
    return await _save(vigil, "Member finance recorded", member_id=member_id)


async def set_attendance_times(vigil_id: str, member_id: str, data: AttendanceTimesRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    vigil.set_times(member_id, data.arrived_at, data.left_at)
    return await _save(vigil, "Attendance times recorded", member_id=member_id)


# ----------------------------------------------------------------------
# Guard schedule
# ----------------------------------------------------------------------


async def add_hour_block(vigil_id: str, data: HourBlockRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    block = HourBlock(
        label=data.label,
        slots=[GuardSlot(start_time=s.start_time, end_time=s.end_time) for s in data.slots],
    )
    vigil.guard_schedule.append(block)
    return await _save(vigil, "Hour block added", block_id=block.id, slots=len(block.slots))


def _format_clock(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def _equal_slots(start_time: str, end_time: str, parts: int) -> list[GuardSlot]:
    span = GuardSlot(start_time=start_time, end_time=end_time)
    total = shift_duration_minutes(span)
    if total == 0 or total % parts:
        raise ValidationFailed.for_field(
            "parts", f"{span.start_time}-{span.end_time} cannot be split into {parts} equal slots"
        )

    step = timedelta(minutes=total // parts)
    cursor = datetime.combine(date.today(), datetime.strptime(span.start_time, "%H:%M").time())
    slots = []
    for _ in range(parts):
        slots.append(GuardSlot(start_time=_format_clock(cursor), end_time=_format_clock(cursor + step)))
        cursor += step
    return slots


async def split_hour_block(vigil_id: str, block_id: str, data: SplitBlockRequest) -> Vigil:
    """
    Replace a block's slots with ``data.parts`` slots of equal length.

    Refused while any slot of the block still has members assigned.
    """
    vigil = await _load_for_update(vigil_id, data.version)
    block = vigil.find_block(block_id)

    if any(slot.first_choir or slot.second_choir for slot in block.slots):
        raise ConflictError("Unassign the members of this hour block before splitting it")

    start_time = data.start_time or (block.slots[0].start_time if block.slots else None)
    end_time = data.end_time or (block.slots[-1].end_time if block.slots else None)
    if start_time is None or end_time is None:
        raise ValidationFailed.for_field("start_time", "An empty hour block needs start_time and end_time")

    block.slots = _equal_slots(start_time, end_time, data.parts)
    return await _save(vigil, "Hour block split", block_id=block_id, parts=data.parts)


async def assign_guard(vigil_id: str, data: GuardAssignmentRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    if await MemberRepository.get(data.member_id) is None:
        raise NotFoundError("Member not found")

    vigil.assign_guard(data.block_id, data.slot_id, data.choir, data.member_id)
    return await _save(
        vigil,
        "Guard assigned",
        block_id=data.block_id,
        slot_id=data.slot_id,
        choir=data.choir.value,
        member_id=data.member_id,
    )


async def unassign_guard(
    vigil_id: str,
    block_id: str,
    slot_id: str,
    choir: Choir,
    member_id: str,
    version: int | None = None,
) -> Vigil:
    vigil = await _load_for_update(vigil_id, version)
    if not vigil.unassign_guard(block_id, slot_id, choir, member_id):
        return vigil
    return await _save(vigil, "Guard unassigned", block_id=block_id, slot_id=slot_id, member_id=member_id)


# ----------------------------------------------------------------------
# Special roles
# ----------------------------------------------------------------------


async def assign_special_role(vigil_id: str, data: SpecialRoleRequest) -> Vigil:
    vigil = await _load_for_update(vigil_id, data.version)
    if await MemberRepository.get(data.member_id) is None:
        raise NotFoundError("Member not found")

    vigil.assign_special_role(data.role, data.member_id)
    return await _save(vigil, "Special role assigned", role=data.role.value, member_id=data.member_id)


async def remove_special_role(
    vigil_id: str, role: SpecialRole, member_id: str, version: int | None = None
) -> Vigil:
    vigil = await _load_for_update(vigil_id, version)
    if not vigil.remove_special_role(role, member_id):
        return vigil
    return await _save(vigil, "Special role removed", role=role.value, member_id=member_id)
