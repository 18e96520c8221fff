"""
Minute service: closes a vigil with its minute (acta).

Generation copies the vigil's final attendance counts and fee totals into
the minute once. After that the minute is a frozen snapshot; only its
signatures can still be filled in.
"""

from nocturna.errors import ConflictError, MinuteAlreadyExistsError, NotFoundError
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.minute_request import MinuteGenerateRequest, SignaturesRequest
from nocturna.models.domain.base import ZERO
from nocturna.models.domain.member_domain import MemberStatus
from nocturna.models.domain.minute_domain import (
    AttendanceStatistics,
    FinanceSummary,
    Minute,
    Signatures,
)
from nocturna.models.domain.vigil_domain import Vigil, VigilState
from nocturna.repositories.member_repository import MemberRepository
from nocturna.repositories.minute_repository import MinuteRepository
from nocturna.repositories.vigil_repository import VigilRepository
from nocturna.services import aggregation
from nocturna.services.common import check_version

logger = get_logger(__name__)

_SIGNERS = ("shift_chief", "secretary", "treasurer")


async def _statistics(vigil: Vigil, data: MinuteGenerateRequest) -> AttendanceStatistics:
    present_ids = [entry.member_id for entry in vigil.attendance if entry.present]
    members = await MemberRepository.get_many(present_ids)
    by_status = aggregation.present_by_status(
        vigil, {member_id: member.status for member_id, member in members.items()}
    )

    extraordinary = data.extraordinary
    if extraordinary is None:
        extraordinary = len(data.extraordinary_detail)

    return AttendanceStatistics(
        active=by_status[MemberStatus.ACTIVE],
        trial=by_status[MemberStatus.TRIAL],
        aspirants=by_status[MemberStatus.ASPIRANT],
        communions=data.communions,
        extraordinary=extraordinary,
        extraordinary_detail=data.extraordinary_detail,
    )


def _finance_summary(vigil: Vigil, data: MinuteGenerateRequest) -> FinanceSummary:
    totals = aggregation.finance_totals(vigil)
    summary = FinanceSummary(
        monthly_receipts=totals.monthly_fees,
        overdue_receipts=totals.overdue_fees,
        seeds=totals.extra_donations,
        honoraria=sum((item.amount for item in data.honoraria_detail), ZERO),
        other_items=data.other_items,
    )
    summary.total = summary.calculated_total()
    return summary


async def _check_signers(signatures: Signatures | SignaturesRequest) -> None:
    for role in _SIGNERS:
        member_id = getattr(signatures, role)
        if member_id and await MemberRepository.get(member_id) is None:
            raise NotFoundError(f"Signing member not found ({role})")


async def generate_minute(vigil_id: str, data: MinuteGenerateRequest) -> Minute:
    """
    Create the vigil's minute and mark the vigil finished.

    A scheduled vigil is moved through in_progress on the way. The minute and
    the vigil are written in one transaction.

    Raises:
        NotFoundError: Unknown vigil or signer
        MinuteAlreadyExistsError: The vigil already has a minute
        InvalidStateTransitionError: The vigil is cancelled
        VersionConflictError: ``data.version`` is stale
    """
    vigil = await VigilRepository.get(vigil_id)
    if vigil is None:
        raise NotFoundError("Vigil not found")
    check_version(vigil, VigilRepository.collection.name, data.version)

    if vigil.minute_id or await MinuteRepository.get_by_vigil(vigil_id) is not None:
        raise MinuteAlreadyExistsError(vigil_id)

    if vigil.state == VigilState.SCHEDULED:
        vigil.transition_to(VigilState.IN_PROGRESS)
    vigil.transition_to(VigilState.FINISHED)

    await _check_signers(data.signatures)

    minute = Minute(
        vigil_id=vigil_id,
        section_id=vigil.section_id,
        schedule=data.schedule,
        readings=data.readings,
        movements=data.movements,
        other_business=data.other_business,
        attendance_stats=await _statistics(vigil, data),
        finance_summary=_finance_summary(vigil, data),
        honoraria_detail=data.honoraria_detail,
        signatures=data.signatures,
    )

    created, _ = await MinuteRepository.create_for_vigil(minute, vigil)
    logger.info(
        "Minute generated",
        minute_id=created.id,
        vigil_id=vigil_id,
        total_attendance=created.total_attendance,
        finance_total=str(created.finance_summary.total),
    )
    return created


async def get_minute(minute_id: str) -> Minute:
    minute = await MinuteRepository.get(minute_id)
    if minute is None:
        raise NotFoundError("Minute not found")
    return minute


async def get_minute_for_vigil(vigil_id: str) -> Minute:
    minute = await MinuteRepository.get_by_vigil(vigil_id)
    if minute is None:
        raise NotFoundError("Minute not found")
    return minute


async def list_minutes(section_id: str | None = None) -> list[Minute]:
    return await MinuteRepository.list_minutes(section_id)


async def sign_minute(minute_id: str, data: SignaturesRequest) -> Minute:
    """
    Fill in missing signatures.

    A signature already on the minute may be repeated but not replaced.
    Counts and money are left exactly as generated.
    """
    minute = await get_minute(minute_id)
    check_version(minute, MinuteRepository.collection.name, data.version)
    await _check_signers(data)

    signed = []
    for role in _SIGNERS:
        member_id = getattr(data, role)
        if member_id is None:
            continue
        current = getattr(minute.signatures, role)
        if current and current != member_id:
            raise ConflictError(f"The minute is already signed as {role}")
        if current is None:
            setattr(minute.signatures, role, member_id)
            signed.append(role)

    if not signed:
        return minute

    saved = await MinuteRepository.save(minute)
    logger.info(
        "Minute signed",
        minute_id=minute_id,
        roles=signed,
        signatures_complete=saved.signatures_complete,
    )
    return saved
