"""
vigils.py
---------
Purpose:
    Vigil endpoints: lifecycle, attendance, finance, guard schedule,
    special roles and closing the vigil with its minute.

Notes:
    - Every mutation accepts an optional ``version``; a stale one is a 409.
    - Bodiless actions (start, cancel, seed, toggle) take the version in an
      optional JSON body.
    - Every vigil response carries its computed summary.
"""

from fastapi import APIRouter, Depends, Query, status

from nocturna.auth.session import session_dependency
from nocturna.models.api.common import VersionedRequest
from nocturna.models.api.minute_request import MinuteGenerateRequest
from nocturna.models.api.minute_response import MinuteResponse
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
from nocturna.models.api.vigil_response import VigilListResponse, VigilResponse, VigilSummaryResponse
from nocturna.models.domain.vigil_domain import Choir, SpecialRole, VigilState
from nocturna.services import minute_service, vigil_service

router = APIRouter(prefix="/vigils", tags=["vigils"], dependencies=[Depends(session_dependency)])


def _versioned(payload: VersionedRequest | None) -> VersionedRequest:
    return payload or VersionedRequest()


@router.post("", response_model=VigilResponse, status_code=status.HTTP_201_CREATED)
async def create_vigil(payload: VigilCreateRequest):
    return VigilResponse.from_domain(await vigil_service.create_vigil(payload))


@router.get("", response_model=VigilListResponse)
async def list_vigils(
    section_id: str | None = Query(None),
    state: VigilState | None = Query(None),
):
    vigils = await vigil_service.list_vigils(section_id, state)
    return VigilListResponse(vigils=vigils, count=len(vigils))


@router.get("/{vigil_id}", response_model=VigilResponse)
async def get_vigil(vigil_id: str):
    return VigilResponse.from_domain(await vigil_service.get_vigil(vigil_id))


@router.get("/{vigil_id}/summary", response_model=VigilSummaryResponse)
async def get_vigil_summary(vigil_id: str):
    return VigilSummaryResponse(summary=await vigil_service.get_summary(vigil_id))


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------


@router.post("/{vigil_id}/start", response_model=VigilResponse)
async def start_vigil(vigil_id: str, payload: VersionedRequest | None = None):
    return VigilResponse.from_domain(await vigil_service.start_vigil(vigil_id, _versioned(payload)))


@router.post("/{vigil_id}/cancel", response_model=VigilResponse)
async def cancel_vigil(vigil_id: str, payload: VersionedRequest | None = None):
    return VigilResponse.from_domain(await vigil_service.cancel_vigil(vigil_id, _versioned(payload)))


# ----------------------------------------------------------------------
# Attendance & finance
# ----------------------------------------------------------------------


@router.post("/{vigil_id}/attendance/seed", response_model=VigilResponse)
async def seed_attendance(vigil_id: str, payload: VersionedRequest | None = None):
    vigil = await vigil_service.seed_attendance(vigil_id, _versioned(payload))
    return VigilResponse.from_domain(vigil)


@router.post("/{vigil_id}/attendance", response_model=VigilResponse, status_code=status.HTTP_201_CREATED)
async def add_attendance_entry(vigil_id: str, payload: AttendanceAddRequest):
    vigil = await vigil_service.add_attendance_entry(vigil_id, payload)
    return VigilResponse.from_domain(vigil)


@router.put("/{vigil_id}/attendance/{member_id}", response_model=VigilResponse)
async def set_attendance(vigil_id: str, member_id: str, payload: AttendanceSetRequest):
    vigil = await vigil_service.set_attendance(vigil_id, member_id, payload)
    return VigilResponse.from_domain(vigil)


@router.post("/{vigil_id}/attendance/{member_id}/toggle", response_model=VigilResponse)
async def toggle_attendance(vigil_id: str, member_id: str, payload: VersionedRequest | None = None):
    vigil = await vigil_service.toggle_attendance(vigil_id, member_id, _versioned(payload))
    return VigilResponse.from_domain(vigil)


@router.put("/{vigil_id}/attendance/{member_id}/finance", response_model=VigilResponse)
async def set_member_finance(vigil_id: str, member_id: str, payload: MemberFinanceRequest):
    vigil = await vigil_service.set_member_finance(vigil_id, member_id, payload)
    return VigilResponse.from_domain(vigil)


@router.put("/{vigil_id}/attendance/{member_id}/times", response_model=VigilResponse)
async def set_attendance_times(vigil_id: str, member_id: str, payload: AttendanceTimesRequest):
    vigil = await vigil_service.set_attendance_times(vigil_id, member_id, payload)
    return VigilResponse.from_domain(vigil)


# ----------------------------------------------------------------------
# Guard schedule & special roles
# ----------------------------------------------------------------------


@router.post("/{vigil_id}/guards/blocks", response_model=VigilResponse, status_code=status.HTTP_201_CREATED)
async def add_hour_block(vigil_id: str, payload: HourBlockRequest):
    return VigilResponse.from_domain(await vigil_service.add_hour_block(vigil_id, payload))


@router.post("/{vigil_id}/guards/blocks/{block_id}/split", response_model=VigilResponse)
async def split_hour_block(vigil_id: str, block_id: str, payload: SplitBlockRequest):
    vigil = await vigil_service.split_hour_block(vigil_id, block_id, payload)
    return VigilResponse.from_domain(vigil)


@router.post("/{vigil_id}/guards/assignments", response_model=VigilResponse)
async def assign_guard(vigil_id: str, payload: GuardAssignmentRequest):
    return VigilResponse.from_domain(await vigil_service.assign_guard(vigil_id, payload))


@router.delete("/{vigil_id}/guards/assignments", response_model=VigilResponse)
async def unassign_guard(
    vigil_id: str,
    block_id: str = Query(...),
    slot_id: str = Query(...),
    choir: Choir = Query(...),
    member_id: str = Query(...),
    version: int | None = Query(None, ge=1),
):
    vigil = await vigil_service.unassign_guard(vigil_id, block_id, slot_id, choir, member_id, version)
    return VigilResponse.from_domain(vigil)


@router.post("/{vigil_id}/roles", response_model=VigilResponse)
async def assign_special_role(vigil_id: str, payload: SpecialRoleRequest):
    return VigilResponse.from_domain(await vigil_service.assign_special_role(vigil_id, payload))


@router.delete("/{vigil_id}/roles", response_model=VigilResponse)
async def remove_special_role(
    vigil_id: str,
    role: SpecialRole = Query(...),
    member_id: str = Query(...),
    version: int | None = Query(None, ge=1),
):
    vigil = await vigil_service.remove_special_role(vigil_id, role, member_id, version)
    return VigilResponse.from_domain(vigil)


# ----------------------------------------------------------------------
# Minute
# ----------------------------------------------------------------------


@router.post("/{vigil_id}/minute", response_model=MinuteResponse, status_code=status.HTTP_201_CREATED)
async def generate_minute(vigil_id: str, payload: MinuteGenerateRequest):
    """
    Close the vigil with its minute.

    Raises:
        404: Vigil or signing member not found
        409: The vigil already has a minute, is cancelled, or ``version`` is stale
    """
    minute = await minute_service.generate_minute(vigil_id, payload)
    return MinuteResponse(minute=minute)


@router.get("/{vigil_id}/minute", response_model=MinuteResponse)
async def get_vigil_minute(vigil_id: str):
    return MinuteResponse(minute=await minute_service.get_minute_for_vigil(vigil_id))
