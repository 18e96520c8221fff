"""
members.py
----------
Purpose:
    Member registry endpoints.

Notes:
    - There is no DELETE; a member leaves by moving to ``discharged``.
    - Status changes are appended to the member's history, never rewritten.
    - The fee ledger (payments and debts) hangs off the member.
"""

from fastapi import APIRouter, Depends, Query, status

from nocturna.auth.session import session_dependency
from nocturna.models.api.member_request import (
    MemberCreateRequest,
    MemberStatusChangeRequest,
    MemberUpdateRequest,
)
from nocturna.models.api.member_response import MemberListResponse, MemberResponse
from nocturna.models.api.payment_request import PaymentCreateRequest
from nocturna.models.api.payment_response import PaymentListResponse, PaymentResponse
from nocturna.models.domain.member_domain import MemberStatus
from nocturna.services import member_service, payment_service

router = APIRouter(prefix="/members", tags=["members"], dependencies=[Depends(session_dependency)])


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(payload: MemberCreateRequest):
    member = await member_service.create_member(payload)
    return MemberResponse(member=member)


@router.get("", response_model=MemberListResponse)
async def list_members(
    section_id: str | None = Query(None),
    member_status: MemberStatus | None = Query(None, alias="status"),
    q: str | None = Query(None, min_length=1, max_length=100, description="Name contains"),
):
    members = await member_service.list_members(section_id, member_status, q)
    return MemberListResponse(members=members, count=len(members))


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(member_id: str):
    return MemberResponse(member=await member_service.get_member(member_id))


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member(member_id: str, payload: MemberUpdateRequest):
    member = await member_service.update_member(member_id, payload)
    return MemberResponse(member=member)


@router.post("/{member_id}/status", response_model=MemberResponse)
async def change_member_status(member_id: str, payload: MemberStatusChangeRequest):
    member = await member_service.change_status(member_id, payload)
    return MemberResponse(member=member)


@router.post("/{member_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(member_id: str, payload: PaymentCreateRequest):
    """Add a payment or a debt to the member's fee ledger."""
    payment = await payment_service.record_payment(member_id, payload)
    return PaymentResponse(payment=payment)


@router.get("/{member_id}/payments", response_model=PaymentListResponse)
async def list_payments(member_id: str):
    payments, balance = await payment_service.list_payments(member_id)
    return PaymentListResponse(payments=payments, count=len(payments), balance=balance)
