# nocturna/models/api/member_request.py
from datetime import date

from pydantic import BaseModel, EmailStr, Field

from nocturna.models.api.common import VersionedRequest
from nocturna.models.domain.member_domain import Address, MembershipType, MemberStatus


class MemberCreateRequest(BaseModel):
    """Request body for registering a member. Status defaults to active."""

    full_name: str = Field(..., min_length=1, max_length=200)
    membership_type: MembershipType = MembershipType.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE
    join_date: date | None = None
    section_id: str | None = None
    address: Address | None = None
    phone: str | None = Field(None, max_length=40)
    email: EmailStr | None = None
    presented_by: str | None = None
    vigil_order: int | None = Field(None, ge=1)
    distinctions: list[str] = Field(default_factory=list)
    notes: str | None = None


class MemberUpdateRequest(VersionedRequest):
    """
    Partial update. A changed ``status`` is recorded in the history with
    ``reason`` and ``authorized_by``.
    """

    full_name: str | None = Field(None, min_length=1, max_length=200)
    membership_type: MembershipType | None = None
    status: MemberStatus | None = None
    section_id: str | None = None
    address: Address | None = None
    phone: str | None = Field(None, max_length=40)
    email: EmailStr | None = None
    presented_by: str | None = None
    vigil_order: int | None = Field(None, ge=1)
    distinctions: list[str] | None = None
    notes: str | None = None
    reason: str | None = None
    authorized_by: str | None = None


class MemberStatusChangeRequest(VersionedRequest):
    status: MemberStatus
    reason: str | None = None
    authorized_by: str | None = None
