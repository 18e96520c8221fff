"""
Member registry domain model.

A member's class/status only ever moves forward through recorded history:
``change_status`` appends a ``StatusChange`` and nothing removes one.
Members are never deleted; leaving the organization is the ``discharged``
status.
"""

from datetime import UTC, date, datetime
from enum import StrEnum

from pydantic import BaseModel, EmailStr, Field, computed_field

from nocturna.models.domain.base import DocumentModel


class MembershipType(StrEnum):
    MEMBER = "member"
    ASPIRANT = "aspirant"
    FIRST_TIME = "first_time"


class MemberStatus(StrEnum):
    ASPIRANT = "aspirant"
    TRIAL = "trial"
    ACTIVE = "active"
    HONORARY = "honorary"
    DISCHARGED = "discharged"
    INACTIVE = "inactive"


def keeps_vigil_turn(status: MemberStatus) -> bool:
    """Whether a member with this status is expected on the section's vigil list."""
    match status:
        case MemberStatus.ACTIVE | MemberStatus.TRIAL:
            return True
        case (
            MemberStatus.ASPIRANT
            | MemberStatus.HONORARY
            | MemberStatus.DISCHARGED
            | MemberStatus.INACTIVE
        ):
            return False


class Address(BaseModel):
    street: str | None = None
    neighborhood: str | None = None
    municipality: str | None = None

    def one_line(self) -> str:
        return ", ".join(part for part in (self.street, self.neighborhood, self.municipality) if part)


class StatusChange(BaseModel):
    previous_status: MemberStatus
    new_status: MemberStatus
    changed_at: datetime
    reason: str | None = None
    authorized_by: str | None = None


class Member(DocumentModel):
    full_name: str = Field(..., min_length=1)
    membership_type: MembershipType = MembershipType.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE
    join_date: date = Field(default_factory=lambda: datetime.now(UTC).date())
    section_id: str | None = None
    address: Address | None = None
    phone: str | None = None
    email: EmailStr | None = None
    presented_by: str | None = None
    vigil_order: int | None = Field(None, ge=1)
    distinctions: list[str] = Field(default_factory=list)
    trial_date: date | None = None
    activation_date: date | None = None
    notes: str | None = None
    status_history: list[StatusChange] = Field(default_factory=list)

    @computed_field
    @property
    def display_address(self) -> str:
        return self.address.one_line() if self.address else ""

    def change_status(
        self,
        new_status: MemberStatus,
        *,
        reason: str | None = None,
        authorized_by: str | None = None,
        at: datetime | None = None,
    ) -> bool:
        """
        Move the member to ``new_status`` and record it in the history.

        Returns False, recording nothing, when the status is unchanged.
        """
        if new_status == self.status:
            return False

        changed_at = at or datetime.now(UTC)
        self.status_history.append(
            StatusChange(
                previous_status=self.status,
                new_status=new_status,
                changed_at=changed_at,
                reason=reason,
                authorized_by=authorized_by,
            )
        )
        self.status = new_status

        if new_status == MemberStatus.TRIAL and self.trial_date is None:
            self.trial_date = changed_at.date()
        if new_status == MemberStatus.ACTIVE and self.activation_date is None:
            self.activation_date = changed_at.date()

        return True
