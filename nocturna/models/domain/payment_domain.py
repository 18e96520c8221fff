"""
Fee ledger: payments received from a member and debts charged to them.

Entries are append-only. A member's standing is derived from the whole
ledger by ``nocturna.services.aggregation.ledger_balance``.
"""

from datetime import date
from enum import StrEnum

from pydantic import Field, model_validator

from nocturna.models.domain.base import DocumentModel, Money


class PaymentKind(StrEnum):
    PAYMENT = "payment"
    DEBT = "debt"


class PaymentMethod(StrEnum):
    CASH = "cash"
    TRANSFER = "transfer"
    OTHER = "other"


class Payment(DocumentModel):
    member_id: str
    vigil_id: str | None = None
    kind: PaymentKind
    amount: Money
    concept: str = Field("Monthly fee", min_length=1)
    paid_on: date | None = None
    method: PaymentMethod | None = None
    reference: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _check_method(self) -> "Payment":
        if self.kind == PaymentKind.DEBT and self.method is not None:
            raise ValueError("a debt has no payment method")
        return self
