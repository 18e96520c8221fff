# nocturna/models/api/payment_request.py
from datetime import date

from pydantic import BaseModel, Field

from nocturna.models.domain.base import Money
from nocturna.models.domain.payment_domain import PaymentKind, PaymentMethod


class PaymentCreateRequest(BaseModel):
    kind: PaymentKind
    amount: Money
    concept: str = Field("Monthly fee", min_length=1, max_length=200)
    vigil_id: str | None = None
    paid_on: date | None = None
    method: PaymentMethod | None = None
    reference: str | None = Field(None, max_length=120)
    notes: str | None = None
