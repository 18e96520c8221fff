# nocturna/models/api/payment_response.py
from pydantic import BaseModel

from nocturna.models.domain.payment_domain import Payment
from nocturna.services.aggregation import LedgerBalance


class PaymentResponse(BaseModel):
    success: bool = True
    payment: Payment


class PaymentListResponse(BaseModel):
    success: bool = True
    payments: list[Payment]
    count: int
    balance: LedgerBalance
