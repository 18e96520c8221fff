"""
Fee ledger service: record payments and debts against a member.
"""

from nocturna.errors import ValidationFailed
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.payment_request import PaymentCreateRequest
from nocturna.models.domain.payment_domain import Payment
from nocturna.repositories.payment_repository import PaymentRepository
from nocturna.repositories.vigil_repository import VigilRepository
from nocturna.services import aggregation
from nocturna.services.common import apply_changes
from nocturna.services.member_service import get_member

logger = get_logger(__name__)


async def record_payment(member_id: str, data: PaymentCreateRequest) -> Payment:
    """
    Raises:
        NotFoundError: Unknown member
        ValidationFailed: Unknown vigil, or a payment method on a debt
    """
    await get_member(member_id)
    if data.vigil_id and await VigilRepository.get(data.vigil_id) is None:
        raise ValidationFailed.for_field("vigil_id", "Vigil not found")

    # The debt-without-method rule is checked on the merged record
    draft = Payment(member_id=member_id, kind=data.kind, amount=data.amount)
    payment = apply_changes(draft, data.model_dump())
    created = await PaymentRepository.create(payment)
    logger.info(
        "Ledger entry recorded",
        payment_id=created.id,
        member_id=member_id,
        kind=created.kind.value,
        amount=str(created.amount),
    )
    return created


async def list_payments(member_id: str) -> tuple[list[Payment], aggregation.LedgerBalance]:
    await get_member(member_id)
    payments = await PaymentRepository.list_for_member(member_id)
    return payments, aggregation.ledger_balance(payments)
