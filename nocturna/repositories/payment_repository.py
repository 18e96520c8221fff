from nocturna.db.schema import PAYMENTS
from nocturna.models.domain.payment_domain import Payment, PaymentKind
from nocturna.repositories.base import DocumentRepository


class PaymentRepository(DocumentRepository[Payment]):
    collection = PAYMENTS
    model = Payment

    @classmethod
    async def list_for_member(cls, member_id: str, kind: PaymentKind | None = None) -> list[Payment]:
        """Newest first."""
        filters = {"member_id": member_id}
        if kind:
            filters["kind"] = kind.value
        return await cls.find(filters, descending=True)
