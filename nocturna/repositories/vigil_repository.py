from nocturna.db.schema import VIGILS
from nocturna.models.domain.vigil_domain import Vigil, VigilState
from nocturna.repositories.base import DocumentRepository


class VigilRepository(DocumentRepository[Vigil]):
    collection = VIGILS
    model = Vigil

    @classmethod
    async def list_vigils(
        cls, section_id: str | None = None, state: VigilState | None = None
    ) -> list[Vigil]:
        """Newest first."""
        filters = {}
        if section_id:
            filters["section_id"] = section_id
        if state:
            filters["state"] = state.value
        return await cls.find(filters, order_by="start_at", descending=True)
