from nocturna.db.schema import SECTIONS
from nocturna.models.domain.section_domain import Section
from nocturna.repositories.base import DocumentRepository


class SectionRepository(DocumentRepository[Section]):
    collection = SECTIONS
    model = Section

    @classmethod
    async def list_sections(cls, active: bool | None = None) -> list[Section]:
        filters = {} if active is None else {"active": active}
        return await cls.find(filters, order_by="name")
