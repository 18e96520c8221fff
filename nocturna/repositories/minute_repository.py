from nocturna.db import documents
from nocturna.db.documents import DuplicateDocumentError
from nocturna.db.schema import MINUTES
from nocturna.errors import MinuteAlreadyExistsError
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.domain.minute_domain import Minute
from nocturna.models.domain.vigil_domain import Vigil
from nocturna.repositories.base import DocumentRepository
from nocturna.repositories.vigil_repository import VigilRepository

logger = get_logger(__name__)


class MinuteRepository(DocumentRepository[Minute]):
    collection = MINUTES
    model = Minute

    @classmethod
    async def get_by_vigil(cls, vigil_id: str) -> Minute | None:
        return await cls.find_one({"vigil_id": vigil_id})

    @classmethod
    async def list_minutes(cls, section_id: str | None = None) -> list[Minute]:
        filters = {"section_id": section_id} if section_id else {}
        return await cls.find(filters, descending=True)

    @classmethod
    async def create_for_vigil(cls, minute: Minute, vigil: Vigil) -> tuple[Minute, Vigil]:
        """
        Store ``minute`` and the finished ``vigil`` that points at it, atomically.

        The vigil write is version-checked against ``vigil.version``.

        Raises:
            MinuteAlreadyExistsError: The vigil already has a minute
        """
        try:
            async with documents.document_store.transaction() as conn:
                created = await cls.create(minute, connection=conn)
                vigil.minute_id = created.id
                saved_vigil = await VigilRepository.save(vigil, connection=conn)
        except DuplicateDocumentError as e:
            logger.warning("Duplicate minute rejected by the store", vigil_id=minute.vigil_id)
            raise MinuteAlreadyExistsError(minute.vigil_id) from e

        return created, saved_vigil
