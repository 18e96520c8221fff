"""
Section service: parish chapters that own members and vigils.
"""

from nocturna.errors import NotFoundError
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.section_request import SectionCreateRequest, SectionUpdateRequest
from nocturna.models.domain.section_domain import Section
from nocturna.repositories.section_repository import SectionRepository
from nocturna.services.common import apply_changes, check_version

logger = get_logger(__name__)


async def create_section(data: SectionCreateRequest) -> Section:
    section = await SectionRepository.create(Section(**data.model_dump()))
    logger.info("Section created", section_id=section.id, turn_number=section.turn_number)
    return section


async def get_section(section_id: str) -> Section:
    section = await SectionRepository.get(section_id)
    if section is None:
        raise NotFoundError("Section not found")
    return section


async def list_sections(active: bool | None = None) -> list[Section]:
    return await SectionRepository.list_sections(active)


async def update_section(section_id: str, data: SectionUpdateRequest) -> Section:
    section = await get_section(section_id)
    check_version(section, SectionRepository.collection.name, data.version)

    changes = data.model_dump(exclude_unset=True, exclude={"version"})
    updated = apply_changes(section, changes)

    saved = await SectionRepository.save(updated)
    logger.info("Section updated", section_id=section_id, fields=sorted(changes))
    return saved
