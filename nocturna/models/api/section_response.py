# nocturna/models/api/section_response.py
from pydantic import BaseModel

from nocturna.models.domain.section_domain import Section


class SectionResponse(BaseModel):
    success: bool = True
    section: Section


class SectionListResponse(BaseModel):
    success: bool = True
    sections: list[Section]
    count: int
