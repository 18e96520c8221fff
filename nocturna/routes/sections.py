"""
sections.py
-----------
Purpose:
    CRUD endpoints for sections (parish chapters).
"""

from fastapi import APIRouter, Depends, Query, status

from nocturna.auth.session import session_dependency
from nocturna.models.api.section_request import SectionCreateRequest, SectionUpdateRequest
from nocturna.models.api.section_response import SectionListResponse, SectionResponse
from nocturna.services import section_service

router = APIRouter(prefix="/sections", tags=["sections"], dependencies=[Depends(session_dependency)])


@router.post("", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(payload: SectionCreateRequest):
    section = await section_service.create_section(payload)
    return SectionResponse(section=section)


@router.get("", response_model=SectionListResponse)
async def list_sections(active: bool | None = Query(None)):
    sections = await section_service.list_sections(active)
    return SectionListResponse(sections=sections, count=len(sections))


@router.get("/{section_id}", response_model=SectionResponse)
async def get_section(section_id: str):
    return SectionResponse(section=await section_service.get_section(section_id))


@router.patch("/{section_id}", response_model=SectionResponse)
async def update_section(section_id: str, payload: SectionUpdateRequest):
    section = await section_service.update_section(section_id, payload)
    return SectionResponse(section=section)
