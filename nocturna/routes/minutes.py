"""
minutes.py
----------
Purpose:
    Read access to minutes and the one permitted change: signing.

Notes:
    - Minutes are generated through ``POST /vigils/{id}/minute``.
"""

from fastapi import APIRouter, Depends, Query

from nocturna.auth.session import session_dependency
from nocturna.models.api.minute_request import SignaturesRequest
from nocturna.models.api.minute_response import MinuteListResponse, MinuteResponse
from nocturna.services import minute_service

router = APIRouter(prefix="/minutes", tags=["minutes"], dependencies=[Depends(session_dependency)])


@router.get("", response_model=MinuteListResponse)
async def list_minutes(section_id: str | None = Query(None)):
    minutes = await minute_service.list_minutes(section_id)
    return MinuteListResponse(minutes=minutes, count=len(minutes))


@router.get("/{minute_id}", response_model=MinuteResponse)
async def get_minute(minute_id: str):
    return MinuteResponse(minute=await minute_service.get_minute(minute_id))


@router.put("/{minute_id}/signatures", response_model=MinuteResponse)
async def sign_minute(minute_id: str, payload: SignaturesRequest):
    return MinuteResponse(minute=await minute_service.sign_minute(minute_id, payload))
