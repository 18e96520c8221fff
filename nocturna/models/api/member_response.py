# nocturna/models/api/member_response.py
from pydantic import BaseModel

from nocturna.models.domain.member_domain import Member


class MemberResponse(BaseModel):
    success: bool = True
    member: Member


class MemberListResponse(BaseModel):
    success: bool = True
    members: list[Member]
    count: int
