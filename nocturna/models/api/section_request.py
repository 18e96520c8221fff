# nocturna/models/api/section_request.py
from pydantic import BaseModel, Field

from nocturna.models.api.common import VersionedRequest


class SectionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    parish: str = Field(..., min_length=1, max_length=120)
    turn_number: int = Field(..., ge=1)
    patron: str = Field(..., min_length=1, max_length=120)
    active: bool = True


class SectionUpdateRequest(VersionedRequest):
    name: str | None = Field(None, min_length=1, max_length=120)
    parish: str | None = Field(None, min_length=1, max_length=120)
    turn_number: int | None = Field(None, ge=1)
    patron: str | None = Field(None, min_length=1, max_length=120)
    active: bool | None = None
