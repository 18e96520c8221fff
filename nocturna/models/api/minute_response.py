# nocturna/models/api/minute_response.py
from pydantic import BaseModel

from nocturna.models.domain.minute_domain import Minute


class MinuteResponse(BaseModel):
    success: bool = True
    minute: Minute


class MinuteListResponse(BaseModel):
    success: bool = True
    minutes: list[Minute]
    count: int
