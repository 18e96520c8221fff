# nocturna/models/api/vigil_response.py
from pydantic import BaseModel

from nocturna.models.domain.vigil_domain import Vigil
from nocturna.services.aggregation import VigilSummary, summarize


class VigilResponse(BaseModel):
    """A vigil always travels with its freshly computed summary."""

    success: bool = True
    vigil: Vigil
    summary: VigilSummary

    @classmethod
    def from_domain(cls, vigil: Vigil) -> "VigilResponse":
        return cls(vigil=vigil, summary=summarize(vigil))


class VigilListResponse(BaseModel):
    success: bool = True
    vigils: list[Vigil]
    count: int


class VigilSummaryResponse(BaseModel):
    success: bool = True
    summary: VigilSummary
