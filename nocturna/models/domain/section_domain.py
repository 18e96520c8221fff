from pydantic import Field

from nocturna.models.domain.base import DocumentModel


class Section(DocumentModel):
    """A parish chapter of the organization."""

    name: str = Field(..., min_length=1)
    parish: str = Field(..., min_length=1)
    turn_number: int = Field(..., ge=1)
    patron: str = Field(..., min_length=1, description="Titular saint or devotion")
    active: bool = True
