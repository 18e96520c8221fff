from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Self

from pydantic import BaseModel, Field, PlainSerializer

# Non-negative amount, at most cents, rendered as "15.00" in JSON
Money = Annotated[
    Decimal,
    Field(ge=0, decimal_places=2),
    PlainSerializer(lambda value: f"{value:.2f}", return_type=str, when_used="json"),
]

ZERO = Decimal("0")

_METADATA_FIELDS = {"id", "version", "created_at", "updated_at"}


class DocumentModel(BaseModel):
    """Fields every stored record carries; filled in by the document store."""

    id: str | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        """JSON-safe body to persist, without row metadata or computed fields."""
        exclude = _METADATA_FIELDS | set(type(self).model_computed_fields)
        return self.model_dump(mode="json", exclude=exclude)

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> Self | None:
        if record is None:
            return None
        return cls.model_validate(record)
