from typing import Any, TypeVar

from pydantic import ValidationError

from nocturna.errors import ValidationFailed, VersionConflictError
from nocturna.models.domain.base import DocumentModel

ModelT = TypeVar("ModelT", bound=DocumentModel)


def check_version(record: DocumentModel, collection: str, expected: int | None) -> None:
    """Reject a request made against an older (or newer) copy than the stored one."""
    if expected is not None and expected != record.version:
        raise VersionConflictError(collection, record.id, expected, record.version)


def apply_changes(record: ModelT, changes: dict[str, Any]) -> ModelT:
    """Merge a partial update into ``record`` and validate the result as a whole."""
    try:
        return type(record).model_validate({**record.model_dump(), **changes})
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]) or "request", "message": error["msg"]}
            for error in e.errors()
        ]
        raise ValidationFailed("Validation failed", errors=errors) from e
