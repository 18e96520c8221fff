# nocturna/models/api/common.py
from pydantic import BaseModel, Field


class VersionedRequest(BaseModel):
    """Mutations may carry the version the client last read."""

    version: int | None = Field(None, ge=1, description="Expected record version; 409 on mismatch")
