"""Error response schema shared by every service."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ExceptionOutput(BaseModel):
    """Normalized, localized error response body."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    description: str = Field(alias="desc")
    module: str
    api: str
    timestamp: datetime = Field(alias="timeStamp")
    errors: list[str] = Field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready wire representation."""
        return self.model_dump(mode="json", by_alias=True)
