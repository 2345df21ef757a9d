"""
Base Transfer Object shared by every DTO.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict

from reptile_api.models.base import as_utc

# Naive input is read as UTC; values leave the DTO timezone-aware
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class BaseDto(BaseModel):
    """
    Wire representation of a record: identity, audit fields, business fields.

    A DTO presented for creation must have ``id=None``; one presented for
    update must carry the id of an existing record. Equality follows the
    record rule: same type and same non-null id.
    """

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: int | None = None
    created_at: UtcDatetime | None = None
    created_by: str | None = None
    updated_at: UtcDatetime | None = None
    updated_by: str | None = None

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if other is None or type(self) is not type(other):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            return object.__hash__(self)
        return hash((type(self).__name__, self.id))
