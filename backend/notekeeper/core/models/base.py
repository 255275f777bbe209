from __future__ import annotations

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class AppBaseModel(PydanticBaseModel):
    """Base model for all domain models."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )


class StoredModel(AppBaseModel):
    """Domain model backed by a document store record.

    Unknown store columns are dropped rather than rejected so that a table
    carrying extra bookkeeping columns still loads.
    """

    model_config = ConfigDict(extra="ignore")

    def to_record(self) -> dict:
        return self.model_dump(mode="json")
