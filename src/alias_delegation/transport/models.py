"""Pydantic models for query descriptors and server-side records."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QueryFilter(BaseModel):
    """Filter applied to the ``aliases`` or ``follows`` relation."""

    address: Optional[str] = None
    alias: Optional[str] = None
    space_in: Optional[str] = None
    follower_in: Optional[str] = None
    created_gt: Optional[int] = None


class QueryDescriptor(BaseModel):
    """A query against one relation: a filter plus a result limit."""

    filter: QueryFilter = Field(default_factory=QueryFilter)
    first: int = Field(default=1, gt=0)

    def to_variables(self) -> dict[str, Any]:
        """Flatten into transport variables, dropping unset filter fields."""
        return {**self.filter.model_dump(exclude_none=True), "first": self.first}


class AliasRecord(BaseModel):
    """A server-recorded owner to alias binding.

    Fields are optional so that a malformed record simply fails the
    equality check instead of raising.
    """

    model_config = ConfigDict(extra="ignore")

    address: Optional[str] = None
    alias: Optional[str] = None
    created: Optional[int] = None


class FollowRecord(BaseModel):
    """A server-recorded follow relation.

    ``space`` is accepted either as a plain id or as ``{"id": ...}``.
    """

    model_config = ConfigDict(extra="ignore")

    space: str
    follower: str
    created: Optional[int] = None

    @field_validator("space", mode="before")
    @classmethod
    def _flatten_space(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("id")
        return value
