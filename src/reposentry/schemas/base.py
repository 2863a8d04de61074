"""Shared schema base classes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StrictSchemaModel(BaseModel):
    """Base model with strict validation defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, frozen=False)


class FrozenSchemaModel(BaseModel):
    """Immutable variant used for scan results."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class VersionedSchemaModel(FrozenSchemaModel):
    """Model envelope for versioned payloads."""

    schema_version: str = Field(min_length=1)
