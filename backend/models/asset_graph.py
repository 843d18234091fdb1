"""Pydantic data models for the business asset graph."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _dedupe(values: list[str]) -> list[str]:
    """Collapse repeated names, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class Position(BaseModel):
    """A manual placement hint in canvas coordinates."""
    x: float
    y: float


class BusinessNode(BaseModel):
    """An IT asset with its system and group memberships."""
    id: str
    title: str = ""
    asset_type: str = "default"
    systems: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)
    position: Optional[Position] = None

    @field_validator("systems", "groups")
    @classmethod
    def _ordered_set(cls, value: list[str]) -> list[str]:
        return _dedupe(value)


class BusinessEdge(BaseModel):
    """A typed relationship between two assets, by business id."""
    id: str
    source_id: str
    target_id: str
    relation_type: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)
