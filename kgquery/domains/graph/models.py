"""
Graph Models - Data types for the graph domain.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import TypeAliasType

from .cancellation import CancellationToken

# Open property bag values: string / number / bool / null / nested list or map.
PropertyValue = TypeAliasType(
    "PropertyValue",
    Union[
        bool,
        int,
        float,
        str,
        None,
        list["PropertyValue"],
        dict[str, "PropertyValue"],
    ],
)

_TYPE_LABEL = re.compile(r"^[A-Za-z0-9_]+$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_type_label(value: str, kind: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{kind} type cannot be empty or whitespace")
    if len(value) > 100:
        raise ValueError(f"{kind} type must not exceed 100 characters")
    if not _TYPE_LABEL.match(value):
        raise ValueError(f"{kind} type must contain only alphanumeric characters and underscores")
    return value


class Entity(BaseModel):
    """Node in the knowledge graph."""

    id: str
    type: str
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        return _validate_type_label(value, "Entity")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def name(self) -> str:
        """Display name, falling back to the id."""
        value = self.properties.get("name")
        return value if isinstance(value, str) else self.id


class Relationship(BaseModel):
    """Directed, weighted edge between two entities."""

    id: str
    type: str
    source_id: str
    target_id: str
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    weight: float = Field(default=1.0, ge=0.0)
    directed: bool = True
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        return _validate_type_label(value, "Relationship")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Relationship):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def neighbor_of(self, entity_id: str) -> str | None:
        """Entity reached by following this relationship away from ``entity_id``."""
        if self.source_id == entity_id:
            return self.target_id
        if not self.directed and self.target_id == entity_id:
            return self.source_id
        return None

    def __str__(self) -> str:
        arrow = "->" if self.directed else "<->"
        return f"{self.source_id} -[{self.type}]{arrow} {self.target_id} (weight={self.weight})"


class GraphQuery(BaseModel):
    """Declarative attribute query over entities."""

    entity_type: str | None = None
    property_filters: dict[str, PropertyValue] = Field(default_factory=dict)
    page_size: int = Field(default=100, ge=0)
    skip: int = Field(default=0, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    cancel_token: CancellationToken | None = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(arbitrary_types_allowed=True)


class GraphQueryResult(BaseModel):
    """Result of a graph query execution."""

    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    total_count: int = 0
    execution_time: float = 0.0  # seconds
    from_cache: bool = False
    query_plan: str | None = None
    warnings: list[str] = Field(default_factory=list)


class GraphPath(BaseModel):
    """A path through the graph, source to target inclusive."""

    entities: list[Entity]
    relationships: list[Relationship] = Field(default_factory=list)
    total_weight: float = 0.0

    @model_validator(mode="after")
    def _check_shape(self) -> GraphPath:
        if len(self.entities) != len(self.relationships) + 1:
            raise ValueError(
                f"Path with {len(self.relationships)} relationships needs "
                f"{len(self.relationships) + 1} entities, got {len(self.entities)}"
            )
        return self

    @property
    def hops(self) -> int:
        """Number of traversed relationships."""
        return len(self.relationships)

    @property
    def length(self) -> int:
        """Number of entities on the path."""
        return len(self.entities)

    @property
    def source(self) -> Entity:
        return self.entities[0]

    @property
    def target(self) -> Entity:
        return self.entities[-1]

    def entity_ids(self) -> list[str]:
        return [e.id for e in self.entities]

    def to_string(self) -> str:
        """Human-readable path representation."""
        parts = []
        for i, entity in enumerate(self.entities):
            parts.append(f"[{entity.name}]")
            if i < len(self.relationships):
                parts.append(f" --{self.relationships[i].type}--> ")
        return "".join(parts)


class GraphStats(BaseModel):
    """Statistics about a graph repository."""

    total_entities: int = 0
    total_relationships: int = 0
    entities_by_type: dict[str, int] = Field(default_factory=dict)
    relationships_by_type: dict[str, int] = Field(default_factory=dict)
