"""
Query Models - Execution plans and cache statistics.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from kgquery.domains.graph import PropertyValue


class PlanStep(BaseModel):
    """Single step of a query execution plan."""

    operation: str  # ScanByEntityType, FilterByProperty, Limit
    entity_type: str | None = None
    property_filters: dict[str, PropertyValue] | None = None
    limit: int | None = None
    offset: int | None = None
    cost: float = 0.0
    selectivity: float = 1.0


class QueryPlan(BaseModel):
    """Ordered, cost-estimated execution plan."""

    steps: list[PlanStep] = Field(default_factory=list)
    estimated_cost: float = 0.0
    estimated_selectivity: float = Field(default=1.0, gt=0.0, le=1.0)
    estimated_cardinality: int = 0
    recommended_indexes: list[str] = Field(default_factory=list)
    index_scan_recommended: bool = False
    optimizations_applied: list[str] = Field(default_factory=list)

    def to_readable_string(self) -> str:
        """Human-readable execution plan."""
        lines = [
            "=== Query Execution Plan ===",
            f"Estimated Cost: {self.estimated_cost:.2f}",
            f"Estimated Cardinality: {self.estimated_cardinality}",
            f"Estimated Selectivity: {self.estimated_selectivity:.2%}",
            "",
        ]

        if self.recommended_indexes:
            lines.append(f"Recommended Indexes: {', '.join(self.recommended_indexes)}")
            lines.append("")

        lines.append("Steps:")
        for i, step in enumerate(self.steps, start=1):
            lines.append(f"{i}. {step.operation}")
            if step.entity_type:
                lines.append(f"   Entity Type: {step.entity_type}")
            if step.property_filters:
                lines.append(f"   Filters: {', '.join(step.property_filters)}")
            if step.limit is not None:
                lines.append(f"   Limit: {step.limit}")
            if step.offset is not None:
                lines.append(f"   Offset: {step.offset}")
            lines.append(f"   Cost: {step.cost:.2f}")

        if self.optimizations_applied:
            lines.append("")
            lines.append("Optimizations Applied:")
            lines.extend(f"  - {opt}" for opt in self.optimizations_applied)

        return "\n".join(lines) + "\n"


class CacheStatistics(BaseModel):
    """Query cache performance counters."""

    hits: int = 0
    misses: int = 0
    total_requests: int = 0
    hit_rate: float = 0.0
    size: int = 0
