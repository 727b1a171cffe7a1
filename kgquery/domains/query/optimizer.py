"""
Cost-Based Optimizer - Turns a GraphQuery into an ordered, costed plan.

There are no table statistics, so selectivity comes from naming
heuristics and costs are computed against a fixed baseline row count.
Every step adds a non-negative cost charged against the baseline, which
keeps the estimate monotonic: a query never costs less than the same
query with fewer constraints.
"""

from __future__ import annotations

import logging
import re
import uuid

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import GraphQuery, PropertyValue

from .models import PlanStep, QueryPlan

logger = logging.getLogger(__name__)

__all__ = ["CostBasedOptimizer", "estimate_filter_selectivity"]

# Cost constants (arbitrary units)
ENTITY_SCAN_COST_PER_ROW = 0.1
PROPERTY_FILTER_COST_PER_ROW = 0.05
LIMIT_COST = 1.0

# Selectivity estimates (fraction of rows passing a filter)
ENTITY_TYPE_SELECTIVITY = 0.1
IDENTIFIER_SELECTIVITY = 0.001
NAME_SELECTIVITY = 0.1
WILDCARD_SELECTIVITY = 0.3
DEFAULT_SELECTIVITY = 0.5
CATEGORICAL_SELECTIVITY = 0.8

# Filters more selective than this are worth an index
INDEX_SELECTIVITY_THRESHOLD = 0.2

DEFAULT_BASELINE_CARDINALITY = 1000

_IDENTIFIER_KEYS = frozenset({"email", "uuid", "guid", "key", "slug", "sku", "isbn"})
_NAME_KEYS = frozenset({"name", "firstname", "lastname", "username", "fullname", "displayname"})
_CATEGORICAL_KEYS = frozenset(
    {
        "country",
        "city",
        "state",
        "region",
        "status",
        "category",
        "gender",
        "type",
        "kind",
        "language",
        "currency",
        "department",
    }
)
_HEX_TOKEN = re.compile(r"^[0-9a-fA-F]{24,}$")
# Word tokens of snake_case, kebab-case and camelCase keys ("userID" -> user, ID)
_KEY_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def _is_id_key(key: str) -> bool:
    return any(word.lower() == "id" for word in _KEY_WORD.findall(key))


def _looks_like_token(value: PropertyValue) -> bool:
    if not isinstance(value, str) or len(value) < 24:
        return False
    if _HEX_TOKEN.match(value):
        return True
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def estimate_filter_selectivity(key: str, value: PropertyValue) -> float:
    """
    Estimate the fraction of entities that pass ``key == value``.

    Identifier-like keys and opaque token values (GUIDs, long hex ids) are
    treated as nearly unique; categorical fields such as country or city
    as barely selective.
    """
    normalized = _normalize_key(key)

    if _is_id_key(key) or normalized in _IDENTIFIER_KEYS or _looks_like_token(value):
        return IDENTIFIER_SELECTIVITY

    if isinstance(value, str) and "*" in value:
        return WILDCARD_SELECTIVITY

    if normalized in _NAME_KEYS:
        return NAME_SELECTIVITY

    if normalized in _CATEGORICAL_KEYS:
        return CATEGORICAL_SELECTIVITY

    return DEFAULT_SELECTIVITY


class CostBasedOptimizer:
    """
    Heuristic cost-based query planner. Pure and synchronous.

    Example:
        >>> optimizer = CostBasedOptimizer()
        >>> plan = optimizer.optimize_query(
        ...     GraphQuery(entity_type="Person", property_filters={"country": "NL", "email": "a@b.c"})
        ... )
        >>> [s.operation for s in plan.steps]
        ['ScanByEntityType', 'FilterByProperty', 'FilterByProperty', 'Limit']
        >>> plan.recommended_indexes
        ['email']
    """

    def __init__(self, baseline_cardinality: int = DEFAULT_BASELINE_CARDINALITY) -> None:
        """
        Initialize optimizer.

        Args:
            baseline_cardinality: Assumed number of entities before any filtering
        """
        if baseline_cardinality <= 0:
            raise InvalidArgumentError(
                "baseline_cardinality",
                f"baseline_cardinality must be positive, got {baseline_cardinality}",
            )
        self._baseline = baseline_cardinality

    def optimize_query(self, query: GraphQuery) -> QueryPlan:
        """
        Build an execution plan for a query.

        Args:
            query: Query to plan

        Returns:
            Plan with steps ordered scan -> filters (most selective first) -> limit

        Raises:
            InvalidArgumentError: If query is None
        """
        if query is None:
            raise InvalidArgumentError("query")

        steps: list[PlanStep] = []
        optimizations: list[str] = []
        recommended_indexes: list[str] = []
        total_cost = 0.0
        selectivity = 1.0

        # Step 1: entity type scan
        if query.entity_type:
            scan_cost = ENTITY_SCAN_COST_PER_ROW * self._baseline
            steps.append(
                PlanStep(
                    operation="ScanByEntityType",
                    entity_type=query.entity_type,
                    cost=scan_cost,
                    selectivity=ENTITY_TYPE_SELECTIVITY,
                )
            )
            total_cost += scan_cost
            selectivity *= ENTITY_TYPE_SELECTIVITY

        # Step 2: property filters, most selective first
        if query.property_filters:
            scored = sorted(
                (
                    (estimate_filter_selectivity(key, value), key, value)
                    for key, value in query.property_filters.items()
                ),
                key=lambda item: (item[0], item[1]),
            )
            for filter_selectivity, key, value in scored:
                filter_cost = PROPERTY_FILTER_COST_PER_ROW * self._baseline
                steps.append(
                    PlanStep(
                        operation="FilterByProperty",
                        property_filters={key: value},
                        cost=filter_cost,
                        selectivity=filter_selectivity,
                    )
                )
                total_cost += filter_cost
                selectivity *= filter_selectivity

                if filter_selectivity < INDEX_SELECTIVITY_THRESHOLD and key not in recommended_indexes:
                    recommended_indexes.append(key)

            optimizations.append(f"Ordered {len(scored)} filters by selectivity")

        # Step 3: pagination
        if query.page_size > 0:
            steps.append(
                PlanStep(
                    operation="Limit",
                    limit=query.page_size,
                    offset=query.skip,
                    cost=LIMIT_COST,
                    selectivity=1.0,
                )
            )
            total_cost += LIMIT_COST

        # Clamp to (0, 1]; a product of many tiny selectivities can underflow
        selectivity = min(1.0, max(selectivity, 1e-12))

        if recommended_indexes:
            optimizations.append(f"Index scan recommended on: {', '.join(recommended_indexes)}")

        plan = QueryPlan(
            steps=steps,
            estimated_cost=total_cost,
            estimated_selectivity=selectivity,
            estimated_cardinality=max(1, round(self._baseline * selectivity)),
            recommended_indexes=recommended_indexes,
            index_scan_recommended=bool(recommended_indexes),
            optimizations_applied=optimizations,
        )
        logger.debug(
            "Planned query: %d steps, cost %.2f, cardinality %d",
            len(steps),
            plan.estimated_cost,
            plan.estimated_cardinality,
        )
        return plan
