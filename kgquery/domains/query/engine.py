"""
Graph Query Engine - Validating, timeout- and cancellation-aware query executor.

The engine delegates all scan/filter work to the repository. Caching is
composed on top of it (see ``kgquery.domains.orchestration``).
"""

from __future__ import annotations

import asyncio
import logging
import time

from kgquery.config.errors import (
    InvalidArgumentError,
    OperationCancelledError,
    QueryTimeoutError,
)
from kgquery.domains.graph import (
    CancellationToken,
    GraphQuery,
    GraphQueryResult,
    GraphRepository,
)

from .optimizer import CostBasedOptimizer

logger = logging.getLogger(__name__)

__all__ = ["GraphQueryEngine"]


class GraphQueryEngine:
    """
    Executes attribute queries against a graph repository.

    ``query.timeout`` is a hard upper bound: when the repository does not
    answer in time the call is abandoned and QueryTimeoutError raised.
    Repository errors propagate unchanged.

    Example:
        >>> engine = GraphQueryEngine(repository, optimizer=CostBasedOptimizer())
        >>> result = await engine.execute_query(GraphQuery(entity_type="Person"))
        >>> result.total_count
        42
    """

    def __init__(
        self,
        repository: GraphRepository,
        optimizer: CostBasedOptimizer | None = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            repository: Execution backend
            optimizer: Optional planner; its readable plan is attached to results
        """
        if repository is None:
            raise InvalidArgumentError("repository")
        self._repository = repository
        self._optimizer = optimizer

    async def execute_query(
        self,
        query: GraphQuery,
        cancel_token: CancellationToken | None = None,
    ) -> GraphQueryResult:
        """
        Execute a query.

        Args:
            query: Query to execute
            cancel_token: Cancellation signal; defaults to ``query.cancel_token``.
                Passed unchanged to the repository.

        Returns:
            The repository's result, with execution time and plan filled in if missing

        Raises:
            InvalidArgumentError: If query is None
            QueryTimeoutError: If the repository exceeds ``query.timeout``
            OperationCancelledError: If the token is cancelled before or during the call
        """
        if query is None:
            raise InvalidArgumentError("query")

        token = cancel_token if cancel_token is not None else query.cancel_token
        if token is not None:
            token.raise_if_cancelled()

        start = time.perf_counter()
        result = await self._run_bounded(query, token)
        elapsed = time.perf_counter() - start

        updates: dict[str, object] = {"from_cache": False}
        if result.execution_time == 0:
            updates["execution_time"] = elapsed
        if self._optimizer is not None and result.query_plan is None:
            updates["query_plan"] = self._optimizer.optimize_query(query).to_readable_string()

        logger.debug(
            "Executed query (type=%s, filters=%d): %d/%d entities in %.3fs",
            query.entity_type,
            len(query.property_filters),
            len(result.entities),
            result.total_count,
            elapsed,
        )
        return result.model_copy(update=updates)

    async def _run_bounded(
        self,
        query: GraphQuery,
        token: CancellationToken | None,
    ) -> GraphQueryResult:
        """Run the repository call, racing it against the timeout and the token."""
        call = asyncio.ensure_future(self._repository.execute_query(query, token))
        waiters: set[asyncio.Future] = {call}
        cancel_waiter: asyncio.Future | None = None
        if token is not None:
            cancel_waiter = asyncio.ensure_future(token.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=query.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            if not call.done():
                call.cancel()

        if call in done:
            # Repository exceptions propagate unmodified
            return call.result()

        # Let the abandoned call unwind; its outcome is discarded
        outcome = await asyncio.gather(call, return_exceptions=True)
        logger.debug("Abandoned repository call finished with: %r", outcome[0])

        if token is not None and token.cancelled:
            logger.warning("Query cancelled while waiting on repository")
            raise OperationCancelledError(
                "Query cancelled while waiting on repository",
                {"entity_type": query.entity_type},
            )

        logger.warning("Query exceeded timeout of %.3fs", query.timeout)
        raise QueryTimeoutError(
            f"Query exceeded timeout of {query.timeout}s",
            {"timeout": query.timeout, "entity_type": query.entity_type},
        )
