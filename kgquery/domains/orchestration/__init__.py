"""
Orchestration Domain - Composition of the query engine components.

This domain handles:
- Cache-first query execution
- Path finding entry points
- Plan explanation
"""

from .service import GraphQueryService

__all__ = ["GraphQueryService"]
