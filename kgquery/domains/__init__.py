"""
Domains - Query engine logic.

Each domain is self-contained with:
- contracts.py: Interfaces (Protocol classes)
- models.py: Pydantic data models
- Implementation files
- test_*.py modules next to the code
"""

__all__ = [
    "graph",
    "traversal",
    "query",
    "orchestration",
]
