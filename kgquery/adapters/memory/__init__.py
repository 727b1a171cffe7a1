"""
In-memory adapter - NetworkX graph repository.
"""

from .repository import InMemoryGraphRepository

__all__ = ["InMemoryGraphRepository"]
