"""
Adapters layer - Storage backends for scheduling data.
"""

from .memory_store import InMemoryScheduleStore

__all__ = ["InMemoryScheduleStore"]
