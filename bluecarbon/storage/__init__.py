"""Storage collaborator: interface plus the in-memory backend."""

from bluecarbon.storage.base import ProjectStore
from bluecarbon.storage.memory import InMemoryProjectStore

__all__ = ["ProjectStore", "InMemoryProjectStore"]
