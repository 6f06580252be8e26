"""Resource store port and adapters."""

from .base import ResourceStore
from .memory import InMemoryResourceStore
from .redis_store import RedisResourceStore

__all__ = [
    "InMemoryResourceStore",
    "RedisResourceStore",
    "ResourceStore",
]
