"""Resource stores supplying representations and their versions."""

from ratecache.adapters.resources.base import AbstractResourceStore, StoredResource
from ratecache.adapters.resources.in_memory import InMemoryResourceStore

__all__ = ["AbstractResourceStore", "InMemoryResourceStore", "StoredResource"]
