"""Resource store interface.

The service does not own resource data. A store hands back the current
representation together with its :class:`ResourceVersion` so routes can
answer conditional requests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ratecache.caching.conditional import ResourceVersion


@dataclass(frozen=True)
class StoredResource:
    """A resource representation and the version it was read at."""

    resource_id: str
    payload: dict[str, Any]
    version: ResourceVersion


class AbstractResourceStore(ABC):
    """Interface for resource stores."""

    @abstractmethod
    def get(self, resource_id: str) -> StoredResource | None:
        """Return the current resource, or None when it does not exist."""
        raise NotImplementedError
