"""In-memory resource store.

Versions are derived on write: the entity tag hashes the canonical JSON form
of the payload, and last-modified is the write time truncated to the second.
Writing an identical payload keeps the existing version.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from ratecache.adapters.resources.base import AbstractResourceStore, StoredResource
from ratecache.caching.conditional import ResourceVersion, compute_entity_tag

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_bytes(payload: dict[str, Any]) -> bytes:
    """Serialize a payload deterministically for entity tag computation."""

    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str).encode()


class InMemoryResourceStore(AbstractResourceStore):
    """Thread-safe dict-backed store."""

    def __init__(self, *, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now
        self._lock = threading.RLock()
        self._resources: dict[str, StoredResource] = {}

    def get(self, resource_id: str) -> StoredResource | None:
        with self._lock:
            return self._resources.get(resource_id)

    def put(self, resource_id: str, payload: dict[str, Any]) -> StoredResource:
        """Store a payload and return it with its (possibly new) version.

        Args:
            resource_id: Identifier of the resource.
            payload: JSON-serializable representation.

        Returns:
            The stored resource.
        """

        entity_tag = compute_entity_tag(canonical_bytes(payload))

        with self._lock:
            existing = self._resources.get(resource_id)
            if existing is not None and existing.version.entity_tag == entity_tag:
                return existing

            stored = StoredResource(
                resource_id=resource_id,
                payload=dict(payload),
                version=ResourceVersion(
                    entity_tag=entity_tag,
                    last_modified=self._now().replace(microsecond=0),
                ),
            )
            self._resources[resource_id] = stored

        logger.debug(
            "resource.stored",
            extra={"resource_id": resource_id, "etag": entity_tag},
        )
        return stored
