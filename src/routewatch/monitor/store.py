"""In-memory endpoint store.

All reads hand out copies, so a check can run against its own copy
without holding the lock across network I/O.
"""

import asyncio
import copy
import logging
from typing import Callable, Iterable, Optional

from routewatch.monitor.models import Endpoint

logger = logging.getLogger(__name__)


class EndpointStore:
    """Holds every endpoint by name, guarded by a single asyncio lock."""

    def __init__(self, endpoints: Optional[Iterable[Endpoint]] = None):
        self._endpoints: dict[str, Endpoint] = {}
        self._lock = asyncio.Lock()
        for endpoint in endpoints or []:
            if endpoint.name in self._endpoints:
                logger.warning(f"Duplicate endpoint name {endpoint.name}, keeping the first")
                continue
            self._endpoints[endpoint.name] = endpoint

    def __len__(self) -> int:
        return len(self._endpoints)

    def __contains__(self, name: str) -> bool:
        return name in self._endpoints

    async def snapshot(self) -> list[Endpoint]:
        """Copy of every endpoint, in insertion order."""
        async with self._lock:
            return [copy.copy(endpoint) for endpoint in self._endpoints.values()]

    async def get(self, name: str) -> Optional[Endpoint]:
        """Copy of a single endpoint, or None if the name is unknown."""
        async with self._lock:
            endpoint = self._endpoints.get(name)
            return copy.copy(endpoint) if endpoint is not None else None

    async def update(self, name: str, mutate: Callable[[Endpoint], None]) -> bool:
        """Apply ``mutate`` to the stored endpoint under the lock.

        ``mutate`` must not perform I/O. Returns False if the name is unknown.
        """
        async with self._lock:
            endpoint = self._endpoints.get(name)
            if endpoint is None:
                return False
            mutate(endpoint)
            return True
