"""Monitor runner.

Walks every endpoint once per cycle, checking them one at a time with a
per-solver pause in between, and repeats every CHECK_INTERVAL_HOURS.
"""

import asyncio
import logging
import time
from collections import Counter
from typing import Optional

from routewatch.monitor.models import Endpoint, EndpointStatus
from routewatch.monitor.registry import CheckOptions, ProviderRegistry
from routewatch.monitor.store import EndpointStore

logger = logging.getLogger(__name__)


class MonitorRunner:
    """Runs periodic check cycles over the endpoint store."""

    def __init__(
        self,
        store: EndpointStore,
        registry: ProviderRegistry,
        interval_hours: float = 1,
    ):
        """Initialize monitor runner.

        Args:
            store: Endpoints to check
            registry: Provider registry used to run each check
            interval_hours: Hours between the start of consecutive cycles
        """
        self.store = store
        self.registry = registry
        self.interval = interval_hours * 3600
        self.cycles = 0
        # One lock per endpoint name, so scheduled and manual checks never overlap
        self._check_locks: dict[str, asyncio.Lock] = {}

    async def check_endpoint(self, name: str, options: Optional[CheckOptions] = None) -> bool:
        """Check one endpoint by name and store the result.

        The check runs on a copy, so the store lock is never held during I/O.
        Concurrent checks of the same endpoint run one after the other.

        Returns:
            False if no endpoint has that name
        """
        if name not in self.store:
            return False

        lock = self._check_locks.setdefault(name, asyncio.Lock())
        if lock.locked():
            logger.info(f"{name}: check already in progress, waiting for it")

        async with lock:
            endpoint = await self.store.get(name)
            if endpoint is None:
                return False

            try:
                await self.registry.check_provider(endpoint, options)
            except Exception as e:
                logger.exception(f"Unexpected error checking {name}")
                endpoint.mark(EndpointStatus.ERROR, f"Unexpected error: {type(e).__name__}: {e}")

            await self.store.update(name, lambda stored: stored.merge_result(endpoint))
        return True

    async def check_all_endpoints(self) -> Counter:
        """Run a single check cycle.

        Returns:
            Count of endpoints per resulting status
        """
        endpoints = await self.store.snapshot()
        logger.info(f"Checking {len(endpoints)} endpoints...")

        statuses: Counter = Counter()
        for endpoint in endpoints:
            await self.check_endpoint(endpoint.name)
            checked: Optional[Endpoint] = await self.store.get(endpoint.name)
            if checked is not None:
                statuses[checked.last_status.value] += 1
            if endpoint.delay > 0:
                await asyncio.sleep(endpoint.delay)

        self.cycles += 1
        logger.info(
            f"Cycle {self.cycles} complete: "
            + ", ".join(f"{status}={count}" for status, count in sorted(statuses.items()))
        )
        return statuses

    async def run(self) -> None:
        """Run an immediate cycle, then one cycle per interval."""
        logger.info(
            f"Starting monitor ({len(self.store)} endpoints, interval: {self.interval / 3600:g}h)"
        )

        while True:
            started = time.monotonic()
            try:
                await self.check_all_endpoints()
            except Exception as e:
                logger.error(f"Monitor cycle error: {e}")

            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, self.interval - elapsed))
