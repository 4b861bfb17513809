"""Endpoint monitoring: models, store, provider registry and runner."""

from routewatch.monitor.models import (
    Endpoint,
    EndpointStatus,
    PoolType,
    SwapPath,
    SwapPathStep,
    select_higher_amount,
)
from routewatch.monitor.store import EndpointStore

__all__ = [
    "Endpoint",
    "EndpointStatus",
    "EndpointStore",
    "PoolType",
    "SwapPath",
    "SwapPathStep",
    "select_higher_amount",
]
