"""Factory for the provider registry.

Registers every route adapter with its endpoint headers, API key
environment variable and timeout.
"""

import logging
from typing import Optional

from routewatch.config import Settings, get_settings
from routewatch.monitor.registry import Notifier, OnChainVerifier, ProviderConfig, ProviderRegistry
from routewatch.routing.balancer_sor import BalancerSORAdapter
from routewatch.routing.barter import BarterAdapter
from routewatch.routing.client import APIClient
from routewatch.routing.hyperbloom import HyperBloomAdapter
from routewatch.routing.kyberswap import KYBERSWAP_CLIENT_ID, KyberSwapAdapter
from routewatch.routing.odos import OdosAdapter
from routewatch.routing.oneinch import OneInchAdapter
from routewatch.routing.openocean import OpenOceanAdapter
from routewatch.routing.paraswap import ParaswapAdapter
from routewatch.routing.zerox import ZeroXAdapter

logger = logging.getLogger(__name__)


def create_provider_configs(client: APIClient, settings: Settings) -> list[ProviderConfig]:
    """Provider configs for every supported route solver."""
    timeout = settings.http_timeout
    return [
        ProviderConfig(adapter=ParaswapAdapter(), timeout=timeout),
        ProviderConfig(
            adapter=OneInchAdapter(),
            api_key_env="INCH_API_KEY",
            api_key_prefix="Bearer ",
            timeout=timeout,
        ),
        ProviderConfig(
            adapter=ZeroXAdapter(),
            api_key_env="ZEROX_API_KEY",
            api_key_header="0x-api-key",
            headers={"0x-version": "v2"},
            timeout=timeout,
        ),
        ProviderConfig(adapter=OdosAdapter(), timeout=timeout),
        ProviderConfig(
            adapter=KyberSwapAdapter(),
            headers={"x-client-id": KYBERSWAP_CLIENT_ID},
            timeout=timeout,
        ),
        ProviderConfig(
            adapter=HyperBloomAdapter(),
            api_key_env="HYPERBLOOM_API_KEY",
            api_key_header="api-key",
            timeout=timeout,
        ),
        ProviderConfig(adapter=BalancerSORAdapter(), timeout=timeout),
        ProviderConfig(
            adapter=BarterAdapter(),
            api_key_env="BARTER_API_KEY",
            api_key_prefix="Bearer ",
            headers={"X-Request-Id": "123"},
            timeout=timeout,
        ),
        ProviderConfig(adapter=OpenOceanAdapter(client=client), timeout=timeout),
    ]


def create_registry(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    verifier: Optional[OnChainVerifier] = None,
    client: Optional[APIClient] = None,
) -> ProviderRegistry:
    """Create a registry with all route solvers registered.

    Args:
        settings: Settings to use (defaults to cached settings)
        notifier: Receives failure alerts
        verifier: On-chain verifier; None disables on-chain checks
        client: HTTP client shared by all providers
    """
    settings = settings or get_settings()
    client = client or APIClient(timeout=settings.http_timeout)

    registry = ProviderRegistry(
        client=client,
        notifier=notifier,
        verifier=verifier,
        market_price_delay=settings.market_price_delay,
    )
    for config in create_provider_configs(client, settings):
        registry.register(config)

    logger.info(f"Registered route solvers: {', '.join(registry.route_solvers)}")
    return registry
