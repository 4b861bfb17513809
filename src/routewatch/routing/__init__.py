"""Route provider adapters.

Providers:
- ParaSwap, 1inch, 0x, Odos, KyberSwap, OpenOcean: multi-chain DEX aggregators
- HyperBloom: HyperEVM aggregator
- Barter: solver-based router (Mainnet, Base)
- Balancer SOR: Balancer's own smart order router (GraphQL)
"""

from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIClient, APIResponse

__all__ = ["APIClient", "APIResponse", "RequestOptions", "RouteAdapter"]
