"""Barter swap routing adapter."""

import json
import logging

from routewatch.exceptions import ConfigurationError
from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

BARTER_HOSTS = {
    "1": "eth",
    "100": "gno",
    "8453": "base",
    "42161": "arb",
}
BALANCER_V3_TYPE = "BalancerV3"
NORMAL_STATUS = "Normal"


def get_route_url(network: str) -> str:
    host = BARTER_HOSTS.get(network)
    if host is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return f"https://api2.{host}.barterswap.xyz/route"


class BarterAdapter(RouteAdapter):
    """Barter /route adapter.

    Each ``route[]`` entry is a split; its ``swaps`` are the hops, with the
    liquidity type and pool in ``swapInfo.metadata``.
    """

    use_post = True

    @property
    def name(self) -> str:
        return "barter"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        return get_route_url(endpoint.network)

    def build_request_body(self, endpoint: Endpoint, options: RequestOptions) -> bytes:
        body = {
            "source": endpoint.token_in,
            "target": endpoint.token_out,
            "sellAmount": endpoint.swap_amount,
        }
        if options.source_only:
            body["typeFilters"] = [BALANCER_V3_TYPE]
        return json.dumps(body).encode()

    def _check_status(self, response: APIResponse) -> dict:
        result = self.parse_json(response)
        status = result.get("status")
        if status != NORMAL_STATUS:
            self.fail(f"API status is {status}, expected {NORMAL_STATUS}", response.text)
        return result

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self._check_status(response)

        routes = result.get("route") or []
        if not routes:
            self.no_route("no routes in response", response.text)
        if not routes[0].get("swaps"):
            self.no_route("no swaps in route", response.text)

        metadata = [
            (swap.get("swapInfo") or {}).get("metadata") or {}
            for route in routes
            for swap in route.get("swaps") or []
        ]
        self.require_sources((m.get("type", "") for m in metadata), BALANCER_V3_TYPE, result)
        self.require_hops(len(routes[0]["swaps"]), endpoint, result)
        self.require_pool((m.get("poolAddress", "") for m in metadata), endpoint, result)

        endpoint.return_amount = self.require_amount(result.get("outputAmount"), "outputAmount", result)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self._check_status(response)
        endpoint.market_price = self.require_amount(result.get("outputAmount"), "outputAmount", result)
