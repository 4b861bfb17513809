"""1inch swap API adapter.

API docs: https://portal.1inch.dev/documentation/apis/swap/introduction
"""

import logging

import httpx

from routewatch.exceptions import ConfigurationError
from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

# 1inch API endpoints
ONEINCH_API_V6 = "https://api.1inch.dev/swap/v6.0"

# Balancer v3 protocol name per chain id
BALANCER_PROTOCOLS = {
    "1": "BALANCER_V3",
    "100": "GNOSIS_BALANCER_V3",
    "8453": "BASE_BALANCER_V3",
    "42161": "ARBITRUM_BALANCER_V3",
    "43114": "AVALANCHE_BALANCER_V3",
}

INSUFFICIENT_LIQUIDITY = "insufficient liquidity"


def get_balancer_protocol(network: str) -> str:
    protocol = BALANCER_PROTOCOLS.get(network)
    if protocol is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return protocol


class OneInchAdapter(RouteAdapter):
    """1inch /quote adapter.

    ``protocols`` is nested as routes -> hops -> parts; each hop's parts
    add up to 100.
    """

    @property
    def name(self) -> str:
        return "1inch"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        params = {
            "src": endpoint.token_in,
            "dst": endpoint.token_out,
            "amount": endpoint.swap_amount,
            "includeProtocols": "true",
        }
        if options.source_only:
            params["protocols"] = get_balancer_protocol(endpoint.network)
        return str(httpx.URL(f"{ONEINCH_API_V6}/{endpoint.network}/quote", params=params))

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)

        description = result.get("description")
        if description == INSUFFICIENT_LIQUIDITY:
            self.no_route(description, result)
        if result.get("error"):
            detail = f": {description}" if description else ""
            self.fail(f"API error: {result['error']}{detail}", result)

        protocols = result.get("protocols")
        if protocols is None:
            self.fail("1inch network support WIP", response.text)
        if not protocols or not protocols[0] or not protocols[0][0]:
            self.fail("No protocols found in response", result)

        expected = get_balancer_protocol(endpoint.network)
        for route in protocols:
            for hop in route:
                self.require_sources((part.get("name", "") for part in hop), expected, result)
                total = sum(int(part.get("part") or 0) for part in hop)
                if total != 100:
                    self.fail(f"Protocol parts sum to {total}, expected 100", result)

        endpoint.return_amount = self.require_amount(result.get("dstAmount"), "dstAmount", result)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)
        endpoint.market_price = self.require_amount(result.get("dstAmount"), "dstAmount", result)
