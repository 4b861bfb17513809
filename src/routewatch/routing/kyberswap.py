"""KyberSwap aggregator adapter.

API docs: https://docs.kyberswap.com/kyberswap-solutions/kyberswap-aggregator/aggregator-api-specification/evm-swaps
"""

import logging

import httpx

from routewatch.exceptions import ConfigurationError
from routewatch.monitor.models import Endpoint, PoolType
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

KYBERSWAP_API = "https://aggregator-api.kyberswap.com"
KYBERSWAP_CLIENT_ID = "BalancerTest"

CHAIN_NAMES = {
    "1": "ethereum",
    "10": "optimism",
    "56": "bsc",
    "137": "polygon",
    "146": "sonic",
    "250": "fantom",
    "324": "zksync",
    "999": "hyperevm",
    "2020": "ronin",
    "5000": "mantle",
    "8453": "base",
    "9745": "plasma",
    "42161": "arbitrum",
    "43114": "avalanche",
    "59144": "linea",
    "80094": "berachain",
    "81457": "blast",
    "534352": "scroll",
}

# KyberSwap liquidity source id per Balancer v3 pool family
POOL_TYPE_SOURCES = {
    PoolType.STABLE: "balancer-v3-stable",
    PoolType.STABLE_SURGE: "balancer-v3-stable",
    PoolType.GYRO_E: "balancer-v3-eclp",
    PoolType.QUANT_AMM: "balancer-v3-quantamm",
}


def get_chain_name(network: str) -> str:
    chain = CHAIN_NAMES.get(network)
    if chain is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return chain


def get_included_source(endpoint: Endpoint) -> str:
    source = POOL_TYPE_SOURCES.get(endpoint.pool_type)
    if source is None:
        raise ConfigurationError(f"unsupported pool type: {endpoint.pool_type}")
    return source


class KyberSwapAdapter(RouteAdapter):
    """KyberSwap /routes adapter.

    ``routeSummary.route`` is a list of splits, each split a list of hops
    naming the pool and the liquidity source used.
    """

    @property
    def name(self) -> str:
        return "kyberswap"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        params = {
            "tokenIn": endpoint.token_in,
            "tokenOut": endpoint.token_out,
            "amountIn": endpoint.swap_amount,
        }
        if options.source_only:
            params["includedSources"] = get_included_source(endpoint)
        url = f"{KYBERSWAP_API}/{get_chain_name(endpoint.network)}/api/v1/routes"
        return str(httpx.URL(url, params=params))

    def _route_summary(self, response: APIResponse) -> tuple[dict, dict]:
        result = self.parse_json(response)

        code = result.get("code")
        if code:
            message = result.get("message", "")
            detail = f"{message} (code: {code}, requestId: {result.get('requestId', '')})"
            if "route not found" in message.lower():
                self.no_route(detail, result)
            self.fail(f"KyberSwap API error: {detail}", result)

        return result, (result.get("data") or {}).get("routeSummary") or {}

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, summary = self._route_summary(response)

        amount = self.require_amount(summary.get("amountOut"), "amountOut", result)
        if not summary.get("routeID"):
            self.fail("No route ID in response", result)

        route = summary.get("route") or []
        if not route:
            self.no_route("empty route", result)

        expected_source = get_included_source(endpoint)
        hops = [hop for split in route for hop in split]
        self.require_pool((hop.get("pool", "") for hop in hops), endpoint, result)
        self.require_sources((hop.get("exchange", "") for hop in hops), expected_source, result)
        for split in route:
            self.require_hops(len(split), endpoint, result)

        endpoint.return_amount = amount

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, summary = self._route_summary(response)
        endpoint.market_price = self.require_amount(summary.get("amountOut"), "amountOut", result)
