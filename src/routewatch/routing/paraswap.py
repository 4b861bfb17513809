"""ParaSwap price API adapter.

API docs: https://developers.paraswap.network/api/get-rate-for-a-token-pair
"""

import logging

import httpx

from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

PARASWAP_PRICES_URL = "https://api.paraswap.io/prices/"
PARASWAP_API_VERSION = "6.2"
BALANCER_V3_EXCHANGE = "BalancerV3"
NO_LIQUIDITY_ERROR = "No routes found with enough liquidity"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ParaswapAdapter(RouteAdapter):
    """ParaSwap /prices adapter.

    Route shape: ``priceRoute.bestRoute[].swaps[].swapExchanges[]``, each
    exchange naming its DEX and the pool addresses it trades through.
    """

    @property
    def name(self) -> str:
        return "paraswap"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        params = {
            "version": PARASWAP_API_VERSION,
            "srcToken": endpoint.token_in,
            "destToken": endpoint.token_out,
            "amount": endpoint.swap_amount,
            "srcDecimals": str(endpoint.token_in_decimals),
            "destDecimals": str(endpoint.token_out_decimals),
            "side": "SELL",
            "network": endpoint.network,
            "otherExchangePrices": "true",
            "partner": "paraswap.io",
            "userAddress": ZERO_ADDRESS,
            "ignoreBadUsdPrice": "true",
        }
        if options.source_only:
            params["includeDEXS"] = BALANCER_V3_EXCHANGE
        return str(httpx.URL(PARASWAP_PRICES_URL, params=params))

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)

        error = result.get("error")
        if error == NO_LIQUIDITY_ERROR:
            self.no_route(error, response.text)
        if error:
            self.fail(f"API error: {error}", response.text)

        price_route = result.get("priceRoute") or {}
        best_route = price_route.get("bestRoute") or []
        if not best_route:
            self.fail("No best route found", result)

        exchanges = [
            exchange
            for route in best_route
            for swap in route.get("swaps") or []
            for exchange in swap.get("swapExchanges") or []
        ]
        if not exchanges:
            self.fail("Route does not use Balancer V3", result)
        self.require_sources((e.get("exchange", "") for e in exchanges), BALANCER_V3_EXCHANGE, result)

        for route in best_route:
            self.require_hops(len(route.get("swaps") or []), endpoint, result)

        pools = [pool for e in exchanges for pool in e.get("poolAddresses") or []]
        self.require_pool(pools, endpoint, result)

        endpoint.return_amount = self.require_amount(price_route.get("destAmount"), "destAmount", result)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)
        if result.get("error"):
            self.fail(f"API error: {result['error']}", response.text)
        price_route = result.get("priceRoute") or {}
        endpoint.market_price = self.require_amount(price_route.get("destAmount"), "destAmount", result)
