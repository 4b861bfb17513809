"""HyperBloom (HyperEVM) swap price adapter."""

import logging
from decimal import Decimal, InvalidOperation

import httpx

from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter, same_address
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

HYPERBLOOM_PRICE_URL = "https://api.hyperbloom.xyz/swap/v1/price"
BALANCER_V3_SOURCE = "BalancerV3"


def _is_zero(value) -> bool:
    try:
        return Decimal(str(value)) == 0
    except InvalidOperation:
        return False


class HyperBloomAdapter(RouteAdapter):
    """HyperBloom /swap/v1/price adapter (0x-style response)."""

    @property
    def name(self) -> str:
        return "hyperbloom"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        params = {
            "sellToken": endpoint.token_in,
            "buyToken": endpoint.token_out,
            "sellAmount": endpoint.swap_amount,
        }
        if options.source_only:
            params["includedSources"] = BALANCER_V3_SOURCE
        return str(httpx.URL(HYPERBLOOM_PRICE_URL, params=params))

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)

        amount = self.require_amount(result.get("buyAmount"), "buyAmount", response.text)

        price = result.get("price")
        if not price or _is_zero(price):
            self.fail(f"Missing or zero price: {price!r}", response.text)

        sources = result.get("sources") or []
        if not sources:
            self.fail("No sources in response", response.text)

        used = [source for source in sources if not _is_zero(source.get("proportion", "0"))]
        if not used:
            self.no_route(f"no {BALANCER_V3_SOURCE} source with proportion > 0", response.text)
        self.require_sources((source.get("name", "") for source in used), BALANCER_V3_SOURCE, result)

        if not same_address(result.get("sellTokenAddress"), endpoint.token_in):
            self.fail(
                f"sellTokenAddress mismatch: expected {endpoint.token_in}, "
                f"got {result.get('sellTokenAddress')}",
                response.text,
            )
        if not same_address(result.get("buyTokenAddress"), endpoint.token_out):
            self.fail(
                f"buyTokenAddress mismatch: expected {endpoint.token_out}, "
                f"got {result.get('buyTokenAddress')}",
                response.text,
            )

        endpoint.return_amount = amount

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)
        endpoint.market_price = self.require_amount(result.get("buyAmount"), "buyAmount", response.text)
