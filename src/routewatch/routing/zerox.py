"""0x Swap API (permit2 price) adapter.

API docs: https://0x.org/docs/api#tag/Swap/operation/swap::permit2::getPrice
"""

import logging

import httpx

from routewatch.exceptions import ConfigurationError
from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

ZEROX_PRICE_URL = "https://api.0x.org/swap/permit2/price"
BALANCER_V3_SOURCE = "Balancer_V3"

# 0x has no include filter, so restricted quotes exclude every other source.
_COMMON_EXCLUDED = [
    "Bebop", "Fluid", "Hydrex", "Blackhole", "Blackhole_CL", "Lithos", "QuickSwap_V4", "0x_RFQ",
]
_MAINNET_EXCLUDED = _COMMON_EXCLUDED + [
    "Ambient", "Angle", "Balancer_V1", "Balancer_V2", "Bancor_V3", "Curve", "DODO_V1", "DODO_V2",
    "DeFi_Swap", "Ekubo", "Fraxswap_V2", "Integral", "Lido", "Maker_PSM", "Maverick",
    "Maverick_V2", "Origin", "PancakeSwap_V2", "PancakeSwap_V3", "Polygon_Migration", "RingSwap",
    "RocketPool", "ShibaSwap", "Sky_Migration", "Solidly_V3", "Spark", "Stepn", "SushiSwap",
    "SushiSwap_V3", "Swaap_V2", "Synapse", "Uniswap_V2", "Uniswap_V3", "Uniswap_V4",
    "Wrapped_USDM", "Yearn", "Yearn_V3",
]
_BASE_EXCLUDED = _COMMON_EXCLUDED + [
    "Aerodrome_V2", "Aerodrome_V3", "AlienBase_Stable", "AlienBase_V2", "AlienBase_V3", "Angle",
    "Balancer_V2", "BaseSwap", "BaseX", "Clober_V2", "Curve", "DackieSwap_V2", "DackieSwap_V3",
    "DeltaSwap", "Equalizer", "Infusion", "IziSwap", "Kim_V4", "Kinetix", "Maverick",
    "Maverick_V2", "Morphex", "Overnight", "PancakeSwap_V2", "PancakeSwap_V3", "Pinto",
    "RocketSwap", "SharkSwap_V2", "SoSwap", "Solidly_V3", "Spark_PSM", "SushiSwap",
    "SushiSwap_V3", "Swaap_V2", "SwapBased_V3", "Synapse", "Synthswap_V2", "Synthswap_V3",
    "Thick", "Treble", "Treble_V2", "Uniswap_V2", "Uniswap_V3", "Uniswap_V4", "WOOFi_V2",
    "Wrapped_BLT", "Wrapped_USDM",
]

EXCLUDED_SOURCES = {
    "1": _MAINNET_EXCLUDED,
    "8453": _BASE_EXCLUDED,
    "9745": _MAINNET_EXCLUDED,
    "42161": _COMMON_EXCLUDED + [
        "ArbSwap", "DeltaSwap", "Swaap_V2", "SpartaDex", "Angle", "Balancer_V2", "Camelot_V2",
        "Camelot_V3", "Curve", "DODO_V2", "GMX_V1", "Integral", "MIMSwap", "Maverick_V2",
        "PancakeSwap_V2", "PancakeSwap_V3", "Ramses", "Ramses_V2", "Solidly_V3", "SushiSwap",
        "Swapr", "Synapse", "TraderJoe_V2.1", "TraderJoe_V2.2", "Uniswap_V2", "Uniswap_V3",
        "Uniswap_V4", "WOOFi_V2", "Wrapped_USDM",
    ],
    "43114": _BASE_EXCLUDED + [
        "GMX_V1", "TraderJoe_V1", "Pangolin", "DODO_V2", "TraderJoe_V2.1", "Pharaoh_CL",
        "TraderJoe_V2.2",
    ],
}


def get_excluded_sources(network: str) -> str:
    sources = EXCLUDED_SOURCES.get(network)
    if sources is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return ",".join(dict.fromkeys(sources))


class ZeroXAdapter(RouteAdapter):
    """0x permit2 /price adapter.

    ``route.tokens`` lists every token touched, so a route with N hops
    names N + 1 tokens.
    """

    @property
    def name(self) -> str:
        return "0x"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        params = {
            "chainId": endpoint.network,
            "sellToken": endpoint.token_in,
            "buyToken": endpoint.token_out,
            "sellAmount": endpoint.swap_amount,
        }
        if options.source_only:
            params["excludedSources"] = get_excluded_sources(endpoint.network)
        return str(httpx.URL(ZEROX_PRICE_URL, params=params))

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)

        if result.get("liquidityAvailable") is False:
            self.no_route("liquidityAvailable is false", result)

        route = result.get("route") or {}
        fills = route.get("fills")
        tokens = route.get("tokens")
        if fills is None or tokens is None:
            self.fail("No Routes Found", response.text)

        self.require_sources((fill.get("source", "") for fill in fills), BALANCER_V3_SOURCE, result)

        expected_tokens = endpoint.expected_no_hops + 1
        if len(tokens) != expected_tokens:
            self.fail(
                f"Expected {expected_tokens} tokens ({endpoint.expected_no_hops} hops), got {len(tokens)}",
                result,
            )

        endpoint.return_amount = self.require_amount(result.get("buyAmount"), "buyAmount", result)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self.parse_json(response)
        endpoint.market_price = self.require_amount(result.get("buyAmount"), "buyAmount", result)
