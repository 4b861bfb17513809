"""Balancer API smart order router adapter (GraphQL ``sorGetSwapPaths``).

This is the one provider that describes its route pool by pool, including
ERC4626 buffer steps, so it also produces the swap path used for on-chain
verification.
"""

import json
import logging
from typing import Any, Optional

from routewatch.exceptions import ConfigurationError
from routewatch.monitor.models import Endpoint, SwapPath, SwapPathStep, parse_amount
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

BALANCER_API_URL = "https://api-v3.balancer.fi/"

GQL_CHAINS = {
    "1": "MAINNET",
    "10": "OPTIMISM",
    "100": "GNOSIS",
    "999": "HYPEREVM",
    "8453": "BASE",
    "9745": "PLASMA",
    "42161": "ARBITRUM",
    "43114": "AVALANCHE",
}

SOR_QUERY = """{
  sorGetSwapPaths(
    chain: %(chain)s
    swapAmount: "%(amount)s"
    swapType: EXACT_IN
    tokenIn: "%(token_in)s"
    tokenOut: "%(token_out)s"
    considerPoolsWithHooks: true
    useProtocolVersion: 3
  ) {
    swapAmount
    swapAmountRaw
    returnAmount
    returnAmountRaw
    paths {
      pools
      isBuffer
      tokens {
        address
      }
    }
  }
}"""


def get_gql_chain(network: str) -> str:
    chain = GQL_CHAINS.get(network)
    if chain is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return chain


def to_decimal_amount(raw_amount: str, decimals: int) -> str:
    """Render a raw integer amount in human units without going through floats.

    >>> to_decimal_amount("1500000", 6)
    '1.500000'
    """
    if parse_amount(raw_amount) is None:
        raise ConfigurationError(f"invalid raw amount: {raw_amount!r}")
    raw_amount = raw_amount.strip()
    if decimals <= 0:
        return raw_amount
    padded = raw_amount.rjust(decimals + 1, "0")
    return f"{padded[:-decimals]}.{padded[-decimals:]}"


class BalancerSORAdapter(RouteAdapter):
    """Balancer SOR adapter. Only routes through Balancer pools, so restricted
    and unrestricted requests are identical."""

    use_post = True

    @property
    def name(self) -> str:
        return "balancer_sor"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        return BALANCER_API_URL

    def build_request_body(self, endpoint: Endpoint, options: RequestOptions) -> bytes:
        query = SOR_QUERY % {
            "chain": get_gql_chain(endpoint.network),
            "amount": to_decimal_amount(endpoint.swap_amount, endpoint.token_in_decimals),
            "token_in": endpoint.token_in,
            "token_out": endpoint.token_out,
        }
        return json.dumps({"query": query}).encode()

    def _swap_paths(self, response: APIResponse) -> tuple[dict, dict]:
        result = self.parse_json(response)

        errors = result.get("errors") or []
        if errors:
            self.fail(f"GraphQL error: {errors[0].get('message', errors[0])}", response.text)

        paths = (result.get("data") or {}).get("sorGetSwapPaths")
        if not paths:
            self.no_route("sorGetSwapPaths returned nothing", response.text)
        return result, paths

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, sor = self._swap_paths(response)

        if not sor.get("swapAmountRaw"):
            self.fail("No swap amount found in response", result)
        amount = self.require_amount(sor.get("returnAmountRaw"), "returnAmountRaw", result)

        paths = sor.get("paths") or []
        if not paths:
            self.no_route("no paths in response", result)

        first = paths[0]
        self.require_pool(first.get("pools") or [], endpoint, result)
        pool_hops = sum(1 for is_buffer in first.get("isBuffer") or [] if not is_buffer)
        self.require_hops(pool_hops, endpoint, result)

        endpoint.return_amount = amount
        endpoint.swap_path = self.extract_swap_path(result, endpoint)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, sor = self._swap_paths(response)
        endpoint.market_price = self.require_amount(sor.get("returnAmountRaw"), "returnAmountRaw", result)

    def extract_swap_path(self, payload: Any, endpoint: Endpoint) -> Optional[SwapPath]:
        paths = ((payload.get("data") or {}).get("sorGetSwapPaths") or {}).get("paths") or []
        if len(paths) != 1:
            # Split routes need per-path input amounts; only single paths are simulated.
            logger.debug(f"{endpoint.name}: {len(paths)} SOR paths, skipping swap path")
            return None

        path = paths[0]
        pools = path.get("pools") or []
        buffers = path.get("isBuffer") or []
        tokens = [token.get("address", "") for token in path.get("tokens") or []]
        if not pools or len(buffers) != len(pools) or len(tokens) != len(pools) + 1:
            logger.warning(
                f"{endpoint.name}: malformed SOR path "
                f"(pools={len(pools)}, isBuffer={len(buffers)}, tokens={len(tokens)})"
            )
            return None

        steps = tuple(
            SwapPathStep(pool=pool, token_out=tokens[i + 1], is_buffer=bool(buffers[i]))
            for i, pool in enumerate(pools)
        )
        return SwapPath(token_in=tokens[0], steps=steps)
