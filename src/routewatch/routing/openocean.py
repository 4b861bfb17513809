"""OpenOcean v4 quote adapter.

API docs: https://apis.openocean.finance/developer/apis/swap-api/api-v4
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from routewatch.exceptions import ConfigurationError, TransportError
from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter, same_address
from routewatch.routing.client import APIClient, APIResponse

logger = logging.getLogger(__name__)

OPENOCEAN_API = "https://open-api.openocean.finance/v4"
AUXILIARY_TIMEOUT = 10.0
BALANCER_V3_DEX = "BalancerV3"

CHAIN_NAMES = {
    "1": "eth",
    "10": "optimism",
    "56": "bsc",
    "100": "xdai",
    "137": "polygon",
    "250": "fantom",
    "324": "zksync",
    "8453": "base",
    "42161": "arbitrum",
    "43114": "avax",
    "59144": "linea",
    "534352": "scroll",
}

# Used when /gasPrice is unavailable (wei)
DEFAULT_GAS_PRICES = {
    "eth": "30000000000",
    "bsc": "3000000000",
    "arbitrum": "100000000",
    "polygon": "30000000000",
    "optimism": "1000000",
    "avax": "25000000000",
    "base": "1000000",
    "xdai": "2000000000",
    "fantom": "50000000000",
    "zksync": "250000000",
    "linea": "50000000",
    "scroll": "100000000",
}
FALLBACK_GAS_PRICE = "30000000000"


def get_chain_name(network: str) -> str:
    chain = CHAIN_NAMES.get(network)
    if chain is None:
        raise ConfigurationError(f"unsupported network: {network}")
    return chain


def is_balancer_v3_dex(dex: str) -> bool:
    """OpenOcean lists Balancer v3 under several dex codes, all prefixed BalancerV3."""
    return BALANCER_V3_DEX in dex


class OpenOceanAdapter(RouteAdapter):
    """OpenOcean /quote adapter.

    Building a URL needs two auxiliary lookups: the current gas price and,
    for restricted quotes, the dex indices that belong to Balancer v3.
    """

    def __init__(self, client: Optional[APIClient] = None):
        self.client = client or APIClient(timeout=AUXILIARY_TIMEOUT)

    @property
    def name(self) -> str:
        return "openocean"

    async def _fetch(self, url: str) -> dict:
        response = await self.client.get(url, timeout=AUXILIARY_TIMEOUT)
        data = json.loads(response.body)
        if not isinstance(data, dict) or data.get("code") != 200:
            code = data.get("code") if isinstance(data, dict) else None
            raise ValueError(f"{url} returned code {code}")
        return data

    async def get_gas_price(self, chain: str) -> str:
        try:
            data = await self._fetch(f"{OPENOCEAN_API}/{chain}/gasPrice")
            standard = (data.get("data") or {}).get("standard")
            if isinstance(standard, dict):
                standard = standard.get("legacyGasPrice")
            return str(int(Decimal(str(standard))))
        except (TransportError, ValueError, InvalidOperation) as e:
            fallback = DEFAULT_GAS_PRICES.get(chain, FALLBACK_GAS_PRICE)
            logger.warning(f"OpenOcean gas price lookup failed for {chain} ({e}), using {fallback}")
            return fallback

    async def get_balancer_dex_ids(self, chain: str) -> str:
        """Comma-separated dex indices whose code marks them as Balancer v3."""
        try:
            data = await self._fetch(f"{OPENOCEAN_API}/{chain}/dexList")
        except (TransportError, ValueError) as e:
            logger.warning(f"OpenOcean dex list lookup failed for {chain}: {e}")
            return ""

        indices = [
            str(dex.get("index"))
            for dex in data.get("data") or []
            if is_balancer_v3_dex(dex.get("code", ""))
        ]
        if indices:
            logger.info(f"OpenOcean Balancer v3 dex indices on {chain}: {','.join(indices)}")
        else:
            logger.warning(f"OpenOcean lists no Balancer v3 dexes on {chain}")
        return ",".join(indices)

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        chain = get_chain_name(endpoint.network)
        params = {
            "inTokenAddress": endpoint.token_in,
            "outTokenAddress": endpoint.token_out,
            "amountDecimals": endpoint.swap_amount,
            "gasPriceDecimals": await self.get_gas_price(chain),
            "slippage": "1",
        }
        if options.source_only:
            dex_ids = await self.get_balancer_dex_ids(chain)
            if dex_ids:
                params["enabledDexIds"] = dex_ids
        return str(httpx.URL(f"{OPENOCEAN_API}/{chain}/quote", params=params))

    def _quote(self, response: APIResponse) -> tuple[dict, dict]:
        result = self.parse_json(response)
        if result.get("code") != 200:
            self.fail(
                f"OpenOcean API error (code {result.get('code')}): {result.get('error', '')}",
                response.text,
            )
        return result, result.get("data") or {}

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, data = self._quote(response)

        amount = self.require_amount(data.get("outAmount"), "outAmount", response.text)

        routes = (data.get("path") or {}).get("routes") or []
        if not routes:
            self.no_route("no routes in response", response.text)

        dexes = [
            dex
            for route in routes
            for sub_route in route.get("subRoutes") or []
            for dex in sub_route.get("dexes") or []
        ]
        for dex in dexes:
            if not is_balancer_v3_dex(dex.get("dex", "")):
                self.fail(f"Found source {dex.get('dex')}, expected {BALANCER_V3_DEX}", result)

        if not any(same_address(dex.get("id"), endpoint.expected_pool) for dex in dexes):
            self.fail(f"Expected pool {endpoint.expected_pool} not found in route", result)

        endpoint.return_amount = amount

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result, data = self._quote(response)
        endpoint.market_price = self.require_amount(data.get("outAmount"), "outAmount", response.text)
