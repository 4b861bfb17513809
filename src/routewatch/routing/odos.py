"""Odos smart order routing (quote v2) adapter.

API docs: https://docs.odos.xyz/build/api-docs
"""

import json
import logging

from routewatch.monitor.models import Endpoint
from routewatch.routing.base import RequestOptions, RouteAdapter
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)

ODOS_QUOTE_URL = "https://api.odos.xyz/sor/quote/v2"
ODOS_USER_ADDRESS = "0x47E2D28169738039755586743E2dfCF3bd643f86"

BALANCER_V3_SOURCES = [
    "Balancer V3 Gyro",
    "Balancer V3 Stable",
    "Balancer V3 Weighted",
    "Balancer V3 StableSurge",
    "Balancer V3 reCLAMM",
]

NO_VIABLE_PATH = 2000

ODOS_ERROR_MESSAGES = {
    2000: "No viable path found",
    2400: "Algorithm validation error",
    2997: "Algorithm connection error",
    2998: "Algorithm timeout",
    2999: "Algorithm internal error",
    3000: "Internal service error",
    3100: "Configuration internal error",
    3110: "Transaction assembly internal error",
    3120: "Chain data internal error",
    3130: "Pricing internal error",
    3140: "Gas internal error",
    3150: "Simulation internal error",
    3160: "Quote internal error",
    4000: "Bad request",
    4001: "Invalid chain ID",
    4002: "Invalid token address",
    4003: "Invalid amount",
    4004: "Invalid user address",
    4005: "Invalid source whitelist",
    4006: "Invalid destination whitelist",
    4007: "Invalid source blacklist",
    4008: "Invalid destination blacklist",
    4009: "Invalid gas price",
    4011: "Invalid slippage tolerance",
    4019: "Invalid configuration",
    5000: "Internal server error",
    5004: "External service error",
}

# Fallback by leading digit of the code
ODOS_ERROR_CATEGORIES = {
    1: "General API error",
    2: "Unknown algorithm error",
    3: "Unknown internal service error",
    4: "Unknown bad request error",
    5: "Unknown internal server error",
}


def get_odos_error_message(code: int) -> str:
    if code in ODOS_ERROR_MESSAGES:
        return ODOS_ERROR_MESSAGES[code]
    return ODOS_ERROR_CATEGORIES.get(code // 1000, "Unknown error")


class OdosAdapter(RouteAdapter):
    """Odos /sor/quote/v2 adapter.

    Odos does not report which sources a quote used, so restricted checks
    rely on the source whitelist and a positive output value.
    """

    use_post = True

    @property
    def name(self) -> str:
        return "odos"

    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        return ODOS_QUOTE_URL

    def build_request_body(self, endpoint: Endpoint, options: RequestOptions) -> bytes:
        body = {
            "chainId": endpoint.network,
            "inputTokens": [{"amount": endpoint.swap_amount, "tokenAddress": endpoint.token_in}],
            "outputTokens": [{"proportion": 1, "tokenAddress": endpoint.token_out}],
            "userAddr": ODOS_USER_ADDRESS,
        }
        if options.source_only:
            body["sourceWhitelist"] = BALANCER_V3_SOURCES
        return json.dumps(body).encode()

    def _check_errors(self, response: APIResponse) -> dict:
        result = self.parse_json(response)

        code = result.get("errorCode")
        if code:
            message = f"{get_odos_error_message(int(code))} (code: {code})"
            if int(code) == NO_VIABLE_PATH:
                self.no_route(message, result)
            self.fail(f"Odos API error: {message}", result)

        if response.status_code != 200:
            self.fail(f"Unexpected status code: {response.status_code}", result)
        return result

    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self._check_errors(response)

        out_values = result.get("outValues") or []
        if not out_values:
            self.fail("No outValues in response", result)
        if float(out_values[0]) <= 0:
            self.fail(f"outValues is not greater than 0: {out_values[0]}", result)

        out_amounts = result.get("outAmounts") or [None]
        endpoint.return_amount = self.require_amount(out_amounts[0], "outAmounts[0]", result)

    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        result = self._check_errors(response)
        out_amounts = result.get("outAmounts") or [None]
        endpoint.market_price = self.require_amount(out_amounts[0], "outAmounts[0]", result)
