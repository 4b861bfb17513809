"""Pytest configuration and fixtures."""

import json
import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["ONCHAIN_VERIFICATION"] = "false"
os.environ["MARKET_PRICE_DELAY"] = "0"
os.environ["DEFAULT_ROUTE_SOLVER_DELAY"] = "0"
os.environ["ROUTE_SOLVER_DELAYS"] = ""
os.environ["DISABLED_ROUTE_SOLVERS"] = ""

from routewatch.monitor.models import Endpoint, PoolType
from routewatch.routing.client import APIResponse

POOL = "0x85b2b559bc2d21104c4defdd6efca8a20343361d"
GHO = "0x40d16fc0246ad3160ccc09b8d0d3a2cd28ae6c2f"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


def make_endpoint(**overrides) -> Endpoint:
    """Mainnet GHO/USDC endpoint; any field can be overridden."""
    fields = dict(
        name="Paraswap-Mainnet-Boosted-Stable(GHO/USDC)",
        base_name="Mainnet-Boosted-Stable(GHO/USDC)",
        solver_name="Paraswap",
        route_solver="paraswap",
        network="1",
        token_in=GHO,
        token_out=USDC,
        token_in_decimals=18,
        token_out_decimals=6,
        swap_amount="1000000000000000000000",
        expected_pool=POOL,
        expected_no_hops=1,
        pool_type=PoolType.STABLE,
        delay=0,
    )
    fields.update(overrides)
    return Endpoint(**fields)


def make_response(payload, status_code: int = 200) -> APIResponse:
    body = payload if isinstance(payload, (bytes, str)) else json.dumps(payload)
    if isinstance(body, str):
        body = body.encode()
    return APIResponse(status_code=status_code, body=body)


class StubNotifier:
    """Records notifications instead of sending them."""

    def __init__(self):
        self.messages: list[str] = []

    async def notify(self, message: str) -> bool:
        self.messages.append(message)
        return True


@pytest.fixture
def endpoint() -> Endpoint:
    return make_endpoint()


@pytest.fixture
def notifier() -> StubNotifier:
    return StubNotifier()
