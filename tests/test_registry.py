"""Tests for the provider registry check flow."""

import httpx
import pytest

from routewatch.exceptions import OnChainConfigError, OnChainQueryError
from routewatch.monitor.models import EndpointStatus, PoolType
from routewatch.monitor.registry import CheckOptions, KnownUnsupported, ProviderConfig, ProviderRegistry
from routewatch.monitor.runner import MonitorRunner
from routewatch.monitor.store import EndpointStore
from routewatch.routing.balancer_sor import BalancerSORAdapter
from routewatch.routing.client import APIClient
from routewatch.routing.oneinch import OneInchAdapter
from routewatch.routing.paraswap import ParaswapAdapter

from conftest import GHO, POOL, USDC, make_endpoint
from test_routing import oneinch_payload, paraswap_payload, sor_payload


class ParaswapServer:
    """Serves canned restricted and market responses and records requests."""

    def __init__(self, restricted=None, market=None, restricted_status=200, market_status=200):
        self.restricted = restricted if restricted is not None else paraswap_payload()
        self.market = market if market is not None else paraswap_payload(dest_amount="1001")
        self.restricted_status = restricted_status
        self.market_status = market_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "includeDEXS" in request.url.params:
            return httpx.Response(self.restricted_status, json=self.restricted)
        if isinstance(self.market, str):
            return httpx.Response(self.market_status, text=self.market)
        return httpx.Response(self.market_status, json=self.market)


class FakeVerifier:
    def __init__(self, amount="31337", error=None):
        self.amount = amount
        self.error = error
        self.calls = []

    async def query_onchain_price(self, endpoint):
        self.calls.append(endpoint.swap_path)
        if self.error:
            raise self.error
        return self.amount


def make_registry(handler, notifier=None, verifier=None, secret_lookup=lambda name: None, **kwargs):
    registry = ProviderRegistry(
        client=APIClient(transport=httpx.MockTransport(handler)),
        notifier=notifier,
        verifier=verifier,
        secret_lookup=secret_lookup,
        market_price_delay=0,
        **kwargs,
    )
    registry.register(ProviderConfig(adapter=ParaswapAdapter()))
    registry.register(
        ProviderConfig(adapter=OneInchAdapter(), api_key_env="INCH_API_KEY", api_key_prefix="Bearer ")
    )
    registry.register(ProviderConfig(adapter=BalancerSORAdapter()))
    return registry


class TestDispatch:
    """Tests for adapter lookup and known-unsupported combinations."""

    @pytest.mark.asyncio
    async def test_unknown_route_solver(self, notifier):
        server = ParaswapServer()
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint(route_solver="uniswapx")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UNSUPPORTED
        assert endpoint.last_checked is not None
        assert server.requests == []
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_known_unsupported_is_info(self, notifier):
        server = ParaswapServer()
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint(route_solver="1inch", pool_type=PoolType.GYRO_E)

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.INFO
        assert endpoint.message == "1inch GyroE integration WIP"
        assert server.requests == []
        assert notifier.messages == []

    def test_known_unsupported_by_network(self):
        registry = make_registry(ParaswapServer())

        assert registry.find_known_unsupported(make_endpoint(route_solver="1inch", network="43114"))
        assert registry.find_known_unsupported(make_endpoint(route_solver="1inch", network="1")) is None

    @pytest.mark.asyncio
    async def test_custom_known_unsupported_table(self):
        table = [KnownUnsupported("paraswap", "Paraswap paused")]
        registry = make_registry(ParaswapServer(), known_unsupported=table)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.INFO
        assert endpoint.message == "Paraswap paused"


class TestTwoPhaseCheck:
    """Tests for the restricted check followed by the market price check."""

    @pytest.mark.asyncio
    async def test_success(self, notifier):
        server = ParaswapServer()
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert endpoint.message == "Ok"
        assert endpoint.return_amount == "999"
        assert endpoint.market_price == "1001"
        assert endpoint.best_amount == "1001"
        assert len(server.requests) == 2
        assert server.requests[0].url.params["includeDEXS"] == "BalancerV3"
        assert "includeDEXS" not in server.requests[1].url.params
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_restricted_failure_is_down_and_notified(self, notifier):
        server = ParaswapServer(restricted={"error": "No routes found with enough liquidity"}, restricted_status=400)
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.DOWN
        assert endpoint.message.startswith("No route found:")
        assert endpoint.return_amount is None
        assert endpoint.market_price == "1001"
        assert "enough liquidity" in endpoint.last_response
        assert len(notifier.messages) == 1
        assert notifier.messages[0].startswith(f"[{endpoint.name}] No route found:")
        assert "Response body:" in notifier.messages[0]

    @pytest.mark.asyncio
    async def test_market_failure_keeps_restricted_result(self, notifier):
        server = ParaswapServer(market="<html>oops</html>", market_status=500)
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert endpoint.return_amount == "999"
        assert endpoint.market_price is None
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_malformed_market_payload_keeps_restricted_result(self, notifier):
        server = ParaswapServer(market={"priceRoute": "unavailable"})
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint()
        runner = MonitorRunner(EndpointStore([endpoint]), registry)

        await runner.check_endpoint(endpoint.name)

        stored = await runner.store.get(endpoint.name)
        assert stored.last_status == EndpointStatus.UP
        assert stored.message == "Ok"
        assert stored.return_amount == "999"
        assert stored.market_price is None
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_malformed_restricted_payload_is_down(self, notifier):
        server = ParaswapServer(restricted={"priceRoute": {"destAmount": "999", "bestRoute": {"oops": 1}}})
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint, CheckOptions(source_only=True))

        assert endpoint.last_status == EndpointStatus.DOWN
        assert endpoint.message.startswith("Unexpected response shape (HTTP 200): AttributeError")
        assert "oops" in endpoint.last_response
        assert endpoint.return_amount is None
        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_transport_failure_is_down(self, notifier):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        registry = make_registry(handler, notifier=notifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.DOWN
        assert endpoint.message.startswith("Error sending request:")
        assert endpoint.market_price is None
        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_stale_results_cleared_on_failure(self):
        server = ParaswapServer(restricted=paraswap_payload(swaps=2))
        registry = make_registry(server)
        endpoint = make_endpoint(return_amount="5", onchain_amount="5")

        await registry.check_provider(endpoint, CheckOptions(source_only=True))

        assert endpoint.last_status == EndpointStatus.DOWN
        assert endpoint.return_amount is None
        assert endpoint.onchain_amount is None

    @pytest.mark.asyncio
    async def test_repeat_check_is_idempotent(self):
        registry = make_registry(ParaswapServer())
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)
        first = {name: getattr(endpoint, name) for name in endpoint.RESULT_FIELDS if name != "last_checked"}
        await registry.check_provider(endpoint)
        second = {name: getattr(endpoint, name) for name in endpoint.RESULT_FIELDS if name != "last_checked"}

        assert first == second

    @pytest.mark.asyncio
    async def test_market_only_option(self):
        server = ParaswapServer()
        registry = make_registry(server)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint, CheckOptions(source_only=False))

        assert endpoint.market_price == "1001"
        assert endpoint.return_amount is None
        assert endpoint.last_status == EndpointStatus.UNKNOWN
        assert len(server.requests) == 1


class TestApiKeys:
    """Tests for API key resolution."""

    @pytest.mark.asyncio
    async def test_missing_key_is_error_and_skips_market(self, notifier):
        server = ParaswapServer()
        registry = make_registry(server, notifier=notifier)
        endpoint = make_endpoint(route_solver="1inch")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.ERROR
        assert endpoint.message == "INCH_API_KEY environment variable not set"
        assert endpoint.market_price is None
        assert server.requests == []
        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_key_sent_as_bearer_and_cached(self):
        seen = []
        lookups = []

        def handler(request):
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200, json=oneinch_payload())

        def lookup(name):
            lookups.append(name)
            return "secret"

        registry = make_registry(handler, secret_lookup=lookup)
        endpoint = make_endpoint(route_solver="1inch")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert seen == ["Bearer secret", "Bearer secret"]
        assert lookups == ["INCH_API_KEY"]


class TestOnChainHandoff:
    """Tests for handing decomposed swap paths to the on-chain verifier."""

    @staticmethod
    def sor_handler(request):
        return httpx.Response(200, json=sor_payload())

    @pytest.mark.asyncio
    async def test_verifier_receives_swap_path(self):
        verifier = FakeVerifier(amount="31337")
        registry = make_registry(self.sor_handler, verifier=verifier)
        endpoint = make_endpoint(route_solver="balancer_sor")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert endpoint.onchain_amount == "31337"
        assert len(verifier.calls) == 1
        assert verifier.calls[0].token_in == GHO
        assert verifier.calls[0].steps[1].pool == POOL
        assert verifier.calls[0].steps[-1].token_out == USDC

    @pytest.mark.asyncio
    async def test_mismatch_is_informational(self):
        registry = make_registry(self.sor_handler, verifier=FakeVerifier(amount="31000"))
        endpoint = make_endpoint(route_solver="balancer_sor")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert endpoint.onchain_amount == "31000"
        assert endpoint.return_amount == "31337"

    @pytest.mark.asyncio
    async def test_query_failure_is_down(self, notifier):
        verifier = FakeVerifier(error=OnChainQueryError("execution reverted"))
        registry = make_registry(self.sor_handler, notifier=notifier, verifier=verifier)
        endpoint = make_endpoint(route_solver="balancer_sor")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.DOWN
        assert endpoint.message == "On-chain query failed: execution reverted"
        assert endpoint.return_amount == "31337"
        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_config_failure_is_error(self):
        verifier = FakeVerifier(error=OnChainConfigError("no RPC URL configured for network 1"))
        registry = make_registry(self.sor_handler, verifier=verifier)
        endpoint = make_endpoint(route_solver="balancer_sor")

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.ERROR
        assert endpoint.message.startswith("On-chain verification unavailable:")

    @pytest.mark.asyncio
    async def test_no_swap_path_skips_verifier(self):
        verifier = FakeVerifier()
        registry = make_registry(ParaswapServer(), verifier=verifier)
        endpoint = make_endpoint()

        await registry.check_provider(endpoint)

        assert endpoint.last_status == EndpointStatus.UP
        assert verifier.calls == []
        assert endpoint.onchain_amount is None
