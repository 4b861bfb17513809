"""Tests for settings and endpoint generation."""

import pytest

from routewatch.catalog import ROUTE_SOLVERS, SWAP_PAIRS, RouteSolver, generate_endpoints
from routewatch.config import Settings, get_required_secret
from routewatch.routing.factory import create_registry


class TestSettings:
    """Tests for Settings helpers."""

    def test_solver_delays(self):
        settings = Settings(route_solver_delays="kyberswap=120, HyperBloom=30,bad,odos=x,0x=-1")

        assert settings.solver_delays == {"kyberswap": 120.0, "hyperbloom": 30.0}
        assert settings.get_route_solver_delay("KyberSwap") == 120.0
        assert settings.get_route_solver_delay("paraswap") == settings.default_route_solver_delay

    def test_disabled_list(self):
        settings = Settings(disabled_route_solvers="Barter, 0x")

        assert not settings.is_route_solver_enabled("barter")
        assert not settings.is_route_solver_enabled("0x")
        assert settings.is_route_solver_enabled("paraswap")

    @pytest.mark.parametrize("value,enabled", [("true", False), ("disable", False), ("false", True), ("", True)])
    def test_disable_flag(self, monkeypatch, value, enabled):
        monkeypatch.setenv("DISABLE_ODOS", value)
        assert Settings().is_route_solver_enabled("odos") is enabled

    def test_rpc_url_lookup(self):
        settings = Settings(plasma_rpc_url="http://plasma.test")

        assert settings.get_rpc_url("9745") == "http://plasma.test"
        assert settings.get_rpc_url("56") == ""

    def test_safe_dict_redacts_token(self):
        settings = Settings(telegram_bot_token="123:abc")
        assert settings.get_safe_dict()["notifications"]["telegram_bot_token"] == "***"

    def test_required_secret(self, monkeypatch):
        monkeypatch.setenv("ZEROX_API_KEY", "  key  ")
        monkeypatch.setenv("BARTER_API_KEY", "")

        assert get_required_secret("ZEROX_API_KEY") == "key"
        assert get_required_secret("BARTER_API_KEY") is None


class TestEndpointGeneration:
    """Tests for the swap pair x route solver cross product."""

    def test_only_supported_networks(self):
        settings = Settings()
        endpoints = generate_endpoints(settings)
        solvers = {s.route_solver: s for s in ROUTE_SOLVERS}

        assert endpoints
        for endpoint in endpoints:
            assert solvers[endpoint.route_solver].supports(endpoint.network)

    def test_names_are_unique(self):
        names = [e.name for e in generate_endpoints(Settings())]
        assert len(names) == len(set(names))

    def test_naming_and_delay(self):
        pair = SWAP_PAIRS[0]
        solver = RouteSolver("KyberSwap", "kyberswap", (pair.network,))
        settings = Settings(route_solver_delays="kyberswap=120")

        (endpoint,) = generate_endpoints(settings, pairs=[pair], solvers=[solver])

        assert endpoint.name == f"KyberSwap-{pair.name}"
        assert endpoint.base_name == pair.name
        assert endpoint.delay == 120
        assert endpoint.pool_type == pair.pool_type

    def test_disabled_solver_excluded(self):
        endpoints = generate_endpoints(Settings(disabled_route_solvers="paraswap"))
        assert all(e.route_solver != "paraswap" for e in endpoints)

    def test_every_solver_has_an_adapter(self):
        registry = create_registry(Settings())
        assert {s.route_solver for s in ROUTE_SOLVERS} <= set(registry.route_solvers)
