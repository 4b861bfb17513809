"""Application configuration using pydantic-settings."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TRUTHY_VALUES = ("true", "1", "yes", "on")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8080, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Scheduling
    # ======================
    check_interval_hours: float = Field(
        default=1, description="Hours between full check cycles"
    )
    disabled_route_solvers: str = Field(
        default="", description="Comma-separated route solver ids to skip (e.g. barter,0x)"
    )
    route_solver_delays: str = Field(
        default="kyberswap=120,hyperbloom=30",
        description="Comma-separated solver=seconds pauses after checking an endpoint",
    )
    default_route_solver_delay: float = Field(
        default=2.0, description="Pause after an endpoint whose solver has no explicit delay"
    )
    market_price_delay: float = Field(
        default=2.0, description="Pause between the restricted and market price sub-checks"
    )
    http_timeout: float = Field(default=30.0, description="Provider request timeout in seconds")

    # ======================
    # On-chain verification
    # ======================
    onchain_verification: bool = Field(
        default=True, description="Simulate decomposed swap paths against the Balancer routers"
    )
    onchain_timeout: float = Field(default=10.0, description="eth_call timeout in seconds")

    # ======================
    # Chain RPC Endpoints
    # ======================
    eth_rpc_url: str = Field(default="https://eth.llamarpc.com", description="Ethereum RPC URL")
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc", description="Arbitrum One RPC URL"
    )
    optimism_rpc_url: str = Field(
        default="https://mainnet.optimism.io", description="Optimism RPC URL"
    )
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base RPC URL")
    avax_rpc_url: str = Field(
        default="https://api.avax.network/ext/bc/C/rpc", description="Avalanche RPC URL"
    )
    gnosis_rpc_url: str = Field(default="https://rpc.gnosischain.com", description="Gnosis RPC URL")
    hyperevm_rpc_url: str = Field(
        default="https://rpc.hyperliquid.xyz/evm", description="HyperEVM RPC URL"
    )
    plasma_rpc_url: str = Field(default="https://rpc.plasma.to", description="Plasma RPC URL")

    # ======================
    # Notifications
    # ======================
    notifications_enabled: bool = Field(
        default=False, description="Send failure notifications through Telegram"
    )
    telegram_bot_token: str = Field(default="", description="Telegram bot token from BotFather")
    telegram_chat_id: str = Field(default="", description="Chat receiving failure notifications")

    @property
    def disabled_solvers(self) -> set[str]:
        """Parse disabled route solver ids into a lowercase set."""
        if not self.disabled_route_solvers:
            return set()
        return {s.strip().lower() for s in self.disabled_route_solvers.split(",") if s.strip()}

    @property
    def solver_delays(self) -> dict[str, float]:
        """Parse ``solver=seconds`` pairs, skipping malformed or negative entries."""
        delays = {}
        for item in self.route_solver_delays.split(","):
            solver, sep, value = item.partition("=")
            if not sep:
                continue
            try:
                seconds = float(value)
            except ValueError:
                continue
            if seconds >= 0:
                delays[solver.strip().lower()] = seconds
        return delays

    def is_route_solver_enabled(self, route_solver: str) -> bool:
        """A solver is enabled unless listed in DISABLED_ROUTE_SOLVERS or DISABLE_<SOLVER> is truthy."""
        if route_solver.lower() in self.disabled_solvers:
            return False
        flag = os.environ.get(f"DISABLE_{route_solver.upper()}", "")
        return flag.strip().lower() not in TRUTHY_VALUES + ("disable",)

    def get_route_solver_delay(self, route_solver: str) -> float:
        return self.solver_delays.get(route_solver.lower(), self.default_route_solver_delay)

    def get_rpc_url(self, network: str) -> str:
        """Get RPC URL for a chain id."""
        rpc_map = {
            "1": self.eth_rpc_url,
            "42161": self.arbitrum_rpc_url,
            "10": self.optimism_rpc_url,
            "8453": self.base_rpc_url,
            "43114": self.avax_rpc_url,
            "100": self.gnosis_rpc_url,
            "999": self.hyperevm_rpc_url,
            "9745": self.plasma_rpc_url,
        }
        return rpc_map.get(network, "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "check_interval_hours": self.check_interval_hours,
            "disabled_route_solvers": sorted(self.disabled_solvers),
            "route_solver_delays": self.solver_delays,
            "onchain_verification": self.onchain_verification,
            "notifications": {
                "enabled": self.notifications_enabled,
                "telegram_bot_token": "***" if self.telegram_bot_token else "(not set)",
                "telegram_chat_id": self.telegram_chat_id or "(not set)",
            },
        }


def get_required_secret(name: str) -> Optional[str]:
    """Look up a provider API key in the environment."""
    value = os.environ.get(name, "").strip()
    return value or None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
