"""Provider registry: runs one endpoint check through its route adapter."""

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from routewatch.config import get_required_secret
from routewatch.exceptions import (
    ConfigurationError,
    OnChainConfigError,
    OnChainQueryError,
    ResponseValidationError,
    TransportError,
)
from routewatch.monitor.models import Endpoint, EndpointStatus, PoolType
from routewatch.routing.base import RequestOptions, RouteAdapter, shape_errors_as_validation
from routewatch.routing.client import DEFAULT_TIMEOUT, APIClient, APIResponse

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def notify(self, message: str) -> bool: ...


class OnChainVerifier(Protocol):
    async def query_onchain_price(self, endpoint: Endpoint) -> str: ...


@dataclass
class ProviderConfig:
    """How to reach one route solver."""

    adapter: RouteAdapter
    api_key_env: Optional[str] = None
    api_key_header: str = "Authorization"
    api_key_prefix: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT

    @property
    def route_solver(self) -> str:
        return self.adapter.name


@dataclass
class CheckOptions:
    """``source_only=None`` runs the restricted check followed by the market price check."""

    source_only: Optional[bool] = None


@dataclass(frozen=True)
class KnownUnsupported:
    """A solver/pool type/network combination the solver is known not to route yet."""

    route_solver: str
    message: str
    pool_type: Optional[PoolType] = None
    network: Optional[str] = None

    def matches(self, endpoint: Endpoint) -> bool:
        if endpoint.route_solver != self.route_solver:
            return False
        if self.pool_type is not None and endpoint.pool_type != self.pool_type:
            return False
        if self.network is not None and endpoint.network != self.network:
            return False
        return True


KNOWN_UNSUPPORTED = [
    KnownUnsupported("1inch", "1inch GyroE integration WIP", pool_type=PoolType.GYRO_E),
    KnownUnsupported("1inch", "1inch QuantAMM integration WIP", pool_type=PoolType.QUANT_AMM),
    KnownUnsupported("1inch", "1inch network support WIP", network="43114"),
    KnownUnsupported("odos", "Odos QuantAMM integration WIP", pool_type=PoolType.QUANT_AMM),
    KnownUnsupported("kyberswap", "KyberSwap reCLAMM integration WIP", pool_type=PoolType.RECLAMM),
]


class ProviderRegistry:
    """Maps route solver ids to provider configs and runs checks against them."""

    def __init__(
        self,
        client: Optional[APIClient] = None,
        notifier: Optional[Notifier] = None,
        verifier: Optional[OnChainVerifier] = None,
        secret_lookup: Callable[[str], Optional[str]] = get_required_secret,
        known_unsupported: Optional[list[KnownUnsupported]] = None,
        market_price_delay: float = 2.0,
    ):
        self.client = client or APIClient()
        self.notifier = notifier
        self.verifier = verifier
        self.market_price_delay = market_price_delay
        self.known_unsupported = KNOWN_UNSUPPORTED if known_unsupported is None else known_unsupported
        self._secret_lookup = secret_lookup
        self._providers: dict[str, ProviderConfig] = {}
        self._api_keys: dict[str, str] = {}

    def register(self, config: ProviderConfig) -> None:
        self._providers[config.route_solver] = config
        logger.debug(f"Registered route solver {config.route_solver}")

    def get(self, route_solver: str) -> Optional[ProviderConfig]:
        return self._providers.get(route_solver)

    @property
    def route_solvers(self) -> list[str]:
        return list(self._providers)

    def find_known_unsupported(self, endpoint: Endpoint) -> Optional[str]:
        for entry in self.known_unsupported:
            if entry.matches(endpoint):
                return entry.message
        return None

    async def check_provider(self, endpoint: Endpoint, options: Optional[CheckOptions] = None) -> None:
        """
        Check one endpoint, writing the outcome onto it.

        Args:
            endpoint: Endpoint to check (normally a copy taken from the store)
            options: None for the full two-phase check; otherwise a single
                restricted (source_only=True) or market price (False) check
        """
        endpoint.last_checked = datetime.now(timezone.utc)

        config = self._providers.get(endpoint.route_solver)
        if config is None:
            endpoint.mark(EndpointStatus.UNSUPPORTED, f"Unsupported route solver: {endpoint.route_solver}")
            logger.warning(f"{endpoint.name}: no adapter registered for {endpoint.route_solver}")
            return

        note = self.find_known_unsupported(endpoint)
        if note:
            endpoint.mark(EndpointStatus.INFO, note)
            logger.info(f"{endpoint.name}: {note}")
            return

        source_only = options.source_only if options is not None else None

        if source_only is None:
            await self._check_restricted(endpoint, config)
            if endpoint.last_status == EndpointStatus.ERROR:
                return
            await asyncio.sleep(self.market_price_delay)
            # Market price failures must not clobber the restricted result.
            scratch = copy.copy(endpoint)
            try:
                await self._check_market_price(scratch, config)
            except Exception as e:
                logger.warning(f"{endpoint.name}: market price check failed: {type(e).__name__}: {e}")
                scratch.market_price = None
            endpoint.market_price = scratch.market_price
        elif source_only:
            await self._check_restricted(endpoint, config)
        else:
            await self._check_market_price(endpoint, config)

    def _resolve_api_key(self, config: ProviderConfig) -> Optional[str]:
        if not config.api_key_env:
            return None
        key = self._api_keys.get(config.route_solver)
        if key is None:
            key = self._secret_lookup(config.api_key_env)
            if not key:
                raise ConfigurationError(f"{config.api_key_env} environment variable not set")
            self._api_keys[config.route_solver] = key
        return key

    async def _request(self, endpoint: Endpoint, config: ProviderConfig, source_only: bool) -> APIResponse:
        headers = dict(config.headers)
        api_key = self._resolve_api_key(config)
        if api_key:
            headers[config.api_key_header] = f"{config.api_key_prefix}{api_key}"

        options = RequestOptions(source_only=source_only, headers=headers)
        adapter = config.adapter
        url = await adapter.build_url(endpoint, options)
        body = adapter.build_request_body(endpoint, options) if adapter.use_post else None

        return await self.client.execute(
            "POST" if adapter.use_post else "GET",
            url,
            body=body,
            headers=headers,
            timeout=config.timeout,
        )

    async def _check_restricted(self, endpoint: Endpoint, config: ProviderConfig) -> None:
        endpoint.return_amount = None
        endpoint.swap_path = None
        endpoint.onchain_amount = None
        endpoint.last_response = None

        try:
            response = await self._request(endpoint, config, source_only=True)
        except ConfigurationError as e:
            await self._report(endpoint, EndpointStatus.ERROR, str(e))
            return
        except TransportError as e:
            await self._report(endpoint, EndpointStatus.DOWN, f"Error sending request: {e}")
            return

        try:
            with shape_errors_as_validation(response):
                config.adapter.validate(response, endpoint)
        except ResponseValidationError as e:
            endpoint.return_amount = None
            endpoint.swap_path = None
            await self._report(endpoint, EndpointStatus.DOWN, e.message, e.payload)
            return
        except ConfigurationError as e:
            await self._report(endpoint, EndpointStatus.ERROR, str(e))
            return

        endpoint.mark(EndpointStatus.UP, "Ok")
        logger.info(f"{endpoint.name}: up, return amount {endpoint.return_amount}")

        if endpoint.swap_path and self.verifier is not None:
            await self._verify_onchain(endpoint)

    async def _check_market_price(self, endpoint: Endpoint, config: ProviderConfig) -> None:
        endpoint.market_price = None
        try:
            response = await self._request(endpoint, config, source_only=False)
            with shape_errors_as_validation(response):
                config.adapter.extract_market_price(response, endpoint)
        except ResponseValidationError as e:
            logger.warning(f"{endpoint.name}: market price unavailable: {e.message}")
        except (ConfigurationError, TransportError) as e:
            logger.warning(f"{endpoint.name}: market price request failed: {e}")
        else:
            logger.debug(f"{endpoint.name}: market price {endpoint.market_price}")

    async def _verify_onchain(self, endpoint: Endpoint) -> None:
        try:
            amount = await self.verifier.query_onchain_price(endpoint)
        except OnChainConfigError as e:
            await self._report(endpoint, EndpointStatus.ERROR, f"On-chain verification unavailable: {e}")
            return
        except OnChainQueryError as e:
            await self._report(endpoint, EndpointStatus.DOWN, f"On-chain query failed: {e}")
            return

        endpoint.onchain_amount = amount
        if amount != endpoint.return_amount:
            logger.info(f"{endpoint.name}: on-chain amount {amount} differs from quoted {endpoint.return_amount}")

    async def _report(
        self,
        endpoint: Endpoint,
        status: EndpointStatus,
        message: str,
        payload: Optional[str] = None,
    ) -> None:
        endpoint.mark(status, message)
        endpoint.last_response = payload

        text = f"[{endpoint.name}] {message}"
        if payload:
            text += f"\nResponse body:\n{payload}"
        logger.error(text)

        if self.notifier is not None:
            await self.notifier.notify(text)
