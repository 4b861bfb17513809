"""Abstract interface for route provider adapters."""

import json
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from routewatch.exceptions import ResponseValidationError
from routewatch.monitor.models import Endpoint, SwapPath, parse_amount
from routewatch.routing.client import APIResponse

logger = logging.getLogger(__name__)


@dataclass
class RequestOptions:
    """Per-request knobs handed to URL and body builders."""

    source_only: bool = True  # restrict routing to Balancer v3 liquidity
    headers: dict[str, str] = field(default_factory=dict)


def pretty_json(payload: Any) -> str:
    return json.dumps(payload, indent=4, sort_keys=False)


def same_address(first: Optional[str], second: Optional[str]) -> bool:
    return bool(first) and bool(second) and first.lower() == second.lower()


# Raised by adapters walking a payload whose nesting is not what the provider documents
SHAPE_ERRORS = (AttributeError, TypeError, KeyError, IndexError, ValueError)


@contextmanager
def shape_errors_as_validation(response: APIResponse):
    """Report a malformed payload as a validation failure carrying the raw body."""
    try:
        yield
    except SHAPE_ERRORS as e:
        raise ResponseValidationError(
            f"Unexpected response shape (HTTP {response.status_code}): {type(e).__name__}: {e}",
            response.text,
        ) from e


class RouteAdapter(ABC):
    """Strategy bundle for one routing service.

    Adapters are stateless with respect to endpoints: everything they need
    arrives through the endpoint and request options.
    """

    #: Whether the provider expects a JSON body (sent with POST).
    use_post: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Route solver identifier (e.g. "paraswap")."""
        pass

    @abstractmethod
    async def build_url(self, endpoint: Endpoint, options: RequestOptions) -> str:
        """
        Build the request URL.

        Raises:
            ConfigurationError: network or pool type not supported
        """
        pass

    def build_request_body(self, endpoint: Endpoint, options: RequestOptions) -> Optional[bytes]:
        """JSON body for POST providers; GET providers return None."""
        return None

    @abstractmethod
    def validate(self, response: APIResponse, endpoint: Endpoint) -> None:
        """
        Validate a restricted-mode response and record the quoted amount.

        On success ``endpoint.return_amount`` (and ``swap_path`` where the
        provider describes one) is written.

        Raises:
            ResponseValidationError: payload breaks a routing rule
        """
        pass

    @abstractmethod
    def extract_market_price(self, response: APIResponse, endpoint: Endpoint) -> None:
        """Record the unrestricted destination amount in ``endpoint.market_price``."""
        pass

    def extract_swap_path(self, payload: Any, endpoint: Endpoint) -> Optional[SwapPath]:
        """Decompose the provider's route into pool hops, when it describes one."""
        return None

    # Helpers shared by the concrete adapters

    def parse_json(self, response: APIResponse) -> dict:
        """Decode a JSON object body."""
        try:
            result = json.loads(response.body)
        except ValueError as e:
            raise ResponseValidationError(
                f"Error parsing JSON (HTTP {response.status_code}): {e}", response.text
            ) from e
        if not isinstance(result, dict):
            self.fail(f"Unexpected response shape (HTTP {response.status_code})", response.text)
        return result

    def fail(self, message: str, payload: Any) -> None:
        """Raise a validation error carrying the pretty-printed payload."""
        body = payload if isinstance(payload, str) else pretty_json(payload)
        raise ResponseValidationError(message, body)

    def no_route(self, detail: str, payload: Any) -> None:
        self.fail(f"No route found: {detail}", payload)

    def require_amount(self, value: Any, field_name: str, payload: Any) -> str:
        """Return ``value`` as a raw integer string, rejecting empty and zero amounts."""
        amount = str(value) if value is not None else ""
        parsed = parse_amount(amount)
        if parsed is None:
            self.fail(f"Invalid or missing {field_name}: {amount!r}", payload)
        if parsed == 0:
            self.fail(f"Zero {field_name} returned", payload)
        return amount.strip()

    def require_sources(self, sources: Iterable[str], expected: str, payload: Any) -> None:
        for source in sources:
            if source != expected:
                self.fail(f"Found source {source}, expected {expected}", payload)

    def require_hops(self, hops: int, endpoint: Endpoint, payload: Any) -> None:
        if hops != endpoint.expected_no_hops:
            self.fail(f"Expected {endpoint.expected_no_hops} hops, got {hops}", payload)

    def require_pool(self, pools: Iterable[str], endpoint: Endpoint, payload: Any) -> None:
        pools = list(pools)
        if not any(same_address(pool, endpoint.expected_pool) for pool in pools):
            self.fail(f"Expected pool {endpoint.expected_pool} not found in route: {pools}", payload)
