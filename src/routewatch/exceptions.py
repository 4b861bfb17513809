"""Exception types shared across the monitor.

Each failure kind maps to one endpoint status:
configuration problems mark an endpoint ``error``, transport and
validation problems mark it ``down``.
"""

from typing import Optional


class RouteWatchError(Exception):
    """Base class for all monitor errors."""


class ConfigurationError(RouteWatchError):
    """Missing key, unsupported network or pool type, or other setup problem.

    Not retryable: the check is abandoned before any network call.
    """


class TransportError(RouteWatchError):
    """Connection, timeout or read failure while talking to a provider."""


class ResponseValidationError(RouteWatchError):
    """Provider answered, but the answer failed a business rule."""

    def __init__(self, message: str, payload: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload


class OnChainConfigError(ConfigurationError):
    """On-chain simulation cannot run for this endpoint (no router, RPC or path)."""


class OnChainQueryError(RouteWatchError):
    """eth_call failed, timed out, or returned data that could not be decoded."""
