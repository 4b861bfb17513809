"""Endpoint and swap path models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EndpointStatus(str, Enum):
    """Outcome of the most recent check of an endpoint."""

    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"
    ERROR = "error"
    INFO = "info"
    UNSUPPORTED = "unsupported"


class PoolType(str, Enum):
    """Balancer v3 pool family an endpoint is pinned to."""

    STABLE = "stable"
    STABLE_SURGE = "stable_surge"
    GYRO_E = "gyro_e"
    QUANT_AMM = "quant_amm"
    RECLAMM = "reclamm"


@dataclass(frozen=True)
class SwapPathStep:
    """One hop of a swap path: the pool traded through and the token received."""

    pool: str
    token_out: str
    is_buffer: bool = False


@dataclass(frozen=True)
class SwapPath:
    """Ordered hops from the endpoint's input token to its output token."""

    token_in: str
    steps: tuple[SwapPathStep, ...]

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def pools(self) -> list[str]:
        return [step.pool for step in self.steps]


def parse_amount(value: Optional[str]) -> Optional[int]:
    """Parse a raw integer amount string, returning None for empty or malformed input."""
    if not value:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


def select_higher_amount(first: Optional[str], second: Optional[str]) -> Optional[str]:
    """Return whichever raw amount is numerically larger.

    Amounts are compared as arbitrary-precision integers; lexical order
    would rank "9" above "10".
    """
    first_value = parse_amount(first)
    second_value = parse_amount(second)

    if first_value is None:
        return second if second_value is not None else None
    if second_value is None:
        return first
    return first if first_value >= second_value else second


@dataclass
class Endpoint:
    """A monitored (token pair, pool, route solver) combination."""

    name: str
    base_name: str
    solver_name: str
    route_solver: str
    network: str
    token_in: str
    token_out: str
    token_in_decimals: int
    token_out_decimals: int
    swap_amount: str
    expected_pool: str
    expected_no_hops: int = 1
    pool_type: Optional[PoolType] = None
    delay: float = 2.0

    # Check results
    last_status: EndpointStatus = EndpointStatus.UNKNOWN
    last_checked: Optional[datetime] = None
    message: str = ""
    return_amount: Optional[str] = None
    market_price: Optional[str] = None
    swap_path: Optional[SwapPath] = None
    onchain_amount: Optional[str] = None
    last_response: Optional[str] = None

    # Fields written by a check, copied back onto the stored record.
    RESULT_FIELDS = (
        "last_status",
        "last_checked",
        "message",
        "return_amount",
        "market_price",
        "swap_path",
        "onchain_amount",
        "last_response",
    )

    @property
    def best_amount(self) -> Optional[str]:
        """Higher of the restricted quote and the market price."""
        return select_higher_amount(self.return_amount, self.market_price)

    def mark(self, status: EndpointStatus, message: str) -> None:
        self.last_status = status
        self.message = message

    def merge_result(self, checked: "Endpoint") -> None:
        """Copy the outcome of a check performed on a copy of this endpoint."""
        for name in self.RESULT_FIELDS:
            setattr(self, name, getattr(checked, name))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "base_name": self.base_name,
            "solver": self.solver_name,
            "route_solver": self.route_solver,
            "network": self.network,
            "token_in": self.token_in,
            "token_out": self.token_out,
            "swap_amount": self.swap_amount,
            "expected_pool": self.expected_pool,
            "expected_no_hops": self.expected_no_hops,
            "pool_type": self.pool_type.value if self.pool_type else None,
            "status": self.last_status.value,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "message": self.message,
            "return_amount": self.return_amount,
            "market_price": self.market_price,
            "onchain_amount": self.onchain_amount,
            "swap_path": (
                [
                    {"pool": s.pool, "token_out": s.token_out, "is_buffer": s.is_buffer}
                    for s in self.swap_path.steps
                ]
                if self.swap_path
                else None
            ),
        }
