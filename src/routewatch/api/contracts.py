"""Dashboard snapshot contracts."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from routewatch.monitor.models import Endpoint, select_higher_amount


class SwapPathStepView(BaseModel):
    pool: str
    token_out: str
    is_buffer: bool


class EndpointView(BaseModel):
    """One endpoint as shown on the dashboard."""

    name: str = Field(..., description="Endpoint identity (<solver>-<pair>)")
    solver: str = Field(..., description="Route solver display name")
    route_solver: str = Field(..., description="Route solver id")
    network: str = Field(..., description="Chain id")
    status: str = Field(..., description="up, down, error, info, unsupported or unknown")
    message: str = Field("", description="Outcome of the last check")
    last_checked: Optional[datetime] = Field(None, description="When the last check ran")
    return_amount: Optional[str] = Field(None, description="Balancer-only quote (raw units)")
    market_price: Optional[str] = Field(None, description="Unrestricted quote (raw units)")
    onchain_amount: Optional[str] = Field(None, description="Router simulation result (raw units)")
    swap_path: Optional[list[SwapPathStepView]] = None
    is_best: bool = Field(False, description="Highest return amount among solvers for this pair")

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint, is_best: bool = False) -> "EndpointView":
        return cls(
            name=endpoint.name,
            solver=endpoint.solver_name,
            route_solver=endpoint.route_solver,
            network=endpoint.network,
            status=endpoint.last_status.value,
            message=endpoint.message,
            last_checked=endpoint.last_checked,
            return_amount=endpoint.return_amount,
            market_price=endpoint.market_price,
            onchain_amount=endpoint.onchain_amount,
            swap_path=(
                [
                    SwapPathStepView(pool=s.pool, token_out=s.token_out, is_buffer=s.is_buffer)
                    for s in endpoint.swap_path.steps
                ]
                if endpoint.swap_path
                else None
            ),
            is_best=is_best,
        )


class PairView(BaseModel):
    """All solvers quoting one swap pair."""

    name: str
    network: str
    expected_pool: str
    swap_amount: str
    best_solver: Optional[str] = None
    endpoints: list[EndpointView]


class SnapshotResponse(BaseModel):
    total: int
    statuses: dict[str, int]
    pairs: list[PairView]


def build_snapshot(endpoints: list[Endpoint]) -> SnapshotResponse:
    """Group endpoints by swap pair and flag the solver with the highest quote."""
    groups: dict[str, list[Endpoint]] = {}
    for endpoint in endpoints:
        groups.setdefault(endpoint.base_name, []).append(endpoint)

    statuses: dict[str, int] = {}
    pairs = []
    for base_name, members in groups.items():
        best_amount = None
        for endpoint in members:
            statuses[endpoint.last_status.value] = statuses.get(endpoint.last_status.value, 0) + 1
            best_amount = select_higher_amount(best_amount, endpoint.return_amount)

        best = next(
            (e for e in members if best_amount is not None and e.return_amount == best_amount),
            None,
        )
        first = members[0]
        pairs.append(
            PairView(
                name=base_name,
                network=first.network,
                expected_pool=first.expected_pool,
                swap_amount=first.swap_amount,
                best_solver=best.solver_name if best else None,
                endpoints=[EndpointView.from_endpoint(e, is_best=e is best) for e in members],
            )
        )

    return SnapshotResponse(total=len(endpoints), statuses=statuses, pairs=pairs)
