"""On-chain quote verification."""

from routewatch.onchain.balancer import BalancerOnChainVerifier

__all__ = ["BalancerOnChainVerifier"]
