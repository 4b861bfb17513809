"""Monitored swap pairs and the route solvers that quote them.

Every endpoint is one (swap pair, route solver) combination, for each
enabled solver that supports the pair's network.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from routewatch.config import Settings, get_settings
from routewatch.monitor.models import Endpoint, PoolType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapPair:
    """A token pair pinned to one Balancer v3 pool."""

    name: str
    network: str
    token_in: str
    token_out: str
    token_in_decimals: int
    token_out_decimals: int
    expected_pool: str
    swap_amount: str
    pool_type: PoolType
    expected_no_hops: int = 1


@dataclass(frozen=True)
class RouteSolver:
    name: str
    route_solver: str
    supported_networks: tuple[str, ...]

    def supports(self, network: str) -> bool:
        return network in self.supported_networks


SWAP_PAIRS = [
    SwapPair(
        name="Mainnet-Boosted-Stable(GHO/USDC)",
        network="1",
        token_in="0x40d16fc0246ad3160ccc09b8d0d3a2cd28ae6c2f",  # GHO
        token_out="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
        token_in_decimals=18,
        token_out_decimals=6,
        expected_pool="0x85b2b559bc2d21104c4defdd6efca8a20343361d",
        swap_amount="1000000000000000000000000",
        pool_type=PoolType.STABLE,
    ),
    SwapPair(
        name="Mainnet-Boosted-StableSurge(wstETH/tETH)",
        network="1",
        token_in="0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0",  # wstETH
        token_out="0xd11c452fc99cf405034ee446803b6f6c1f6d5ed8",  # tETH
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x9ed5175aecb6653c1bdaa19793c16fd74fbeeb37",
        swap_amount="150000000000000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Base-Boosted-Stable(wstETH/ezETH)",
        network="8453",
        token_in="0xc1cba3fcea344f92d9239c08c0568f6f2f0ee452",  # wstETH
        token_out="0x2416092f143378750bb29b79eD961ab195CcEea5",  # ezETH
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0xb5bfb5adb736ea852bd58fec71db3b356c2a3938",
        swap_amount="10000000000000000000",
        pool_type=PoolType.STABLE,
    ),
    SwapPair(
        name="Base-Boosted-StableSurge(GHO/USDC)",
        network="8453",
        token_in="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",  # USDC
        token_out="0x6Bb7a212910682DCFdbd5BCBb3e28FB4E8da10Ee",  # GHO
        token_in_decimals=6,
        token_out_decimals=18,
        expected_pool="0x7ab124ec4029316c2a42f713828ddf2a192b36db",
        swap_amount="100000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Arbitrum-Boosted-Stable(WETH/wstETH)",
        network="42161",
        token_in="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",  # WETH
        token_out="0x5979D7b546E38E414F7E9822514be443A4800529",  # wstETH
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0xc072880e1bc0bcddc99db882c7f3e7a839281cf4",
        swap_amount="10000000000000000000",
        pool_type=PoolType.STABLE,
    ),
    SwapPair(
        name="Arbitrum-Boosted-StableSurge(GHO/USDC)",
        network="42161",
        token_in="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",  # USDC
        token_out="0x7dfF72693f6A4149b17e7C6314655f6A9F7c8B33",  # GHO
        token_in_decimals=6,
        token_out_decimals=18,
        expected_pool="0x19b001e6bc2d89154c18e2216eec5c8c6047b6d8",
        swap_amount="100000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Arbitrum-Boosted-GyroE(eBTC/WETH)",
        network="42161",
        token_in="0x657e8C867D8B37dCC18fA4Caead9C45EB088C642",  # eBTC
        token_out="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",  # WETH
        token_in_decimals=8,
        token_out_decimals=18,
        expected_pool="0xc6ac6abae59d58213800ace88d44526725d75f3a",
        swap_amount="100000",
        pool_type=PoolType.GYRO_E,
    ),
    SwapPair(
        name="Gnosis-Boosted-Stable(WETH/wstETH)",
        network="100",
        token_in="0x6a023ccd1ff6f2045c3309768ead9e68f978f6e1",  # WETH
        token_out="0x6c76971f98945ae98dd7d4dfca8711ebea946ea6",  # wstETH
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x6e6bb18449fcf15b79efa2cfa70acf7593088029",
        swap_amount="1000000000000000000",
        pool_type=PoolType.STABLE,
    ),
    SwapPair(
        name="Avax-Boosted-StableSurge(USDT/USDC)",
        network="43114",
        token_in="0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7",  # USDT
        token_out="0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",  # USDC
        token_in_decimals=6,
        token_out_decimals=6,
        expected_pool="0x31ae873544658654ce767bde179fd1bbcb84850b",
        swap_amount="100000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Avax-Boosted-GyroE(BTC.b/wAVAX)",
        network="43114",
        token_in="0x152b9d0FdC40C096757F570A51E494bd4b943E50",  # BTC.b
        token_out="0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",  # wAVAX
        token_in_decimals=8,
        token_out_decimals=18,
        expected_pool="0x58374fff35d1f3023bbfc646fb9ecd2b180ca0b0",
        swap_amount="10000000",
        pool_type=PoolType.GYRO_E,
    ),
    SwapPair(
        name="Mainnet-Quant-BTF(PAXG/WBTC)",
        network="1",
        token_in="0x45804880de22913dafe09f4980848ece6ecbaf78",  # PAXG
        token_out="0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",  # WBTC
        token_in_decimals=18,
        token_out_decimals=8,
        expected_pool="0x6b61d8680c4f9e560c8306807908553f95c749c5",
        swap_amount="100000000000000000",
        pool_type=PoolType.QUANT_AMM,
    ),
    SwapPair(
        name="Base-reCLAMM(WETH/cbBTC)",
        network="8453",
        token_in="0x4200000000000000000000000000000000000006",  # WETH
        token_out="0xcbb7c0000ab88b473b1f5afd9ef808440eed33bf",  # cbBTC
        token_in_decimals=18,
        token_out_decimals=8,
        expected_pool="0x19aeb8168d921bb069c6771bbaff7c09116720d0",
        swap_amount="1000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Mainnet-reCLAMM(WETH/AAVE)",
        network="1",
        token_in="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",  # WETH
        token_out="0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9",  # AAVE
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x9d1fcf346ea1b073de4d5834e25572cc6ad71f4d",
        swap_amount="3000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Hyper-Boosted-StableSurge(USDT/USDXL)",
        network="999",
        token_in="0xb8ce59fc3717ada4c02eadf9682a9e934f625ebb",  # USDT
        token_out="0xca79db4b49f608ef54a5cb813fbed3a6387bc645",  # USDXL
        token_in_decimals=6,
        token_out_decimals=18,
        expected_pool="0xba0163e18b8b6236d5046841e698f2f2d89bd4bd",
        swap_amount="100000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Plasma-Boosted-StableSurge(WETH/weETH)",
        network="9745",
        token_in="0x9895D81bB462A195b4922ED7De0e3ACD007c32CB",  # WETH
        token_out="0xa3d68b74bf0528fdd07263c60d6488749044914b",  # weETH
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0xda51975d78cb172b46d7292cec9fa9e74723ef3b",
        swap_amount="100000000000000000000",
        pool_type=PoolType.STABLE_SURGE,
    ),
    SwapPair(
        name="Plasma-reCLAMM(WXPL/USDT0)",
        network="9745",
        token_in="0x6100e367285b01f48d07953803a2d8dca5d19873",  # WXPL
        token_out="0xb8ce59fc3717ada4c02eadf9682a9e934f625ebb",  # USDT0
        token_in_decimals=18,
        token_out_decimals=6,
        expected_pool="0xe14ba497a7c51f34896d327ec075f3f18210a270",
        swap_amount="50000000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Mainnet-reCLAMM(WETH/COW)",
        network="1",
        token_in="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",  # WETH
        token_out="0xdef1ca1fb7fbcdc777520aa7f396b4e015f497ab",  # COW
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x0b118338b9edd9da0638c7411a65bd11e8fb4083",
        swap_amount="20000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Arbitrum-reCLAMM(WETH/COW)",
        network="42161",
        token_in="0x82af49447d8a07e3bd95bd0d56f35241523fbab1",  # WETH
        token_out="0xcb8b5cd20bdcaea9a010ac1f8d835824f5c87a04",  # COW
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x1d201e1e5cb9a6cb117374f20fb4c21404c68f2e",
        swap_amount="20000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Base-reCLAMM(WETH/COW)",
        network="8453",
        token_in="0x4200000000000000000000000000000000000006",  # WETH
        token_out="0xc694a91e6b071bf030a18bd3053a7fe09b6dae69",  # COW
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0xc6d840823843676b004626a07ce664f7d8b368ea",
        swap_amount="15000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
    SwapPair(
        name="Gnosis-reCLAMM(WETH/COW)",
        network="100",
        token_in="0x6a023ccd1ff6f2045c3309768ead9e68f978f6e1",  # WETH
        token_out="0x177127622c4a00f3d409b75571e12cb3c8973d3c",  # COW
        token_in_decimals=18,
        token_out_decimals=18,
        expected_pool="0x697278dd4e8319a1358bd59f8f0bb49c0db6d0ca",
        swap_amount="15000000000000000000",
        pool_type=PoolType.RECLAMM,
    ),
]

ROUTE_SOLVERS = [
    RouteSolver("Paraswap", "paraswap", ("1", "8453", "42161", "100", "43114")),
    RouteSolver("1inch", "1inch", ("1", "8453", "42161", "100", "43114")),
    RouteSolver("0x", "0x", ("1", "8453", "42161", "43114", "9745")),
    RouteSolver("Odos", "odos", ("1", "8453", "42161", "43114")),
    RouteSolver(
        "KyberSwap",
        "kyberswap",
        (
            "1", "56", "42161", "137", "10", "43114", "8453", "324", "250", "59144",
            "534352", "5000", "81457", "146", "80094", "2020", "999", "9745",
        ),
    ),
    RouteSolver("HyperBloom", "hyperbloom", ("999",)),
    RouteSolver("Balancer SOR", "balancer_sor", ("1", "42161", "10", "8453", "43114", "100", "999", "9745")),
    RouteSolver("Barter", "barter", ("1", "8453")),
    RouteSolver("OpenOcean", "openocean", ("1", "8453", "42161", "43114", "100")),
]


def get_enabled_route_solvers(settings: Optional[Settings] = None) -> list[RouteSolver]:
    settings = settings or get_settings()
    enabled = [s for s in ROUTE_SOLVERS if settings.is_route_solver_enabled(s.route_solver)]
    disabled = [s.route_solver for s in ROUTE_SOLVERS if s not in enabled]
    if disabled:
        logger.info(f"Disabled route solvers: {', '.join(disabled)}")
    return enabled


def build_endpoint(pair: SwapPair, solver: RouteSolver, delay: float) -> Endpoint:
    return Endpoint(
        name=f"{solver.name}-{pair.name}",
        base_name=pair.name,
        solver_name=solver.name,
        route_solver=solver.route_solver,
        network=pair.network,
        token_in=pair.token_in,
        token_out=pair.token_out,
        token_in_decimals=pair.token_in_decimals,
        token_out_decimals=pair.token_out_decimals,
        swap_amount=pair.swap_amount,
        expected_pool=pair.expected_pool,
        expected_no_hops=pair.expected_no_hops,
        pool_type=pair.pool_type,
        delay=delay,
    )


def generate_endpoints(
    settings: Optional[Settings] = None,
    pairs: Optional[list[SwapPair]] = None,
    solvers: Optional[list[RouteSolver]] = None,
) -> list[Endpoint]:
    """Cross product of swap pairs and enabled route solvers, filtered by network."""
    settings = settings or get_settings()
    pairs = SWAP_PAIRS if pairs is None else pairs
    solvers = get_enabled_route_solvers(settings) if solvers is None else solvers

    endpoints = [
        build_endpoint(pair, solver, settings.get_route_solver_delay(solver.route_solver))
        for pair in pairs
        for solver in solvers
        if solver.supports(pair.network)
    ]
    logger.info(f"Generated {len(endpoints)} endpoints from {len(pairs)} swap pairs")
    return endpoints
