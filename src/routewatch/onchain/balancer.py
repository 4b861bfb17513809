"""Balancer v3 on-chain quote simulation.

Quotes are replayed through the Router (single pool) or BatchRouter
(multi-step path) query functions with ``eth_call``; nothing is sent
on-chain.
"""

import asyncio
import logging
from typing import Callable

from eth_abi import decode, encode
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from routewatch.exceptions import OnChainConfigError, OnChainQueryError
from routewatch.monitor.models import Endpoint, SwapPath, parse_amount

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_QUERY_TIMEOUT = 10.0

ROUTER_ADDRESSES = {
    "1": "0xAE563E3f8219521950555F5962419C8919758Ea2",
    "10": "0xe2fa4e1d17725e72dcdAfe943Ecf45dF4B9E285b",
    "100": "0x4eff2d77D9fFbAeFB4b141A3e494c085b3FF4Cb5",
    "999": "0xA8920455934Da4D853faac1f94Fe7bEf72943eF1",
    "8453": "0x3f170631ed9821Ca51A59D996aB095162438DC10",
    "9745": "0x9dA18982a33FD0c7051B19F0d7C76F2d5E7e017c",
    "42161": "0xEAedc32a51c510d35ebC11088fD5fF2b47aACF2E",
    "43114": "0xF39CA6ede9BF7820a952b52f3c94af526bAB9015",
}

BATCH_ROUTER_ADDRESSES = {
    "1": "0x136f1EFcC3f8f88516B9E94110D56FDBfB1778d1",
    "10": "0xaD89051bEd8d96f045E8912aE1672c6C0bF8a85E",
    "100": "0xe2fa4e1d17725e72dcdAfe943Ecf45dF4B9E285b",
    "999": "0x9dd5Db2d38b50bEF682cE532bCca5DfD203915E1",
    "8453": "0x85a80afee867aDf27B50BdB7b76DA70f1E853062",
    "9745": "0x85a80afee867aDf27B50BdB7b76DA70f1E853062",
    "42161": "0xaD89051bEd8d96f045E8912aE1672c6C0bF8a85E",
    "43114": "0xc9b36096f5201ea332Db35d6D195774ea0D5988f",
}

SINGLE_SWAP_SIGNATURE = "querySwapSingleTokenExactIn(address,address,address,uint256,address,bytes)"
SINGLE_SWAP_ARG_TYPES = ["address", "address", "address", "uint256", "address", "bytes"]
SINGLE_SWAP_RETURN_TYPES = ["uint256"]

PATH_SWAP_SIGNATURE = "querySwapExactIn((address,(address,address,bool)[],uint256,uint256)[],address,bytes)"
PATH_SWAP_ARG_TYPES = ["(address,(address,address,bool)[],uint256,uint256)[]", "address", "bytes"]
PATH_SWAP_RETURN_TYPES = ["uint256[]", "address[]", "uint256[]"]


def function_selector(signature: str) -> bytes:
    return Web3.keccak(text=signature)[:4]


def _checksum(address: str) -> str:
    try:
        return Web3.to_checksum_address(address)
    except ValueError as e:
        raise OnChainConfigError(f"invalid address {address!r}") from e


def encode_single_swap_query(pool: str, token_in: str, token_out: str, amount_in: int) -> bytes:
    """Calldata for Router.querySwapSingleTokenExactIn."""
    args = [_checksum(pool), _checksum(token_in), _checksum(token_out), amount_in, ZERO_ADDRESS, b""]
    return function_selector(SINGLE_SWAP_SIGNATURE) + encode(SINGLE_SWAP_ARG_TYPES, args)


def encode_path_swap_query(path: SwapPath, amount_in: int) -> bytes:
    """Calldata for BatchRouter.querySwapExactIn with a single path."""
    steps = [(_checksum(step.pool), _checksum(step.token_out), step.is_buffer) for step in path.steps]
    paths = [(_checksum(path.token_in), steps, amount_in, 0)]
    return function_selector(PATH_SWAP_SIGNATURE) + encode(PATH_SWAP_ARG_TYPES, [paths, ZERO_ADDRESS, b""])


def decode_single_swap_result(data: bytes) -> int:
    (amount_out,) = decode(SINGLE_SWAP_RETURN_TYPES, data)
    return amount_out


def decode_path_swap_result(data: bytes) -> int:
    _path_amounts, _tokens, amounts_out = decode(PATH_SWAP_RETURN_TYPES, data)
    if not amounts_out:
        raise OnChainQueryError("querySwapExactIn returned no amounts")
    return amounts_out[-1]


def create_web3(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": 30}))


class BalancerOnChainVerifier:
    """Simulates an endpoint's swap path against the Balancer v3 routers.

    Web3 clients are created lazily, one per RPC URL, and reused.
    """

    def __init__(
        self,
        rpc_url_lookup: Callable[[str], str],
        timeout: float = DEFAULT_QUERY_TIMEOUT,
        web3_factory: Callable[[str], AsyncWeb3] = create_web3,
    ):
        self._rpc_url_lookup = rpc_url_lookup
        self._web3_factory = web3_factory
        self.timeout = timeout
        self._clients: dict[str, AsyncWeb3] = {}
        self._clients_lock = asyncio.Lock()

    async def get_client(self, rpc_url: str) -> AsyncWeb3:
        client = self._clients.get(rpc_url)
        if client is not None:
            return client

        async with self._clients_lock:
            # Double-check after acquiring lock
            client = self._clients.get(rpc_url)
            if client is None:
                client = self._web3_factory(rpc_url)
                self._clients[rpc_url] = client
                logger.debug(f"Created web3 client for {rpc_url}")
            return client

    async def eth_call(self, network: str, to: str, data: bytes) -> bytes:
        rpc_url = self._rpc_url_lookup(network)
        if not rpc_url:
            raise OnChainConfigError(f"no RPC URL configured for network {network}")

        w3 = await self.get_client(rpc_url)
        try:
            result = await asyncio.wait_for(
                w3.eth.call({"to": to, "data": Web3.to_hex(data)}),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise OnChainQueryError(f"eth_call to {to} timed out after {self.timeout}s") from e
        except Exception as e:
            raise OnChainQueryError(f"eth_call to {to} failed: {type(e).__name__}: {e}") from e
        return bytes(result)

    async def query_onchain_price(self, endpoint: Endpoint) -> str:
        """
        Simulate the endpoint's swap path and return the raw output amount.

        Raises:
            OnChainConfigError: no path, unknown router, bad amount or missing RPC URL
            OnChainQueryError: the call failed or returned undecodable data
        """
        path = endpoint.swap_path
        if path is None or len(path) == 0:
            raise OnChainConfigError("endpoint has no swap path")

        amount_in = parse_amount(endpoint.swap_amount)
        if amount_in is None:
            raise OnChainConfigError(f"invalid swap amount {endpoint.swap_amount!r}")

        if len(path) == 1:
            router = ROUTER_ADDRESSES.get(endpoint.network)
            if router is None:
                raise OnChainConfigError(f"no Router address for network {endpoint.network}")
            step = path.steps[0]
            calldata = encode_single_swap_query(step.pool, path.token_in, step.token_out, amount_in)
            decoder = decode_single_swap_result
        else:
            router = BATCH_ROUTER_ADDRESSES.get(endpoint.network)
            if router is None:
                raise OnChainConfigError(f"no BatchRouter address for network {endpoint.network}")
            calldata = encode_path_swap_query(path, amount_in)
            decoder = decode_path_swap_result

        result = await self.eth_call(endpoint.network, _checksum(router), calldata)
        try:
            amount_out = decoder(result)
        except OnChainQueryError:
            raise
        except Exception as e:
            raise OnChainQueryError(f"could not decode router response: {e}") from e

        logger.debug(f"{endpoint.name}: on-chain amount {amount_out} via {len(path)} step(s)")
        return str(amount_out)
