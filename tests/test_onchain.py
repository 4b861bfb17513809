"""Tests for Balancer v3 on-chain quote simulation."""

import asyncio
from types import SimpleNamespace

import pytest
from eth_abi import decode, encode
from web3 import Web3

from routewatch.exceptions import OnChainConfigError, OnChainQueryError
from routewatch.monitor.models import SwapPath, SwapPathStep
from routewatch.onchain.balancer import (
    BATCH_ROUTER_ADDRESSES,
    PATH_SWAP_SIGNATURE,
    ROUTER_ADDRESSES,
    SINGLE_SWAP_ARG_TYPES,
    SINGLE_SWAP_SIGNATURE,
    BalancerOnChainVerifier,
    encode_single_swap_query,
    function_selector,
)

from conftest import GHO, POOL, USDC, make_endpoint

BUFFER = "0x1111111111111111111111111111111111111111"


class FakeEth:
    def __init__(self, result=b"", error=None, delay=0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def call(self, transaction):
        self.calls.append(transaction)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def make_verifier(eth: FakeEth, rpc_urls=None, timeout=1.0):
    rpc_urls = {"1": "http://rpc.test"} if rpc_urls is None else rpc_urls
    created = []

    def factory(url):
        created.append(url)
        return SimpleNamespace(eth=eth)

    verifier = BalancerOnChainVerifier(
        rpc_url_lookup=lambda network: rpc_urls.get(network, ""),
        timeout=timeout,
        web3_factory=factory,
    )
    return verifier, created


def single_path():
    return SwapPath(token_in=GHO, steps=(SwapPathStep(pool=POOL, token_out=USDC),))


def buffered_path():
    return SwapPath(
        token_in=GHO,
        steps=(
            SwapPathStep(pool=BUFFER, token_out=BUFFER, is_buffer=True),
            SwapPathStep(pool=POOL, token_out=USDC),
        ),
    )


class TestCalldata:
    """Tests for query calldata encoding."""

    def test_function_selector(self):
        assert function_selector("transfer(address,uint256)").hex().removeprefix("0x") == "a9059cbb"

    def test_single_swap_calldata(self):
        data = encode_single_swap_query(POOL, GHO, USDC, 1000)

        assert data[:4] == function_selector(SINGLE_SWAP_SIGNATURE)
        pool, token_in, token_out, amount, sender, user_data = decode(SINGLE_SWAP_ARG_TYPES, data[4:])
        assert pool.lower() == POOL
        assert token_in.lower() == GHO
        assert token_out.lower() == USDC
        assert amount == 1000
        assert user_data == b""

    def test_invalid_address(self):
        with pytest.raises(OnChainConfigError, match="invalid address"):
            encode_single_swap_query("0x1234", GHO, USDC, 1)


class TestBalancerOnChainVerifier:
    """Tests for router dispatch and error mapping."""

    @pytest.mark.asyncio
    async def test_single_step_uses_router(self):
        eth = FakeEth(result=encode(["uint256"], [12345]))
        verifier, _ = make_verifier(eth)
        endpoint = make_endpoint(swap_path=single_path())

        amount = await verifier.query_onchain_price(endpoint)

        assert amount == "12345"
        assert eth.calls[0]["to"] == Web3.to_checksum_address(ROUTER_ADDRESSES["1"])
        selector = "0x" + function_selector(SINGLE_SWAP_SIGNATURE).hex().removeprefix("0x")
        assert eth.calls[0]["data"].startswith(selector)

    @pytest.mark.asyncio
    async def test_multi_step_uses_batch_router(self):
        result = encode(
            ["uint256[]", "address[]", "uint256[]"],
            [[777], [Web3.to_checksum_address(USDC)], [777]],
        )
        eth = FakeEth(result=result)
        verifier, _ = make_verifier(eth)
        endpoint = make_endpoint(swap_path=buffered_path())

        amount = await verifier.query_onchain_price(endpoint)

        assert amount == "777"
        assert eth.calls[0]["to"] == Web3.to_checksum_address(BATCH_ROUTER_ADDRESSES["1"])
        selector = "0x" + function_selector(PATH_SWAP_SIGNATURE).hex().removeprefix("0x")
        assert eth.calls[0]["data"].startswith(selector)

    @pytest.mark.asyncio
    async def test_client_created_once_per_rpc_url(self):
        eth = FakeEth(result=encode(["uint256"], [1]))
        verifier, created = make_verifier(eth)
        endpoint = make_endpoint(swap_path=single_path())

        await verifier.query_onchain_price(endpoint)
        await verifier.query_onchain_price(endpoint)

        assert created == ["http://rpc.test"]
        assert len(eth.calls) == 2

    @pytest.mark.asyncio
    async def test_missing_swap_path(self):
        verifier, _ = make_verifier(FakeEth())
        with pytest.raises(OnChainConfigError, match="no swap path"):
            await verifier.query_onchain_price(make_endpoint())

    @pytest.mark.asyncio
    async def test_missing_rpc_url(self):
        verifier, created = make_verifier(FakeEth(), rpc_urls={})
        with pytest.raises(OnChainConfigError, match="no RPC URL"):
            await verifier.query_onchain_price(make_endpoint(swap_path=single_path()))
        assert created == []

    @pytest.mark.asyncio
    async def test_unknown_router_network(self):
        verifier, _ = make_verifier(FakeEth())
        with pytest.raises(OnChainConfigError, match="no Router address"):
            await verifier.query_onchain_price(make_endpoint(network="56", swap_path=single_path()))

    @pytest.mark.asyncio
    async def test_call_failure(self):
        verifier, _ = make_verifier(FakeEth(error=RuntimeError("execution reverted")))
        with pytest.raises(OnChainQueryError, match="execution reverted"):
            await verifier.query_onchain_price(make_endpoint(swap_path=single_path()))

    @pytest.mark.asyncio
    async def test_call_timeout(self):
        verifier, _ = make_verifier(FakeEth(delay=1), timeout=0.01)
        with pytest.raises(OnChainQueryError, match="timed out"):
            await verifier.query_onchain_price(make_endpoint(swap_path=single_path()))

    @pytest.mark.asyncio
    async def test_undecodable_result(self):
        verifier, _ = make_verifier(FakeEth(result=b"\x01"))
        with pytest.raises(OnChainQueryError, match="could not decode"):
            await verifier.query_onchain_price(make_endpoint(swap_path=single_path()))
