"""
Pytest configuration for package tests.

Provides an in-memory stand-in for a Web3 connection whose contracts are
keyed by address, so each test can script view results, reverts and
submission errors per contract function.
"""

from typing import Any, Dict, List, Tuple
from unittest.mock import Mock

import pytest
from hexbytes import HexBytes

from yield_router.contracts.types import TokenDescriptor, WorkflowAddresses

# Digit-only addresses are already in checksum form
USDC = "0x1111111111111111111111111111111111111111"
LINK = "0x2222222222222222222222222222222222222222"
FACTORY = "0x3333333333333333333333333333333333333333"
ROUTER = "0x4444444444444444444444444444444444444444"
LENDING_POOL = "0x5555555555555555555555555555555555555555"
VAULT = "0x6666666666666666666666666666666666666666"
POOL = "0x7777777777777777777777777777777777777777"
SIGNER = "0x8888888888888888888888888888888888888888"
ZERO = "0x0000000000000000000000000000000000000000"


class FakeFunction:
    def __init__(self, chain: "FakeChain", address: str, name: str, args: Tuple[Any, ...]):
        self.chain = chain
        self.address = address
        self.name = name
        self.args = args

    def call(self):
        self.chain.calls.append((self.address, self.name, self.args))
        value = self.chain.views[(self.address, self.name)]
        return value(*self.args) if callable(value) else value

    def transact(self, tx_params: Dict[str, Any]):
        key = (self.address, self.name)
        if key in self.chain.submit_errors:
            raise self.chain.submit_errors[key]
        tx_hash = self.chain.next_hash()
        self.chain.sent.append(
            {"to": self.address, "function": self.name, "args": self.args, "tx": tx_params, "hash": tx_hash}
        )
        self.chain.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "status": 0 if key in self.chain.reverts else 1,
            "blockNumber": 100 + len(self.chain.sent),
            "gasUsed": 50_000,
            "logs": [],
        }
        return tx_hash


class FakeFunctions:
    def __init__(self, chain: "FakeChain", address: str):
        self._chain = chain
        self._address = address

    def __getattr__(self, name: str):
        def bind(*args):
            return FakeFunction(self._chain, self._address, name, args)
        return bind


class FakeTransferEvent:
    def __init__(self, chain: "FakeChain"):
        self.chain = chain

    def process_receipt(self, receipt, errors=None):
        return self.chain.transfer_events.get(receipt["transactionHash"], [])


class FakeContract:
    def __init__(self, chain: "FakeChain", address: str):
        self.address = address
        self.functions = FakeFunctions(chain, address)
        self.events = Mock()
        self.events.Transfer.side_effect = lambda: FakeTransferEvent(chain)


class FakeChain:
    """Mock Web3 connection driven by per-function scripts."""

    def __init__(self):
        self.contracts: Dict[str, FakeContract] = {}
        self.views: Dict[Tuple[str, str], Any] = {}
        self.reverts = set()
        self.submit_errors: Dict[Tuple[str, str], Exception] = {}
        self.confirm_errors: Dict[Tuple[str, str], Exception] = {}
        self.receipts: Dict[HexBytes, Dict[str, Any]] = {}
        self.transfer_events: Dict[HexBytes, List[Dict[str, Any]]] = {}
        self.sent: List[Dict[str, Any]] = []
        self.calls: List[Tuple[str, str, Tuple[Any, ...]]] = []
        self._counter = 0

        self.web3 = Mock()
        self.web3.eth.contract.side_effect = self._contract
        self.web3.eth.wait_for_transaction_receipt.side_effect = self._wait

    def next_hash(self) -> HexBytes:
        self._counter += 1
        return HexBytes(self._counter.to_bytes(32, "big"))

    def _contract(self, address: str, abi):
        if address not in self.contracts:
            self.contracts[address] = FakeContract(self, address)
        return self.contracts[address]

    def _wait(self, tx_hash, timeout=None, poll_latency=None):
        sent = next(tx for tx in self.sent if tx["hash"] == tx_hash)
        key = (sent["to"], sent["function"])
        if key in self.confirm_errors:
            raise self.confirm_errors[key]
        return self.receipts[tx_hash]

    def sent_functions(self) -> List[Tuple[str, str]]:
        return [(tx["to"], tx["function"]) for tx in self.sent]

    def with_pool(self, pool: str = POOL, token0: str = USDC, token1: str = LINK, fee: int = 3000) -> "FakeChain":
        self.views[(FACTORY, "getPool")] = pool
        self.views[(pool, "token0")] = token0
        self.views[(pool, "token1")] = token1
        self.views[(pool, "fee")] = fee
        return self


@pytest.fixture
def chain():
    """Fake chain with the USDC/LINK 0.3% pool registered."""
    return FakeChain().with_pool()


@pytest.fixture
def usdc():
    return TokenDescriptor(address=USDC, decimals=6, symbol="USDC")


@pytest.fixture
def link():
    return TokenDescriptor(address=LINK, decimals=18, symbol="LINK")


@pytest.fixture
def addresses(usdc, link):
    return WorkflowAddresses(
        source_token=usdc,
        target_token=link,
        factory=FACTORY,
        router=ROUTER,
        lending_pool=LENDING_POOL,
        vault=VAULT,
        fee_tier=3000,
    )


@pytest.fixture
def signer():
    return SIGNER
