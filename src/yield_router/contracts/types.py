"""
Shared data types for the swap-and-deposit workflow.

All amounts carried by these types are integers in the token's smallest
unit. Conversion to and from human-readable decimals happens only at the
CLI and logging boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from hexbytes import HexBytes
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class VenueKind(Enum):
    """Deposit venue flavours supported by YieldDepositor."""
    LENDING = "lending"
    VAULT = "vault"


class TxStatus(Enum):
    """Mined transaction outcome."""
    SUCCESS = "success"
    FAILURE = "failure"


def hash_to_hex(tx_hash: Union[str, bytes, HexBytes]) -> str:
    """Normalize a transaction hash to a 0x-prefixed hex string."""
    if isinstance(tx_hash, str):
        return tx_hash if tx_hash.startswith("0x") else f"0x{tx_hash}"
    return Web3.to_hex(tx_hash)


@dataclass(frozen=True)
class TokenDescriptor:
    """Fungible token identity used for amount scaling."""
    address: str
    decimals: int
    symbol: str = ""

    @property
    def label(self) -> str:
        return self.symbol or self.address


@dataclass(frozen=True)
class PoolReference:
    """Immutable parameters of a resolved liquidity pool."""
    address: str
    token0: str
    token1: str
    fee_tier: int


@dataclass(frozen=True)
class SwapParameters:
    """Arguments of an exact-input single-hop swap, in router field order."""
    token_in: str
    token_out: str
    fee: int
    recipient: str
    amount_in: int
    amount_out_minimum: int = 0
    sqrt_price_limit_x96: int = 0

    def as_tuple(self) -> Tuple[str, str, int, str, int, int, int]:
        """Encode as the ExactInputSingleParams struct the router expects."""
        return (
            self.token_in,
            self.token_out,
            self.fee,
            self.recipient,
            self.amount_in,
            self.amount_out_minimum,
            self.sqrt_price_limit_x96,
        )


@dataclass(frozen=True)
class TransactionReceipt:
    """Outcome of a mined transaction."""
    tx_hash: str
    status: TxStatus
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    raw: Optional[Mapping[str, Any]] = None

    @property
    def success(self) -> bool:
        return self.status == TxStatus.SUCCESS

    @classmethod
    def from_web3(cls, tx_hash: Union[str, bytes], receipt: Mapping[str, Any]) -> "TransactionReceipt":
        """Build from the mapping returned by ``eth.wait_for_transaction_receipt``."""
        status = TxStatus.SUCCESS if receipt.get("status") == 1 else TxStatus.FAILURE
        return cls(
            tx_hash=hash_to_hex(tx_hash),
            status=status,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
            raw=receipt,
        )


@dataclass(frozen=True)
class WorkflowAddresses:
    """
    Read-only record of every external contract the workflow talks to.

    Built once from configuration and handed to the orchestrator, so tests
    can substitute their own addresses and contract fakes.
    """
    source_token: TokenDescriptor
    target_token: TokenDescriptor
    factory: str
    router: str
    lending_pool: str
    vault: str
    fee_tier: int = 3000
