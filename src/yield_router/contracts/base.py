"""
Base classes for contract interaction.

This module provides the shared plumbing every workflow component uses:
ABI loading, checksum validation, executor-backed read calls, and the
submit-then-wait-for-receipt transaction path.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Optional, Union

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction

from .errors import ErrorHandler, InvalidArgument, TransactionFailure, WorkflowError
from .types import TransactionReceipt, hash_to_hex

logger = logging.getLogger(__name__)

ABI_DIR = os.path.join(os.path.dirname(__file__), "abi")

Signer = Union[LocalAccount, str]


def load_abi(name: str) -> List[dict]:
    """
    Load a contract ABI shipped with the package.

    Args:
        name: ABI file name without extension (e.g. "erc20")

    Returns:
        Parsed ABI list

    Raises:
        WorkflowError: If the ABI file is missing or invalid
    """
    abi_path = os.path.join(ABI_DIR, f"{name}.json")
    try:
        with open(abi_path, "r") as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        raise WorkflowError(f"Failed to load ABI '{name}': {e}")


def signer_address(signer: Signer) -> str:
    """Return the checksum address a signer sends from."""
    address = signer if isinstance(signer, str) else signer.address
    return Web3.to_checksum_address(address)


@dataclass
class TxConfig:
    """Confirmation settings for state-changing calls."""

    receipt_timeout: float = 120.0
    poll_latency: float = 1.0


class ContractClient:
    """
    Base class for workflow components that talk to contracts.

    Reads run through the default executor so they can be gathered
    concurrently; writes block the calling flow until the transaction is
    mined.
    """

    def __init__(self, web3: Web3, config: Optional[TxConfig] = None):
        self.web3 = web3
        self.config = config or TxConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)

    def _contract(self, address: str, abi_name: str) -> Contract:
        """Bind a contract handle at ``address`` using a packaged ABI."""
        return self.web3.eth.contract(
            address=self._validate_address(address), abi=load_abi(abi_name)
        )

    async def _run_blocking(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a blocking web3 call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def _call(self, contract_function: ContractFunction) -> Any:
        """Execute a read-only contract call."""
        return await self._run_blocking(contract_function.call)

    async def _send_transaction(
        self,
        contract_function: ContractFunction,
        signer: Signer,
        operation: str,
    ) -> TransactionReceipt:
        """
        Submit a state-changing call and wait until it is mined.

        Args:
            contract_function: Bound contract function to transact
            signer: Account (or address managed by the signing middleware)
            operation: Human-readable operation name for logs and errors

        Returns:
            Receipt of the mined transaction

        Raises:
            TransactionFailure: If submission fails, confirmation cannot be
                obtained, or the transaction reverted
        """
        sender = signer_address(signer)

        try:
            tx_hash = await self._run_blocking(contract_function.transact, {"from": sender})
        except Exception as e:
            self.error_handler.log_error(e, {"operation": operation, "sender": sender})
            raise TransactionFailure(f"{operation} submission failed: {e}", operation=operation) from e

        tx_hex = hash_to_hex(tx_hash)
        self.logger.info(f"🔄 {operation} submitted: {tx_hex}")

        try:
            raw_receipt = await self._run_blocking(
                self.web3.eth.wait_for_transaction_receipt,
                tx_hash,
                timeout=self.config.receipt_timeout,
                poll_latency=self.config.poll_latency,
            )
        except Exception as e:
            self.error_handler.log_error(e, {"operation": operation, "tx_hash": tx_hex})
            raise TransactionFailure(
                f"{operation} could not be confirmed: {e}", tx_hash=tx_hex, operation=operation
            ) from e

        receipt = TransactionReceipt.from_web3(tx_hash, raw_receipt)
        if not receipt.success:
            self.logger.error(f"❌ {operation} reverted in block {receipt.block_number}: {tx_hex}")
            raise TransactionFailure(f"{operation} reverted", tx_hash=tx_hex, operation=operation)

        self.logger.info(
            f"✅ {operation} confirmed in block {receipt.block_number} (gas used: {receipt.gas_used})"
        )
        return receipt

    def _validate_address(self, address: str) -> str:
        """Validate and normalize an Ethereum address."""
        if not isinstance(address, str) or not Web3.is_address(address):
            raise InvalidArgument(f"Invalid address: {address!r}")
        return Web3.to_checksum_address(address)
