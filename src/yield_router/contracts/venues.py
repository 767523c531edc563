"""
Deposits into yield venues.

A lending venue takes ``deposit(asset, amount, onBehalfOf, referralCode)``
and a vault venue takes ``supply(asset, amount)``. Both are preceded by an
approval of the venue for exactly the deposited amount.
"""

from dataclasses import dataclass
from typing import Optional

from web3 import Web3

from .base import ContractClient, Signer, TxConfig, signer_address
from .erc20 import TokenApprover
from .types import TransactionReceipt, VenueKind

REFERRAL_CODE = 0


@dataclass(frozen=True)
class DepositOutcome:
    """What happened when depositing into one venue."""
    venue_kind: VenueKind
    venue_address: str
    amount: int
    approval_receipt: Optional[TransactionReceipt] = None
    deposit_receipt: Optional[TransactionReceipt] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.deposit_receipt is not None

    @property
    def tx_hashes(self):
        return tuple(
            receipt.tx_hash
            for receipt in (self.approval_receipt, self.deposit_receipt)
            if receipt is not None
        )


class YieldDepositor(ContractClient):
    """
    Approves a venue and deposits into it.

    Failures are contained: ``deposit_to_venue`` never raises, it reports the
    error in the returned DepositOutcome so that a failing venue does not
    stop the caller from trying the next one.
    """

    def __init__(
        self,
        web3: Web3,
        config: Optional[TxConfig] = None,
        approver: Optional[TokenApprover] = None,
    ):
        super().__init__(web3, config)
        self.approver = approver or TokenApprover(web3, self.config)

    async def deposit_to_venue(
        self,
        venue_kind: VenueKind,
        venue_address: str,
        token_address: str,
        amount: int,
        signer: Signer,
    ) -> DepositOutcome:
        """
        Approve ``venue_address`` for ``amount`` and deposit it.

        Args:
            venue_kind: LENDING or VAULT
            venue_address: Venue contract address
            token_address: Token being deposited
            amount: Amount in the token's smallest unit (not scaled here)
            signer: Depositing account

        Returns:
            DepositOutcome describing both transactions or the error
        """
        approval_receipt = None
        try:
            approval_receipt = await self.approver.approve_smallest_unit(
                signer, venue_address, token_address, amount, label=f"{venue_kind.value} venue"
            )
            deposit_receipt = await self._deposit(venue_kind, venue_address, token_address, amount, signer)
        except Exception as e:
            self.error_handler.log_error(
                e, {"venue_kind": venue_kind.value, "venue_address": venue_address, "amount": amount}
            )
            return DepositOutcome(
                venue_kind=venue_kind,
                venue_address=venue_address,
                amount=amount,
                approval_receipt=approval_receipt,
                error=str(e),
            )

        self.logger.info(f"✅ Deposited {amount} units into {venue_kind.value} venue {venue_address}")
        return DepositOutcome(
            venue_kind=venue_kind,
            venue_address=venue_address,
            amount=amount,
            approval_receipt=approval_receipt,
            deposit_receipt=deposit_receipt,
        )

    async def _deposit(
        self,
        venue_kind: VenueKind,
        venue_address: str,
        token_address: str,
        amount: int,
        signer: Signer,
    ) -> TransactionReceipt:
        asset = self._validate_address(token_address)

        if venue_kind == VenueKind.LENDING:
            venue = self._contract(venue_address, "lending_pool")
            call = venue.functions.deposit(asset, amount, signer_address(signer), REFERRAL_CODE)
            operation = "lending deposit"
        elif venue_kind == VenueKind.VAULT:
            venue = self._contract(venue_address, "comet")
            call = venue.functions.supply(asset, amount)
            operation = "vault supply"
        else:
            raise ValueError(f"Unsupported venue kind: {venue_kind}")

        return await self._send_transaction(call, signer, operation=operation)
