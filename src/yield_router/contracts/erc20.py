"""
ERC-20 allowance handling and smallest-unit amount scaling.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from web3.logs import DISCARD

from .base import ContractClient, Signer, signer_address
from .errors import InvalidArgument
from .types import TokenDescriptor, TransactionReceipt

HumanAmount = Union[Decimal, int, str, float]

# Enough precision for any uint256 amount
_SCALING_PRECISION = 80


def parse_amount(amount: HumanAmount) -> Decimal:
    """Parse a human-readable amount into a finite Decimal."""
    if isinstance(amount, bool):
        raise InvalidArgument(f"Amount must be numeric, got: {amount!r}")
    try:
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"Amount must be numeric, got: {amount!r}")
    if not value.is_finite():
        raise InvalidArgument(f"Amount must be finite, got: {amount!r}")
    return value


def to_smallest_unit(amount: HumanAmount, decimals: int) -> int:
    """
    Convert a human-readable amount into the token's smallest unit.

    Digits beyond ``decimals`` are truncated, never rounded up.

    Args:
        amount: Human-readable amount (e.g. Decimal("1.5"))
        decimals: Token decimals

    Returns:
        Integer amount in the smallest unit

    Raises:
        InvalidArgument: If the amount is negative or not a number
    """
    if not isinstance(decimals, int) or decimals < 0:
        raise InvalidArgument(f"Token decimals must be a non-negative integer, got: {decimals!r}")

    value = parse_amount(amount)
    if value < 0:
        raise InvalidArgument(f"Amount must not be negative, got: {amount}")

    with localcontext() as ctx:
        ctx.prec = _SCALING_PRECISION
        return int(value.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def from_smallest_unit(amount: int, decimals: int) -> Decimal:
    """Convert a smallest-unit integer back into a human-readable Decimal."""
    with localcontext() as ctx:
        ctx.prec = _SCALING_PRECISION
        return Decimal(amount).scaleb(-decimals)


class TokenApprover(ContractClient):
    """Grants ERC-20 allowances and waits for them to be mined."""

    async def approve(
        self,
        owner: Signer,
        spender: str,
        token: TokenDescriptor,
        human_amount: HumanAmount,
    ) -> TransactionReceipt:
        """
        Approve ``spender`` to pull ``human_amount`` of ``token`` from ``owner``.

        The amount is scaled with the token's decimals exactly once and a
        single approval is submitted. Re-approving replaces the previous
        allowance, as the token contract defines.

        Raises:
            InvalidArgument: On a negative or non-numeric amount
            TransactionFailure: If the approval reverts or is not confirmed
        """
        amount = to_smallest_unit(human_amount, token.decimals)
        return await self.approve_smallest_unit(
            owner, spender, token.address, amount, label=token.label
        )

    async def approve_smallest_unit(
        self,
        owner: Signer,
        spender: str,
        token_address: str,
        amount: int,
        label: Optional[str] = None,
    ) -> TransactionReceipt:
        """
        Approve an amount that is already in the token's smallest unit.

        Shared by the swap approval and the venue approvals.
        """
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise InvalidArgument(f"Approval amount must be a non-negative integer, got: {amount!r}")

        spender = self._validate_address(spender)
        token = self._contract(token_address, "erc20")

        self.logger.info(
            f"Approving {spender} to spend {amount} units of {label or token.address}"
        )
        return await self._send_transaction(
            token.functions.approve(spender, amount),
            owner,
            operation=f"approve {label or token.address}",
        )

    def transferred_amount(
        self,
        receipt: TransactionReceipt,
        token_address: str,
        recipient: Signer,
    ) -> int:
        """
        Sum ERC-20 Transfer events of ``token_address`` to ``recipient`` in a receipt.

        Used to read the true output of a swap instead of assuming it.
        """
        if receipt.raw is None:
            raise InvalidArgument(f"Receipt {receipt.tx_hash} carries no logs")

        token = self._contract(token_address, "erc20")
        to_address = signer_address(recipient)
        events = token.events.Transfer().process_receipt(receipt.raw, errors=DISCARD)

        total = 0
        for event in events:
            if event["address"].lower() != token.address.lower():
                continue
            args = event["args"]
            if args["to"].lower() == to_address.lower():
                total += int(args["value"])
        return total
