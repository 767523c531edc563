"""
Exact-input single-hop swaps through a Uniswap V3 style router.
"""

from web3 import Web3

from .base import ContractClient, Signer
from .errors import InvalidArgument
from .types import PoolReference, SwapParameters, TransactionReceipt


class SwapParameterBuilder:
    """
    Builds ExactInputSingleParams records.

    The workflow runs with ``amount_out_minimum=0`` and
    ``sqrt_price_limit_x96=0``: any non-zero output is accepted and no price
    limit is set. Both are constructor arguments so callers that need
    slippage protection can set them.
    """

    def __init__(self, amount_out_minimum: int = 0, sqrt_price_limit_x96: int = 0):
        if amount_out_minimum < 0 or sqrt_price_limit_x96 < 0:
            raise InvalidArgument("Slippage bounds must not be negative")
        self.amount_out_minimum = amount_out_minimum
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96

    def build(
        self,
        pool: PoolReference,
        recipient: str,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapParameters:
        """
        Assemble swap parameters for ``amount_in`` (smallest unit) of ``token_in``.

        The fee comes from the already-resolved pool reference.

        Raises:
            InvalidArgument: On a negative amount, a malformed address, or
                tokens that are not the pool's pair
        """
        if not isinstance(amount_in, int) or isinstance(amount_in, bool):
            raise InvalidArgument(f"amount_in must be an integer, got: {amount_in!r}")
        if amount_in < 0:
            raise InvalidArgument(f"amount_in must not be negative, got: {amount_in}")

        token_in = _checksum(token_in, "token_in")
        token_out = _checksum(token_out, "token_out")
        recipient = _checksum(recipient, "recipient")

        if {token_in, token_out} != {pool.token0, pool.token1}:
            raise InvalidArgument(
                f"Tokens {token_in}/{token_out} do not match pool {pool.address} "
                f"({pool.token0}/{pool.token1})"
            )

        return SwapParameters(
            token_in=token_in,
            token_out=token_out,
            fee=pool.fee_tier,
            recipient=recipient,
            amount_in=amount_in,
            amount_out_minimum=self.amount_out_minimum,
            sqrt_price_limit_x96=self.sqrt_price_limit_x96,
        )


def _checksum(address: str, field_name: str) -> str:
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidArgument(f"{field_name} is not a valid address: {address!r}")
    return Web3.to_checksum_address(address)


class SwapExecutor(ContractClient):
    """Submits ``exactInputSingle`` and waits for it to be mined."""

    async def execute(
        self,
        router_address: str,
        params: SwapParameters,
        signer: Signer,
    ) -> TransactionReceipt:
        """
        Execute the swap described by ``params``.

        Not retried: a revert (insufficient balance, exhausted liquidity,
        router-side constraints) surfaces as TransactionFailure.
        """
        router = self._contract(router_address, "swap_router")
        self.logger.info(
            f"Swapping {params.amount_in} units of {params.token_in} for "
            f"{params.token_out} (fee {params.fee}, min out {params.amount_out_minimum})"
        )
        return await self._send_transaction(
            router.functions.exactInputSingle(params.as_tuple()),
            signer,
            operation="swap exactInputSingle",
        )
