"""
Uniswap V3 pool discovery.

Resolves the pool for an ordered token pair and fee tier from the factory
and reads the pool's immutable parameters.
"""

import asyncio

from web3 import Web3

from .base import ContractClient
from .errors import PoolNotFound
from .types import ZERO_ADDRESS, PoolReference, TokenDescriptor


class PoolLocator(ContractClient):
    """Looks up a pool through the factory's ``getPool``."""

    async def locate(
        self,
        factory_address: str,
        token_a: TokenDescriptor,
        token_b: TokenDescriptor,
        fee_tier: int,
    ) -> PoolReference:
        """
        Resolve the pool for (token_a, token_b, fee_tier).

        The pair is passed to the factory in the order given; it is not
        sorted here.

        Args:
            factory_address: Pool factory address
            token_a: First token of the pair
            token_b: Second token of the pair
            fee_tier: Fee tier in hundredths of a bip (e.g. 3000)

        Returns:
            PoolReference with the pool's token0, token1 and fee

        Raises:
            PoolNotFound: If the factory returns the zero address
        """
        factory = self._contract(factory_address, "uniswap_v3_factory")
        token_a_address = self._validate_address(token_a.address)
        token_b_address = self._validate_address(token_b.address)

        self.logger.info(
            f"Looking up {token_a.label}/{token_b.label} pool at fee tier {fee_tier}"
        )
        pool_address = await self._call(
            factory.functions.getPool(token_a_address, token_b_address, fee_tier)
        )

        if not pool_address or int(pool_address, 16) == int(ZERO_ADDRESS, 16):
            self.logger.error(
                f"No pool for {token_a.label}/{token_b.label} at fee tier {fee_tier}"
            )
            raise PoolNotFound(token_a_address, token_b_address, fee_tier)

        pool_address = Web3.to_checksum_address(pool_address)
        pool = self._contract(pool_address, "uniswap_v3_pool")

        # Independent immutable reads
        token0, token1, fee = await asyncio.gather(
            self._call(pool.functions.token0()),
            self._call(pool.functions.token1()),
            self._call(pool.functions.fee()),
        )

        reference = PoolReference(
            address=pool_address,
            token0=Web3.to_checksum_address(token0),
            token1=Web3.to_checksum_address(token1),
            fee_tier=int(fee),
        )
        self.logger.info(
            f"Found pool {reference.address} (token0={reference.token0}, "
            f"token1={reference.token1}, fee={reference.fee_tier})"
        )
        return reference
