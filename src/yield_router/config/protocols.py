"""
Protocol-specific configuration for swap-yield-router.

Defaults point at Sepolia deployments: Circle's test USDC, Chainlink's
test LINK, the Uniswap V3 factory and SwapRouter02, the Aave V3 pool and
the Compound III USDC market.
"""

from dataclasses import dataclass, field
from typing import Dict

from web3 import Web3

from ..contracts.types import TokenDescriptor, WorkflowAddresses
from .base import BaseConfig, ConfigError

OUTPUT_ACCOUNTING_MODES = ("assumed", "receipt")


@dataclass
class ProtocolConfig(BaseConfig):
    """Addresses and swap settings for the protocols the workflow touches."""

    # Tokens
    SOURCE_TOKEN_SYMBOL: str = field(default_factory=lambda: BaseConfig.get_env("SOURCE_TOKEN_SYMBOL", "USDC"))
    SOURCE_TOKEN_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "SOURCE_TOKEN_ADDRESS", "0x1c7d4b196cb0c7b01d743fbc6116a902379c7238"
        )
    )
    SOURCE_TOKEN_DECIMALS: int = field(default_factory=lambda: BaseConfig.get_env_int("SOURCE_TOKEN_DECIMALS", 6))

    TARGET_TOKEN_SYMBOL: str = field(default_factory=lambda: BaseConfig.get_env("TARGET_TOKEN_SYMBOL", "LINK"))
    TARGET_TOKEN_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "TARGET_TOKEN_ADDRESS", "0x779877a7b0d9e8603169ddbd7836e478b4624789"
        )
    )
    TARGET_TOKEN_DECIMALS: int = field(default_factory=lambda: BaseConfig.get_env_int("TARGET_TOKEN_DECIMALS", 18))

    # Uniswap V3
    UNISWAP_V3_FACTORY_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "UNISWAP_V3_FACTORY_ADDRESS", "0x0227628f3f023bb0b980b67d528571c95c6dac1c"
        )
    )
    UNISWAP_V3_ROUTER_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "UNISWAP_V3_ROUTER_ADDRESS", "0x3bfa4769fb09eefc5a80d6e87c3b9c650f7ae48e"
        )
    )
    POOL_FEE_TIER: int = field(default_factory=lambda: BaseConfig.get_env_int("POOL_FEE_TIER", 3000))  # 0.3%

    # Swap protection, zero means none
    SWAP_AMOUNT_OUT_MINIMUM: int = field(default_factory=lambda: BaseConfig.get_env_int("SWAP_AMOUNT_OUT_MINIMUM", 0))
    SWAP_SQRT_PRICE_LIMIT_X96: int = field(
        default_factory=lambda: BaseConfig.get_env_int("SWAP_SQRT_PRICE_LIMIT_X96", 0)
    )
    SWAP_OUTPUT_ACCOUNTING: str = field(
        default_factory=lambda: BaseConfig.get_env("SWAP_OUTPUT_ACCOUNTING", "assumed")
    )

    # Deposit venues
    LENDING_POOL_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "LENDING_POOL_ADDRESS", "0x6ae43d3271ff6888e7fc43fd7321a503ff738951"
        )
    )
    VAULT_ADDRESS: str = field(
        default_factory=lambda: BaseConfig.get_env(
            "VAULT_ADDRESS", "0xaec1f48e02cfb822be958b68c7957156eb3f0b6e"
        )
    )

    _VALID_FEE_TIERS = (100, 500, 3000, 10000)

    def _validate_config(self):
        super()._validate_config()
        if self.POOL_FEE_TIER not in self._VALID_FEE_TIERS:
            raise ConfigError(f"Invalid pool fee tier: {self.POOL_FEE_TIER}")
        if self.SWAP_OUTPUT_ACCOUNTING not in OUTPUT_ACCOUNTING_MODES:
            raise ConfigError(
                f"SWAP_OUTPUT_ACCOUNTING must be one of {OUTPUT_ACCOUNTING_MODES}, "
                f"got: {self.SWAP_OUTPUT_ACCOUNTING}"
            )
        if self.SWAP_AMOUNT_OUT_MINIMUM < 0 or self.SWAP_SQRT_PRICE_LIMIT_X96 < 0:
            raise ConfigError("Swap slippage bounds must not be negative")
        for decimals in (self.SOURCE_TOKEN_DECIMALS, self.TARGET_TOKEN_DECIMALS):
            if not 0 <= decimals <= 77:
                raise ConfigError(f"Invalid token decimals: {decimals}")

    @property
    def contract_addresses(self) -> Dict[str, str]:
        """All configured contract addresses by role."""
        return {
            "source_token": self.SOURCE_TOKEN_ADDRESS,
            "target_token": self.TARGET_TOKEN_ADDRESS,
            "factory": self.UNISWAP_V3_FACTORY_ADDRESS,
            "router": self.UNISWAP_V3_ROUTER_ADDRESS,
            "lending_pool": self.LENDING_POOL_ADDRESS,
            "vault": self.VAULT_ADDRESS,
        }

    def get_address(self, role: str) -> str:
        """Get a checksummed contract address for a role."""
        if role not in self.contract_addresses:
            raise ValueError(f"Unknown contract role: {role}")
        address = self.contract_addresses[role]
        if not address or not Web3.is_address(address):
            raise ConfigError(f"Invalid {role} address: {address!r}")
        return Web3.to_checksum_address(address)

    def workflow_addresses(self) -> WorkflowAddresses:
        """Build the read-only address record handed to the orchestrator."""
        return WorkflowAddresses(
            source_token=TokenDescriptor(
                address=self.get_address("source_token"),
                decimals=self.SOURCE_TOKEN_DECIMALS,
                symbol=self.SOURCE_TOKEN_SYMBOL,
            ),
            target_token=TokenDescriptor(
                address=self.get_address("target_token"),
                decimals=self.TARGET_TOKEN_DECIMALS,
                symbol=self.TARGET_TOKEN_SYMBOL,
            ),
            factory=self.get_address("factory"),
            router=self.get_address("router"),
            lending_pool=self.get_address("lending_pool"),
            vault=self.get_address("vault"),
            fee_tier=self.POOL_FEE_TIER,
        )
