"""
Chain-specific configuration for swap-yield-router.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from .base import BaseConfig, ConfigError

# Used when RPC_URL is not set
DEFAULT_RPC_URLS = {
    "local": "http://127.0.0.1:8545",
    "testnet": "https://ethereum-sepolia-rpc.publicnode.com",
}


@dataclass
class ChainConfig(BaseConfig):
    """Connection settings for the test network the workflow runs against."""

    # Default chain settings
    CHAIN_NAME: str = field(default_factory=lambda: BaseConfig.get_env("CHAIN_NAME", "sepolia"))

    # Falls back to DEFAULT_RPC_URLS for the environment
    RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("RPC_URL", ""))

    # Sepolia
    CHAIN_ID: int = field(default_factory=lambda: BaseConfig.get_env_int("CHAIN_ID", 11155111))

    EXPLORER_URL: str = field(
        default_factory=lambda: BaseConfig.get_env("EXPLORER_URL", "https://sepolia.etherscan.io")
    )

    # Confirmation settings
    RECEIPT_TIMEOUT_SECONDS: float = field(
        default_factory=lambda: BaseConfig.get_env_float("RECEIPT_TIMEOUT_SECONDS", 120.0)
    )
    RECEIPT_POLL_LATENCY_SECONDS: float = field(
        default_factory=lambda: BaseConfig.get_env_float("RECEIPT_POLL_LATENCY_SECONDS", 1.0)
    )

    # Signing key, only required once a signer is built
    PRIVATE_KEY: str = field(default_factory=lambda: BaseConfig.get_env("PRIVATE_KEY", ""), repr=False)

    def __post_init__(self):
        if not self.RPC_URL:
            self.RPC_URL = DEFAULT_RPC_URLS.get(self.ENVIRONMENT, "")
        super().__post_init__()

    def _validate_config(self):
        super()._validate_config()
        if self.RECEIPT_TIMEOUT_SECONDS <= 0:
            raise ConfigError(
                f"RECEIPT_TIMEOUT_SECONDS must be positive, got: {self.RECEIPT_TIMEOUT_SECONDS}"
            )
        if not self.RPC_URL:
            raise ConfigError("RPC_URL is not configured")

    def get_private_key(self) -> str:
        """Return the signing key, failing loudly when it is missing."""
        if not self.PRIVATE_KEY:
            raise ConfigError("Required environment variable 'PRIVATE_KEY' is not set")
        return self.PRIVATE_KEY

    def tx_url(self, tx_hash: str) -> str:
        """Block explorer link for a transaction hash."""
        if not tx_hash.startswith("0x"):
            tx_hash = f"0x{tx_hash}"
        return f"{self.EXPLORER_URL.rstrip('/')}/tx/{tx_hash}"

    def address_url(self, address: str) -> str:
        """Block explorer link for a contract or account address."""
        return f"{self.EXPLORER_URL.rstrip('/')}/address/{address}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["PRIVATE_KEY"] = "***" if self.PRIVATE_KEY else ""
        return data
