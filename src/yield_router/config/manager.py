"""
Configuration manager for swap-yield-router.

This module provides a centralized way to access all configuration settings
and to build the objects they describe: the Web3 connection, the signing
account and the workflow orchestrator.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..contracts.base import TxConfig
from ..contracts.types import WorkflowAddresses
from ..contracts.uniswap_v3_router import SwapParameterBuilder
from ..core.orchestrator import OutputAccounting, WorkflowOrchestrator
from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .protocols import ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Centralized configuration manager that combines all configuration classes.

    This class provides easy access to all configuration settings and ensures
    that configurations are properly initialized and validated.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local or testnet)
        """
        self._environment = environment
        self._base_config = None
        self._chain_config = None
        self._protocol_config = None
        self._initialize_configs()

    def _initialize_configs(self):
        """Initialize all configuration objects."""
        try:
            overrides = {"ENVIRONMENT": self._environment} if self._environment else {}
            self._base_config = BaseConfig(**overrides)

            # Chain defaults depend on the environment
            self._chain_config = ChainConfig(ENVIRONMENT=self.environment)
            self._protocol_config = ProtocolConfig(ENVIRONMENT=self.environment)

            logger.info(f"Configuration initialized for environment: {self.environment}")

        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

    @property
    def environment(self) -> str:
        """Get current environment."""
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        """Get base configuration."""
        return self._base_config

    @property
    def chains(self) -> ChainConfig:
        """Get chain configuration."""
        return self._chain_config

    @property
    def protocols(self) -> ProtocolConfig:
        """Get protocol configuration."""
        return self._protocol_config

    def tx_config(self) -> TxConfig:
        """Confirmation settings for state-changing calls."""
        return TxConfig(
            receipt_timeout=self.chains.RECEIPT_TIMEOUT_SECONDS,
            poll_latency=self.chains.RECEIPT_POLL_LATENCY_SECONDS,
        )

    def swap_builder(self) -> SwapParameterBuilder:
        """Swap parameter builder with the configured slippage bounds."""
        return SwapParameterBuilder(
            amount_out_minimum=self.protocols.SWAP_AMOUNT_OUT_MINIMUM,
            sqrt_price_limit_x96=self.protocols.SWAP_SQRT_PRICE_LIMIT_X96,
        )

    def workflow_addresses(self) -> WorkflowAddresses:
        return self.protocols.workflow_addresses()

    def build_signer(self) -> LocalAccount:
        """Load the signing account from PRIVATE_KEY."""
        try:
            return Account.from_key(self.chains.get_private_key())
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"PRIVATE_KEY is not a valid private key: {e}")

    def connect(self, signer: Optional[LocalAccount] = None) -> Tuple[Web3, LocalAccount]:
        """
        Build a Web3 connection that signs transactions locally.

        Args:
            signer: Account to sign with (defaults to PRIVATE_KEY)

        Returns:
            (web3, signer) tuple

        Raises:
            ConfigError: If the node is unreachable or on the wrong chain
        """
        signer = signer or self.build_signer()
        url = self.chains.RPC_URL

        try:
            web3 = Web3(Web3.HTTPProvider(url))
            connected = web3.is_connected()
            chain_id = web3.eth.chain_id if connected else None
        except Exception as e:
            raise ConfigError(f"RPC at {url} failed during connect: {e}") from e

        if not connected:
            raise ConfigError(f"Could not connect to RPC at {url}")

        if chain_id != self.chains.CHAIN_ID:
            raise ConfigError(
                f"RPC {url} is on chain {chain_id}, expected {self.chains.CHAIN_ID}"
            )

        web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(signer), layer=0)
        web3.eth.default_account = signer.address

        logger.info(f"Connected to {self.chains.CHAIN_NAME} (chain {chain_id}) as {signer.address}")
        return web3, signer

    def build_orchestrator(self, web3: Web3, signer: LocalAccount) -> WorkflowOrchestrator:
        """Wire the orchestrator from configuration."""
        return WorkflowOrchestrator(
            web3,
            signer,
            self.workflow_addresses(),
            tx_config=self.tx_config(),
            swap_builder=self.swap_builder(),
            output_accounting=OutputAccounting(self.protocols.SWAP_OUTPUT_ACCOUNTING),
        )

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigError: If any configuration is invalid
        """
        addresses = self.workflow_addresses()
        if addresses.source_token.address == addresses.target_token.address:
            raise ConfigError("Source and target tokens must differ")
        if addresses.lending_pool == addresses.vault:
            logger.warning("Lending pool and vault share an address")

        logger.info("Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert all configurations to dictionary format."""
        return {
            "environment": self.environment,
            "base": self.base.to_dict() if self.base else {},
            "chains": self.chains.to_dict() if self.chains else {},
            "protocols": self.protocols.to_dict() if self.protocols else {},
        }

    def __repr__(self) -> str:
        """String representation of the configuration manager."""
        return f"ConfigManager(environment={self.environment})"


# Global configuration manager instance
_config_manager = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        environment: Override environment
        force_reload: Force reload of configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """
    Reload the global configuration manager.

    Args:
        environment: Override environment

    Returns:
        New ConfigManager instance
    """
    return get_config(environment=environment, force_reload=True)
