"""
Configuration management for swap-yield-router.

This module provides centralized configuration management for the
workflow. Use get_config() to access all configuration settings.

Example:
    from yield_router.config import get_config

    config = get_config()

    # Access chain settings
    rpc_url = config.chains.RPC_URL
    explorer_link = config.chains.tx_url(tx_hash)

    # Access protocol settings
    addresses = config.workflow_addresses()
    fee_tier = config.protocols.POOL_FEE_TIER

    # Connect and wire the workflow
    web3, signer = config.connect()
    orchestrator = config.build_orchestrator(web3, signer)
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .protocols import ProtocolConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ProtocolConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
