import pytest

from yield_router.config import manager

CONFIG_ENV_VARS = [
    "ENVIRONMENT",
    "LOG_LEVEL",
    "CHAIN_NAME",
    "RPC_URL",
    "CHAIN_ID",
    "EXPLORER_URL",
    "RECEIPT_TIMEOUT_SECONDS",
    "RECEIPT_POLL_LATENCY_SECONDS",
    "PRIVATE_KEY",
    "SOURCE_TOKEN_SYMBOL",
    "SOURCE_TOKEN_ADDRESS",
    "SOURCE_TOKEN_DECIMALS",
    "TARGET_TOKEN_SYMBOL",
    "TARGET_TOKEN_ADDRESS",
    "TARGET_TOKEN_DECIMALS",
    "UNISWAP_V3_FACTORY_ADDRESS",
    "UNISWAP_V3_ROUTER_ADDRESS",
    "POOL_FEE_TIER",
    "SWAP_AMOUNT_OUT_MINIMUM",
    "SWAP_SQRT_PRICE_LIMIT_X96",
    "SWAP_OUTPUT_ACCOUNTING",
    "LENDING_POOL_ADDRESS",
    "VAULT_ADDRESS",
]

# Throwaway key, never funded
TEST_PRIVATE_KEY = "0x" + "11" * 32


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every unit test against built-in defaults and a fresh config manager."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(manager, "_config_manager", None)


@pytest.fixture
def private_key(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    return TEST_PRIVATE_KEY
