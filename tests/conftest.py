"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure the src/ directory is on sys.path so `import jetlagged` works without installation.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))

from jetlagged.config.settings import Settings  # noqa: E402

# Well-known throwaway key (hardhat account #0); never funded on a real network.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_MARKET_ID = "0x" + "ab" * 32


@pytest.fixture
def settings():
    """Settings with an API key and no signing key."""
    return Settings(aviation_edge_api_key="test-key")


@pytest.fixture
def signing_settings():
    """Settings with both the API key and a signing key."""
    return Settings(aviation_edge_api_key="test-key", private_key=TEST_PRIVATE_KEY)


@pytest.fixture
def private_key():
    return TEST_PRIVATE_KEY


@pytest.fixture
def market_id():
    return TEST_MARKET_ID
