"""Tests for settings loading."""

import pytest

from jetlagged.config import Settings, UnknownNetworkError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("AVIATION_EDGE_API_KEY", "RESOLVER_PRIVATE_KEY", "AWS_REGION", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_reads_secrets_from_environment(clean_env):
    clean_env.setenv("AVIATION_EDGE_API_KEY", "edge-key")
    clean_env.setenv("RESOLVER_PRIVATE_KEY", "0x" + "11" * 32)
    clean_env.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
    clean_env.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings.from_env()

    assert settings.aviation_edge_api_key == "edge-key"
    assert settings.private_key == "0x" + "11" * 32
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert settings.log_level == "DEBUG"
    assert settings.onchain_enabled


def test_missing_secrets_are_reported_not_fatal(clean_env):
    settings = Settings.from_env()

    presence = settings.presence()
    assert presence["aviationEdgeApiKey"] is False
    assert presence["privateKey"] is False
    assert not settings.onchain_enabled


def test_network_overrides(clean_env):
    clean_env.setenv("SEPOLIA_RPC_URL", "https://sepolia.example")
    clean_env.setenv("CHAIN_DEFAULT_NETWORK", "sepolia")

    settings = Settings()

    assert settings.network().rpc_url == "https://sepolia.example"
    assert settings.network("c").name == "celo"


def test_submission_switch(clean_env):
    clean_env.setenv("RESOLVER_SUBMIT_ONCHAIN", "false")

    settings = Settings(private_key="0x" + "11" * 32)

    assert not settings.onchain_enabled


def test_unknown_network():
    with pytest.raises(UnknownNetworkError):
        Settings().network("polygon")
