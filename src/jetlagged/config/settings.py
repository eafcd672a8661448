"""Configuration models and loading utilities for the resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets import SecretsManager

logger = structlog.get_logger(__name__)


class UnknownNetworkError(ValueError):
    """Raised when a chain selector does not name a configured network."""


class AviationEdgeSettings(BaseSettings):
    """Aviation Edge flight-history API access."""

    model_config = SettingsConfigDict(env_prefix="AVIATION_EDGE_")

    base_url: str = Field(
        "https://aviation-edge.com/v2/public",
        description="Aviation Edge public API base URL.",
    )
    timeout_seconds: float = Field(10.0, description="Per-request timeout for provider calls.")
    max_attempts: int = Field(
        1,
        ge=1,
        description="Attempts per lookup; transport errors only are retried.",
    )


class NetworkSettings(BaseSettings):
    """RPC endpoint and FlightMarket deployment for one EVM network."""

    name: str
    code: str
    chain_id: int
    rpc_url: str | None = None
    contract_address: str | None = None


class CeloNetworkSettings(NetworkSettings):
    model_config = SettingsConfigDict(env_prefix="CELO_")

    name: str = "celo"
    code: str = "c"
    chain_id: int = 42220
    rpc_url: str | None = Field("https://forno.celo.org", description="Celo mainnet RPC.")
    contract_address: str | None = Field(
        "0x243E571194C89E8B848137EdB46e5A1156272860",
        description="FlightMarket deployment on Celo.",
    )


class SepoliaNetworkSettings(NetworkSettings):
    model_config = SettingsConfigDict(env_prefix="SEPOLIA_")

    name: str = "sepolia"
    code: str = "s"
    chain_id: int = 11155111
    rpc_url: str | None = Field(
        "https://ethereum-sepolia-rpc.publicnode.com",
        description="Sepolia testnet RPC.",
    )
    contract_address: str | None = Field(
        "0x49F1b8A77712Edf77Fa5d04D07d77a846B23A91B",
        description="FlightMarket deployment on Sepolia.",
    )


class ChainSettings(BaseSettings):
    """Transaction submission behaviour shared by every network."""

    model_config = SettingsConfigDict(env_prefix="CHAIN_")

    default_network: str = Field("c", description="Letter code or name used when none is given.")
    rpc_timeout_seconds: float = Field(15.0, description="Timeout for each JSON-RPC call.")
    gas_multiplier: float = Field(1.2, description="Headroom applied to eth_estimateGas.")
    wait_for_receipt: bool = Field(True, description="Block until the transaction is mined.")
    receipt_timeout_seconds: float = Field(60.0, description="Give up waiting for a receipt after this.")
    receipt_poll_seconds: float = Field(2.0, description="Delay between receipt polls.")


class ServerSettings(BaseSettings):
    """HTTP listener and feature switches for the resolver service."""

    model_config = SettingsConfigDict(env_prefix="RESOLVER_")

    host: str = "0.0.0.0"
    port: int = 4500
    submit_onchain: bool = Field(
        True,
        description="Submit resolved outcomes when a signing key is configured.",
    )


class AwsSettings(BaseSettings):
    """AWS Secrets Manager location; leave region unset to use the environment only."""

    model_config = SettingsConfigDict(env_prefix="AWS_")

    region: str | None = None
    secrets_prefix: str = "jetlagged/"


@dataclass(slots=True)
class Settings:
    """Aggregated settings, built once at startup and read-only afterwards."""

    aviation_edge: AviationEdgeSettings = field(default_factory=AviationEdgeSettings)
    chain: ChainSettings = field(default_factory=ChainSettings)
    networks: dict[str, NetworkSettings] = field(
        default_factory=lambda: {
            "celo": CeloNetworkSettings(),
            "sepolia": SepoliaNetworkSettings(),
        }
    )
    server: ServerSettings = field(default_factory=ServerSettings)
    aws: AwsSettings = field(default_factory=AwsSettings)
    aviation_edge_api_key: str | None = field(default=None, repr=False)
    private_key: str | None = field(default=None, repr=False)
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        """Hydrate settings from environment variables and the secrets store."""

        aws = AwsSettings()
        cache_ttl_raw = os.getenv("SECRETS_CACHE_TTL_SECONDS")
        cache_ttl = 300
        if cache_ttl_raw:
            try:
                cache_ttl = max(int(cache_ttl_raw), 1)
            except ValueError:
                logger.warning(
                    "invalid_secrets_cache_ttl",
                    raw_value=cache_ttl_raw,
                    default=cache_ttl,
                )

        secrets = SecretsManager(
            region=aws.region,
            prefix=aws.secrets_prefix,
            cache_ttl_seconds=cache_ttl,
        )

        allowed_origins = [
            origin.strip()
            for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        settings = cls(
            aws=aws,
            aviation_edge_api_key=secrets.get_secret("AVIATION_EDGE_API_KEY"),
            private_key=secrets.get_secret("RESOLVER_PRIVATE_KEY"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            allowed_origins=allowed_origins or ["*"],
        )
        settings.log_presence()
        return settings

    def network(self, selector: str | None = None) -> NetworkSettings:
        """Return the network named by a letter code or name (case-insensitive)."""

        wanted = (selector or self.chain.default_network).strip().lower()
        for network in self.networks.values():
            if wanted in (network.code.lower(), network.name.lower()):
                return network
        raise UnknownNetworkError(
            f"Unknown chain '{selector}'; expected one of "
            f"{', '.join(sorted(n.code for n in self.networks.values()))}",
        )

    @property
    def onchain_enabled(self) -> bool:
        return self.server.submit_onchain and bool(self.private_key)

    def presence(self) -> dict[str, object]:
        """Which secrets and endpoints are configured, without their values."""

        return {
            "aviationEdgeApiKey": bool(self.aviation_edge_api_key),
            "privateKey": bool(self.private_key),
            "submitOnchain": self.onchain_enabled,
            "defaultNetwork": self.chain.default_network,
            "networks": {
                name: {
                    "rpcUrl": bool(network.rpc_url),
                    "contractAddress": bool(network.contract_address),
                    "chainId": network.chain_id,
                }
                for name, network in self.networks.items()
            },
        }

    def log_presence(self) -> None:
        logger.info("resolver_configuration_loaded", **self.presence())


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


__all__ = [
    "AviationEdgeSettings",
    "AwsSettings",
    "CeloNetworkSettings",
    "ChainSettings",
    "NetworkSettings",
    "SepoliaNetworkSettings",
    "ServerSettings",
    "Settings",
    "UnknownNetworkError",
    "get_settings",
]
