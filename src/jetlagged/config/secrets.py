"""Secret lookup backed by AWS Secrets Manager with an environment fallback."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

if TYPE_CHECKING:
    from mypy_boto3_secretsmanager import SecretsManagerClient
else:  # pragma: no cover - typing aid only
    SecretsManagerClient = Any

logger = structlog.get_logger(__name__)


class SecretNotFoundError(RuntimeError):
    """Raised when a secret is absent from every configured source."""


@dataclass(slots=True)
class CachedSecret:
    value: str
    expires_at: float


class SecretsManager:
    """Resolve signing keys and API keys for the resolver.

    AWS is consulted only when a region is configured; otherwise values come
    from the process environment (after loading ``.env``).
    """

    def __init__(
        self,
        *,
        region: str | None,
        prefix: str = "",
        cache_ttl_seconds: int = 300,
        enable_env_fallback: bool = True,
    ) -> None:
        if prefix and not prefix.endswith("/"):
            prefix = f"{prefix}/"
        self._prefix = prefix
        self._cache_ttl = max(cache_ttl_seconds, 1)
        self._cache: dict[str, CachedSecret] = {}
        self._enable_env_fallback = enable_env_fallback
        self._logger = logger.bind(component="secrets_manager")

        self._client: SecretsManagerClient | None = None
        self._aws_enabled = bool(region)

        if enable_env_fallback:
            load_dotenv(override=False)

        if self._aws_enabled:
            try:
                self._client = boto3.client("secretsmanager", region_name=region)
            except Exception as exc:  # pragma: no cover
                self._logger.warning(
                    "secretsmanager_initialization_failed",
                    error=str(exc),
                    region=region,
                )
                self._aws_enabled = False
                self._client = None

    @property
    def aws_enabled(self) -> bool:
        return self._aws_enabled

    def get_secret(
        self,
        name: str,
        *,
        default: str | None = None,
        raise_on_missing: bool = False,
    ) -> str | None:
        """Return the secret called ``name`` from AWS or the environment."""

        secret_id = self._resolve_secret_id(name)
        now = time.time()
        cached = self._cache.get(secret_id)
        if cached and cached.expires_at > now:
            return cached.value

        loaders = [self._load_from_aws]
        if self._enable_env_fallback:
            loaders.append(self._load_from_env)

        for loader in loaders:
            try:
                value = loader(secret_id)
            except SecretNotFoundError:
                continue
            self._cache[secret_id] = CachedSecret(value=value, expires_at=now + self._cache_ttl)
            return value

        if raise_on_missing:
            raise SecretNotFoundError(f"Secret '{name}' is not configured.")
        return default

    def clear_cache(self) -> None:
        self._cache.clear()

    def _load_from_aws(self, secret_id: str) -> str:
        if not self._aws_enabled or self._client is None:
            raise SecretNotFoundError(secret_id)

        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except (ClientError, BotoCoreError) as exc:
            self._logger.warning(
                "aws_secret_lookup_failed",
                secret_id=secret_id,
                error=str(exc),
            )
            raise SecretNotFoundError(secret_id) from exc

        secret_string = response.get("SecretString")
        if secret_string is None:
            raise SecretNotFoundError(secret_id)
        return secret_string

    def _load_from_env(self, secret_id: str) -> str:
        raw_key = secret_id.split("/")[-1]
        for key in (raw_key, raw_key.upper()):
            value = os.getenv(key)
            if value:
                return value
        raise SecretNotFoundError(secret_id)

    def _resolve_secret_id(self, name: str) -> str:
        if name.startswith("arn:") or not self._prefix or name.startswith(self._prefix):
            return name
        return f"{self._prefix}{name}"
