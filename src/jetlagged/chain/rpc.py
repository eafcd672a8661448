"""Minimal asynchronous Ethereum JSON-RPC client."""

from __future__ import annotations

import asyncio
import itertools
import time
from typing import Any

import httpx
import structlog
from hexbytes import HexBytes

logger = structlog.get_logger(__name__)


class RpcError(RuntimeError):
    """Raised when a node answers a call with a JSON-RPC error object."""

    def __init__(self, method: str, code: int | None, message: str, data: Any = None) -> None:
        super().__init__(f"{method} failed: {message}")
        self.method = method
        self.code = code
        self.data = data


class RpcUnavailableError(RpcError):
    """Raised when the node times out or cannot be reached."""

    def __init__(self, method: str, message: str) -> None:
        super().__init__(method, None, message)


class ReceiptTimeoutError(RpcError):
    """Raised when a transaction is not mined within the allotted time."""

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(
            "eth_getTransactionReceipt",
            None,
            f"transaction {tx_hash} not mined after {timeout}s",
        )
        self.tx_hash = tx_hash


def _to_int(method: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(value, 16)
    except (TypeError, ValueError) as exc:
        raise RpcError(method, None, f"expected a hex quantity, got {value!r}") from exc


class JsonRpcClient:
    """Issue JSON-RPC calls against a single node over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._ids = itertools.count(1)
        self._client_provided = client is not None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        if not self._client_provided:
            await self._client.aclose()

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Send one request and return its ``result`` member."""

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise RpcUnavailableError(method, f"RPC timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise RpcUnavailableError(
                method,
                f"RPC answered HTTP {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise RpcUnavailableError(method, f"RPC unreachable: {exc}") from exc
        except ValueError as exc:
            raise RpcUnavailableError(method, "RPC returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise RpcError(method, None, f"malformed JSON-RPC response: {body!r}")
        error = body.get("error")
        if error:
            raise RpcError(
                method,
                error.get("code"),
                error.get("message", "unknown error"),
                error.get("data"),
            )
        return body.get("result")

    async def chain_id(self) -> int:
        return _to_int("eth_chainId", await self.call("eth_chainId"))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        count = await self.call("eth_getTransactionCount", [address, block])
        return _to_int("eth_getTransactionCount", count)

    async def gas_price(self) -> int:
        return _to_int("eth_gasPrice", await self.call("eth_gasPrice"))

    async def estimate_gas(self, transaction: dict[str, Any]) -> int:
        return _to_int("eth_estimateGas", await self.call("eth_estimateGas", [transaction]))

    async def eth_call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        result = await self.call("eth_call", [{"to": to, "data": HexBytes(data).to_0x_hex()}, block])
        return bytes(HexBytes(result or "0x"))

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        tx_hash = await self.call("eth_sendRawTransaction", [HexBytes(raw_transaction).to_0x_hex()])
        if not isinstance(tx_hash, str):
            raise RpcError("eth_sendRawTransaction", None, f"expected a transaction hash, got {tx_hash!r}")
        return tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def wait_for_receipt(
        self,
        tx_hash: str,
        *,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
    ) -> dict[str, Any]:
        """Poll until the transaction is mined or ``timeout`` elapses."""

        deadline = time.monotonic() + timeout
        while True:
            receipt = await self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                if not isinstance(receipt, dict):
                    raise RpcError("eth_getTransactionReceipt", None, f"malformed receipt {receipt!r}")
                return receipt
            if time.monotonic() >= deadline:
                raise ReceiptTimeoutError(tx_hash, timeout)
            await asyncio.sleep(poll_interval)


__all__ = [
    "JsonRpcClient",
    "ReceiptTimeoutError",
    "RpcError",
    "RpcUnavailableError",
]
