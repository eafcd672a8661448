"""In-process JSON-RPC node for chain tests."""

from __future__ import annotations

import json
from typing import Any

import httpx

RPC_URL = "https://rpc.test"
TX_HASH = "0x" + "11" * 32


class FakeNode:
    """Answer JSON-RPC calls from canned results and record every request."""

    def __init__(self, **overrides: Any) -> None:
        self.results: dict[str, Any] = {
            "eth_chainId": "0xa4ec",
            "eth_getTransactionCount": "0x5",
            "eth_gasPrice": "0x3b9aca00",
            "eth_estimateGas": "0x186a0",
            "eth_sendRawTransaction": TX_HASH,
            "eth_getTransactionReceipt": {"transactionHash": TX_HASH, "status": "0x1"},
            "eth_call": "0x" + "00" * 32,
        }
        self.results.update(overrides)
        self.calls: list[dict[str, Any]] = []

    def params(self, method: str) -> list[Any]:
        return next(call["params"] for call in self.calls if call["method"] == method)

    def methods(self) -> list[str]:
        return [call["method"] for call in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        result = self.results.get(body["method"])
        if isinstance(result, Exception):
            raise result
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
