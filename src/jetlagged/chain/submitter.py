"""Submit resolved outcomes to the FlightMarket contract."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from jetlagged.chain.contract import ContractError, FlightMarketContract, SentTransaction
from jetlagged.chain.rpc import JsonRpcClient, RpcError
from jetlagged.config.settings import ChainSettings, NetworkSettings
from jetlagged.domain.outcomes import Outcome

logger = structlog.get_logger(__name__)


class ChainSubmissionError(RuntimeError):
    """Raised when an outcome could not be recorded on-chain."""

    def __init__(self, message: str, *, network: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.network = network
        self.tx_hash = tx_hash


@dataclass(slots=True)
class SubmissionReceipt:
    network: str
    chain_id: int
    tx_hash: str
    status: str


class OutcomeSubmitter:
    """Call ``resolveMarket`` on the selected network and wait for the receipt.

    Submissions are never retried here; callers hold on to the resolution and
    can submit again.
    """

    def __init__(
        self,
        private_key: str,
        settings: ChainSettings | None = None,
        rpc_clients: dict[str, JsonRpcClient] | None = None,
    ) -> None:
        self._private_key = private_key
        self._settings = settings or ChainSettings()
        self._rpc_clients: dict[str, JsonRpcClient] = dict(rpc_clients or {})
        self._owned: set[str] = set()

    def _rpc_for(self, network: NetworkSettings) -> JsonRpcClient:
        client = self._rpc_clients.get(network.name)
        if client is None:
            if not network.rpc_url:
                raise ChainSubmissionError(
                    f"No RPC URL configured for {network.name}",
                    network=network.name,
                )
            client = JsonRpcClient(network.rpc_url, timeout=self._settings.rpc_timeout_seconds)
            self._rpc_clients[network.name] = client
            self._owned.add(network.name)
        return client

    async def close(self) -> None:
        for name in self._owned:
            await self._rpc_clients[name].close()
        self._owned.clear()

    async def submit(
        self,
        network: NetworkSettings,
        market_id: str,
        outcome: Outcome,
    ) -> SubmissionReceipt:
        if not outcome.is_final:
            raise ChainSubmissionError(
                "Refusing to submit an unresolved outcome",
                network=network.name,
            )
        if not network.contract_address:
            raise ChainSubmissionError(
                f"No FlightMarket contract configured for {network.name}",
                network=network.name,
            )

        sent: SentTransaction | None = None
        try:
            contract = FlightMarketContract(
                self._rpc_for(network),
                network.contract_address,
                chain_id=network.chain_id,
                private_key=self._private_key,
                gas_multiplier=self._settings.gas_multiplier,
            )
            sent = await contract.resolve_market(market_id, outcome)
            if self._settings.wait_for_receipt:
                sent.receipt = await contract.rpc.wait_for_receipt(
                    sent.tx_hash,
                    timeout=self._settings.receipt_timeout_seconds,
                    poll_interval=self._settings.receipt_poll_seconds,
                )
        except (ContractError, RpcError) as exc:
            logger.warning(
                "outcome_submission_failed",
                network=network.name,
                market_id=market_id,
                outcome=outcome.name,
                error=str(exc),
            )
            raise ChainSubmissionError(
                str(exc),
                network=network.name,
                tx_hash=sent.tx_hash if sent else None,
            ) from exc

        if sent.succeeded is False:
            raise ChainSubmissionError(
                f"Transaction {sent.tx_hash} reverted",
                network=network.name,
                tx_hash=sent.tx_hash,
            )

        status = "confirmed" if sent.succeeded else "pending"
        logger.info(
            "outcome_submitted",
            network=network.name,
            market_id=market_id,
            outcome=outcome.name,
            tx_hash=sent.tx_hash,
            status=status,
        )
        return SubmissionReceipt(
            network=network.name,
            chain_id=network.chain_id,
            tx_hash=sent.tx_hash,
            status=status,
        )


__all__ = ["ChainSubmissionError", "OutcomeSubmitter", "SubmissionReceipt"]
