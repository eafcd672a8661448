"""Resolve a flight market from provider data and optionally settle it on-chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import structlog

from jetlagged.chain.submitter import ChainSubmissionError, OutcomeSubmitter
from jetlagged.config.settings import NetworkSettings, Settings
from jetlagged.domain.flights import FlightQuery, FlightRecord
from jetlagged.domain.outcomes import Outcome
from jetlagged.providers.aviation_edge import AviationEdgeClient
from jetlagged.providers.base import FlightStatusProvider
from jetlagged.resolution.matching import extract_query_date, parse_scheduled_time, resolve_records

logger = structlog.get_logger(__name__)


class MatchState(str, Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"


class SubmissionState(str, Enum):
    NOT_REQUESTED = "not_requested"
    NOT_APPLICABLE = "not_applicable"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass(slots=True)
class Submission:
    """What happened to the on-chain leg of a resolution."""

    state: SubmissionState
    network: str | None = None
    chain_id: int | None = None
    tx_hash: str | None = None
    status: str | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "network": self.network,
            "chainId": self.chain_id,
            "status": self.status or self.state.value,
        }
        if self.tx_hash:
            payload["transactionHash"] = self.tx_hash
        if self.error:
            payload["message"] = self.error
        return payload


@dataclass(slots=True)
class ResolutionResult:
    query: FlightQuery
    query_date: str
    scheduled_at: datetime
    outcome: Outcome
    record: FlightRecord | None = None
    submission: Submission = field(
        default_factory=lambda: Submission(state=SubmissionState.NOT_REQUESTED)
    )

    @property
    def match_state(self) -> MatchState:
        return MatchState.MATCHED if self.record is not None else MatchState.NOT_FOUND


class ResolverService:
    """Match a flight, classify it and hand the outcome to the chain submitter."""

    def __init__(
        self,
        settings: Settings,
        provider: FlightStatusProvider | None = None,
        submitter: OutcomeSubmitter | None = None,
    ) -> None:
        self.settings = settings
        self.provider = provider or AviationEdgeClient(
            settings.aviation_edge_api_key,
            settings.aviation_edge,
        )
        if submitter is None and settings.private_key:
            submitter = OutcomeSubmitter(settings.private_key, settings.chain)
        self.submitter = submitter

    async def close(self) -> None:
        await self.provider.close()
        if self.submitter is not None:
            await self.submitter.close()

    def select_network(self, selector: str | None) -> NetworkSettings:
        """Raises ``UnknownNetworkError`` for unrecognised selectors."""

        return self.settings.network(selector)

    async def resolve(
        self,
        query: FlightQuery,
        network: NetworkSettings | None = None,
        submit: bool | None = None,
    ) -> ResolutionResult:
        """Resolve ``query``.

        Provider failures propagate; submission failures are recorded on the
        returned result so the resolved outcome is never lost.
        """

        query_date = extract_query_date(query.scheduled)
        scheduled_at = parse_scheduled_time(query.scheduled)
        network = network or self.select_network(None)
        log = logger.bind(
            flight_id=query.flight_id,
            flight=f"{query.airline_code}{query.flight_number}",
            departure_code=query.departure_code,
            scheduled=query.scheduled,
        )

        payload = await self.provider.fetch_departures(query, query_date)
        record, outcome = resolve_records(payload, scheduled_at)
        result = ResolutionResult(
            query=query,
            query_date=query_date,
            scheduled_at=scheduled_at,
            outcome=outcome,
            record=record,
        )

        if record is None:
            log.info("flight_not_found")
            result.submission = Submission(state=SubmissionState.NOT_APPLICABLE)
            return result

        log.info("flight_resolved", outcome=outcome.name, delay=record.delay_minutes)

        wants_submission = self.settings.onchain_enabled if submit is None else submit
        if not wants_submission:
            return result

        if self.submitter is None:
            result.submission = Submission(
                state=SubmissionState.FAILED,
                network=network.name,
                chain_id=network.chain_id,
                status="failed",
                error="No signing key configured for on-chain submission",
            )
            return result

        try:
            receipt = await self.submitter.submit(network, query.flight_id, outcome)
        except ChainSubmissionError as exc:
            log.warning("outcome_submission_failed", network=exc.network, error=str(exc))
            result.submission = Submission(
                state=SubmissionState.FAILED,
                network=network.name,
                chain_id=network.chain_id,
                tx_hash=exc.tx_hash,
                status="failed",
                error=str(exc),
            )
            return result

        result.submission = Submission(
            state=SubmissionState.SUBMITTED,
            network=receipt.network,
            chain_id=receipt.chain_id,
            tx_hash=receipt.tx_hash,
            status=receipt.status,
        )
        return result


__all__ = [
    "MatchState",
    "ResolutionResult",
    "ResolverService",
    "Submission",
    "SubmissionState",
]
