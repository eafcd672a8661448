"""Tests for the /resolve endpoint."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from jetlagged.chain import ChainSubmissionError, OutcomeSubmitter
from jetlagged.chain.submitter import SubmissionReceipt
from jetlagged.config import Settings
from jetlagged.providers import ProviderResponseError, ProviderUnavailableError
from jetlagged.resolution.service import ResolverService
from jetlagged.services.resolver import build_app

MATCHED_FLIGHT = {
    "type": "departure",
    "status": "active",
    "departure": {"iataCode": "fra", "delay": "45", "scheduledTime": "2025-11-03t07:05:00.000"},
    "flight": {"number": "1019", "iataNumber": "af1019"},
}

PARAMS = {
    "flightId": "0x" + "ab" * 32,
    "departureCode": "FRA",
    "date": "2025-11-03T07:05",
    "airlineCode": "AF",
    "flightNumber": "1019",
}


def make_client(settings, payload=None, provider=None, submitter=None) -> TestClient:
    if provider is None:
        provider = AsyncMock()
        provider.fetch_departures.return_value = [MATCHED_FLIGHT] if payload is None else payload
    service = ResolverService(settings, provider=provider, submitter=submitter)
    return TestClient(build_app(settings, service))


class TestResolveEndpoint:
    def test_resolves_matching_flight(self, settings):
        client = make_client(settings)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 200
        body = response.json()
        assert body["flightId"] == PARAMS["flightId"]
        assert body["flight"] == MATCHED_FLIGHT
        assert body["outcome"] == 2
        assert body["outcomeName"] == "DELAY_SHORT"
        assert "blockchain" not in body

    def test_non_finite_delay_is_on_time(self, settings):
        flight = {**MATCHED_FLIGHT, "departure": {**MATCHED_FLIGHT["departure"], "delay": "Infinity"}}
        client = make_client(settings, payload=[flight])

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 200
        assert response.json()["outcomeName"] == "ON_TIME"
        assert response.json()["flight"] == flight

    def test_lowercase_separator_queries_the_day(self, settings):
        provider = AsyncMock()
        provider.fetch_departures.return_value = [MATCHED_FLIGHT]
        client = make_client(settings, provider=provider)

        response = client.get("/resolve", params={**PARAMS, "date": "2025-11-03t07:05"})

        assert response.status_code == 200
        assert provider.fetch_departures.await_args.args[1] == "2025-11-03"

    def test_space_separated_date(self, settings):
        client = make_client(settings)

        response = client.get("/resolve", params={**PARAMS, "date": "2025-11-03 07:05"})

        assert response.status_code == 200

    @pytest.mark.parametrize("missing", list(PARAMS))
    def test_missing_parameter(self, settings, missing):
        client = make_client(settings)
        params = {k: v for k, v in PARAMS.items() if k != missing}

        response = client.get("/resolve", params=params)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Missing required parameters",
            "required": ["flightId", "departureCode", "date", "airlineCode", "flightNumber"],
        }

    def test_empty_parameter_counts_as_missing(self, settings):
        client = make_client(settings)

        response = client.get("/resolve", params={**PARAMS, "flightNumber": ""})

        assert response.status_code == 400

    @pytest.mark.parametrize("payload", [[], {"error": "No Record Found", "success": False}])
    def test_not_found_echoes_inputs(self, settings, payload):
        client = make_client(settings, payload=payload)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "No matching flight found"
        assert body["outcome"] == 0
        for name, value in PARAMS.items():
            assert body[name] == value
        assert body["scheduledDateTime"] == PARAMS["date"]
        assert body["queryDate"] == "2025-11-03"

    def test_provider_status_is_propagated(self, settings):
        provider = AsyncMock()
        provider.fetch_departures.side_effect = ProviderResponseError(429, "Too Many Requests")
        client = make_client(settings, provider=provider)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 429
        assert response.json() == {
            "error": "Aviation Edge API error",
            "status": 429,
            "statusText": "Too Many Requests",
        }

    def test_provider_timeout(self, settings):
        provider = AsyncMock()
        provider.fetch_departures.side_effect = ProviderUnavailableError("no answer in 10s")
        client = make_client(settings, provider=provider)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 504
        assert response.json()["error"] == "Flight status provider unavailable"

    def test_unexpected_error_is_500(self, settings):
        provider = AsyncMock()
        provider.fetch_departures.side_effect = KeyError("departure")
        client = make_client(settings, provider=provider)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

    def test_invalid_date(self, settings):
        client = make_client(settings)

        response = client.get("/resolve", params={**PARAMS, "date": "next tuesday"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date"

    def test_unknown_chain(self, settings):
        client = make_client(settings)

        response = client.get("/resolve", params={**PARAMS, "chain": "z"})

        assert response.status_code == 400
        assert response.json()["error"] == "Unknown chain"


class TestResolveWithChain:
    def test_successful_submission(self, signing_settings):
        submitter = AsyncMock()
        submitter.submit.return_value = SubmissionReceipt(
            network="sepolia", chain_id=11155111, tx_hash="0xbeef", status="confirmed"
        )
        client = make_client(signing_settings, submitter=submitter)

        response = client.get("/resolve", params={**PARAMS, "chain": "s"})

        assert response.status_code == 200
        assert response.json()["blockchain"] == {
            "network": "sepolia",
            "chainId": 11155111,
            "status": "confirmed",
            "transactionHash": "0xbeef",
        }
        assert submitter.submit.await_args.args[0].name == "sepolia"

    def test_failed_submission_keeps_resolution(self, signing_settings):
        submitter = AsyncMock()
        submitter.submit.side_effect = ChainSubmissionError("execution reverted", network="celo")
        client = make_client(signing_settings, submitter=submitter)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Blockchain submission failed"
        assert body["outcome"] == 2
        assert body["flight"] == MATCHED_FLIGHT
        assert body["blockchain"]["status"] == "failed"
        assert body["blockchain"]["message"] == "execution reverted"

    def test_malformed_signing_key_keeps_resolution(self):
        settings = Settings(aviation_edge_api_key="test-key", private_key="not-a-hex-key")
        client = make_client(settings)
        assert isinstance(client.app.state.resolver.submitter, OutcomeSubmitter)

        response = client.get("/resolve", params=PARAMS)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Blockchain submission failed"
        assert body["outcome"] == 2
        assert body["outcomeName"] == "DELAY_SHORT"
        assert body["flight"] == MATCHED_FLIGHT
        assert body["blockchain"]["network"] == "celo"
        assert body["blockchain"]["status"] == "failed"

    def test_submit_false_skips_chain(self, signing_settings):
        submitter = AsyncMock()
        client = make_client(signing_settings, submitter=submitter)

        response = client.get("/resolve", params={**PARAMS, "submit": "false"})

        assert response.status_code == 200
        assert "blockchain" not in response.json()
        submitter.submit.assert_not_awaited()


class TestServiceRoutes:
    def test_options_preflight_is_permissive(self, settings):
        client = make_client(settings)

        response = client.options("/resolve")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_preflight(self, settings):
        client = make_client(settings)

        response = client.options(
            "/resolve",
            headers={"Origin": "https://app.example", "Access-Control-Request-Method": "GET"},
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_unknown_route(self, settings):
        client = make_client(settings)

        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
