"""Basic tests for service health endpoints."""

import pytest
from fastapi.testclient import TestClient

from jetlagged.services.coverage import build_app as build_coverage_app
from jetlagged.services.resolver import build_app as build_resolver_app


@pytest.mark.parametrize(
    "builder,service",
    [
        (build_resolver_app, "resolver"),
        (build_coverage_app, "coverage"),
    ],
)
def test_health_endpoint(builder, service, settings):
    app = builder(settings)
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["service"] == service
    assert "timestamp" in payload


def test_health_reports_presence_not_values(signing_settings):
    client = TestClient(build_resolver_app(signing_settings))
    config = client.get("/health").json()["config"]

    assert config["aviationEdgeApiKey"] is True
    assert config["privateKey"] is True
    assert config["submitOnchain"] is True
    assert config["networks"]["celo"]["contractAddress"] is True
    assert "test-key" not in str(config)
    assert signing_settings.private_key not in str(config)
