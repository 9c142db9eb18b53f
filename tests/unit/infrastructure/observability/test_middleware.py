"""Tests for the request logging middleware."""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from trackspot.infrastructure.observability import RequestLoggingMiddleware, get_correlation_id

MIDDLEWARE_LOGGER = "trackspot.infrastructure.observability.middleware"


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"correlation_id": get_correlation_id()}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return TestClient(app)


class TestRequestLoggingMiddleware:
    """Test one log line per request and correlation ID propagation."""

    def test_logs_one_line_per_request(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a completed request logs exactly one INFO line."""
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)

        response = client.get("/ping")

        assert response.status_code == 200
        records = [r for r in caplog.records if r.name == MIDDLEWARE_LOGGER]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        assert records[0].status_code == 200  # type: ignore[attr-defined]
        assert records[0].path == "/ping"  # type: ignore[attr-defined]

    def test_incoming_correlation_id_is_used_and_echoed(self, client: TestClient) -> None:
        """Test that a client-supplied ID flows into the handler and back out."""
        response = client.get("/ping", headers={"X-Correlation-ID": "client-abc"})

        assert response.json() == {"correlation_id": "client-abc"}
        assert response.headers["X-Correlation-ID"] == "client-abc"

    def test_correlation_id_is_generated(self, client: TestClient) -> None:
        """Test that requests without an ID get a fresh one."""
        first = client.get("/ping")
        second = client.get("/ping")

        assert first.headers["X-Correlation-ID"]
        assert first.headers["X-Correlation-ID"] != second.headers["X-Correlation-ID"]
        assert first.json()["correlation_id"] == first.headers["X-Correlation-ID"]

    def test_unhandled_error_is_logged_and_reraised(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a crashing handler is logged with its exception type."""
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)

        with pytest.raises(RuntimeError):
            client.get("/boom")

        records = [r for r in caplog.records if r.name == MIDDLEWARE_LOGGER]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].error_type == "RuntimeError"  # type: ignore[attr-defined]
