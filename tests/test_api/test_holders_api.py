"""Tests for the holders report HTTP API."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from holders_intel.api.app import API_VERSION, create_app
from holders_intel.api.routers.holders import (
    CLIENT_CLOSED_REQUEST,
    ClientDisconnected,
    build_unless_disconnected,
    get_report_builder,
)
from holders_intel.errors import LedgerFetchError

MINT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJospump"


@pytest.fixture
def builder() -> MagicMock:
    fake = MagicMock()
    fake.build = AsyncMock()
    return fake


@pytest.fixture
def client(builder: MagicMock) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_report_builder] = lambda: builder
    return TestClient(app)


class TestHoldersReportEndpoint:
    def test_returns_report_json(self, client: TestClient, builder: MagicMock) -> None:
        report = MagicMock()
        report.to_json_dict.return_value = {"tokenMint": MINT, "totalHolders": 3}
        builder.build.return_value = report

        resp = client.post("/api/v1/holders/report", json={"tokenMint": MINT, "manualPrice": 0.5})

        assert resp.status_code == 200
        assert resp.json() == {"tokenMint": MINT, "totalHolders": 3}
        builder.build.assert_awaited_once_with(MINT, 0.5)

    def test_manual_price_optional(self, client: TestClient, builder: MagicMock) -> None:
        report = MagicMock()
        report.to_json_dict.return_value = {"tokenMint": MINT}
        builder.build.return_value = report

        resp = client.post("/api/v1/holders/report", json={"tokenMint": MINT})

        assert resp.status_code == 200
        builder.build.assert_awaited_once_with(MINT, None)

    def test_ledger_failure_is_502_with_attempts(self, client: TestClient, builder: MagicMock) -> None:
        builder.build.side_effect = LedgerFetchError(MINT, [
            ("https://mainnet.helius-rpc.com/?api-key=*** [spl-token]", "RpcError: HTTP 429"),
            ("https://api.mainnet-beta.solana.com [token-2022]", "0 accounts"),
        ])

        resp = client.post("/api/v1/holders/report", json={"tokenMint": MINT})

        assert resp.status_code == 502
        body = resp.json()
        assert body["tokenMint"] == MINT
        assert body["error"].startswith(f"No holder accounts found for {MINT}")
        assert body["attempts"] == [
            {"source": "https://mainnet.helius-rpc.com/?api-key=*** [spl-token]", "reason": "RpcError: HTTP 429"},
            {"source": "https://api.mainnet-beta.solana.com [token-2022]", "reason": "0 accounts"},
        ]

    @pytest.mark.parametrize("payload", [
        {"tokenMint": "not-a-mint!"},
        {"tokenMint": "0OIl" * 10},
        {"tokenMint": MINT, "manualPrice": 0},
        {"tokenMint": MINT, "manualPrice": -1.5},
        {},
    ])
    def test_invalid_request_is_422(self, client: TestClient, builder: MagicMock, payload: dict) -> None:
        resp = client.post("/api/v1/holders/report", json=payload)

        assert resp.status_code == 422
        builder.build.assert_not_awaited()


class TestHealthEndpoint:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["version"] == API_VERSION
        assert body["status"] in ("ok", "degraded")
        assert isinstance(body["api_usage"], dict)


class TestClientDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect_cancels_build(self) -> None:
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def slow_build(mint, manual_price):
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def receive():
            await started.wait()
            return {"type": "http.disconnect"}

        builder = MagicMock()
        builder.build = AsyncMock(side_effect=slow_build)
        request = MagicMock()
        request.receive = AsyncMock(side_effect=receive)

        with pytest.raises(ClientDisconnected):
            await build_unless_disconnected(request, builder, MINT, None)

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_finished_build_stops_watching(self) -> None:
        watching = asyncio.Event()
        watch_cancelled = asyncio.Event()

        async def receive():
            watching.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                watch_cancelled.set()
                raise

        async def build(mint, manual_price):
            await watching.wait()
            return "report"

        builder = MagicMock()
        builder.build = AsyncMock(side_effect=build)
        request = MagicMock()
        request.receive = AsyncMock(side_effect=receive)

        assert await build_unless_disconnected(request, builder, MINT, 1.0) == "report"
        assert watch_cancelled.is_set()

    @pytest.mark.asyncio
    async def test_body_chunks_are_not_a_disconnect(self) -> None:
        messages = iter([
            {"type": "http.request", "body": b"", "more_body": False},
            {"type": "http.disconnect"},
        ])

        async def slow_build(mint, manual_price):
            await asyncio.sleep(10)

        builder = MagicMock()
        builder.build = AsyncMock(side_effect=slow_build)
        request = MagicMock()
        request.receive = AsyncMock(side_effect=lambda: next(messages))

        with pytest.raises(ClientDisconnected):
            await build_unless_disconnected(request, builder, MINT, None)

        assert request.receive.await_count == 2

    def test_endpoint_returns_499(self, client: TestClient, builder: MagicMock) -> None:
        async def slow_build(mint, manual_price):
            await asyncio.sleep(10)

        async def gone(request):
            return None

        builder.build.side_effect = slow_build

        with patch("holders_intel.api.routers.holders._wait_for_disconnect", gone):
            resp = client.post("/api/v1/holders/report", json={"tokenMint": MINT})

        assert resp.status_code == CLIENT_CLOSED_REQUEST
        assert resp.json() == {"error": "client disconnected"}
