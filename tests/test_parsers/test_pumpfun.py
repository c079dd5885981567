"""Tests for Pump.fun coin and creator history client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from holders_intel.parsers.pumpfun.client import PumpfunClient, _parse_coin, _parse_creator_history
from holders_intel.parsers.pumpfun.models import PumpfunToken


class TestPumpfunModels:
    def test_dead_token(self) -> None:
        token = PumpfunToken(mint="X", usd_market_cap=50)
        assert token.is_dead is True

    def test_alive_token(self) -> None:
        token = PumpfunToken(mint="X", usd_market_cap=5000)
        assert token.is_dead is False

    def test_history_dict_form(self) -> None:
        history = _parse_creator_history({"coins": [
            {"mint": "a", "usd_market_cap": 10},
            {"mint": "b", "usd_market_cap": 20000},
            "junk",
        ]})
        assert history.total_tokens == 2
        assert history.dead_token_count == 1

    def test_malformed_numbers_become_zero(self) -> None:
        history = _parse_creator_history([
            {"mint": "a", "created_timestamp": "2024-01-01T00:00:00Z", "usd_market_cap": "n/a"},
            {"mint": "b", "created_timestamp": 1700000000, "usd_market_cap": "NaN"},
        ])
        assert [t.created_timestamp for t in history.tokens] == [0, 1700000000]
        assert [t.usd_market_cap for t in history.tokens] == [0.0, 0.0]
        assert history.dead_token_count == 2

    def test_coin_bad_timestamp(self) -> None:
        coin = _parse_coin({"mint": "M", "creator": "Dev", "created_timestamp": "yesterday", "usd_market_cap": [1]})
        assert coin.creator == "Dev"
        assert coin.created_timestamp == 0
        assert coin.usd_market_cap == 0.0


class TestPumpfunClient:
    @pytest.mark.asyncio
    async def test_get_coin(self) -> None:
        client = PumpfunClient()
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {
            "mint": "MintA",
            "name": "Test",
            "symbol": "TST",
            "creator": "CreatorWallet",
            "twitter": "https://x.com/test",
            "telegram": "",
            "complete": True,
            "usd_market_cap": 42000.5,
        }
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        coin = await client.get_coin("MintA")

        assert coin is not None
        assert coin.creator == "CreatorWallet"
        assert coin.twitter == "https://x.com/test"
        assert coin.telegram is None
        assert coin.complete is True

    @pytest.mark.asyncio
    async def test_get_coin_not_found(self) -> None:
        client = PumpfunClient()
        mock_resp = MagicMock()
        mock_resp.status_code = 404
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        assert await client.get_coin("MintA") is None

    @pytest.mark.asyncio
    async def test_serial_launcher_history(self) -> None:
        """Creator with many dead tokens."""
        client = PumpfunClient()
        tokens_data = [
            {"mint": f"token{i}", "name": f"Dead{i}", "symbol": f"D{i}",
             "created_timestamp": 1000000 + i, "market_cap": 0, "usd_market_cap": 0}
            for i in range(12)
        ]
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = tokens_data
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        history = await client.get_creator_history("ScammerWallet")

        assert history is not None
        assert history.total_tokens == 12
        assert history.dead_token_count == 12

    @pytest.mark.asyncio
    async def test_no_data(self) -> None:
        """Creator not found on pump.fun."""
        client = PumpfunClient()
        mock_resp = MagicMock()
        mock_resp.status_code = 404
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        history = await client.get_creator_history("UnknownWallet")

        assert history is not None
        assert history.total_tokens == 0

    @pytest.mark.asyncio
    async def test_timeout(self, sink) -> None:
        """Timeout returns None and is still recorded."""
        client = PumpfunClient(recorder=sink)
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=httpx.TimeoutException("timeout"))

        history = await client.get_creator_history("Wallet", mint="MintA")

        assert history is None
        assert len(sink.events) == 1
        assert sink.events[0].token_mint == "MintA"
        assert sink.events[0].success is False
