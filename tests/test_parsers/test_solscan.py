"""Tests for the Solscan Pro client and models."""

from unittest.mock import AsyncMock

import pytest

from holders_intel.parsers.solscan.client import SolscanApiError, SolscanClient
from holders_intel.parsers.solscan.models import SolscanHolder, SolscanMarket


class TestSolscanModels:
    def test_market_addresses_skip_empty(self) -> None:
        market = SolscanMarket(pool_address="Pool1", market_id=None, lp_address="Lp1")
        assert market.addresses == ["Pool1", "Lp1"]

    def test_holder_owner_program_aliases(self) -> None:
        assert SolscanHolder.model_validate({"ownerProgram": "P"}).owner_program == "P"
        assert SolscanHolder.model_validate({"program_id": "Q"}).owner_program == "Q"

    def test_label_texts_collects_nested_strings(self) -> None:
        holder = SolscanHolder.model_validate({
            "address": "A",
            "label": "Raydium Authority V4",
            "tags": ["LP", {"name": "Pool Vault"}],
            "owner_label": "  ",
            "unknown_field": "ignored",
        })
        assert holder.label_texts() == ["raydium authority v4", "lp", "pool vault"]


class TestSolscanClient:
    @pytest.mark.asyncio
    async def test_get_markets_items_form(self, make_response, sink) -> None:
        client = SolscanClient("key", recorder=sink)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(200, {
            "success": True,
            "data": {"items": [
                {"pool_address": "Pool1", "program_id": "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"},
                "junk",
            ]},
        }))

        markets = await client.get_markets("MintA")

        assert len(markets) == 1
        assert markets[0].pool_address == "Pool1"
        assert sink.events[0].service == "solscan"
        assert sink.events[0].endpoint == "token/markets"

    @pytest.mark.asyncio
    async def test_get_markets_list_form(self, make_response) -> None:
        client = SolscanClient("key")
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(
            200, {"success": True, "data": [{"pool_address": "Pool1"}, {"market_id": "M2"}]},
        ))

        markets = await client.get_markets("MintA")

        assert [m.addresses for m in markets] == [["Pool1"], ["M2"]]

    @pytest.mark.asyncio
    async def test_unsuccessful_body_raises(self, make_response) -> None:
        client = SolscanClient("bad")
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(
            200, {"success": False, "errors": {"message": "Unauthorized"}},
        ))

        with pytest.raises(SolscanApiError, match="Unauthorized"):
            await client.get_markets("MintA")

    @pytest.mark.asyncio
    async def test_http_error_raises(self, make_response) -> None:
        client = SolscanClient("key")
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(401, {}))

        with pytest.raises(SolscanApiError, match="HTTP 401"):
            await client.get_top_holders("MintA")

    @pytest.mark.asyncio
    async def test_get_top_holders(self, make_response) -> None:
        client = SolscanClient("key")
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(200, {
            "success": True,
            "data": {"total": 2, "items": [
                {"address": "TA1", "owner": "Pool", "amount": 900, "rank": 1, "owner_label": "Raydium Pool"},
                {"address": "TA2", "owner": "W", "amount": 60, "rank": 2},
            ]},
        }))

        holders = await client.get_top_holders("MintA", page_size=20)

        assert [h.owner for h in holders] == ["Pool", "W"]
        params = client._client.get.call_args.kwargs["params"]
        assert params == {"address": "MintA", "page": 1, "page_size": 20}
