"""Tests for DEX listing status and socials merging."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from holders_intel.parsers.dexscreener.client import DexScreenerApiError
from holders_intel.parsers.dexscreener.models import DexScreenerOrder, DexScreenerPair
from holders_intel.parsers.dex_status import fetch_dex_status, merge_socials
from holders_intel.parsers.launchpad import CreatorInfo
from holders_intel.parsers.pool_registry import PairsSnapshot


def _ready(snapshot: PairsSnapshot) -> asyncio.Future:
    future = asyncio.get_running_loop().create_future()
    future.set_result(snapshot)
    return future


def _pair(boosts: int | None = None, socials=(), websites=()) -> DexScreenerPair:
    data = {
        "pairAddress": "P",
        "info": {
            "socials": [{"type": kind, "url": url} for kind, url in socials],
            "websites": [{"url": url} for url in websites],
        },
    }
    if boosts is not None:
        data["boosts"] = {"active": boosts}
    return DexScreenerPair.model_validate(data)


class TestFetchDexStatus:
    @pytest.mark.asyncio
    async def test_approved_orders_and_boosts(self) -> None:
        client = AsyncMock()
        client.get_orders = AsyncMock(return_value=[
            DexScreenerOrder(type="tokenProfile", status="approved"),
            DexScreenerOrder(type="communityTakeover", status="rejected"),
            DexScreenerOrder(type="trendingBarAd", status="approved"),
        ])

        status = await fetch_dex_status(
            client, "MintA", _ready(PairsSnapshot(pairs=(_pair(boosts=5), _pair(boosts=20), _pair()))),
        )

        assert status.has_paid_profile is True
        assert status.has_cto is False
        assert status.has_active_ads is True
        assert status.active_boosts == 20
        assert status.is_boosted is True
        assert status.error is None

    @pytest.mark.asyncio
    async def test_orders_failure_is_soft(self) -> None:
        client = AsyncMock()
        client.get_orders = AsyncMock(side_effect=DexScreenerApiError("HTTP 500"))

        status = await fetch_dex_status(client, "MintA", _ready(PairsSnapshot(pairs=(_pair(boosts=1),))))

        assert status.error == "DexScreenerApiError: HTTP 500"
        assert status.has_paid_profile is False
        assert status.is_boosted is True

    @pytest.mark.asyncio
    async def test_no_pairs_no_boost(self) -> None:
        client = AsyncMock()
        client.get_orders = AsyncMock(return_value=[])

        status = await fetch_dex_status(client, "MintA", _ready(PairsSnapshot()))

        assert status.active_boosts == 0
        assert status.is_boosted is False


class TestMergeSocials:
    def test_pairs_first_then_creator(self) -> None:
        pairs = [
            _pair(socials=[("x", "https://x.com/pair"), ("discord", "https://discord.gg/p")]),
            _pair(socials=[("telegram", "https://t.me/pair")], websites=["https://pair.xyz"]),
        ]
        creator = CreatorInfo(
            twitter="https://x.com/creator", telegram="https://t.me/creator", website="https://creator.xyz",
        )

        socials = merge_socials(pairs, creator)

        assert socials.twitter == "https://x.com/pair"
        assert socials.telegram == "https://t.me/pair"
        assert socials.discord == "https://discord.gg/p"
        assert socials.website == "https://pair.xyz"

    def test_creator_fills_gaps(self) -> None:
        socials = merge_socials([], CreatorInfo(twitter="https://x.com/creator"))
        assert socials.twitter == "https://x.com/creator"
        assert socials.telegram is None

    def test_empty(self) -> None:
        assert merge_socials([], None).is_empty
