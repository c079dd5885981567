"""Tests for launchpad detection and creator lookup."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from holders_intel.parsers.bagsfm.client import BagsToken
from holders_intel.parsers.dexscreener.models import DexScreenerPair
from holders_intel.parsers.launchpad import (
    BAGS_FM,
    BONK_FUN,
    MOONSHOT,
    PUMP_FUN,
    CreatorResolver,
    LaunchpadInfo,
    detect_launchpad,
)
from holders_intel.parsers.pumpfun.models import PumpfunCoin, PumpfunCreatorHistory


def _pair(websites=(), socials=()) -> DexScreenerPair:
    return DexScreenerPair.model_validate({
        "pairAddress": "P",
        "info": {
            "websites": [{"url": url} for url in websites],
            "socials": [{"type": "twitter", "url": url} for url in socials],
        },
    })


class TestDetectLaunchpad:
    def test_website_is_high_confidence(self) -> None:
        info = detect_launchpad("Mint111", [_pair(websites=["https://pump.fun/coin/Mint111"])])
        assert info == LaunchpadInfo(name=PUMP_FUN, detected=True, confidence="high")

    def test_website_beats_social(self) -> None:
        pairs = [_pair(socials=["https://letsbonk.fun/x"]), _pair(websites=["https://moonshot.money/t"])]
        assert detect_launchpad("Mint111", pairs).name == MOONSHOT

    def test_social_is_medium_confidence(self) -> None:
        info = detect_launchpad("Mint111", [_pair(socials=["https://letsbonk.fun/token"])])
        assert info.name == BONK_FUN
        assert info.confidence == "medium"

    def test_mint_suffix_is_low_confidence(self) -> None:
        info = detect_launchpad("7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosbags", [])
        assert info.name == BAGS_FM
        assert info.confidence == "low"
        assert detect_launchpad("AbcPump", []).detected is False

    def test_unknown(self) -> None:
        info = detect_launchpad("Mint111", [_pair(websites=["https://mytoken.xyz"])])
        assert info == LaunchpadInfo()


class TestCreatorResolver:
    @pytest.mark.asyncio
    async def test_pumpfun_with_history(self) -> None:
        pumpfun = AsyncMock()
        pumpfun.get_coin = AsyncMock(return_value=PumpfunCoin(
            mint="Mintpump", name="Test", symbol="TST", creator="Dev1", twitter="https://x.com/t",
        ))
        pumpfun.get_creator_history = AsyncMock(
            return_value=PumpfunCreatorHistory(total_tokens=7, dead_token_count=5),
        )
        resolver = CreatorResolver(pumpfun, None)

        info = await resolver.resolve("Mintpump", LaunchpadInfo(name=PUMP_FUN, detected=True))

        assert info.platform == PUMP_FUN
        assert info.creator_address == "Dev1"
        assert info.twitter == "https://x.com/t"
        assert info.total_launches == 7
        assert info.dead_launches == 5
        assert info.error is None
        pumpfun.get_creator_history.assert_awaited_once_with("Dev1", "Mintpump")

    @pytest.mark.asyncio
    async def test_pumpfun_history_timeout_keeps_creator(self) -> None:
        async def hang(wallet, mint):
            await asyncio.sleep(1)

        pumpfun = AsyncMock()
        pumpfun.get_coin = AsyncMock(return_value=PumpfunCoin(mint="M", creator="Dev1"))
        pumpfun.get_creator_history = AsyncMock(side_effect=hang)
        resolver = CreatorResolver(pumpfun, None, timeout=0.01)

        info = await resolver.resolve("M", LaunchpadInfo(name=PUMP_FUN, detected=True))

        assert info.creator_address == "Dev1"
        assert info.total_launches is None
        assert info.error is None

    @pytest.mark.asyncio
    async def test_pumpfun_history_error_keeps_creator(self) -> None:
        pumpfun = AsyncMock()
        pumpfun.get_coin = AsyncMock(return_value=PumpfunCoin(
            mint="M", creator="CreatorWallet111", name="Test", twitter="https://x.com/t",
        ))
        pumpfun.get_creator_history = AsyncMock(side_effect=ValueError("bad created_timestamp"))
        resolver = CreatorResolver(pumpfun, None)

        info = await resolver.resolve("M", LaunchpadInfo(name=PUMP_FUN, detected=True))

        assert info.creator_address == "CreatorWallet111"
        assert info.name == "Test"
        assert info.twitter == "https://x.com/t"
        assert info.total_launches is None
        assert info.error is None

    @pytest.mark.asyncio
    async def test_pumpfun_coin_missing(self) -> None:
        pumpfun = AsyncMock()
        pumpfun.get_coin = AsyncMock(return_value=None)
        resolver = CreatorResolver(pumpfun, None)

        info = await resolver.resolve("M", LaunchpadInfo(name=PUMP_FUN, detected=True))

        assert info.creator_address is None
        assert info.error == "coin not found"

    @pytest.mark.asyncio
    async def test_bags(self) -> None:
        bags = AsyncMock()
        bags.get_token = AsyncMock(return_value=BagsToken(mint="M", creator="BagDev", website="https://b.xyz"))
        resolver = CreatorResolver(None, bags)

        info = await resolver.resolve("M", LaunchpadInfo(name=BAGS_FM, detected=True))

        assert info.platform == BAGS_FM
        assert info.creator_address == "BagDev"
        assert info.website == "https://b.xyz"

    @pytest.mark.asyncio
    async def test_lookup_error_is_captured(self) -> None:
        bags = AsyncMock()
        bags.get_token = AsyncMock(side_effect=RuntimeError("boom"))
        resolver = CreatorResolver(None, bags)

        info = await resolver.resolve("M", LaunchpadInfo(name=BAGS_FM, detected=True))

        assert info.platform == BAGS_FM
        assert info.error == "RuntimeError: boom"

    @pytest.mark.asyncio
    async def test_platform_only(self) -> None:
        resolver = CreatorResolver(AsyncMock(), AsyncMock())

        info = await resolver.resolve("M", LaunchpadInfo(name=BONK_FUN, detected=True))

        assert info.platform == BONK_FUN
        assert info.creator_address is None
