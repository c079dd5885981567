"""Launchpad detection and creator-wallet metadata.

The launch platform is inferred from pair websites (high confidence), pair
socials (medium) and finally the vanity suffix of the mint (low). The
platform decides which creator API is asked for the creator wallet:
pump.fun (plus the creator's launch history) or bags.fm. Other platforms
only report their name.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from holders_intel.parsers.bagsfm.client import BagsClient
from holders_intel.parsers.dexscreener.models import DexScreenerPair
from holders_intel.parsers.pumpfun.client import PumpfunClient

PUMP_FUN = "pump.fun"
BONK_FUN = "bonk.fun"
BAGS_FM = "bags.fm"
MOONSHOT = "moonshot"
UNKNOWN = "unknown"

_WEBSITE_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("pump.fun",), PUMP_FUN),
    (("bonk.bot", "bonk.fun", "letsbonk.fun"), BONK_FUN),
    (("bags.fm",), BAGS_FM),
    (("moonshot",), MOONSHOT),
)
_SOCIAL_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("pump.fun",), PUMP_FUN),
    (("letsbonk.fun", "bonk.fun"), BONK_FUN),
)
_MINT_SUFFIXES: tuple[tuple[str, str], ...] = (
    ("pump", PUMP_FUN),
    ("bonk", BONK_FUN),
    ("bags", BAGS_FM),
)


@dataclass(frozen=True)
class LaunchpadInfo:
    name: str = UNKNOWN
    detected: bool = False
    confidence: str = "low"  # "high", "medium", "low"


@dataclass
class CreatorInfo:
    platform: str = UNKNOWN
    creator_address: str | None = None
    name: str | None = None
    symbol: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None
    total_launches: int | None = None
    dead_launches: int | None = None
    error: str | None = None


def _match(url: str, markers: tuple[tuple[tuple[str, ...], str], ...]) -> str | None:
    for needles, name in markers:
        if any(n in url for n in needles):
            return name
    return None


def detect_launchpad(mint: str, pairs: Sequence[DexScreenerPair]) -> LaunchpadInfo:
    """Best guess of the platform that launched ``mint``."""
    for pair in pairs:
        if pair.info is None:
            continue
        for website in pair.info.websites:
            name = _match(website.url, _WEBSITE_MARKERS)
            if name:
                return LaunchpadInfo(name=name, detected=True, confidence="high")

    for pair in pairs:
        if pair.info is None:
            continue
        for social in pair.info.socials:
            name = _match(social.url, _SOCIAL_MARKERS)
            if name:
                return LaunchpadInfo(name=name, detected=True, confidence="medium")

    for suffix, name in _MINT_SUFFIXES:
        if mint.endswith(suffix):
            return LaunchpadInfo(name=name, detected=True, confidence="low")

    return LaunchpadInfo()


class CreatorResolver:
    def __init__(
        self,
        pumpfun: PumpfunClient | None,
        bags: BagsClient | None,
        *,
        timeout: float = 5.0,
    ) -> None:
        self._pumpfun = pumpfun
        self._bags = bags
        self._timeout = timeout

    async def resolve(self, mint: str, launchpad: LaunchpadInfo) -> CreatorInfo:
        """Creator metadata for the detected platform; errors are kept on the result."""
        try:
            if launchpad.name == PUMP_FUN and self._pumpfun is not None:
                return await self._from_pumpfun(mint)
            if launchpad.name == BAGS_FM and self._bags is not None:
                return await self._from_bags(mint)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"[CREATOR] {launchpad.name} lookup failed for {mint[:12]}: {reason}")
            return CreatorInfo(platform=launchpad.name, error=reason)

        return CreatorInfo(platform=launchpad.name)

    async def _from_pumpfun(self, mint: str) -> CreatorInfo:
        coin = await asyncio.wait_for(self._pumpfun.get_coin(mint), timeout=self._timeout)
        if coin is None:
            return CreatorInfo(platform=PUMP_FUN, error="coin not found")

        info = CreatorInfo(
            platform=PUMP_FUN,
            creator_address=coin.creator or None,
            name=coin.name or None,
            symbol=coin.symbol or None,
            twitter=coin.twitter,
            telegram=coin.telegram,
            website=coin.website,
        )
        if coin.creator:
            try:
                history = await asyncio.wait_for(
                    self._pumpfun.get_creator_history(coin.creator, mint), timeout=self._timeout,
                )
            except TimeoutError:
                logger.debug(f"[PUMPFUN] Creator history timed out for {coin.creator[:12]}")
                history = None
            except Exception as e:
                # launch history is optional; creator metadata above still stands
                logger.debug(f"[PUMPFUN] Creator history failed for {coin.creator[:12]}: {type(e).__name__}: {e}")
                history = None
            if history is not None:
                info.total_launches = history.total_tokens
                info.dead_launches = history.dead_token_count
        logger.debug(f"[PUMPFUN] {mint[:12]}: creator={info.creator_address} launches={info.total_launches}")
        return info

    async def _from_bags(self, mint: str) -> CreatorInfo:
        token = await asyncio.wait_for(self._bags.get_token(mint), timeout=self._timeout)
        if token is None:
            return CreatorInfo(platform=BAGS_FM, error="token not found")
        logger.debug(f"[BAGS] {mint[:12]}: creator={token.creator or '-'}")
        return CreatorInfo(
            platform=BAGS_FM,
            creator_address=token.creator or None,
            name=token.name or None,
            symbol=token.symbol or None,
            twitter=token.twitter,
            telegram=token.telegram,
            website=token.website,
        )
