"""DEX listing status (paid profile, CTO, ads, boosts) and merged socials."""

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass

from loguru import logger

from holders_intel.parsers.dexscreener.client import DexScreenerClient
from holders_intel.parsers.dexscreener.models import DexScreenerPair
from holders_intel.parsers.launchpad import CreatorInfo
from holders_intel.parsers.pool_registry import PairsSnapshot

AD_ORDER_TYPES = frozenset({"tokenAd", "trendingBarAd"})


@dataclass
class DexStatus:
    has_paid_profile: bool = False
    has_cto: bool = False
    has_active_ads: bool = False
    is_boosted: bool = False
    active_boosts: int = 0
    error: str | None = None


@dataclass
class Socials:
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None
    discord: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.twitter or self.telegram or self.website or self.discord)


async def fetch_dex_status(
    client: DexScreenerClient,
    mint: str,
    pairs: Awaitable[PairsSnapshot],
    *,
    timeout: float = 10.0,
) -> DexStatus:
    """Approved orders decide paid/CTO/ads; pair boosts decide boosting."""
    status = DexStatus()

    try:
        orders = await asyncio.wait_for(client.get_orders(mint), timeout=timeout)
    except Exception as e:
        status.error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        logger.debug(f"[DEXSCREENER] Orders unavailable for {mint[:12]}: {status.error}")
        orders = []

    approved = [o for o in orders if o.approved]
    status.has_paid_profile = any(o.type == "tokenProfile" for o in approved)
    status.has_cto = any(o.type == "communityTakeover" for o in approved)
    status.has_active_ads = any(o.type in AD_ORDER_TYPES for o in approved)

    snapshot = await pairs
    status.active_boosts = max((p.boosts.active for p in snapshot.pairs if p.boosts), default=0)
    status.is_boosted = status.active_boosts > 0
    return status


def merge_socials(pairs: Sequence[DexScreenerPair], creator: CreatorInfo | None) -> Socials:
    """Socials from pair info first, creator metadata fills the gaps."""
    socials = Socials()

    for pair in pairs:
        if pair.info is None:
            continue
        for social in pair.info.socials:
            kind = social.type.lower()
            if not social.url:
                continue
            if kind in ("twitter", "x") and not socials.twitter:
                socials.twitter = social.url
            elif kind == "telegram" and not socials.telegram:
                socials.telegram = social.url
            elif kind == "discord" and not socials.discord:
                socials.discord = social.url
        if not socials.website:
            socials.website = next((w.url for w in pair.info.websites if w.url), None)

    if creator is not None:
        socials.twitter = socials.twitter or creator.twitter
        socials.telegram = socials.telegram or creator.telegram
        socials.website = socials.website or creator.website

    return socials
