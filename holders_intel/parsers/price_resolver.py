"""USD price resolution: manual override > pairs API > Jupiter > CoinGecko.

Sources are tried strictly in order and the first positive price wins.
When nothing produces a price the quote is 0.0 with ``discovery_failed``
set; USD-derived metrics then degrade to zero instead of blocking the report.
"""

import asyncio
import math
from collections.abc import Awaitable
from dataclasses import dataclass
from functools import partial

from loguru import logger

from holders_intel.errors import FallbackExhausted
from holders_intel.parsers.coingecko.client import CoinGeckoClient
from holders_intel.parsers.fallback import Candidate, first_success
from holders_intel.parsers.jupiter.client import JupiterClient
from holders_intel.parsers.pool_registry import PairsSnapshot

SOURCE_MANUAL = "manual"
SOURCE_PAIRS = "dexscreener"
SOURCE_JUPITER = "jupiter"
SOURCE_COINGECKO = "coingecko"
SOURCE_NONE = "none"


@dataclass(frozen=True)
class PriceQuote:
    price_usd: float
    source: str
    discovery_failed: bool = False
    attempts: tuple[tuple[str, str], ...] = ()


def _is_valid_price(value: float) -> bool:
    return math.isfinite(value) and value > 0


async def _fixed(value: float) -> float:
    return value


class PriceResolver:
    def __init__(
        self,
        jupiter: JupiterClient | None,
        coingecko: CoinGeckoClient | None,
        *,
        timeout: float = 5.0,
    ) -> None:
        self._jupiter = jupiter
        self._coingecko = coingecko
        self._timeout = timeout

    async def resolve(
        self,
        mint: str,
        *,
        manual_price: float | None = None,
        pairs: Awaitable[PairsSnapshot] | None = None,
    ) -> PriceQuote:
        candidates: list[Candidate[float]] = []
        if manual_price is not None and manual_price > 0:
            candidates.append(Candidate(SOURCE_MANUAL, partial(_fixed, float(manual_price))))
        if pairs is not None:
            candidates.append(Candidate(SOURCE_PAIRS, partial(self._from_pairs, pairs)))
        if self._jupiter is not None:
            candidates.append(Candidate(SOURCE_JUPITER, partial(self._from_jupiter, mint)))
        if self._coingecko is not None:
            candidates.append(Candidate(SOURCE_COINGECKO, partial(self._from_coingecko, mint)))

        try:
            winner = await first_success(
                candidates,
                accept=_is_valid_price,
                describe_reject=lambda p: f"unusable price {p}",
                tag="PRICE",
            )
        except FallbackExhausted as e:
            logger.warning(f"[PRICE] No price for {mint[:12]} ({len(e.attempts)} sources failed)")
            return PriceQuote(
                price_usd=0.0,
                source=SOURCE_NONE,
                discovery_failed=True,
                attempts=tuple(e.attempts),
            )

        logger.debug(f"[PRICE] {mint[:12]}: ${winner.value:.10g} from {winner.label}")
        return PriceQuote(price_usd=winner.value, source=winner.label, attempts=winner.attempts)

    async def _from_pairs(self, pairs: Awaitable[PairsSnapshot]) -> float | None:
        snapshot = await pairs
        best = snapshot.best_pair
        return best.price_usd if best is not None else None

    async def _from_jupiter(self, mint: str) -> float | None:
        quote = await asyncio.wait_for(self._jupiter.get_price(mint), timeout=self._timeout)
        if quote is None or quote.price is None:
            return None
        return float(quote.price)

    async def _from_coingecko(self, mint: str) -> float | None:
        price = await asyncio.wait_for(self._coingecko.get_token_price(mint), timeout=self._timeout)
        return float(price) if price is not None else None
