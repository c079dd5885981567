"""Pool registry aggregation: liquidity pool addresses from every source.

The markets API (Solscan) and the pairs API (DexScreener) each contribute
pool / market / LP addresses; the known-address tables contribute known LP
wallets and burn addresses. Each address keeps the origin of the first
source that reported it.

When the markets API answers, its top-holders list is cross-checked against
the collected pools, the known pool programs and LP label vocabulary. The
first holder that matches becomes the verified primary LP account, which
outranks every other classification rule.

Every source degrades independently: a failure is recorded in ``errors``
and that source simply contributes nothing.
"""

import asyncio
from collections import Counter
from collections.abc import Awaitable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from holders_intel.parsers.dexscreener.client import DexScreenerClient
from holders_intel.parsers.dexscreener.models import DexScreenerPair
from holders_intel.parsers.known_addresses import DEFAULT_TABLES, KnownAddressTables
from holders_intel.parsers.solscan.client import SolscanClient
from holders_intel.parsers.solscan.models import SolscanHolder

LP_LABEL_PHRASES = ("liquidity pool", "amm pool", "pool (lp)")


class PoolOrigin(str, Enum):
    MARKETS_API = "markets-api"
    PAIRS_API = "pairs-api"
    PROGRAM_CONSTANT = "program-constant"
    BURN_CONSTANT = "burn-constant"


@dataclass(frozen=True)
class PoolRegistryEntry:
    address: str
    origin_source: PoolOrigin
    label: str | None = None  # DEX name when the source provides one


@dataclass(frozen=True)
class PairsSnapshot:
    """Pairs API result shared by the registry, price and DEX-status legs."""

    pairs: tuple[DexScreenerPair, ...] = ()
    error: str | None = None

    @property
    def best_pair(self) -> DexScreenerPair | None:
        """Deepest-liquidity pair with a quoted price."""
        priced = [p for p in self.pairs if p.price_usd > 0]
        if not priced:
            return None
        return max(priced, key=lambda p: p.liquidity_usd)


@dataclass
class PoolRegistry:
    """Deduplicated pool addresses with origin tags (first origin wins)."""

    entries: dict[str, PoolRegistryEntry] = field(default_factory=dict)
    verified_lp_account: str | None = None
    verified_lp_source: str | None = None
    errors: dict[str, str] = field(default_factory=dict)

    def add(self, address: str | None, origin: PoolOrigin, label: str | None = None) -> bool:
        if not address or address in self.entries:
            return False
        self.entries[address] = PoolRegistryEntry(address=address, origin_source=origin, label=label)
        return True

    def get(self, address: str | None) -> PoolRegistryEntry | None:
        if not address:
            return None
        return self.entries.get(address)

    def __contains__(self, address: object) -> bool:
        return address in self.entries

    def __iter__(self) -> Iterator[PoolRegistryEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def counts_by_origin(self) -> dict[str, int]:
        counts = Counter(e.origin_source.value for e in self.entries.values())
        return dict(counts)


async def fetch_pairs(client: DexScreenerClient, mint: str, timeout: float = 10.0) -> PairsSnapshot:
    """Fetch Solana pairs for ``mint``; never raises for upstream failures."""
    try:
        pairs = await asyncio.wait_for(client.get_token_pairs(mint), timeout=timeout)
    except Exception as e:
        reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        logger.warning(f"[DEXSCREENER] Pairs unavailable for {mint[:12]}: {reason}")
        return PairsSnapshot(error=reason)

    solana_pairs = tuple(p for p in pairs if not p.chainId or p.chainId == "solana")
    logger.debug(f"[DEXSCREENER] {mint[:12]}: {len(solana_pairs)} pairs")
    return PairsSnapshot(pairs=solana_pairs)


def holder_has_lp_label(holder: SolscanHolder) -> bool:
    text = " ".join(holder.label_texts())
    if any(phrase in text for phrase in LP_LABEL_PHRASES):
        return True
    return "pool" in text and "lp" in text


class PoolRegistryAggregator:
    def __init__(
        self,
        solscan: SolscanClient | None,
        *,
        tables: KnownAddressTables = DEFAULT_TABLES,
        timeout: float = 10.0,
    ) -> None:
        self._solscan = solscan
        self._tables = tables
        self._timeout = timeout

    async def build(self, mint: str, pairs: Awaitable[PairsSnapshot]) -> PoolRegistry:
        """Collect pools for ``mint``; ``pairs`` is the shared pairs-API leg."""
        registry = PoolRegistry()

        markets_result, snapshot = await asyncio.gather(self._fetch_markets(mint), pairs)
        market_addresses, markets_error = markets_result

        if markets_error:
            registry.errors["markets"] = markets_error
        for address, label in market_addresses:
            registry.add(address, PoolOrigin.MARKETS_API, label)

        if snapshot.error:
            registry.errors["pairs"] = snapshot.error
        for pair in snapshot.pairs:
            registry.add(pair.pairAddress, PoolOrigin.PAIRS_API, pair.dexId or None)

        if self._solscan is not None and markets_error is None:
            await self._verify_with_top_holders(mint, registry)

        for address in sorted(self._tables.known_lp_wallets):
            registry.add(address, PoolOrigin.PROGRAM_CONSTANT)
        for address in sorted(self._tables.burn_addresses):
            registry.add(address, PoolOrigin.BURN_CONSTANT)

        logger.info(
            f"[POOLS] {mint[:12]}: {len(registry)} addresses {registry.counts_by_origin()}"
            + (f", verified LP {registry.verified_lp_account[:12]}" if registry.verified_lp_account else "")
        )
        return registry

    async def _fetch_markets(self, mint: str) -> tuple[list[tuple[str, str | None]], str | None]:
        if self._solscan is None:
            logger.debug("[SOLSCAN] No API key, markets leg skipped")
            return [], None
        try:
            markets = await asyncio.wait_for(self._solscan.get_markets(mint), timeout=self._timeout)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"[SOLSCAN] Markets unavailable for {mint[:12]}: {reason}")
            return [], reason

        addresses: list[tuple[str, str | None]] = []
        for market in markets:
            for address in market.addresses:
                addresses.append((address, market.program_id))
        return addresses, None

    async def _verify_with_top_holders(self, mint: str, registry: PoolRegistry) -> None:
        try:
            holders = await asyncio.wait_for(self._solscan.get_top_holders(mint), timeout=self._timeout)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"[SOLSCAN] Holder verification unavailable for {mint[:12]}: {reason}")
            registry.errors["markets_holders"] = reason
            return

        pool_programs = self._tables.pool_program_ids
        for holder in holders:
            candidates = [a for a in (holder.owner, holder.address) if a]
            if not candidates:
                continue
            address_match = any(a in registry for a in candidates)
            program_match = bool(holder.owner_program) and holder.owner_program in pool_programs
            label_match = holder_has_lp_label(holder)
            if not (address_match or program_match or label_match):
                continue

            for address in candidates:
                registry.add(address, PoolOrigin.MARKETS_API)

            if registry.verified_lp_account is None:
                registry.verified_lp_account = candidates[0]
                registry.verified_lp_source = "markets-label" if label_match else "markets-holders"
                logger.debug(f"[SOLSCAN] Verified primary LP for {mint[:12]}: {candidates[0]}")
