"""Holders report assembly: runs every leg and builds one HoldersReport.

The ledger fetch runs alongside the optional legs (pairs, pool registry,
price, insiders, DEX status). The creator lookup waits for the pairs leg
because the launchpad is detected from pair metadata. Classification and
scoring start once both the holder list and the optional legs are done.

Only ``LedgerFetchError`` aborts a report; when it fires the optional legs
are cancelled so no further upstream calls are spent. Every optional leg
degrades to an empty value and records its failure in ``softErrors``.
"""

import asyncio
import time
from collections.abc import Callable, Coroutine, Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from holders_intel.models.report import (
    CirculatingSupplyOut,
    ClusterOut,
    CreatorInfoOut,
    DataSourcesOut,
    DexStatusOut,
    DistributionStatsOut,
    HealthScoreOut,
    HolderOut,
    HoldersReport,
    InsiderOut,
    InsidersGraphOut,
    LaunchpadInfoOut,
    PotentialDevWalletOut,
    SimpleTiersOut,
    SocialsOut,
    TierStatOut,
)
from holders_intel.parsers.api_usage import UsageRecorder
from holders_intel.parsers.bagsfm.client import BagsClient
from holders_intel.parsers.coingecko.client import CoinGeckoClient
from holders_intel.parsers.dex_status import DexStatus, Socials, fetch_dex_status, merge_socials
from holders_intel.parsers.dexscreener.client import DexScreenerClient
from holders_intel.parsers.distribution import DistributionSummary, TierStat, summarize_distribution
from holders_intel.parsers.holder_classifier import (
    ClassifiedHolder,
    GranularTier,
    HolderClassifier,
    SimpleTier,
    build_holder_accounts,
)
from holders_intel.parsers.jupiter.client import JupiterClient
from holders_intel.parsers.known_addresses import DEFAULT_TABLES, KnownAddressTables
from holders_intel.parsers.launchpad import CreatorInfo, CreatorResolver, LaunchpadInfo, detect_launchpad
from holders_intel.parsers.ledger_holders import LedgerHolderFetcher, LedgerHolderSet
from holders_intel.parsers.pool_registry import PairsSnapshot, PoolRegistry, PoolRegistryAggregator, fetch_pairs
from holders_intel.parsers.price_resolver import PriceQuote, PriceResolver
from holders_intel.parsers.pumpfun.client import PumpfunClient
from holders_intel.parsers.rugcheck_insiders import ClusterGraph, get_insider_network
from holders_intel.parsers.solscan.client import SolscanClient

DEV_WALLET_CREATOR_CONFIDENCE = 95
DEV_WALLET_BUNDLED_BONUS = 10
DEV_WALLET_MAX_CONFIDENCE = 95

InsidersFetch = Callable[..., Coroutine[Any, Any, ClusterGraph]]


@dataclass
class OptionalLegs:
    pairs: PairsSnapshot
    registry: PoolRegistry
    price: PriceQuote
    insiders: ClusterGraph
    dex_status: DexStatus
    launchpad: LaunchpadInfo
    creator: CreatorInfo


async def _cancel_pending(tasks: Iterable[asyncio.Task]) -> None:
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


def find_potential_dev_wallet(
    classified: list[ClassifiedHolder],
    creator: CreatorInfo | None,
    insiders: ClusterGraph,
) -> PotentialDevWalletOut | None:
    """Best guess at the developer wallet among non-LP holders.

    The launchpad creator wins when it still holds the token; otherwise the
    largest non-LP holder, with confidence scaled by its share of supply.
    """
    wallets = [c for c in classified if not c.lp.is_lp]
    if not wallets:
        return None

    if creator is not None and creator.creator_address:
        for holder in wallets:
            if holder.account.owner_address == creator.creator_address:
                return _dev_wallet_out(
                    holder,
                    DEV_WALLET_CREATOR_CONFIDENCE,
                    f"Creator wallet from {creator.platform} still holds "
                    f"{holder.account.percentage_of_supply:.1f}% of supply",
                )

    top = wallets[0]
    pct = top.account.percentage_of_supply
    if pct > 10:
        confidence = 70
        reason = f"Largest non-LP holder with {pct:.1f}% of supply"
    elif pct > 5:
        confidence = 50
        reason = f"Largest non-LP holder with a notable {pct:.1f}% of supply"
    else:
        confidence = 30
        reason = f"Largest non-LP holder, but only {pct:.1f}% of supply"

    if top.account.owner_address in insiders.bundled_addresses:
        confidence = min(confidence + DEV_WALLET_BUNDLED_BONUS, DEV_WALLET_MAX_CONFIDENCE)
        reason += " and part of a bundled wallet cluster"

    return _dev_wallet_out(top, confidence, reason)


def _dev_wallet_out(holder: ClassifiedHolder, confidence: int, reason: str) -> PotentialDevWalletOut:
    return PotentialDevWalletOut(
        address=holder.account.owner_address,
        balance=holder.account.balance_ui,
        usd_value=holder.account.usd_value,
        percentage_of_supply=holder.account.percentage_of_supply,
        confidence=confidence,
        reason=reason,
    )


def _holder_out(holder: ClassifiedHolder) -> HolderOut:
    account, lp, tier = holder.account, holder.lp, holder.tier
    return HolderOut(
        rank=holder.rank,
        owner_address=account.owner_address,
        token_account_address=account.token_account_address,
        account_owner_program=account.account_owner_program,
        owner_program=account.owner_program,
        balance_raw=str(account.balance_raw),
        balance=account.balance_ui,
        usd_value=account.usd_value,
        percentage_of_supply=account.percentage_of_supply,
        is_liquidity_pool=lp.is_lp,
        lp_confidence=lp.confidence.value if lp.confidence else None,
        lp_confidence_score=lp.score,
        lp_detection_reason=lp.reason_code.value if lp.reason_code else None,
        lp_origin_source=lp.origin_source,
        detected_platform=lp.platform_label,
        tier=tier.value if tier else None,
        simple_tier=holder.simple_tier.value if holder.simple_tier else None,
        is_dust_wallet=tier is GranularTier.DUST,
        is_small_wallet=tier is GranularTier.SMALL,
        is_medium_wallet=tier is GranularTier.MEDIUM,
        is_large_wallet=tier is GranularTier.LARGE,
        is_real_wallet=tier is GranularTier.REAL,
        is_boss_wallet=tier is GranularTier.BOSS,
        is_kingpin_wallet=tier is GranularTier.KINGPIN,
        is_super_boss_wallet=tier is GranularTier.SUPER_BOSS,
        is_baby_whale_wallet=tier is GranularTier.BABY_WHALE,
        is_true_whale_wallet=tier is GranularTier.TRUE_WHALE,
    )


def _tier_out(stat: TierStat) -> TierStatOut:
    return TierStatOut(
        count=stat.count,
        balance=stat.balance,
        usd_value=stat.usd_value,
        percentage_of_supply=stat.percentage_of_supply,
    )


def _insiders_out(graph: ClusterGraph) -> InsidersGraphOut | None:
    if graph.is_empty:
        return None
    return InsidersGraphOut(
        shape=graph.shape.value,
        has_insiders=graph.has_insiders,
        insider_count=graph.insider_count,
        total_insider_percentage=graph.total_insider_percentage,
        bundled_percentage=graph.bundled_percentage,
        bundled_wallets=sorted(graph.bundled_addresses),
        clusters=[
            ClusterOut(
                id=c.id,
                member_addresses=c.member_addresses,
                total_percentage=c.total_percentage,
                cluster_type=c.cluster_type,
            )
            for c in graph.clusters
        ],
        top_insiders=[
            InsiderOut(wallet=i.wallet, percentage=i.percentage, insider_type=i.insider_type)
            for i in graph.top_insiders
        ],
        warnings=graph.warnings,
    )


def _socials_out(socials: Socials) -> SocialsOut | None:
    if socials.is_empty:
        return None
    return SocialsOut(
        twitter=socials.twitter,
        telegram=socials.telegram,
        website=socials.website,
        discord=socials.discord,
    )


def _creator_out(creator: CreatorInfo, owners: set[str]) -> CreatorInfoOut:
    return CreatorInfoOut(
        platform=creator.platform,
        creator_address=creator.creator_address,
        name=creator.name,
        symbol=creator.symbol,
        twitter=creator.twitter,
        telegram=creator.telegram,
        website=creator.website,
        total_launches=creator.total_launches,
        dead_launches=creator.dead_launches,
        holds_token=bool(creator.creator_address) and creator.creator_address in owners,
    )


def _summary(mint: str, symbol: str | None, dist: DistributionSummary) -> str:
    simple = dist.simple
    return (
        f"{symbol or mint[:8]}: {dist.non_lp_count} holders "
        f"({simple[SimpleTier.WHALES].count} whales, {simple[SimpleTier.SERIOUS].count} serious, "
        f"{simple[SimpleTier.RETAIL].count} retail, {simple[SimpleTier.DUST].count} dust), "
        f"{dist.lp_count} LP accounts holding {dist.lp_percentage:.1f}% of supply, "
        f"health {dist.health.score}/100 ({dist.health.grade})"
    )


class HoldersReportBuilder:
    def __init__(
        self,
        *,
        ledger: LedgerHolderFetcher,
        pools: PoolRegistryAggregator,
        prices: PriceResolver,
        creators: CreatorResolver,
        dexscreener: DexScreenerClient,
        classifier: HolderClassifier,
        tables: KnownAddressTables = DEFAULT_TABLES,
        recorder: UsageRecorder | None = None,
        pairs_timeout: float = 10.0,
        insiders_timeout: float = 10.0,
        insiders_fetch: InsidersFetch = get_insider_network,
        closeables: Iterable[Any] = (),
    ) -> None:
        self._ledger = ledger
        self._pools = pools
        self._prices = prices
        self._creators = creators
        self._dexscreener = dexscreener
        self._classifier = classifier
        self._tables = tables
        self._recorder = recorder
        self._pairs_timeout = pairs_timeout
        self._insiders_timeout = insiders_timeout
        self._insiders_fetch = insiders_fetch
        self._closeables = list(closeables)

    async def aclose(self) -> None:
        for client in self._closeables:
            await client.close()

    async def build(self, mint: str, manual_price: float | None = None) -> HoldersReport:
        """Produce the full report for ``mint``.

        Raises:
            LedgerFetchError: no RPC endpoint returned holder accounts.
        """
        with logger.contextualize(mint=mint[:12]):
            return await self._build(mint, manual_price)

    async def _build(self, mint: str, manual_price: float | None) -> HoldersReport:
        start = time.monotonic()
        logger.info(f"[REPORT] Building holders report for {mint[:12]}")

        # legs created here inherit the contextualized mint
        ledger_task = asyncio.create_task(self._ledger.fetch(mint))
        legs_task = asyncio.create_task(self._optional_legs(mint, manual_price))
        try:
            ledger, legs = await asyncio.gather(ledger_task, legs_task)
        except BaseException:
            await _cancel_pending((ledger_task, legs_task))
            raise

        report = self._assemble(mint, ledger, legs, start)
        logger.info(
            f"[REPORT] {mint[:12]}: {report.total_holders} holders, "
            f"{report.liquidity_pools_detected} LP, health {report.health_score.score} "
            f"({report.health_score.grade}) in {report.execution_time_ms}ms"
            + (f", degraded: {sorted(report.soft_errors)}" if report.soft_errors else "")
        )
        return report

    async def _optional_legs(self, mint: str, manual_price: float | None) -> OptionalLegs:
        pairs_task = asyncio.create_task(fetch_pairs(self._dexscreener, mint, self._pairs_timeout))
        registry_task = asyncio.create_task(self._pools.build(mint, pairs_task))
        price_task = asyncio.create_task(
            self._prices.resolve(mint, manual_price=manual_price, pairs=pairs_task)
        )
        insiders_task = asyncio.create_task(self._fetch_insiders(mint))
        dex_task = asyncio.create_task(
            fetch_dex_status(self._dexscreener, mint, pairs_task, timeout=self._pairs_timeout)
        )
        tasks = (pairs_task, registry_task, price_task, insiders_task, dex_task)

        try:
            registry = await registry_task
            pairs = await pairs_task
            launchpad = detect_launchpad(mint, pairs.pairs)
            creator = await self._creators.resolve(mint, launchpad)
            price, insiders, dex_status = await asyncio.gather(price_task, insiders_task, dex_task)
        except BaseException:
            await _cancel_pending(tasks)
            raise

        return OptionalLegs(
            pairs=pairs,
            registry=registry,
            price=price,
            insiders=insiders,
            dex_status=dex_status,
            launchpad=launchpad,
            creator=creator,
        )

    async def _fetch_insiders(self, mint: str) -> ClusterGraph:
        try:
            return await asyncio.wait_for(
                self._insiders_fetch(mint, timeout=self._insiders_timeout, recorder=self._recorder),
                timeout=self._insiders_timeout,
            )
        except Exception as e:
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"[INSIDERS] Unavailable for {mint[:12]}: {reason}")
            return ClusterGraph(error=reason)

    def _assemble(
        self, mint: str, ledger: LedgerHolderSet, legs: OptionalLegs, start: float,
    ) -> HoldersReport:
        price = legs.price
        holders = build_holder_accounts(ledger, price.price_usd)
        classified = self._classifier.classify_all(holders, legs.registry, legs.insiders)
        dist = summarize_distribution(
            classified,
            price_usd=price.price_usd,
            bundled_percentage=legs.insiders.bundled_percentage,
        )

        soft_errors: dict[str, str] = dict(legs.registry.errors)
        if price.discovery_failed:
            tried = "; ".join(f"{label}: {reason}" for label, reason in price.attempts)
            soft_errors["price"] = f"all price sources failed ({tried or 'none configured'})"
        if legs.insiders.error:
            soft_errors["insiders"] = legs.insiders.error
        if legs.dex_status.error:
            soft_errors["dex_status"] = legs.dex_status.error
        if legs.creator.error:
            soft_errors["creator"] = legs.creator.error

        owners = {c.account.owner_address for c in classified}
        creator_out = (
            _creator_out(legs.creator, owners)
            if legs.launchpad.detected or legs.creator.creator_address
            else None
        )
        g = dist.granular
        holders_out = [_holder_out(c) for c in classified]
        best_pair = legs.pairs.best_pair
        symbol = legs.creator.symbol or (
            best_pair.baseToken.symbol if best_pair and best_pair.baseToken else None
        )

        return HoldersReport(
            token_mint=mint,
            total_holders=dist.total_holders,
            liquidity_pools_detected=dist.lp_count,
            lp_balance=dist.lp_balance,
            lp_percentage_of_supply=dist.lp_percentage,
            non_lp_holders=dist.non_lp_count,
            non_lp_balance=dist.non_lp_balance,
            dust_wallets=g[GranularTier.DUST].count,
            small_wallets=g[GranularTier.SMALL].count,
            medium_wallets=g[GranularTier.MEDIUM].count,
            large_wallets=g[GranularTier.LARGE].count,
            real_wallets=g[GranularTier.REAL].count,
            boss_wallets=g[GranularTier.BOSS].count,
            kingpin_wallets=g[GranularTier.KINGPIN].count,
            super_boss_wallets=g[GranularTier.SUPER_BOSS].count,
            baby_whale_wallets=g[GranularTier.BABY_WHALE].count,
            true_whale_wallets=g[GranularTier.TRUE_WHALE].count,
            total_balance=dist.total_balance,
            token_price_usd=price.price_usd,
            price_source=price.source,
            price_discovery_failed=price.discovery_failed,
            holders=holders_out,
            liquidity_pools=[h for h in holders_out if h.is_liquidity_pool],
            potential_dev_wallet=find_potential_dev_wallet(classified, legs.creator, legs.insiders),
            socials=_socials_out(merge_socials(legs.pairs.pairs, legs.creator)),
            dex_status=DexStatusOut(
                has_paid_profile=legs.dex_status.has_paid_profile,
                has_cto=legs.dex_status.has_cto,
                has_active_ads=legs.dex_status.has_active_ads,
                is_boosted=legs.dex_status.is_boosted,
                active_boosts=legs.dex_status.active_boosts,
            ),
            launchpad_info=LaunchpadInfoOut(
                name=legs.launchpad.name,
                detected=legs.launchpad.detected,
                confidence=legs.launchpad.confidence,
            ),
            creator_info=creator_out,
            insiders_graph=_insiders_out(legs.insiders),
            simple_tiers=SimpleTiersOut(
                dust=_tier_out(dist.simple[SimpleTier.DUST]),
                retail=_tier_out(dist.simple[SimpleTier.RETAIL]),
                serious=_tier_out(dist.simple[SimpleTier.SERIOUS]),
                whales=_tier_out(dist.simple[SimpleTier.WHALES]),
            ),
            distribution_stats=DistributionStatsOut(
                top5_percentage=dist.concentration.top5_percentage,
                top10_percentage=dist.concentration.top10_percentage,
                top20_percentage=dist.concentration.top20_percentage,
                top5_percentage_of_total=dist.concentration.top5_percentage_of_total,
                top10_percentage_of_total=dist.concentration.top10_percentage_of_total,
                top20_percentage_of_total=dist.concentration.top20_percentage_of_total,
            ),
            circulating_supply=CirculatingSupplyOut(
                tokens=dist.circulating.tokens,
                percentage=dist.circulating.percentage,
                usd_value=dist.circulating.usd_value,
            ),
            risk_flags=dist.risk_flags,
            health_score=HealthScoreOut(
                score=dist.health.score,
                grade=dist.health.grade,
                deductions=dict(dist.health.deductions),
            ),
            summary=_summary(mint, symbol, dist),
            data_sources=DataSourcesOut(
                rpc_endpoint=ledger.endpoint,
                token_program=ledger.program_id,
                token_program_variant=ledger.program_variant,
                rpc_failed_attempts=len(ledger.attempts),
                pool_registry=legs.registry.counts_by_origin(),
                verified_lp_account=legs.registry.verified_lp_account,
                verified_lp_source=legs.registry.verified_lp_source,
                price_attempts=[f"{label}: {reason}" for label, reason in price.attempts],
                known_address_tables_version=self._tables.version,
            ),
            soft_errors=soft_errors,
            execution_time_ms=int((time.monotonic() - start) * 1000),
        )


def create_report_builder(settings, recorder: UsageRecorder | None = None) -> HoldersReportBuilder:
    """Wire clients and engine parts from settings."""
    tables = DEFAULT_TABLES

    ledger = LedgerHolderFetcher(
        settings.rpc_endpoints,
        timeout=settings.rpc_timeout_sec,
        recorder=recorder,
        owner_program_lookup_limit=settings.owner_program_lookup_limit,
    )
    solscan = (
        SolscanClient(settings.solscan_api_key, timeout=settings.markets_timeout_sec, recorder=recorder)
        if settings.solscan_api_key
        else None
    )
    dexscreener = DexScreenerClient(timeout=settings.pairs_timeout_sec, recorder=recorder)
    jupiter = JupiterClient(settings.jupiter_api_key, timeout=settings.price_timeout_sec, recorder=recorder)
    coingecko = CoinGeckoClient(settings.coingecko_api_key, timeout=settings.price_timeout_sec, recorder=recorder)
    pumpfun = PumpfunClient(timeout=settings.creator_timeout_sec, recorder=recorder)
    bags = BagsClient(timeout=settings.creator_timeout_sec, recorder=recorder)

    return HoldersReportBuilder(
        ledger=ledger,
        pools=PoolRegistryAggregator(solscan, tables=tables, timeout=settings.markets_timeout_sec),
        prices=PriceResolver(jupiter, coingecko, timeout=settings.price_timeout_sec),
        creators=CreatorResolver(pumpfun, bags, timeout=settings.creator_timeout_sec),
        dexscreener=dexscreener,
        classifier=HolderClassifier(tables, heuristic_min_pct=settings.lp_heuristic_min_pct),
        tables=tables,
        recorder=recorder,
        pairs_timeout=settings.pairs_timeout_sec,
        insiders_timeout=settings.insiders_timeout_sec,
        closeables=[c for c in (ledger, solscan, dexscreener, jupiter, coingecko, pumpfun, bags) if c],
    )
