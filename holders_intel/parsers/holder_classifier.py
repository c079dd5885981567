"""Holder classification: LP membership with confidence, then USD tiers.

LP rules are evaluated in strict precedence, first match wins:

1. owner or token account is the verified primary LP account
2. owner or token account is in the pool registry
3. the owning program is a known DEX / bonding-curve program
4. the owner is a known burn address
5. heuristic: a large share of supply held by an address the insider
   source has never seen transacting

Rules 1-4 are ``verified``; rule 5 is ``heuristic``. Address-level
evidence always beats program or percentage evidence. LP accounts get no
USD tier.
"""

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from holders_intel.parsers.known_addresses import DEFAULT_TABLES, KnownAddressTables
from holders_intel.parsers.ledger_holders import LedgerHolderSet
from holders_intel.parsers.pool_registry import PoolOrigin, PoolRegistry
from holders_intel.parsers.rugcheck_insiders import ClusterGraph


class Confidence(str, Enum):
    VERIFIED = "verified"
    HEURISTIC = "heuristic"


class LPReason(str, Enum):
    VERIFIED_PRIMARY = "verified_primary_lp"
    MARKETS_POOL = "markets_pool"
    PAIRS_POOL = "pairs_pool"
    KNOWN_LP_WALLET = "known_lp_wallet"
    DEX_PROGRAM = "dex_program"
    BONDING_CURVE = "bonding_curve"
    BURNED = "burned"
    HIGH_CONCENTRATION = "high_concentration"


CONFIDENCE_SCORES: dict[LPReason, int] = {
    LPReason.VERIFIED_PRIMARY: 100,
    LPReason.MARKETS_POOL: 100,
    LPReason.PAIRS_POOL: 98,
    LPReason.KNOWN_LP_WALLET: 99,
    LPReason.DEX_PROGRAM: 95,
    LPReason.BONDING_CURVE: 95,
    LPReason.BURNED: 100,
    LPReason.HIGH_CONCENTRATION: 60,
}

_ORIGIN_REASONS: dict[PoolOrigin, LPReason] = {
    PoolOrigin.MARKETS_API: LPReason.MARKETS_POOL,
    PoolOrigin.PAIRS_API: LPReason.PAIRS_POOL,
    PoolOrigin.PROGRAM_CONSTANT: LPReason.KNOWN_LP_WALLET,
    PoolOrigin.BURN_CONSTANT: LPReason.BURNED,
}


class GranularTier(str, Enum):
    DUST = "dust"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    REAL = "real"
    BOSS = "boss"
    KINGPIN = "kingpin"
    SUPER_BOSS = "superBoss"
    BABY_WHALE = "babyWhale"
    TRUE_WHALE = "trueWhale"


class SimpleTier(str, Enum):
    DUST = "dust"
    RETAIL = "retail"
    SERIOUS = "serious"
    WHALES = "whales"


# Upper bounds (exclusive, USD) of every granular tier except the last
_GRANULAR_BOUNDS = (1, 12, 25, 50, 200, 500, 1000, 2000, 5000)
_GRANULAR_ORDER = tuple(GranularTier)
_SIMPLE_BOUNDS = (1, 200, 1000)
_SIMPLE_ORDER = tuple(SimpleTier)


def granular_tier(usd_value: float) -> GranularTier:
    """Half-open USD buckets: exactly one tier for any finite value."""
    return _GRANULAR_ORDER[bisect_right(_GRANULAR_BOUNDS, usd_value)]


def simple_tier(usd_value: float) -> SimpleTier:
    return _SIMPLE_ORDER[bisect_right(_SIMPLE_BOUNDS, usd_value)]


@dataclass(frozen=True)
class HolderAccount:
    owner_address: str
    token_account_address: str
    account_owner_program: str  # token program owning the token account
    balance_raw: int
    balance_ui: float
    usd_value: float
    percentage_of_supply: float
    owner_program: str | None = None  # program owning the owner account, when resolved


@dataclass(frozen=True)
class LPClassification:
    is_lp: bool
    confidence: Confidence | None = None
    reason_code: LPReason | None = None
    platform_label: str | None = None
    origin_source: str | None = None
    score: int = 0


NOT_LP = LPClassification(is_lp=False)


@dataclass(frozen=True)
class ClassifiedHolder:
    rank: int
    account: HolderAccount
    lp: LPClassification
    tier: GranularTier | None = None  # None for LP accounts
    simple_tier: SimpleTier | None = None


def _safe_pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def build_holder_accounts(ledger: LedgerHolderSet, price_usd: float) -> list[HolderAccount]:
    """One HolderAccount per ledger account, largest balance first.

    Percentages are relative to the summed balance of every account,
    pools included. Ties are broken by token account for stable ranks.
    """
    price = price_usd if price_usd > 0 else 0.0
    total = sum(r.ui_amount for r in ledger.accounts)

    accounts = [
        HolderAccount(
            owner_address=r.owner,
            token_account_address=r.token_account,
            account_owner_program=r.program_id,
            balance_raw=r.amount_raw,
            balance_ui=r.ui_amount,
            usd_value=r.ui_amount * price,
            percentage_of_supply=_safe_pct(r.ui_amount, total),
            owner_program=ledger.owner_programs.get(r.owner),
        )
        for r in ledger.accounts
    ]
    accounts.sort(key=lambda a: (-a.balance_ui, a.token_account_address))
    return accounts


class HolderClassifier:
    def __init__(
        self,
        tables: KnownAddressTables = DEFAULT_TABLES,
        *,
        heuristic_min_pct: float = 20.0,
    ) -> None:
        self._tables = tables
        self._heuristic_min_pct = heuristic_min_pct

    def classify(
        self,
        holder: HolderAccount,
        registry: PoolRegistry,
        active_addresses: frozenset[str] | set[str] = frozenset(),
    ) -> LPClassification:
        addresses = (holder.owner_address, holder.token_account_address)

        # 1. verified primary LP account
        if registry.verified_lp_account and registry.verified_lp_account in addresses:
            entry = registry.get(registry.verified_lp_account)
            return LPClassification(
                is_lp=True,
                confidence=Confidence.VERIFIED,
                reason_code=LPReason.VERIFIED_PRIMARY,
                platform_label=(self._tables.program_label(entry.label) or entry.label) if entry else None,
                origin_source=registry.verified_lp_source,
                score=CONFIDENCE_SCORES[LPReason.VERIFIED_PRIMARY],
            )

        # 2. pool registry membership
        entry = registry.get(holder.owner_address) or registry.get(holder.token_account_address)
        if entry is not None:
            reason = _ORIGIN_REASONS[entry.origin_source]
            return LPClassification(
                is_lp=True,
                confidence=Confidence.VERIFIED,
                reason_code=reason,
                platform_label=self._tables.program_label(entry.label) or entry.label,
                origin_source=entry.origin_source.value,
                score=CONFIDENCE_SCORES[reason],
            )

        # 3. owning program is a pool program
        for program_id in (holder.account_owner_program, holder.owner_program):
            label = self._tables.program_label(program_id)
            if label is None:
                continue
            reason = LPReason.BONDING_CURVE if self._tables.is_bonding_curve(program_id) else LPReason.DEX_PROGRAM
            return LPClassification(
                is_lp=True,
                confidence=Confidence.VERIFIED,
                reason_code=reason,
                platform_label=label,
                origin_source=PoolOrigin.PROGRAM_CONSTANT.value,
                score=CONFIDENCE_SCORES[reason],
            )

        # 4. burn address
        if holder.owner_address in self._tables.burn_addresses:
            return LPClassification(
                is_lp=True,
                confidence=Confidence.VERIFIED,
                reason_code=LPReason.BURNED,
                platform_label="Burn",
                origin_source=PoolOrigin.BURN_CONSTANT.value,
                score=CONFIDENCE_SCORES[LPReason.BURNED],
            )

        # 5. heuristic
        if (
            holder.percentage_of_supply > self._heuristic_min_pct
            and holder.owner_address not in active_addresses
            and holder.token_account_address not in active_addresses
        ):
            return LPClassification(
                is_lp=True,
                confidence=Confidence.HEURISTIC,
                reason_code=LPReason.HIGH_CONCENTRATION,
                score=CONFIDENCE_SCORES[LPReason.HIGH_CONCENTRATION],
            )

        return NOT_LP

    def classify_all(
        self,
        holders: Sequence[HolderAccount],
        registry: PoolRegistry,
        cluster_graph: ClusterGraph | None = None,
    ) -> list[ClassifiedHolder]:
        """Classify and tier every holder, keeping the input order as rank."""
        active = frozenset(cluster_graph.observed_addresses) if cluster_graph else frozenset()
        classified: list[ClassifiedHolder] = []
        for rank, holder in enumerate(holders, start=1):
            lp = self.classify(holder, registry, active)
            if lp.is_lp:
                classified.append(ClassifiedHolder(rank=rank, account=holder, lp=lp))
            else:
                classified.append(ClassifiedHolder(
                    rank=rank,
                    account=holder,
                    lp=lp,
                    tier=granular_tier(holder.usd_value),
                    simple_tier=simple_tier(holder.usd_value),
                ))

        lp_count = sum(1 for c in classified if c.lp.is_lp)
        logger.debug(f"[CLASSIFIER] {len(classified)} holders, {lp_count} LP")
        return classified


def lp_holders(classified: Iterable[ClassifiedHolder]) -> list[ClassifiedHolder]:
    return [c for c in classified if c.lp.is_lp]


def non_lp_holders(classified: Iterable[ClassifiedHolder]) -> list[ClassifiedHolder]:
    return [c for c in classified if not c.lp.is_lp]
