"""Distribution statistics, risk flags and the 0-100 health score.

Works on classified holders only; LP accounts are excluded from tiers and
concentration, and make up the difference between total and circulating
supply. All ratios resolve to 0.0 on an empty denominator.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from holders_intel.parsers.holder_classifier import (
    ClassifiedHolder,
    GranularTier,
    SimpleTier,
    lp_holders,
    non_lp_holders,
)

TOP_N = (5, 10, 20)

# Risk flag thresholds
FLAG_TOP5_PCT = 25.0
FLAG_LP_PCT = 15.0
FLAG_MIN_HOLDERS_FOR_WHALES = 50
FLAG_DUST_PCT = 30.0
FLAG_BUNDLED_PCT = 10.0

# Health deductions: (threshold, points), first matching step applies
TOP5_STEPS = ((40.0, 30), (30.0, 20), (20.0, 10))
LP_STEPS = ((10.0, 20), (20.0, 10))  # below threshold
BUNDLED_STEPS = ((20.0, 25), (10.0, 15), (5.0, 5))
HOLDER_COUNT_STEPS = ((50, 15), (100, 10))  # below threshold
DUST_THRESHOLD_PCT = 40.0
DUST_POINTS = 10

GRADE_BANDS = ((90, "A"), (80, "B"), (65, "C"), (50, "D"))


@dataclass
class TierStat:
    count: int = 0
    balance: float = 0.0
    usd_value: float = 0.0
    percentage_of_supply: float = 0.0


@dataclass(frozen=True)
class Concentration:
    top5_percentage: float = 0.0  # of circulating supply
    top10_percentage: float = 0.0
    top20_percentage: float = 0.0
    top5_percentage_of_total: float = 0.0
    top10_percentage_of_total: float = 0.0
    top20_percentage_of_total: float = 0.0


@dataclass(frozen=True)
class CirculatingSupply:
    tokens: float = 0.0
    percentage: float = 0.0
    usd_value: float = 0.0


@dataclass(frozen=True)
class HealthScore:
    score: int
    grade: str
    deductions: tuple[tuple[str, int], ...] = ()


@dataclass
class DistributionSummary:
    total_holders: int
    total_balance: float
    lp_count: int
    lp_balance: float
    lp_percentage: float
    non_lp_count: int
    non_lp_balance: float
    granular: dict[GranularTier, TierStat]
    simple: dict[SimpleTier, TierStat]
    concentration: Concentration
    circulating: CirculatingSupply
    health: HealthScore
    risk_flags: list[str] = field(default_factory=list)


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _step_deduction(value: float, steps: tuple[tuple[float, int], ...], *, below: bool = False) -> int:
    for threshold, points in steps:
        if (value < threshold) if below else (value > threshold):
            return points
    return 0


def grade_for(score: int) -> str:
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return "F"


def compute_health(
    *,
    top5_pct: float,
    lp_pct: float,
    bundled_pct: float,
    holder_count: int,
    dust_pct: float,
) -> HealthScore:
    """Start at 100 and subtract independent deductions, clamped to [0, 100]."""
    deductions: list[tuple[str, int]] = []

    for name, points in (
        ("concentration", _step_deduction(top5_pct, TOP5_STEPS)),
        ("low_liquidity", _step_deduction(lp_pct, LP_STEPS, below=True)),
        ("bundling", _step_deduction(bundled_pct, BUNDLED_STEPS)),
        ("low_holder_count", _step_deduction(holder_count, HOLDER_COUNT_STEPS, below=True)),
        ("dust", DUST_POINTS if dust_pct > DUST_THRESHOLD_PCT else 0),
    ):
        if points:
            deductions.append((name, points))

    score = max(0, min(100, 100 - sum(p for _, p in deductions)))
    return HealthScore(score=score, grade=grade_for(score), deductions=tuple(deductions))


def compute_risk_flags(
    *,
    top5_pct: float,
    lp_count: int,
    lp_pct: float,
    whale_count: int,
    total_holders: int,
    dust_pct: float,
    bundled_pct: float,
) -> list[str]:
    flags: list[str] = []
    if top5_pct > FLAG_TOP5_PCT:
        flags.append(f"High concentration: top 5 holders own {top5_pct:.1f}% of circulating supply")
    if lp_count > 0 and lp_pct < FLAG_LP_PCT:
        flags.append(f"Thin liquidity: pools hold only {lp_pct:.1f}% of supply")
    if whale_count == 0 and total_holders > FLAG_MIN_HOLDERS_FOR_WHALES:
        flags.append(f"No whale wallets among {total_holders} holders")
    if dust_pct > FLAG_DUST_PCT:
        flags.append(f"Dust heavy: {dust_pct:.1f}% of supply sits in wallets under $1")
    if bundled_pct > FLAG_BUNDLED_PCT:
        flags.append(f"Bundled wallets hold {bundled_pct:.1f}% of supply")
    return flags


def summarize_distribution(
    classified: Sequence[ClassifiedHolder],
    *,
    price_usd: float,
    bundled_percentage: float = 0.0,
) -> DistributionSummary:
    """Aggregate classified holders into tiers, concentration, flags and health."""
    price = price_usd if price_usd > 0 else 0.0
    pools = lp_holders(classified)
    wallets = non_lp_holders(classified)

    total_balance = sum(c.account.balance_ui for c in classified)
    lp_balance = sum(c.account.balance_ui for c in pools)
    circulating_tokens = total_balance - lp_balance
    lp_pct = _pct(lp_balance, total_balance)

    granular = {tier: TierStat() for tier in GranularTier}
    simple = {tier: TierStat() for tier in SimpleTier}
    for holder in wallets:
        for stat in (granular[holder.tier], simple[holder.simple_tier]):
            stat.count += 1
            stat.balance += holder.account.balance_ui
            stat.usd_value += holder.account.usd_value
    for stat in (*granular.values(), *simple.values()):
        stat.percentage_of_supply = _pct(stat.balance, total_balance)

    ranked = sorted(wallets, key=lambda c: c.account.balance_ui, reverse=True)
    top_sums = {n: sum(c.account.balance_ui for c in ranked[:n]) for n in TOP_N}
    concentration = Concentration(
        top5_percentage=_pct(top_sums[5], circulating_tokens),
        top10_percentage=_pct(top_sums[10], circulating_tokens),
        top20_percentage=_pct(top_sums[20], circulating_tokens),
        top5_percentage_of_total=_pct(top_sums[5], total_balance),
        top10_percentage_of_total=_pct(top_sums[10], total_balance),
        top20_percentage_of_total=_pct(top_sums[20], total_balance),
    )

    circulating = CirculatingSupply(
        tokens=circulating_tokens,
        percentage=_pct(circulating_tokens, total_balance),
        usd_value=circulating_tokens * price,
    )

    dust_pct = simple[SimpleTier.DUST].percentage_of_supply
    health = compute_health(
        top5_pct=concentration.top5_percentage,
        lp_pct=lp_pct,
        bundled_pct=bundled_percentage,
        holder_count=len(wallets),
        dust_pct=dust_pct,
    )
    flags = compute_risk_flags(
        top5_pct=concentration.top5_percentage,
        lp_count=len(pools),
        lp_pct=lp_pct,
        whale_count=simple[SimpleTier.WHALES].count,
        total_holders=len(classified),
        dust_pct=dust_pct,
        bundled_pct=bundled_percentage,
    )

    return DistributionSummary(
        total_holders=len(classified),
        total_balance=total_balance,
        lp_count=len(pools),
        lp_balance=lp_balance,
        lp_percentage=lp_pct,
        non_lp_count=len(wallets),
        non_lp_balance=circulating_tokens,
        granular=granular,
        simple=simple,
        concentration=concentration,
        circulating=circulating,
        health=health,
        risk_flags=flags,
    )
