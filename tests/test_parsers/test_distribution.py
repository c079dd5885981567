"""Tests for distribution statistics, risk flags and health score."""

import pytest

from holders_intel.parsers.distribution import (
    compute_health,
    compute_risk_flags,
    grade_for,
    summarize_distribution,
)
from holders_intel.parsers.holder_classifier import (
    GranularTier,
    HolderAccount,
    HolderClassifier,
    SimpleTier,
)
from holders_intel.parsers.known_addresses import TOKEN_PROGRAM_ID
from holders_intel.parsers.pool_registry import PoolRegistry

RAYDIUM_V4 = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"

CLEAN = dict(top5_pct=10.0, lp_pct=30.0, bundled_pct=0.0, holder_count=500, dust_pct=0.0)


def _classified(balances: list[tuple[str, float, bool]], price: float):
    """(owner, balance, is_pool) rows -> classified holders, largest first."""
    total = sum(b for _, b, _ in balances)
    holders = [
        HolderAccount(
            owner_address=owner,
            token_account_address=f"TA-{owner}",
            account_owner_program=RAYDIUM_V4 if pool else TOKEN_PROGRAM_ID,
            balance_raw=int(balance),
            balance_ui=balance,
            usd_value=balance * price,
            percentage_of_supply=balance / total * 100 if total else 0.0,
        )
        for owner, balance, pool in sorted(balances, key=lambda r: -r[1])
    ]
    return HolderClassifier(heuristic_min_pct=100.0).classify_all(holders, PoolRegistry())


class TestGrade:
    @pytest.mark.parametrize("score, grade", [
        (100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"),
        (65, "C"), (64, "D"), (50, "D"), (49, "F"), (0, "F"),
    ])
    def test_bands(self, score: int, grade: str) -> None:
        assert grade_for(score) == grade


class TestComputeHealth:
    def test_clean_token(self) -> None:
        health = compute_health(**CLEAN)
        assert health.score == 100
        assert health.grade == "A"
        assert health.deductions == ()

    def test_every_deduction_clamps_at_zero(self) -> None:
        health = compute_health(top5_pct=55.0, lp_pct=5.0, bundled_pct=25.0, holder_count=10, dust_pct=50.0)
        assert dict(health.deductions) == {
            "concentration": 30,
            "low_liquidity": 20,
            "bundling": 25,
            "low_holder_count": 15,
            "dust": 10,
        }
        assert health.score == 0
        assert health.grade == "F"

    def test_step_boundaries(self) -> None:
        assert dict(compute_health(**{**CLEAN, "top5_pct": 40.0}).deductions) == {"concentration": 20}
        assert dict(compute_health(**{**CLEAN, "lp_pct": 10.0}).deductions) == {"low_liquidity": 10}
        assert dict(compute_health(**{**CLEAN, "bundled_pct": 5.0}).deductions) == {}
        assert dict(compute_health(**{**CLEAN, "holder_count": 99}).deductions) == {"low_holder_count": 10}
        assert dict(compute_health(**{**CLEAN, "dust_pct": 40.0}).deductions) == {}

    @pytest.mark.parametrize("field, values", [
        ("top5_pct", [0, 15, 21, 31, 41, 90]),
        ("bundled_pct", [0, 6, 11, 21, 80]),
        ("dust_pct", [0, 39, 41, 100]),
    ])
    def test_worse_input_never_raises_score(self, field: str, values: list[float]) -> None:
        scores = [compute_health(**{**CLEAN, field: v}).score for v in values]
        assert scores == sorted(scores, reverse=True)

    def test_more_liquidity_and_holders_never_lower_score(self) -> None:
        lp_scores = [compute_health(**{**CLEAN, "lp_pct": v}).score for v in (0, 9, 15, 25)]
        holder_scores = [compute_health(**{**CLEAN, "holder_count": v}).score for v in (0, 49, 60, 150)]
        assert lp_scores == sorted(lp_scores)
        assert holder_scores == sorted(holder_scores)


class TestRiskFlags:
    def test_all_flags(self) -> None:
        flags = compute_risk_flags(
            top5_pct=62.5, lp_count=1, lp_pct=4.0, whale_count=0,
            total_holders=120, dust_pct=35.0, bundled_pct=12.0,
        )
        assert flags == [
            "High concentration: top 5 holders own 62.5% of circulating supply",
            "Thin liquidity: pools hold only 4.0% of supply",
            "No whale wallets among 120 holders",
            "Dust heavy: 35.0% of supply sits in wallets under $1",
            "Bundled wallets hold 12.0% of supply",
        ]

    def test_no_pool_no_liquidity_flag(self) -> None:
        flags = compute_risk_flags(
            top5_pct=0, lp_count=0, lp_pct=0, whale_count=0,
            total_holders=10, dust_pct=0, bundled_pct=0,
        )
        assert flags == []


class TestSummarizeDistribution:
    def test_pool_and_two_wallets(self) -> None:
        classified = _classified([("Pool", 900, True), ("W60", 60, False), ("W40", 40, False)], price=1.0)

        summary = summarize_distribution(classified, price_usd=1.0)

        assert summary.total_holders == 3
        assert summary.lp_count == 1
        assert summary.lp_percentage == pytest.approx(90.0)
        assert summary.non_lp_count == 2
        assert summary.circulating.tokens == 100
        assert summary.circulating.percentage == pytest.approx(10.0)
        assert summary.circulating.usd_value == 100.0
        assert summary.concentration.top5_percentage == pytest.approx(100.0)
        assert summary.concentration.top5_percentage_of_total == pytest.approx(10.0)
        assert summary.granular[GranularTier.REAL].count == 1
        assert summary.granular[GranularTier.REAL].percentage_of_supply == pytest.approx(6.0)
        assert summary.granular[GranularTier.LARGE].count == 1
        assert summary.simple[SimpleTier.RETAIL].count == 2
        assert summary.simple[SimpleTier.RETAIL].usd_value == 100.0
        assert dict(summary.health.deductions) == {"concentration": 30, "low_holder_count": 15}
        assert summary.health.score == 55
        assert summary.health.grade == "D"
        assert summary.risk_flags == [
            "High concentration: top 5 holders own 100.0% of circulating supply",
        ]

    def test_zero_price_everything_is_dust(self) -> None:
        classified = _classified([("Pool", 500, True), ("A", 300, False), ("B", 200, False)], price=0.0)

        summary = summarize_distribution(classified, price_usd=0.0)

        assert summary.simple[SimpleTier.DUST].count == 2
        assert summary.granular[GranularTier.DUST].percentage_of_supply == pytest.approx(50.0)
        assert summary.circulating.usd_value == 0.0
        assert "dust" in dict(summary.health.deductions)

    def test_bundled_percentage_feeds_health_and_flags(self) -> None:
        classified = _classified([("A", 10, False)], price=1.0)

        summary = summarize_distribution(classified, price_usd=1.0, bundled_percentage=22.0)

        assert dict(summary.health.deductions)["bundling"] == 25
        assert "Bundled wallets hold 22.0% of supply" in summary.risk_flags

    def test_empty_input(self) -> None:
        summary = summarize_distribution([], price_usd=1.0)

        assert summary.total_holders == 0
        assert summary.concentration.top5_percentage == 0.0
        assert summary.circulating.percentage == 0.0
        assert 0 <= summary.health.score <= 100
