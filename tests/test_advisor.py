"""
Unit tests for the portfolio and single-collection advisors
"""

import pytest

from conftest import make_collection, make_market, make_wash
from nft_analytics.core.advisor import (
    advise_collection,
    advise_portfolio,
    allocate,
    analyze_market_condition,
    decide_action,
    max_positions,
    portfolio_metrics,
    score_candidates,
)
from nft_analytics.core.models import (
    AdviceAction,
    AdviceRiskTolerance,
    FactorTag,
    InvestmentHorizon,
    PositionRisk,
    RiskTolerance,
    Sentiment,
)


@pytest.mark.unit
class TestScoring:

    def test_unaffordable_and_unpriced_collections_are_dropped(self):
        collections = [make_collection(floor_price=2000.0), make_collection(floor_price=0.0)]
        assert score_candidates(collections, 1000, RiskTolerance.MODERATE, InvestmentHorizon.MEDIUM) == []

    def test_aggressive_long_horizon_factors(self, healthy_collection):
        collection = healthy_collection.model_copy(update={"volume_change_24h": 25.0})
        [candidate] = score_candidates([collection], 10000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.LONG)
        assert candidate.score == 90
        assert candidate.factors == [
            FactorTag.STRONG_COMMUNITY,
            FactorTag.HIGH_MOMENTUM,
            FactorTag.PRICE_STABILITY,
            FactorTag.HIGH_LIQUIDITY,
            FactorTag.LONG_TERM_POTENTIAL,
        ]

    def test_conservative_never_gets_high_momentum(self, healthy_collection):
        collection = healthy_collection.model_copy(update={"volume_change_24h": 25.0})
        [candidate] = score_candidates([collection], 10000, RiskTolerance.CONSERVATIVE, InvestmentHorizon.MEDIUM)
        assert FactorTag.HIGH_MOMENTUM not in candidate.factors
        assert FactorTag.POSITIVE_MOMENTUM in candidate.factors
        assert candidate.score == 85

    def test_ties_keep_upstream_order(self):
        collections = [make_collection(name=name) for name in ("First", "Second", "Third")]
        ranked = score_candidates(collections, 10000, RiskTolerance.MODERATE, InvestmentHorizon.MEDIUM)
        assert [c.collection for c in ranked] == ["First", "Second", "Third"]

    @pytest.mark.parametrize("budget, tolerance, expected", [
        (999, RiskTolerance.CONSERVATIVE, 1),
        (1000, RiskTolerance.MODERATE, 3),
        (4999, RiskTolerance.CONSERVATIVE, 2),
        (19999, RiskTolerance.CONSERVATIVE, 3),
        (20000, RiskTolerance.AGGRESSIVE, 8),
    ])
    def test_max_positions(self, budget, tolerance, expected):
        assert max_positions(budget, tolerance) == expected


@pytest.mark.unit
class TestAllocation:

    def test_candidate_priced_above_its_slice_is_skipped(self):
        collections = [
            make_collection(name="Pricey", owner_count=100, floor_price=2500.0),
            make_collection(name="Growing", owner_count=3000),
            make_collection(name="BlueChip"),
        ]
        ranked = score_candidates(collections, 10000, RiskTolerance.CONSERVATIVE, InvestmentHorizon.MEDIUM)
        assert [c.collection for c in ranked] == ["BlueChip", "Growing", "Pricey"]

        recommendations = allocate(ranked, 10000, RiskTolerance.CONSERVATIVE, InvestmentHorizon.MEDIUM)
        assert [r.collection for r in recommendations] == ["BlueChip", "Growing"]
        assert recommendations[0].budget_allocation == pytest.approx(4000)
        assert recommendations[0].recommended_quantity == 40
        assert recommendations[1].budget_allocation == pytest.approx(3000)
        assert recommendations[0].risk_level is PositionRisk.LOW
        assert recommendations[1].risk_level is PositionRisk.MEDIUM
        assert recommendations[0].expected_return == "20-50%"
        assert recommendations[1].expected_return == "10-30%"

    def test_overflow_slice_fills_freed_budget(self):
        collections = [make_collection(name=f"Mid{i}", owner_count=3000) for i in range(4)]
        collections.append(make_collection(name="Pricey", floor_price=12000.0))
        ranked = score_candidates(collections, 25000, RiskTolerance.CONSERVATIVE, InvestmentHorizon.MEDIUM)
        assert ranked[0].collection == "Pricey"

        recommendations = allocate(ranked, 25000, RiskTolerance.CONSERVATIVE, InvestmentHorizon.MEDIUM)
        assert [r.collection for r in recommendations] == ["Mid0", "Mid1", "Mid2", "Mid3"]
        assert [r.allocation_fraction for r in recommendations] == [0.3, 0.2, 0.1, 0.1]

    def test_overflow_never_exceeds_budget(self):
        collections = [make_collection(name=f"C{i}") for i in range(8)]
        ranked = score_candidates(collections, 25000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.SHORT)
        recommendations = allocate(ranked, 25000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.SHORT)
        assert len(recommendations) == 5
        assert sum(r.budget_allocation for r in recommendations) <= 25000 + 1e-6

    def test_quantity_is_floored(self):
        collections = [make_collection(floor_price=300.0)]
        ranked = score_candidates(collections, 1000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.MEDIUM)
        [recommendation] = allocate(ranked, 1000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.MEDIUM)
        assert recommendation.budget_allocation == pytest.approx(300)
        assert recommendation.recommended_quantity == 1


@pytest.mark.unit
class TestPortfolioAdvice:

    def test_nothing_affordable(self):
        advice = advise_portfolio(
            make_market(),
            [make_collection(floor_price=2000.0)],
            1000,
            RiskTolerance.MODERATE,
            InvestmentHorizon.MEDIUM,
        )
        assert advice.recommendations == []
        assert advice.portfolio_metrics.total_positions == 0
        assert advice.portfolio_metrics.average_position_size == 0.0
        assert advice.portfolio_metrics.diversification_score == 0
        assert advice.diversification_advice.startswith("No collection fits the budget")

    def test_full_advice(self):
        collections = [make_collection(name=f"C{i}") for i in range(3)]
        advice = advise_portfolio(
            make_market(volume_change_24h=15.0, sales_change_24h=10.0, active_wallets=12000),
            collections,
            3000,
            RiskTolerance.MODERATE,
            InvestmentHorizon.LONG,
            categories=["pfp"],
        )
        assert advice.market_conditions.sentiment is Sentiment.BULLISH
        assert advice.market_conditions.activity_level == "high"
        assert advice.categories == ["pfp"]
        assert advice.portfolio_metrics.total_positions == 3
        assert advice.portfolio_metrics.diversification_score == 60
        assert advice.portfolio_metrics.expected_return_range == "20-50%"
        assert advice.diversification_advice.startswith("Moderate diversification")
        assert advice.exit_strategy.startswith("Hold quality collections")
        assert advice.warnings[-1] == "Past performance does not guarantee future results"

    def test_small_budget_and_low_activity_warnings(self):
        advice = advise_portfolio(
            make_market(active_wallets=100, volume_change_24h=-20.0, sales_change_24h=-10.0),
            [],
            400,
            RiskTolerance.CONSERVATIVE,
            InvestmentHorizon.SHORT,
        )
        assert advice.market_conditions.sentiment is Sentiment.BEARISH
        assert advice.warnings[:3] == [
            "Market conditions are challenging for conservative investors - consider waiting",
            "Limited budget restricts diversification - higher concentration risk",
            "Low market activity may impact ability to exit positions quickly",
        ]

    def test_market_condition_needs_volume_and_sales(self):
        condition = analyze_market_condition(make_market(volume_change_24h=15.0, sales_change_24h=2.0))
        assert condition.sentiment is Sentiment.NEUTRAL
        assert condition.volume_trend == "increasing"

    def test_portfolio_risk_from_high_risk_share(self):
        collections = [make_collection(name="Hot", owner_count=1500, volume_change_24h=40.0)]
        ranked = score_candidates(collections, 2000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.SHORT)
        recommendations = allocate(ranked, 2000, RiskTolerance.AGGRESSIVE, InvestmentHorizon.SHORT)
        assert recommendations[0].risk_level is PositionRisk.HIGH
        assert recommendations[0].expected_return == "10-20%"
        assert portfolio_metrics(recommendations, RiskTolerance.AGGRESSIVE).risk_score is PositionRisk.HIGH

    def test_idempotent(self):
        args = (make_market(), [make_collection()], 5000, RiskTolerance.MODERATE, InvestmentHorizon.MEDIUM)
        assert advise_portfolio(*args) == advise_portfolio(*args)


@pytest.mark.unit
class TestCollectionAdvice:

    def test_strong_collection_is_a_buy(self):
        collection = make_collection(volume_24h=15000.0)
        advice = advise_collection(collection, make_wash(wash_trading_percentage=2.0))
        assert advice.confidence_score == 80
        assert advice.recommendation is AdviceAction.BUY
        assert advice.price_to_floor_ratio == pytest.approx(1.0)
        assert advice.market_timing == "FAVORABLE"
        assert len(advice.pros) == 3

    def test_low_tolerance_is_neutral_with_own_advice(self):
        collection = make_collection(volume_24h=15000.0)
        advice = advise_collection(collection, None, AdviceRiskTolerance.LOW)
        assert advice.recommendation is AdviceAction.NEUTRAL
        assert advice.specific_advice[0] == "Mixed signals - no clear edge either way"

    def test_premium_over_floor_costs_confidence(self, healthy_collection):
        medium = advise_collection(healthy_collection)
        assert medium.confidence_score == 70
        assert medium.recommendation is AdviceAction.CAUTIOUS_BUY
        assert "Price correction risk" in medium.risks
        assert advise_collection(healthy_collection, risk_tolerance=AdviceRiskTolerance.HIGH).recommendation is AdviceAction.BUY

    def test_weak_collection_is_a_sell(self):
        collection = make_collection(owner_count=50, volume_24h=15000.0, volume_change_24h=-30.0)
        advice = advise_collection(collection, make_wash(wash_trading_percentage=35.0), investment_amount=500.0)
        assert advice.confidence_score == 0
        assert advice.recommendation is AdviceAction.SELL
        assert advice.risks == ["Price manipulation risk", "Liquidity risk"]
        assert advice.market_timing == "UNFAVORABLE"
        assert advice.investment_amount == 500.0

    def test_degenerate_metrics(self):
        collection = make_collection(nft_count=0, sales_24h=0, owner_count=600)
        advice = advise_collection(collection)
        assert advice.holder_concentration == 0.0
        assert advice.price_to_floor_ratio == 1.0

    @pytest.mark.parametrize("confidence, tolerance, expected", [
        (80, AdviceRiskTolerance.MEDIUM, AdviceAction.BUY),
        (75, AdviceRiskTolerance.MEDIUM, AdviceAction.CAUTIOUS_BUY),
        (70, AdviceRiskTolerance.HIGH, AdviceAction.BUY),
        (45, AdviceRiskTolerance.MEDIUM, AdviceAction.NEUTRAL),
        (35, AdviceRiskTolerance.MEDIUM, AdviceAction.CAUTIOUS_SELL),
        (30, AdviceRiskTolerance.HIGH, AdviceAction.SELL),
        (50, AdviceRiskTolerance.LOW, AdviceAction.SELL),
        (65, AdviceRiskTolerance.LOW, AdviceAction.NEUTRAL),
    ])
    def test_decide_action(self, confidence, tolerance, expected):
        assert decide_action(confidence, tolerance) is expected
