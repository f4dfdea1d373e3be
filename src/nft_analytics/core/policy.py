"""Heuristic constants for every scorer, in one place.

Scorers take their section of ``DEFAULT_POLICY`` unless a caller passes a
tuned copy, e.g. ``DEFAULT_POLICY.wallet.model_copy(update={"high_wash_penalty": 50})``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import InvestmentHorizon, RiskTolerance, WashTradingSeverity


class _Policy(BaseModel):
    model_config = ConfigDict(frozen=True)


class CollectionRiskPolicy(_Policy):
    base_score: int = 100
    low_holder_threshold: int = 100
    low_holder_penalty: int = 20
    moderate_holder_threshold: int = 500
    moderate_holder_penalty: int = 10
    high_wash_threshold: float = 30.0
    high_wash_penalty: int = 30
    moderate_wash_threshold: float = 15.0
    moderate_wash_penalty: int = 15
    volume_decline_threshold: float = -50.0
    volume_decline_penalty: int = 15
    volatility_threshold: float = 30.0
    volatility_penalty: int = 10
    safe_floor: int = 80
    caution_floor: int = 60


class WashTradingPolicy(_Policy):
    # Checked top-down; the first floor the percentage reaches wins.
    severity_floors: tuple[tuple[float, WashTradingSeverity], ...] = (
        (40.0, WashTradingSeverity.CRITICAL),
        (25.0, WashTradingSeverity.HIGH),
        (15.0, WashTradingSeverity.MODERATE),
        (5.0, WashTradingSeverity.LOW),
    )
    detection_threshold: float = 5.0
    circular_fraction: float = 0.4
    rapid_flip_fraction: float = 0.3
    same_wallet_fraction: float = 0.3


class SentimentPolicy(_Policy):
    volume_strong: float = 20.0
    sales_threshold: float = 15.0
    wallets_threshold: float = 10.0
    price_threshold: float = 10.0
    bullish_score: int = 3
    bearish_score: int = -3
    # Narrative triggers
    volume_insight: float = 30.0
    wallets_insight: float = 20.0
    price_insight: float = 15.0
    explosive_growth: float = 50.0
    # Opportunity filters
    undervalued_volume_change: float = 20.0
    undervalued_floor_change: float = 5.0
    undervalued_min_owners: int = 1000
    community_min_owners: int = 2000
    downturn_volume_change: float = -20.0
    downturn_price_change: float = -15.0
    momentum_volume_change: float = 30.0
    momentum_wallets_change: float = 20.0


class WalletRiskPolicy(_Policy):
    high_wash_threshold: float = 50.0
    high_wash_penalty: int = 40
    moderate_wash_threshold: float = 20.0
    moderate_wash_penalty: int = 20
    poor_ratio_threshold: float = 0.5
    poor_min_losses: float = 10000.0
    poor_performance_penalty: int = 15
    concentrated_max_collections: int = 1
    concentrated_min_nfts: int = 10
    concentration_penalty: int = 20
    inconsistent_data_penalty: int = 15
    high_floor: int = 70
    moderate_floor: int = 40
    low_floor: int = 20


class PositionLimit(_Policy):
    """Maximum positions for budgets below ``budget_below`` (None = no ceiling)."""

    budget_below: Optional[float]
    conservative: int
    other: int


class PortfolioPolicy(_Policy):
    strong_community_owners: int = 5000
    strong_community_points: dict[RiskTolerance, int] = Field(
        default_factory=lambda: {
            RiskTolerance.CONSERVATIVE: 30,
            RiskTolerance.MODERATE: 20,
            RiskTolerance.AGGRESSIVE: 20,
        }
    )
    growing_community_owners: int = 2000
    growing_community_points: int = 15
    high_momentum_change: float = 20.0
    high_momentum_points: int = 20
    positive_momentum_points: int = 10
    stability_band: float = 10.0
    stability_points: dict[RiskTolerance, int] = Field(
        default_factory=lambda: {
            RiskTolerance.CONSERVATIVE: 25,
            RiskTolerance.MODERATE: 15,
            RiskTolerance.AGGRESSIVE: 15,
        }
    )
    high_liquidity_sales: int = 100
    high_liquidity_points: int = 20
    moderate_liquidity_sales: int = 50
    moderate_liquidity_points: int = 10
    long_horizon_owners: int = 3000
    short_horizon_change: float = 30.0
    horizon_points: int = 15

    # Slices past the allocation curve only fit once earlier picks were skipped,
    # so the top limits are rarely reached in full.
    position_limits: tuple[PositionLimit, ...] = (
        PositionLimit(budget_below=1000, conservative=1, other=1),
        PositionLimit(budget_below=5000, conservative=2, other=3),
        PositionLimit(budget_below=20000, conservative=3, other=5),
        PositionLimit(budget_below=None, conservative=5, other=8),
    )
    allocation_fractions: dict[RiskTolerance, tuple[float, ...]] = Field(
        default_factory=lambda: {
            RiskTolerance.CONSERVATIVE: (0.4, 0.3, 0.2, 0.1),
            RiskTolerance.MODERATE: (0.35, 0.25, 0.2, 0.15, 0.05),
            RiskTolerance.AGGRESSIVE: (0.3, 0.25, 0.2, 0.15, 0.1),
        }
    )
    overflow_fraction: float = 0.1

    # (high-signal return, default return) per horizon
    expected_returns: dict[InvestmentHorizon, tuple[str, str]] = Field(
        default_factory=lambda: {
            InvestmentHorizon.SHORT: ("10-20%", "5-10%"),
            InvestmentHorizon.MEDIUM: ("20-50%", "10-30%"),
            InvestmentHorizon.LONG: ("50-200%", "30-100%"),
        }
    )
    return_owner_threshold: int = 5000
    return_momentum_threshold: float = 30.0
    portfolio_returns: dict[RiskTolerance, str] = Field(
        default_factory=lambda: {
            RiskTolerance.CONSERVATIVE: "10-30%",
            RiskTolerance.MODERATE: "20-50%",
            RiskTolerance.AGGRESSIVE: "30-100%",
        }
    )
    high_risk_share: float = 0.5
    medium_risk_share: float = 0.2
    diversification_per_position: int = 20

    # Market condition used by the advisor
    bullish_volume_change: float = 10.0
    bullish_sales_change: float = 5.0
    active_wallets_high: int = 10000
    active_wallets_moderate: int = 5000
    small_budget: float = 500.0


class CollectionAdvicePolicy(_Policy):
    base_confidence: int = 50
    holder_ratio_threshold: float = 0.3
    holder_ratio_bonus: int = 10
    volume_growth_threshold: float = 20.0
    volume_growth_bonus: int = 15
    low_wash_threshold: float = 10.0
    low_wash_bonus: int = 10
    large_holder_base: int = 1000
    large_holder_bonus: int = 10
    high_wash_threshold: float = 30.0
    high_wash_penalty: int = 25
    small_holder_base: int = 100
    small_holder_penalty: int = 15
    price_to_floor_threshold: float = 2.0
    price_to_floor_penalty: int = 10
    volume_decline_threshold: float = -20.0
    volume_decline_penalty: int = 15
    buy_confidence: int = 70
    medium_buy_confidence: int = 80
    sell_confidence: int = 30
    low_tolerance_sell_confidence: int = 50
    cautious_buy_confidence: int = 60
    cautious_sell_confidence: int = 40


class ScoringPolicy(_Policy):
    collection: CollectionRiskPolicy = Field(default_factory=CollectionRiskPolicy)
    wash_trading: WashTradingPolicy = Field(default_factory=WashTradingPolicy)
    sentiment: SentimentPolicy = Field(default_factory=SentimentPolicy)
    wallet: WalletRiskPolicy = Field(default_factory=WalletRiskPolicy)
    portfolio: PortfolioPolicy = Field(default_factory=PortfolioPolicy)
    collection_advice: CollectionAdvicePolicy = Field(default_factory=CollectionAdvicePolicy)


DEFAULT_POLICY = ScoringPolicy()
