"""Pydantic data models — the shared business objects.

Upstream metrics come in as frozen value records; the scorers return result
models that the tool adapter serializes with ``model_dump(mode="json")``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Blockchain(str, Enum):
    """Supported chains and their upstream chain ids."""

    ETHEREUM = "ethereum"
    POLYGON = "polygon"
    BSC = "bsc"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"

    @property
    def chain_id(self) -> int:
        return CHAIN_IDS[self]


CHAIN_IDS: dict[Blockchain, int] = {
    Blockchain.ETHEREUM: 1,
    Blockchain.POLYGON: 137,
    Blockchain.BSC: 56,
    Blockchain.ARBITRUM: 42161,
    Blockchain.OPTIMISM: 10,
}


class TimeRange(str, Enum):
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"


class SafetyRecommendation(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    HIGH_RISK = "HIGH_RISK"


class CollectionRiskTag(str, Enum):
    LOW_HOLDER_COUNT = "low_holder_count"
    MODERATE_HOLDER_COUNT = "moderate_holder_count"
    HIGH_WASH_TRADING = "high_wash_trading"
    MODERATE_WASH_TRADING = "moderate_wash_trading"
    SHARP_VOLUME_DECLINE = "sharp_volume_decline"
    HIGH_PRICE_VOLATILITY = "high_price_volatility"


class WashTradingSeverity(str, Enum):
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Sentiment(str, Enum):
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"


class WalletRiskLevel(str, Enum):
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class WalletRiskFlag(str, Enum):
    HIGH_WASH_TRADING_ACTIVITY = "high_wash_trading_activity"
    MODERATE_WASH_TRADING_ACTIVITY = "moderate_wash_trading_activity"
    POOR_TRADING_PERFORMANCE = "poor_trading_performance"
    HIGHLY_CONCENTRATED_PORTFOLIO = "highly_concentrated_portfolio"
    INCONSISTENT_PORTFOLIO_DATA = "inconsistent_portfolio_data"


class WalletType(str, Enum):
    WHALE = "whale"
    SHARK = "shark"
    REGULAR = "regular"


class RiskTolerance(str, Enum):
    """Risk profile for portfolio advice."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class InvestmentHorizon(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class PositionRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class FactorTag(str, Enum):
    """Why a candidate collection earned portfolio points."""

    STRONG_COMMUNITY = "strong_community"
    GROWING_COMMUNITY = "growing_community"
    HIGH_MOMENTUM = "high_momentum"
    POSITIVE_MOMENTUM = "positive_momentum"
    PRICE_STABILITY = "price_stability"
    HIGH_LIQUIDITY = "high_liquidity"
    MODERATE_LIQUIDITY = "moderate_liquidity"
    LONG_TERM_POTENTIAL = "long_term_potential"
    SHORT_TERM_OPPORTUNITY = "short_term_opportunity"


class AdviceRiskTolerance(str, Enum):
    """Risk profile for single-collection advice."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AdviceAction(str, Enum):
    BUY = "BUY"
    CAUTIOUS_BUY = "CAUTIOUS_BUY"
    NEUTRAL = "NEUTRAL"
    CAUTIOUS_SELL = "CAUTIOUS_SELL"
    SELL = "SELL"


# ─── Upstream value records ──────────────────────────────────────────────────


class CollectionMetrics(BaseModel):
    """Market metrics for a single collection."""

    model_config = ConfigDict(frozen=True)

    address: str
    name: str = "Unknown Collection"
    owner_count: int = Field(0, ge=0)
    nft_count: int = Field(0, ge=0)
    volume_24h: float = Field(0.0, ge=0)
    floor_price: float = Field(0.0, ge=0)
    average_price_24h: float = Field(0.0, ge=0)
    sales_24h: int = Field(0, ge=0)
    volume_change_24h: float = 0.0
    floor_price_change_24h: float = 0.0
    average_price_change_24h: float = 0.0
    sales_change_24h: float = 0.0
    market_cap: float = Field(0.0, ge=0)
    fully_diluted_market_cap: float = Field(0.0, ge=0)


class WashTradingMetrics(BaseModel):
    """Pre-aggregated wash trading figures. The percentage is not clamped."""

    model_config = ConfigDict(frozen=True)

    wash_trading_volume: float = 0.0
    total_volume: float = 0.0
    wash_trading_percentage: float = 0.0
    wash_trading_sales: int = 0
    total_sales: int = 0
    wash_trading_wallets: int = 0
    wash_trading_assets: int = 0
    risk_score: float = 0.0
    as_of: Optional[str] = None


class MarketMetrics(BaseModel):
    """Market-wide activity.

    ``change_data_available`` is False when the figures were aggregated from a
    collection list: the change fields are then 0 meaning unknown.
    """

    model_config = ConfigDict(frozen=True)

    volume_24h: float = 0.0
    volume_change_24h: float = 0.0
    sales_24h: float = 0.0
    sales_change_24h: float = 0.0
    average_price: float = 0.0
    average_price_change: float = 0.0
    active_wallets: int = 0
    active_wallets_change: float = 0.0
    change_data_available: bool = True


class WalletProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    is_whale: bool = False
    is_shark: bool = False
    nft_count: int = 0
    collection_count: int = 0
    total_value: float = 0.0
    realized_gains: float = 0.0
    realized_losses: float = 0.0
    washtrade_score: float = 0.0


# ─── Collection risk ─────────────────────────────────────────────────────────


class CollectionRiskAssessment(BaseModel):
    collection_name: str
    contract_address: str
    safety_score: int = Field(ge=0, description="0 = high risk, 100 = no risk factor triggered")
    risks: list[CollectionRiskTag] = Field(default_factory=list)
    recommendation: SafetyRecommendation
    metrics: dict[str, float] = Field(default_factory=dict)
    wash_trading: Optional[WashTradingMetrics] = None
    analysis: str


# ─── Wash trading ────────────────────────────────────────────────────────────


class WashTradingEvidence(BaseModel):
    """Pattern counts derived as fixed fractions of suspect sales, not measured."""

    circular_trades: int
    rapid_flips: int
    same_wallet_trades: int
    time_range_analyzed: str
    data_points_analyzed: int
    confidence: str = "estimated"


class WashTradingAssessment(BaseModel):
    collection_name: str
    contract_address: str
    time_range: str
    wash_trading_detected: bool
    severity: WashTradingSeverity
    metrics: dict[str, float]
    evidence: WashTradingEvidence
    suspicious_patterns: list[str] = Field(default_factory=list)
    analysis: str
    recommendations: list[str]


# ─── Market sentiment ────────────────────────────────────────────────────────


class TrendingCollection(BaseModel):
    name: str
    address: str
    volume_change: float
    floor_change: float
    volume_24h: float
    floor_price: float
    holders: int


class MarketTrendReport(BaseModel):
    time_range: str
    category: str
    market_sentiment: Sentiment
    sentiment_score: int
    market_metrics: dict[str, float]
    change_data_available: bool
    trending_collections: list[TrendingCollection]
    market_analysis: str
    insights: list[str]
    investment_opportunities: list[str]


# ─── Wallet risk ─────────────────────────────────────────────────────────────


class HoldingsSummary(BaseModel):
    total_nfts: int
    collections: int
    estimated_value: float
    note: str = "Detailed holdings analysis requires additional API calls"


class WalletRiskAssessment(BaseModel):
    wallet_address: str
    risk_score: int = Field(ge=0)
    risk_level: WalletRiskLevel
    wallet_type: WalletType
    metrics: dict[str, float]
    red_flags: list[WalletRiskFlag] = Field(default_factory=list)
    analysis: str
    recommendations: list[str]
    holdings_summary: Optional[HoldingsSummary] = None


# ─── Portfolio advice ────────────────────────────────────────────────────────


class ScoredCandidate(BaseModel):
    """A collection that passed the budget filter, with its point total."""

    collection: str
    address: str
    score: int
    floor_price: float
    factors: list[FactorTag] = Field(default_factory=list)
    holders: int
    volume_24h: float
    volume_change: float
    floor_change: float
    sales_24h: int


class Recommendation(BaseModel):
    collection: str
    address: str
    allocation_fraction: float
    budget_allocation: float
    recommended_quantity: int = Field(ge=0)
    entry_price: float
    reasoning: str
    risk_level: PositionRisk
    expected_return: str
    key_factors: list[FactorTag]


class MarketCondition(BaseModel):
    sentiment: Sentiment
    volume_trend: str
    price_trend: str
    activity_level: str
    description: str


class PortfolioMetrics(BaseModel):
    total_positions: int
    total_allocated: float
    average_position_size: float
    diversification_score: int
    risk_score: PositionRisk
    expected_return_range: str


class PortfolioAdvice(BaseModel):
    budget: float
    risk_tolerance: RiskTolerance
    investment_horizon: InvestmentHorizon
    categories: list[str] = Field(default_factory=list)
    market_conditions: MarketCondition
    recommendations: list[Recommendation]
    portfolio_metrics: PortfolioMetrics
    investment_strategy: str
    warnings: list[str]
    diversification_advice: str
    exit_strategy: str


# ─── Single-collection advice ────────────────────────────────────────────────


class CollectionAdvice(BaseModel):
    collection_name: str
    contract_address: str
    recommendation: AdviceAction
    confidence_score: int = Field(ge=0, le=100)
    risk_tolerance: AdviceRiskTolerance
    investment_amount: Optional[float] = None
    current_metrics: dict[str, float]
    holder_concentration: float
    wash_trading_percentage: float
    price_to_floor_ratio: float
    pros: list[str]
    cons: list[str]
    risks: list[str]
    specific_advice: list[str]
    market_timing: str
