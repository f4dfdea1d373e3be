"""Investment advice.

Two separate advisors share this module:

* ``advise_portfolio`` ranks a list of candidate collections against a
  budget, risk tolerance and horizon, then splits the budget across the top
  picks with a fixed allocation curve.
* ``advise_collection`` gives a BUY/SELL style call on one collection from
  its metrics and wash trading figures.

They take different risk tolerance enums on purpose and are not merged.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from .models import (
    AdviceAction,
    AdviceRiskTolerance,
    CollectionAdvice,
    CollectionMetrics,
    FactorTag,
    InvestmentHorizon,
    MarketCondition,
    MarketMetrics,
    PortfolioAdvice,
    PortfolioMetrics,
    PositionRisk,
    Recommendation,
    RiskTolerance,
    ScoredCandidate,
    Sentiment,
    WashTradingMetrics,
)
from .policy import DEFAULT_POLICY, CollectionAdvicePolicy, PortfolioPolicy

logger = logging.getLogger(__name__)

# Tolerance for float drift when summing allocation slices.
_EPSILON = 1e-9


# ─── Portfolio advisor ───────────────────────────────────────────────────────


def analyze_market_condition(
    metrics: MarketMetrics,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> MarketCondition:
    if metrics.volume_change_24h > policy.bullish_volume_change and metrics.sales_change_24h > policy.bullish_sales_change:
        sentiment = Sentiment.BULLISH
    elif metrics.volume_change_24h < -policy.bullish_volume_change and metrics.sales_change_24h < -policy.bullish_sales_change:
        sentiment = Sentiment.BEARISH
    else:
        sentiment = Sentiment.NEUTRAL

    if metrics.active_wallets > policy.active_wallets_high:
        activity = "high"
    elif metrics.active_wallets > policy.active_wallets_moderate:
        activity = "moderate"
    else:
        activity = "low"

    if sentiment == Sentiment.BULLISH:
        description = (
            f"Market showing strong momentum with {metrics.volume_change_24h:.1f}% volume increase "
            "and growing trader participation."
        )
    elif sentiment == Sentiment.BEARISH:
        description = f"Market experiencing downturn with {abs(metrics.volume_change_24h):.1f}% volume decline. Caution advised."
    else:
        description = "Market showing mixed signals. Selective opportunities available for careful investors."

    return MarketCondition(
        sentiment=sentiment,
        volume_trend="increasing" if metrics.volume_change_24h > 0 else "decreasing",
        price_trend="rising" if metrics.average_price_change > 0 else "falling",
        activity_level=activity,
        description=description,
    )


def score_candidates(
    collections: Sequence[CollectionMetrics],
    budget: float,
    risk_tolerance: RiskTolerance,
    horizon: InvestmentHorizon,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> list[ScoredCandidate]:
    """Filter to affordable collections, score them, and rank best first.

    Collections without a positive floor price cannot be sized and are
    dropped. The sort is stable so ties keep upstream order.
    """
    scored = []
    for collection in collections:
        if collection.floor_price > budget or collection.floor_price <= 0:
            continue

        score = 0
        factors: list[FactorTag] = []

        if collection.owner_count > policy.strong_community_owners:
            score += policy.strong_community_points[risk_tolerance]
            factors.append(FactorTag.STRONG_COMMUNITY)
        elif collection.owner_count > policy.growing_community_owners:
            score += policy.growing_community_points
            factors.append(FactorTag.GROWING_COMMUNITY)

        if collection.volume_change_24h > policy.high_momentum_change and risk_tolerance != RiskTolerance.CONSERVATIVE:
            score += policy.high_momentum_points
            factors.append(FactorTag.HIGH_MOMENTUM)
        elif collection.volume_change_24h > 0:
            score += policy.positive_momentum_points
            factors.append(FactorTag.POSITIVE_MOMENTUM)

        if abs(collection.floor_price_change_24h) < policy.stability_band:
            score += policy.stability_points[risk_tolerance]
            factors.append(FactorTag.PRICE_STABILITY)

        if collection.sales_24h > policy.high_liquidity_sales:
            score += policy.high_liquidity_points
            factors.append(FactorTag.HIGH_LIQUIDITY)
        elif collection.sales_24h > policy.moderate_liquidity_sales:
            score += policy.moderate_liquidity_points
            factors.append(FactorTag.MODERATE_LIQUIDITY)

        if horizon == InvestmentHorizon.LONG and collection.owner_count > policy.long_horizon_owners:
            score += policy.horizon_points
            factors.append(FactorTag.LONG_TERM_POTENTIAL)
        elif horizon == InvestmentHorizon.SHORT and collection.volume_change_24h > policy.short_horizon_change:
            score += policy.horizon_points
            factors.append(FactorTag.SHORT_TERM_OPPORTUNITY)

        scored.append(ScoredCandidate(
            collection=collection.name,
            address=collection.address,
            score=score,
            floor_price=collection.floor_price,
            factors=factors,
            holders=collection.owner_count,
            volume_24h=collection.volume_24h,
            volume_change=collection.volume_change_24h,
            floor_change=collection.floor_price_change_24h,
            sales_24h=collection.sales_24h,
        ))

    return sorted(scored, key=lambda c: c.score, reverse=True)


def max_positions(
    budget: float,
    risk_tolerance: RiskTolerance,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> int:
    for limit in policy.position_limits:
        if limit.budget_below is None or budget < limit.budget_below:
            return limit.conservative if risk_tolerance == RiskTolerance.CONSERVATIVE else limit.other
    return 1


def allocate(
    candidates: Sequence[ScoredCandidate],
    budget: float,
    risk_tolerance: RiskTolerance,
    horizon: InvestmentHorizon,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> list[Recommendation]:
    """Split the budget over the top-ranked candidates.

    Rank ``i`` gets ``fractions[i]`` of the budget (``overflow_fraction`` past
    the end of the curve). A candidate is recommended only when its floor
    price fits its slice and the slice fits what is left of the budget.
    """
    fractions = policy.allocation_fractions[risk_tolerance]
    remaining = budget
    recommendations = []

    for rank, candidate in enumerate(candidates[:max_positions(budget, risk_tolerance, policy)]):
        fraction = fractions[rank] if rank < len(fractions) else policy.overflow_fraction
        allocated = budget * fraction
        if candidate.floor_price > allocated or allocated > remaining + _EPSILON:
            continue

        recommendations.append(Recommendation(
            collection=candidate.collection,
            address=candidate.address,
            allocation_fraction=fraction,
            budget_allocation=allocated,
            recommended_quantity=math.floor(allocated / candidate.floor_price),
            entry_price=candidate.floor_price,
            reasoning=_recommendation_reasoning(candidate),
            risk_level=position_risk(candidate),
            expected_return=expected_return(candidate, horizon, policy),
            key_factors=list(candidate.factors),
        ))
        remaining -= allocated
    return recommendations


def position_risk(candidate: ScoredCandidate) -> PositionRisk:
    factors = candidate.factors
    if FactorTag.PRICE_STABILITY in factors and FactorTag.STRONG_COMMUNITY in factors:
        return PositionRisk.LOW
    if FactorTag.HIGH_MOMENTUM in factors and FactorTag.STRONG_COMMUNITY not in factors:
        return PositionRisk.HIGH
    return PositionRisk.MEDIUM


def expected_return(
    candidate: ScoredCandidate,
    horizon: InvestmentHorizon,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> str:
    high, default = policy.expected_returns[horizon]
    if horizon == InvestmentHorizon.SHORT:
        return high if candidate.volume_change > policy.return_momentum_threshold else default
    return high if candidate.holders > policy.return_owner_threshold else default


def _recommendation_reasoning(candidate: ScoredCandidate) -> str:
    factor_text = ", ".join(f.value for f in candidate.factors).replace("_", " ")
    reasoning = f"{candidate.collection} scores {candidate.score}/100 based on {factor_text}. "
    if FactorTag.STRONG_COMMUNITY in candidate.factors:
        reasoning += "Large holder base provides stability. "
    if FactorTag.HIGH_MOMENTUM in candidate.factors:
        reasoning += "Strong recent performance indicates market interest. "
    if FactorTag.PRICE_STABILITY in candidate.factors:
        reasoning += "Stable pricing reduces volatility risk. "
    return reasoning.strip()


def portfolio_metrics(
    recommendations: Sequence[Recommendation],
    risk_tolerance: RiskTolerance,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> PortfolioMetrics:
    count = len(recommendations)
    total = sum(r.budget_allocation for r in recommendations)
    high_share = sum(1 for r in recommendations if r.risk_level == PositionRisk.HIGH) / count if count else 0.0

    if high_share > policy.high_risk_share:
        risk = PositionRisk.HIGH
    elif high_share > policy.medium_risk_share:
        risk = PositionRisk.MEDIUM
    else:
        risk = PositionRisk.LOW

    return PortfolioMetrics(
        total_positions=count,
        total_allocated=total,
        average_position_size=total / count if count else 0.0,
        diversification_score=min(count * policy.diversification_per_position, 100),
        risk_score=risk,
        expected_return_range=policy.portfolio_returns[risk_tolerance],
    )


def portfolio_warnings(
    condition: MarketCondition,
    risk_tolerance: RiskTolerance,
    budget: float,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> list[str]:
    warnings = []
    if condition.sentiment == Sentiment.BEARISH and risk_tolerance == RiskTolerance.CONSERVATIVE:
        warnings.append("Market conditions are challenging for conservative investors - consider waiting")
    if budget < policy.small_budget:
        warnings.append("Limited budget restricts diversification - higher concentration risk")
    if condition.activity_level == "low":
        warnings.append("Low market activity may impact ability to exit positions quickly")
    warnings.append("NFT investments are highly speculative - only invest what you can afford to lose")
    warnings.append("Past performance does not guarantee future results")
    return warnings


def investment_strategy(risk_tolerance: RiskTolerance, horizon: InvestmentHorizon) -> str:
    if risk_tolerance == RiskTolerance.CONSERVATIVE:
        closing = "Hold through market cycles for best results." if horizon == InvestmentHorizon.LONG else "Take profits at 20-30% gains."
        return (
            "Focus on established collections with strong communities and stable pricing. "
            "Avoid new launches and high-volatility assets. " + closing
        )
    if risk_tolerance == RiskTolerance.MODERATE:
        return (
            "Balance between blue-chip NFTs and emerging collections with potential. "
            "Monitor market trends and rebalance quarterly. "
            "Set stop-losses at -20% to manage downside risk."
        )
    return (
        "Pursue high-growth opportunities in trending collections. "
        "Be prepared for significant volatility. "
        "Use profits from winners to explore new opportunities."
    )


def diversification_advice(recommendations: Sequence[Recommendation]) -> str:
    count = len(recommendations)
    if count == 0:
        return "No collection fits the budget right now - hold cash and revisit when conditions change."
    if count == 1:
        return "Limited budget allows only single position - consider saving for better diversification."
    if count < 3:
        return "Minimal diversification achieved. Monitor positions closely and avoid overconcentration."
    if count < 5:
        return "Moderate diversification across collections. Good balance of risk and opportunity."
    return "Well-diversified portfolio reduces single-collection risk. Rebalance periodically."


def exit_strategy(horizon: InvestmentHorizon) -> str:
    if horizon == InvestmentHorizon.SHORT:
        return "Take profits at 20-30% gains. Cut losses at -15%. Monitor daily for exit opportunities."
    if horizon == InvestmentHorizon.MEDIUM:
        return "Target 50-100% returns. Use trailing stops to protect gains. Reassess monthly."
    return "Hold quality collections through cycles. Only sell if fundamentals deteriorate. Review quarterly."


def advise_portfolio(
    market: MarketMetrics,
    candidates: Sequence[CollectionMetrics],
    budget: float,
    risk_tolerance: RiskTolerance,
    horizon: InvestmentHorizon,
    categories: Optional[Sequence[str]] = None,
    policy: PortfolioPolicy = DEFAULT_POLICY.portfolio,
) -> PortfolioAdvice:
    """Filter, score, rank, allocate and narrate in one pass."""
    condition = analyze_market_condition(market, policy)
    ranked = score_candidates(candidates, budget, risk_tolerance, horizon, policy)
    recommendations = allocate(ranked, budget, risk_tolerance, horizon, policy)
    logger.debug("Portfolio: %d candidates, %d affordable, %d recommended", len(candidates), len(ranked), len(recommendations))

    return PortfolioAdvice(
        budget=budget,
        risk_tolerance=risk_tolerance,
        investment_horizon=horizon,
        categories=list(categories or []),
        market_conditions=condition,
        recommendations=recommendations,
        portfolio_metrics=portfolio_metrics(recommendations, risk_tolerance, policy),
        investment_strategy=investment_strategy(risk_tolerance, horizon),
        warnings=portfolio_warnings(condition, risk_tolerance, budget, policy),
        diversification_advice=diversification_advice(recommendations),
        exit_strategy=exit_strategy(horizon),
    )


# ─── Single-collection advisor ───────────────────────────────────────────────


_SPECIFIC_ADVICE: dict[AdviceAction, tuple[str, ...]] = {
    AdviceAction.BUY: (
        "Strong fundamentals support investment",
        "Consider dollar-cost averaging for larger positions",
        "Monitor for any changes in holder distribution",
    ),
    AdviceAction.CAUTIOUS_BUY: (
        "Moderate opportunity with manageable risks",
        "Start with smaller position size",
        "Set clear exit criteria before investing",
    ),
    AdviceAction.NEUTRAL: (
        "Mixed signals - no clear edge either way",
        "Wait for a clearer trend before committing capital",
        "Keep any existing position sized conservatively",
    ),
    AdviceAction.CAUTIOUS_SELL: (
        "Consider reducing position if holding",
        "Watch for trend reversal signals",
        "Avoid new investments until clarity improves",
    ),
    AdviceAction.SELL: (
        "High risk or poor fundamentals detected",
        "Avoid new investments",
        "Consider exiting positions if holding",
    ),
}


def decide_action(
    confidence: int,
    risk_tolerance: AdviceRiskTolerance,
    policy: CollectionAdvicePolicy = DEFAULT_POLICY.collection_advice,
) -> AdviceAction:
    if confidence >= policy.buy_confidence and (
        risk_tolerance == AdviceRiskTolerance.HIGH
        or (risk_tolerance == AdviceRiskTolerance.MEDIUM and confidence >= policy.medium_buy_confidence)
    ):
        return AdviceAction.BUY
    if confidence <= policy.sell_confidence or (
        risk_tolerance == AdviceRiskTolerance.LOW and confidence <= policy.low_tolerance_sell_confidence
    ):
        return AdviceAction.SELL
    if confidence >= policy.cautious_buy_confidence and risk_tolerance != AdviceRiskTolerance.LOW:
        return AdviceAction.CAUTIOUS_BUY
    if confidence <= policy.cautious_sell_confidence:
        return AdviceAction.CAUTIOUS_SELL
    return AdviceAction.NEUTRAL


def advise_collection(
    collection: CollectionMetrics,
    wash_trading: Optional[WashTradingMetrics] = None,
    risk_tolerance: AdviceRiskTolerance = AdviceRiskTolerance.MEDIUM,
    investment_amount: Optional[float] = None,
    policy: CollectionAdvicePolicy = DEFAULT_POLICY.collection_advice,
) -> CollectionAdvice:
    holder_ratio = collection.owner_count / collection.nft_count if collection.nft_count > 0 else 0.0
    avg_sale = collection.volume_24h / collection.sales_24h if collection.sales_24h > 0 else 0.0
    price_to_floor = avg_sale / collection.floor_price if avg_sale > 0 and collection.floor_price > 0 else 1.0
    wash_pct = wash_trading.wash_trading_percentage if wash_trading else 0.0

    confidence = policy.base_confidence
    pros: list[str] = []
    cons: list[str] = []
    risks: list[str] = []

    if holder_ratio > policy.holder_ratio_threshold:
        pros.append("Good holder distribution suggests organic interest")
        confidence += policy.holder_ratio_bonus
    if collection.volume_change_24h > policy.volume_growth_threshold:
        pros.append("Strong volume growth indicates increasing demand")
        confidence += policy.volume_growth_bonus
    if wash_pct < policy.low_wash_threshold:
        pros.append("Low wash trading suggests authentic market activity")
        confidence += policy.low_wash_bonus
    if collection.owner_count > policy.large_holder_base:
        pros.append("Large holder base provides liquidity and stability")
        confidence += policy.large_holder_bonus

    if wash_pct > policy.high_wash_threshold:
        cons.append("High wash trading may indicate artificial volume")
        risks.append("Price manipulation risk")
        confidence -= policy.high_wash_penalty
    if collection.owner_count < policy.small_holder_base:
        cons.append("Small holder base increases volatility risk")
        risks.append("Liquidity risk")
        confidence -= policy.small_holder_penalty
    if price_to_floor > policy.price_to_floor_threshold:
        cons.append("Current prices significantly above floor price")
        risks.append("Price correction risk")
        confidence -= policy.price_to_floor_penalty
    if collection.volume_change_24h < policy.volume_decline_threshold:
        cons.append("Declining volume suggests weakening interest")
        confidence -= policy.volume_decline_penalty

    action = decide_action(confidence, risk_tolerance, policy)

    return CollectionAdvice(
        collection_name=collection.name,
        contract_address=collection.address,
        recommendation=action,
        confidence_score=max(0, min(100, confidence)),
        risk_tolerance=risk_tolerance,
        investment_amount=investment_amount,
        current_metrics={
            "floor_price": collection.floor_price,
            "volume_24h": collection.volume_24h,
            "sales_24h": collection.sales_24h,
            "owner_count": collection.owner_count,
            "market_cap": collection.market_cap,
        },
        holder_concentration=holder_ratio,
        wash_trading_percentage=wash_pct,
        price_to_floor_ratio=price_to_floor,
        pros=pros,
        cons=cons,
        risks=risks,
        specific_advice=list(_SPECIFIC_ADVICE[action]),
        market_timing="FAVORABLE" if collection.volume_change_24h > 0 else "UNFAVORABLE",
    )
