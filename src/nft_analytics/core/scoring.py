"""Collection, wash trading and wallet risk scoring.

Pure functions over upstream metrics: no I/O, no clock, no shared state.
Each scorer returns a result model with the score, the triggered tags and a
plain-English explanation naming the values that triggered them.
"""

from __future__ import annotations

import math
from typing import Optional

from .models import (
    CollectionMetrics,
    CollectionRiskAssessment,
    CollectionRiskTag,
    HoldingsSummary,
    SafetyRecommendation,
    WalletProfile,
    WalletRiskAssessment,
    WalletRiskFlag,
    WalletRiskLevel,
    WalletType,
    WashTradingAssessment,
    WashTradingEvidence,
    WashTradingMetrics,
    WashTradingSeverity,
)
from .policy import DEFAULT_POLICY, CollectionRiskPolicy, WalletRiskPolicy, WashTradingPolicy


# ─── Collection risk ─────────────────────────────────────────────────────────


def score_collection_risk(
    collection: CollectionMetrics,
    wash_trading: Optional[WashTradingMetrics] = None,
    policy: CollectionRiskPolicy = DEFAULT_POLICY.collection,
) -> CollectionRiskAssessment:
    """Compute the 0-100 safety score for a collection.

    Starts from ``policy.base_score`` and subtracts one penalty per triggered
    condition. Without wash trading data the wash trading checks are skipped.
    """
    score = policy.base_score
    risks: list[CollectionRiskTag] = []

    if collection.owner_count < policy.low_holder_threshold:
        score -= policy.low_holder_penalty
        risks.append(CollectionRiskTag.LOW_HOLDER_COUNT)
    elif collection.owner_count < policy.moderate_holder_threshold:
        score -= policy.moderate_holder_penalty
        risks.append(CollectionRiskTag.MODERATE_HOLDER_COUNT)

    wash_pct = wash_trading.wash_trading_percentage if wash_trading else 0.0
    if wash_trading and wash_pct > policy.high_wash_threshold:
        score -= policy.high_wash_penalty
        risks.append(CollectionRiskTag.HIGH_WASH_TRADING)
    elif wash_trading and wash_pct > policy.moderate_wash_threshold:
        score -= policy.moderate_wash_penalty
        risks.append(CollectionRiskTag.MODERATE_WASH_TRADING)

    if collection.volume_change_24h < policy.volume_decline_threshold:
        score -= policy.volume_decline_penalty
        risks.append(CollectionRiskTag.SHARP_VOLUME_DECLINE)

    if abs(collection.floor_price_change_24h) > policy.volatility_threshold:
        score -= policy.volatility_penalty
        risks.append(CollectionRiskTag.HIGH_PRICE_VOLATILITY)

    score = max(0, score)
    recommendation = classify_safety(score, policy)

    return CollectionRiskAssessment(
        collection_name=collection.name,
        contract_address=collection.address,
        safety_score=score,
        risks=risks,
        recommendation=recommendation,
        metrics={
            "holders": collection.owner_count,
            "volume_24h": collection.volume_24h,
            "floor_price": collection.floor_price,
            "wash_trading_percentage": wash_pct,
            "volume_change_24h": collection.volume_change_24h,
            "floor_price_change_24h": collection.floor_price_change_24h,
        },
        wash_trading=wash_trading,
        analysis=_collection_analysis(collection, wash_pct, risks, score, recommendation),
    )


def classify_safety(score: int, policy: CollectionRiskPolicy = DEFAULT_POLICY.collection) -> SafetyRecommendation:
    if score >= policy.safe_floor:
        return SafetyRecommendation.SAFE
    if score >= policy.caution_floor:
        return SafetyRecommendation.CAUTION
    return SafetyRecommendation.HIGH_RISK


def _collection_analysis(
    collection: CollectionMetrics,
    wash_pct: float,
    risks: list[CollectionRiskTag],
    score: int,
    recommendation: SafetyRecommendation,
) -> str:
    parts = [f"{collection.name} has a safety score of {score}/100."]

    if not risks:
        parts.append("This collection shows strong fundamentals with no significant risk factors detected.")
    else:
        plural = "s" if len(risks) > 1 else ""
        parts.append(f"We've identified {len(risks)} risk factor{plural}:")
        for tag in risks:
            parts.append(_risk_sentence(tag, collection, wash_pct))

    if recommendation == SafetyRecommendation.SAFE:
        parts.append("This collection appears safe for investment with proper due diligence.")
    elif recommendation == SafetyRecommendation.CAUTION:
        parts.append("Exercise caution when investing. Consider the identified risks carefully.")
    else:
        parts.append("High risk detected. Not recommended for risk-averse investors.")
    return " ".join(parts)


def _risk_sentence(tag: CollectionRiskTag, collection: CollectionMetrics, wash_pct: float) -> str:
    if tag == CollectionRiskTag.LOW_HOLDER_COUNT:
        return f"Low holder count ({collection.owner_count}) indicates high concentration risk."
    if tag == CollectionRiskTag.MODERATE_HOLDER_COUNT:
        return f"Moderate holder count ({collection.owner_count}) leaves ownership fairly concentrated."
    if tag == CollectionRiskTag.HIGH_WASH_TRADING:
        return f"High wash trading activity ({wash_pct:.1f}% of volume) suggests artificial price inflation."
    if tag == CollectionRiskTag.MODERATE_WASH_TRADING:
        return f"Moderate wash trading activity ({wash_pct:.1f}% of volume) inflates some of the reported volume."
    if tag == CollectionRiskTag.SHARP_VOLUME_DECLINE:
        return f"Sharp volume decline ({collection.volume_change_24h:.1f}%) may indicate waning interest."
    return f"High price volatility ({abs(collection.floor_price_change_24h):.1f}% change) suggests market uncertainty."


# ─── Wash trading ────────────────────────────────────────────────────────────


_WASH_RECOMMENDATIONS: dict[WashTradingSeverity, tuple[str, ...]] = {
    WashTradingSeverity.CRITICAL: (
        "Avoid trading this collection until wash trading activity decreases",
        "If holding, consider the true liquidity may be much lower than displayed",
        "Be extremely cautious of current price levels as they may be artificially inflated",
    ),
    WashTradingSeverity.HIGH: (
        "Avoid trading this collection until wash trading activity decreases",
        "If holding, consider the true liquidity may be much lower than displayed",
        "Be extremely cautious of current price levels as they may be artificially inflated",
    ),
    WashTradingSeverity.MODERATE: (
        "Factor wash trading into any investment decisions",
        "Focus on holder count and distribution rather than volume metrics",
        "Consider waiting for wash trading to decrease before major investments",
    ),
    WashTradingSeverity.LOW: (
        "Monitor wash trading trends over time",
        "Use multiple metrics beyond volume for investment decisions",
    ),
    WashTradingSeverity.MINIMAL: (
        "No significant wash trading concerns",
        "Standard due diligence recommended",
    ),
}

_SEVERITY_DETAIL: dict[WashTradingSeverity, str] = {
    WashTradingSeverity.CRITICAL: (
        "This level of wash trading is extremely concerning and suggests coordinated market manipulation. "
        "The actual organic demand for this collection may be significantly lower than apparent market activity suggests."
    ),
    WashTradingSeverity.HIGH: (
        "This indicates substantial artificial activity that may be inflating perceived market interest. "
        "True price discovery is compromised by this level of wash trading."
    ),
    WashTradingSeverity.MODERATE: (
        "While some wash trading is present, it's not completely dominating market activity. "
        "However, investors should factor this artificial volume into their analysis."
    ),
    WashTradingSeverity.LOW: (
        "The wash trading present is notable but not overwhelming. "
        "Exercise standard caution when evaluating market metrics."
    ),
}


def classify_wash_trading(
    percentage: float,
    policy: WashTradingPolicy = DEFAULT_POLICY.wash_trading,
) -> WashTradingSeverity:
    """Map a wash trading percentage to a severity tier. Tier floors are inclusive."""
    for floor, severity in policy.severity_floors:
        if percentage >= floor:
            return severity
    return WashTradingSeverity.MINIMAL


def is_wash_trading_detected(
    percentage: float,
    policy: WashTradingPolicy = DEFAULT_POLICY.wash_trading,
) -> bool:
    return percentage > policy.detection_threshold


def _estimate(suspect_sales: int, fraction: float) -> int:
    """Half-up rounded share of suspect sales attributed to one pattern."""
    return int(math.floor(suspect_sales * fraction + 0.5))


def assess_wash_trading(
    wash_trading: WashTradingMetrics,
    contract_address: str,
    collection_name: Optional[str] = None,
    time_range: str = "7d",
    policy: WashTradingPolicy = DEFAULT_POLICY.wash_trading,
) -> WashTradingAssessment:
    pct = wash_trading.wash_trading_percentage
    severity = classify_wash_trading(pct, policy)
    detected = is_wash_trading_detected(pct, policy)
    suspect_sales = wash_trading.wash_trading_sales

    evidence = WashTradingEvidence(
        circular_trades=_estimate(suspect_sales, policy.circular_fraction),
        rapid_flips=_estimate(suspect_sales, policy.rapid_flip_fraction),
        same_wallet_trades=_estimate(suspect_sales, policy.same_wallet_fraction),
        time_range_analyzed=time_range,
        data_points_analyzed=wash_trading.total_sales,
    )

    suspicious_patterns = []
    if detected:
        suspicious_patterns = [
            "Analysis shows multiple wallets with circular trading patterns",
            "Detailed wallet analysis requires transaction-level data",
        ]

    recommendations = list(_WASH_RECOMMENDATIONS[severity])
    recommendations.append(f"Current wash trading represents {pct:.1f}% of total volume")

    return WashTradingAssessment(
        collection_name=collection_name or "Unknown Collection",
        contract_address=contract_address,
        time_range=time_range,
        wash_trading_detected=detected,
        severity=severity,
        metrics={
            "wash_trading_volume": wash_trading.wash_trading_volume,
            "total_volume": wash_trading.total_volume,
            "wash_trading_percentage": pct,
            "wash_trading_sales": wash_trading.wash_trading_sales,
            "total_sales": wash_trading.total_sales,
            "wash_trading_wallets": wash_trading.wash_trading_wallets,
            "wash_trading_assets": wash_trading.wash_trading_assets,
            "average_wash_trade_size": wash_trading.wash_trading_volume / max(suspect_sales, 1),
        },
        evidence=evidence,
        suspicious_patterns=suspicious_patterns,
        analysis=_wash_trading_analysis(wash_trading, severity),
        recommendations=recommendations,
    )


def _wash_trading_analysis(wash_trading: WashTradingMetrics, severity: WashTradingSeverity) -> str:
    pct = wash_trading.wash_trading_percentage
    if severity == WashTradingSeverity.MINIMAL:
        return (
            f"This collection shows minimal wash trading activity ({pct:.1f}%), which is within normal market parameters. "
            "The trading patterns appear organic with no significant artificial volume inflation detected."
        )

    analysis = f"Analysis reveals {severity.value.lower()} wash trading activity with {pct:.1f}% of volume identified as artificial. "
    if wash_trading.wash_trading_sales > 0:
        analysis += (
            f"Out of {wash_trading.total_sales} total sales, {wash_trading.wash_trading_sales} "
            "transactions show wash trading characteristics. "
        )
    return analysis + _SEVERITY_DETAIL[severity]


# ─── Wallet risk ─────────────────────────────────────────────────────────────


def classify_wallet_type(profile: WalletProfile) -> WalletType:
    """Whale wins over shark when upstream sets both."""
    if profile.is_whale:
        return WalletType.WHALE
    if profile.is_shark:
        return WalletType.SHARK
    return WalletType.REGULAR


def classify_wallet_risk(score: int, policy: WalletRiskPolicy = DEFAULT_POLICY.wallet) -> WalletRiskLevel:
    if score >= policy.high_floor:
        return WalletRiskLevel.HIGH
    if score >= policy.moderate_floor:
        return WalletRiskLevel.MODERATE
    if score >= policy.low_floor:
        return WalletRiskLevel.LOW
    return WalletRiskLevel.MINIMAL


def profit_loss_ratio(profile: WalletProfile) -> float:
    return profile.realized_gains / max(profile.realized_losses, 1)


def score_wallet_risk(
    profile: WalletProfile,
    include_holdings: bool = True,
    policy: WalletRiskPolicy = DEFAULT_POLICY.wallet,
) -> WalletRiskAssessment:
    """Accumulate a wallet risk score from independent triggers (higher = riskier)."""
    score = 0
    flags: list[WalletRiskFlag] = []

    if profile.washtrade_score > policy.high_wash_threshold:
        score += policy.high_wash_penalty
        flags.append(WalletRiskFlag.HIGH_WASH_TRADING_ACTIVITY)
    elif profile.washtrade_score > policy.moderate_wash_threshold:
        score += policy.moderate_wash_penalty
        flags.append(WalletRiskFlag.MODERATE_WASH_TRADING_ACTIVITY)

    ratio = profit_loss_ratio(profile)
    if ratio < policy.poor_ratio_threshold and profile.realized_losses > policy.poor_min_losses:
        score += policy.poor_performance_penalty
        flags.append(WalletRiskFlag.POOR_TRADING_PERFORMANCE)

    if profile.collection_count == policy.concentrated_max_collections and profile.nft_count > policy.concentrated_min_nfts:
        score += policy.concentration_penalty
        flags.append(WalletRiskFlag.HIGHLY_CONCENTRATED_PORTFOLIO)

    if profile.nft_count == 0 and profile.total_value > 0:
        score += policy.inconsistent_data_penalty
        flags.append(WalletRiskFlag.INCONSISTENT_PORTFOLIO_DATA)

    level = classify_wallet_risk(score, policy)
    wallet_type = classify_wallet_type(profile)

    holdings = None
    if include_holdings and profile.nft_count > 0:
        holdings = HoldingsSummary(
            total_nfts=profile.nft_count,
            collections=profile.collection_count,
            estimated_value=profile.total_value,
        )

    return WalletRiskAssessment(
        wallet_address=profile.address,
        risk_score=score,
        risk_level=level,
        wallet_type=wallet_type,
        metrics={
            "total_nfts": profile.nft_count,
            "collections_held": profile.collection_count,
            "portfolio_value": profile.total_value,
            "realized_gains": profile.realized_gains,
            "realized_losses": profile.realized_losses,
            "profit_loss_ratio": round(ratio, 2),
            "wash_trade_score": profile.washtrade_score,
        },
        red_flags=flags,
        analysis=_wallet_analysis(profile, score, flags, wallet_type),
        recommendations=_wallet_recommendations(level, flags, wallet_type),
        holdings_summary=holdings,
    )


def _wallet_analysis(
    profile: WalletProfile,
    score: int,
    flags: list[WalletRiskFlag],
    wallet_type: WalletType,
) -> str:
    parts = [f"This {wallet_type.value} wallet has a risk score of {score}/100."]

    if wallet_type == WalletType.WHALE:
        parts.append("As a whale wallet, this address has significant market influence.")
    elif wallet_type == WalletType.SHARK:
        parts.append("This shark wallet shows sophisticated trading patterns.")

    if not flags:
        parts.append("No significant risk factors detected. The wallet shows normal trading behavior.")
    else:
        plural = "s" if len(flags) > 1 else ""
        parts.append(f"We've identified {len(flags)} risk factor{plural}:")
        if WalletRiskFlag.HIGH_WASH_TRADING_ACTIVITY in flags:
            parts.append(f"High wash trading score ({profile.washtrade_score:g}) indicates artificial trading activity.")
        if WalletRiskFlag.MODERATE_WASH_TRADING_ACTIVITY in flags:
            parts.append(f"Moderate wash trading score ({profile.washtrade_score:g}) warrants a closer look at its trades.")
        if WalletRiskFlag.POOR_TRADING_PERFORMANCE in flags:
            parts.append("Poor profit/loss ratio suggests either inexperienced trading or potential manipulation.")
        if WalletRiskFlag.HIGHLY_CONCENTRATED_PORTFOLIO in flags:
            parts.append("Portfolio is concentrated in a single collection, indicating high risk exposure.")
        if WalletRiskFlag.INCONSISTENT_PORTFOLIO_DATA in flags:
            parts.append("Reported portfolio value with no NFTs held points to inconsistent upstream data.")

    if profile.nft_count > 0:
        plural = "s" if profile.collection_count != 1 else ""
        parts.append(
            f"The wallet holds {profile.nft_count} NFTs across {profile.collection_count} collection{plural} "
            f"with an estimated value of ${profile.total_value:,.2f}."
        )

    if profile.realized_gains > 0 or profile.realized_losses > 0:
        parts.append(
            f"Historical trading shows ${profile.realized_gains:,.2f} in gains "
            f"and ${profile.realized_losses:,.2f} in losses."
        )
    return " ".join(parts)


def _wallet_recommendations(
    level: WalletRiskLevel,
    flags: list[WalletRiskFlag],
    wallet_type: WalletType,
) -> list[str]:
    if level == WalletRiskLevel.HIGH:
        recommendations = [
            "Exercise extreme caution when trading with this wallet",
            "Verify all transactions carefully before proceeding",
            "Consider avoiding direct trades with this address",
        ]
    elif level == WalletRiskLevel.MODERATE:
        recommendations = [
            "Proceed with caution in any transactions",
            "Verify the wallet's trading history before large trades",
            "Consider using escrow services for high-value transactions",
        ]
    elif level == WalletRiskLevel.LOW:
        recommendations = [
            "Standard due diligence recommended",
            "Monitor for any changes in trading patterns",
        ]
    else:
        recommendations = [
            "This wallet appears safe for normal trading",
            "No special precautions necessary",
        ]

    if WalletRiskFlag.HIGH_WASH_TRADING_ACTIVITY in flags:
        recommendations.append("Be aware of potential price manipulation in collections this wallet trades")
    if WalletRiskFlag.HIGHLY_CONCENTRATED_PORTFOLIO in flags:
        recommendations.append("Wallet may be heavily invested in a single project - consider their bias")
    if wallet_type == WalletType.WHALE:
        recommendations.append("Monitor this whale's movements as they can impact market prices")
    return recommendations
