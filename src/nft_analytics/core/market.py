"""Market-wide sentiment, narrative insights and opportunity screening."""

from __future__ import annotations

from typing import Sequence

from .models import (
    CollectionMetrics,
    MarketMetrics,
    MarketTrendReport,
    Sentiment,
    TrendingCollection,
)
from .policy import DEFAULT_POLICY, SentimentPolicy

TRENDING_DISPLAY_LIMIT = 5


def aggregate_market_metrics(collections: Sequence[CollectionMetrics]) -> MarketMetrics:
    """Approximate market activity from a ranked collection list.

    Period-over-period changes cannot be derived this way, so every change
    field is 0 and ``change_data_available`` is False.
    """
    volume = sum(c.volume_24h for c in collections)
    sales = sum(c.sales_24h for c in collections)
    holders = sum(c.owner_count for c in collections)
    return MarketMetrics(
        volume_24h=volume,
        sales_24h=sales,
        average_price=volume / sales if sales > 0 else 0.0,
        active_wallets=holders // len(collections) if collections else 0,
        change_data_available=False,
    )


def score_sentiment(metrics: MarketMetrics, policy: SentimentPolicy = DEFAULT_POLICY.sentiment) -> int:
    """Signed sentiment score. Positive is bullish."""
    score = 0

    if metrics.volume_change_24h > policy.volume_strong:
        score += 2
    elif metrics.volume_change_24h > 0:
        score += 1
    elif metrics.volume_change_24h < -policy.volume_strong:
        score -= 2
    elif metrics.volume_change_24h < 0:
        score -= 1

    score += _signed_step(metrics.sales_change_24h, policy.sales_threshold)
    score += _signed_step(metrics.active_wallets_change, policy.wallets_threshold)
    score += _signed_step(metrics.average_price_change, policy.price_threshold)
    return score


def _signed_step(value: float, threshold: float) -> int:
    if value > threshold:
        return 1
    if value < -threshold:
        return -1
    return 0


def classify_sentiment(score: int, policy: SentimentPolicy = DEFAULT_POLICY.sentiment) -> Sentiment:
    if score >= policy.bullish_score:
        return Sentiment.BULLISH
    if score <= policy.bearish_score:
        return Sentiment.BEARISH
    return Sentiment.NEUTRAL


def determine_sentiment(metrics: MarketMetrics, policy: SentimentPolicy = DEFAULT_POLICY.sentiment) -> Sentiment:
    return classify_sentiment(score_sentiment(metrics, policy), policy)


def generate_insights(
    metrics: MarketMetrics,
    trending: Sequence[CollectionMetrics],
    sentiment: Sentiment,
    policy: SentimentPolicy = DEFAULT_POLICY.sentiment,
) -> list[str]:
    insights = []

    volume_change = metrics.volume_change_24h
    if abs(volume_change) > policy.volume_insight:
        if volume_change > 0:
            insights.append(f"Significant volume surge of {volume_change:.1f}% indicates increased market activity")
        else:
            insights.append(f"Volume decline of {abs(volume_change):.1f}% suggests reduced trading interest")

    wallets_change = metrics.active_wallets_change
    if abs(wallets_change) > policy.wallets_insight:
        if wallets_change > 0:
            insights.append(f"{wallets_change:.1f}% increase in active traders shows growing market participation")
        else:
            insights.append(f"{abs(wallets_change):.1f}% decrease in active traders indicates market cooling")

    if metrics.average_price_change > policy.price_insight:
        insights.append("Rising average prices across the market suggest strong buying pressure")
    elif metrics.average_price_change < -policy.price_insight:
        insights.append("Declining average prices indicate selling pressure or market correction")

    high_growth = [c for c in trending if c.volume_change_24h > policy.explosive_growth]
    if high_growth:
        insights.append(
            f"{len(high_growth)} collections showing explosive growth (>{policy.explosive_growth:g}% volume increase)"
        )

    if not metrics.change_data_available:
        insights.append("Period-over-period change data is unavailable; change-based signals are treated as unknown")

    if sentiment == Sentiment.BULLISH:
        insights.append("Overall market sentiment is bullish with multiple positive indicators")
    elif sentiment == Sentiment.BEARISH:
        insights.append("Market sentiment is bearish - consider defensive strategies")
    else:
        insights.append("Market showing mixed signals - selective opportunities may exist")
    return insights


def identify_opportunities(
    trending: Sequence[CollectionMetrics],
    metrics: MarketMetrics,
    policy: SentimentPolicy = DEFAULT_POLICY.sentiment,
) -> list[str]:
    """At most one sentence per matched screen, generic advice when none match."""
    opportunities = []

    undervalued = [
        c for c in trending
        if c.volume_change_24h > policy.undervalued_volume_change
        and c.floor_price_change_24h < policy.undervalued_floor_change
        and c.owner_count > policy.undervalued_min_owners
    ]
    if undervalued:
        opportunities.append(
            f"{undervalued[0].name} showing strong volume growth without price appreciation - potential entry opportunity"
        )

    below_average = [
        c for c in trending
        if c.owner_count > policy.community_min_owners and c.floor_price < metrics.average_price
    ]
    if below_average:
        opportunities.append(
            "Collections with growing holder bases below market average price present value opportunities"
        )

    if (
        metrics.volume_change_24h < policy.downturn_volume_change
        and metrics.average_price_change < policy.downturn_price_change
    ):
        opportunities.append("Market downturn may present buying opportunities for quality collections")
    elif (
        metrics.volume_change_24h > policy.momentum_volume_change
        and metrics.active_wallets_change > policy.momentum_wallets_change
    ):
        opportunities.append("Strong market momentum - consider taking profits on overextended positions")

    if not opportunities:
        opportunities.append("Market conditions suggest patience and selective positioning")
        opportunities.append("Focus on collections with strong fundamentals and growing communities")
    return opportunities


def generate_market_analysis(metrics: MarketMetrics, sentiment: Sentiment) -> str:
    analysis = f"The NFT market is currently showing {sentiment.value} sentiment. "
    volume_m = metrics.volume_24h / 1_000_000

    if metrics.change_data_available:
        direction = "gain" if metrics.volume_change_24h > 0 else "loss"
        analysis += (
            f"Trading volume of ${volume_m:.2f}M represents a {direction} of "
            f"{abs(metrics.volume_change_24h):.1f}% compared to the previous period. "
        )
    else:
        analysis += f"Trading volume across tracked collections is ${volume_m:.2f}M; no prior-period comparison is available. "

    if metrics.active_wallets > 0:
        if metrics.change_data_available:
            sign = "+" if metrics.active_wallets_change > 0 else ""
            analysis += f"With {metrics.active_wallets:,} active traders ({sign}{metrics.active_wallets_change:.1f}%), "
            if metrics.active_wallets_change > 10:
                analysis += "we're seeing increased market participation. "
            elif metrics.active_wallets_change < -10:
                analysis += "trader participation is declining. "
            else:
                analysis += "trader participation remains stable. "
        else:
            analysis += f"Tracked collections average {metrics.active_wallets:,} holders each. "

    if abs(metrics.average_price_change) > 5:
        direction = "increased" if metrics.average_price_change > 0 else "decreased"
        analysis += f"Average NFT prices have {direction} by {abs(metrics.average_price_change):.1f}%, "
        if metrics.average_price_change > 0:
            analysis += "indicating strong demand across collections. "
        else:
            analysis += "suggesting price corrections or reduced demand. "
    return analysis.strip()


def format_trending(collections: Sequence[CollectionMetrics], limit: int = TRENDING_DISPLAY_LIMIT) -> list[TrendingCollection]:
    return [
        TrendingCollection(
            name=c.name,
            address=c.address,
            volume_change=c.volume_change_24h,
            floor_change=c.floor_price_change_24h,
            volume_24h=c.volume_24h,
            floor_price=c.floor_price,
            holders=c.owner_count,
        )
        for c in collections[:limit]
    ]


def build_market_report(
    metrics: MarketMetrics,
    trending: Sequence[CollectionMetrics],
    time_range: str = "24h",
    category: str = "all",
    policy: SentimentPolicy = DEFAULT_POLICY.sentiment,
) -> MarketTrendReport:
    score = score_sentiment(metrics, policy)
    sentiment = classify_sentiment(score, policy)
    return MarketTrendReport(
        time_range=time_range,
        category=category,
        market_sentiment=sentiment,
        sentiment_score=score,
        market_metrics={
            "total_volume": metrics.volume_24h,
            "volume_change": metrics.volume_change_24h,
            "total_sales": metrics.sales_24h,
            "sales_change": metrics.sales_change_24h,
            "average_price": metrics.average_price,
            "average_price_change": metrics.average_price_change,
            "active_traders": metrics.active_wallets,
            "traders_change": metrics.active_wallets_change,
        },
        change_data_available=metrics.change_data_available,
        trending_collections=format_trending(trending),
        market_analysis=generate_market_analysis(metrics, sentiment),
        insights=generate_insights(metrics, trending, sentiment, policy),
        investment_opportunities=identify_opportunities(trending, metrics, policy),
    )
