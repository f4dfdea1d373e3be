"""
Unit tests for market sentiment, insights and opportunity screens
"""

import pytest

from conftest import make_collection, make_market
from nft_analytics.core.market import (
    aggregate_market_metrics,
    build_market_report,
    classify_sentiment,
    generate_insights,
    identify_opportunities,
    score_sentiment,
)
from nft_analytics.core.models import Sentiment


@pytest.mark.unit
class TestSentiment:

    def test_strong_rally_is_bullish(self):
        metrics = make_market(
            volume_change_24h=25.0,
            sales_change_24h=20.0,
            active_wallets_change=12.0,
            average_price_change=11.0,
        )
        assert score_sentiment(metrics) == 5
        assert classify_sentiment(5) is Sentiment.BULLISH

    def test_sell_off_is_bearish(self):
        metrics = make_market(
            volume_change_24h=-25.0,
            sales_change_24h=-20.0,
            active_wallets_change=-5.0,
        )
        assert score_sentiment(metrics) == -3
        assert classify_sentiment(-3) is Sentiment.BEARISH

    def test_flat_market_is_neutral(self):
        assert score_sentiment(make_market()) == 0
        assert classify_sentiment(2) is Sentiment.NEUTRAL
        assert classify_sentiment(-2) is Sentiment.NEUTRAL

    def test_small_volume_moves_count_one_step(self):
        assert score_sentiment(make_market(volume_change_24h=3.0)) == 1
        assert score_sentiment(make_market(volume_change_24h=-3.0)) == -1


@pytest.mark.unit
class TestInsights:

    def test_narrative_triggers(self):
        metrics = make_market(volume_change_24h=35.0, active_wallets_change=-25.0, average_price_change=20.0)
        trending = [make_collection(volume_change_24h=60.0), make_collection(volume_change_24h=10.0)]
        insights = generate_insights(metrics, trending, Sentiment.NEUTRAL)
        assert insights[0] == "Significant volume surge of 35.0% indicates increased market activity"
        assert insights[1] == "25.0% decrease in active traders indicates market cooling"
        assert insights[2] == "Rising average prices across the market suggest strong buying pressure"
        assert insights[3] == "1 collections showing explosive growth (>50% volume increase)"
        assert insights[-1] == "Market showing mixed signals - selective opportunities may exist"

    def test_unknown_change_data_is_called_out(self):
        metrics = make_market(change_data_available=False)
        insights = generate_insights(metrics, [], Sentiment.NEUTRAL)
        assert any("change data is unavailable" in line for line in insights)

    def test_bearish_closing_line(self):
        insights = generate_insights(make_market(), [], Sentiment.BEARISH)
        assert insights == ["Market sentiment is bearish - consider defensive strategies"]


@pytest.mark.unit
class TestOpportunities:

    def test_fallback_advice_when_nothing_matches(self):
        opportunities = identify_opportunities([], make_market())
        assert opportunities == [
            "Market conditions suggest patience and selective positioning",
            "Focus on collections with strong fundamentals and growing communities",
        ]

    def test_undervalued_and_below_average(self):
        trending = [
            make_collection(name="Quiet Gem", volume_change_24h=30.0, floor_price_change_24h=1.0, owner_count=1500),
            make_collection(name="Cheap Crowd", owner_count=2500, floor_price=50.0),
        ]
        opportunities = identify_opportunities(trending, make_market(average_price=500.0))
        assert opportunities[0].startswith("Quiet Gem showing strong volume growth")
        assert opportunities[1].startswith("Collections with growing holder bases")
        assert len(opportunities) == 2

    def test_downturn_beats_momentum(self):
        metrics = make_market(volume_change_24h=-30.0, average_price_change=-20.0)
        opportunities = identify_opportunities([], metrics)
        assert opportunities == ["Market downturn may present buying opportunities for quality collections"]

    def test_momentum(self):
        metrics = make_market(volume_change_24h=40.0, active_wallets_change=25.0)
        opportunities = identify_opportunities([], metrics)
        assert opportunities == ["Strong market momentum - consider taking profits on overextended positions"]


@pytest.mark.unit
class TestMarketReport:

    def test_aggregate_from_collections(self):
        collections = [
            make_collection(volume_24h=1000.0, sales_24h=10, owner_count=300),
            make_collection(volume_24h=3000.0, sales_24h=30, owner_count=500),
        ]
        metrics = aggregate_market_metrics(collections)
        assert metrics.volume_24h == 4000.0
        assert metrics.sales_24h == 40
        assert metrics.average_price == 100.0
        assert metrics.active_wallets == 400
        assert metrics.change_data_available is False
        assert metrics.volume_change_24h == 0.0

    def test_aggregate_without_sales(self):
        metrics = aggregate_market_metrics([make_collection(sales_24h=0)])
        assert metrics.average_price == 0.0

    def test_report_limits_trending_to_five(self):
        trending = [make_collection(name=f"C{i}") for i in range(8)]
        report = build_market_report(make_market(), trending, time_range="7d", category="pfp")
        assert [t.name for t in report.trending_collections] == ["C0", "C1", "C2", "C3", "C4"]
        assert report.time_range == "7d"
        assert report.category == "pfp"
        assert report.market_sentiment is Sentiment.NEUTRAL
        assert report.market_analysis.startswith("The NFT market is currently showing neutral sentiment.")

    def test_report_without_change_data(self):
        report = build_market_report(make_market(change_data_available=False), [])
        assert report.change_data_available is False
        assert "no prior-period comparison is available" in report.market_analysis
