"""
Unit tests for wallet risk scoring
"""

import pytest

from conftest import make_wallet
from nft_analytics.core.models import WalletRiskFlag, WalletRiskLevel, WalletType
from nft_analytics.core.scoring import classify_wallet_risk, classify_wallet_type, profit_loss_ratio, score_wallet_risk


@pytest.mark.unit
class TestWalletRisk:

    def test_clean_wallet(self):
        profile = make_wallet(nft_count=12, collection_count=4, total_value=8000.0, realized_gains=3000.0)
        result = score_wallet_risk(profile)
        assert result.risk_score == 0
        assert result.risk_level is WalletRiskLevel.MINIMAL
        assert result.red_flags == []
        assert result.wallet_type is WalletType.REGULAR
        assert result.holdings_summary.total_nfts == 12
        assert "This wallet appears safe for normal trading" in result.recommendations

    def test_high_risk_wallet(self):
        profile = make_wallet(washtrade_score=60.0, realized_losses=20000.0, realized_gains=1000.0, nft_count=5)
        result = score_wallet_risk(profile)
        assert result.risk_score == 55
        assert result.red_flags == [WalletRiskFlag.HIGH_WASH_TRADING_ACTIVITY, WalletRiskFlag.POOR_TRADING_PERFORMANCE]
        assert result.risk_level is WalletRiskLevel.MODERATE

    def test_score_75_is_high(self):
        profile = make_wallet(
            washtrade_score=60.0,
            realized_losses=20000.0,
            collection_count=1,
            nft_count=25,
        )
        result = score_wallet_risk(profile)
        # 40 + 15 + 20
        assert result.risk_score == 75
        assert result.risk_level is WalletRiskLevel.HIGH
        assert WalletRiskFlag.HIGHLY_CONCENTRATED_PORTFOLIO in result.red_flags
        assert "Exercise extreme caution when trading with this wallet" in result.recommendations

    def test_moderate_wash_and_inconsistent_data(self):
        profile = make_wallet(washtrade_score=25.0, nft_count=0, total_value=5000.0)
        result = score_wallet_risk(profile)
        assert result.risk_score == 35
        assert result.red_flags == [
            WalletRiskFlag.MODERATE_WASH_TRADING_ACTIVITY,
            WalletRiskFlag.INCONSISTENT_PORTFOLIO_DATA,
        ]
        assert result.risk_level is WalletRiskLevel.LOW
        assert result.holdings_summary is None

    def test_poor_performance_needs_material_losses(self):
        profile = make_wallet(realized_gains=0.0, realized_losses=5000.0)
        assert score_wallet_risk(profile).risk_score == 0

    def test_whale_wins_over_shark(self):
        profile = make_wallet(is_whale=True, is_shark=True)
        assert classify_wallet_type(profile) is WalletType.WHALE
        result = score_wallet_risk(profile)
        assert "Monitor this whale's movements as they can impact market prices" in result.recommendations
        assert "As a whale wallet" in result.analysis

    def test_holdings_can_be_excluded(self):
        profile = make_wallet(nft_count=3, collection_count=2)
        assert score_wallet_risk(profile, include_holdings=False).holdings_summary is None

    def test_profit_loss_ratio_avoids_division_by_zero(self):
        assert profit_loss_ratio(make_wallet(realized_gains=500.0)) == 500.0

    @pytest.mark.parametrize("score, expected", [
        (70, WalletRiskLevel.HIGH),
        (69, WalletRiskLevel.MODERATE),
        (40, WalletRiskLevel.MODERATE),
        (39, WalletRiskLevel.LOW),
        (20, WalletRiskLevel.LOW),
        (19, WalletRiskLevel.MINIMAL),
    ])
    def test_level_boundaries(self, score, expected):
        assert classify_wallet_risk(score) is expected
