"""
Shared builders for NFT analytics tests. Nothing here touches the network.
"""

from __future__ import annotations

import pytest

from nft_analytics.core.models import CollectionMetrics, MarketMetrics, WalletProfile, WashTradingMetrics

WALLET = "0x" + "ab" * 20
CONTRACT = "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"


def make_collection(**overrides) -> CollectionMetrics:
    """A healthy collection: many holders, steady volume and floor."""
    fields = {
        "address": CONTRACT,
        "name": "Test Apes",
        "owner_count": 5500,
        "nft_count": 10000,
        "volume_24h": 250000.0,
        "floor_price": 100.0,
        "average_price_24h": 120.0,
        "sales_24h": 150,
        "volume_change_24h": 5.0,
        "floor_price_change_24h": 2.0,
        "market_cap": 1_000_000.0,
    }
    fields.update(overrides)
    return CollectionMetrics(**fields)


def make_wash(**overrides) -> WashTradingMetrics:
    fields = {
        "wash_trading_volume": 0.0,
        "total_volume": 100000.0,
        "wash_trading_percentage": 0.0,
        "wash_trading_sales": 0,
        "total_sales": 200,
    }
    fields.update(overrides)
    return WashTradingMetrics(**fields)


def make_market(**overrides) -> MarketMetrics:
    fields = {
        "volume_24h": 5_000_000.0,
        "sales_24h": 10000,
        "average_price": 500.0,
        "active_wallets": 8000,
    }
    fields.update(overrides)
    return MarketMetrics(**fields)


def make_wallet(**overrides) -> WalletProfile:
    fields = {"address": WALLET}
    fields.update(overrides)
    return WalletProfile(**fields)


@pytest.fixture
def healthy_collection():
    return make_collection()


@pytest.fixture
def api_key(monkeypatch):
    """Set a dummy API key for tool tests."""
    monkeypatch.delenv("UNLEASH_NFTS_API_KEY", raising=False)
    monkeypatch.setenv("UNLEASH_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("UNLEASH_API_KEY", raising=False)
    monkeypatch.delenv("UNLEASH_NFTS_API_KEY", raising=False)
