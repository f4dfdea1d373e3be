"""UnleashNFTs (v1) analytics API client.

API docs: https://docs.unleashnfts.com/
Authentication: ``x-api-key`` header. Numeric metrics come back as
``{"value": ...}`` objects, with ``"NA"`` for values not yet computed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Optional

import httpx

from ..errors import NotFoundError, UpstreamError
from ..market import aggregate_market_metrics
from ..models import CollectionMetrics, MarketMetrics, WalletProfile, WashTradingMetrics
from ..normalize import metric_value, to_float, to_int
from ..validation import resolve_chain_id

logger = logging.getLogger(__name__)

API_BASE = "https://api.unleashnfts.com/api/v1"
DEFAULT_TIMEOUT = 30.0

COLLECTION_METRICS = [
    "volume", "sales", "floor_price", "holders", "price_avg", "marketcap",
    "volume_change", "sales_change", "floor_price_change", "price_avg_change",
]
WASH_TRADING_METRICS = [
    "washtrade_wallets", "washtrade_assets", "washtrade_suspect_sales",
    "washtrade_volume", "washtrade_suspect_sales_change", "volume", "sales",
]
MARKET_SAMPLE_SIZE = 50


def _build_client(api_key: str) -> httpx.AsyncClient:
    timeout = float(os.environ.get("UNLEASH_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT)))
    return httpx.AsyncClient(
        base_url=os.environ.get("UNLEASH_API_URL", API_BASE).rstrip("/"),
        headers={"accept": "application/json", "x-api-key": api_key},
        timeout=httpx.Timeout(timeout, connect=10.0),
    )


async def _get_json(path: str, api_key: str, params: Optional[dict] = None) -> Any:
    """GET a JSON document, mapping failures onto the error taxonomy."""
    async with _build_client(api_key) as client:
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise NotFoundError(f"No data found at {path}") from exc
            logger.warning("UnleashNFTs request %s failed with HTTP %d", path, status)
            raise UpstreamError(f"UnleashNFTs API returned HTTP {status} for {path}") from exc
        except httpx.TimeoutException as exc:
            logger.warning("UnleashNFTs request %s timed out: %s", path, exc)
            raise UpstreamError(f"UnleashNFTs API timed out for {path}") from exc
        except httpx.HTTPError as exc:
            logger.warning("UnleashNFTs request %s failed: %s", path, exc)
            raise UpstreamError(f"UnleashNFTs API request failed: {exc}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"UnleashNFTs API returned invalid JSON for {path}") from exc


def _parse_collection(address: str, name: Any, nft_count: Any, metrics: Any) -> CollectionMetrics:
    if not isinstance(metrics, dict):
        metrics = None
    market_cap = max(0.0, metric_value(metrics, "marketcap"))
    return CollectionMetrics(
        address=address,
        name=str(name) if name else "Unknown Collection",
        owner_count=max(0, int(metric_value(metrics, "holders"))),
        nft_count=max(0, to_int(nft_count)),
        volume_24h=max(0.0, metric_value(metrics, "volume")),
        floor_price=max(0.0, metric_value(metrics, "floor_price")),
        average_price_24h=max(0.0, metric_value(metrics, "price_avg")),
        sales_24h=max(0, int(metric_value(metrics, "sales"))),
        volume_change_24h=metric_value(metrics, "volume_change"),
        floor_price_change_24h=metric_value(metrics, "floor_price_change"),
        average_price_change_24h=metric_value(metrics, "price_avg_change"),
        sales_change_24h=metric_value(metrics, "sales_change"),
        market_cap=market_cap,
        fully_diluted_market_cap=market_cap,
    )


async def fetch_collection(address: str, api_key: str, blockchain: str = "ethereum") -> CollectionMetrics:
    """Fetch collection details and its metric bundle.

    Both requests are independent and run concurrently.
    """
    chain_id = resolve_chain_id(blockchain)
    detail, metrics = await asyncio.gather(
        _get_json(f"/collection/{chain_id}/{address}", api_key),
        _get_json(
            f"/collection/{chain_id}/{address}/metrics",
            api_key,
            {"metrics": ",".join(COLLECTION_METRICS)},
        ),
    )
    if not detail or not isinstance(detail, dict):
        raise NotFoundError(f"Collection {address} not found on {blockchain}")

    metric_values = metrics.get("metric_values") if isinstance(metrics, dict) else None
    return _parse_collection(address, detail.get("name"), detail.get("nft_count"), metric_values)


def _wash_trading_from_values(values: dict, as_of: Optional[str] = None) -> WashTradingMetrics:
    wash_volume = to_float(values.get("washtrade_volume"))
    total_volume = to_float(values.get("volume"))
    return WashTradingMetrics(
        wash_trading_volume=wash_volume,
        total_volume=total_volume,
        wash_trading_percentage=wash_volume / total_volume * 100 if total_volume > 0 else 0.0,
        wash_trading_sales=to_int(values.get("washtrade_suspect_sales")),
        total_sales=to_int(values.get("sales")),
        wash_trading_wallets=to_int(values.get("washtrade_wallets")),
        wash_trading_assets=to_int(values.get("washtrade_assets")),
        risk_score=to_float(values.get("washtrade_suspect_sales_change")),
        as_of=as_of,
    )


def parse_wash_trading(data: Any) -> WashTradingMetrics:
    """Pick the newest usable wash trading figures from a trend response.

    The first data point with a real ``washtrade_volume`` wins, then the
    ``metrics`` summary block, then all zeros.
    """
    if not isinstance(data, dict):
        return WashTradingMetrics()

    for point in data.get("data_points") or []:
        values = point.get("values") if isinstance(point, dict) else None
        if isinstance(values, dict) and values.get("washtrade_volume") not in (None, "NA"):
            date = point.get("date")
            return _wash_trading_from_values(values, str(date) if date is not None else None)

    summary = data.get("metrics")
    if isinstance(summary, dict) and summary:
        flattened = {name: metric.get("value") if isinstance(metric, dict) else None for name, metric in summary.items()}
        return _wash_trading_from_values(flattened)

    return WashTradingMetrics()


async def fetch_wash_trading(
    address: str,
    api_key: str,
    blockchain: str = "ethereum",
    time_range: str = "7d",
) -> WashTradingMetrics:
    chain_id = resolve_chain_id(blockchain)
    data = await _get_json(
        f"/collection/{chain_id}/{address}/trend",
        api_key,
        {
            "currency": "usd",
            "metrics": ",".join(WASH_TRADING_METRICS),
            "time_range": time_range,
            "include_washtrade": "true",
        },
    )
    return parse_wash_trading(data)


async def fetch_wallet_profile(address: str, api_key: str, blockchain: str = "ethereum") -> WalletProfile:
    chain_id = resolve_chain_id(blockchain)
    data = await _get_json(f"/wallet/{chain_id}/{address}/profile", api_key)
    if not data or not isinstance(data, dict):
        raise NotFoundError(f"Wallet {address} not found on {blockchain}")

    return WalletProfile(
        address=address,
        is_whale=bool(data.get("is_whale")),
        is_shark=bool(data.get("is_shark")),
        nft_count=to_int(data.get("nft_count")),
        collection_count=to_int(data.get("collection_count")),
        total_value=to_float(data.get("total_value")),
        realized_gains=to_float(data.get("realized_gains")),
        realized_losses=to_float(data.get("realized_losses")),
        washtrade_score=to_float(data.get("washtrade_score")),
    )


async def fetch_trending_collections(
    api_key: str,
    limit: int = 10,
    blockchain: str = "ethereum",
    sort_by: str = "volume",
    time_range: str = "24h",
) -> list[CollectionMetrics]:
    """Fetch collections ranked by ``sort_by``, highest first."""
    chain_id = resolve_chain_id(blockchain)
    data = await _get_json(
        "/collections",
        api_key,
        {
            "blockchain": chain_id,
            "metrics": ",".join(COLLECTION_METRICS),
            "sort_by": sort_by,
            "sort_order": "desc",
            "time_range": time_range,
            "offset": 0,
            "limit": limit,
        },
    )

    rows = data.get("collections") if isinstance(data, dict) else None
    collections = []
    for entry in rows or []:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed collection row: %r", entry)
            continue
        metadata = entry.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        collections.append(_parse_collection(
            str(metadata.get("contract_address") or ""),
            metadata.get("name"),
            metadata.get("nft_count"),
            entry.get("metric_values"),
        ))
    return collections


async def fetch_market_metrics(
    api_key: str,
    time_range: str = "24h",
    blockchain: str = "ethereum",
) -> MarketMetrics:
    """Market-wide figures aggregated from the top collections by volume.

    There is no dedicated market endpoint, so change fields are unknown.
    """
    collections = await fetch_trending_collections(api_key, MARKET_SAMPLE_SIZE, blockchain, time_range=time_range)
    if not collections:
        raise NotFoundError("No collections returned for market aggregation")
    return aggregate_market_metrics(collections)
