"""NFT Analytics MCP Server.

FastMCP server exposing six read-only NFT analytics tools backed by the
UnleashNFTs API. Run: nft-analytics-mcp
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import BaseModel

from . import config
from .core.advisor import advise_collection, advise_portfolio
from .core.clients import unleash
from .core.errors import ConfigurationError, NFTAnalyticsError, NotFoundError, UpstreamError
from .core.market import build_market_report
from .core.models import CollectionMetrics, WashTradingMetrics
from .core.scoring import assess_wash_trading, score_collection_risk, score_wallet_risk
from .core.validation import (
    parse_advice_risk_tolerance,
    parse_investment_horizon,
    parse_risk_tolerance,
    resolve_blockchain,
    validate_budget,
    validate_collection_address,
    validate_time_range,
    validate_wallet_address,
)

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

TRANSPORTS = ("stdio", "sse", "streamable-http")
MARKET_TRENDING_LIMIT = 10
ADVICE_CANDIDATE_LIMIT = 20


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging and warn early when the API key is missing."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        config.get_api_key()
    except ConfigurationError as exc:
        logger.warning("%s Tools will return configuration errors until it is set.", exc)
    yield


mcp = FastMCP(
    "NFT Analytics",
    instructions="Analyze NFT collections for safety, detect wash trading, check wallet risk, read market trends, and get investment advice. Data from the UnleashNFTs API.",
    lifespan=lifespan,
)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _success(result: BaseModel, **extra: Any) -> dict:
    payload = {"is_error": False}
    payload.update(result.model_dump(mode="json"))
    payload.update(extra)
    payload["analysis_timestamp"] = _timestamp()
    return payload


def _failure(headline: str, exc: Exception, **context: Any) -> dict:
    """Shape an exception into the tool error payload. Unknown errors are logged with traceback."""
    if isinstance(exc, NFTAnalyticsError):
        error_type = exc.error_type
        logger.warning("%s (%s): %s", headline, error_type, exc)
    else:
        error_type = "internal"
        logger.exception("%s: unexpected error", headline)
    return {
        "is_error": True,
        "error_type": error_type,
        "error": headline,
        "message": str(exc) or exc.__class__.__name__,
        **context,
    }


async def _optional_wash_trading(
    address: str, api_key: str, blockchain: str, time_range: str = "7d"
) -> Optional[WashTradingMetrics]:
    """Wash trading figures, or None when upstream cannot provide them."""
    try:
        return await unleash.fetch_wash_trading(address, api_key, blockchain, time_range)
    except (NotFoundError, UpstreamError) as exc:
        logger.warning("Wash trading data unavailable for %s: %s", address, exc)
        return None


async def _optional_collection(address: str, api_key: str, blockchain: str) -> Optional[CollectionMetrics]:
    try:
        return await unleash.fetch_collection(address, api_key, blockchain)
    except (NotFoundError, UpstreamError) as exc:
        logger.warning("Collection details unavailable for %s: %s", address, exc)
        return None


# ─── Tool 1: Collection Safety ───────────────────────────────────────────────


@mcp.tool(name="analyzeCollection", annotations=READ_ONLY)
async def analyze_collection(collection_address: str, blockchain: str = "ethereum") -> dict:
    """Analyze an NFT collection for safety, metrics, and risks.

    Args:
        collection_address: The NFT collection contract address.
        blockchain: ethereum, polygon, bsc, arbitrum or optimism. Default 'ethereum'.
    """
    context = {"collection_address": collection_address, "blockchain": blockchain}
    try:
        address = validate_collection_address(collection_address)
        resolve_blockchain(blockchain)
        api_key = config.get_api_key()
        logger.info("Analyzing collection %s on %s", address, blockchain)

        collection, wash_trading = await asyncio.gather(
            unleash.fetch_collection(address, api_key, blockchain),
            _optional_wash_trading(address, api_key, blockchain),
        )
        assessment = score_collection_risk(collection, wash_trading)
        logger.info("Collection %s safety score %d", address, assessment.safety_score)
        return _success(assessment, blockchain=blockchain)
    except NotFoundError as exc:
        return _failure("Collection not found", exc, **context)
    except Exception as exc:
        return _failure("Failed to analyze collection", exc, **context)


# ─── Tool 2: Wash Trading ────────────────────────────────────────────────────


@mcp.tool(name="detectWashTrading", annotations=READ_ONLY)
async def detect_wash_trading(collection_address: str, time_range: str = "7d", blockchain: str = "ethereum") -> dict:
    """Detect wash trading activity in an NFT collection.

    Pattern counts in the evidence block are estimates derived from total
    suspect sales, not measured per pattern.

    Args:
        collection_address: The NFT collection contract address.
        time_range: 24h, 7d or 30d. Default '7d'.
        blockchain: ethereum, polygon, bsc, arbitrum or optimism. Default 'ethereum'.
    """
    context = {"collection_address": collection_address, "time_range": time_range, "blockchain": blockchain}
    try:
        address = validate_collection_address(collection_address)
        window = validate_time_range(time_range).value
        resolve_blockchain(blockchain)
        api_key = config.get_api_key()
        logger.info("Detecting wash trading for %s on %s (%s)", address, blockchain, window)

        wash_trading, collection = await asyncio.gather(
            unleash.fetch_wash_trading(address, api_key, blockchain, window),
            _optional_collection(address, api_key, blockchain),
        )
        assessment = assess_wash_trading(
            wash_trading,
            contract_address=address,
            collection_name=collection.name if collection else None,
            time_range=window,
        )
        logger.info("Wash trading severity for %s: %s", address, assessment.severity.value)
        return _success(assessment, blockchain=blockchain)
    except NotFoundError as exc:
        return _failure("Unable to fetch wash trading data", exc, **context)
    except Exception as exc:
        return _failure("Failed to detect wash trading", exc, **context)


# ─── Tool 3: Market Trends ───────────────────────────────────────────────────


@mcp.tool(name="getMarketTrends", annotations=READ_ONLY)
async def get_market_trends(time_range: str = "24h", category: str = "all") -> dict:
    """Current NFT market trends — sentiment, metrics, trending collections, insights and opportunities.

    Args:
        time_range: 24h, 7d or 30d. Default '24h'.
        category: Category label echoed in the response (all, pfp, gaming, art). Default 'all'.
    """
    context = {"time_range": time_range, "category": category}
    try:
        window = validate_time_range(time_range).value
        api_key = config.get_api_key()
        logger.info("Fetching market trends (%s, %s)", window, category)

        market, trending = await asyncio.gather(
            unleash.fetch_market_metrics(api_key, window),
            unleash.fetch_trending_collections(api_key, MARKET_TRENDING_LIMIT, time_range=window),
        )
        report = build_market_report(market, trending, time_range=window, category=category)
        logger.info("Market sentiment: %s (score %d)", report.market_sentiment.value, report.sentiment_score)
        return _success(report)
    except NotFoundError as exc:
        return _failure("Unable to fetch market metrics", exc, **context)
    except Exception as exc:
        return _failure("Failed to get market trends", exc, **context)


# ─── Tool 4: Wallet Risk ─────────────────────────────────────────────────────


@mcp.tool(name="checkWalletRisk", annotations=READ_ONLY)
async def check_wallet_risk(wallet_address: str, include_holdings: bool = True, blockchain: str = "ethereum") -> dict:
    """Analyze a wallet address for risk factors and trading patterns.

    Args:
        wallet_address: 0x-prefixed 40 hex character wallet address.
        include_holdings: Include a holdings summary. Default True.
        blockchain: ethereum, polygon, bsc, arbitrum or optimism. Default 'ethereum'.
    """
    context = {"wallet_address": wallet_address, "blockchain": blockchain}
    try:
        address = validate_wallet_address(wallet_address)
        resolve_blockchain(blockchain)
        api_key = config.get_api_key()
        logger.info("Checking wallet risk for %s on %s", address, blockchain)

        profile = await unleash.fetch_wallet_profile(address, api_key, blockchain)
        assessment = score_wallet_risk(profile, include_holdings=include_holdings)
        logger.info("Wallet %s risk %s (%d)", address, assessment.risk_level.value, assessment.risk_score)
        return _success(assessment, blockchain=blockchain)
    except NotFoundError as exc:
        return _failure("Unable to fetch wallet profile", exc, **context)
    except Exception as exc:
        return _failure("Failed to check wallet risk", exc, **context)


# ─── Tool 5: Portfolio Advice ────────────────────────────────────────────────


@mcp.tool(name="getInvestmentAdvice", annotations=READ_ONLY)
async def get_investment_advice(
    budget: float,
    risk_tolerance: str,
    investment_horizon: str,
    categories: Optional[list[str]] = None,
) -> dict:
    """Build a diversified NFT portfolio for a budget, risk tolerance and horizon.

    Args:
        budget: Investment budget in USD.
        risk_tolerance: conservative, moderate or aggressive.
        investment_horizon: short (< 3 months), medium (3-12 months) or long (> 12 months).
        categories: Preferred categories (e.g. ['pfp', 'gaming', 'art']), echoed in the response.
    """
    context = {"budget": budget, "risk_tolerance": risk_tolerance, "investment_horizon": investment_horizon}
    try:
        amount = validate_budget(budget)
        tolerance = parse_risk_tolerance(risk_tolerance)
        horizon = parse_investment_horizon(investment_horizon)
        api_key = config.get_api_key()
        logger.info("Generating portfolio advice (budget=%.2f, %s, %s)", amount, tolerance.value, horizon.value)

        market, candidates = await asyncio.gather(
            unleash.fetch_market_metrics(api_key, "24h"),
            unleash.fetch_trending_collections(api_key, ADVICE_CANDIDATE_LIMIT),
        )
        advice = advise_portfolio(market, candidates, amount, tolerance, horizon, categories)
        logger.info("Portfolio advice: %d positions", advice.portfolio_metrics.total_positions)
        return _success(advice)
    except NotFoundError as exc:
        return _failure("Unable to fetch market data for analysis", exc, **context)
    except Exception as exc:
        return _failure("Failed to generate investment advice", exc, **context)


# ─── Tool 6: Single-Collection Advice ────────────────────────────────────────


@mcp.tool(name="getCollectionAdvice", annotations=READ_ONLY)
async def get_collection_advice(
    collection_address: str,
    blockchain: str = "ethereum",
    investment_amount: Optional[float] = None,
    risk_tolerance: str = "medium",
) -> dict:
    """BUY/SELL style advice for a single NFT collection.

    Args:
        collection_address: The NFT collection contract address.
        blockchain: ethereum, polygon, bsc, arbitrum or optimism. Default 'ethereum'.
        investment_amount: Planned investment amount in USD, echoed in the response.
        risk_tolerance: low, medium or high. Default 'medium'.
    """
    context = {"collection_address": collection_address, "blockchain": blockchain}
    try:
        address = validate_collection_address(collection_address)
        tolerance = parse_advice_risk_tolerance(risk_tolerance)
        resolve_blockchain(blockchain)
        api_key = config.get_api_key()
        logger.info("Generating collection advice for %s on %s (%s)", address, blockchain, tolerance.value)

        collection, wash_trading = await asyncio.gather(
            unleash.fetch_collection(address, api_key, blockchain),
            _optional_wash_trading(address, api_key, blockchain),
        )
        advice = advise_collection(collection, wash_trading, tolerance, investment_amount)
        logger.info("Collection advice for %s: %s (%d)", address, advice.recommendation.value, advice.confidence_score)
        return _success(advice, blockchain=blockchain)
    except NotFoundError as exc:
        return _failure("Collection not found", exc, **context)
    except Exception as exc:
        return _failure("Failed to generate investment advice", exc, **context)


def main():
    """Entry point for the CLI command."""
    transport = config.get_transport()
    if transport not in TRANSPORTS:
        raise SystemExit(f"Unsupported MCP_TRANSPORT {transport!r}. Use one of: {', '.join(TRANSPORTS)}")
    if transport != "stdio":
        mcp.settings.port = config.get_http_port()
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
