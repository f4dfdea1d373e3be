"""NFT Analytics MCP Server.

Ask your AI about NFT collections — safety scores, wash trading, wallet risk,
market sentiment and portfolio advice, from UnleashNFTs market data.
"""

__version__ = "0.1.0"
