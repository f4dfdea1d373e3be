"""Core business logic — scoring, advice, upstream client, and data models.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or any server framework; the tool adapter in ``nft_analytics.server`` is a
thin layer over it.
"""
