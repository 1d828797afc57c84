"""Storefront MCP Server - browse a product catalog and manage a local cart."""

__version__ = "0.1.0"
