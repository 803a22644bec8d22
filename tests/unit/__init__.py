"""Unit tests for the Solana MCP server.

Unit tests verify individual components in isolation using fakes and
mock HTTP transports. No custody backend or Solana node is required.

Run with: pytest tests/unit/ -v
"""
