"""Integration tests for the Solana MCP server.

Integration tests drive the HTTP application through its routes with fake
custody wallets and a mock RPC node.

Run with: pytest tests/integration/ -v -m integration
"""
