"""MCP server core for RIPEstat data: JSON-RPC handling, tool catalogue and data-call clients."""

__version__ = "0.1.0"