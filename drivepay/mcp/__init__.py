"""drivepay MCP server."""
