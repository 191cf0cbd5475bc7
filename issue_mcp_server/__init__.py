"""
Issue MCP Server - exposes watched repositories and issue filtering/export
over the MCP protocol.
"""
