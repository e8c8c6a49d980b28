"""PingCode MCP Server - Model Context Protocol integration.

This package exposes PingCode work items, projects and releases to AI
assistants over MCP.

Modules:
- server: stdio MCP server implementation
- config: settings from defaults, YAML file and environment
- credentials: stored browser session cookies
- api_client: async PingCode API client
- formatters: list response formatting
- tools: MCP tool definitions
- handlers: tool implementation handlers
"""

__version__ = "1.0.0"
