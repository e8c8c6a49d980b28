"""PingCode MCP Server - Expose PingCode work items to AI assistants."""
import sys
import asyncio
import logging
import traceback
from typing import Any

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    Tool,
    TextContent,
    ImageContent,
    EmbeddedResource,
)

from . import tools
from . import handlers
from .api_client import PingCodeClient, PingCodeError
from .config import load_settings
from .credentials import CredentialStore


settings = load_settings()

# Configure logging to stderr (stdout carries the MCP stream)
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("pingcode-mcp")

logger.info(f"MCP Server starting for {settings.base_url}")


# MCP Server instance
app = Server("pingcode-mcp")

handler_map = {
    # Session handlers
    "login": handlers.handle_login,
    "logout": handlers.handle_logout,
    "check_auth": handlers.handle_check_auth,
    # Work item handlers
    "get_work_item": handlers.handle_get_work_item,
    "search_work_items": handlers.handle_search_work_items,
    "update_work_item_state": handlers.handle_update_work_item_state,
    # Project and release handlers
    "list_projects": handlers.handle_list_projects,
    "list_releases": handlers.handle_list_releases,
    "get_release_items": handlers.handle_get_release_items,
}


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools for PingCode."""
    return tools.get_tools()


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent | ImageContent | EmbeddedResource]:
    """Handle MCP tool calls by delegating to the handlers module."""
    logger.info(f"Tool call: {name} with arguments: {_redact(arguments)}")

    handler = handler_map.get(name)
    if not handler:
        logger.warning(f"Unknown tool requested: {name}")
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    # Credentials are re-read on every call so login/logout from another
    # process take effect immediately
    credentials = CredentialStore(settings.credentials_path).load()

    async with httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=settings.timeout,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
    ) as http:
        client = PingCodeClient(http, credentials, default_project=settings.default_project)
        try:
            return await handler(dict(arguments or {}), client, settings)

        except PingCodeError as e:
            logger.warning(f"{name} failed: {e}")
            return [TextContent(type="text", text=f"Error: {e}")]

        except httpx.HTTPStatusError as e:
            # Log detailed HTTP error information
            logger.error(f"HTTP error during {name} call:")
            logger.error(f"  Status: {e.response.status_code}")
            logger.error(f"  URL: {e.request.url}")
            try:
                response_body = e.response.json()
                logger.error(f"  Response body: {response_body}")
                error_detail = response_body.get("message") or response_body.get("error") or str(e)
            except Exception:
                response_text = e.response.text
                logger.error(f"  Response text: {response_text}")
                error_detail = response_text or str(e)
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: {error_detail}")]

        except httpx.RequestError as e:
            # Network/connection errors
            logger.error(f"Request error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: Connection failed - {str(e)}")]

        except Exception as e:
            # Catch-all for unexpected errors
            logger.error(f"Unexpected error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback:\n{traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: {type(e).__name__}: {str(e)}")]


def _redact(arguments: Any) -> Any:
    if isinstance(arguments, dict) and "cookie" in arguments:
        return {**arguments, "cookie": "***"}
    return arguments


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
