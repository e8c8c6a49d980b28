"""MCP tool definitions for PingCode.

This module provides the definitive list of tools exposed by the server.
"""

from mcp.types import Tool


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for PingCode work items."""
    return [
        # ============================================================================
        # Session Tools
        # ============================================================================
        Tool(
            name="login",
            description="Save a PingCode browser session so other tools can call the API. "
                       "Copy the Cookie request header from any logged-in PingCode page "
                       "(browser dev tools → Network) and pass it as `cookie`.",
            inputSchema={
                "type": "object",
                "properties": {
                    "cookie": {
                        "type": "string",
                        "description": "Cookie header value, e.g. 'sid=...; pc_token=...'"
                    },
                    "user_id": {
                        "type": "string",
                        "description": "Optional member uid of the logged-in user (marks your items with (me))"
                    },
                    "user_name": {
                        "type": "string",
                        "description": "Optional display name of the logged-in user"
                    }
                },
                "required": ["cookie"]
            }
        ),
        Tool(
            name="logout",
            description="Log out of PingCode by deleting the locally stored credentials.",
            inputSchema={"type": "object", "properties": {}}
        ),
        Tool(
            name="check_auth",
            description="Check whether valid PingCode credentials are stored.",
            inputSchema={"type": "object", "properties": {}}
        ),
        # ============================================================================
        # Work Item Tools
        # ============================================================================
        Tool(
            name="get_work_item",
            description="Get a PingCode work item by identifier. "
                       "Accepted formats: #12345, 12345, LFY-123. "
                       "The response carries single-task workflow directives that must be followed.",
            inputSchema={
                "type": "object",
                "properties": {
                    "identifier": {
                        "type": "string",
                        "description": "Work item identifier, e.g. #12345, 12345 or LFY-123"
                    }
                },
                "required": ["identifier"]
            }
        ),
        Tool(
            name="search_work_items",
            description="Search PingCode work items by keyword.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search keywords"
                    },
                    "project_id": {
                        "type": "string",
                        "description": "Optional project to limit the search to"
                    }
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="update_work_item_state",
            description="Update the state of a work item (bug, requirement, task) by state name. "
                       "Errors list the available states when the name does not match.",
            inputSchema={
                "type": "object",
                "properties": {
                    "work_item_id": {
                        "type": "string",
                        "description": "Work item identifier, e.g. LFY-2527"
                    },
                    "state_name": {
                        "type": "string",
                        "description": "Target state name, e.g. 'done', 'in progress'"
                    }
                },
                "required": ["work_item_id", "state_name"]
            }
        ),
        # ============================================================================
        # Project and Release Tools
        # ============================================================================
        Tool(
            name="list_projects",
            description="List all projects you can access, with identifiers and names.",
            inputSchema={"type": "object", "properties": {}}
        ),
        Tool(
            name="list_releases",
            description="List the releases of a project with their names and IDs.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project_id": {
                        "type": "string",
                        "description": "Project identifier, e.g. LFY"
                    }
                },
                "required": ["project_id"]
            }
        ),
        Tool(
            name="get_release_items",
            description="List the bugs and requirements linked to a release. "
                       "Common pattern: list_releases(project_id) → pick a release ID → get_release_items().",
            inputSchema={
                "type": "object",
                "properties": {
                    "release_id": {
                        "type": "string",
                        "description": "Release ID (from list_releases or the release page URL)"
                    },
                    "project_id": {
                        "type": "string",
                        "description": "Project identifier, e.g. LFY"
                    },
                    "item_type": {
                        "type": "string",
                        "enum": ["bug", "story", "all"],
                        "description": "Filter: bug, story or all (default)"
                    }
                },
                "required": ["release_id", "project_id"]
            }
        ),
    ]
