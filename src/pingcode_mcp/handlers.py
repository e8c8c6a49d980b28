"""MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: arguments dict, PingCodeClient and the server Settings
- Return: list[TextContent]
- Raise PingCodeError subclasses for user-facing failures; the server turns
  them into error responses
- Log all operations for debugging
"""
import json
import logging
import time
from typing import Optional

from mcp.types import TextContent

from pingcode_core.directives import present

from . import formatters
from .api_client import PingCodeClient, PingCodeError, PingCodeNotFoundError
from .config import Settings
from .credentials import Credentials, CredentialStore, CurrentUser, parse_cookie_header

logger = logging.getLogger("pingcode-mcp.handlers")


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


# ============================================================================
# Session Handlers
# ============================================================================

async def handle_login(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Store a browser session cookie header as credentials."""
    cookies = parse_cookie_header(arguments.get("cookie", ""), settings.domain)
    user = None
    if arguments.get("user_id"):
        user = CurrentUser(id=arguments["user_id"], name=arguments.get("user_name") or arguments["user_id"])

    credentials = Credentials(
        cookies=cookies,
        domain=settings.domain,
        saved_at=int(time.time() * 1000),
        user=user,
    )
    if not credentials.is_valid():
        raise PingCodeError(
            "The cookie header does not contain a PingCode session cookie "
            "(expected a name containing 'pingcode', 'session' or 'token')."
        )

    CredentialStore(settings.credentials_path).save(credentials)
    client.credentials = credentials
    logger.info(f"Stored {len(cookies)} cookies for {settings.domain}")
    return _text(f"Logged in to {settings.domain}. Credentials saved to {settings.credentials_path}")


async def handle_logout(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Delete stored credentials."""
    removed = CredentialStore(settings.credentials_path).clear()
    client.credentials = None
    if not removed:
        return _text("Not logged in; no stored credentials to remove.")
    return _text("Logged out. Stored credentials were removed.")


async def handle_check_auth(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Report whether valid credentials are stored."""
    if not client.is_authenticated():
        raise PingCodeError(f"Not logged in to {settings.domain}. Call the login tool first.")

    text = f"Logged in to {settings.domain}."
    if client.credentials.expires_at:
        expires = time.strftime("%Y-%m-%d %H:%M", time.localtime(client.credentials.expires_at / 1000))
        text += f"\nCredentials expire at: {expires}"
    if client.credentials.user:
        text += f"\nUser: {client.credentials.user.name}"
    return _text(text)


# ============================================================================
# Work Item Handlers
# ============================================================================

async def handle_get_work_item(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Get a work item rendered as markdown with workflow directives.

    Returns two text blocks: the markdown document, and a JSON block with
    ``work_item``, ``ai_directives`` and ``next_required_action`` for
    clients that gate on structured data.
    """
    identifier = arguments["identifier"]
    item = await client.get_work_item_with_details(identifier)
    if item is None:
        raise PingCodeNotFoundError(f"Work item {identifier} not found")

    presentation = present(item, tz=settings.tzinfo())
    logger.info(f"Retrieved work item {presentation.record.id.value}: {presentation.record.title.value}")

    structured = {
        "work_item": presentation.record.model_dump(mode="json"),
        "ai_directives": presentation.directives.model_dump(mode="json"),
        "next_required_action": presentation.next_action.model_dump(mode="json"),
    }
    return [
        TextContent(type="text", text=presentation.markdown),
        TextContent(type="text", text=json.dumps(structured, ensure_ascii=False, indent=2)),
    ]


async def handle_search_work_items(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Search work items by keyword."""
    query = arguments["query"]
    items = await client.search_work_items(query, arguments.get("project_id"))
    logger.info(f"Search for {query!r} returned {len(items)} work items")

    if not items:
        return _text(f'No work items found matching "{query}"')
    return _text(formatters.format_search_results(query, items))


def find_state(states: list[dict], state_name: str) -> Optional[dict]:
    """Pick a state by exact name, then by substring of name or display name."""
    wanted = state_name.strip().lower()
    for state in states:
        names = [str(state.get(k) or "").lower() for k in ("name", "display_name")]
        if wanted in names:
            return state
    for state in states:
        names = [str(state.get(k) or "").lower() for k in ("name", "display_name")]
        if any(wanted and wanted in name for name in names):
            return state
    return None


async def handle_update_work_item_state(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """Move a work item to the state with the given name."""
    work_item_id = arguments["work_item_id"]
    state_name = arguments["state_name"]

    states = await client.get_selectable_states(work_item_id)
    if not states:
        raise PingCodeError(f"Work item {work_item_id} has no selectable states")

    target = find_state(states, state_name)
    if target is None:
        available = ", ".join(str(s.get("display_name") or s.get("name")) for s in states)
        raise PingCodeError(f'No state named "{state_name}". Available states: {available}')

    await client.update_work_item_state(work_item_id, target["_id"])
    label = target.get("display_name") or target.get("name")
    return _text(f'✅ Work item {work_item_id} moved to "{label}"')


# ============================================================================
# Project and Release Handlers
# ============================================================================

async def handle_list_projects(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """List accessible projects."""
    projects = await client.get_projects()
    logger.info(f"Listed {len(projects)} projects")
    if not projects:
        return _text("No accessible projects.")
    return _text(formatters.format_projects(projects))


async def handle_list_releases(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """List the releases of a project."""
    project_id = arguments["project_id"]
    releases = await client.get_project_releases(project_id)
    logger.info(f"Listed {len(releases)} releases of project {project_id}")
    if not releases:
        return _text(f"Project {project_id} has no releases.")
    return _text(formatters.format_releases(project_id, releases))


async def handle_get_release_items(
    arguments: dict,
    client: PingCodeClient,
    settings: Settings
) -> list[TextContent]:
    """List the work items of a release grouped by type."""
    release_id = arguments["release_id"]
    project_id = arguments["project_id"]
    items = await client.get_release_work_items(release_id, project_id, arguments.get("item_type"))
    logger.info(f"Release {release_id} has {len(items)} work items")

    if not items:
        return _text("This release has no linked work items.")

    members = await client.get_project_members(project_id)
    user = client.current_user()
    current_user_id = user["id"] if user else None
    return _text(formatters.format_release_items(items, members, current_user_id))

