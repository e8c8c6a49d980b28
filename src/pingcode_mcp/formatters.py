"""Shared formatting functions for MCP list responses.

Single work items go through the full ``pingcode_core`` pipeline; the
compact list views below only need a few fields per item.
"""
from typing import Mapping, Optional

from pingcode_core.fields import format_identifier, format_state, format_type
from pingcode_core.models import RELEASE_STATES, UNASSIGNED, UNKNOWN


def format_assignee(item: dict, members: Mapping[str, str], current_user_id: Optional[str] = None) -> str:
    """Resolve an assignee id to a name, marking the current user with (me)."""
    assignee = item.get("assignee")
    if isinstance(assignee, dict):
        assignee_id = assignee.get("_id") or assignee.get("id")
    else:
        assignee_id = assignee
    if not assignee_id:
        return UNASSIGNED
    name = members.get(assignee_id, UNKNOWN)
    return f"{name}(me)" if current_user_id and assignee_id == current_user_id else name


def format_release_item(item: dict, members: Mapping[str, str], current_user_id: Optional[str] = None) -> str:
    """Format a release work item as a one-liner."""
    return (f"- **{format_identifier(item)}** {item.get('title', '')} | "
            f"{format_state(item)} | {format_assignee(item, members, current_user_id)}")


def format_release_items(
    items: list[dict],
    members: Mapping[str, str],
    current_user_id: Optional[str] = None,
) -> str:
    """Format release work items grouped into bugs, requirements and others."""
    bugs = [i for i in items if i.get("type") == 5]
    stories = [i for i in items if i.get("type") in (2, 3)]
    others = [i for i in items if i.get("type") not in (2, 3, 5)]

    lines = ["# Release work items", "", f"{len(items)} items in total"]
    for heading, group in (("Bugs", bugs), ("Requirements", stories), ("Others", others)):
        if group:
            lines.extend(["", f"## {heading} ({len(group)})", ""])
            lines.extend(format_release_item(i, members, current_user_id) for i in group)
    return "\n".join(lines)


def format_search_results(query: str, items: list[dict]) -> str:
    lines = [f'# Search results: "{query}"', "", f"{len(items)} items found", ""]
    for item in items:
        identifier = format_identifier(item) or item.get("identifier", "")
        lines.extend([
            f"- **{identifier}** {item.get('title', '')}",
            f"  - Type: {format_type(item)} | State: {format_state(item)}",
            "",
        ])
    return "\n".join(lines)


def format_release(release: dict) -> str:
    state = release.get("state")
    status = RELEASE_STATES.get(state, "") if isinstance(state, int) else ""
    return f"- **{release.get('name', '')}** (ID: {release.get('_id', '')}) {status}".rstrip()


def format_releases(project_id: str, releases: list[dict]) -> str:
    lines = [f"# Releases of project {project_id}", "", f"{len(releases)} releases", ""]
    lines.extend(format_release(r) for r in releases)
    return "\n".join(lines)


def format_project(project: dict) -> str:
    identifier = project.get("identifier") or project.get("_id", "")
    name = project.get("name") or "(unnamed)"
    return f"- **{identifier}** - {name}"


def format_projects(projects: list[dict]) -> str:
    lines = ["# Projects", "", f"{len(projects)} projects", ""]
    lines.extend(format_project(p) for p in projects)
    return "\n".join(lines)
