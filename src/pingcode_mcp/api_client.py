"""Async client for the PingCode web API.

Authenticates with the session cookies of a logged-in browser. Responses
arrive in a ``{"data": {"value": ...}}`` envelope on most agile endpoints
and as ``{"value": ...}`` or ``{"values": [...]}`` elsewhere; ``_unwrap``
accepts all of them.
"""
import logging
from typing import Any, Literal, Optional

import httpx

from .credentials import Credentials

logger = logging.getLogger("pingcode-mcp.api_client")

ItemFilter = Literal["bug", "story", "all"]

BUG_TYPE_CODE = 5
STORY_TYPE_CODES = frozenset({2, 3})
BUG_TYPE_NAMES = frozenset({"bug", "缺陷"})
STORY_TYPE_NAMES = frozenset({"story", "需求", "用户故事"})


class PingCodeError(Exception):
    """Base class for PingCode API failures."""


class PingCodeAuthError(PingCodeError):
    """Raised when there are no valid credentials or the session expired."""


class PingCodeNotFoundError(PingCodeError):
    """Raised when a referenced project does not exist."""


def clean_identifier(identifier: str) -> str:
    """Normalize ``#LFY-2513`` / ``LFY-2513`` / ``2513`` for URL use."""
    return identifier.strip().lstrip("#").strip()


def project_prefix(identifier: str, default: str) -> str:
    cleaned = clean_identifier(identifier)
    return cleaned.split("-")[0] if "-" in cleaned else default


def _unwrap(body: Any, default: Any = None) -> Any:
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, dict) and data.get("value") is not None:
            return data["value"]
        if body.get("value") is not None:
            return body["value"]
    return default if default is not None else body


def matches_item_filter(item: dict, item_type: Optional[ItemFilter]) -> bool:
    if not item_type or item_type == "all":
        return True
    code = item.get("type")
    name = ""
    if isinstance(code, dict):
        name = str(code.get("name") or "").lower()
    if item_type == "bug":
        return code == BUG_TYPE_CODE or name in BUG_TYPE_NAMES
    return code in STORY_TYPE_CODES or name in STORY_TYPE_NAMES


class PingCodeClient:
    """PingCode API operations used by the MCP tools.

    Args:
        http: Configured httpx.AsyncClient (base URL, timeout)
        credentials: Stored session credentials, or None when logged out
        default_project: Project prefix used for bare numeric identifiers
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        credentials: Optional[Credentials],
        default_project: str = "LFY",
    ):
        self.http = http
        self.credentials = credentials
        self.default_project = default_project

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return self.credentials is not None and self.credentials.is_valid()

    def _auth_headers(self) -> dict[str, str]:
        if not self.is_authenticated():
            raise PingCodeAuthError("Not logged in. Call the login tool first.")
        return {"Cookie": self.credentials.cookie_header()}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = await self.http.request(method, path, headers=self._auth_headers(), **kwargs)
        if response.status_code == 401:
            raise PingCodeAuthError("Session expired. Call the login tool again.")
        return response

    async def _json(self, method: str, path: str, **kwargs) -> Any:
        response = await self._request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()

    # ------------------------------------------------------------------
    # Work items
    # ------------------------------------------------------------------

    async def get_work_item(self, identifier: str) -> Optional[dict]:
        """Fetch a work item by identifier. Returns None if it does not exist."""
        response = await self._request("GET", f"/api/agile/work-items/{clean_identifier(identifier)}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        item = _unwrap(response.json())
        if isinstance(item, dict) and item.get("_id"):
            return item
        return None

    async def get_work_item_with_details(self, identifier: str) -> Optional[dict]:
        """Fetch a work item and fill in member display names.

        Sets ``assignee_name``, ``created_by_name`` and each comment's
        ``created_by_name`` from the project member list when the payload
        only carries member ids.
        """
        item = await self.get_work_item(identifier)
        if item is None:
            return None

        members = await self.get_project_members(project_prefix(identifier, self.default_project))

        for field in ("assignee", "created_by"):
            member_id = item.get(field)
            if isinstance(member_id, str):
                item[f"{field}_name"] = members.get(member_id)

        comments = item.get("comments")
        if isinstance(comments, list):
            for comment in comments:
                if isinstance(comment, dict) and isinstance(comment.get("created_by"), str):
                    comment["created_by_name"] = members.get(comment["created_by"])

        return item

    async def search_work_items(self, query: str, project_id: Optional[str] = None) -> list[dict]:
        params: dict[str, Any] = {"q": query, "page_size": 20}
        if project_id:
            params["project_id"] = project_id
        body = await self._json("GET", "/api/pjm/work-items/search", params=params)
        values = body.get("values") if isinstance(body, dict) else None
        return values if isinstance(values, list) else []

    async def get_selectable_states(self, identifier: str) -> list[dict]:
        body = await self._json(
            "GET", f"/api/agile/work-items/{clean_identifier(identifier)}/selectable-states"
        )
        if isinstance(body, dict):
            states = body.get("data") or body.get("value") or []
        else:
            states = body
        return states if isinstance(states, list) else []

    async def update_work_item_state(self, identifier: str, state_id: str) -> Any:
        body = await self._json(
            "PUT",
            f"/api/agile/work-items/{clean_identifier(identifier)}",
            json={"state": state_id},
        )
        logger.info(f"Updated state of {identifier} to {state_id}")
        return _unwrap(body)

    # ------------------------------------------------------------------
    # Projects, members and releases
    # ------------------------------------------------------------------

    async def get_projects(self) -> list[dict]:
        body = await self._json(
            "GET", "/api/agile/pilot/entries", params={"sort_direction": "asc", "ps": 100}
        )
        projects = _unwrap(body, default=[])
        return projects if isinstance(projects, list) else []

    async def get_project_id(self, identifier: str) -> Optional[str]:
        """Resolve a project identifier such as ``LFY`` to its internal id."""
        response = await self._request(
            "GET", f"/api/agile/projects/{identifier}", params={"addons": "true"}
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        project = _unwrap(response.json())
        if isinstance(project, dict) and project.get("_id"):
            return project["_id"]
        return None

    async def _require_project_id(self, identifier: str) -> str:
        project_id = await self.get_project_id(identifier)
        if not project_id:
            raise PingCodeNotFoundError(f"Project not found: {identifier}")
        return project_id

    async def get_project_members(self, identifier: str) -> dict[str, str]:
        """Return a member uid -> display name map.

        Member names are a convenience; any failure other than an expired
        session yields an empty map.
        """
        try:
            project_id = await self.get_project_id(identifier)
            if not project_id:
                return {}
            body = await self._json(
                "GET", f"/api/agile/projects/{project_id}/members", params={"ps": 200}
            )
        except httpx.HTTPError as e:
            logger.warning(f"Could not load members of project {identifier}: {e}")
            return {}

        members = _unwrap(body, default=[])
        if not isinstance(members, list):
            return {}
        return {
            m["uid"]: m["display_name"]
            for m in members
            if isinstance(m, dict) and m.get("uid") and m.get("display_name")
        }

    async def get_project_releases(self, identifier: str) -> list[dict]:
        project_id = await self._require_project_id(identifier)
        body = await self._json(
            "GET", f"/api/agile/projects/{project_id}/release/versions", params={"ps": 50}
        )
        releases = _unwrap(body, default=[])
        return releases if isinstance(releases, list) else []

    async def get_release_work_items(
        self,
        release_id: str,
        identifier: str,
        item_type: Optional[ItemFilter] = None,
    ) -> list[dict]:
        """List work items of a release, optionally only bugs or stories."""
        project_id = await self._require_project_id(identifier)
        body = await self._json(
            "POST",
            f"/api/agile/projects/{project_id}/release/work-item/related-work-items/content",
            json={"version_id": release_id},
        )
        items = _unwrap(body, default=[])
        if not isinstance(items, list):
            return []
        return [i for i in items if isinstance(i, dict) and matches_item_filter(i, item_type)]

    def current_user(self) -> Optional[dict]:
        if self.credentials and self.credentials.user:
            return self.credentials.user.model_dump()
        return None
