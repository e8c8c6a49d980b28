"""Shared fixtures for PingCode tests."""
import time

import pytest

from pingcode_mcp.credentials import CookieData, Credentials, CurrentUser


@pytest.fixture
def credentials():
    """Valid session credentials for the current user Alice (uid u1)."""
    return Credentials(
        cookies=[
            CookieData(name="pc_session", value="abc", domain="example.pingcode.com"),
            CookieData(name="lang", value="en", domain="example.pingcode.com"),
        ],
        domain="example.pingcode.com",
        saved_at=int(time.time() * 1000),
        user=CurrentUser(id="u1", name="Alice"),
    )


@pytest.fixture
def bug_payload():
    """A bug work item as returned by the agile API, member names resolved."""
    return {
        "_id": "64f0c0ffee",
        "whole_identifier": "LFY-42",
        "identifier": 42,
        "title": "crash on save",
        "type": 5,
        "state_type": 2,
        "priority": "5cb9466afda1ce4ca0090001",
        "assignee": "u1",
        "assignee_name": "Alice",
        "created_by": "u2",
        "created_by_name": "Bob",
        "created_at": 1700000000,
        "updated_at": 1700000600000,
        "description": [
            {"type": "paragraph", "children": [{"text": "Saving a draft crashes the editor."}]},
            {"type": "code", "language": "text", "content": "TypeError: x is undefined"},
        ],
        "attachments": [{"name": "log.txt", "url": "https://files.example/log.txt"}],
        "comments": [
            {
                "created_by": "u1",
                "created_by_name": "Alice",
                "created_at": 1700001000,
                "content": [{"type": "paragraph", "children": [{"text": "Reproduced on 2.3.1"}]}],
            }
        ],
    }
