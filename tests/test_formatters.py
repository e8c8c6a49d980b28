"""Tests for the compact MCP list views."""
from pingcode_mcp.formatters import (
    format_assignee,
    format_project,
    format_release,
    format_release_items,
    format_releases,
    format_search_results,
)

MEMBERS = {"u1": "Alice", "u2": "Bob"}


class TestAssignee:
    def test_member_name(self):
        assert format_assignee({"assignee": "u2"}, MEMBERS) == "Bob"

    def test_current_user_is_marked(self):
        assert format_assignee({"assignee": "u1"}, MEMBERS, current_user_id="u1") == "Alice(me)"

    def test_unassigned_and_unknown(self):
        assert format_assignee({}, MEMBERS) == "unassigned"
        assert format_assignee({"assignee": "u9"}, MEMBERS) == "unknown"

    def test_embedded_assignee(self):
        assert format_assignee({"assignee": {"_id": "u2"}}, MEMBERS) == "Bob"


class TestReleaseItems:
    """Test grouping of release work items."""

    def test_grouped_by_type(self):
        items = [
            {"whole_identifier": "LFY-1", "title": "crash", "type": 5, "state_type": 2, "assignee": "u1"},
            {"whole_identifier": "LFY-2", "title": "export", "type": 3, "state_type": 3},
            {"whole_identifier": "LFY-3", "title": "docs", "type": 2, "state_type": 1, "assignee": "u2"},
            {"whole_identifier": "LFY-4", "title": "cleanup", "type": 4},
        ]
        text = format_release_items(items, MEMBERS, current_user_id="u1")
        lines = text.split("\n")

        assert lines[:3] == ["# Release work items", "", "4 items in total"]
        assert "## Bugs (1)" in lines
        assert "## Requirements (2)" in lines
        assert "## Others (1)" in lines
        assert "- **LFY-1** crash | in progress | Alice(me)" in lines
        assert "- **LFY-2** export | done | unassigned" in lines
        assert "- **LFY-4** cleanup | unknown | unassigned" in lines
        assert lines.index("## Bugs (1)") < lines.index("## Requirements (2)") < lines.index("## Others (1)")

    def test_empty_groups_are_omitted(self):
        text = format_release_items([{"whole_identifier": "LFY-1", "title": "t", "type": 5}], {})
        assert "## Requirements" not in text
        assert "## Others" not in text


class TestOtherLists:
    def test_release_state_label(self):
        assert format_release({"name": "v1.0", "_id": "r1", "state": 2}) == "- **v1.0** (ID: r1) released"
        assert format_release({"name": "v1.1", "_id": "r2"}) == "- **v1.1** (ID: r2)"
        assert format_release({"name": "v1.2", "_id": "r3", "state": [1]}) == "- **v1.2** (ID: r3)"

    def test_releases_header(self):
        text = format_releases("LFY", [{"name": "v1", "_id": "r1", "state": 1}])
        assert text.startswith("# Releases of project LFY\n\n1 releases\n")
        assert text.endswith("- **v1** (ID: r1) in progress")

    def test_search_results(self):
        text = format_search_results("crash", [{"whole_identifier": "LFY-1", "title": "crash", "type": 5}])
        assert '# Search results: "crash"' in text
        assert "- **LFY-1** crash" in text
        assert "  - Type: bug | State: unknown" in text

    def test_project(self):
        assert format_project({"identifier": "LFY", "name": "Lab"}) == "- **LFY** - Lab"
        assert format_project({"_id": "p1"}) == "- **p1** - (unnamed)"
