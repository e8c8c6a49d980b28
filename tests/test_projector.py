"""Tests for serializing projected records to markdown."""
from datetime import timezone

from pingcode_core.fields import format_record
from pingcode_core.projector import render_markdown


class TestRenderMarkdown:
    """Test section order and optional sections."""

    def test_heading_and_metadata_order(self, bug_payload):
        lines = render_markdown(format_record(bug_payload, tz=timezone.utc)).split("\n")

        assert lines[0] == "## LFY-42 - crash on save"
        assert lines[1] == ""
        assert lines[2:9] == [
            "- **Type**: bug",
            "- **State**: in progress",
            "- **Priority**: urgent",
            "- **Assignee**: Alice",
            "- **Created by**: Bob",
            "- **Created at**: 2023/11/14 22:13",
            "- **Updated at**: 2023/11/14 22:23",
        ]

    def test_full_document(self, bug_payload):
        markdown = render_markdown(format_record(bug_payload, tz=timezone.utc))

        assert markdown.endswith(
            "\n### Description\n\n"
            "Saving a draft crashes the editor.\n```text\nTypeError: x is undefined\n```\n"
            "\n### Attachments\n\n"
            "- [log.txt](https://files.example/log.txt)\n"
            "\n### Comments (1)\n\n"
            "**1. Alice** (2023/11/14 22:30):\n"
            "> Reproduced on 2.3.1\n"
        )

    def test_minimal_record_omits_optional_sections(self):
        """No comments and no attachments means no such headings."""
        markdown = render_markdown(format_record({"whole_identifier": "LFY-1", "title": "t", "type": 4}))

        assert "### Attachments" not in markdown
        assert "### Comments" not in markdown
        assert "### Description" not in markdown
        assert "Created by" not in markdown
        assert "Created at" not in markdown
        assert "Updated at" not in markdown
        assert markdown == (
            "## LFY-1 - t\n"
            "\n"
            "- **Type**: task\n"
            "- **State**: unknown\n"
            "- **Priority**: not set\n"
            "- **Assignee**: not set"
        )

    def test_attachment_without_url_is_plain_bullet(self):
        record = format_record({"attachments": [{"name": "offline.zip"}, {"url": "https://f/x"}]})
        markdown = render_markdown(record)
        assert "- offline.zip\n- [attachment](https://f/x)" in markdown

    def test_comments_numbered_and_separated(self):
        raw = {"comments": [
            {"created_by_name": "Alice", "content": [{"text": "first"}]},
            {"created_by_name": "Bob", "content": [{"text": "line one"}, {"text": "line two"}]},
        ]}
        markdown = render_markdown(format_record(raw))
        assert "### Comments (2)" in markdown
        assert markdown.endswith(
            "**1. Alice** ():\n"
            "> first\n"
            "\n"
            "**2. Bob** ():\n"
            "> line one\n"
            "> line two\n"
        )
