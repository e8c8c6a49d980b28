"""Workflow directives bundled with a rendered work item.

A fetched work item is handed to the assistant together with a protocol:
work on this single item, stop after the fix, ask about the commit and wait
for the user before touching anything else. Bugs additionally carry a
root-cause analysis procedure. The protocol wording lives in the package
``templates`` directory; this module only decides which parts apply.
"""
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

from .fields import format_record
from .models import BUG_TYPE_LABELS, COMMIT_PREFIXES, CommitPrefix
from .projector import render_markdown
from .schemas import Directives, NextRequiredAction, Presentation, ProjectedRecord


TEMPLATES_DIR = Path(__file__).parent / "templates"

FORBIDDEN_ACTIONS = (
    "get_other_work_item_before_commit_decision",
    "batch_fetch_multiple_work_items_in_parallel",
    "modify_multiple_work_items",
)


@lru_cache(maxsize=None)
def load_template(name: str) -> str:
    """Load a protocol text template by name (without the .md suffix).

    Raises:
        FileNotFoundError: If the template is not shipped with the package
    """
    template_path = TEMPLATES_DIR / f"{name}.md"
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")
    return template_path.read_text(encoding="utf-8")


def commit_prefix(type_label: str) -> CommitPrefix:
    return COMMIT_PREFIXES.get(type_label.strip().lower(), CommitPrefix.CHORE)


def is_bug(record: ProjectedRecord) -> bool:
    return record.type.value.strip().lower() in BUG_TYPE_LABELS


def suggest_commit_message(record: ProjectedRecord) -> str:
    """Build ``#<id> <prefix>: <title>``."""
    work_item_id = record.id.value.lstrip("#")
    prefix = commit_prefix(record.type.value).value
    return f"#{work_item_id} {prefix}: {record.title.value}"


def required_first_output(record: ProjectedRecord) -> str:
    return (
        f"🔒 Single-task mode: handling {record.id.value}, "
        f"will ask about the commit right after the fix"
    )


def build_directives(record: ProjectedRecord) -> Directives:
    """Derive the single-task workflow directives for a work item."""
    return Directives(
        mode="single_task",
        target_id=record.id.value,
        stop_after_fix=True,
        ask_commit_after_fix=True,
        wait_before_next=True,
        forbidden_actions=FORBIDDEN_ACTIONS,
        required_first_output=required_first_output(record),
        commit_suggestion=suggest_commit_message(record),
    )


def render_preamble(record: ProjectedRecord, directives: Directives) -> str:
    """Render the protocol text that precedes the work item markdown.

    The bug analysis procedure is included only for bug-typed records.
    """
    bug_analysis = load_template("bug_analysis") if is_bug(record) else ""
    return load_template("directive_preamble").format(
        bug_analysis=bug_analysis,
        required_first_output=directives.required_first_output,
        commit_suggestion=directives.commit_suggestion,
    )


def present(
    raw: Any,
    members: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
) -> Presentation:
    """Run the whole pipeline on a raw work item payload.

    Args:
        raw: Work item dict from the agile API
        members: Optional member id -> display name mapping
        tz: Timezone for timestamps; local time when omitted

    Returns:
        Presentation with the full markdown (protocol preamble followed by
        the record), the projected record and its directives
    """
    record = format_record(raw, members=members, tz=tz)
    directives = build_directives(record)
    markdown = render_preamble(record, directives) + "\n" + render_markdown(record)
    return Presentation(
        markdown=markdown,
        record=record,
        directives=directives,
        next_action=NextRequiredAction(
            type="announce_single_task_mode",
            blocked_until_user_reply=False,
            required_output=directives.required_first_output,
        ),
    )
