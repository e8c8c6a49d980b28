"""Pydantic schemas for projected records and workflow directives."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldEntry(BaseModel):
    """A display-ready scalar field."""

    label: str
    value: str = ""


class Attachment(BaseModel):
    name: str
    url: str = ""


class Comment(BaseModel):
    author: str
    time: str = ""
    content: str = ""


class ProjectedRecord(BaseModel):
    """A fully formatted, render-ready work item.

    Built once per request from a raw tracker payload, serialized to
    markdown and then discarded.
    """

    id: FieldEntry
    title: FieldEntry
    type: FieldEntry
    state: FieldEntry
    priority: FieldEntry
    assignee: FieldEntry
    created_by: FieldEntry
    created_at: FieldEntry
    updated_at: FieldEntry
    description: FieldEntry
    attachments: list[Attachment] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)


CommitOption = Literal["use_suggested", "user_provided", "skip"]


class Directives(BaseModel):
    """Workflow constraints the calling agent must honor for one work item.

    Clients are expected to gate on these fields rather than treat them as
    free-form notes.
    """

    model_config = ConfigDict(frozen=True)

    mode: Literal["single_task", "none"] = "single_task"
    target_id: str
    stop_after_fix: bool = True
    ask_commit_after_fix: bool = True
    wait_before_next: bool = True
    forbidden_actions: tuple[str, ...] = ()
    required_first_output: str
    commit_suggestion: str
    commit_options: tuple[CommitOption, ...] = ("use_suggested", "user_provided", "skip")


class NextRequiredAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["announce_single_task_mode", "commit_decision_after_fix"]
    blocked_until_user_reply: bool = False
    required_output: Optional[str] = None


class Presentation(BaseModel):
    """Everything the tool layer needs to answer a work item request."""

    markdown: str
    record: ProjectedRecord
    directives: Directives
    next_action: NextRequiredAction
