"""Tracker vocabulary: block and inline kinds, code tables, display labels."""
import enum


class BlockKind(str, enum.Enum):
    """Block-level node kinds in a rich-text document tree.

    TEXT marks a node without a kind tag. Any tag not listed here resolves
    to UNKNOWN and takes the fallback path.
    """

    TEXT = ""
    PARAGRAPH = "paragraph"
    CODE = "code"
    IMAGE = "image"
    BLOCKQUOTE = "blockquote"
    BULLETED_LIST = "bulleted-list"
    NUMBERED_LIST = "numbered-list"
    LIST_ITEM = "list-item"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, node: dict) -> "BlockKind":
        tag = node.get("type")
        if not tag:
            return cls.TEXT
        try:
            return cls(tag)
        except (ValueError, TypeError):
            return cls.UNKNOWN


class InlineKind(str, enum.Enum):
    """Inline span kinds found inside paragraphs."""

    TEXT = ""
    LINK = "link"
    MENTION = "mention"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, node: dict) -> "InlineKind":
        tag = node.get("type")
        if not tag:
            return cls.TEXT
        try:
            return cls(tag)
        except (ValueError, TypeError):
            return cls.UNKNOWN


class CommitPrefix(str, enum.Enum):
    """Conventional-commit prefixes suggested per work item type."""

    FIX = "fix"
    FEAT = "feat"
    CHORE = "chore"


# Sentinels used when a field is absent or malformed
UNKNOWN = "unknown"
NOT_SET = "not set"
UNASSIGNED = "unassigned"
DEFAULT_AUTHOR = "user"
DEFAULT_ATTACHMENT_NAME = "attachment"
DEFAULT_WORK_ITEM_TYPE = "work item"
DEFAULT_MENTION = "user"
IMAGE_LABEL = "image"

TYPE_BUG = "bug"
TYPE_REQUIREMENT = "requirement"
TYPE_USER_STORY = "user story"
TYPE_TASK = "task"
TYPE_EPIC = "epic"

# Numeric work item type codes returned by the agile API
WORK_ITEM_TYPES: dict[int, str] = {
    2: TYPE_REQUIREMENT,
    3: TYPE_USER_STORY,
    4: TYPE_TASK,
    5: TYPE_BUG,
    6: TYPE_EPIC,
}

# state_type category codes
STATE_CATEGORIES: dict[int, str] = {
    1: "pending",
    2: "in progress",
    3: "done",
    4: "closed",
}

# Default priority ids of a PingCode workspace
PRIORITIES: dict[str, str] = {
    "5cb9466afda1ce4ca0090001": "urgent",
    "5cb9466afda1ce4ca0090002": "high",
    "5cb9466afda1ce4ca0090003": "medium",
    "5cb9466afda1ce4ca0090004": "low",
}

# Release version state codes
RELEASE_STATES: dict[int, str] = {
    1: "in progress",
    2: "released",
}

# Type label -> commit prefix. Localized display names embedded in type
# objects are listed next to the labels produced by WORK_ITEM_TYPES.
COMMIT_PREFIXES: dict[str, CommitPrefix] = {
    TYPE_BUG: CommitPrefix.FIX,
    "缺陷": CommitPrefix.FIX,
    TYPE_REQUIREMENT: CommitPrefix.FEAT,
    "需求": CommitPrefix.FEAT,
    TYPE_USER_STORY: CommitPrefix.FEAT,
    "story": CommitPrefix.FEAT,
    "用户故事": CommitPrefix.FEAT,
    TYPE_EPIC: CommitPrefix.FEAT,
    "史诗": CommitPrefix.FEAT,
    TYPE_TASK: CommitPrefix.CHORE,
    "任务": CommitPrefix.CHORE,
}

BUG_TYPE_LABELS = frozenset({TYPE_BUG, "缺陷"})

# Field labels shown in the rendered record
FIELD_LABELS: dict[str, str] = {
    "id": "ID",
    "title": "Title",
    "type": "Type",
    "state": "State",
    "priority": "Priority",
    "assignee": "Assignee",
    "created_by": "Created by",
    "created_at": "Created at",
    "updated_at": "Updated at",
    "description": "Description",
}
