"""Field formatting for raw tracker payloads.

Raw work items come back from the agile API loosely typed: the type may be
a numeric code or an embedded object, people may be ids, names or objects,
timestamps may be in seconds or milliseconds. Every accessor here degrades
to a sentinel instead of raising.
"""
import logging
from datetime import datetime, tzinfo
from typing import Any, Mapping, Optional

from . import rich_text
from .models import (
    FIELD_LABELS,
    WORK_ITEM_TYPES,
    STATE_CATEGORIES,
    PRIORITIES,
    UNKNOWN,
    NOT_SET,
    DEFAULT_AUTHOR,
    DEFAULT_ATTACHMENT_NAME,
    DEFAULT_WORK_ITEM_TYPE,
)
from .schemas import Attachment, Comment, FieldEntry, ProjectedRecord

logger = logging.getLogger("pingcode-core.fields")

# Epoch values above this are milliseconds
MILLISECOND_THRESHOLD = 10 ** 12

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _code(value: Any) -> Optional[int]:
    """Return value as an int code, accepting ints and digit strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    return None


def _display_name(value: Any) -> str:
    obj = _obj(value)
    return _str(obj.get("display_name")) or _str(obj.get("name"))


def _member_id(value: Any) -> str:
    if isinstance(value, str):
        return value
    obj = _obj(value)
    return _str(obj.get("_id")) or _str(obj.get("id")) or _str(obj.get("uid"))


def format_identifier(raw: dict) -> str:
    whole = _str(raw.get("whole_identifier"))
    if whole:
        return whole
    identifier = raw.get("identifier")
    if isinstance(identifier, bool):
        return ""
    if isinstance(identifier, str):
        return identifier
    if isinstance(identifier, int):
        # Zero is not a real sequence number; mark it with "#"
        return str(identifier) if identifier else f"#{identifier}"
    return ""


def format_type(raw: dict) -> str:
    value = raw.get("type")
    code = _code(value)
    if code is not None:
        return WORK_ITEM_TYPES.get(code, DEFAULT_WORK_ITEM_TYPE)
    return _display_name(value) or UNKNOWN


def format_state(raw: dict) -> str:
    name = _display_name(raw.get("state"))
    if name:
        return name
    code = _code(raw.get("state_type"))
    if code is not None and code in STATE_CATEGORIES:
        return STATE_CATEGORIES[code]
    return UNKNOWN


def format_priority(raw: dict) -> str:
    value = raw.get("priority")
    if not value:
        return NOT_SET
    priority_id = value if isinstance(value, str) else _str(_obj(value).get("_id"))
    if priority_id in PRIORITIES:
        return PRIORITIES[priority_id]
    return _display_name(value) or NOT_SET


def format_person(
    raw: dict,
    field: str,
    members: Optional[Mapping[str, str]] = None,
    default: str = NOT_SET,
) -> str:
    """Resolve a person field to a display name.

    Prefers the pre-resolved ``<field>_name`` value, then an embedded user
    object, then a lookup of the bare member id in ``members``.
    """
    resolved = _str(raw.get(f"{field}_name"))
    if resolved:
        return resolved
    value = raw.get(field)
    name = _display_name(value)
    if name:
        return name
    if members:
        member_id = _member_id(value)
        if member_id and members.get(member_id):
            return members[member_id]
    return default


def format_timestamp(value: Any, tz: Optional[tzinfo] = None) -> str:
    """Format a Unix timestamp in seconds or milliseconds.

    Args:
        value: Epoch seconds or milliseconds (values above 10^12 are treated
            as milliseconds)
        tz: Target timezone; local time when omitted

    Returns:
        ``YYYY/MM/DD HH:MM``, or "" when the value is absent or malformed
    """
    if isinstance(value, bool) or not value:
        return ""
    try:
        ts = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed timestamp: {value!r}")
        return ""
    seconds = ts / 1000 if ts > MILLISECOND_THRESHOLD else ts
    try:
        return datetime.fromtimestamp(seconds, tz=tz).strftime(TIMESTAMP_FORMAT)
    except (OverflowError, OSError, ValueError):
        logger.debug(f"Timestamp out of range: {value!r}")
        return ""


def format_attachments(raw: dict) -> list[Attachment]:
    attachments = raw.get("attachments")
    if not isinstance(attachments, list):
        return []
    result = []
    for att in attachments:
        att = _obj(att)
        result.append(Attachment(
            name=_str(att.get("name")) or _str(att.get("filename")) or DEFAULT_ATTACHMENT_NAME,
            url=_str(att.get("url")) or _str(att.get("download_url")),
        ))
    return result


def format_comments(
    raw: dict,
    members: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
) -> list[Comment]:
    comments = raw.get("comments")
    if not isinstance(comments, list):
        return []
    result = []
    for comment in comments:
        comment = _obj(comment)
        result.append(Comment(
            author=format_person(comment, "created_by", members, default=DEFAULT_AUTHOR),
            time=format_timestamp(comment.get("created_at"), tz),
            content=rich_text.render(comment.get("content")),
        ))
    return result


def format_record(
    raw: Any,
    members: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
) -> ProjectedRecord:
    """Project a raw work item payload into a display-ready record.

    Args:
        raw: Work item dict as returned by the agile API (anything else is
            treated as an empty record)
        members: Optional member id -> display name mapping used for
            assignee, creator and comment authors given as bare ids
        tz: Timezone for timestamps; local time when omitted

    Returns:
        ProjectedRecord. Missing or malformed fields become sentinels.
    """
    raw = _obj(raw)

    def entry(key: str, value: str) -> FieldEntry:
        return FieldEntry(label=FIELD_LABELS[key], value=value)

    return ProjectedRecord(
        id=entry("id", format_identifier(raw)),
        title=entry("title", _str(raw.get("title"))),
        type=entry("type", format_type(raw)),
        state=entry("state", format_state(raw)),
        priority=entry("priority", format_priority(raw)),
        assignee=entry("assignee", format_person(raw, "assignee", members)),
        created_by=entry("created_by", format_person(raw, "created_by", members, default="")),
        created_at=entry("created_at", format_timestamp(raw.get("created_at"), tz)),
        updated_at=entry("updated_at", format_timestamp(raw.get("updated_at"), tz)),
        description=entry("description", rich_text.render(raw.get("description"))),
        attachments=format_attachments(raw),
        comments=format_comments(raw, members, tz),
    )
