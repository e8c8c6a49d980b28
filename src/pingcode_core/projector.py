"""Serialize a projected work item to a markdown document."""
from .schemas import ProjectedRecord


def _quote(content: str) -> str:
    return "\n".join(f"> {line}" for line in content.split("\n"))


def render_markdown(record: ProjectedRecord) -> str:
    """Render a ProjectedRecord as markdown.

    Section order is fixed: heading, metadata bullets, description,
    attachments, comments. Empty optional fields and sections are omitted.
    """
    lines = [
        f"## {record.id.value} - {record.title.value}",
        "",
    ]
    for field in (record.type, record.state, record.priority, record.assignee):
        lines.append(f"- **{field.label}**: {field.value}")
    for field in (record.created_by, record.created_at, record.updated_at):
        if field.value:
            lines.append(f"- **{field.label}**: {field.value}")

    if record.description.value:
        lines.extend(["", f"### {record.description.label}", "", record.description.value])

    if record.attachments:
        lines.extend(["", "### Attachments", ""])
        for att in record.attachments:
            lines.append(f"- [{att.name}]({att.url})" if att.url else f"- {att.name}")

    if record.comments:
        lines.extend(["", f"### Comments ({len(record.comments)})", ""])
        for index, comment in enumerate(record.comments, start=1):
            lines.append(f"**{index}. {comment.author}** ({comment.time}):")
            lines.append(_quote(comment.content))
            lines.append("")

    return "\n".join(lines)
