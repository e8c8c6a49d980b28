"""Rich-text to markdown rendering.

PingCode stores descriptions and comments as a tree of typed blocks
(paragraphs, code, quotes, lists, images) whose leaves are inline spans
(plain text, links, mentions, images). This module flattens such a tree
into markdown text for AI assistants.

Rendering is total: any input, well-formed or not, produces a string.
Unrecognized kinds fall back to rendering their children as inline spans,
then to their ``text`` or ``content`` field, then to an empty string.

Older work items carry HTML descriptions instead of a block tree; those go
through ``sanitize_html`` instead.
"""
import logging
import re
from typing import Any, Callable, Optional

from .models import BlockKind, InlineKind, DEFAULT_MENTION, IMAGE_LABEL

logger = logging.getLogger("pingcode-core.rich_text")


_IMG_RE = re.compile(r"""<img[^>]*?\ssrc\s*=\s*["']([^"']*)["'][^>]*>""", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_END_RE = re.compile(r"</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

# Order matters: &amp; is decoded last so "&amp;lt;" yields "&lt;"
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)


def _text(node: dict, key: str) -> str:
    value = node.get(key)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _children(node: dict) -> Optional[list]:
    children = node.get("children")
    return children if isinstance(children, list) else None


def image_marker(url: str) -> str:
    return f"[{IMAGE_LABEL}]({url})"


# ============================================================================
# Inline spans
# ============================================================================


def render_inline(node: Any) -> str:
    """Render one inline span (text, link, mention, image)."""
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""
    return _INLINE_RENDERERS[InlineKind.of(node)](node)


def _inline_text(node: dict) -> str:
    return _text(node, "text")


def _inline_link(node: dict) -> str:
    url = _text(node, "url")
    children = _children(node) or []
    label = "".join(_text(child, "text") for child in children if isinstance(child, dict))
    return f"[{label or url}]({url})"


def _inline_mention(node: dict) -> str:
    name = _text(node, "display_name") or _text(node, "text") or DEFAULT_MENTION
    return f"@{name}"


def _inline_image(node: dict) -> str:
    return image_marker(_text(node, "url"))


def _inline_unknown(node: dict) -> str:
    logger.debug(f"Unknown inline kind: {node.get('type')!r}")
    children = _children(node)
    if children is not None:
        return "".join(render_inline(child) for child in children)
    return _text(node, "text")


_INLINE_RENDERERS: dict[InlineKind, Callable[[dict], str]] = {
    InlineKind.TEXT: _inline_text,
    InlineKind.LINK: _inline_link,
    InlineKind.MENTION: _inline_mention,
    InlineKind.IMAGE: _inline_image,
    InlineKind.UNKNOWN: _inline_unknown,
}

# Kinds that only exist at inline level; everything else goes to render_block
_INLINE_ONLY = frozenset({InlineKind.LINK, InlineKind.MENTION})


# ============================================================================
# Blocks
# ============================================================================


def render_block(node: Any) -> str:
    """Render one block node and everything below it."""
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""
    return _BLOCK_RENDERERS[BlockKind.of(node)](node)


def _render_child(node: Any) -> str:
    """Render a list-item child with whichever renderer matches its kind."""
    if isinstance(node, dict) and InlineKind.of(node) in _INLINE_ONLY:
        return render_inline(node)
    return render_block(node)


def _block_text(node: dict) -> str:
    return _text(node, "text")


def _block_paragraph(node: dict) -> str:
    children = _children(node)
    if children is None:
        return ""
    return "".join(render_inline(child) for child in children)


def _block_code(node: dict) -> str:
    language = _text(node, "language")
    code = _text(node, "content")
    return f"```{language}\n{code}\n```"


def _block_image(node: dict) -> str:
    return image_marker(_text(node, "url"))


def _block_quote(node: dict) -> str:
    children = _children(node)
    if children is None:
        return ""
    quoted = "\n".join(render_block(child) for child in children)
    return "\n".join(f"> {line}" for line in quoted.split("\n"))


def _list_item_content(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    children = _children(node)
    if children is None:
        return ""
    return "".join(_render_child(child) for child in children)


def _render_list(node: dict, numbered: bool) -> str:
    items = _children(node)
    if items is None:
        return ""
    lines = []
    for index, item in enumerate(items, start=1):
        prefix = f"{index}. " if numbered else "- "
        lines.append(prefix + _list_item_content(item))
    return "\n".join(lines)


def _block_bulleted_list(node: dict) -> str:
    return _render_list(node, numbered=False)


def _block_numbered_list(node: dict) -> str:
    return _render_list(node, numbered=True)


def _block_unknown(node: dict) -> str:
    # Unknown blocks are flattened as inline content; no line breaks are
    # inserted between their children.
    logger.debug(f"Unknown block kind: {node.get('type')!r}")
    children = _children(node)
    if children is not None:
        return "".join(render_inline(child) for child in children)
    return _text(node, "text") or _text(node, "content")


_BLOCK_RENDERERS: dict[BlockKind, Callable[[dict], str]] = {
    BlockKind.TEXT: _block_text,
    BlockKind.PARAGRAPH: _block_paragraph,
    BlockKind.CODE: _block_code,
    BlockKind.IMAGE: _block_image,
    BlockKind.BLOCKQUOTE: _block_quote,
    BlockKind.BULLETED_LIST: _block_bulleted_list,
    BlockKind.NUMBERED_LIST: _block_numbered_list,
    BlockKind.LIST_ITEM: _list_item_content,
    BlockKind.UNKNOWN: _block_unknown,
}


# ============================================================================
# Entry points
# ============================================================================


def render(content: Any) -> str:
    """Render a description or comment body to markdown.

    Args:
        content: A list of top-level blocks, or a legacy HTML string

    Returns:
        Markdown text with top-level blocks separated by newlines and
        surrounding whitespace trimmed. Anything else renders to "".
    """
    if isinstance(content, str):
        return sanitize_html(content)
    if not isinstance(content, list):
        return ""
    try:
        return "\n".join(render_block(block) for block in content).strip()
    except RecursionError:
        logger.warning("Rich-text tree too deep to render, dropping content")
        return ""


def sanitize_html(html: Any) -> str:
    """Convert a legacy HTML description to plain text.

    Images become ``[image](src)`` markers, ``<br>`` and ``</p>`` become
    newlines, all other tags are dropped and the four common entities are
    decoded. Runs of blank lines collapse to one and the result is trimmed.
    """
    if not isinstance(html, str) or not html:
        return ""
    text = _IMG_RE.sub(lambda m: image_marker(m.group(1)), html)
    text = _BR_RE.sub("\n", text)
    text = _PARAGRAPH_END_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()
