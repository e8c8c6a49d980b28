"""PingCode core - turn raw tracker records into markdown for AI assistants.

Modules:
- models: block/inline kinds, code tables and display labels
- schemas: pydantic schemas for projected records and directives
- rich_text: rich-text block tree and legacy HTML to markdown
- fields: raw payload field formatting
- projector: projected record to markdown document
- directives: workflow directives and the combined ``present`` pipeline
"""

__version__ = "1.0.0"

from .fields import format_record
from .projector import render_markdown
from .directives import build_directives, present

__all__ = ["format_record", "render_markdown", "build_directives", "present", "__version__"]
