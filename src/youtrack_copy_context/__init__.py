"""
YouTrack Copy Context

Copies a YouTrack issue or knowledge-base article as a Markdown document
(fields, comments, attachments, links), or a templated Markdown link to it.
"""

from __future__ import annotations

from .cli import main
from .comments import extract_comments
from .exceptions import CopyContextError, HostRequestError, MissingContextError
from .link_builder import DEFAULT_TEMPLATE, build_markdown_link
from .models import Entity, EntityInfo, EntityType
from .options import DEFAULT_OPTIONS, merge_options
from .renderer import ARTICLE, ISSUE, MarkdownRenderer, render_markdown
from .utils import setup_logging
from .widgets import ContextExportSession, LinkCopySession

# Package version
__version__ = "0.1.0"

__all__ = [
    "ARTICLE",
    "DEFAULT_OPTIONS",
    "DEFAULT_TEMPLATE",
    "ISSUE",
    "ContextExportSession",
    "CopyContextError",
    "Entity",
    "EntityInfo",
    "EntityType",
    "HostRequestError",
    "LinkCopySession",
    "MarkdownRenderer",
    "MissingContextError",
    "build_markdown_link",
    "extract_comments",
    "main",
    "merge_options",
    "render_markdown",
    "setup_logging",
]
