"""Build Markdown links to an issue or article from a user-defined template."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .models import EntityInfo

DEFAULT_TEMPLATE: Final[str] = "[{{id}}]({{url}}) {{summary}}"

_PLACEHOLDER = re.compile(r"\{\{(id|url|summary)\}\}")


def resolve_template(template: str | None) -> str:
    """Return the configured template, or the default one when none is set."""
    return template if template and template.strip() else DEFAULT_TEMPLATE


def build_markdown_link(template: str, entity: EntityInfo) -> str:
    """Substitute the ``{{id}}``, ``{{url}}`` and ``{{summary}}`` placeholders.

    Substitution is a single pass: placeholders that appear inside the
    substituted values are left as they are. Values are not escaped.

    Args:
        template: Link template, e.g. ``[{{id}}]({{url}}) {{summary}}``
        entity: Entity the link points to

    Returns:
        The template with every placeholder replaced
    """
    values = {"id": entity.id or "", "url": entity.url or "", "summary": entity.summary or ""}
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)
