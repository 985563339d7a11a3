"""Render an issue or article as a Markdown document.

Issues and articles share one renderer. An EntityKind descriptor captures the
differences between them: the heading and formatting of the body, and whether
custom fields and issue links apply.

Sections always appear in this order, each only if its option is enabled and
it has something to show:

1. Title (``# <id> — <summary>``)
2. Project, reporter and creation date lines
3. Description / Content
4. Tags
5. Fields (issues only)
6. Attachments
7. Links (issues only)
8. Comments

A section that fails to render is left out; the rest of the document is still
produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import quote

from .field_values import format_field_bullet
from .formatting import bytes_to_size, human_date, quote_block, safe, wrap_in_code_block
from .models import EntityType

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from .models import Attachment, Comment, Entity, IssueLink

logger: logging.Logger = logging.getLogger(__name__)

TITLE_SEPARATOR: Final[str] = " — "
DEFAULT_ATTACHMENT_NAME: Final[str] = "file"
DEFAULT_COMMENT_AUTHOR: Final[str] = "User"


@dataclass(frozen=True)
class EntityKind:
    """What distinguishes the Markdown of one entity type from another."""

    entity_type: EntityType
    body_heading: str
    # Fence language for the body; None emits the body as-is
    body_language: str | None
    has_fields: bool
    has_links: bool


ISSUE: Final[EntityKind] = EntityKind(
    entity_type=EntityType.ISSUE,
    body_heading="Description",
    body_language="markdown",
    has_fields=True,
    has_links=True,
)

ARTICLE: Final[EntityKind] = EntityKind(
    entity_type=EntityType.ARTICLE,
    body_heading="Content",
    body_language=None,
    has_fields=False,
    has_links=False,
)

ENTITY_KINDS: Final[Mapping[EntityType, EntityKind]] = {
    EntityType.ISSUE: ISSUE,
    EntityType.ARTICLE: ARTICLE,
}


def _section(heading: str, body: list[str]) -> list[str]:
    """Lines of a ``##`` section, or nothing when the body is empty."""
    if not body:
        return []
    return ["", f"## {heading}", "", *body]


class MarkdownRenderer:
    """Builds the Markdown document for one entity kind."""

    kind: EntityKind
    base_url: str

    def __init__(self, kind: EntityKind = ISSUE, *, base_url: str = "") -> None:
        """Initialize the renderer.

        Args:
            kind: Entity kind descriptor (ISSUE or ARTICLE)
            base_url: YouTrack base URL, used for attachments the host returns without a URL
        """
        self.kind = kind
        self.base_url = base_url.rstrip("/")

    def render(
        self,
        entity: Entity,
        options: Mapping[str, Any],
        *,
        comments: Sequence[Comment] = (),
        links: Sequence[IssueLink] = (),
    ) -> str:
        """Render the entity as Markdown.

        Args:
            entity: Entity snapshot
            options: Export options; missing keys count as disabled
            comments: Comments in feed order
            links: Issue links (ignored for articles)

        Returns:
            Markdown document without leading or trailing whitespace
        """
        builders: list[tuple[str, Callable[[], list[str]]]] = [
            ("title", lambda: self._title(entity, options)),
            ("project", lambda: self._project(entity, options)),
            ("reporter", lambda: self._reporter(entity, options)),
            ("created", lambda: self._created(entity, options)),
            ("body", lambda: self._body(entity, options)),
            ("tags", lambda: self._tags(entity, options)),
        ]
        if self.kind.has_fields:
            builders.append(("fields", lambda: self._fields(entity, options)))
        builders.append(("attachments", lambda: self._attachments(entity, options)))
        if self.kind.has_links:
            builders.append(("links", lambda: self._links(links, options)))
        builders.append(("comments", lambda: self._comments(comments, options)))

        lines: list[str] = []
        for name, build in builders:
            try:
                lines.extend(build())
            except Exception as e:
                logger.debug(f"Skipping {name} section of {entity.id_readable or entity.id}: {e}")

        return "\n".join(lines).strip()

    def _title(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        parts: list[str] = []
        if options.get("id") and entity.id_readable:
            parts.append(entity.id_readable)
        if options.get("summary") and entity.summary:
            parts.append(entity.summary)
        if not parts:
            return []
        return [f"# {TITLE_SEPARATOR.join(parts)}".strip()]

    def _project(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("project") or entity.project is None:
            return []
        return [f"Project: {entity.project.display_name}".strip()]

    def _reporter(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("reporter") or entity.reporter is None:
            return []
        return [f"Reporter: {entity.reporter.display_name}".strip()]

    def _created(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("created") or not entity.created:
            return []
        return [f"Created: {human_date(entity.created)}"]

    def _body(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("description"):
            return []
        if self.kind.body_language is None:
            text = entity.body.strip()
        else:
            text = wrap_in_code_block(entity.body, self.kind.body_language)
        return _section(self.kind.body_heading, [text] if text else [])

    def _tags(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("tags"):
            return []
        tags = ", ".join(tag for tag in entity.tags if tag)
        return _section("Tags", [tags] if tags else [])

    def _fields(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("fields"):
            return []
        bullets: list[str] = []
        for custom_field in entity.fields:
            try:
                bullet = format_field_bullet(custom_field)
            except Exception as e:
                logger.debug(f"Skipping field {custom_field.name}: {e}")
                continue
            if bullet:
                bullets.append(bullet)
        return _section("Fields", bullets)

    def attachment_href(self, attachment: Attachment) -> str:
        """URL of an attachment, falling back to its persistent path on the server."""
        if attachment.url:
            return attachment.url
        if not self.base_url:
            return ""
        name = safe(attachment.name or None, DEFAULT_ATTACHMENT_NAME)
        return f"{self.base_url}/_persistent/{quote(name, safe='')}"

    def _attachments(self, entity: Entity, options: Mapping[str, Any]) -> list[str]:
        if not options.get("attachments"):
            return []
        bullets: list[str] = []
        for attachment in entity.attachments:
            try:
                name = attachment.name or DEFAULT_ATTACHMENT_NAME
                size = f" ({bytes_to_size(attachment.size)})" if attachment.size else ""
                bullets.append(f"- [{name}]({self.attachment_href(attachment)}){size}")
            except Exception as e:
                logger.debug(f"Skipping attachment {attachment.id or attachment.name}: {e}")
        return _section("Attachments", bullets)

    def _links(self, links: Sequence[IssueLink], options: Mapping[str, Any]) -> list[str]:
        if not options.get("links"):
            return []
        bullets: list[str] = []
        for link in links:
            try:
                label = link.link_type.label_for(link.direction)
                related = ", ".join(
                    f"{issue.id_readable}{TITLE_SEPARATOR}{issue.summary}" if issue.summary else issue.id_readable
                    for issue in link.issues
                    if issue.id_readable or issue.summary
                )
            except Exception as e:
                logger.debug(f"Skipping link {link.direction}: {e}")
                continue
            if label and related:
                bullets.append(f"- {label}: {related}")
        return _section("Links", bullets)

    def _comments(self, comments: Sequence[Comment], options: Mapping[str, Any]) -> list[str]:
        if not options.get("comments"):
            return []
        body: list[str] = []
        for comment in comments:
            if not comment.text:
                continue
            try:
                date = f" ({human_date(comment.timestamp)})" if comment.timestamp else ""
                body.extend([f"**{comment.author or DEFAULT_COMMENT_AUTHOR}**{date}:", quote_block(comment.text), ""])
            except Exception as e:
                logger.debug(f"Skipping comment by {comment.author}: {e}")
        return _section("Comments", body)


def render_markdown(
    entity: Entity,
    options: Mapping[str, Any],
    *,
    kind: EntityKind = ISSUE,
    comments: Sequence[Comment] = (),
    links: Sequence[IssueLink] = (),
    base_url: str = "",
) -> str:
    """Render an entity as Markdown with a one-off MarkdownRenderer."""
    return MarkdownRenderer(kind, base_url=base_url).render(entity, options, comments=comments, links=links)
