"""Data models for the entities exported from YouTrack.

The host returns loosely shaped JSON: any attribute may be missing, null, or
of an unexpected type when the server version or the requested field
projection differs. Each model therefore builds itself from raw JSON through a
``from_json`` classmethod that defaults missing or mistyped attributes instead
of failing. Nothing here validates the data; the renderer decides what is
worth showing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .field_values import EmptyValue, FieldValue, parse_field_value


class EntityType(Enum):
    """Kind of entity a session works on."""

    ISSUE = "issue"
    ARTICLE = "article"


def extract_result(response: Any) -> Any:  # noqa: ANN401 - arbitrary JSON
    """Unwrap host responses of the form ``{"result": ...}``."""
    if isinstance(response, dict) and "result" in response:
        return response["result"]
    return response


def _as_dict(value: Any) -> dict[str, Any]:  # noqa: ANN401
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:  # noqa: ANN401
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> str:  # noqa: ANN401
    if value is None or isinstance(value, dict | list):
        return ""
    return str(value)


def _as_number(value: Any) -> int | float | None:  # noqa: ANN401
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


@dataclass
class UserRef:
    """A reference to a YouTrack user."""

    login: str = ""
    full_name: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.login

    @classmethod
    def from_json(cls, data: Any) -> UserRef | None:  # noqa: ANN401
        if not isinstance(data, dict):
            return None
        return cls(login=_as_str(data.get("login")), full_name=_as_str(data.get("fullName")))


@dataclass
class ProjectRef:
    """A reference to the project an entity belongs to."""

    short_name: str | None = None
    name: str = ""

    @property
    def display_name(self) -> str:
        # An empty short name is still preferred over the full name
        return self.short_name if self.short_name is not None else self.name

    @classmethod
    def from_json(cls, data: Any) -> ProjectRef | None:  # noqa: ANN401
        if not isinstance(data, dict):
            return None
        short_name = data.get("shortName")
        return cls(
            short_name=None if short_name is None else _as_str(short_name),
            name=_as_str(data.get("name")),
        )


@dataclass
class Attachment:
    """A file attached to an issue or article."""

    id: str = ""
    name: str = ""
    url: str = ""
    size: int | float | None = None
    mime_type: str = ""
    created: int | float | None = None
    author: UserRef | None = None

    @classmethod
    def from_json(cls, data: Any) -> Attachment:  # noqa: ANN401
        data = _as_dict(data)
        return cls(
            id=_as_str(data.get("id")),
            name=_as_str(data.get("name")),
            url=_as_str(data.get("url")),
            size=_as_number(data.get("size")),
            mime_type=_as_str(data.get("mimeType")),
            created=_as_number(data.get("created")),
            author=UserRef.from_json(data.get("author")),
        )


@dataclass
class CustomField:
    """A project custom field of an issue with its current value."""

    name: str = "Field"
    value: FieldValue = field(default_factory=EmptyValue)

    @classmethod
    def from_json(cls, data: Any) -> CustomField:  # noqa: ANN401
        data = _as_dict(data)
        descriptor = _as_dict(_as_dict(data.get("projectCustomField")).get("field"))
        return cls(
            name=_as_str(descriptor.get("name")) or "Field",
            value=parse_field_value(data.get("value")),
        )


@dataclass
class LinkType:
    """Issue link type with its direction-specific labels."""

    name: str = ""
    localized_name: str = ""
    source_to_target: str = ""
    localized_source_to_target: str = ""
    target_to_source: str = ""
    localized_target_to_source: str = ""

    def label_for(self, direction: str) -> str:
        """Resolve the label shown for a link seen from the given direction."""
        if direction.upper() == "INWARD":
            candidates = (self.localized_target_to_source, self.target_to_source)
        else:
            candidates = (self.localized_source_to_target, self.source_to_target)
        candidates += (self.localized_name, self.name)
        return next((label for label in candidates if label), "")

    @classmethod
    def from_json(cls, data: Any) -> LinkType:  # noqa: ANN401
        data = _as_dict(data)
        return cls(
            name=_as_str(data.get("name")),
            localized_name=_as_str(data.get("localizedName")),
            source_to_target=_as_str(data.get("sourceToTarget")),
            localized_source_to_target=_as_str(data.get("localizedSourceToTarget")),
            target_to_source=_as_str(data.get("targetToSource")),
            localized_target_to_source=_as_str(data.get("localizedTargetToSource")),
        )


@dataclass
class RelatedIssue:
    """The other end of an issue link."""

    id_readable: str = ""
    summary: str = ""

    @classmethod
    def from_json(cls, data: Any) -> RelatedIssue:  # noqa: ANN401
        data = _as_dict(data)
        return cls(id_readable=_as_str(data.get("idReadable")), summary=_as_str(data.get("summary")))


@dataclass
class IssueLink:
    """Links of one type and direction from an issue to other issues."""

    direction: str = ""
    link_type: LinkType = field(default_factory=LinkType)
    issues: list[RelatedIssue] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> IssueLink:  # noqa: ANN401
        data = _as_dict(data)
        return cls(
            direction=_as_str(data.get("direction")),
            link_type=LinkType.from_json(data.get("linkType")),
            issues=[RelatedIssue.from_json(issue) for issue in _as_list(data.get("issues"))],
        )


@dataclass
class Activity:
    """An entry of the activity feed of an issue or article.

    ``added`` and ``removed`` keep the raw payload; their shape depends on the
    activity category.
    """

    author: UserRef | None = None
    timestamp: int | float | None = None
    category_id: str = ""
    added: Any = None
    removed: Any = None

    @classmethod
    def from_json(cls, data: Any) -> Activity:  # noqa: ANN401
        data = _as_dict(data)
        return cls(
            author=UserRef.from_json(data.get("author")),
            timestamp=_as_number(data.get("timestamp")),
            category_id=_as_str(_as_dict(data.get("category")).get("id")),
            added=data.get("added"),
            removed=data.get("removed"),
        )


@dataclass
class Comment:
    """A comment derived from the activity feed."""

    author: str
    text: str
    timestamp: int | float | None = None


@dataclass
class Entity:
    """Snapshot of an issue or article as fetched for one export.

    ``body`` holds the issue description or the article content.
    ``fields`` is always empty for articles.
    """

    id: str = ""
    id_readable: str = ""
    summary: str = ""
    body: str = ""
    reporter: UserRef | None = None
    created: int | float | None = None
    project: ProjectRef | None = None
    tags: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    fields: list[CustomField] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any, entity_type: EntityType = EntityType.ISSUE) -> Entity:  # noqa: ANN401
        data = _as_dict(extract_result(data))
        body_key = "description" if entity_type is EntityType.ISSUE else "content"
        return cls(
            id=_as_str(data.get("id")),
            id_readable=_as_str(data.get("idReadable")),
            summary=_as_str(data.get("summary")),
            body=_as_str(data.get(body_key)),
            reporter=UserRef.from_json(data.get("reporter")),
            created=_as_number(data.get("created")),
            project=ProjectRef.from_json(data.get("project")),
            tags=[_as_str(_as_dict(tag).get("name")) for tag in _as_list(data.get("tags"))],
            attachments=[Attachment.from_json(item) for item in _as_list(data.get("attachments"))],
            fields=(
                [CustomField.from_json(item) for item in _as_list(data.get("fields"))]
                if entity_type is EntityType.ISSUE
                else []
            ),
        )


@dataclass
class EntityInfo:
    """Values available to Markdown link templates."""

    id: str = ""
    url: str = ""
    summary: str = ""

    @classmethod
    def from_json(cls, data: Any) -> EntityInfo:  # noqa: ANN401
        data = _as_dict(extract_result(data))
        return cls(id=_as_str(data.get("id")), url=_as_str(data.get("url")), summary=_as_str(data.get("summary")))


def parse_links(data: Any) -> list[IssueLink]:  # noqa: ANN401
    """Parse the ``/links`` response of an issue."""
    return [IssueLink.from_json(item) for item in _as_list(extract_result(data))]


def parse_activities(data: Any) -> list[Activity]:  # noqa: ANN401
    """Parse an ``activitiesPage`` response."""
    page = _as_dict(extract_result(data))
    return [Activity.from_json(item) for item in _as_list(page.get("activities"))]
