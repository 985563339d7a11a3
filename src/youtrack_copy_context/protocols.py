"""Protocols defining the contracts between the exporters and their surroundings.

The export logic is independent of how data reaches it and where the result
goes. Three collaborators are involved:

1. HostAPI: Reads entities, links, activities and link templates from the
   YouTrack server, and reads/writes the per-user export options
2. Notifier: Shows the outcome of a copy to the user and closes the view
3. Clipboard: Takes the produced text (see clipboard.py)

This separation allows:
- Running the sessions against an in-memory host in tests
- Swapping the user interface (CLI output today) without touching the rendering
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from .models import EntityType

NotificationLevel = Literal["success", "error", "info"]


class HostAPI(Protocol):
    """Protocol for the YouTrack server an export session talks to.

    All fetch methods return raw JSON as decoded from the response; parsing
    and tolerance of missing data happen in models.py. Implementations raise
    on transport or HTTP failures and never retry.
    """

    @property
    def base_url(self) -> str:
        """Base URL of the YouTrack instance, without trailing slash."""
        ...

    def fetch_settings(self) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch the current user's persisted options as ``{"settings": {...} | None}``."""
        ...

    def save_settings(self, payload: dict[str, Any]) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Persist ``{"settings": {...}}`` for the current user."""
        ...

    def fetch_entity(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch an issue or article with the fixed export field projection."""
        ...

    def fetch_links(self, entity_id: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch the links of an issue."""
        ...

    def fetch_activities(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch the comment-related activity page of an issue or article."""
        ...

    def fetch_entity_info(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch ``{"id", "url", "summary"}`` of an issue or article."""
        ...

    def fetch_template(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """Fetch ``{"template": ...}``, the link template configured for the entity's project."""
        ...


class Notifier(Protocol):
    """Protocol for user-facing feedback of a session."""

    def notify(self, message: str, level: NotificationLevel) -> None:
        """Show a message to the user."""
        ...

    def close_view(self) -> None:
        """Dismiss the view the session runs in."""
        ...
