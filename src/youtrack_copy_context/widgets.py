"""Export sessions that tie the host, the renderers and the clipboard together.

A session corresponds to one opened export view for one issue or article:

ContextExportSession
    Loads the user's export options and the entity data, re-renders the
    Markdown whenever options change, and copies it on request.

LinkCopySession
    Loads the link template and entity info, builds the Markdown link, lets
    the user edit it, and copies it on request.

Load flow
---------
Options and entity data are loaded independently. Failing to load the options
is silent: the defaults apply. Failing to load the entity puts the session in
the ERROR state with a message for the user; nothing is rendered then.

Copy flow
---------
The current options are persisted in the background and the clipboard write
does not wait for it; a failed save never affects the copy. On success the
user is notified and the view is closed; on failure the view stays open so
the user can retry.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import TYPE_CHECKING, Any

from .clipboard import copy_to_clipboard
from .comments import extract_comments
from .exceptions import MissingContextError
from .link_builder import build_markdown_link, resolve_template
from .models import Entity, EntityInfo, EntityType, extract_result, parse_activities, parse_links
from .options import DEFAULT_OPTIONS, Options, default_options, load_options, option_labels, save_options
from .renderer import ENTITY_KINDS, MarkdownRenderer

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import Comment, IssueLink
    from .protocols import HostAPI, NotificationLevel, Notifier

logger = logging.getLogger(__name__)


class LoadState(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class LoggingNotifier:
    """Notifier that reports through the logging system."""

    closed: bool = False

    def notify(self, message: str, level: NotificationLevel) -> None:
        if level == "error":
            logger.error(message)
        else:
            logger.info(message)

    def close_view(self) -> None:
        self.closed = True


class _Session:
    """State shared by both session types."""

    _host: HostAPI
    _notifier: Notifier
    _clipboard: Callable[[str], bool]

    def __init__(
        self,
        host: HostAPI,
        entity_type: EntityType,
        entity_id: str | None,
        *,
        notifier: Notifier | None = None,
        clipboard: Callable[[str], bool] = copy_to_clipboard,
    ) -> None:
        self._host = host
        self._notifier = notifier or LoggingNotifier()
        self._clipboard = clipboard
        self.entity_type: EntityType = entity_type
        self.entity_id: str | None = entity_id
        self.state: LoadState = LoadState.LOADING
        self.error: str | None = None

    def _require_entity_id(self) -> str:
        if not self.entity_id:
            msg = f"No {self.entity_type.value} context found"
            raise MissingContextError(msg)
        return self.entity_id

    def _fail(self, message: str) -> None:
        self.state = LoadState.ERROR
        self.error = message

    def _write(self, text: str, *, what: str) -> bool:
        if self._clipboard(text):
            self._notifier.notify(f"{what} copied to clipboard", "success")
            self._notifier.close_view()
            return True
        self._notifier.notify(f"Failed to copy {what.lower()}", "error")
        return False


class ContextExportSession(_Session):
    """Copies an issue or article as a Markdown document."""

    _executor: ThreadPoolExecutor
    _pending_saves: list[Future[bool]]

    def __init__(
        self,
        host: HostAPI,
        entity_type: EntityType,
        entity_id: str | None,
        *,
        notifier: Notifier | None = None,
        clipboard: Callable[[str], bool] = copy_to_clipboard,
    ) -> None:
        super().__init__(host, entity_type, entity_id, notifier=notifier, clipboard=clipboard)
        self._renderer = MarkdownRenderer(ENTITY_KINDS[entity_type], base_url=host.base_url)
        self._options: Options = default_options()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="settings-save")
        self._pending_saves = []
        self.entity: Entity | None = None
        self.links: list[IssueLink] = []
        self.comments: list[Comment] = []

    @property
    def options(self) -> Options:
        return dict(self._options)

    @property
    def labels(self) -> dict[str, str]:
        """Option checkbox labels for this entity type."""
        return option_labels(self.entity_type)

    def load(self) -> None:
        """Load the user's options and the entity data."""
        self._options = load_options(self._host)

        try:
            entity_id = self._require_entity_id()
            entity = Entity.from_json(self._host.fetch_entity(self.entity_type, entity_id), self.entity_type)
            links = parse_links(self._host.fetch_links(entity_id)) if self._renderer.kind.has_links else []
            activities = parse_activities(self._host.fetch_activities(self.entity_type, entity_id))
        except MissingContextError as e:
            self._fail(str(e))
            return
        except Exception as e:
            logger.exception(f"Failed to load {self.entity_type.value} context")
            self._fail(str(e) or "Failed to load data")
            return

        self.entity = entity
        self.links = links
        self.comments = extract_comments(activities)
        self.state = LoadState.READY
        logger.debug(
            f"Loaded {self.entity_type.value} {entity.id_readable}: {len(links)} links, {len(self.comments)} comments"
        )

    def toggle(self, key: str) -> bool:
        """Flip one option and return its new state."""
        if key not in DEFAULT_OPTIONS:
            msg = f"Unknown option: {key}"
            raise KeyError(msg)
        self._options[key] = not self._options.get(key)
        return self._options[key]

    def update_options(self, options: dict[str, Any]) -> None:
        self._options.update(options)

    @property
    def markdown(self) -> str:
        """The Markdown for the current options; empty until the entity is loaded."""
        if self.state is not LoadState.READY or self.entity is None:
            return ""
        return self._renderer.render(self.entity, self._options, comments=self.comments, links=self.links)

    def copy(self) -> bool:
        """Persist the options in the background and copy the Markdown to the clipboard.

        Nothing is saved or copied unless the entity has been loaded.
        """
        if self.state is not LoadState.READY:
            self._notifier.notify(f"Nothing to copy: {self.error or 'context is not loaded'}", "error")
            return False
        enabled = [label for key, label in self.labels.items() if self._options.get(key)]
        logger.debug(f"Copying {self.entity_id} with sections: {', '.join(enabled)}")
        self._pending_saves.append(self._executor.submit(save_options, self._host, self.options))
        return self._write(self.markdown, what="Context")

    def close(self) -> None:
        """Wait for background option saves to finish."""
        self._executor.shutdown(wait=True)
        saved = sum(1 for future in self._pending_saves if future.result())
        logger.debug(f"{saved}/{len(self._pending_saves)} settings saves succeeded")


class LinkCopySession(_Session):
    """Copies a templated Markdown link to an issue or article.

    The link stays editable, so it can be fixed up or copied by hand when
    loading or the clipboard fails.
    """

    def __init__(
        self,
        host: HostAPI,
        entity_type: EntityType,
        entity_id: str | None,
        *,
        notifier: Notifier | None = None,
        clipboard: Callable[[str], bool] = copy_to_clipboard,
        template: str | None = None,
    ) -> None:
        super().__init__(host, entity_type, entity_id, notifier=notifier, clipboard=clipboard)
        self._template_override = template
        self.link: str = ""

    def load(self) -> None:
        """Fetch the entity info and template and build the link."""
        try:
            entity_id = self._require_entity_id()
            info = EntityInfo.from_json(self._host.fetch_entity_info(self.entity_type, entity_id))
            template = self._template_override
            if template is None:
                response = extract_result(self._host.fetch_template(self.entity_type, entity_id))
                template = response.get("template") if isinstance(response, dict) else None
        except MissingContextError as e:
            self._fail(str(e))
            return
        except Exception as e:
            logger.exception("Failed to load entity info")
            self._fail(str(e) or "Failed to load data")
            return

        self.link = build_markdown_link(resolve_template(template), info)
        self.state = LoadState.READY

    def set_link(self, text: str) -> None:
        self.link = text

    def copy(self) -> bool:
        return self._write(self.link or "", what="Link")
