from __future__ import annotations

import logging
import os
from typing import Any, Final
from urllib.parse import quote, urljoin

import requests

from . import utils
from .comments import COMMENT_CATEGORIES
from .exceptions import HostRequestError
from .models import EntityType

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "YOUTRACK_TOKEN"  # noqa: S105
_URL_ENV_VAR: Final[str] = "YOUTRACK_URL"
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "youtrack/cli/token"  # noqa: S105
DEFAULT_APP_NAME: Final[str] = "copy-context"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0

_USER_FIELDS: Final[str] = "login,fullName"
_ENTITY_COMMON_FIELDS: Final[tuple[str, ...]] = (
    "id",
    "idReadable",
    "summary",
    f"reporter({_USER_FIELDS})",
    "created",
    "project(shortName,name)",
    "tags(name)",
    f"attachments(id,name,url,size,mimeType,created,author({_USER_FIELDS}))",
)
ISSUE_FIELDS: Final[str] = ",".join(
    (
        *_ENTITY_COMMON_FIELDS,
        "description",
        "fields(value(id,name,login,fullName,localizedName,presentation,$type),"
        "projectCustomField(field(name,fieldType(valueType))))",
    )
)
ARTICLE_FIELDS: Final[str] = ",".join((*_ENTITY_COMMON_FIELDS, "content"))
LINK_FIELDS: Final[str] = (
    "direction,"
    "linkType(name,localizedName,sourceToTarget,localizedSourceToTarget,targetToSource,localizedTargetToSource),"
    "issues(idReadable,summary)"
)
ACTIVITY_FIELDS: Final[str] = (
    f"activities(author({_USER_FIELDS}),timestamp,category(id),added(text,$type),removed(text,$type))"
)

# REST collection and web UI path per entity type
_API_COLLECTIONS: Final[dict[EntityType, str]] = {EntityType.ISSUE: "issues", EntityType.ARTICLE: "articles"}
_WEB_PATHS: Final[dict[EntityType, str]] = {EntityType.ISSUE: "issue", EntityType.ARTICLE: "articles"}


def get_token(pass_path: str | None = None) -> str | None:
    """Get YouTrack token from pass path, env var YOUTRACK_TOKEN, or default pass location."""
    # Try pass path first
    if pass_path:
        return utils.get_pass_value(pass_path)

    # Try environment variable
    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    # Try default pass path
    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except (utils.PassError, ValueError, OSError):
        logger.warning("No YouTrack token specified nor found")
        return None


def get_base_url(url: str | None = None) -> str:
    """Get the YouTrack base URL from the argument or env var YOUTRACK_URL."""
    base_url = url or os.environ.get(_URL_ENV_VAR, "")
    if not base_url:
        msg = f"No YouTrack URL given. Pass --url or set {_URL_ENV_VAR}."
        raise ValueError(msg)
    return base_url.rstrip("/")


def get_client(
    url: str | None = None,
    token: str | None = None,
    *,
    app_name: str = DEFAULT_APP_NAME,
) -> YouTrackClient:
    """Get a YouTrack client for the given (or configured) server."""
    return YouTrackClient(get_base_url(url), token, app_name=app_name)


class YouTrackClient:
    """HostAPI implementation talking to the YouTrack REST API and the app's HTTP handlers."""

    _base_url: str
    _app_name: str
    _timeout: float
    _session: requests.Session

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        app_name: str = DEFAULT_APP_NAME,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"Initialized YouTrack client for {self._base_url}")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:  # noqa: ANN401 - arbitrary JSON
        url = f"{self._base_url}/api/{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            msg = f"{method} {url} failed: {e}"
            raise HostRequestError(msg) from e

        if response.status_code >= 400:
            msg = f"{method} {url} failed with status {response.status_code}: {response.text[:200]}"
            raise HostRequestError(msg)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            msg = f"{method} {url} returned invalid JSON: {e}"
            raise HostRequestError(msg) from e

    def _entity_path(self, entity_type: EntityType, entity_id: str) -> str:
        return f"{_API_COLLECTIONS[entity_type]}/{quote(entity_id, safe='')}"

    def _app_endpoint(self, handler_path: str, scope: tuple[EntityType, str] | None = None) -> str:
        prefix = f"{self._entity_path(*scope)}/" if scope else ""
        return f"{prefix}extensionEndpoints/{quote(self._app_name, safe='')}/{handler_path}"

    def fetch_settings(self) -> Any:  # noqa: ANN401
        return self._request("GET", self._app_endpoint("backend-global/user-settings"))

    def save_settings(self, payload: dict[str, Any]) -> Any:  # noqa: ANN401
        return self._request("POST", self._app_endpoint("backend-global/user-settings"), json=payload)

    def fetch_entity(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        fields = ISSUE_FIELDS if entity_type is EntityType.ISSUE else ARTICLE_FIELDS
        data = self._request("GET", self._entity_path(entity_type, entity_id), params={"fields": fields})
        if isinstance(data, dict):
            self._absolutize_attachment_urls(data)
        return data

    def fetch_links(self, entity_id: str) -> Any:  # noqa: ANN401
        path = f"{self._entity_path(EntityType.ISSUE, entity_id)}/links"
        return self._request("GET", path, params={"fields": LINK_FIELDS})

    def fetch_activities(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        path = f"{self._entity_path(entity_type, entity_id)}/activitiesPage"
        params = {"categories": ",".join(COMMENT_CATEGORIES), "fields": ACTIVITY_FIELDS}
        return self._request("GET", path, params=params)

    def fetch_entity_info(self, entity_type: EntityType, entity_id: str) -> dict[str, str]:
        data = self._request("GET", self._entity_path(entity_type, entity_id), params={"fields": "idReadable,summary"})
        data = data if isinstance(data, dict) else {}
        readable_id = data.get("idReadable") or entity_id
        return {
            "id": readable_id,
            "url": f"{self._base_url}/{_WEB_PATHS[entity_type]}/{readable_id}",
            "summary": data.get("summary") or "",
        }

    def fetch_template(self, entity_type: EntityType, entity_id: str) -> Any:  # noqa: ANN401
        return self._request("GET", self._app_endpoint("backend/get-template", scope=(entity_type, entity_id)))

    def _absolutize_attachment_urls(self, data: dict[str, Any]) -> None:
        """Attachment URLs come back relative to the server root; make them usable outside YouTrack."""
        attachments = data.get("attachments")
        if not isinstance(attachments, list):
            return
        for attachment in attachments:
            if isinstance(attachment, dict) and isinstance(attachment.get("url"), str) and attachment["url"]:
                attachment["url"] = urljoin(f"{self._base_url}/", attachment["url"])
