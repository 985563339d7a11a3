"""Export options: which sections end up in the copied Markdown.

The same option set is shared by the issue and the article exporters and is
persisted per user on the host. Options that do not apply to an entity type
(fields and links for articles) are kept and round-tripped untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .models import EntityType, extract_result

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .protocols import HostAPI

logger: logging.Logger = logging.getLogger(__name__)

Options = dict[str, Any]

DEFAULT_OPTIONS: Final[Mapping[str, bool]] = {
    "id": True,
    "summary": True,
    "description": True,
    "project": True,
    "reporter": False,
    "created": False,
    "tags": False,
    "fields": False,
    "attachments": False,
    "links": False,
    "comments": False,
}

OPTION_KEYS: Final[tuple[str, ...]] = tuple(DEFAULT_OPTIONS)

# Checkbox labels, in display order
OPTION_LABELS: Final[Mapping[str, str]] = {
    "id": "ID",
    "summary": "Summary",
    "description": "Description",
    "project": "Project",
    "reporter": "Reporter",
    "created": "Created",
    "tags": "Tags",
    "fields": "Fields",
    "attachments": "Attachments",
    "links": "Links",
    "comments": "Comments",
}

# Label overrides per entity type
_KIND_LABELS: Final[Mapping[EntityType, Mapping[str, str]]] = {
    EntityType.ARTICLE: {"description": "Content"},
}


def option_labels(entity_type: EntityType) -> dict[str, str]:
    """Checkbox labels for an entity type, in display order."""
    return {**OPTION_LABELS, **_KIND_LABELS.get(entity_type, {})}


def default_options() -> Options:
    """Return a fresh copy of the default options."""
    return dict(DEFAULT_OPTIONS)


def merge_options(persisted: Any) -> Options:  # noqa: ANN401 - arbitrary JSON
    """Overlay persisted options on the defaults.

    Persisted keys win; missing keys keep their default. Keys unknown to this
    version are kept so they survive the next save.
    """
    merged = default_options()
    if not isinstance(persisted, dict):
        return merged

    for key, value in persisted.items():
        merged[key] = bool(value) if key in DEFAULT_OPTIONS else value
    return merged


def load_options(host: HostAPI) -> Options:
    """Fetch the user's persisted options, falling back to the defaults on any failure."""
    try:
        response = extract_result(host.fetch_settings())
    except Exception as e:
        logger.debug(f"Could not load user settings, using defaults: {e}")
        return default_options()

    persisted = response.get("settings") if isinstance(response, dict) else None
    return merge_options(persisted)


def save_options(host: HostAPI, options: Mapping[str, Any]) -> bool:
    """Persist the full option set for the current user.

    Returns:
        True if the host accepted the settings. Failures are logged, never raised.
    """
    try:
        host.save_settings({"settings": dict(options)})
    except Exception as e:
        logger.debug(f"Could not save user settings: {e}")
        return False
    else:
        logger.debug("User settings saved")
        return True


def apply_overrides(options: Mapping[str, Any], *, include: list[str] | None, exclude: list[str] | None) -> Options:
    """Switch options on or off for a single export.

    Raises:
        ValueError: If an unknown option key is given
    """
    result = dict(options)
    for keys, state in ((include or [], True), (exclude or [], False)):
        for key in keys:
            if key not in DEFAULT_OPTIONS:
                msg = f"Unknown option: {key} (expected one of {', '.join(OPTION_KEYS)})"
                raise ValueError(msg)
            result[key] = state
    return result
