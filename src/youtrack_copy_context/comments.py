"""Derive comments from the activity feed of an issue or article."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .models import Activity, Comment

if TYPE_CHECKING:
    from collections.abc import Iterable

logger: logging.Logger = logging.getLogger(__name__)

# Activity categories requested from the host when loading comments
COMMENT_CATEGORIES: Final[tuple[str, ...]] = (
    "CommentsCategory",
    "CommentTextCategory",
    "ArticleCommentsCategory",
    "CommentAttachmentsCategory",
    "CommentReactionCategory",
    "CommentTemporarilyDeletedCategory",
    "CommentVisibilityCategory",
)


def is_comment_activity(activity: Activity) -> bool:
    """Check whether an activity belongs to one of the comment categories."""
    return "comment" in activity.category_id.lower()


def _text_fragments(payload: Any) -> list[str]:  # noqa: ANN401 - arbitrary JSON
    """Collect the text fragments of an ``added``/``removed`` payload.

    Fragments are plain strings or objects exposing a string ``text``;
    anything else is dropped.
    """
    if not payload:
        return []

    items = payload if isinstance(payload, list) else [payload]
    fragments: list[str] = []
    for item in items:
        if isinstance(item, str):
            text = item
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            text = item["text"]
        else:
            continue
        if text:
            fragments.append(text)
    return fragments


def extract_comments(activities: Iterable[Activity | dict[str, Any]]) -> list[Comment]:
    """Flatten comment activities into a chronological list of comments.

    Each text fragment of a comment activity becomes one Comment carrying the
    activity's author and timestamp: first the ``added`` fragments, then the
    ``removed`` ones. Removed text is not marked as such.

    Args:
        activities: Activities in feed order, parsed or as raw JSON

    Returns:
        Comments in feed order. Activities that cannot be read are skipped.
    """
    comments: list[Comment] = []

    for index, item in enumerate(activities):
        try:
            activity = item if isinstance(item, Activity) else Activity.from_json(item)
            if not is_comment_activity(activity):
                continue

            author = activity.author.display_name if activity.author else ""
            texts = _text_fragments(activity.added) + _text_fragments(activity.removed)
            comments.extend(Comment(author=author, text=text, timestamp=activity.timestamp) for text in texts)
        except Exception as e:
            logger.debug(f"Skipping unreadable activity #{index}: {e}")

    logger.debug(f"Extracted {len(comments)} comments")
    return comments
