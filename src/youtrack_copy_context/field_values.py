"""Custom field values and their display text.

YouTrack reports a custom field value as a primitive, an entity reference
(user, enum bundle element, version, ...) or a list of either, depending on
the field type. The value is parsed once into a small tagged union and then
reduced to text by a total function, so unexpected shapes end up as empty text
instead of errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import CustomField

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmptyValue:
    """No value, or a value of an unrecognised shape."""


@dataclass(frozen=True)
class PrimitiveValue:
    """A string, number or boolean value."""

    value: str | int | float | bool


@dataclass(frozen=True)
class NamedValue:
    """A reference to another entity, carrying its display names."""

    presentation: str = ""
    name: str = ""
    full_name: str = ""
    login: str = ""
    localized_name: str = ""


@dataclass(frozen=True)
class ListValue:
    """A multi-value field."""

    items: tuple[FieldValue, ...] = field(default_factory=tuple)


FieldValue = EmptyValue | PrimitiveValue | NamedValue | ListValue


def _attribute_text(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None or isinstance(value, dict | list):
        return ""
    return str(value)


def parse_field_value(raw: Any) -> FieldValue:  # noqa: ANN401 - arbitrary JSON
    """Parse a raw JSON field value into a FieldValue."""
    if raw is None:
        return EmptyValue()
    if isinstance(raw, str | int | float | bool):
        return PrimitiveValue(raw)
    if isinstance(raw, list):
        return ListValue(tuple(parse_field_value(item) for item in raw))
    if isinstance(raw, dict):
        return NamedValue(
            presentation=_attribute_text(raw, "presentation"),
            name=_attribute_text(raw, "name"),
            full_name=_attribute_text(raw, "fullName"),
            login=_attribute_text(raw, "login"),
            localized_name=_attribute_text(raw, "localizedName"),
        )
    logger.debug(f"Unrecognised field value of type {type(raw).__name__}")
    return EmptyValue()


def _primitive_text(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def field_value_text(value: FieldValue) -> str:
    """Reduce a FieldValue to display text. Never raises."""
    match value:
        case PrimitiveValue(value=primitive):
            return _primitive_text(primitive)
        case ListValue(items=items):
            texts = (field_value_text(item) for item in items)
            return ", ".join(text for text in texts if text)
        case NamedValue():
            candidates = (value.presentation, value.name, value.full_name, value.login, value.localized_name)
            return next((candidate for candidate in candidates if candidate), "")
        case _:
            return ""


def format_field_bullet(custom_field: CustomField) -> str | None:
    """Format a custom field as a Markdown bullet, or None when it has no displayable value."""
    text = field_value_text(custom_field.value)
    if not text:
        return None
    return f"- {custom_field.name}: {text}"

