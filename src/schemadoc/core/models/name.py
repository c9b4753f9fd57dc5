"""Physical/logical name value object derived from catalog comments."""

import re

from pydantic import BaseModel, ConfigDict, Field

_FIRST_WHITESPACE = re.compile(r"\s")


class Name(BaseModel):
    """Physical identifier plus the logical name and comment parsed from it.

    Build instances with :func:`resolve_name` so the comment parsing rule is
    applied consistently.
    """

    model_config = ConfigDict(frozen=True)

    physical_name: str = Field(..., description="Identifier as stored in the catalog")
    logical_name: str = Field(..., description="Human-readable name from the comment")
    comment: str = Field("", description="Remaining free-text comment")


def resolve_name(physical_name: str, raw_comment: str | None = None) -> Name:
    """Derive a Name from a raw catalog comment.

    The trimmed comment is split at its first whitespace character: the text
    before becomes the logical name, the trimmed text after becomes the comment.
    A comment without whitespace is used entirely as the logical name.

    Args:
        physical_name: Identifier as stored in the schema catalog.
        raw_comment: Comment text attached to the object, if any.

    Returns:
        Resolved Name.
    """
    text = (raw_comment or "").strip()
    if not text:
        return Name(physical_name=physical_name, logical_name=physical_name, comment="")

    parts = _FIRST_WHITESPACE.split(text, maxsplit=1)
    if len(parts) == 1:
        return Name(physical_name=physical_name, logical_name=text, comment="")

    return Name(
        physical_name=physical_name,
        logical_name=parts[0],
        comment=parts[1].strip(),
    )


def has_logical_name(name: Name) -> bool:
    return name.logical_name != name.physical_name


def has_comment(name: Name) -> bool:
    return len(name.comment) > 0


def display_name(name: Name) -> str:
    """Logical name when one exists, otherwise the physical name."""
    return name.logical_name if has_logical_name(name) else name.physical_name


def to_display_string(name: Name) -> str:
    """Combine logical name, physical name and comment for display."""
    if has_logical_name(name) and has_comment(name):
        return f"{name.logical_name} ({name.physical_name}) - {name.comment}"
    if has_logical_name(name):
        return f"{name.logical_name} ({name.physical_name})"
    if has_comment(name):
        return f"{name.physical_name} - {name.comment}"
    return name.physical_name
