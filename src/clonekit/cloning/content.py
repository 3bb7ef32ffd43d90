"""Artifact content resolution.

Artifact content is stored either as a JSON object or as free text. It is
resolved exactly once, at the boundary, into one of three shapes.
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class StructuredContent:
    """Content that parsed to a JSON object."""

    fields: Mapping[str, Any]


@dataclass(frozen=True)
class TextContent:
    """Content that is not a JSON object; treated as free text."""

    text: str


@dataclass(frozen=True)
class UnresolvedContent:
    """Artifact with no content, or content that is neither text nor a mapping."""

    raw: Any = None


ArtifactContent = Union[StructuredContent, TextContent, UnresolvedContent]


def resolve_content(raw: Any) -> ArtifactContent:
    """Resolve raw stored content with a single parse attempt.

    - ``None`` resolves to UnresolvedContent
    - a mapping, or a string holding a JSON object, resolves to StructuredContent
    - any other string (including JSON arrays and scalars) resolves to TextContent
    """
    if raw is None:
        return UnresolvedContent()
    if isinstance(raw, Mapping):
        return StructuredContent(dict(raw))
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return TextContent(raw)
        if isinstance(parsed, dict):
            return StructuredContent(parsed)
        return TextContent(raw)
    # Anything else (numbers, lists from a JSON column) is kept as-is
    return UnresolvedContent(raw)
