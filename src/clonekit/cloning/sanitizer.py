"""Content sanitization for cloned artifacts.

Clears client-sensitive fields from structured content and redacts
recognizable client identifiers (emails, phone numbers, company names) from
free text. Every processed artifact is stamped with its provenance.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Collection, Mapping, Optional

from .classifier import FieldClassifier
from .content import StructuredContent, TextContent, resolve_content
from .records import ArtifactRecord

logger = logging.getLogger(__name__)

# Reported as the single cleared field when a free-text body is redacted
TEXT_CONTENT_FIELD = "text_content"

CLEARED_VALUE = ""


@dataclass(frozen=True)
class TextRedactionPattern:
    """Pattern for redacting one kind of client identifier from free text."""

    name: str
    pattern: str
    replacement: str

    def compile(self) -> re.Pattern:
        return re.compile(self.pattern)


# Applied in this order so one pattern never eats part of another's match
TEXT_REDACTION_PATTERNS = (
    TextRedactionPattern(
        name="email",
        pattern=r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
        replacement="[EMAIL]",
    ),
    TextRedactionPattern(
        name="phone",
        pattern=r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}",
        replacement="[PHONE]",
    ),
    TextRedactionPattern(
        name="company",
        pattern=r"\b[A-Z][a-zA-Z]*(?:\s+[A-Z][a-zA-Z]*)*\s+(?:(?:Inc|Corp|Ltd)(?:\.|\b)|LLC\b)",
        replacement="[COMPANY]",
    ),
)


@dataclass
class StructuredSanitizeResult:
    processed_content: dict
    cleared_fields: list[str] = field(default_factory=list)
    preserved_fields: list[str] = field(default_factory=list)


@dataclass
class ProcessedArtifact:
    """Artifact content and metadata ready to be written under a new engagement."""

    name: str
    type: str
    template_id: Optional[str]
    content: Any
    metadata: dict


@dataclass
class ArtifactProcessResult:
    processed_artifact: ProcessedArtifact
    cleared_fields: list[str] = field(default_factory=list)
    preserved_fields: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentSanitizer:
    """Sanitizes artifact content for reuse in a new engagement.

    Usage:
        sanitizer = ContentSanitizer(FieldClassifier(table))

        result = sanitizer.sanitize_structured({"client_name": "Acme", "notes": "..."})
        clean_text = sanitizer.sanitize_text("Mail jane@example.com")
        processed = sanitizer.process_artifact(artifact, clear_client_data=True)
    """

    def __init__(
        self,
        classifier: Optional[FieldClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the sanitizer.

        Args:
            classifier: Field classifier (defaults to one over the built-in definitions)
            clock: Returns the provenance timestamp (defaults to current UTC time)
        """
        self._classifier = classifier or FieldClassifier()
        self._clock = clock or _utcnow
        self._text_patterns = [(p, p.compile()) for p in TEXT_REDACTION_PATTERNS]

    @property
    def classifier(self) -> FieldClassifier:
        return self._classifier

    def sanitize_structured(
        self,
        content: Mapping[str, Any],
        fields_to_clear: Optional[Collection[str]] = None,
        template_id: Optional[str] = None,
    ) -> StructuredSanitizeResult:
        """Clear fields from structured content.

        With ``fields_to_clear``, exactly the listed keys present in ``content``
        are cleared; listed keys that are absent are ignored. Without it, the
        classifier's client fields are cleared. Every other key is preserved,
        unclassified ones included.

        Cleared values become an empty string whatever their original type;
        the key itself stays.
        """
        if fields_to_clear is not None:
            requested = set(fields_to_clear)
            to_clear = [key for key in content if key in requested]
        else:
            to_clear = self._classifier.classify(content, template_id).client_fields

        clearing = set(to_clear)
        processed = dict(content)
        for key in to_clear:
            processed[key] = CLEARED_VALUE

        return StructuredSanitizeResult(
            processed_content=processed,
            cleared_fields=list(to_clear),
            preserved_fields=[key for key in content if key not in clearing],
        )

    def sanitize_text(self, text: str) -> str:
        """Replace emails, phone numbers and company names with placeholders."""
        result = text
        for pattern, compiled in self._text_patterns:
            result = compiled.sub(pattern.replacement, result)
        return result

    def process_artifact(
        self,
        artifact: ArtifactRecord,
        clear_client_data: bool,
        explicit_fields_to_clear: Optional[Collection[str]] = None,
    ) -> ArtifactProcessResult:
        """Prepare one artifact for cloning.

        Never raises on missing or non-JSON content. The provenance stamp
        (``clonedFrom``/``clonedAt``) is applied whether or not anything
        was cleared.
        """
        resolved = resolve_content(artifact.content)
        cleared: list[str] = []
        preserved: list[str] = []

        if isinstance(resolved, StructuredContent):
            if clear_client_data:
                sanitized = self.sanitize_structured(
                    resolved.fields, explicit_fields_to_clear, artifact.template_id
                )
                content = sanitized.processed_content
                cleared = sanitized.cleared_fields
                preserved = sanitized.preserved_fields
            else:
                content = dict(resolved.fields)
                preserved = list(resolved.fields)
        elif isinstance(resolved, TextContent):
            if clear_client_data:
                content = self.sanitize_text(resolved.text)
                cleared = [TEXT_CONTENT_FIELD]
            else:
                content = resolved.text
                preserved = [TEXT_CONTENT_FIELD]
        else:
            content = artifact.content

        metadata = dict(artifact.metadata or {})
        metadata["clonedFrom"] = artifact.id
        metadata["clonedAt"] = self._clock().isoformat()

        logger.debug(
            f"Processed artifact {artifact.id}: {len(cleared)} cleared, {len(preserved)} preserved"
        )

        return ArtifactProcessResult(
            processed_artifact=ProcessedArtifact(
                name=artifact.name,
                type=artifact.type,
                template_id=artifact.template_id,
                content=content,
                metadata=metadata,
            ),
            cleared_fields=cleared,
            preserved_fields=preserved,
        )
