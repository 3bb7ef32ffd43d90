"""Field classification for artifact content.

Decides which keys of a structured artifact are client-sensitive and which
capture reusable methodology. Declared definitions for the artifact's template
win; remaining keys fall back to key-name patterns; anything else is left
unclassified and is never cleared automatically.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .fields import (
    CLIENT_KEY_PATTERNS,
    DEFAULT_FIELD_DEFINITIONS,
    PRESERVABLE_KEY_PATTERNS,
    FieldCategory,
    FieldDefinitionTable,
)

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Classification of the keys of one content mapping, in content key order."""

    client_fields: list[str] = field(default_factory=list)
    preservable_fields: list[str] = field(default_factory=list)
    unclassified: list[str] = field(default_factory=list)


@dataclass
class FieldActionSummary:
    """Preview of what a clone would do to declared fields."""

    will_clear: list = field(default_factory=list)  # FieldDefinition
    will_preserve: list = field(default_factory=list)  # FieldDefinition
    unknown: list[str] = field(default_factory=list)


class FieldClassifier:
    """Classifies content keys against an injected field definition table.

    Usage:
        classifier = FieldClassifier(load_field_definitions())
        result = classifier.classify({"client_name": "Acme"}, "TPL-12")
        result.client_fields  # ["client_name"]
    """

    def __init__(self, definitions: Optional[FieldDefinitionTable] = None):
        self._definitions = definitions if definitions is not None else DEFAULT_FIELD_DEFINITIONS

    @property
    def definitions(self) -> FieldDefinitionTable:
        return self._definitions

    def classify(self, content: Mapping[str, Any], template_id: Optional[str] = None) -> Classification:
        """Classify every key of ``content``.

        Args:
            content: Structured artifact content
            template_id: Template the artifact was built from, if known

        Returns:
            Classification whose three lists partition ``content``'s keys
        """
        declared = {d.id: d.category for d in self._definitions.applicable(template_id)}
        result = Classification()

        for key in content:
            category = declared.get(key)
            if category is None:
                category = self._match_patterns(key)

            if category == FieldCategory.CLIENT_SENSITIVE:
                result.client_fields.append(key)
            elif category == FieldCategory.PRESERVABLE:
                result.preservable_fields.append(key)
            else:
                result.unclassified.append(key)

        logger.debug(
            f"Classified {len(content)} keys for template {template_id}: "
            f"{len(result.client_fields)} client, {len(result.preservable_fields)} preservable, "
            f"{len(result.unclassified)} unclassified"
        )
        return result

    @staticmethod
    def _match_patterns(key: str) -> Optional[FieldCategory]:
        # Redaction wins: sensitive patterns are checked first
        if any(p.search(key) for p in CLIENT_KEY_PATTERNS):
            return FieldCategory.CLIENT_SENSITIVE
        if any(p.search(key) for p in PRESERVABLE_KEY_PATTERNS):
            return FieldCategory.PRESERVABLE
        return None

    def definitions_for_template(self, template_id: str) -> list:
        """All field definitions in force for a template, client-sensitive first."""
        applicable = self._definitions.applicable(template_id)
        return [d for d in applicable if d.category == FieldCategory.CLIENT_SENSITIVE] + [
            d for d in applicable if d.category == FieldCategory.PRESERVABLE
        ]

    def action_summary(
        self, content: Mapping[str, Any], template_id: Optional[str] = None
    ) -> FieldActionSummary:
        """Summarize which declared definitions a clone would clear or keep.

        Keys that match no declared definition at all are reported as unknown,
        even when a key-name pattern would classify them.
        """
        classification = self.classify(content, template_id)
        client = set(classification.client_fields)
        preservable = set(classification.preservable_fields)

        will_clear = [
            d for d in self._definitions.by_category(FieldCategory.CLIENT_SENSITIVE) if d.id in client
        ]
        will_preserve = [
            d for d in self._definitions.by_category(FieldCategory.PRESERVABLE) if d.id in preservable
        ]
        known = self._definitions.ids()
        unknown = [key for key in content if key not in known]

        return FieldActionSummary(will_clear=will_clear, will_preserve=will_preserve, unknown=unknown)
