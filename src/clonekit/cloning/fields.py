"""Field definitions for client-data clearing.

A field definition declares whether a content key holds client-sensitive data
(cleared on clone) or reusable methodology (always preserved). Keys not
declared for a template fall back to the key-name patterns below.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..exceptions import FieldConfigError


class FieldCategory(str, Enum):
    """What happens to a field when an engagement is cloned."""

    CLIENT_SENSITIVE = "client_sensitive"
    PRESERVABLE = "preservable"


@dataclass(frozen=True)
class FieldDefinition:
    """Declared classification for one content key."""

    id: str
    label: str
    category: FieldCategory
    template_ids: frozenset = field(default_factory=frozenset)  # empty = every template
    description: str = ""

    def applies_to(self, template_id: Optional[str]) -> bool:
        """Check whether this definition is in force for ``template_id``.

        Universal definitions always apply. Without a template id every
        definition applies.
        """
        if not self.template_ids or template_id is None:
            return True
        return template_id in self.template_ids


class FieldDefinitionTable:
    """Immutable, validated collection of field definitions.

    Raises FieldConfigError if one id is declared in both categories.
    """

    def __init__(self, definitions: Iterable[FieldDefinition] = ()):
        self._definitions = tuple(definitions)

        categories: dict[str, FieldCategory] = {}
        for definition in self._definitions:
            seen = categories.setdefault(definition.id, definition.category)
            if seen != definition.category:
                raise FieldConfigError(
                    f"Field '{definition.id}' is declared both {seen.value} and {definition.category.value}"
                )

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def applicable(self, template_id: Optional[str]) -> tuple:
        """Definitions in force for ``template_id``, in declaration order."""
        return tuple(d for d in self._definitions if d.applies_to(template_id))

    def ids(self) -> frozenset:
        return frozenset(d.id for d in self._definitions)

    def by_category(self, category: FieldCategory) -> tuple:
        return tuple(d for d in self._definitions if d.category == category)


def _definition(id, label, category, template_ids, description):
    return FieldDefinition(
        id=id,
        label=label,
        category=category,
        template_ids=frozenset(template_ids),
        description=description,
    )


DEFAULT_FIELD_DEFINITIONS = FieldDefinitionTable(
    [
        # Client-sensitive
        _definition(
            "company_overview",
            "Company Overview",
            FieldCategory.CLIENT_SENSITIVE,
            ["TPL-01"],
            "General information about the client company",
        ),
        _definition(
            "key_stakeholders",
            "Key Stakeholders",
            FieldCategory.CLIENT_SENSITIVE,
            ["TPL-01"],
            "Names and contact information for client stakeholders",
        ),
        _definition(
            "budget_range",
            "Budget Range",
            FieldCategory.CLIENT_SENSITIVE,
            ["TPL-01"],
            "Client budget information",
        ),
        _definition(
            "client_name",
            "Client Name",
            FieldCategory.CLIENT_SENSITIVE,
            ["TPL-12"],
            "Client company or individual name",
        ),
        _definition(
            "testimonial",
            "Client Testimonial",
            FieldCategory.CLIENT_SENSITIVE,
            ["TPL-12"],
            "Client quotes and testimonials",
        ),
        # Preservable
        _definition(
            "process_description",
            "Process Description",
            FieldCategory.PRESERVABLE,
            ["TPL-02"],
            "Workflow and process documentation",
        ),
        _definition(
            "success_criteria",
            "Success Criteria",
            FieldCategory.PRESERVABLE,
            ["TPL-01", "TPL-03"],
            "Project success metrics and KPIs",
        ),
        _definition(
            "ai_components",
            "AI Components",
            FieldCategory.PRESERVABLE,
            ["TPL-03"],
            "Selected AI technologies and components",
        ),
        _definition(
            "automation_percentage",
            "Automation Level",
            FieldCategory.PRESERVABLE,
            ["TPL-03"],
            "Expected automation percentage",
        ),
        _definition(
            "implementation_phases",
            "Implementation Phases",
            FieldCategory.PRESERVABLE,
            ["TPL-05"],
            "Project phase definitions and tasks",
        ),
    ]
)


# Key-name fallbacks. Checked in order, sensitive before preservable.
CLIENT_KEY_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"company",
        r"client",
        r"stakeholder",
        r"contact",
        r"budget",
        r"testimonial",
        r"name$",
    )
)

PRESERVABLE_KEY_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"process",
        r"workflow",
        r"criteria",
        r"automation",
        r"phase",
        r"implementation",
        r"technical",
        r"integration",
    )
)
