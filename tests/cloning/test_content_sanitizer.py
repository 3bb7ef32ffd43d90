"""Tests for content resolution and sanitization."""

import json
from datetime import datetime, timezone

import pytest

from clonekit.cloning import (TEXT_CONTENT_FIELD, ArtifactRecord,
                              ContentSanitizer, FieldCategory, FieldClassifier,
                              FieldDefinition, FieldDefinitionTable,
                              StructuredContent, TextContent,
                              UnresolvedContent, resolve_content)

FIXED_NOW = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def sanitizer():
    table = FieldDefinitionTable(
        [
            FieldDefinition(
                id="client_name",
                label="Client Name",
                category=FieldCategory.CLIENT_SENSITIVE,
                template_ids=frozenset({"TPL-12"}),
            ),
            FieldDefinition(
                id="process_automation_level",
                label="Automation Level",
                category=FieldCategory.PRESERVABLE,
                template_ids=frozenset({"TPL-12"}),
            ),
        ]
    )
    return ContentSanitizer(FieldClassifier(table), clock=lambda: FIXED_NOW)


def _artifact(content, template_id="TPL-12", metadata=None):
    return ArtifactRecord(
        id="art-source",
        engagement_id="eng-source",
        name="Discovery Notes",
        template_id=template_id,
        content=content,
        metadata=metadata or {},
    )


class TestResolveContent:
    """Content is resolved once into one of three shapes."""

    def test_json_object_string_is_structured(self):
        assert resolve_content('{"a": 1}') == StructuredContent({"a": 1})

    def test_mapping_is_structured(self):
        assert isinstance(resolve_content({"a": 1}), StructuredContent)

    def test_plain_text_is_text(self):
        assert resolve_content("hello there") == TextContent("hello there")

    def test_json_array_is_text(self):
        """Only JSON objects count as structured."""
        assert resolve_content("[1, 2]") == TextContent("[1, 2]")

    def test_none_is_unresolved(self):
        assert isinstance(resolve_content(None), UnresolvedContent)


class TestSanitizeStructured:
    """Tests for sanitize_structured."""

    def test_auto_detect_clears_client_fields(self, sanitizer):
        """Worked example: client_name cleared, notes kept untouched."""
        content = {
            "client_name": "Acme",
            "process_automation_level": 80,
            "notes": "call John at john@acme.com",
        }
        result = sanitizer.sanitize_structured(content, template_id="TPL-12")
        assert result.processed_content["client_name"] == ""
        assert result.processed_content["process_automation_level"] == 80
        assert result.processed_content["notes"] == "call John at john@acme.com"
        assert result.cleared_fields == ["client_name"]
        assert result.preserved_fields == ["process_automation_level", "notes"]

    def test_explicit_fields_clear_exactly_those_present(self, sanitizer):
        """Only the requested keys that exist are cleared; absent ones are ignored."""
        content = {"client_name": "Acme", "notes": "n", "score": 4}
        result = sanitizer.sanitize_structured(content, ["notes", "missing_key"])
        assert result.cleared_fields == ["notes"]
        assert result.preserved_fields == ["client_name", "score"]
        assert result.processed_content == {"client_name": "Acme", "notes": "", "score": 4}

    def test_empty_explicit_list_clears_nothing(self, sanitizer):
        """An explicit empty set clears nothing, even client-looking keys."""
        result = sanitizer.sanitize_structured({"client_name": "Acme"}, [])
        assert result.cleared_fields == []
        assert result.preserved_fields == ["client_name"]

    def test_cleared_values_become_empty_string_whatever_the_type(self, sanitizer):
        """Numbers, booleans and nested objects all become ''."""
        content = {"budget": 50000, "client_active": True, "company": {"name": "Acme"}}
        result = sanitizer.sanitize_structured(content)
        assert result.processed_content == {"budget": "", "client_active": "", "company": ""}

    def test_input_is_not_mutated(self, sanitizer):
        """The caller's mapping is left as it was."""
        content = {"client_name": "Acme"}
        sanitizer.sanitize_structured(content, template_id="TPL-12")
        assert content == {"client_name": "Acme"}

    @pytest.mark.parametrize(
        "fields",
        [set(), {"a"}, {"a", "c"}, {"a", "b", "c", "d"}],
    )
    def test_cleared_plus_preserved_covers_all_keys(self, sanitizer, fields):
        """Cleared is exactly F ∩ keys, and cleared + preserved = keys."""
        content = {"a": 1, "b": "two", "c": None, "d": [4]}
        result = sanitizer.sanitize_structured(content, fields)
        assert set(result.cleared_fields) == fields & set(content)
        assert set(result.preserved_fields) == set(content) - fields
        assert len(result.cleared_fields) + len(result.preserved_fields) == len(content)


class TestSanitizeText:
    """Tests for sanitize_text."""

    def test_worked_example(self, sanitizer):
        text = "Contact: jane@example.com or (555) 123-4567, ACME Corp."
        assert sanitizer.sanitize_text(text) == "Contact: [EMAIL] or [PHONE], [COMPANY]"

    @pytest.mark.parametrize("phone", ["555-123-4567", "555.123.4567", "555 123 4567", "5551234567"])
    def test_phone_separator_styles(self, sanitizer, phone):
        assert sanitizer.sanitize_text(f"Call {phone} today") == "Call [PHONE] today"

    @pytest.mark.parametrize(
        "company",
        ["Globex Inc.", "Initech LLC", "Wayne Enterprises Ltd.", "Umbrella Corp"],
    )
    def test_company_suffixes(self, sanitizer, company):
        assert sanitizer.sanitize_text(f"Signed with {company}") == "Signed with [COMPANY]"

    def test_email_redacted_before_phone(self, sanitizer):
        """Digits inside an email address are not treated as a phone number."""
        assert sanitizer.sanitize_text("ops5551234567@example.com") == "[EMAIL]"

    def test_text_without_matches_is_unchanged(self, sanitizer):
        text = "Kick-off workshop, then map the intake workflow (2 weeks)."
        assert sanitizer.sanitize_text(text) == text

    def test_lowercase_suffix_words_are_not_companies(self, sanitizer):
        text = "the corporation agreed"
        assert sanitizer.sanitize_text(text) == text


class TestProcessArtifact:
    """Tests for process_artifact."""

    def test_structured_with_clearing(self, sanitizer):
        content = json.dumps({"client_name": "Acme", "process_automation_level": 80})
        result = sanitizer.process_artifact(_artifact(content), clear_client_data=True)
        assert result.processed_artifact.content == {"client_name": "", "process_automation_level": 80}
        assert result.cleared_fields == ["client_name"]
        assert result.preserved_fields == ["process_automation_level"]

    def test_structured_with_explicit_fields(self, sanitizer):
        content = json.dumps({"client_name": "Acme", "notes": "n"})
        result = sanitizer.process_artifact(_artifact(content), True, ["notes"])
        assert result.processed_artifact.content == {"client_name": "Acme", "notes": ""}
        assert result.cleared_fields == ["notes"]

    def test_structured_without_clearing_reports_all_preserved(self, sanitizer):
        """Content is inspected but left as it was."""
        content = {"client_name": "Acme", "notes": "n"}
        result = sanitizer.process_artifact(_artifact(content), clear_client_data=False)
        assert result.processed_artifact.content == content
        assert result.cleared_fields == []
        assert result.preserved_fields == ["client_name", "notes"]

    def test_text_with_clearing(self, sanitizer):
        result = sanitizer.process_artifact(_artifact("Email jane@example.com"), clear_client_data=True)
        assert result.processed_artifact.content == "Email [EMAIL]"
        assert result.cleared_fields == [TEXT_CONTENT_FIELD]
        assert result.preserved_fields == []

    def test_text_without_clearing_is_untouched(self, sanitizer):
        result = sanitizer.process_artifact(_artifact("Email jane@example.com"), clear_client_data=False)
        assert result.processed_artifact.content == "Email jane@example.com"
        assert result.cleared_fields == []
        assert result.preserved_fields == [TEXT_CONTENT_FIELD]

    @pytest.mark.parametrize("clear", [True, False])
    def test_null_content_does_not_fail(self, sanitizer, clear):
        result = sanitizer.process_artifact(_artifact(None), clear_client_data=clear)
        assert result.processed_artifact.content is None
        assert result.cleared_fields == []
        assert result.preserved_fields == []

    @pytest.mark.parametrize("content", [None, "plain text", '{"client_name": "Acme"}', "{broken json"])
    @pytest.mark.parametrize("clear", [True, False])
    def test_provenance_always_stamped(self, sanitizer, content, clear):
        """clonedFrom/clonedAt are stamped whether or not anything was cleared."""
        result = sanitizer.process_artifact(_artifact(content, metadata={"owner": "pm"}), clear)
        metadata = result.processed_artifact.metadata
        assert metadata["clonedFrom"] == "art-source"
        assert metadata["clonedAt"] == FIXED_NOW.isoformat()
        assert metadata["owner"] == "pm"

    def test_source_metadata_is_not_mutated(self, sanitizer):
        artifact = _artifact("text", metadata={"owner": "pm"})
        sanitizer.process_artifact(artifact, True)
        assert artifact.metadata == {"owner": "pm"}

    def test_name_type_and_template_carry_over(self, sanitizer):
        result = sanitizer.process_artifact(_artifact("x", template_id="TPL-07"), True)
        assert result.processed_artifact.name == "Discovery Notes"
        assert result.processed_artifact.type == "document"
        assert result.processed_artifact.template_id == "TPL-07"
