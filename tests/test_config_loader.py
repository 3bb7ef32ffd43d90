"""Tests for the field definition loader."""

from pathlib import Path

import pytest

from clonekit.cloning import DEFAULT_FIELD_DEFINITIONS, FieldCategory
from clonekit.config import get_field_definitions_path, settings
from clonekit.config_loader import get_field_definitions, load_field_definitions
from clonekit.exceptions import FieldConfigError


REPO_ROOT = Path(__file__).resolve().parents[1]


def _write(tmp_path, text):
    path = tmp_path / "field_definitions.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_field_definitions(tmp_path / "nope.yaml") is DEFAULT_FIELD_DEFINITIONS


def test_malformed_yaml_falls_back_to_defaults(tmp_path):
    path = _write(tmp_path, "field_definitions: [unclosed\n")
    assert load_field_definitions(path) is DEFAULT_FIELD_DEFINITIONS


def test_missing_section_falls_back_to_defaults(tmp_path):
    path = _write(tmp_path, "something_else: []\n")
    assert load_field_definitions(path) is DEFAULT_FIELD_DEFINITIONS


def test_loads_definitions(tmp_path):
    path = _write(
        tmp_path,
        """
field_definitions:
  - id: sponsor
    label: Executive Sponsor
    category: client_sensitive
    template_ids: [TPL-07]
  - id: rollout_plan
    category: preservable
""",
    )
    table = load_field_definitions(path)

    assert table.ids() == {"sponsor", "rollout_plan"}
    sponsor = next(d for d in table if d.id == "sponsor")
    assert sponsor.label == "Executive Sponsor"
    assert sponsor.category is FieldCategory.CLIENT_SENSITIVE
    assert sponsor.template_ids == frozenset({"TPL-07"})

    rollout = next(d for d in table if d.id == "rollout_plan")
    assert rollout.label == "rollout_plan"
    assert rollout.template_ids == frozenset()


def test_skips_invalid_entries(tmp_path):
    path = _write(
        tmp_path,
        """
field_definitions:
  - just a string
  - label: No id
    category: preservable
  - id: mystery
    category: secret
  - id: process_description
    category: preservable
""",
    )
    assert load_field_definitions(path).ids() == {"process_description"}


def test_conflicting_categories_raise(tmp_path):
    path = _write(
        tmp_path,
        """
field_definitions:
  - id: budget_range
    category: client_sensitive
  - id: budget_range
    category: preservable
""",
    )
    with pytest.raises(FieldConfigError):
        load_field_definitions(path)


def test_shipped_config_matches_defaults():
    assert get_field_definitions().ids() == DEFAULT_FIELD_DEFINITIONS.ids()


def test_relative_path_resolves_against_repo_root(monkeypatch):
    monkeypatch.setattr(settings, "field_definitions_path", "config/field_definitions.yaml")
    path = get_field_definitions_path()
    assert path == REPO_ROOT / "config" / "field_definitions.yaml"
    assert path.exists()


def test_absolute_path_is_kept(monkeypatch, tmp_path):
    target = tmp_path / "fields.yaml"
    monkeypatch.setattr(settings, "field_definitions_path", str(target))
    assert get_field_definitions_path() == target


def test_loads_shipped_config_from_any_working_directory(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "field_definitions_path", "config/field_definitions.yaml")
    monkeypatch.chdir(tmp_path)
    table = load_field_definitions()
    assert table is not DEFAULT_FIELD_DEFINITIONS
    assert table.ids() == DEFAULT_FIELD_DEFINITIONS.ids()
