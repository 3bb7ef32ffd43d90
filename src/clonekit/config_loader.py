"""Field definition loader.

Loads the FieldDefinition table from config/field_definitions.yaml once per
process, with fallback to the built-in defaults.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import yaml

from .cloning.fields import (
    DEFAULT_FIELD_DEFINITIONS,
    FieldCategory,
    FieldDefinition,
    FieldDefinitionTable,
)
from .config import get_field_definitions_path

logger = logging.getLogger(__name__)


def _parse_definition(entry: dict) -> Optional[FieldDefinition]:
    field_id = entry.get("id")
    if not field_id:
        logger.warning(f"Skipping field definition without id: {entry}")
        return None

    try:
        category = FieldCategory(entry.get("category"))
    except ValueError:
        logger.warning(f"Skipping field definition '{field_id}' with unknown category {entry.get('category')!r}")
        return None

    return FieldDefinition(
        id=str(field_id),
        label=str(entry.get("label") or field_id),
        category=category,
        template_ids=frozenset(str(t) for t in (entry.get("template_ids") or [])),
        description=str(entry.get("description") or ""),
    )


def load_field_definitions(path: Optional[Union[str, Path]] = None) -> FieldDefinitionTable:
    """Load field definitions from YAML.

    Falls back to DEFAULT_FIELD_DEFINITIONS if:
    - File doesn't exist
    - File is malformed
    - The ``field_definitions`` section is missing

    Raises:
        FieldConfigError: the file declares one id in both categories
    """
    config_path = Path(path) if path else get_field_definitions_path()

    if not config_path.exists():
        logger.warning(f"Config file {config_path} not found, using default field definitions")
        return DEFAULT_FIELD_DEFINITIONS

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}, using default field definitions")
        return DEFAULT_FIELD_DEFINITIONS

    if not isinstance(data, dict) or not isinstance(data.get("field_definitions"), list):
        logger.warning(f"No 'field_definitions' list in {config_path}, using defaults")
        return DEFAULT_FIELD_DEFINITIONS

    definitions = []
    for entry in data["field_definitions"]:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping malformed field definition entry: {entry!r}")
            continue
        definition = _parse_definition(entry)
        if definition is not None:
            definitions.append(definition)

    table = FieldDefinitionTable(definitions)
    logger.info(f"Loaded {len(table)} field definitions from {config_path}")
    return table


@lru_cache(maxsize=1)
def get_field_definitions() -> FieldDefinitionTable:
    """Process-wide field definition table, loaded on first use."""
    return load_field_definitions()
