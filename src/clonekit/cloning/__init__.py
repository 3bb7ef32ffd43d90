"""Engagement cloning: field classification, sanitization, orchestration and lineage.

Pipeline: classify -> sanitize -> clone -> record lineage.
"""

from .classifier import Classification, FieldActionSummary, FieldClassifier
from .content import (ArtifactContent, StructuredContent, TextContent,
                      UnresolvedContent, resolve_content)
from .fields import (CLIENT_KEY_PATTERNS, DEFAULT_FIELD_DEFINITIONS,
                     PRESERVABLE_KEY_PATTERNS, FieldCategory, FieldDefinition,
                     FieldDefinitionTable)
from .lineage import LineageGraph
from .orchestrator import CloneOrchestrator
from .records import ArtifactRecord, ClientRecord, EngagementRecord
from .sanitizer import (TEXT_CONTENT_FIELD, TEXT_REDACTION_PATTERNS,
                        ArtifactProcessResult, ContentSanitizer,
                        ProcessedArtifact, StructuredSanitizeResult)
from .schemas import (ArtifactOutcome, ClonePreview, CloneRequest, CloneResult,
                      CloneSummary, LineageEdge, LineageNode, LineageStats,
                      LineageView)
from .store import EngagementStore, SqlEngagementStore

__all__ = [
    # Field classification
    "FieldCategory",
    "FieldDefinition",
    "FieldDefinitionTable",
    "DEFAULT_FIELD_DEFINITIONS",
    "CLIENT_KEY_PATTERNS",
    "PRESERVABLE_KEY_PATTERNS",
    "FieldClassifier",
    "Classification",
    "FieldActionSummary",
    # Content sanitization
    "ArtifactContent",
    "StructuredContent",
    "TextContent",
    "UnresolvedContent",
    "resolve_content",
    "ContentSanitizer",
    "StructuredSanitizeResult",
    "ProcessedArtifact",
    "ArtifactProcessResult",
    "TEXT_CONTENT_FIELD",
    "TEXT_REDACTION_PATTERNS",
    # Orchestration and lineage
    "CloneOrchestrator",
    "CloneRequest",
    "CloneResult",
    "CloneSummary",
    "ArtifactOutcome",
    "ClonePreview",
    "LineageGraph",
    "LineageEdge",
    "LineageNode",
    "LineageView",
    "LineageStats",
    # Persistence
    "EngagementStore",
    "SqlEngagementStore",
    "ArtifactRecord",
    "ClientRecord",
    "EngagementRecord",
]
