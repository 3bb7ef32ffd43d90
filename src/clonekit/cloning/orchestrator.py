"""Engagement clone orchestration.

Turns one engagement into a new one for a target client:

1. Validate the source engagement and target client (no writes before this)
2. Resolve the artifact set ("all" non-archived, or an explicit selection)
3. Create the new engagement
4. Sanitize and persist each artifact; a failing artifact is skipped with a
   warning and never aborts the batch
5. Record exactly one lineage edge carrying the aggregated summary; a failed
   edge write becomes a warning and ``success=False``

Cloning is not idempotent: every call creates a new engagement and edge.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from ..config import settings
from ..exceptions import (LineageConflictError, LineageWriteError,
                          ValidationError)
from .content import StructuredContent, TextContent, resolve_content
from .lineage import LineageGraph
from .records import ArtifactRecord, EngagementRecord
from .sanitizer import ContentSanitizer
from .schemas import (
    ArtifactOutcome,
    ArtifactPreview,
    ClonedFrom,
    ClonePreview,
    CloneRequest,
    CloneResult,
    CloneSummary,
    EngagementPreview,
)
from .store import EngagementStore

logger = logging.getLogger(__name__)

CLONED_ARTIFACT_STATUS = "draft"
NEW_ENGAGEMENT_STATUS = "active"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def summarize(outcomes: List[ArtifactOutcome], warnings: List[str]) -> CloneSummary:
    """Aggregate per-artifact outcomes, in request order."""
    cloned = [o for o in outcomes if o.cloned]
    cleared_names = []
    for outcome in cloned:
        cleared_names.extend(outcome.cleared_fields)

    return CloneSummary(
        artifacts_cloned=len(cloned),
        artifacts_skipped=len(outcomes) - len(cloned),
        fields_cleared=sum(len(o.cleared_fields) for o in cloned),
        fields_preserved=sum(len(o.preserved_fields) for o in cloned),
        cleared_fields=list(dict.fromkeys(cleared_names)),
        warnings=list(warnings),
    )


class CloneOrchestrator:
    """Drives the end-to-end clone of one engagement.

    Usage:
        store = SqlEngagementStore(db)
        orchestrator = CloneOrchestrator(store, ContentSanitizer(classifier))
        result = orchestrator.clone(CloneRequest(source_engagement_id=..., target_client_id=...))
    """

    def __init__(
        self,
        store: EngagementStore,
        sanitizer: Optional[ContentSanitizer] = None,
        lineage: Optional[LineageGraph] = None,
        archived_statuses: Optional[List[str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._sanitizer = sanitizer or ContentSanitizer()
        self._lineage = lineage or LineageGraph(store)
        self._archived_statuses = list(
            archived_statuses if archived_statuses is not None else settings.archived_statuses
        )
        self._clock = clock or _utcnow

    def clone(self, request: CloneRequest) -> CloneResult:
        """Clone ``request.source_engagement_id`` for ``request.target_client_id``.

        Raises:
            ValidationError: source engagement or target client does not exist
        """
        source = self._store.get_engagement(request.source_engagement_id)
        if source is None:
            raise ValidationError(f"Source engagement {request.source_engagement_id} not found")
        if self._store.get_client(request.target_client_id) is None:
            raise ValidationError(f"Target client {request.target_client_id} not found")

        selection = self._resolve_artifacts(source, request)

        cloned_at = self._clock()
        new_engagement = self._store.create_engagement(
            {
                "name": request.new_engagement_name or f"{source.name} (Copy)",
                "client_id": request.target_client_id,
                "status": NEW_ENGAGEMENT_STATUS,
                "pathway": source.pathway if request.preserve_pathway else None,
                "created_by": request.cloned_by,
                "clone_metadata": {
                    "cloned_from": source.id,
                    "cloned_at": cloned_at.isoformat(),
                },
            }
        )
        logger.info(
            f"Cloning engagement {source.id} -> {new_engagement.id} "
            f"({len(selection)} artifacts, clear_client_data={request.clear_client_data})"
        )

        outcomes = []
        for artifact_id, artifact in selection:
            if artifact is None:
                outcomes.append(
                    ArtifactOutcome(
                        source_artifact_id=artifact_id,
                        cloned=False,
                        warning=f"Artifact {artifact_id} not found in engagement {source.id}",
                    )
                )
            else:
                outcomes.append(self._clone_artifact(artifact, new_engagement, request))

        summary = summarize(outcomes, [o.warning for o in outcomes if o.warning])

        lineage_id = None
        lineage_recorded = False
        try:
            edge = self._lineage.record_edge(
                parent_id=source.id,
                child_id=new_engagement.id,
                cloned_at=cloned_at,
                summary=summary.model_dump(mode="json", by_alias=True),
                cloned_by=request.cloned_by,
                configuration=request.model_dump(mode="json", by_alias=True),
                notes=request.clone_notes,
            )
            lineage_id = edge.id
            lineage_recorded = True
        except LineageConflictError as e:
            # Child ids are fresh per clone; a conflict here is an invariant violation
            logger.error(f"Lineage invariant violated for {source.id} -> {new_engagement.id}: {e}")
            summary.warnings.append(f"Failed to record lineage: {e}")
        except LineageWriteError as e:
            logger.error(f"Lineage write failed for {source.id} -> {new_engagement.id}: {e}")
            summary.warnings.append(f"Failed to record lineage: {e}")

        logger.info(
            f"Cloned engagement {source.id} -> {new_engagement.id}: "
            f"{summary.artifacts_cloned} cloned, {summary.artifacts_skipped} skipped, "
            f"{summary.fields_cleared} fields cleared"
        )

        return CloneResult(
            success=lineage_recorded,
            new_engagement_id=new_engagement.id,
            new_engagement_name=new_engagement.name,
            source_engagement_id=source.id,
            cloned_at=cloned_at,
            summary=summary,
            lineage_id=lineage_id,
            lineage_recorded=lineage_recorded,
            artifacts=outcomes,
        )

    def _resolve_artifacts(
        self, source: EngagementRecord, request: CloneRequest
    ) -> List[Tuple[str, Optional[ArtifactRecord]]]:
        """Return (artifact id, artifact) pairs in request order; unknown ids pair with None."""
        if request.artifact_selection == "all":
            artifacts = self._store.list_artifacts(source.id, exclude_statuses=self._archived_statuses)
            return [(a.id, a) for a in artifacts]

        by_id = {a.id: a for a in self._store.list_artifacts(source.id)}
        return [(artifact_id, by_id.get(artifact_id)) for artifact_id in request.artifact_selection]

    def _clone_artifact(
        self, artifact: ArtifactRecord, new_engagement: EngagementRecord, request: CloneRequest
    ) -> ArtifactOutcome:
        try:
            processed = self._sanitizer.process_artifact(
                artifact, request.clear_client_data, request.explicit_fields_to_clear
            )
        except Exception as e:
            logger.warning(f"Error processing artifact {artifact.id}: {e}")
            return ArtifactOutcome(
                source_artifact_id=artifact.id,
                template_id=artifact.template_id,
                cloned=False,
                warning=f'Error processing artifact "{artifact.name}": {e}',
            )

        clone = processed.processed_artifact
        try:
            created = self._store.create_artifact(
                {
                    "engagement_id": new_engagement.id,
                    "template_id": clone.template_id,
                    "name": clone.name,
                    "type": clone.type,
                    "status": CLONED_ARTIFACT_STATUS,
                    "content": clone.content,
                    "metadata": clone.metadata,
                    "version": 1,
                    "cloned_from_id": artifact.id,
                    "created_by": request.cloned_by,
                }
            )
        except Exception as e:
            logger.warning(f"Failed to clone artifact {artifact.id}: {e}")
            return ArtifactOutcome(
                source_artifact_id=artifact.id,
                template_id=artifact.template_id,
                cloned=False,
                warning=f'Failed to clone artifact "{artifact.name}": {e}',
            )

        return ArtifactOutcome(
            source_artifact_id=artifact.id,
            template_id=artifact.template_id,
            cloned=True,
            new_artifact_id=created.id,
            cleared_fields=processed.cleared_fields,
            preserved_fields=processed.preserved_fields,
        )

    def preview(self, engagement_id: str) -> ClonePreview:
        """Describe an engagement and its artifacts ahead of a clone.

        Raises:
            ValidationError: the engagement does not exist
        """
        engagement = self._store.get_engagement(engagement_id)
        if engagement is None:
            raise ValidationError(f"Engagement {engagement_id} not found")

        classifier = self._sanitizer.classifier
        artifacts = []
        for artifact in self._store.list_artifacts(engagement_id):
            resolved = resolve_content(artifact.content)
            if isinstance(resolved, StructuredContent):
                client_fields = classifier.classify(resolved.fields, artifact.template_id).client_fields
                has_client_data = bool(client_fields)
            else:
                # Free text cannot be inspected field by field
                client_fields = []
                has_client_data = isinstance(resolved, TextContent)

            artifacts.append(
                ArtifactPreview(
                    id=artifact.id,
                    name=artifact.name,
                    type=artifact.type,
                    status=artifact.status,
                    template_id=artifact.template_id,
                    created_at=artifact.created_at,
                    has_client_data=has_client_data,
                    client_data_fields=client_fields,
                )
            )

        inbound = self._store.get_edge_by_child(engagement_id)
        cloned_from = None
        if inbound is not None:
            cloned_from = ClonedFrom(engagement_id=inbound.parent_engagement_id, cloned_at=inbound.cloned_at)

        return ClonePreview(
            engagement=EngagementPreview(
                id=engagement.id,
                name=engagement.name,
                status=engagement.status,
                pathway=engagement.pathway,
                client_id=engagement.client_id,
                client_name=engagement.client_name,
            ),
            cloned_from=cloned_from,
            artifacts=artifacts,
        )
