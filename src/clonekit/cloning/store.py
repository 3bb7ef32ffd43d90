"""Persistence collaborator for the cloning pipeline.

The pipeline only talks to storage through ``EngagementStore``. Records that
cross the boundary are plain dataclasses from ``records``, never ORM objects.

Implementations:
- SqlEngagementStore: SQLAlchemy session backed (current)
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import (DuplicateEdgeError, LineageConflictError,
                          LineageWriteError, PerArtifactError)
from ..models import Artifact, Client, Engagement, EngagementClone
from .records import ArtifactRecord, ClientRecord, EngagementRecord
from .schemas import LineageEdge

logger = logging.getLogger(__name__)


class EngagementStore(Protocol):
    """Storage operations the cloning pipeline depends on."""

    def get_engagement(self, engagement_id: str) -> Optional[EngagementRecord]:
        ...

    def get_client(self, client_id: str) -> Optional[ClientRecord]:
        ...

    def list_artifacts(
        self, engagement_id: str, exclude_statuses: Iterable[str] = ()
    ) -> List[ArtifactRecord]:
        """Artifacts of an engagement, oldest first."""
        ...

    def create_engagement(self, fields: Dict[str, Any]) -> EngagementRecord:
        ...

    def create_artifact(self, fields: Dict[str, Any]) -> ArtifactRecord:
        """Persist one artifact. Raises PerArtifactError on failure."""
        ...

    def record_lineage_edge(self, edge: LineageEdge) -> LineageEdge:
        """Append one edge.

        Raises DuplicateEdgeError if the pair already exists, LineageConflictError
        for any other forest violation and LineageWriteError when storage fails.
        """
        ...

    def get_edges_by_parent(self, engagement_id: str) -> List[LineageEdge]:
        ...

    def get_edge_by_child(self, engagement_id: str) -> Optional[LineageEdge]:
        ...


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on round trip
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlEngagementStore:
    """EngagementStore over a SQLAlchemy session.

    Every write commits on its own, so a failed artifact write rolls back only
    that artifact.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_engagement(self, engagement_id: str) -> Optional[EngagementRecord]:
        engagement = self.db.query(Engagement).filter(Engagement.id == engagement_id).first()
        if engagement is None:
            return None
        return self._engagement_record(engagement)

    def get_client(self, client_id: str) -> Optional[ClientRecord]:
        client = self.db.query(Client).filter(Client.id == client_id).first()
        if client is None:
            return None
        return ClientRecord(id=client.id, name=client.name)

    def list_artifacts(
        self, engagement_id: str, exclude_statuses: Iterable[str] = ()
    ) -> List[ArtifactRecord]:
        query = self.db.query(Artifact).filter(Artifact.engagement_id == engagement_id)
        excluded = list(exclude_statuses)
        if excluded:
            query = query.filter(Artifact.status.notin_(excluded))
        artifacts = query.order_by(Artifact.created_at, Artifact.id).all()
        return [self._artifact_record(a) for a in artifacts]

    def get_edges_by_parent(self, engagement_id: str) -> List[LineageEdge]:
        rows = (
            self.db.query(EngagementClone)
            .filter(EngagementClone.source_engagement_id == engagement_id)
            .order_by(EngagementClone.cloned_at.desc(), EngagementClone.id)
            .all()
        )
        return [self._edge(row) for row in rows]

    def get_edge_by_child(self, engagement_id: str) -> Optional[LineageEdge]:
        row = (
            self.db.query(EngagementClone)
            .filter(EngagementClone.target_engagement_id == engagement_id)
            .first()
        )
        return self._edge(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_engagement(self, fields: Dict[str, Any]) -> EngagementRecord:
        engagement = Engagement(id=fields.get("id") or _new_id(), **{k: v for k, v in fields.items() if k != "id"})
        self.db.add(engagement)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(engagement)
        return self._engagement_record(engagement)

    def create_artifact(self, fields: Dict[str, Any]) -> ArtifactRecord:
        values = dict(fields)
        content = values.get("content")
        if isinstance(content, (dict, list)):
            values["content"] = json.dumps(content)
        if "metadata" in values:
            values["artifact_metadata"] = values.pop("metadata")

        try:
            artifact = Artifact(id=values.pop("id", None) or _new_id(), **values)
            self.db.add(artifact)
            self.db.commit()
        except (SQLAlchemyError, TypeError) as e:
            self.db.rollback()
            raise PerArtifactError(
                f"Failed to persist artifact '{fields.get('name')}': {e}",
                artifact_id=fields.get("cloned_from_id"),
            ) from e

        self.db.refresh(artifact)
        return self._artifact_record(artifact)

    def record_lineage_edge(self, edge: LineageEdge) -> LineageEdge:
        row = EngagementClone(
            id=edge.id or _new_id(),
            source_engagement_id=edge.parent_engagement_id,
            target_engagement_id=edge.child_engagement_id,
            cloned_by=edge.cloned_by,
            cloned_at=edge.cloned_at,
            configuration=edge.configuration,
            summary=edge.summary,
            notes=edge.notes,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise self._edge_conflict(edge) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise LineageWriteError(
                f"Failed to write lineage edge {edge.parent_engagement_id} -> {edge.child_engagement_id}: {e}",
                parent_id=edge.parent_engagement_id,
                child_id=edge.child_engagement_id,
            ) from e

        self.db.refresh(row)
        return self._edge(row)

    def _edge_conflict(self, edge: LineageEdge) -> LineageConflictError:
        """Name the constraint an edge write violated."""
        parent_id = edge.parent_engagement_id
        child_id = edge.child_engagement_id
        if parent_id == child_id:
            return LineageConflictError(
                f"Engagement {child_id} cannot be cloned from itself", parent_id=parent_id, child_id=child_id
            )

        existing = self.get_edge_by_child(child_id)
        if existing is not None and existing.parent_engagement_id == parent_id:
            return DuplicateEdgeError(
                f"Lineage edge {parent_id} -> {child_id} already exists", parent_id=parent_id, child_id=child_id
            )
        if existing is not None:
            return LineageConflictError(
                f"Engagement {child_id} already cloned from {existing.parent_engagement_id}",
                parent_id=parent_id,
                child_id=child_id,
            )
        return LineageConflictError(
            f"Lineage edge {parent_id} -> {child_id} violates a lineage constraint",
            parent_id=parent_id,
            child_id=child_id,
        )

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _engagement_record(engagement: Engagement) -> EngagementRecord:
        return EngagementRecord(
            id=engagement.id,
            name=engagement.name,
            client_id=engagement.client_id,
            client_name=engagement.client.name if engagement.client is not None else None,
            status=engagement.status,
            pathway=engagement.pathway,
            clone_metadata=engagement.clone_metadata,
        )

    @staticmethod
    def _artifact_record(artifact: Artifact) -> ArtifactRecord:
        return ArtifactRecord(
            id=artifact.id,
            engagement_id=artifact.engagement_id,
            name=artifact.name,
            type=artifact.type,
            status=artifact.status,
            template_id=artifact.template_id,
            content=artifact.content,
            metadata=dict(artifact.artifact_metadata or {}),
            version=artifact.version,
            created_at=_as_utc(artifact.created_at),
        )

    @staticmethod
    def _edge(row: EngagementClone) -> LineageEdge:
        return LineageEdge(
            id=row.id,
            parent_engagement_id=row.source_engagement_id,
            child_engagement_id=row.target_engagement_id,
            cloned_at=_as_utc(row.cloned_at),
            summary=row.summary or {},
            cloned_by=row.cloned_by,
            configuration=row.configuration or {},
            notes=row.notes,
        )
