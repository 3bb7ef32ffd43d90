"""Clone lineage graph.

Lineage edges form a forest: an engagement has at most one parent (the
engagement it was cloned from) and any number of children. Edges are append
only. Queries are one hop: parent, self and direct children.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..exceptions import DuplicateEdgeError, LineageConflictError, ValidationError
from .records import EngagementRecord
from .schemas import LineageEdge, LineageNode, LineageStats, LineageView
from .store import EngagementStore

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown"


class LineageGraph:
    """Records and queries parent/child clone relationships."""

    def __init__(self, store: EngagementStore):
        self._store = store

    def record_edge(
        self,
        parent_id: str,
        child_id: str,
        cloned_at: datetime,
        summary: Dict[str, Any],
        cloned_by: Optional[str] = None,
        configuration: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> LineageEdge:
        """Append one lineage edge.

        Raises:
            DuplicateEdgeError: an edge already exists for this exact pair
            LineageConflictError: the edge is a self-loop or the child already
                has a different parent
        """
        if parent_id == child_id:
            raise LineageConflictError(
                f"Engagement {child_id} cannot be cloned from itself",
                parent_id=parent_id,
                child_id=child_id,
            )

        existing = self._store.get_edge_by_child(child_id)
        if existing is not None:
            if existing.parent_engagement_id == parent_id:
                raise DuplicateEdgeError(
                    f"Lineage edge {parent_id} -> {child_id} already exists",
                    parent_id=parent_id,
                    child_id=child_id,
                )
            raise LineageConflictError(
                f"Engagement {child_id} already cloned from {existing.parent_engagement_id}",
                parent_id=parent_id,
                child_id=child_id,
            )

        edge = LineageEdge(
            parent_engagement_id=parent_id,
            child_engagement_id=child_id,
            cloned_at=cloned_at,
            summary=dict(summary),
            cloned_by=cloned_by,
            configuration=dict(configuration or {}),
            notes=notes,
        )
        recorded = self._store.record_lineage_edge(edge)
        logger.info(f"Recorded lineage edge {parent_id} -> {child_id}")
        return recorded

    def get_lineage(self, engagement_id: str) -> LineageView:
        """Return the parent, self and children of an engagement.

        Raises:
            ValidationError: the engagement does not exist
        """
        engagement = self._store.get_engagement(engagement_id)
        if engagement is None:
            raise ValidationError(f"Engagement {engagement_id} not found")

        parent = None
        inbound = self._store.get_edge_by_child(engagement_id)
        if inbound is not None:
            parent = self._node(
                self._store.get_engagement(inbound.parent_engagement_id),
                inbound.parent_engagement_id,
                "parent",
                inbound,
            )

        children = [
            self._node(self._store.get_engagement(edge.child_engagement_id), edge.child_engagement_id, "child", edge)
            for edge in self._store.get_edges_by_parent(engagement_id)
        ]
        # Newest first; ties broken by id so repeated reads are identical
        children.sort(key=lambda n: n.engagement_id)
        children.sort(key=lambda n: n.cloned_at, reverse=True)

        return LineageView(
            parent=parent,
            self_node=self._node(engagement, engagement_id, "self"),
            children=children,
        )

    def get_stats(self, engagement_id: str) -> LineageStats:
        """Lineage counts derived from the one-hop view."""
        return self.stats_for(self.get_lineage(engagement_id))

    @staticmethod
    def stats_for(view: LineageView) -> LineageStats:
        is_cloned = view.parent is not None
        clone_count = len(view.children)
        return LineageStats(
            is_cloned=is_cloned,
            clone_count=clone_count,
            total_in_lineage=1 + (1 if is_cloned else 0) + clone_count,
        )

    @staticmethod
    def _node(
        engagement: Optional[EngagementRecord],
        engagement_id: str,
        relationship: str,
        edge: Optional[LineageEdge] = None,
    ) -> LineageNode:
        return LineageNode(
            engagement_id=engagement_id,
            relationship=relationship,
            engagement_name=engagement.name if engagement is not None else None,
            client_name=(engagement.client_name if engagement is not None else None) or UNKNOWN_CLIENT,
            cloned_at=edge.cloned_at if edge is not None else None,
            summary=dict(edge.summary) if edge is not None else None,
        )
