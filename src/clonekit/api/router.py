"""Engagement cloning API router.

Endpoints:
- GET /api/engagements/{engagement_id}/clone    clone preview
- POST /api/engagements/{engagement_id}/clone   execute clone
- GET /api/engagements/{engagement_id}/lineage  one-hop lineage
"""

import logging

from fastapi import APIRouter, Depends

from ..cloning import CloneOrchestrator, LineageGraph
from ..cloning.schemas import (CloneConfiguration, ClonePreview, CloneRequest,
                               CloneResult, LineageResponse)
from .deps import get_lineage_graph, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/engagements",
    tags=["cloning"],
)


@router.get("/{engagement_id}/clone", response_model=ClonePreview)
def get_clone_preview(
    engagement_id: str,
    orchestrator: CloneOrchestrator = Depends(get_orchestrator),
):
    """Describe an engagement and its artifacts ahead of cloning."""
    return orchestrator.preview(engagement_id)


@router.post("/{engagement_id}/clone", response_model=CloneResult, status_code=201)
def clone_engagement(
    engagement_id: str,
    configuration: CloneConfiguration,
    orchestrator: CloneOrchestrator = Depends(get_orchestrator),
):
    """Clone an engagement into a new engagement for the target client."""
    request = CloneRequest(source_engagement_id=engagement_id, **configuration.model_dump())
    return orchestrator.clone(request)


@router.get("/{engagement_id}/lineage", response_model=LineageResponse)
def get_lineage(
    engagement_id: str,
    lineage: LineageGraph = Depends(get_lineage_graph),
):
    """Parent, self and children of an engagement, plus lineage stats."""
    view = lineage.get_lineage(engagement_id)
    return LineageResponse(
        engagement_id=engagement_id,
        lineage=view.nodes(),
        stats=LineageGraph.stats_for(view),
    )
