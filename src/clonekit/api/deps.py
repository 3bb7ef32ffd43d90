"""API dependencies: wiring the cloning pipeline onto a request's DB session."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..cloning import (CloneOrchestrator, ContentSanitizer, FieldClassifier,
                       LineageGraph, SqlEngagementStore)
from ..config_loader import get_field_definitions
from ..database import get_db


def get_classifier() -> FieldClassifier:
    return FieldClassifier(get_field_definitions())


def get_store(db: Session = Depends(get_db)) -> SqlEngagementStore:
    return SqlEngagementStore(db)


def get_lineage_graph(store: SqlEngagementStore = Depends(get_store)) -> LineageGraph:
    return LineageGraph(store)


def get_orchestrator(
    store: SqlEngagementStore = Depends(get_store),
    lineage: LineageGraph = Depends(get_lineage_graph),
    classifier: FieldClassifier = Depends(get_classifier),
) -> CloneOrchestrator:
    return CloneOrchestrator(store, ContentSanitizer(classifier), lineage)
