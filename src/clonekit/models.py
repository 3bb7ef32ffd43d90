"""Database models for clients, engagements, artifacts and clone lineage"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Client(Base):
    """Client organisation that engagements are delivered for"""

    __tablename__ = "clients"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    engagements = relationship("Engagement", back_populates="client")


class Engagement(Base):
    """Client engagement holding a set of artifacts"""

    __tablename__ = "engagements"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="active")
    pathway = Column(String, nullable=True)

    # {"cloned_from": <engagement id>, "cloned_at": <iso timestamp>} for cloned engagements
    clone_metadata = Column(JSON, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    client = relationship("Client", back_populates="engagements")
    artifacts = relationship("Artifact", back_populates="engagement", cascade="all, delete-orphan")


class Artifact(Base):
    """Template-backed deliverable belonging to an engagement"""

    __tablename__ = "artifacts"

    id = Column(String, primary_key=True, index=True)
    engagement_id = Column(String, ForeignKey("engagements.id"), nullable=False, index=True)
    template_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="document")
    status = Column(String, nullable=False, default="draft")

    # JSON text for structured artifacts, free text otherwise
    content = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    artifact_metadata = Column("metadata", JSON, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    cloned_from_id = Column(String, ForeignKey("artifacts.id"), nullable=True, index=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    engagement = relationship("Engagement", back_populates="artifacts")


class EngagementClone(Base):
    """Append-only lineage edge from a source engagement to its clone"""

    __tablename__ = "engagement_clones"
    __table_args__ = (
        UniqueConstraint("source_engagement_id", "target_engagement_id", name="unique_clone_pair"),
        CheckConstraint("source_engagement_id != target_engagement_id", name="no_self_clone"),
    )

    id = Column(String, primary_key=True, index=True)
    source_engagement_id = Column(String, ForeignKey("engagements.id"), nullable=False, index=True)
    # An engagement is cloned from at most one source
    target_engagement_id = Column(
        String, ForeignKey("engagements.id"), nullable=False, unique=True, index=True
    )
    cloned_by = Column(String, nullable=True)
    cloned_at = Column(DateTime, nullable=False, default=_utcnow, index=True)

    configuration = Column(JSON, nullable=False, default=dict)
    summary = Column(JSON, nullable=False, default=dict)
    notes = Column(Text, nullable=True)
