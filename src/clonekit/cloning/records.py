"""Plain records exchanged with the persistence collaborator."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ClientRecord:
    id: str
    name: str


@dataclass(frozen=True)
class EngagementRecord:
    id: str
    name: str
    client_id: str
    client_name: Optional[str] = None
    status: str = "active"
    pathway: Optional[str] = None
    clone_metadata: Optional[dict] = None


@dataclass(frozen=True)
class ArtifactRecord:
    id: str
    engagement_id: str
    name: str
    type: str = "document"
    status: str = "draft"
    template_id: Optional[str] = None
    content: Any = None
    metadata: dict = field(default_factory=dict)
    version: int = 1
    created_at: Optional[datetime] = None
