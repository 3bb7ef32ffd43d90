"""Pydantic schemas for clone requests, results and lineage views.

Serialized field names are camelCase (``by_alias=True``); Python code uses the
snake_case attribute names.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CloneConfiguration(CamelModel):
    """Clone options supplied by the caller (everything except the source id)"""

    target_client_id: str = Field(..., min_length=1, description="Client that will own the new engagement")
    artifact_selection: Union[Literal["all"], List[str]] = Field(
        default="all", description='"all" non-archived artifacts, or explicit artifact ids in clone order'
    )
    clear_client_data: bool = Field(default=True, description="Clear client-sensitive fields and text")
    explicit_fields_to_clear: Optional[List[str]] = Field(
        default=None, description="Clear exactly these keys instead of auto-detected client fields"
    )
    new_engagement_name: Optional[str] = Field(default=None, max_length=200)
    preserve_pathway: bool = Field(default=True, description="Copy the source engagement pathway")
    clone_notes: Optional[str] = None
    cloned_by: Optional[str] = None

    @field_validator("explicit_fields_to_clear", mode="before")
    @classmethod
    def empty_field_list_means_auto_detect(cls, v: Any) -> Any:
        """An empty explicit field list falls back to auto-detection."""
        if isinstance(v, list) and len(v) == 0:
            return None
        return v

    @field_validator("artifact_selection", mode="before")
    @classmethod
    def dedupe_selection(cls, v: Any) -> Any:
        """Drop repeated artifact ids, keeping first-seen order."""
        if isinstance(v, (list, tuple, set, frozenset)):
            return list(dict.fromkeys(v))
        return v


class CloneRequest(CloneConfiguration):
    """Request to clone one engagement into a new engagement"""

    source_engagement_id: str = Field(..., min_length=1)


class ArtifactOutcome(CamelModel):
    """What happened to one source artifact during a clone"""

    source_artifact_id: str
    template_id: Optional[str] = None
    cloned: bool
    new_artifact_id: Optional[str] = None
    cleared_fields: List[str] = Field(default_factory=list)
    preserved_fields: List[str] = Field(default_factory=list)
    warning: Optional[str] = None


class CloneSummary(CamelModel):
    """Aggregated outcome of a clone, also stored on the lineage edge"""

    artifacts_cloned: int = 0
    artifacts_skipped: int = 0
    fields_cleared: int = 0
    fields_preserved: int = 0
    cleared_fields: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CloneResult(CamelModel):
    """Result of a clone operation"""

    success: bool
    new_engagement_id: str
    new_engagement_name: str
    source_engagement_id: str
    cloned_at: datetime
    summary: CloneSummary
    lineage_id: Optional[str] = None
    lineage_recorded: bool = False
    artifacts: List[ArtifactOutcome] = Field(default_factory=list)


class LineageEdge(CamelModel):
    """Immutable parent -> child clone record"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: Optional[str] = None
    parent_engagement_id: str
    child_engagement_id: str
    cloned_at: datetime
    summary: Dict[str, Any] = Field(default_factory=dict)
    cloned_by: Optional[str] = None
    configuration: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None


class LineageNode(CamelModel):
    """One engagement in a one-hop lineage view"""

    engagement_id: str
    relationship: Literal["parent", "self", "child"]
    engagement_name: Optional[str] = None
    client_name: str = "Unknown"
    cloned_at: Optional[datetime] = None
    summary: Optional[Dict[str, Any]] = None


class LineageView(CamelModel):
    """Parent, self and children of one engagement"""

    parent: Optional[LineageNode] = None
    self_node: LineageNode = Field(..., alias="self")
    children: List[LineageNode] = Field(default_factory=list)

    def nodes(self) -> List[LineageNode]:
        """Flatten into display order: parent, self, then children."""
        ordered = [self.parent] if self.parent is not None else []
        return ordered + [self.self_node] + list(self.children)


class LineageStats(CamelModel):
    is_cloned: bool
    clone_count: int
    total_in_lineage: int


class LineageResponse(CamelModel):
    engagement_id: str
    lineage: List[LineageNode]
    stats: LineageStats


class ArtifactPreview(CamelModel):
    """Artifact as listed in a clone preview"""

    id: str
    name: str
    type: str
    status: str
    template_id: Optional[str] = None
    created_at: Optional[datetime] = None
    has_client_data: bool = False
    client_data_fields: List[str] = Field(default_factory=list)


class EngagementPreview(CamelModel):
    id: str
    name: str
    status: str
    pathway: Optional[str] = None
    client_id: str
    client_name: Optional[str] = None


class ClonedFrom(CamelModel):
    engagement_id: str
    cloned_at: datetime


class ClonePreview(CamelModel):
    """Everything a caller needs to configure a clone"""

    engagement: EngagementPreview
    cloned_from: Optional[ClonedFrom] = None
    artifacts: List[ArtifactPreview] = Field(default_factory=list)
    default_configuration: Dict[str, Any] = Field(
        default_factory=lambda: {"clearClientData": True, "preservePathway": True}
    )
