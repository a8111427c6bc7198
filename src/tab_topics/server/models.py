"""
Pydantic models for API request/response validation.
"""

from typing import Optional
from pydantic import BaseModel, Field


# ============================================================================
# Request Models
# ============================================================================


class TabInput(BaseModel):
    """Input model for a browser tab from the extension."""

    id: int
    title: str
    url: str = ""
    workspace_id: Optional[str] = None
    pinned: bool = False
    grouped: bool = False
    selected: bool = False
    empty: bool = False
    glance: bool = False


class GroupInput(BaseModel):
    """An existing tab group, referencing member tabs by id."""

    label: str
    tab_ids: list[int] = Field(default_factory=list)


class TabsSortRequest(BaseModel):
    """Request model for /api/tabs/sort endpoint."""

    workspace_id: str
    tabs: list[TabInput]
    groups: list[GroupInput] = Field(default_factory=list)


# ============================================================================
# Response Models
# ============================================================================


class AssignmentResponse(BaseModel):
    """Topic decision for one tab. topic is null when the tab stays ungrouped."""

    tab_id: int
    topic: Optional[str] = None


class TopicGroupResponse(BaseModel):
    """A group the extension should create or extend."""

    topic: str
    tab_ids: list[int]
    existing: bool = False


class TabsSortResponse(BaseModel):
    """Response model for /api/tabs/sort endpoint."""

    status: str
    provider: str
    assignments: list[AssignmentResponse] = Field(default_factory=list)
    groups: list[TopicGroupResponse] = Field(default_factory=list)
    failed: bool = False
    timestamp: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: str
    provider: str
