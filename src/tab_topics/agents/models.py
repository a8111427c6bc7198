"""
Data models for topic assignment.

This module defines the core data structures for representing browser tabs,
the tab groups that already exist in a workspace, and the per-tab topic
decisions the pipeline hands back to the browser.
"""

from datetime import datetime, UTC
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, ConfigDict

from tab_topics.config import Provider
from tab_topics.errors import EmbeddingFailure

# Sentinel topics. A tab carrying one of these is never grouped.
UNCATEGORIZED = "Uncategorized"
MISSING_API_KEY = "Missing API Key"
CLASSIFICATION_FAILED = "Classification Failed"

SENTINEL_TOPICS = frozenset({UNCATEGORIZED, MISSING_API_KEY, CLASSIFICATION_FAILED})


class Tab(BaseModel):
    """Read-only snapshot of a browser tab.

    Attributes:
        id: Unique identifier for the tab
        title: The title shown on the tab
        url: The URL currently loaded in the tab
        workspace_id: Workspace the tab belongs to
        pinned: Whether the tab is pinned
        grouped: Whether the tab already sits in a tab group
        selected: Whether the tab is the active tab
        empty: Whether the tab is a placeholder "empty" tab
        glance: Whether the tab is a transient preview (glance) tab
    """

    id: int
    title: str = ""
    url: str = ""
    workspace_id: Optional[str] = None
    pinned: bool = False
    grouped: bool = False
    selected: bool = False
    empty: bool = False
    glance: bool = False

    model_config = ConfigDict(frozen=True)


class ExistingGroup(BaseModel):
    """A named tab group that already exists in the browser.

    The centroid embedding is not stored here; it is recomputed from the
    members on every run (see GroupMatcher.build_profiles).

    Attributes:
        label: Group name, unique within a workspace
        members: Tabs currently in the group
    """

    label: str
    members: list[Tab] = Field(default_factory=list)

    def member_titles(self) -> list[str]:
        """Get the resolved display titles of all members."""
        # Imported here to keep models free of selection logic at import time
        from tab_topics.agents.tab_selection import resolve_tab_title

        return [resolve_tab_title(tab) for tab in self.members]


class WorkspaceSnapshot(BaseModel):
    """Point-in-time view of one workspace, read once per sort run."""

    workspace_id: Optional[str] = None
    tabs: list[Tab] = Field(default_factory=list)
    groups: list[ExistingGroup] = Field(default_factory=list)


class Candidate(BaseModel):
    """A tab travelling through the local pipeline.

    Attributes:
        tab: The tab
        title: Resolved display title
        embedding: Normalized embedding, or the failure that replaced it
        index: Position of the tab in the sorted list. Tab ids are not
            required to be unique, so results are mapped back by position.
    """

    tab: Tab
    title: str
    embedding: Union[list[float], EmbeddingFailure]
    index: int = 0

    @property
    def has_embedding(self) -> bool:
        return isinstance(self.embedding, list) and len(self.embedding) > 0


class Assignment(BaseModel):
    """Topic decision for a single tab.

    Attributes:
        tab: The tab the decision is about
        topic: Existing group label, new cluster label, a sentinel, or None
            when the tab should not be grouped
    """

    tab: Tab
    topic: Optional[str] = None

    @property
    def has_topic(self) -> bool:
        """True if the tab should be placed in a group."""
        return bool(self.topic) and self.topic not in SENTINEL_TOPICS


class SortState(str, Enum):
    """Lifecycle of an orchestrator instance."""
    IDLE = "idle"
    RUNNING = "running"


class SortStatus(str, Enum):
    """Outcome of a sort request."""
    COMPLETED = "completed"
    SKIPPED = "skipped"


class SortResult(BaseModel):
    """Result of a sort run.

    Attributes:
        status: COMPLETED, or SKIPPED when another sort was already running
        provider: Pipeline that produced the assignments
        assignments: One entry per candidate tab, in input order
        candidate_count: Number of tabs that were considered
        timestamp: When the run finished
    """

    status: SortStatus = SortStatus.COMPLETED
    provider: Provider = Provider.LOCAL
    assignments: list[Assignment] = Field(default_factory=list)
    candidate_count: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def groups(self) -> dict[str, list[Tab]]:
        """Group assigned tabs by topic, skipping topic-less and sentinel tabs."""
        grouped: dict[str, list[Tab]] = {}
        for assignment in self.assignments:
            if assignment.has_topic:
                grouped.setdefault(assignment.topic, []).append(assignment.tab)
        return grouped

    @property
    def should_signal_failure(self) -> bool:
        """True when several tabs were considered but no multi-tab group came out."""
        if self.status != SortStatus.COMPLETED or self.candidate_count <= 1:
            return False
        return not any(len(tabs) >= 2 for tabs in self.groups().values())
