"""
FastAPI application for the tab sorting backend.

This server provides endpoints for:
- Health checks
- Sorting a workspace's tabs into topics
"""

from datetime import datetime, UTC
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tab_topics.config import get_logger
from tab_topics.agents.models import ExistingGroup, SortResult, Tab, WorkspaceSnapshot
from tab_topics.agents.orchestrator import TabSortOrchestrator
from tab_topics.agents.tab_selection import scope_groups

logger = get_logger(__name__)
from tab_topics.server.models import (
    TabsSortRequest,
    TabsSortResponse,
    AssignmentResponse,
    TopicGroupResponse,
    HealthResponse,
)

# ============================================================================
# FastAPI App Initialization
# ============================================================================

app = FastAPI(
    title="Tab Topics API",
    description="Groups open browser tabs into labelled topics",
    version="0.1.0",
)

# CORS middleware for browser extension
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "chrome-extension://*",
        "moz-extension://*",
        "http://localhost:*",
        "https://localhost:*",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Global State
# ============================================================================

# One orchestrator per process, so its Idle/Running guard is shared by all requests
_orchestrator: TabSortOrchestrator | None = None


def get_orchestrator() -> TabSortOrchestrator:
    """Get or create the global TabSortOrchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = TabSortOrchestrator.from_settings()
    return _orchestrator


def build_snapshot(request: TabsSortRequest) -> WorkspaceSnapshot:
    """
    Convert a sort request into a workspace snapshot.

    Group members are resolved by tab id against the request's tabs;
    unknown ids are ignored.

    Args:
        request: Validated request body

    Returns:
        WorkspaceSnapshot for the orchestrator
    """
    tabs = [Tab(**tab.model_dump()) for tab in request.tabs]
    tabs_by_id = {tab.id: tab for tab in tabs}

    groups = [
        ExistingGroup(
            label=group.label,
            members=[tabs_by_id[tab_id] for tab_id in group.tab_ids if tab_id in tabs_by_id],
        )
        for group in request.groups
    ]

    return WorkspaceSnapshot(workspace_id=request.workspace_id, tabs=tabs, groups=groups)


def build_response(result: SortResult, existing_labels: set[str]) -> TabsSortResponse:
    """Convert a SortResult into the API response, marking groups to extend."""
    return TabsSortResponse(
        status=result.status.value,
        provider=result.provider.value,
        assignments=[
            AssignmentResponse(tab_id=a.tab.id, topic=a.topic)
            for a in result.assignments
        ],
        groups=[
            TopicGroupResponse(
                topic=topic,
                tab_ids=[tab.id for tab in tabs],
                existing=topic in existing_labels,
            )
            for topic, tabs in result.groups().items()
        ],
        failed=result.should_signal_failure,
        timestamp=result.timestamp.isoformat(),
    )


# ============================================================================
# API Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    orchestrator = get_orchestrator()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        provider=orchestrator.provider.value,
    )


@app.post("/api/tabs/sort", response_model=TabsSortResponse)
async def sort_tabs(request: TabsSortRequest):
    """
    Assign topics to the sortable tabs of a workspace.

    This endpoint:
    1. Builds a snapshot of the workspace from the request
    2. Runs the configured pipeline (local embeddings or Gemini)
    3. Returns per-tab topics and the groups to create or extend

    A request that arrives while another sort is running returns
    status "skipped" and no assignments.

    Args:
        request: Workspace tabs and existing groups

    Returns:
        Sort outcome
    """
    orchestrator = get_orchestrator()
    snapshot = build_snapshot(request)

    logger.info(
        f"Sort requested for workspace {request.workspace_id}: "
        f"{len(snapshot.tabs)} tabs, {len(snapshot.groups)} groups"
    )
    result = await orchestrator.sort_workspace(snapshot)

    existing_labels = {g.label for g in scope_groups(snapshot.groups, snapshot.workspace_id)}
    return build_response(result, existing_labels)
