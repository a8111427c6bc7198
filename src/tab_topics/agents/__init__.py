"""
Topic-assignment agents for browser tabs.

This package provides:
- Embedding generation with bounded concurrency (EmbeddingProvider)
- Remote classification via Gemini (RemoteClassifier)
- Matching against existing tab groups (GroupMatcher)
- Clustering and naming of new groups (Clusterer, ClusterNamer)
- Near-duplicate label merging (LabelConsolidator)
- The end-to-end pipeline (TabSortOrchestrator)
"""

from tab_topics.agents.models import (
    Tab,
    ExistingGroup,
    WorkspaceSnapshot,
    Assignment,
    SortResult,
    SortStatus,
)
from tab_topics.agents.embedding_provider import EmbeddingProvider
from tab_topics.agents.remote_classifier import RemoteClassifier
from tab_topics.agents.group_matcher import GroupMatcher
from tab_topics.agents.clusterer import Clusterer
from tab_topics.agents.cluster_namer import ClusterNamer
from tab_topics.agents.label_consolidator import LabelConsolidator
from tab_topics.agents.orchestrator import TabSortOrchestrator

__all__ = [
    "Tab",
    "ExistingGroup",
    "WorkspaceSnapshot",
    "Assignment",
    "SortResult",
    "SortStatus",
    "EmbeddingProvider",
    "RemoteClassifier",
    "GroupMatcher",
    "Clusterer",
    "ClusterNamer",
    "LabelConsolidator",
    "TabSortOrchestrator",
]
