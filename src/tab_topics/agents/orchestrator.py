"""
Topic-assignment orchestrator.

Selects the remote classifier or the local embedding pipeline and turns a
workspace snapshot into one topic assignment per candidate tab.

Local pipeline:
1. Embed every candidate tab in one batched call
2. Compute centroids for the existing groups and match tabs against them
3. Cluster the leftovers and name each cluster
4. Merge existing-group matches (first) with new clusters
5. Consolidate near-duplicate labels

The orchestrator never raises. Failures inside a stage degrade that stage's
output (failed embeddings, fallback labels, sentinel topics) and the run
still returns a result.
"""

from typing import Optional

from tab_topics.agents.backends import (
    OpenAIEmbeddingBackend,
    OpenAITextGenerator,
    create_openai_client,
)
from tab_topics.agents.cluster_namer import ClusterNamer
from tab_topics.agents.clusterer import Clusterer
from tab_topics.agents.embedding_provider import EmbeddingProvider
from tab_topics.agents.group_matcher import GroupMatcher
from tab_topics.agents.label_consolidator import LabelConsolidator
from tab_topics.agents.models import (
    Assignment,
    Candidate,
    CLASSIFICATION_FAILED,
    ExistingGroup,
    MISSING_API_KEY,
    SortResult,
    SortState,
    SortStatus,
    Tab,
    WorkspaceSnapshot,
)
from tab_topics.agents.remote_classifier import RemoteClassifier
from tab_topics.agents.tab_selection import resolve_tab_title, scope_groups, select_candidate_tabs
from tab_topics.config import Provider, Settings, get_logger, get_settings
from tab_topics.errors import ConfigurationError, RemoteClassifierError

logger = get_logger(__name__)


class TabSortOrchestrator:
    """
    Runs one sort at a time and produces tab → topic assignments.

    Attributes:
        provider: Which pipeline to run (LOCAL or REMOTE)
        state: IDLE, or RUNNING while a sort is in flight
    """

    def __init__(
        self,
        provider: Provider = Provider.LOCAL,
        embedding_provider: Optional[EmbeddingProvider] = None,
        group_matcher: Optional[GroupMatcher] = None,
        clusterer: Optional[Clusterer] = None,
        cluster_namer: Optional[ClusterNamer] = None,
        consolidator: Optional[LabelConsolidator] = None,
        remote_classifier: Optional[RemoteClassifier] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            provider: Pipeline selection
            embedding_provider: Required for the local pipeline
            group_matcher: Existing-group matcher (defaults to standard thresholds)
            clusterer: Clusterer (defaults to standard threshold)
            cluster_namer: Required for the local pipeline
            consolidator: Label consolidator (defaults to distance 2)
            remote_classifier: Required for the remote pipeline
        """
        self.provider = provider
        self.embedding_provider = embedding_provider
        self.group_matcher = group_matcher or GroupMatcher()
        self.clusterer = clusterer or Clusterer()
        self.cluster_namer = cluster_namer
        self.consolidator = consolidator or LabelConsolidator()
        self.remote_classifier = remote_classifier
        self.state = SortState.IDLE

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TabSortOrchestrator":
        """Build an orchestrator with default collaborators from configuration."""
        settings = settings or get_settings()

        openai_client = create_openai_client(settings)
        embedding_provider = EmbeddingProvider(
            OpenAIEmbeddingBackend(openai_client, settings.openai_embedding_model),
            batch_size=settings.embedding_batch_size,
            embed_urls=settings.embed_urls,
        )
        cluster_namer = ClusterNamer(
            OpenAITextGenerator(openai_client, settings.openai_llm_model),
            keyword_count=settings.keyword_count,
            max_tokens=settings.naming_max_tokens,
            temperature=settings.naming_temperature,
        )
        remote_classifier = RemoteClassifier(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.remote_timeout,
        )

        return cls(
            provider=settings.ai_provider,
            embedding_provider=embedding_provider,
            group_matcher=GroupMatcher(
                similarity_threshold=settings.group_similarity_threshold,
                existing_group_boost=settings.existing_group_boost,
                fuzzy_threshold=settings.fuzzy_match_threshold,
            ),
            clusterer=Clusterer(similarity_threshold=settings.similarity_threshold),
            cluster_namer=cluster_namer,
            consolidator=LabelConsolidator(settings.consolidation_distance_threshold),
            remote_classifier=remote_classifier,
        )

    @property
    def is_running(self) -> bool:
        return self.state == SortState.RUNNING

    async def sort_workspace(self, snapshot: WorkspaceSnapshot) -> SortResult:
        """
        Sort the candidate tabs of one workspace.

        Only unpinned, ungrouped, non-empty, non-glance tabs of the snapshot's
        workspace are considered; existing groups are restricted to it too.
        """
        candidates = select_candidate_tabs(snapshot.tabs, snapshot.workspace_id)
        groups = scope_groups(snapshot.groups, snapshot.workspace_id)
        return await self.sort_tabs(candidates, groups)

    async def sort_tabs(
        self, tabs: list[Tab], existing_groups: Optional[list[ExistingGroup]] = None
    ) -> SortResult:
        """
        Assign a topic to every tab.

        A call made while another sort is running returns a SKIPPED result
        immediately.

        Args:
            tabs: Candidate tabs, in display order
            existing_groups: Groups already present in the workspace

        Returns:
            SortResult with one assignment per tab, in input order
        """
        if self.is_running:
            logger.info("Sort already in progress, skipping request")
            return SortResult(status=SortStatus.SKIPPED, provider=self.provider)

        self.state = SortState.RUNNING
        tabs = list(tabs)
        groups = list(existing_groups or [])
        try:
            if not tabs:
                assignments = []
            elif self.provider == Provider.REMOTE:
                assignments = self.consolidator.consolidate(
                    await self._classify_remotely(tabs, groups)
                )
            else:
                assignments = await self._assign_locally(tabs, groups)
        except Exception as e:
            logger.error(f"Tab sort failed: {e}", exc_info=True)
            assignments = [Assignment(tab=tab) for tab in tabs]
        finally:
            self.state = SortState.IDLE

        result = SortResult(
            status=SortStatus.COMPLETED,
            provider=self.provider,
            assignments=assignments,
            candidate_count=len(tabs),
        )
        logger.info(
            f"Sorted {len(tabs)} tabs into {len(result.groups())} topic(s) via {self.provider.value}"
        )
        return result

    async def _classify_remotely(
        self, tabs: list[Tab], groups: list[ExistingGroup]
    ) -> list[Assignment]:
        if self.remote_classifier is None:
            logger.error("Remote provider selected but no classifier is configured")
            return [Assignment(tab=tab, topic=MISSING_API_KEY) for tab in tabs]

        try:
            return await self.remote_classifier.classify(tabs, [g.label for g in groups])
        except ConfigurationError as e:
            logger.error(f"{e}. Please set GEMINI_API_KEY.")
            return [Assignment(tab=tab, topic=MISSING_API_KEY) for tab in tabs]
        except RemoteClassifierError as e:
            logger.error(f"Gemini classification failed: {e}")
            return [Assignment(tab=tab, topic=CLASSIFICATION_FAILED) for tab in tabs]

    async def _assign_locally(
        self, tabs: list[Tab], groups: list[ExistingGroup]
    ) -> list[Assignment]:
        if self.embedding_provider is None or self.cluster_namer is None:
            raise ConfigurationError("Local provider needs an embedding provider and a cluster namer")

        embeddings = await self.embedding_provider.embed_tabs(tabs)
        candidates = [
            Candidate(tab=tab, title=resolve_tab_title(tab), embedding=embedding, index=i)
            for i, (tab, embedding) in enumerate(zip(tabs, embeddings))
        ]

        profiles = await self.group_matcher.build_profiles(groups, self.embedding_provider)
        matched, unmatched = self.group_matcher.match_tabs(candidates, profiles)

        # Existing-group labels come first so they survive consolidation
        labelled = [(c.index, match.label) for c, match in matched]
        for cluster in self.clusterer.cluster(unmatched):
            titles = [c.title for c in cluster]
            label = await self.cluster_namer.name_cluster(titles)
            logger.info(f"Named new cluster: {label} ({len(cluster)} tabs)")
            labelled.extend((c.index, label) for c in cluster)

        merged = self.consolidator.consolidate(
            [Assignment(tab=tabs[i], topic=label) for i, label in labelled]
        )

        # consolidate() keeps order and length, so positions line up
        topics: list[Optional[str]] = [None] * len(tabs)
        for (i, _), assignment in zip(labelled, merged):
            topics[i] = assignment.topic
        return [Assignment(tab=tab, topic=topic) for tab, topic in zip(tabs, topics)]
