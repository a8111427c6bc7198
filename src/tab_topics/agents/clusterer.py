"""
Greedy clustering of tabs that matched no existing group.

Each cluster is seeded by the first unassigned tab in input order and takes
every remaining unassigned tab whose cosine similarity to the seed exceeds
the threshold. Membership is similarity-to-seed only (not transitive), so
the result depends on input order but is deterministic for a fixed order.
"""

from typing import Sequence

from tab_topics.agents.models import Candidate
from tab_topics.config import get_logger
from tab_topics.similarity import cosine_similarity

logger = get_logger(__name__)


def cluster_embeddings(vectors: Sequence[Sequence[float]], threshold: float) -> list[list[int]]:
    """
    Group vectors around seeds.

    Args:
        vectors: Embeddings to cluster
        threshold: Similarity to the seed must be strictly greater than this

    Returns:
        Clusters as lists of indices into ``vectors``, singletons included
    """
    clusters = []
    used = [False] * len(vectors)

    for i, seed in enumerate(vectors):
        if used[i]:
            continue
        cluster = [i]
        used[i] = True
        for j in range(len(vectors)):
            if not used[j] and cosine_similarity(seed, vectors[j]) > threshold:
                cluster.append(j)
                used[j] = True
        clusters.append(cluster)

    return clusters


class Clusterer:
    """
    Forms new groups from unmatched tabs.

    Attributes:
        similarity_threshold: Minimum cosine similarity to a cluster's seed
        min_cluster_size: Smaller clusters are discarded
    """

    def __init__(self, similarity_threshold: float = 0.45, min_cluster_size: int = 2):
        self.similarity_threshold = similarity_threshold
        self.min_cluster_size = min_cluster_size

    def cluster(self, candidates: list[Candidate]) -> list[list[Candidate]]:
        """
        Cluster candidates by embedding.

        Candidates without an embedding are left out. Clusters below
        min_cluster_size are dropped, leaving their tabs without a topic.

        Args:
            candidates: Unmatched candidates in input order

        Returns:
            Clusters of candidates, in seed order
        """
        embedded = [c for c in candidates if c.has_embedding]
        skipped = len(candidates) - len(embedded)
        if skipped:
            logger.debug(f"Skipping {skipped} tab(s) without embeddings")

        if len(embedded) < self.min_cluster_size:
            return []

        index_clusters = cluster_embeddings(
            [c.embedding for c in embedded], self.similarity_threshold
        )

        clusters = [
            [embedded[i] for i in indices]
            for indices in index_clusters
            if len(indices) >= self.min_cluster_size
        ]

        discarded = len(index_clusters) - len(clusters)
        if discarded:
            logger.debug(f"Discarded {discarded} cluster(s) below {self.min_cluster_size} tabs")
        logger.info(f"Formed {len(clusters)} cluster(s) from {len(embedded)} tabs")
        return clusters
