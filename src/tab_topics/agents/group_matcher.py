"""
Matching tabs against the tab groups that already exist in a workspace.

Two passes per tab:
1. Embedding pass: cosine similarity to each group's centroid plus a fixed
   boost that favors reusing a group over creating a new one. The best
   score above the threshold wins; ties keep the first group.
2. Fuzzy pass (only if the embedding pass found nothing): normalized edit
   similarity between the tab title and every member title. Any group whose
   best member clears the fuzzy threshold is accepted, and a later
   qualifying group replaces an earlier one.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from tab_topics.agents.embedding_provider import EmbeddingProvider, EmbeddingResult, is_embedding
from tab_topics.agents.models import Candidate, ExistingGroup
from tab_topics.config import get_logger
from tab_topics.similarity import average_vector, cosine_similarity, title_similarity

logger = get_logger(__name__)


class GroupProfile(BaseModel):
    """Per-run view of an existing group used for matching.

    Attributes:
        label: Group label
        centroid: Mean of the members' embeddings, None if none could be embedded
        member_titles: Resolved titles of the members
    """

    label: str
    centroid: Optional[list[float]] = None
    member_titles: list[str] = Field(default_factory=list)


class GroupMatch(BaseModel):
    """An accepted match of a tab to an existing group."""

    label: str
    similarity: float
    method: Literal["embedding", "fuzzy"]


class GroupMatcher:
    """
    Assigns tabs to existing groups by centroid similarity or fuzzy title match.

    Attributes:
        similarity_threshold: Minimum boosted cosine similarity for a match
        existing_group_boost: Bonus added to every centroid similarity
        fuzzy_threshold: Minimum title similarity for the fallback pass
    """

    def __init__(
        self,
        similarity_threshold: float = 0.65,
        existing_group_boost: float = 0.1,
        fuzzy_threshold: float = 0.7,
    ):
        self.similarity_threshold = similarity_threshold
        self.existing_group_boost = existing_group_boost
        self.fuzzy_threshold = fuzzy_threshold

    async def build_profiles(
        self, groups: list[ExistingGroup], provider: EmbeddingProvider
    ) -> list[GroupProfile]:
        """
        Compute centroids for existing groups.

        Member titles are embedded with the provider's batching; failed
        members are left out of the average.

        Args:
            groups: Existing groups of the workspace
            provider: Embedding provider

        Returns:
            One profile per group, in the same order
        """
        profiles = []
        for group in groups:
            titles = group.member_titles()
            centroid = None
            try:
                embeddings = await provider.embed_batch(
                    [provider.text_for_tab(tab) for tab in group.members]
                )
                valid = [e for e in embeddings if is_embedding(e)]
                if valid:
                    centroid = average_vector(valid)
            except Exception as e:
                logger.warning(f"Failed to compute centroid for group '{group.label}': {e}")

            if centroid is None:
                logger.debug(f"Group '{group.label}' has no centroid, fuzzy matching only")
            profiles.append(GroupProfile(label=group.label, centroid=centroid, member_titles=titles))
        return profiles

    def match_by_embedding(
        self, embedding: list[float], profiles: list[GroupProfile]
    ) -> Optional[GroupMatch]:
        """Find the group whose boosted centroid similarity is highest above the threshold."""
        best_match = None
        best_similarity = 0.0

        for profile in profiles:
            if profile.centroid is None:
                continue

            similarity = cosine_similarity(embedding, profile.centroid) + self.existing_group_boost
            if similarity > self.similarity_threshold and similarity > best_similarity:
                best_match = GroupMatch(label=profile.label, similarity=similarity, method="embedding")
                best_similarity = similarity

        return best_match

    def match_by_title(self, title: str, profiles: list[GroupProfile]) -> Optional[GroupMatch]:
        """Fuzzy title fallback. The last qualifying group wins."""
        best_match = None

        for profile in profiles:
            if not profile.member_titles:
                continue

            max_similarity = max(title_similarity(title, t) for t in profile.member_titles)
            if max_similarity > self.fuzzy_threshold:
                best_match = GroupMatch(label=profile.label, similarity=max_similarity, method="fuzzy")

        return best_match

    def match(
        self, title: str, embedding: EmbeddingResult, profiles: list[GroupProfile]
    ) -> Optional[GroupMatch]:
        """
        Match one tab against existing groups.

        Args:
            title: Resolved tab title
            embedding: Tab embedding, or a failure value
            profiles: Existing group profiles

        Returns:
            The accepted match, or None
        """
        if not profiles:
            return None

        if is_embedding(embedding):
            result = self.match_by_embedding(embedding, profiles)
            if result:
                return result

        return self.match_by_title(title, profiles)

    def match_tabs(
        self, candidates: list[Candidate], profiles: list[GroupProfile]
    ) -> tuple[list[tuple[Candidate, GroupMatch]], list[Candidate]]:
        """
        Split candidates into matched ones and leftovers.

        Returns:
            Tuple of ((candidate, match) pairs, unmatched candidates)
        """
        matched = []
        unmatched = []

        for candidate in candidates:
            result = self.match(candidate.title, candidate.embedding, profiles)
            if result:
                logger.info(
                    f"Assigning tab '{candidate.title[:50]}' to existing group "
                    f"'{result.label}' ({result.method}, similarity: {result.similarity:.2f})"
                )
                matched.append((candidate, result))
            else:
                unmatched.append(candidate)

        return matched, unmatched
