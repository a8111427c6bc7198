"""
Unit tests for matching tabs against existing groups.
"""

import asyncio

import pytest
import numpy as np
from pydantic import ValidationError
from unittest.mock import AsyncMock, Mock

from tab_topics.agents.embedding_provider import EmbeddingProvider
from tab_topics.agents.group_matcher import GroupMatch, GroupMatcher, GroupProfile
from tab_topics.agents.models import Candidate, ExistingGroup, Tab
from tab_topics.errors import EmbeddingFailure


@pytest.fixture
def matcher():
    return GroupMatcher(similarity_threshold=0.65, existing_group_boost=0.1, fuzzy_threshold=0.7)


class TestEmbeddingPass:
    """Tests for centroid-based matching."""

    def test_identical_embedding_matches_with_boost(self, matcher):
        centroid = [0.6, 0.8, 0.0]
        profiles = [GroupProfile(label="Research", centroid=centroid)]

        result = matcher.match("Some paper", centroid, profiles)

        assert result is not None
        assert result.label == "Research"
        assert result.similarity == pytest.approx(1.1)
        assert result.method == "embedding"

    def test_boost_lifts_borderline_match(self, matcher):
        # cosine 0.6 alone is below 0.65, boosted 0.7 is above
        embedding = [0.6, 0.8]
        profiles = [GroupProfile(label="Borderline", centroid=[1.0, 0.0])]

        result = matcher.match("Title", embedding, profiles)

        assert result is not None
        assert result.label == "Borderline"

    def test_below_threshold_no_match(self, matcher):
        profiles = [GroupProfile(label="Other", centroid=[1.0, 0.0], member_titles=["Unrelated"])]

        assert matcher.match("Completely different", [0.0, 1.0], profiles) is None

    def test_best_group_wins(self, matcher):
        profiles = [
            GroupProfile(label="Close", centroid=[0.9, 0.1, 0.0]),
            GroupProfile(label="Exact", centroid=[1.0, 0.0, 0.0]),
        ]

        result = matcher.match("Title", [1.0, 0.0, 0.0], profiles)

        assert result.label == "Exact"

    def test_tie_keeps_first_group(self, matcher):
        profiles = [
            GroupProfile(label="First", centroid=[1.0, 0.0]),
            GroupProfile(label="Second", centroid=[1.0, 0.0]),
        ]

        result = matcher.match("Title", [1.0, 0.0], profiles)

        assert result.label == "First"

    def test_group_without_centroid_is_skipped(self, matcher):
        profiles = [GroupProfile(label="Empty", centroid=None)]

        assert matcher.match_by_embedding([1.0, 0.0], profiles) is None


class TestFuzzyPass:
    """Tests for the title fallback."""

    def test_failed_embedding_uses_titles(self, matcher):
        profiles = [
            GroupProfile(label="Docs", centroid=[1.0, 0.0], member_titles=["Neo4j Documentation"]),
        ]
        failure = EmbeddingFailure(text="Neo4j Documentatio", reason="error")

        result = matcher.match("Neo4j Documentatio", failure, profiles)

        assert result is not None
        assert result.label == "Docs"
        assert result.method == "fuzzy"

    def test_used_when_embedding_pass_finds_nothing(self, matcher):
        profiles = [
            GroupProfile(label="Docs", centroid=[0.0, 1.0], member_titles=["React Hooks Guide"]),
        ]

        result = matcher.match("React Hooks Guides", [1.0, 0.0], profiles)

        assert result.label == "Docs"
        assert result.method == "fuzzy"

    def test_last_qualifying_group_wins(self, matcher):
        profiles = [
            GroupProfile(label="Exact", member_titles=["React Hooks Guide"]),
            GroupProfile(label="Close", member_titles=["React Hooks Guides"]),
        ]

        result = matcher.match_by_title("React Hooks Guide", profiles)

        # "Exact" scores 1.0 but a later qualifying group replaces it
        assert result.label == "Close"

    def test_dissimilar_titles_do_not_match(self, matcher):
        profiles = [GroupProfile(label="Far", member_titles=["abcdefghij"])]

        # 4 edits over 10 characters is 0.6
        assert matcher.match_by_title("abcdefwxyz", profiles) is None

    def test_no_profiles(self, matcher):
        assert matcher.match("Anything", [1.0], []) is None


class TestMatchTabs:
    """Tests for splitting candidates."""

    def test_splits_matched_and_unmatched(self, matcher):
        tab1 = Tab(id=1, title="Paper A")
        tab2 = Tab(id=2, title="Recipe")
        candidates = [
            Candidate(tab=tab1, title="Paper A", embedding=[1.0, 0.0]),
            Candidate(tab=tab2, title="Recipe", embedding=[0.0, 1.0]),
        ]
        profiles = [GroupProfile(label="Research", centroid=[1.0, 0.0], member_titles=["Paper B"])]

        matched, unmatched = matcher.match_tabs(candidates, profiles)

        assert [(c.tab.id, m.label, m.method) for c, m in matched] == [(1, "Research", "embedding")]
        assert [c.tab.id for c in unmatched] == [2]

    def test_match_method_is_restricted(self):
        with pytest.raises(ValidationError):
            GroupMatch(label="Research", similarity=0.9, method="keyword")


class TestBuildProfiles:
    """Tests for centroid computation."""

    def test_centroid_is_mean_of_valid_members(self, matcher):
        vectors = {"A": [1.0, 0.0], "B": [0.0, 1.0], "Broken": None}

        async def embed(text):
            if vectors[text] is None:
                raise RuntimeError("backend down")
            return vectors[text]

        backend = Mock()
        backend.embed = AsyncMock(side_effect=embed)
        provider = EmbeddingProvider(backend, max_attempts=1)

        groups = [
            ExistingGroup(label="Mixed", members=[Tab(id=1, title="A"), Tab(id=2, title="B"), Tab(id=3, title="Broken")]),
            ExistingGroup(label="Dead", members=[Tab(id=4, title="Broken")]),
        ]

        profiles = asyncio.run(matcher.build_profiles(groups, provider))

        assert [p.label for p in profiles] == ["Mixed", "Dead"]
        np.testing.assert_array_almost_equal(profiles[0].centroid, [0.5, 0.5])
        assert profiles[0].member_titles == ["A", "B", "Broken"]
        assert profiles[1].centroid is None
        assert profiles[1].member_titles == ["Broken"]
