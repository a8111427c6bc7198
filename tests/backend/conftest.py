"""
Pytest configuration and fixtures for backend API tests.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from tab_topics.agents.cluster_namer import ClusterNamer
from tab_topics.agents.embedding_provider import EmbeddingProvider
from tab_topics.agents.orchestrator import TabSortOrchestrator
from tab_topics.config import Provider, Settings


@pytest.fixture(autouse=True)
def reset_orchestrator():
    """Reset the global orchestrator between tests."""
    import tab_topics.server.app as app_module

    app_module._orchestrator = None
    yield
    app_module._orchestrator = None


@pytest.fixture(autouse=True)
def mock_settings():
    """Mock settings to avoid requiring .env file in tests."""
    settings = Settings(
        _env_file=None,
        ai_provider=Provider.LOCAL,
        openai_api_key="test-api-key",
        gemini_api_key=None,
    )
    with patch("tab_topics.agents.orchestrator.get_settings", return_value=settings):
        yield settings


class FakeEmbeddingBackend:
    """Embeds known titles to fixed vectors, everything else to a far-away one."""

    VECTORS = {
        "Neo4j Documentation": [1.0, 0.0, 0.0, 0.0],
        "Cypher Query Language Guide": [0.95, 0.31, 0.0, 0.0],
        "Graph Modeling Basics": [1.0, 0.0, 0.0, 0.0],
        "React Documentation": [0.0, 1.0, 0.0, 0.0],
        "React Hooks Reference": [0.0, 0.98, 0.2, 0.0],
    }

    async def embed(self, text):
        return self.VECTORS.get(text, [0.0, 0.0, 0.0, 1.0])


@pytest.fixture
def mock_generator():
    """Mock text generator naming every cluster the same."""
    generator = Mock()
    generator.generate = AsyncMock(return_value="Frontend")
    return generator


@pytest.fixture
def orchestrator(mock_generator):
    """Install a local orchestrator with fake backends as the app's global."""
    import tab_topics.server.app as app_module

    instance = TabSortOrchestrator(
        provider=Provider.LOCAL,
        embedding_provider=EmbeddingProvider(FakeEmbeddingBackend()),
        cluster_namer=ClusterNamer(mock_generator),
    )
    app_module._orchestrator = instance
    return instance


@pytest.fixture
def sample_sort_request():
    """Sample workspace snapshot for the sort endpoint."""
    return {
        "workspace_id": "research",
        "tabs": [
            {
                "id": 1,
                "title": "Neo4j Documentation",
                "url": "https://neo4j.com/docs",
                "workspace_id": "research",
            },
            {
                "id": 2,
                "title": "Cypher Query Language Guide",
                "url": "https://neo4j.com/cypher",
                "workspace_id": "research",
            },
            {
                "id": 3,
                "title": "React Documentation",
                "url": "https://react.dev/learn",
                "workspace_id": "research",
            },
            {
                "id": 4,
                "title": "React Hooks Reference",
                "url": "https://react.dev/reference/react",
                "workspace_id": "research",
                "selected": True,
            },
            {
                "id": 5,
                "title": "Inbox",
                "url": "https://mail.example.com",
                "workspace_id": "research",
                "pinned": True,
            },
            {
                "id": 6,
                "title": "Graph Modeling Basics",
                "url": "https://neo4j.com/modeling",
                "workspace_id": "research",
                "grouped": True,
            },
        ],
        "groups": [
            {"label": "Graph Databases", "tab_ids": [6]},
        ],
    }
