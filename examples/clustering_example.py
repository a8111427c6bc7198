"""
Example demonstrating topic assignment for a workspace of tabs.

This example shows:
1. Building a workspace snapshot with an existing tab group
2. Matching new tabs into the existing group
3. Clustering and naming the remaining tabs
4. Reading the grouping plan (extend vs. create)
"""

import asyncio

from tab_topics.agents import ExistingGroup, Tab, TabSortOrchestrator, WorkspaceSnapshot
from tab_topics.config import get_settings, setup_logging


async def main():
    """Run the topic assignment example."""

    settings = get_settings()
    setup_logging(settings.log_level)

    print("=" * 80)
    print(f"Tab Topic Example ({settings.ai_provider.value} provider)")
    print("=" * 80)
    print()

    workspace = "ws-1"
    grouped = [
        Tab(id=1, title="Neo4j Documentation", url="https://neo4j.com/docs",
            workspace_id=workspace, grouped=True),
        Tab(id=2, title="Cypher Query Language Tutorial", url="https://neo4j.com/docs/cypher-manual",
            workspace_id=workspace, grouped=True),
    ]
    loose = [
        Tab(id=3, title="Neo4j Graph Data Science Library", url="https://neo4j.com/docs/gds",
            workspace_id=workspace),
        Tab(id=4, title="React Documentation - Learn React", url="https://react.dev/learn",
            workspace_id=workspace),
        Tab(id=5, title="React Hooks Reference", url="https://react.dev/reference/react",
            workspace_id=workspace),
        Tab(id=6, title="useEffect - React", url="https://react.dev/reference/react/useEffect",
            workspace_id=workspace),
        Tab(id=7, title="Weather Forecast", url="https://weather.com", workspace_id=workspace),
    ]

    snapshot = WorkspaceSnapshot(
        workspace_id=workspace,
        tabs=grouped + loose,
        groups=[ExistingGroup(label="Graph Databases", members=grouped)],
    )

    orchestrator = TabSortOrchestrator.from_settings(settings)
    result = await orchestrator.sort_workspace(snapshot)

    print("-" * 80)
    print("Assignments")
    print("-" * 80)
    for assignment in result.assignments:
        print(f"  {assignment.tab.title:<45} → {assignment.topic or '(no topic)'}")
    print()

    existing = {group.label for group in snapshot.groups}
    print("-" * 80)
    print("Grouping plan")
    print("-" * 80)
    for topic, tabs in result.groups().items():
        action = "extend" if topic in existing else "create"
        print(f"  [{action}] {topic}: {', '.join(str(t.id) for t in tabs)}")

    if result.should_signal_failure:
        print()
        print("No multi-tab groups could be formed.")


if __name__ == "__main__":
    asyncio.run(main())
