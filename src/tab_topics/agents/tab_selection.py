"""
Candidate selection and display-title resolution for tabs.
"""

from urllib.parse import urlparse

from tab_topics.agents.models import ExistingGroup, Tab

PLACEHOLDER_TITLES = {"New Tab", "about:blank"}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}
UNTITLED = "Untitled Page"


def resolve_tab_title(tab: Tab) -> str:
    """
    Get the title used for embedding, matching and naming.

    Placeholder titles ("New Tab", "about:blank", raw URLs) are replaced by
    the page host name, or "Untitled Page" when there is no usable host.

    Examples:
        "Neo4j Docs" → "Neo4j Docs"
        "" with https://www.github.com/x → "github.com"
        "New Tab" with about:newtab → "Untitled Page"
    """
    title = (tab.title or "").strip()
    if title and title not in PLACEHOLDER_TITLES and not title.startswith("http"):
        return title

    if tab.url and not tab.url.startswith("about:"):
        try:
            hostname = urlparse(tab.url).hostname or ""
        except ValueError:
            hostname = ""
        hostname = hostname.removeprefix("www.")
        if hostname and hostname not in LOCAL_HOSTS:
            return hostname

    return UNTITLED


def select_candidate_tabs(
    tabs: list[Tab],
    workspace_id: str | None,
    include_grouped: bool = False,
    include_selected: bool = True,
    include_pinned: bool = False,
    include_empty: bool = False,
    include_glance: bool = False,
) -> list[Tab]:
    """
    Filter a workspace's tabs down to the ones a sort should consider.

    Args:
        tabs: All tabs known to the browser window
        workspace_id: Active workspace. Without one nothing is sortable.
        include_grouped: Keep tabs that are already in a group
        include_selected: Keep the active tab
        include_pinned: Keep pinned tabs
        include_empty: Keep placeholder empty tabs
        include_glance: Keep glance (preview) tabs

    Returns:
        Candidate tabs in their original order
    """
    if not workspace_id:
        return []

    return [
        tab for tab in tabs
        if tab.workspace_id == workspace_id
        and (include_pinned or not tab.pinned)
        and (include_grouped or not tab.grouped)
        and (include_selected or not tab.selected)
        and (include_empty or not tab.empty)
        and (include_glance or not tab.glance)
    ]


def scope_groups(groups: list[ExistingGroup], workspace_id: str | None) -> list[ExistingGroup]:
    """
    Restrict existing groups to one workspace.

    Unlabelled groups are dropped. With a workspace id, members from other
    workspaces are removed first. Groups without members are dropped.
    """
    scoped = []
    for group in groups:
        if not group.label:
            continue
        members = group.members
        if workspace_id:
            members = [tab for tab in members if tab.workspace_id == workspace_id]
        if members:
            scoped.append(ExistingGroup(label=group.label, members=members))
    return scoped
