"""
Merging of near-duplicate topic labels.

Labels such as "Research" and "Reseach" end up as one group: a single
left-to-right sweep folds every later label within the edit-distance
threshold into the earlier one.
"""

from tab_topics.agents.models import Assignment, Tab
from tab_topics.config import get_logger
from tab_topics.similarity import edit_distance

logger = get_logger(__name__)


def group_by_topic(assignments: list[Assignment]) -> dict[str, list[Tab]]:
    """Ordered topic → tabs mapping. Topic-less and sentinel assignments are skipped."""
    groups: dict[str, list[Tab]] = {}
    for assignment in assignments:
        if assignment.has_topic:
            groups.setdefault(assignment.topic, []).append(assignment.tab)
    return groups


def merge_near_duplicates(
    groups: dict[str, list[Tab]], threshold: int = 2
) -> tuple[dict[str, list[Tab]], dict[str, str]]:
    """
    Fold near-duplicate labels into the first one seen.

    Once a label has been merged away it is neither a source nor a target
    again. Groups that end up empty are dropped.

    Args:
        groups: Topic → tabs, in label order
        threshold: Maximum edit distance for two labels to merge

    Returns:
        Tuple of (merged groups, alias map from merged label to survivor)
    """
    labels = list(groups)
    merged = {label: list(tabs) for label, tabs in groups.items()}
    aliases: dict[str, str] = {}

    for i, label in enumerate(labels):
        if label in aliases:
            continue
        for other in labels[i + 1:]:
            if other in aliases:
                continue
            if edit_distance(label, other) <= threshold:
                merged[label].extend(merged.pop(other))
                aliases[other] = label
                logger.info(f"Merged label '{other}' into '{label}'")

    return {label: tabs for label, tabs in merged.items() if tabs}, aliases


class LabelConsolidator:
    """Rewrites assignments so near-duplicate labels share one topic."""

    def __init__(self, distance_threshold: int = 2):
        self.distance_threshold = distance_threshold

    def consolidate(self, assignments: list[Assignment]) -> list[Assignment]:
        """
        Consolidate topics across assignments.

        Args:
            assignments: Assignments in output order

        Returns:
            Same assignments in the same order, merged labels replaced by
            their surviving label
        """
        _, aliases = merge_near_duplicates(group_by_topic(assignments), self.distance_threshold)
        if not aliases:
            return list(assignments)

        return [
            Assignment(tab=a.tab, topic=aliases[a.topic]) if a.topic in aliases else a
            for a in assignments
        ]
