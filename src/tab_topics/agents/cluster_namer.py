"""
Naming of freshly formed clusters.

Keywords are counted from the member titles and handed, together with the
titles themselves, to a text-generation backend. If generation fails the
cluster still gets a label derived from its first title.
"""

import re
from collections import Counter
from typing import Union

from tab_topics.agents.backends import TextGenerationBackend
from tab_topics.config import get_logger
from tab_topics.errors import NamingFailure
from tab_topics.similarity import to_title_case

logger = get_logger(__name__)

NON_WORD = re.compile(r"[^\w\s]")
WRAPPING_QUOTES = re.compile(r"^['\"]|['\"]$")
DEFAULT_LABEL = "Group"


def extract_keywords(titles: list[str], limit: int = 5) -> list[str]:
    """
    Get the most frequent meaningful words across titles.

    Tokens are lower-cased, split on non-word characters, and anything of
    two characters or fewer is ignored. Ties keep first-seen order.

    Args:
        titles: Tab titles
        limit: Maximum number of keywords

    Returns:
        Keywords, most frequent first

    Example:
        >>> extract_keywords(["React Hooks Guide", "React State Hooks"])
        ['react', 'hooks', 'guide', 'state']
    """
    words = NON_WORD.sub(" ", " ".join(titles).lower()).split()
    counts = Counter(w for w in words if len(w) > 2)
    return [word for word, _ in counts.most_common(limit)]


def fallback_label(titles: list[str]) -> str:
    """Label made from the first word of the first title."""
    if not titles:
        return DEFAULT_LABEL
    first_word = titles[0].strip().split(" ")[0]
    return to_title_case(first_word) or DEFAULT_LABEL


class ClusterNamer:
    """Service for generating short labels for tab clusters."""

    def __init__(
        self,
        generator: TextGenerationBackend,
        keyword_count: int = 5,
        max_tokens: int = 8,
        temperature: float = 0.7,
    ):
        """
        Initialize the cluster namer.

        Args:
            generator: Text-generation backend
            keyword_count: Number of keywords fed to the prompt
            max_tokens: Token budget for the generated label
            temperature: Sampling temperature
        """
        self.generator = generator
        self.keyword_count = keyword_count
        self.max_tokens = max_tokens
        self.temperature = temperature

    def build_prompt(self, titles: list[str]) -> str:
        keywords = extract_keywords(titles, self.keyword_count)
        return f"Topic from keywords: {', '.join(keywords)}. titles:\n" + "\n".join(titles)

    async def generate_label(self, titles: list[str]) -> Union[str, NamingFailure]:
        """
        Ask the backend for a label.

        Returns:
            Title-cased label, or NamingFailure on a backend error or empty output
        """
        try:
            text = await self.generator.generate(
                self.build_prompt(titles),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            return NamingFailure(reason=str(e) or type(e).__name__)

        first_line = (text or "").strip().split("\n")[0].strip()
        label = to_title_case(WRAPPING_QUOTES.sub("", first_line).strip())
        if not label:
            return NamingFailure(reason="empty generation")
        return label

    async def name_cluster(self, titles: list[str]) -> str:
        """
        Get a label for a cluster. Never raises.

        Args:
            titles: Titles of the cluster members

        Returns:
            Generated label, or the first-word fallback
        """
        result = await self.generate_label(titles)
        if isinstance(result, NamingFailure):
            label = fallback_label(titles)
            logger.warning(f"Failed to generate cluster name ({result.reason}), using '{label}'")
            return label
        return result
