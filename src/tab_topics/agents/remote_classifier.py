"""
Remote tab classification with the Gemini API.

Sends every tab title and URL plus the workspace's existing group labels in
one generateContent request and reads back one category per line.
"""

import re
from typing import Optional

import httpx

from tab_topics.agents.models import Assignment, Tab, UNCATEGORIZED
from tab_topics.agents.tab_selection import resolve_tab_title
from tab_topics.config import get_logger
from tab_topics.errors import ConfigurationError, RemoteClassifierError
from tab_topics.similarity import to_title_case

logger = get_logger(__name__)

NON_WORD = re.compile(r"[^\w\s]")


class RemoteClassifier:
    """Client that assigns a category to every tab with a single Gemini call."""

    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = 30.0,
        temperature: float = 0.1,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the classifier.

        Args:
            api_key: Gemini API key. May be empty; classify() then raises
                ConfigurationError without touching the network.
            model: Gemini model name
            base_url: API root (override for proxies and tests)
            timeout: Request timeout in seconds (None disables it)
            temperature: Sampling temperature for the request
            http_client: Shared client. If not provided, one is created per call.
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def build_prompt(self, tabs: list[Tab], categories: list[str]) -> str:
        """
        Build the classification prompt.

        Args:
            tabs: Tabs to classify, in output order
            categories: Labels of groups that already exist in the workspace

        Returns:
            Prompt text
        """
        tab_lines = "\n".join(
            f'{i}. Title: "{resolve_tab_title(tab)}", URL: "{tab.url}"'
            for i, tab in enumerate(tabs, start=1)
        )
        existing = ", ".join(categories) if categories else "None"

        return f"""Analyze the following tabs and assign a concise category (1-2 words, Title Case) for EACH.

Existing Categories: {existing}

Rules:
1. If a tab fits an Existing Category, use that EXACT name.
2. Otherwise, create a new concise category.
3. Output ONLY the list of categories, one per line, matching the input order. No numbering.

Tabs:
{tab_lines}"""

    async def classify(self, tabs: list[Tab], categories: list[str]) -> list[Assignment]:
        """
        Classify tabs with one remote request.

        Args:
            tabs: Tabs to classify
            categories: Existing category labels to reuse

        Returns:
            One assignment per tab, in input order

        Raises:
            ConfigurationError: If no API key is configured
            RemoteClassifierError: If the request fails or the reply is empty
        """
        if not self.api_key:
            raise ConfigurationError("Gemini API key is not set")
        if not tabs:
            return []

        payload = {
            "contents": [{"parts": [{"text": self.build_prompt(tabs, categories)}]}],
            "generationConfig": {"temperature": self.temperature},
        }

        logger.info(f"Classifying {len(tabs)} tabs with {self.model}")
        if self.http_client is not None:
            text = await self._request(self.http_client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                text = await self._request(client, payload)

        return self.parse_categories(text, tabs)

    async def _request(self, client: httpx.AsyncClient, payload: dict) -> str:
        try:
            response = await client.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise RemoteClassifierError(f"Request to Gemini failed: {e}") from e

        if not response.is_success:
            raise RemoteClassifierError(
                f"API Error: {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RemoteClassifierError(f"Malformed response from Gemini: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise RemoteClassifierError("Empty response from Gemini")
        return text.strip()

    @staticmethod
    def parse_categories(text: str, tabs: list[Tab]) -> list[Assignment]:
        """
        Pair response lines with tabs.

        Blank lines are skipped, punctuation is stripped and each category is
        title-cased. Tabs without a matching line get UNCATEGORIZED.
        """
        lines = [line.strip() for line in text.split("\n") if line.strip()]

        assignments = []
        for i, tab in enumerate(tabs):
            topic = UNCATEGORIZED
            if i < len(lines):
                topic = to_title_case(NON_WORD.sub("", lines[i]).strip()) or UNCATEGORIZED
            assignments.append(Assignment(tab=tab, topic=topic))

        if len(lines) < len(tabs):
            logger.warning(f"Gemini returned {len(lines)} categories for {len(tabs)} tabs")
        return assignments
