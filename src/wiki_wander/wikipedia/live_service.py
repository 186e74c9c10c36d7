import html
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from wiki_wander.config import WanderConfig
from wiki_wander.models import Article, ArticleSummary
from wiki_wander.utils.wiki_helpers import get_url_page_title


class LiveWikiService:
    """
    Service for interacting directly with the live Wikipedia APIs.
    All methods are asynchronous.

    Lookups that can legitimately miss return None or an empty list, and content
    fetches return an error-flagged Article; nothing here raises to the caller.
    """
    def __init__(
        self,
        config: Optional[WanderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or WanderConfig()
        self.rest_url = self.config.rest_api_url
        self.action_url = self.config.action_api_url
        self._transport = transport
        self.logger = logging.getLogger(__name__)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.request_timeout,
            headers={"User-Agent": self.config.user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        async with self._client() as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
        return response.json()

    async def _get_summary(self, url: str) -> ArticleSummary:
        data = await self._get_json(url)
        return ArticleSummary.model_validate(data)

    async def fetch_random_summary(self) -> Optional[ArticleSummary]:
        """Get a random article summary, retrying once if the first is not a standard article."""
        url = f"{self.rest_url}/page/random/summary"
        try:
            summary = await self._get_summary(url)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Failed to fetch random article summary: {e}")
            return None

        if summary.is_standard:
            return summary

        try:
            retry = await self._get_summary(url)
            if retry.is_standard:
                return retry
        except (httpx.HTTPError, ValueError) as e:
            self.logger.debug(f"Retry for a standard random article failed: {e}")

        self.logger.warning(f"Fetched a non-standard random article: {summary.title} ({summary.type})")
        return summary

    async def fetch_summary(self, title: str) -> Optional[ArticleSummary]:
        """Get the summary for a specific title. Returns None if it does not exist."""
        if not title or not title.strip():
            return None
        url = f"{self.rest_url}/page/summary/{get_url_page_title(title)}"
        try:
            return await self._get_summary(url)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                self.logger.warning(f"Summary for '{title}' not found (404).")
            else:
                self.logger.error(f"Failed to fetch article summary for '{title}': {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Error fetching article summary for '{title}': {e}")
            return None

    async def fetch_content(self, title: str) -> Article:
        """Fetch the rendered HTML of an article. Failures yield an error-flagged Article."""
        params = {
            "action": "parse", "page": title, "prop": "text",
            "format": "json", "formatversion": "2", "redirects": "1",
        }
        try:
            data = await self._get_json(self.action_url, params=params)
            if not isinstance(data, dict):
                raise ValueError(f"Unexpected parse response for \"{title}\": {type(data).__name__}")
            if "error" in data:
                error = data["error"]
                info = error.get("info", "unknown error") if isinstance(error, dict) else error
                raise ValueError(f"API error for \"{title}\": {info}")

            parsed = data.get("parse") or {}
            if not isinstance(parsed, dict):
                raise ValueError(f"Unexpected parse payload for \"{title}\"")
            if parsed.get("text"):
                self.logger.debug(f"Fetched content for '{parsed['title']}'")
                return Article(
                    title=parsed["title"],
                    display_title=parsed["title"],
                    html_content=parsed["text"],
                )

            summary = await self.fetch_summary(title)
            if summary is None:
                raise ValueError(f"Article content not found for \"{title}\" and summary also failed.")
            return Article(
                title=summary.normalized_title,
                display_title=summary.display_title,
                html_content=(
                    "<p>Article content could not be loaded. This might be a redirect or a special page. "
                    f'<a href="{html.escape(summary.page_url, quote=True)}">View on Wikipedia</a></p>'
                ),
                summary=summary.description or summary.extract,
            )
        except (httpx.HTTPError, ValueError, KeyError, ValidationError) as e:
            self.logger.error(f"Error fetching article content for '{title}': {e}")
            return Article(
                title=title,
                display_title=title,
                html_content=(
                    f"<p>Error loading article: {html.escape(str(e))}. "
                    "Please try refreshing or selecting a different article.</p>"
                ),
                is_error=True,
            )

    async def search_articles(self, search_term: str) -> List[str]:
        """Search article titles by prefix, limited to the main namespace."""
        if not search_term or not search_term.strip():
            return []
        params = {
            "action": "opensearch", "search": search_term,
            "limit": str(self.config.search_limit), "namespace": "0", "format": "json",
        }
        try:
            data = await self._get_json(self.action_url, params=params)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Error searching articles for '{search_term}': {e}")
            return []
        # opensearch returns [term, [titles], [descriptions], [urls]]
        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            return []
        return [str(title) for title in data[1][: self.config.search_limit]]
