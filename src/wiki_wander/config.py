import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_NON_ARTICLE_NAMESPACES = [
    "File",
    "Special",
    "Help",
    "Category",
    "Wikipedia",
    "Template",
    "Talk",
    "Portal",
    "Draft",
    "User",
    "Module",
    "MediaWiki",
    "Image",
    "TimedText",
    "Book",
]


class WanderConfig(BaseModel):
    """Configuration for a Wiki Wander session."""

    # Wikipedia settings
    language: str = Field("en", description="Wikipedia language edition to play on")
    user_agent: str = Field(
        "WikiWander/0.1 (https://github.com/wikiwander/wiki-wander)",
        description="User-Agent sent with every Wikipedia API request",
    )
    request_timeout: float = Field(10.0, gt=0, description="Timeout in seconds for Wikipedia API requests")
    non_article_namespaces: List[str] = Field(
        default_factory=lambda: list(DEFAULT_NON_ARTICLE_NAMESPACES),
        description="Namespaces under the article path that are not playable articles",
    )

    # Suggestion settings
    search_limit: int = Field(5, ge=1, description="Maximum number of search suggestions per query")
    min_query_length: int = Field(2, ge=0, description="Queries are issued only for trimmed text longer than this")
    debounce_delay: float = Field(0.3, ge=0, description="Quiet period in seconds before a search is issued")

    # Game settings
    summary_max_chars: int = Field(150, ge=1, description="Length of the extract used when an article has no description")
    timer_interval: float = Field(1.0, gt=0, description="Seconds between timer samples")

    # Hint settings
    hint_provider: str = Field("anthropic", description="Hint provider: anthropic, openai, openrouter, static")
    hint_model: str = Field("claude-3-5-haiku-latest", description="Model name passed to the hint provider")
    hint_max_tokens: int = Field(256, ge=1, description="Maximum tokens for a generated hint")

    @property
    def site_url(self) -> str:
        return f"https://{self.language}.wikipedia.org"

    @property
    def rest_api_url(self) -> str:
        return f"{self.site_url}/api/rest_v1"

    @property
    def action_api_url(self) -> str:
        return f"{self.site_url}/w/api.php"

    @property
    def article_path_prefix(self) -> str:
        return "/wiki/"

    @classmethod
    def from_env(cls) -> "WanderConfig":
        """Create config from environment variables."""
        defaults = cls()
        namespaces = os.getenv("WANDER_NON_ARTICLE_NAMESPACES")
        return cls(
            language=os.getenv("WANDER_LANGUAGE", defaults.language),
            user_agent=os.getenv("WANDER_USER_AGENT", defaults.user_agent),
            request_timeout=float(os.getenv("WANDER_REQUEST_TIMEOUT", str(defaults.request_timeout))),
            non_article_namespaces=(
                [ns.strip() for ns in namespaces.split(",") if ns.strip()]
                if namespaces
                else defaults.non_article_namespaces
            ),
            search_limit=int(os.getenv("WANDER_SEARCH_LIMIT", str(defaults.search_limit))),
            min_query_length=int(os.getenv("WANDER_MIN_QUERY_LENGTH", str(defaults.min_query_length))),
            debounce_delay=float(os.getenv("WANDER_DEBOUNCE_DELAY", str(defaults.debounce_delay))),
            summary_max_chars=int(os.getenv("WANDER_SUMMARY_MAX_CHARS", str(defaults.summary_max_chars))),
            timer_interval=float(os.getenv("WANDER_TIMER_INTERVAL", str(defaults.timer_interval))),
            hint_provider=os.getenv("WANDER_HINT_PROVIDER", defaults.hint_provider),
            hint_model=os.getenv("WANDER_HINT_MODEL", defaults.hint_model),
            hint_max_tokens=int(os.getenv("WANDER_HINT_MAX_TOKENS", str(defaults.hint_max_tokens))),
        )
