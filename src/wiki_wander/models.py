from typing import Optional, Tuple
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator

from wiki_wander.content.sanitizer import strip_tags
from wiki_wander.utils.wiki_helpers import is_same_article

# --- Enums ---

class ArticleRole(str, Enum):
    """Which end of the journey an article (or input field) belongs to."""
    START = "start"
    TARGET = "target"

class GameStatus(Enum):
    """Represents the lifecycle state of a game."""
    SETUP = "setup"
    ACTIVE = "active"
    WON = "won"
    SURRENDERED = "surrendered"

class ErrorType(Enum):
    """Categorizes the recoverable errors a game can surface."""
    NOT_FOUND = "not_found"
    SETUP_INCOMPLETE = "setup_incomplete"
    DUPLICATE_ARTICLES = "duplicate_articles"
    FETCH_FAILURE = "fetch_failure"
    HINT_FAILURE = "hint_failure"

# --- Wikipedia REST summary ---

class SummaryTitles(BaseModel):
    canonical: str = ""
    normalized: str = ""
    display: str = ""

class ContentUrl(BaseModel):
    page: str = ""

class ContentUrls(BaseModel):
    desktop: ContentUrl = Field(default_factory=ContentUrl)
    mobile: ContentUrl = Field(default_factory=ContentUrl)

class ArticleSummary(BaseModel):
    """The fields of a Wikipedia REST page summary that the game consumes."""
    type: str = Field("standard", description="Page type: standard, disambiguation, no-extract, mainpage...")
    title: str = Field(..., description="The page title as returned by the API.")
    titles: SummaryTitles = Field(default_factory=SummaryTitles)
    description: Optional[str] = Field(None, description="Short Wikidata description.")
    extract: str = Field("", description="Plain-text lead extract.")
    content_urls: ContentUrls = Field(default_factory=ContentUrls)

    @property
    def normalized_title(self) -> str:
        return self.titles.normalized or self.title

    @property
    def display_title(self) -> str:
        """Display title with any markup (italics, spans) removed."""
        return strip_tags(self.titles.display) or self.normalized_title

    @property
    def is_standard(self) -> bool:
        return self.type == "standard"

    @property
    def page_url(self) -> str:
        return self.content_urls.desktop.page

# --- Game models ---

class Article(BaseModel):
    """A single Wikipedia article as seen by the player. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Normalized title; the identity key used for API calls and comparisons.")
    display_title: str = Field(..., description="Title shown to the player.")
    html_content: Optional[str] = Field(None, description="Raw (unsanitized) article body markup.")
    summary: Optional[str] = Field(None, description="Short description of the article.")
    is_error: bool = Field(False, description="True if this represents an error page or failed fetch.")

    @classmethod
    def from_summary(cls, summary: ArticleSummary, max_chars: int = 150) -> "Article":
        """Build a content-less article from a REST summary, as used during setup."""
        description = summary.description
        if not description and summary.extract:
            description = summary.extract[:max_chars] + "..."
        return cls(
            title=summary.normalized_title,
            display_title=summary.normalized_title,
            summary=description,
        )

    def same_article(self, other: Optional["Article"]) -> bool:
        return other is not None and is_same_article(self.title, other.title)

class GameState(BaseModel):
    """
    Snapshot of a single game session.

    Snapshots are immutable; every transition builds a new one with `evolve`, which
    re-runs validation, so presentation code never observes a half-applied update.
    """
    model_config = ConfigDict(frozen=True)

    start_article: Optional[Article] = Field(None, description="Selected start article (summary only).")
    target_article: Optional[Article] = Field(None, description="Selected target article (summary only).")
    current_article: Optional[Article] = Field(None, description="The article the player is currently on.")
    history: Tuple[Article, ...] = Field((), description="Chronological list of visited articles.")
    clicks: int = Field(0, ge=0, description="Number of successful navigations.")
    elapsed_time: int = Field(0, ge=0, description="Elapsed game time in seconds.")
    status: GameStatus = Field(GameStatus.SETUP, description="Current lifecycle state.")
    is_loading: bool = Field(False, description="An article selection or fetch is in flight.")
    is_loading_hint: bool = Field(False, description="A hint request is in flight.")
    hint: Optional[str] = Field(None, description="The most recent hint text.")
    error_message: Optional[str] = Field(None, description="User-visible message for the last recoverable error.")
    error_type: Optional[ErrorType] = Field(None, description="Category of the last recoverable error.")
    error_role: Optional[ArticleRole] = Field(None, description="The setup role the error is scoped to, if any.")

    @model_validator(mode="after")
    def check_invariants(self) -> "GameState":
        if self.status != GameStatus.SETUP:
            if not self.history:
                raise ValueError("A started game must have a non-empty history.")
            if self.history[-1] != self.current_article:
                raise ValueError("The current article must be the last history entry.")
            if self.clicks != len(self.history) - 1:
                raise ValueError("Clicks must equal the number of navigations in the history.")
        if self.status == GameStatus.WON and not self.current_article.same_article(self.target_article):
            raise ValueError("A won game must be on the target article.")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == GameStatus.ACTIVE

    @property
    def is_won(self) -> bool:
        return self.status == GameStatus.WON

    @property
    def is_surrendered(self) -> bool:
        return self.status == GameStatus.SURRENDERED

    def article_for(self, role: ArticleRole) -> Optional[Article]:
        return self.start_article if role == ArticleRole.START else self.target_article

    def evolve(self, **changes) -> "GameState":
        """Return a validated copy of this snapshot with `changes` applied."""
        return type(self)(**{**dict(self), **changes})
