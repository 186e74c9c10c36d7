"""
Pytest configuration and shared fixtures for Wiki Wander tests.
"""

import pytest
import logging
from typing import Dict, Optional
from unittest.mock import AsyncMock, Mock

from wiki_wander import EventBus, GameEvent, Game, WanderConfig
from wiki_wander.hints import HintModelConfig, StaticHintModel
from wiki_wander.models import Article, ArticleSummary
from wiki_wander.wikipedia import LiveWikiService

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


def make_summary(title: str, page_type: str = "standard", description: Optional[str] = None, extract: str = "") -> ArticleSummary:
    """Build a REST summary the way the Wikipedia API shapes it."""
    return ArticleSummary.model_validate({
        "type": page_type,
        "title": title.replace(" ", "_"),
        "titles": {
            "canonical": title.replace(" ", "_"),
            "normalized": title,
            "display": f'<span class="mw-page-title-main">{title}</span>',
        },
        "description": description,
        "extract": extract or f"{title} is an article.",
        "content_urls": {"desktop": {"page": f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}"}},
    })


def make_article(title: str, body: Optional[str] = None, is_error: bool = False) -> Article:
    return Article(
        title=title,
        display_title=title,
        html_content=body if body is not None else f'<p>{title} links to <a href="/wiki/Dog">Dog</a>.</p>',
        is_error=is_error,
    )


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self):
        self.events = []

    async def __call__(self, event: GameEvent):
        self.events.append(event)

    def types(self):
        return [event.type for event in self.events]

    def last(self, event_type: str) -> Optional[GameEvent]:
        matching = [event for event in self.events if event.type == event_type]
        return matching[-1] if matching else None


@pytest.fixture
def config() -> WanderConfig:
    """Config with short delays so tests run quickly."""
    return WanderConfig(debounce_delay=0.01, timer_interval=0.01, hint_provider="static", hint_model="static")


@pytest.fixture
def event_bus() -> EventBus:
    """Create a fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    recorder = EventRecorder()
    event_bus.subscribe_all(recorder)
    return recorder


@pytest.fixture
def summaries() -> Dict[str, ArticleSummary]:
    return {title: make_summary(title) for title in ["Cat", "Dog", "Mammal", "Paris"]}


@pytest.fixture
def contents() -> Dict[str, Article]:
    return {
        "Cat": make_article(
            "Cat",
            '<p>The cat is a <a href="/wiki/Mammal">mammal</a> related to the '
            '<a href="/wiki/Dog">dog</a>.<script>alert(1)</script></p>'
            '<a href="/wiki/File:Cat.jpg">image</a>',
        ),
        "Dog": make_article("Dog", '<p>The dog is a <a href="/wiki/Mammal">mammal</a>.</p>'),
        "Mammal": make_article("Mammal", '<p>See <a href="/wiki/Dog">Dog</a> and <a href="/wiki/Cat">Cat</a>.</p>'),
    }


@pytest.fixture
def mock_wiki_service(summaries, contents):
    """Mock LiveWikiService backed by in-memory summaries and contents."""
    service = Mock(spec=LiveWikiService)

    async def fetch_summary(title):
        return summaries.get(title)

    async def fetch_content(title):
        if title in contents:
            return contents[title]
        return make_article(title, f"<p>Error loading article: {title}.</p>", is_error=True)

    service.fetch_summary = AsyncMock(side_effect=fetch_summary)
    service.fetch_content = AsyncMock(side_effect=fetch_content)
    service.fetch_random_summary = AsyncMock(return_value=summaries["Mammal"])
    service.search_articles = AsyncMock(return_value=["Paris", "Paris Hilton"])
    return service


@pytest.fixture
def hint_model() -> StaticHintModel:
    return StaticHintModel(HintModelConfig(
        provider="static",
        model_name="static",
        settings={"template": "From {current_title}, think about what {target_title} belongs to."},
    ))


@pytest.fixture
def game(mock_wiki_service, hint_model, event_bus, config) -> Game:
    return Game(wiki_service=mock_wiki_service, hint_model=hint_model, event_bus=event_bus, config=config)
