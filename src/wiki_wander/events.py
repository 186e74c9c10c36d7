import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Event types published by the game
ARTICLE_SELECTED = "article_selected"
ARTICLE_NOT_FOUND = "article_not_found"
RANDOM_ARTICLE_FAILED = "random_article_failed"
SETUP_INCOMPLETE = "setup_incomplete"
DUPLICATE_ARTICLES = "duplicate_articles"
GAME_STARTED = "game_started"
START_FAILED = "start_failed"
MOVE_COMPLETED = "move_completed"
NAVIGATION_FAILED = "navigation_failed"
GAME_WON = "game_won"
GAME_SURRENDERED = "game_surrendered"
HINT_UNLOCKED = "hint_unlocked"
HINT_FAILED = "hint_failed"
OPEN_URL = "open_url"

ALL_EVENT_TYPES = (
    ARTICLE_SELECTED, ARTICLE_NOT_FOUND, RANDOM_ARTICLE_FAILED, SETUP_INCOMPLETE,
    DUPLICATE_ARTICLES, GAME_STARTED, START_FAILED, MOVE_COMPLETED, NAVIGATION_FAILED,
    GAME_WON, GAME_SURRENDERED, HINT_UNLOCKED, HINT_FAILED, OPEN_URL,
)

# Toast variants
DEFAULT_VARIANT = "default"
DESTRUCTIVE_VARIANT = "destructive"

EventHandler = Callable[["GameEvent"], Awaitable[None]]


class GameEvent(BaseModel):
    """User-visible notification emitted by a game."""
    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    type: str = Field(..., min_length=1, description="Event type identifier (e.g., 'game_won', 'hint_failed')")
    game_id: str = Field(..., min_length=1, description="Unique identifier for the game session")
    data: Dict[str, Any] = Field(..., description="Event payload: title, description, variant and event-specific fields")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the event was created")

    @property
    def title(self) -> str:
        return self.data.get("title", "")

    @property
    def description(self) -> str:
        return self.data.get("description", "")

    @property
    def is_destructive(self) -> bool:
        return self.data.get("variant") == DESTRUCTIVE_VARIANT


class EventBus:
    """
    Notification channel between a game and its presentation layer.

    Games call `notify` with a toast title, description and variant; the
    presentation layer subscribes per event type. A failing handler is logged
    and never reaches the other handlers or the game that published.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: str, handler: EventHandler):
        """Subscribe a handler to an event type."""
        self._subscribers[event_type].append(handler)
        self.logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler, event_types: Optional[Iterable[str]] = None):
        """Subscribe one handler to several event types (every game event by default)."""
        for event_type in event_types if event_types is not None else ALL_EVENT_TYPES:
            self.subscribe(event_type, handler)

    async def notify(
        self,
        event_type: str,
        game_id: str,
        title: str,
        description: str,
        destructive: bool = False,
        **data: Any,
    ) -> GameEvent:
        """Build a toast-shaped GameEvent and publish it."""
        event = GameEvent(
            type=event_type,
            game_id=game_id,
            data={
                "title": title,
                "description": description,
                "variant": DESTRUCTIVE_VARIANT if destructive else DEFAULT_VARIANT,
                **data,
            },
        )
        await self.publish(event)
        return event

    async def publish(self, event: GameEvent) -> int:
        """Deliver an event to its subscribers. Returns the number of handlers that failed."""
        handlers = list(self._subscribers.get(event.type, ()))
        if not handlers:
            self.logger.debug(f"No subscribers for {event.type}")
            return 0

        outcomes = await asyncio.gather(
            *(self._deliver(handler, event) for handler in handlers),
            return_exceptions=True,
        )
        failures = sum(1 for delivered in outcomes if delivered is not True)
        if failures:
            self.logger.warning(f"{failures} of {len(handlers)} handlers failed for {event.type}")
        return failures

    async def _deliver(self, handler: EventHandler, event: GameEvent) -> bool:
        try:
            await handler(event)
        except Exception as e:
            self.logger.error(
                f"Handler {getattr(handler, '__name__', handler)} failed for {event.type}: {e}", exc_info=True
            )
            return False
        return True

    def get_subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, ()))
