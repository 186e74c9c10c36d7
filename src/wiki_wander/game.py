import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from wiki_wander import transitions
from wiki_wander.config import WanderConfig
from wiki_wander.content import ClassifiedDocument, ClassifiedLink, LinkClassifier, activate_link
from wiki_wander.events import (
    ARTICLE_NOT_FOUND,
    ARTICLE_SELECTED,
    DUPLICATE_ARTICLES,
    GAME_STARTED,
    GAME_SURRENDERED,
    GAME_WON,
    HINT_FAILED,
    HINT_UNLOCKED,
    MOVE_COMPLETED,
    NAVIGATION_FAILED,
    OPEN_URL,
    RANDOM_ARTICLE_FAILED,
    SETUP_INCOMPLETE,
    START_FAILED,
    EventBus,
)
from wiki_wander.exceptions import (
    DuplicateArticlesError,
    FetchFailureError,
    HintFailureError,
    NotFoundError,
    SetupIncompleteError,
)
from wiki_wander.hints import HintModel, HintRequest
from wiki_wander.models import Article, ArticleRole, ErrorType, GameState, GameStatus
from wiki_wander.suggestions import SuggestionDebouncer, SuggestionState
from wiki_wander.timer import GameTimer, format_time
from wiki_wander.wikipedia import LiveWikiService


logger = logging.getLogger(__name__)


class Game:
    """
    Session state machine for a single player.

    Lifecycle: SETUP -> ACTIVE -> WON | SURRENDERED, and back to SETUP only through
    `restart()`. Every operation replaces `state` with a new snapshot in a single
    assignment. The `is_loading` and `is_loading_hint` flags gate navigation and
    hint requests so that at most one of each is in flight.
    """

    def __init__(
        self,
        wiki_service: LiveWikiService,
        hint_model: Optional[HintModel] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[WanderConfig] = None,
        timer: Optional[GameTimer] = None,
        classifier: Optional[LinkClassifier] = None,
    ):
        self.config = config or WanderConfig()
        self.wiki_service = wiki_service
        self.hint_model = hint_model
        self.event_bus = event_bus
        self.timer = timer or GameTimer(interval=self.config.timer_interval)
        self.timer.add_listener(self._on_tick)
        self.classifier = classifier or LinkClassifier.from_config(self.config)
        self.suggestions = SuggestionDebouncer(
            search=wiki_service.search_articles,
            delay=self.config.debounce_delay,
            min_query_length=self.config.min_query_length,
        )

        self.state: GameState = transitions.initial_state()
        self.id = self._generate_game_id()

        # Bumped by restart(); results of calls that began in an older epoch are dropped.
        self._epoch = 0
        self._selection_requests = {role: 0 for role in ArticleRole}
        self._pending_selections = 0
        # True while start_game is fetching the start article; selections are locked out.
        self._starting = False

    def _generate_game_id(self) -> str:
        date_str = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"wander_{date_str}_{uuid.uuid4().hex[:4]}"

    def _set_state(self, state: GameState) -> None:
        if state.status != self.state.status:
            logger.info(f"Game {self.id}: {self.state.status.value} -> {state.status.value}")
        self.state = state

    async def _notify(self, event_type: str, title: str, description: str, destructive: bool = False, **data: Any):
        if self.event_bus:
            await self.event_bus.notify(event_type, self.id, title, description, destructive=destructive, **data)

    def _on_tick(self, elapsed: int) -> None:
        if self.state.is_active:
            self.state = self.state.evolve(elapsed_time=elapsed)

    # --- Setup ---

    def on_input_change(self, role: ArticleRole, text: str) -> None:
        self.suggestions.on_input_change(role, text)

    def dismiss_suggestions(self, role: ArticleRole) -> None:
        self.suggestions.dismiss_suggestions(role)

    def suggestion_state(self, role: ArticleRole) -> SuggestionState:
        return self.suggestions.state(role)

    async def choose_suggestion(self, role: ArticleRole, title: str) -> GameState:
        """Select a title picked from the role's suggestion panel."""
        self.suggestions.set_text(role, title)
        return await self.select_article(role, title)

    async def _resolve_article(self, title: Optional[str]) -> Article:
        if title and title.strip():
            summary = await self.wiki_service.fetch_summary(title.strip())
            if summary is None:
                raise NotFoundError(title.strip())
        else:
            summary = await self.wiki_service.fetch_random_summary()
            if summary is None:
                raise FetchFailureError("random article", "Could not fetch random article.")
        return Article.from_summary(summary, max_chars=self.config.summary_max_chars)

    async def select_article(self, role: ArticleRole, title: Optional[str] = None) -> GameState:
        """
        Resolve `title` (or a random article when no title is given) and make it the
        start or target article. On failure the previous selection is kept and a
        role-scoped error is recorded.
        """
        if self.state.status != GameStatus.SETUP:
            logger.warning(f"select_article called while {self.state.status.value}; ignoring.")
            return self.state
        if self._starting:
            logger.debug("select_article ignored: the start article is loading")
            return self.state

        epoch = self._epoch
        self._selection_requests[role] += 1
        request_id = self._selection_requests[role]
        self._pending_selections += 1
        self._set_state(transitions.clear_error(self.state).evolve(is_loading=True))
        self.suggestions.dismiss_suggestions(ArticleRole.START)
        self.suggestions.dismiss_suggestions(ArticleRole.TARGET)

        article: Optional[Article] = None
        error: Optional[Exception] = None
        try:
            article = await self._resolve_article(title)
        except (NotFoundError, FetchFailureError) as e:
            error = e

        if epoch != self._epoch:
            logger.info(f"Discarding {role.value} selection that resolved after a restart")
            return self.state

        self._pending_selections -= 1
        is_loading = self._pending_selections > 0

        if self.state.status != GameStatus.SETUP:
            logger.info(f"Discarding {role.value} selection that resolved after the game started")
            return self.state

        if request_id != self._selection_requests[role]:
            logger.info(f"Discarding superseded {role.value} selection")
            self._set_state(self.state.evolve(is_loading=is_loading))
            return self.state

        if isinstance(error, NotFoundError):
            logger.warning(f"{role.value.capitalize()} article '{error.title}' not found")
            self.suggestions.set_text(role, error.title)
            self._set_state(
                transitions.record_error(self.state, ErrorType.NOT_FOUND, error, role).evolve(is_loading=is_loading)
            )
            await self._notify(
                ARTICLE_NOT_FOUND, "Error", f"Could not find article: {error.title}",
                destructive=True, role=role.value,
            )
            return self.state

        if error is not None:
            self._set_state(
                transitions.record_error(self.state, ErrorType.FETCH_FAILURE, error, role).evolve(is_loading=is_loading)
            )
            await self._notify(
                RANDOM_ARTICLE_FAILED, "Error", "Could not fetch random article.",
                destructive=True, role=role.value,
            )
            return self.state

        self.suggestions.set_text(role, article.display_title)
        self._set_state(transitions.select_article(self.state, role, article).evolve(is_loading=is_loading))
        logger.info(f"{role.value.capitalize()} article set to '{article.title}'")
        await self._notify(
            ARTICLE_SELECTED, "Article selected", article.display_title,
            role=role.value, article_title=article.title,
        )
        return self.state

    async def start_game(self) -> GameState:
        """Validate the setup, load the start article and start the clock."""
        if self.state.status != GameStatus.SETUP:
            logger.warning(f"start_game called while {self.state.status.value}; restart first.")
            return self.state
        if self.state.is_loading:
            logger.debug("start_game ignored: a request is already in flight")
            return self.state

        try:
            transitions.validate_setup(self.state)
        except SetupIncompleteError as e:
            self._set_state(transitions.record_error(self.state, ErrorType.SETUP_INCOMPLETE, e))
            await self._notify(SETUP_INCOMPLETE, "Setup Incomplete", str(e), destructive=True)
            return self.state
        except DuplicateArticlesError as e:
            self._set_state(transitions.record_error(self.state, ErrorType.DUPLICATE_ARTICLES, e))
            await self._notify(DUPLICATE_ARTICLES, "Same Articles", str(e), destructive=True)
            return self.state

        epoch = self._epoch
        self._starting = True
        self._set_state(transitions.clear_error(self.state).evolve(is_loading=True))
        try:
            content = await self.wiki_service.fetch_content(self.state.start_article.title)
        finally:
            if epoch == self._epoch:
                self._starting = False
        if epoch != self._epoch:
            logger.info("Discarding start article that loaded after a restart")
            return self.state

        if content.is_error:
            error = FetchFailureError(content.display_title, "Please try again or choose a different start article.")
            self._set_state(
                transitions.record_error(self.state, ErrorType.FETCH_FAILURE, error).evolve(is_loading=False)
            )
            await self._notify(START_FAILED, "Error", str(error), destructive=True)
            return self.state

        self.timer.reset()
        self._set_state(transitions.begin_game(self.state, content))
        self.timer.start()
        logger.info(
            f"Game {self.id} started. Start: '{content.title}', Target: '{self.state.target_article.title}'"
        )
        await self._notify(
            GAME_STARTED, "Game started",
            f"Navigate from {content.display_title} to {self.state.target_article.display_title}.",
        )
        return self.state

    # --- Play ---

    async def navigate(self, title: str) -> GameState:
        """Follow a link to `title`. Ignored unless active with no fetch in flight."""
        if not self.state.is_active or self.state.is_loading:
            logger.debug(f"navigate('{title}') ignored: active={self.state.is_active}, loading={self.state.is_loading}")
            return self.state

        epoch = self._epoch
        from_title = self.state.current_article.title
        self._set_state(transitions.clear_error(self.state).evolve(is_loading=True, hint=None))
        article = await self.wiki_service.fetch_content(title)

        if epoch != self._epoch:
            logger.info(f"Discarding navigation to '{title}' that completed after a restart")
            return self.state
        if not self.state.is_active:
            self._set_state(self.state.evolve(is_loading=False))
            return self.state

        if article.is_error:
            error = FetchFailureError(article.display_title, "You might be stuck.")
            logger.warning(f"Game {self.id}: navigation to '{title}' failed")
            self._set_state(
                transitions.record_error(self.state, ErrorType.FETCH_FAILURE, error).evolve(is_loading=False)
            )
            await self._notify(
                NAVIGATION_FAILED, "Navigation Error", f"Could not load article: {article.display_title}",
                destructive=True,
            )
            return self.state

        won = article.same_article(self.state.target_article)
        if won:
            self.timer.stop()
        self._set_state(
            transitions.advance(self.state, article).evolve(is_loading=False, elapsed_time=self.timer.elapsed)
        )
        logger.info(f"Game {self.id} Click {self.state.clicks}: '{from_title}' -> '{article.title}'")

        await self._notify(
            MOVE_COMPLETED, "Moved", article.display_title,
            from_title=from_title, to_title=article.title, clicks=self.state.clicks,
        )
        if won:
            target = self.state.target_article
            logger.info(f"Game {self.id}: Won! Reached '{target.title}' in {self.state.clicks} clicks.")
            await self._notify(
                GAME_WON, "Congratulations!",
                f"You reached {target.display_title} in {self.state.clicks} clicks "
                f"and {format_time(self.state.elapsed_time)}.",
                clicks=self.state.clicks, elapsed_time=self.state.elapsed_time,
            )
        return self.state

    async def request_hint(self) -> GameState:
        """Ask the hint model how to get from the current article to the target."""
        current, target = self.state.current_article, self.state.target_article
        if current is None or target is None or self.state.is_loading_hint:
            return self.state

        epoch = self._epoch
        clicks = self.state.clicks
        self._set_state(transitions.clear_error(self.state).evolve(is_loading_hint=True))
        try:
            if self.hint_model is None:
                raise HintFailureError("No hint model is configured.")
            response = await self.hint_model.generate_hint(
                HintRequest(current_title=current.display_title, target_title=target.display_title)
            )
        except Exception as e:
            logger.error(f"Error getting hint: {e}", exc_info=True)
            if epoch != self._epoch:
                return self.state
            self._set_state(
                transitions.record_error(
                    self.state, ErrorType.HINT_FAILURE, HintFailureError("Failed to get hint.")
                ).evolve(is_loading_hint=False)
            )
            await self._notify(HINT_FAILED, "Hint Error", "Could not generate a hint at this time.", destructive=True)
            return self.state

        if epoch != self._epoch:
            return self.state
        if self.state.current_article != current or self.state.clicks != clicks:
            logger.info(f"Discarding hint for '{current.title}': the player has moved on")
            self._set_state(self.state.evolve(is_loading_hint=False))
            return self.state
        self._set_state(self.state.evolve(hint=response.hint, is_loading_hint=False))
        await self._notify(HINT_UNLOCKED, "Hint Unlocked!", response.hint)
        return self.state

    def render(self) -> Optional[ClassifiedDocument]:
        """Sanitized markup and classified links of the current article."""
        if self.state.current_article is None:
            return None
        return self.classifier.classify(self.state.current_article.html_content)

    async def follow_link(self, link: ClassifiedLink) -> GameState:
        """Perform the behavior attached to a link from `render()`."""
        await activate_link(link, on_navigate=self.navigate, on_open_url=self._open_url)
        return self.state

    async def _open_url(self, url: str) -> None:
        await self._notify(OPEN_URL, "Opening link", url, url=url, target="_blank", rel="noopener noreferrer")

    # --- Ending ---

    async def surrender(self) -> GameState:
        if not self.state.is_active:
            logger.warning(f"surrender called while {self.state.status.value}; ignoring.")
            return self.state

        self.timer.stop()
        self._set_state(transitions.surrender(self.state).evolve(elapsed_time=self.timer.elapsed))
        target = self.state.target_article
        await self._notify(
            GAME_SURRENDERED, "Game Over",
            f"You surrendered. The target was {target.display_title}.",
            destructive=True, target_title=target.title,
        )
        return self.state

    def restart(self) -> GameState:
        """Return to a fresh setup from any state."""
        self.timer.reset()
        self._epoch += 1
        self._pending_selections = 0
        self._starting = False
        self.suggestions.clear()
        self._set_state(transitions.initial_state())
        self.id = self._generate_game_id()
        logger.info(f"Game restarted as {self.id}")
        return self.state
