import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from wiki_wander.models import ArticleRole

logger = logging.getLogger(__name__)

SearchFunction = Callable[[str], Awaitable[List[str]]]


class SuggestionState(BaseModel):
    """Read-only view of one input field's suggestion panel."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    suggestions: Tuple[str, ...] = ()
    is_loading: bool = False
    is_visible: bool = False


class _FieldState:
    def __init__(self):
        self.text = ""
        self.suggestions: List[str] = []
        self.is_loading = False
        self.is_visible = False
        # Bumped whenever a query is issued or the field is reset; results
        # carrying an older generation are discarded on arrival.
        self.generation = 0
        self.pending: Optional[asyncio.Task] = None


class SuggestionDebouncer:
    """
    Trailing-edge debounced search suggestions for the start and target inputs.

    Each keystroke restarts the field's quiet period; a query is issued only once
    the period elapses without further input. Only the most recently issued query
    for a field may update that field's suggestions.
    """

    def __init__(
        self,
        search: SearchFunction,
        delay: float = 0.3,
        min_query_length: int = 2,
    ):
        self._search = search
        self.delay = delay
        self.min_query_length = min_query_length
        self._fields: Dict[ArticleRole, _FieldState] = {role: _FieldState() for role in ArticleRole}
        self._tasks: Set[asyncio.Task] = set()

    def state(self, field: ArticleRole) -> SuggestionState:
        fs = self._fields[field]
        return SuggestionState(
            text=fs.text,
            suggestions=tuple(fs.suggestions),
            is_loading=fs.is_loading,
            is_visible=fs.is_visible,
        )

    def on_input_change(self, field: ArticleRole, text: str) -> None:
        """Record a keystroke and (re)start the field's quiet period."""
        fs = self._fields[field]
        fs.text = text
        self._cancel_pending(fs)

        if len(text.strip()) <= self.min_query_length:
            self._reset_panel(fs)
            return

        task = asyncio.get_running_loop().create_task(self._debounced_query(field, text))
        fs.pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def set_text(self, field: ArticleRole, text: str) -> None:
        """Replace the field's text without searching (e.g. after a selection)."""
        fs = self._fields[field]
        fs.text = text
        self._cancel_pending(fs)
        self._reset_panel(fs)

    def dismiss_suggestions(self, field: ArticleRole) -> None:
        """Hide the field's panel; called by the presentation layer on outside interaction."""
        self._fields[field].is_visible = False

    def show_suggestions(self, field: ArticleRole) -> None:
        """Re-open the panel when the field regains focus and holds a searchable text."""
        fs = self._fields[field]
        if len(fs.text.strip()) > self.min_query_length:
            fs.is_visible = True

    def clear(self) -> None:
        """Drop all text, suggestions and pending or in-flight queries."""
        for fs in self._fields.values():
            fs.text = ""
            self._cancel_pending(fs)
            self._reset_panel(fs)

    def _cancel_pending(self, fs: _FieldState) -> None:
        if fs.pending is not None:
            fs.pending.cancel()
            fs.pending = None

    def _reset_panel(self, fs: _FieldState) -> None:
        fs.generation += 1
        fs.suggestions = []
        fs.is_loading = False
        fs.is_visible = False

    async def _debounced_query(self, field: ArticleRole, text: str) -> None:
        fs = self._fields[field]
        await asyncio.sleep(self.delay)

        # The quiet period elapsed: from here on the query can be superseded but not cancelled.
        fs.pending = None
        fs.generation += 1
        generation = fs.generation
        fs.is_loading = True
        logger.debug(f"Searching {field.value} suggestions for '{text}'")

        try:
            results = await self._search(text)
        except Exception as e:
            logger.error(f"Suggestion search for '{text}' failed: {e}")
            results = None

        if generation != fs.generation:
            logger.debug(f"Discarding stale {field.value} suggestions for '{text}'")
            return

        fs.is_loading = False
        if results is None:
            return
        fs.suggestions = list(results)
        fs.is_visible = True
