"""
SuggestionDebouncer tests: trailing-edge debounce and stale-result discard.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from wiki_wander.models import ArticleRole
from wiki_wander.suggestions import SuggestionDebouncer

DELAY = 0.01

START = ArticleRole.START
TARGET = ArticleRole.TARGET


async def settle():
    await asyncio.sleep(DELAY * 5)


class GatedSearch:
    """Search function whose results are held until released per query."""

    def __init__(self):
        self.calls = []
        self._gates = {}

    def _gate(self, text: str) -> asyncio.Event:
        return self._gates.setdefault(text, asyncio.Event())

    async def __call__(self, text: str):
        self.calls.append(text)
        await self._gate(text).wait()
        return [f"{text} (result)"]

    def release(self, text: str):
        self._gate(text).set()


@pytest.fixture
def search() -> AsyncMock:
    return AsyncMock(side_effect=lambda text: [text, f"{text} Hilton"])


@pytest.fixture
def debouncer(search) -> SuggestionDebouncer:
    return SuggestionDebouncer(search=search, delay=DELAY, min_query_length=2)


@pytest.mark.unit
class TestSuggestionDebouncer:

    @pytest.mark.asyncio
    async def test_rapid_typing_issues_single_query(self, debouncer, search):
        for text in ["Par", "Pari", "Paris"]:
            debouncer.on_input_change(START, text)
        await settle()

        search.assert_awaited_once_with("Paris")
        state = debouncer.state(START)
        assert state.text == "Paris"
        assert state.suggestions == ("Paris", "Paris Hilton")
        assert state.is_visible
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_typing_after_quiet_period_issues_new_query(self, debouncer, search):
        debouncer.on_input_change(START, "Par")
        await settle()
        debouncer.on_input_change(START, "Paris")
        await settle()

        assert [c.args[0] for c in search.await_args_list] == ["Par", "Paris"]
        assert debouncer.state(START).suggestions == ("Paris", "Paris Hilton")

    @pytest.mark.asyncio
    async def test_short_text_clears_panel_without_query(self, debouncer, search):
        debouncer.on_input_change(START, "Cat")
        await settle()
        assert debouncer.state(START).is_visible

        debouncer.on_input_change(START, " Ca ")

        # Cleared synchronously, before any quiet period
        state = debouncer.state(START)
        assert state.suggestions == ()
        assert not state.is_visible
        assert not state.is_loading
        await settle()
        search.assert_awaited_once_with("Cat")

    @pytest.mark.asyncio
    async def test_short_text_cancels_pending_query(self, debouncer, search):
        debouncer.on_input_change(START, "Pari")
        debouncer.on_input_change(START, "P")
        await settle()

        search.assert_not_awaited()
        assert debouncer.state(START).suggestions == ()

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self):
        search = GatedSearch()
        debouncer = SuggestionDebouncer(search=search, delay=DELAY, min_query_length=2)

        debouncer.on_input_change(START, "Pari")
        await settle()
        assert debouncer.state(START).is_loading
        debouncer.on_input_change(START, "Paris")
        await settle()
        assert search.calls == ["Pari", "Paris"]

        # Newer query resolves first, the older one afterwards
        search.release("Paris")
        await asyncio.sleep(0.001)
        search.release("Pari")
        await asyncio.sleep(0.001)

        state = debouncer.state(START)
        assert state.suggestions == ("Paris (result)",)
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_short_text_discards_in_flight_result(self):
        search = GatedSearch()
        debouncer = SuggestionDebouncer(search=search, delay=DELAY, min_query_length=2)

        debouncer.on_input_change(START, "Pari")
        await settle()
        debouncer.on_input_change(START, "")
        search.release("Pari")
        await asyncio.sleep(0.001)

        state = debouncer.state(START)
        assert state.suggestions == ()
        assert not state.is_visible
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_fields_are_independent(self, debouncer, search):
        debouncer.on_input_change(START, "Cat")
        debouncer.on_input_change(TARGET, "Dog")
        await settle()

        assert debouncer.state(START).suggestions == ("Cat", "Cat Hilton")
        assert debouncer.state(TARGET).suggestions == ("Dog", "Dog Hilton")

        debouncer.on_input_change(TARGET, "D")
        assert debouncer.state(START).is_visible
        assert not debouncer.state(TARGET).is_visible

    @pytest.mark.asyncio
    async def test_search_failure_leaves_panel_unchanged(self, search):
        search.side_effect = RuntimeError("network down")
        debouncer = SuggestionDebouncer(search=search, delay=DELAY, min_query_length=2)

        debouncer.on_input_change(START, "Paris")
        await settle()

        state = debouncer.state(START)
        assert state.suggestions == ()
        assert not state.is_loading
        assert not state.is_visible

    @pytest.mark.asyncio
    async def test_dismiss_and_show(self, debouncer):
        debouncer.on_input_change(START, "Paris")
        await settle()

        debouncer.dismiss_suggestions(START)
        assert not debouncer.state(START).is_visible
        assert debouncer.state(START).suggestions == ("Paris", "Paris Hilton")

        debouncer.show_suggestions(START)
        assert debouncer.state(START).is_visible

    @pytest.mark.asyncio
    async def test_set_text_does_not_search(self, debouncer, search):
        debouncer.on_input_change(START, "Pari")
        debouncer.set_text(START, "Paris")
        await settle()

        search.assert_not_awaited()
        state = debouncer.state(START)
        assert state.text == "Paris"
        assert not state.is_visible

    @pytest.mark.asyncio
    async def test_clear(self, debouncer, search):
        debouncer.on_input_change(START, "Cat")
        await settle()
        debouncer.on_input_change(TARGET, "Dog")
        debouncer.clear()
        await settle()

        search.assert_awaited_once_with("Cat")
        for role in ArticleRole:
            state = debouncer.state(role)
            assert state.text == ""
            assert state.suggestions == ()
            assert not state.is_visible
