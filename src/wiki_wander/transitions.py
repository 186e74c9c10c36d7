"""
Pure GameState transitions.

Each function takes a snapshot and returns a new one; none of them perform I/O.
`Game` sequences them around the asynchronous fetches.
"""

from typing import Optional

from wiki_wander.exceptions import DuplicateArticlesError, SetupIncompleteError, WanderError
from wiki_wander.models import Article, ArticleRole, ErrorType, GameState, GameStatus


def initial_state() -> GameState:
    return GameState()


def clear_error(state: GameState) -> GameState:
    return state.evolve(error_message=None, error_type=None, error_role=None)


def record_error(
    state: GameState,
    error_type: ErrorType,
    error: WanderError,
    role: Optional[ArticleRole] = None,
) -> GameState:
    return state.evolve(error_message=str(error), error_type=error_type, error_role=role)


def select_article(state: GameState, role: ArticleRole, article: Article) -> GameState:
    """Set the start or target article during setup."""
    if state.status != GameStatus.SETUP:
        raise ValueError(f"Articles can only be selected during setup, not while {state.status.value}.")
    field = "start_article" if role == ArticleRole.START else "target_article"
    return state.evolve(**{field: article}, error_message=None, error_type=None, error_role=None)


def validate_setup(state: GameState) -> None:
    """
    Raises:
        SetupIncompleteError: If either article is missing.
        DuplicateArticlesError: If both roles name the same article.
    """
    if state.start_article is None or state.target_article is None:
        raise SetupIncompleteError()
    if state.start_article.same_article(state.target_article):
        raise DuplicateArticlesError(state.start_article.title)


def begin_game(state: GameState, start_content: Article) -> GameState:
    """Enter the active state on the fetched start article."""
    validate_setup(state)
    return state.evolve(
        status=GameStatus.ACTIVE,
        current_article=start_content,
        history=(start_content,),
        clicks=0,
        elapsed_time=0,
        is_loading=False,
        hint=None,
        error_message=None,
        error_type=None,
        error_role=None,
    )


def advance(state: GameState, article: Article) -> GameState:
    """Append a successfully fetched article; wins if it is the target."""
    if state.status != GameStatus.ACTIVE:
        raise ValueError(f"Cannot navigate while {state.status.value}.")
    won = article.same_article(state.target_article)
    return state.evolve(
        current_article=article,
        history=state.history + (article,),
        clicks=state.clicks + 1,
        status=GameStatus.WON if won else GameStatus.ACTIVE,
    )


def surrender(state: GameState) -> GameState:
    if state.status != GameStatus.ACTIVE:
        raise ValueError(f"Cannot surrender while {state.status.value}.")
    return state.evolve(status=GameStatus.SURRENDERED)
