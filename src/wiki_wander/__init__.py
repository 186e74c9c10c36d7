"""
Wiki Wander - Core Library

A standalone Python package containing the session logic of a Wikipedia
navigation game: article selection, link classification, timing, hints and
search suggestions. Presentation layers drive a `Game` and render its state.
"""

from .config import WanderConfig
from .events import EventBus, GameEvent
from .game import Game
from .models import Article, ArticleRole, ArticleSummary, ErrorType, GameState, GameStatus
from .timer import GameTimer, format_time

__all__ = [
    'WanderConfig',
    'EventBus',
    'GameEvent',
    'Game',
    'Article',
    'ArticleRole',
    'ArticleSummary',
    'ErrorType',
    'GameState',
    'GameStatus',
    'GameTimer',
    'format_time',
]
