"""
Wikipedia module for Wiki Wander.

This module contains the content fetcher used by games: random and named
article summaries, rendered article content and title search.
"""

from .live_service import LiveWikiService

__all__ = [
    'LiveWikiService',
]
