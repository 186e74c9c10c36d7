"""
Helper functions for Wikipedia page title normalization and validation.
"""

import re
import urllib.parse

_WHITESPACE_RE = re.compile(r"\s+")


def get_normalized_title(page_title: str) -> str:
    """Returns the identity key used to compare two page titles.

    Underscores and runs of whitespace collapse to a single space and case is
    folded, so titles that differ only in spacing or case compare equal.

    Args:
      page_title: The page title to normalize.

    Returns:
      The normalized page title.

    Examples:
      "Notre_Dame_Fighting_Irish"   =>   "notre dame fighting irish"
      "  Cat "                      =>   "cat"
      "New  York"                   =>   "new york"

    Raises:
      ValueError: If the provided page title is invalid.
    """
    validate_page_title(page_title)
    return _WHITESPACE_RE.sub(" ", page_title.replace("_", " ")).strip().casefold()


def is_same_article(first_title: str, second_title: str) -> bool:
    """Returns whether two page titles name the same article."""
    return get_normalized_title(first_title) == get_normalized_title(second_title)


def get_readable_page_title(url_path_title: str) -> str:
    """Returns the human-readable page title from the title part of an article URL.

    Args:
      url_path_title: The percent-encoded title as it appears after the article path.

    Returns:
      The human-readable page title.

    Examples:
      "Notre_Dame_Fighting_Irish"   => "Notre Dame Fighting Irish"
      "Caf%C3%A9"                   => "Café"
      "C%2B%2B"                     => "C++"
    """
    return urllib.parse.unquote(url_path_title).replace("_", " ").strip()


def get_url_page_title(page_title: str) -> str:
    """Returns the page title encoded for use in an article URL path.

    Examples:
      "Notre Dame Fighting Irish"   => "Notre_Dame_Fighting_Irish"
      "AC/DC"                       => "AC%2FDC"
    """
    return urllib.parse.quote(page_title.strip().replace(" ", "_"), safe="")


def is_str(val) -> bool:
    """Returns whether or not the provided value is a string type."""
    return isinstance(val, str)


def validate_page_title(page_title: str):
    """Validates the provided value is a valid page title.

    Args:
      page_title: The page title to validate.

    Returns:
      None

    Raises:
      ValueError: If the provided page title is invalid.
    """
    if not is_str(page_title) or not page_title.strip():
        raise ValueError(
            f'Invalid page title "{page_title}" provided. Page title must be a non-empty string.'
        )
