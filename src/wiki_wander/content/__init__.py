"""
Content module for Wiki Wander.

Sanitizes untrusted article markup and classifies the links it contains.
"""

from .sanitizer import sanitize_fragment, sanitize_html, strip_tags, is_safe_url
from .link_classifier import (
    ClassifiedDocument,
    ClassifiedLink,
    LinkAction,
    LinkClassifier,
    LinkKind,
    activate_link,
)

__all__ = [
    'sanitize_fragment',
    'sanitize_html',
    'strip_tags',
    'is_safe_url',
    'ClassifiedDocument',
    'ClassifiedLink',
    'LinkAction',
    'LinkClassifier',
    'LinkKind',
    'activate_link',
]
