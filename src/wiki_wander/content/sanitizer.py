"""
Allow-list sanitizer for third-party article markup.

Article bodies come from the Wikipedia parse API and are treated as untrusted:
executable and embedding elements are removed together with their content,
unknown elements are unwrapped, and only a fixed set of attributes survives.
"""

import re
import urllib.parse

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

PARSER = "html.parser"

ALLOWED_TAGS = frozenset({
    "a", "abbr", "b", "bdi", "bdo", "blockquote", "br", "caption", "cite", "code",
    "col", "colgroup", "dd", "del", "dfn", "div", "dl", "dt", "em", "figcaption",
    "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "ins", "kbd",
    "li", "mark", "ol", "p", "pre", "q", "rp", "rt", "ruby", "s", "samp", "section",
    "small", "span", "strong", "sub", "sup", "table", "tbody", "td", "tfoot", "th",
    "thead", "time", "tr", "u", "ul", "var", "wbr",
})

# Removed with everything inside them
DROPPED_TAGS = [
    "script", "style", "iframe", "frame", "frameset", "object", "embed", "applet",
    "noscript", "template", "link", "meta", "base", "form", "input", "button",
    "textarea", "select", "option", "svg", "math", "audio", "video", "source",
    "track", "canvas", "dialog", "portal",
]

GLOBAL_ATTRIBUTES = frozenset({"class", "id", "title", "lang", "dir", "role"})

TAG_ATTRIBUTES = {
    "a": frozenset({"href"}),
    "img": frozenset({"src", "alt", "width", "height"}),
    "td": frozenset({"colspan", "rowspan", "headers"}),
    "th": frozenset({"colspan", "rowspan", "headers", "scope"}),
    "col": frozenset({"span"}),
    "colgroup": frozenset({"span"}),
    "ol": frozenset({"start", "reversed", "type"}),
    "li": frozenset({"value"}),
    "time": frozenset({"datetime"}),
    "q": frozenset({"cite"}),
    "blockquote": frozenset({"cite"}),
}

URL_ATTRIBUTES = frozenset({"href", "src", "cite"})

SAFE_URL_SCHEMES = frozenset({"", "http", "https", "mailto"})

# Browsers ignore ASCII whitespace and control characters inside a scheme ("java\tscript:")
_IGNORED_URL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")


def is_safe_url(value: str) -> bool:
    """Whether a URL attribute value can be kept (relative, fragment, http(s) or mailto)."""
    compact = _IGNORED_URL_CHARS_RE.sub("", value or "")
    try:
        scheme = urllib.parse.urlsplit(compact).scheme
    except ValueError:
        return False
    return scheme.lower() in SAFE_URL_SCHEMES


def _clean_attributes(tag) -> None:
    allowed = GLOBAL_ATTRIBUTES | TAG_ATTRIBUTES.get(tag.name, frozenset())
    for name in list(tag.attrs):
        if name not in allowed:
            del tag[name]
        elif name in URL_ATTRIBUTES and not is_safe_url(tag[name]):
            del tag[name]


def sanitize_fragment(markup: str) -> BeautifulSoup:
    """Parse `markup` and return a soup containing only allow-listed content."""
    soup = BeautifulSoup(markup or "", PARSER)

    for node in soup.find_all(
        string=lambda text: isinstance(text, (Comment, CData, Declaration, Doctype, ProcessingInstruction))
    ):
        node.extract()

    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        _clean_attributes(tag)

    return soup


def sanitize_html(markup: str) -> str:
    """Return the allow-listed rendition of `markup` as a string."""
    return str(sanitize_fragment(markup))


def strip_tags(markup: str) -> str:
    """Return the text content of `markup` without any tags."""
    if not markup:
        return ""
    return BeautifulSoup(markup, PARSER).get_text().strip()
