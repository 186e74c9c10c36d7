import inspect
import logging
import urllib.parse
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from wiki_wander.config import DEFAULT_NON_ARTICLE_NAMESPACES, WanderConfig
from wiki_wander.content.sanitizer import sanitize_fragment
from wiki_wander.utils.wiki_helpers import get_readable_page_title

logger = logging.getLogger(__name__)

LINK_ID_ATTRIBUTE = "data-wander-link"
NEW_CONTEXT_REL = "noopener noreferrer"


class LinkKind(str, Enum):
    """How a link inside an article relates to the game."""
    NAVIGABLE_INTERNAL = "navigable_internal"
    NON_NAVIGABLE_INTERNAL = "non_navigable_internal"
    EXTERNAL = "external"
    IN_PAGE_ANCHOR = "in_page_anchor"
    OTHER = "other"


class LinkAction(str, Enum):
    """What the presentation layer should do when a link is activated."""
    NAVIGATE = "navigate"                        # suppress default, navigate the game
    OPEN_NEW_CONTEXT = "open_new_context"        # suppress default, open `url` in a new context
    DEFAULT_NEW_CONTEXT = "default_new_context"  # default open, but only ever in a new context
    SCROLL = "scroll"                            # default same-page scroll


LINK_CSS_CLASSES = {
    LinkKind.NAVIGABLE_INTERNAL: "internal-wiki-link",
    LinkKind.NON_NAVIGABLE_INTERNAL: "non-article-wiki-link",
    LinkKind.EXTERNAL: "external-wiki-link",
    LinkKind.IN_PAGE_ANCHOR: "citation-wiki-link",
    LinkKind.OTHER: "other-wiki-link",
}

_KIND_ACTIONS = {
    LinkKind.NAVIGABLE_INTERNAL: LinkAction.NAVIGATE,
    LinkKind.NON_NAVIGABLE_INTERNAL: LinkAction.OPEN_NEW_CONTEXT,
    LinkKind.EXTERNAL: LinkAction.DEFAULT_NEW_CONTEXT,
    LinkKind.IN_PAGE_ANCHOR: LinkAction.SCROLL,
    LinkKind.OTHER: LinkAction.DEFAULT_NEW_CONTEXT,
}


class ClassifiedLink(BaseModel):
    """A link found in an article together with the behavior attached to it."""
    model_config = ConfigDict(frozen=True)

    link_id: str = Field(..., description="Identifier written to the anchor's data-wander-link attribute.")
    href: str = Field(..., description="The href as it appeared in the sanitized document.")
    kind: LinkKind
    action: LinkAction
    title: Optional[str] = Field(None, description="Article title to navigate to, for navigable links.")
    url: Optional[str] = Field(None, description="Fully-qualified URL for links opened in a new context.")

    @property
    def suppress_default(self) -> bool:
        return self.action in (LinkAction.NAVIGATE, LinkAction.OPEN_NEW_CONTEXT)

    @property
    def new_context(self) -> bool:
        return self.action in (LinkAction.OPEN_NEW_CONTEXT, LinkAction.DEFAULT_NEW_CONTEXT)


class ClassifiedDocument(BaseModel):
    """Sanitized article markup plus every classified link it contains."""
    model_config = ConfigDict(frozen=True)

    html: str
    links: Tuple[ClassifiedLink, ...] = ()

    def get_link(self, link_id: str) -> Optional[ClassifiedLink]:
        return next((link for link in self.links if link.link_id == link_id), None)

    def links_of_kind(self, kind: LinkKind) -> List[ClassifiedLink]:
        return [link for link in self.links if link.kind == kind]


class LinkClassifier:
    """
    Partitions the links of an article into navigable articles, non-article wiki
    pages, external links and in-page anchors.

    Classification of one link never depends on any other link, and running the
    classifier over its own output yields the same classification.
    """

    def __init__(
        self,
        site_url: str = "https://en.wikipedia.org",
        article_path_prefix: str = "/wiki/",
        non_article_namespaces: Iterable[str] = DEFAULT_NON_ARTICLE_NAMESPACES,
    ):
        self.site_url = site_url.rstrip("/")
        self.site_host = urllib.parse.urlsplit(self.site_url).netloc.lower()
        self.article_path_prefix = article_path_prefix
        self.non_article_namespaces = frozenset(ns.casefold() for ns in non_article_namespaces)

    @classmethod
    def from_config(cls, config: WanderConfig) -> "LinkClassifier":
        return cls(
            site_url=config.site_url,
            article_path_prefix=config.article_path_prefix,
            non_article_namespaces=config.non_article_namespaces,
        )

    def is_non_article_title(self, title: str) -> bool:
        """Whether a decoded title lives in a denylisted namespace (File:, Category:, User talk:...)."""
        if ":" not in title:
            return False
        namespace = title.split(":", 1)[0].strip().casefold()
        return namespace in self.non_article_namespaces or namespace.endswith(" talk")

    def classify_href(self, href: str) -> Tuple[LinkKind, Optional[str], Optional[str]]:
        """Classify a single href. Returns (kind, title, url)."""
        href = href.strip()
        if href.startswith("#"):
            return LinkKind.IN_PAGE_ANCHOR, None, None

        try:
            parts = urllib.parse.urlsplit(href)
        except ValueError:
            logger.debug(f"Unparseable link href: {href!r}")
            return LinkKind.OTHER, None, None

        scheme = parts.scheme.lower()
        if scheme or parts.netloc:
            same_site = scheme in ("", "http", "https") and parts.netloc.lower() == self.site_host
            if not same_site:
                if scheme in ("http", "https"):
                    return LinkKind.EXTERNAL, None, href
                if not scheme:
                    # Protocol-relative (//host/path)
                    return LinkKind.EXTERNAL, None, f"https:{href}"
                return LinkKind.OTHER, None, href

        if not parts.path.startswith(self.article_path_prefix):
            return LinkKind.OTHER, None, urllib.parse.urljoin(self.site_url + "/", href)

        title = get_readable_page_title(parts.path[len(self.article_path_prefix):])
        if not title or self.is_non_article_title(title):
            url = urllib.parse.urlunsplit(("https", self.site_host, parts.path, parts.query, parts.fragment))
            return LinkKind.NON_NAVIGABLE_INTERNAL, None, url
        return LinkKind.NAVIGABLE_INTERNAL, title, None

    def classify(self, markup: Optional[str]) -> ClassifiedDocument:
        """Sanitize `markup`, rewrite its anchors and return the classified links."""
        soup = sanitize_fragment(markup or "")
        links: List[ClassifiedLink] = []

        for index, anchor in enumerate(soup.find_all("a")):
            link_id = f"link-{index}"
            anchor[LINK_ID_ATTRIBUTE] = link_id
            href = anchor.get("href")
            if href is None:
                continue

            kind, title, url = self.classify_href(href)
            link = ClassifiedLink(
                link_id=link_id,
                href=href,
                kind=kind,
                action=_KIND_ACTIONS[kind],
                title=title,
                url=url,
            )
            self._rewrite_anchor(anchor, link)
            links.append(link)

        logger.debug(
            f"Classified {len(links)} links "
            f"({sum(1 for link in links if link.kind == LinkKind.NAVIGABLE_INTERNAL)} navigable)"
        )
        return ClassifiedDocument(html=str(soup), links=tuple(links))

    def _rewrite_anchor(self, anchor, link: ClassifiedLink) -> None:
        css_class = LINK_CSS_CLASSES[link.kind]
        classes = anchor.get("class") or []
        if css_class not in classes:
            anchor["class"] = classes + [css_class]

        if link.new_context:
            if link.url:
                anchor["href"] = link.url
            anchor["target"] = "_blank"
            anchor["rel"] = NEW_CONTEXT_REL


Callback = Callable[[str], Union[Any, Awaitable[Any]]]


async def _call(callback: Callback, argument: str) -> Any:
    result = callback(argument)
    if inspect.isawaitable(result):
        result = await result
    return result


async def activate_link(
    link: ClassifiedLink,
    on_navigate: Callback,
    on_open_url: Optional[Callback] = None,
) -> Any:
    """
    Perform the behavior attached to a classified link.

    Navigable links invoke `on_navigate` with the article title; links that must
    open in a new browsing context invoke `on_open_url` with their URL. In-page
    anchors do nothing.
    """
    if link.action == LinkAction.NAVIGATE:
        return await _call(on_navigate, link.title)
    if link.new_context and link.url and on_open_url is not None:
        return await _call(on_open_url, link.url)
    return None
