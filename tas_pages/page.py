"""Parsed page documents and page-slug derivation.

A :class:`PageDocument` is the Python stand-in for the browser's live DOM: a
BeautifulSoup tree plus the request path it was served under. The dynamic
section loader and both appliers mutate the same instance, and the bootstrap
routine serializes it back to HTML once every step has finished.

Examples
--------
>>> derive_page_slug("/about-us.html")
'about-us'
>>> derive_page_slug("/")
'index'
>>> doc = PageDocument.from_html("<body data-page='Contact'><main></main></body>")
>>> doc.slug
'contact'
"""

from __future__ import annotations

import re
import typing as typ

from bs4 import BeautifulSoup, Tag

from ._constants import DEFAULT_PAGE_SLUG, SECTION_ID_ATTR
from .readiness import ReadySignal

_HTML_SUFFIX = re.compile(r"\.html?$", re.IGNORECASE)
_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_SPACES = re.compile(r"\s+")


def derive_page_slug(path: str, *, data_page: str | None = None) -> str:
    """Return the lowercase slug used to look up page-scoped content.

    Parameters
    ----------
    path : str
        Request path of the page, for example ``"/tutors/index.html"``.
    data_page : str, optional
        Value of the ``data-page`` attribute on ``<body>``; takes precedence
        over the path when non-empty.

    Returns
    -------
    str
        Slug derived from ``data_page`` or the last path segment without its
        ``.html`` suffix, falling back to ``"index"`` for the site root.
    """
    if data_page and data_page.strip():
        return data_page.strip().lower()
    trimmed = path.split("?", 1)[0].split("#", 1)[0].rstrip("/")
    if not trimmed:
        return DEFAULT_PAGE_SLUG
    segment = _HTML_SUFFIX.sub("", trimmed.rsplit("/", 1)[-1])
    return (segment or DEFAULT_PAGE_SLUG).lower()


def slugify(text: str) -> str:
    """Convert a heading into a URL-friendly identifier."""
    cleaned = _SLUG_STRIP.sub("", text.lower()).strip()
    return _SLUG_SPACES.sub("-", cleaned)


class PageDocument:
    """A parsed HTML page shared by the enhancement steps."""

    def __init__(self, soup: BeautifulSoup, *, path: str = "/") -> None:
        self.soup = soup
        self.path = path
        body = soup.body
        data_page = body.get("data-page") if body is not None else None
        self.slug = derive_page_slug(
            path, data_page=data_page if isinstance(data_page, str) else None
        )
        self.ready = ReadySignal(f"document:{self.slug}", resolved=True)

    @classmethod
    def from_html(cls, html: str, *, path: str = "/") -> PageDocument:
        """Parse ``html`` into a document that is immediately ready."""
        return cls(BeautifulSoup(html, "html.parser"), path=path)

    @property
    def body(self) -> Tag | None:
        """Return the ``<body>`` element, if the page has one."""
        return self.soup.body

    @property
    def container(self) -> Tag | None:
        """Return the ``<main>`` element that holds reorderable sections."""
        found = self.soup.find("main")
        return found if isinstance(found, Tag) else None

    def has_sections(self) -> bool:
        """Return ``True`` when any element carries a section id."""
        return self.soup.find(attrs={SECTION_ID_ATTR: True}) is not None

    def sections(self) -> list[Tag]:
        """Return top-level section elements in document order.

        Sections nested inside another section move with their parent and are
        therefore excluded. The search is scoped to :attr:`container` when the
        page has one.
        """
        root: Tag = self.container or self.soup
        return [
            element
            for element in root.find_all(attrs={SECTION_ID_ATTR: True})
            if element.find_parent(attrs={SECTION_ID_ATTR: True}) is None
        ]

    def select(self, selector: str) -> list[Tag]:
        """Return every element matching the CSS ``selector``."""
        return list(self.soup.select(selector))

    def fragment(self, html: str) -> list[typ.Any]:
        """Parse an HTML snippet into detached nodes ready for insertion."""
        parsed = BeautifulSoup(html, "html.parser")
        return [node.extract() for node in list(parsed.contents)]

    def new_tag(self, name: str, attrs: dict[str, str] | None = None) -> Tag:
        """Create a detached element owned by this document."""
        return self.soup.new_tag(name, attrs=attrs or {})

    def render(self) -> str:
        """Serialize the current tree back to HTML."""
        return str(self.soup)


__all__ = ["PageDocument", "derive_page_slug", "slugify"]
