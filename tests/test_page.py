"""Tests for page parsing and slug derivation."""

from __future__ import annotations

import pytest

from tas_pages.page import PageDocument, derive_page_slug, slugify


@pytest.mark.parametrize(
    ("path", "data_page", "expected"),
    [
        ("/", None, "index"),
        ("", None, "index"),
        ("/index.html", None, "index"),
        ("/about-us.html", None, "about-us"),
        ("/Tutors/", None, "tutors"),
        ("/parents/zone.htm?ref=nav#faq", None, "zone"),
        ("/about-us.html", "Partnerships", "partnerships"),
        ("/about-us.html", "   ", "about-us"),
    ],
)
def test_derive_page_slug(path: str, data_page: str | None, expected: str) -> None:
    """Slugs come from data-page when set, else the last path segment."""
    slug = derive_page_slug(path, data_page=data_page)
    assert slug == expected, f"expected {expected!r} for {path!r}, got {slug!r}"


@pytest.mark.parametrize(
    ("heading", "expected"),
    [
        ("Meet the Team", "meet-the-team"),
        ("  Tutors & Parents!  ", "tutors-parents"),
        ("", ""),
    ],
)
def test_slugify(heading: str, expected: str) -> None:
    """Headings become lowercase hyphenated identifiers."""
    assert slugify(heading) == expected, f"unexpected slug for {heading!r}"


def test_document_slug_prefers_body_data_page() -> None:
    """The body attribute overrides the request path."""
    document = PageDocument.from_html(
        '<html><body data-page="Contact"><main></main></body></html>',
        path="/somewhere-else.html",
    )
    assert document.slug == "contact", f"unexpected slug {document.slug!r}"
    assert document.ready.is_resolved, "expected a parsed document to be ready"


def test_sections_exclude_nested_and_outside_main() -> None:
    """Only top-level sections inside <main> are candidates for ordering."""
    document = PageDocument.from_html(
        '<body><header data-ve-section-id="nav"></header><main>'
        '<section data-ve-section-id="a"><div data-ve-section-id="inner"></div></section>'
        '<section data-ve-section-id="b"></section></main></body>'
    )
    ids = [element["data-ve-section-id"] for element in document.sections()]
    assert ids == ["a", "b"], f"unexpected section ids {ids!r}"
    assert document.has_sections(), "expected sections to be detected"


def test_sections_fall_back_to_whole_page_without_main() -> None:
    """Pages without <main> still expose their tagged sections."""
    document = PageDocument.from_html(
        '<body><div data-ve-section-id="a"></div><div data-ve-section-id="b"></div></body>'
    )
    ids = [element["data-ve-section-id"] for element in document.sections()]
    assert ids == ["a", "b"], f"unexpected section ids {ids!r}"
    assert document.container is None, "expected no <main> container"


def test_fragment_nodes_are_detached() -> None:
    """Fragment nodes can be inserted into the document tree directly."""
    document = PageDocument.from_html("<main></main>")
    main = document.container
    assert main is not None, "expected a <main> element"
    for node in document.fragment("<p>one</p>two"):
        main.append(node)
    assert document.render() == "<main><p>one</p>two</main>", (
        f"unexpected markup {document.render()!r}"
    )
