"""Shared fixtures for tas_pages tests.

The stub client below stands in for the Content API so appliers and the
loader can be exercised without network access. It subclasses the real client
and records every lookup.
"""

from __future__ import annotations

import time
import typing as typ

import pytest

from tas_pages.content_api import ContentApiClient, ContentApiError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class StubContentClient(ContentApiClient):
    """Content API double returning canned payloads or raising errors."""

    def __init__(
        self,
        *,
        order: cabc.Sequence[str] | None = None,
        overrides: cabc.Sequence[dict[str, typ.Any]] | None = None,
        sections: cabc.Sequence[dict[str, typ.Any]] | None = None,
        error: str | None = None,
        sections_delay: float = 0.0,
    ) -> None:
        super().__init__("https://example.invalid/api")
        self.order = list(order or [])
        self.overrides = list(overrides or [])
        self.sections = list(sections or [])
        self.error = error
        self.sections_delay = sections_delay
        self.calls: list[tuple[str, str]] = []

    def _maybe_fail(self, endpoint: str, slug: str) -> None:
        self.calls.append((endpoint, slug))
        if self.error:
            msg = f"{endpoint} lookup for page '{slug}' failed with status 500: {self.error}"
            raise ContentApiError(msg)

    def fetch_section_order(self, slug: str) -> list[str]:
        self._maybe_fail("section-order", slug)
        return list(self.order)

    def fetch_overrides(self, slug: str) -> list[dict[str, typ.Any]]:
        self._maybe_fail("content-overrides", slug)
        return [dict(record) for record in self.overrides]

    def fetch_sections(self, slug: str) -> list[dict[str, typ.Any]]:
        if self.sections_delay:
            time.sleep(self.sections_delay)
        self._maybe_fail("sections", slug)
        return [dict(record) for record in self.sections]


@pytest.fixture
def stub_client_factory() -> type[StubContentClient]:
    """Return the stub client class so tests can build tailored instances."""
    return StubContentClient


def _sections_page(*ids: str, slug: str | None = None) -> str:
    """Return page markup whose ``<main>`` holds one article per id."""
    body_attr = f' data-page="{slug}"' if slug else ""
    articles = "".join(
        f'<article data-ve-section-id="{section_id}"><h2>{section_id}</h2></article>'
        for section_id in ids
    )
    return f"<html><body{body_attr}><main>{articles}</main></body></html>"


@pytest.fixture
def sections_page() -> cabc.Callable[..., str]:
    """Return a builder for pages made of tagged section articles."""
    return _sections_page
