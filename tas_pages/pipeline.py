"""Bootstrap routine that runs every enhancement step for one page load.

:class:`PageEnhancer` owns the dynamic section loader and both appliers for a
single :class:`~tas_pages.page.PageDocument`. It constructs them explicitly,
wires the loader's readiness signal into the order applier, and runs all three
concurrently on one event loop. Ordering and overrides touch disjoint aspects
of the tree (node position versus node content), so their relative order does
not matter.

Example
-------
>>> from tas_pages.config import SiteConfig
>>> from tas_pages.content_api import ContentApiClient
>>> html = enhance_html(
...     "<main>...</main>",
...     path="/about-us.html",
...     client=ContentApiClient("https://example.org/api"),
...     site_config=SiteConfig(),
... )  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import typing as typ

from .dynamic_sections import DynamicSectionLoader
from .ordering import OrderResult, SectionOrderApplier
from .overrides import ContentOverrideApplier, OverrideResult
from .page import PageDocument

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .content_api import ContentApiClient

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class EnhancementReport:
    """What each enhancement step did for one page load."""

    slug: str
    sections_loaded: int
    order: OrderResult | None
    overrides: OverrideResult | None


class PageEnhancer:
    """Run the section loader, order applier, and override applier for a page."""

    def __init__(
        self,
        document: PageDocument,
        client: ContentApiClient,
        site_config: SiteConfig,
    ) -> None:
        self.document = document
        self.site_config = site_config
        slug = document.slug
        self.loader: DynamicSectionLoader | None = None
        if site_config.dynamic_sections:
            self.loader = DynamicSectionLoader(
                document, client, button_classes=site_config.button_classes
            )
        self.ordering = SectionOrderApplier(
            document,
            client,
            pinned=site_config.pinned_for(slug),
            sections_ready=self.loader.ready if self.loader else None,
            wait_timeout=site_config.wait_timeout,
        )
        self.overrides = ContentOverrideApplier(
            document, client, button_classes=site_config.button_classes
        )

    async def run(self) -> EnhancementReport:
        """Run every step concurrently and report their outcomes."""
        logger.info("Enhancing page %s", self.document.slug)
        loaded, order, overrides = await asyncio.gather(
            self._load_sections(),
            self.ordering.initialize(),
            self.overrides.initialize(),
        )
        return EnhancementReport(
            slug=self.document.slug,
            sections_loaded=loaded,
            order=order,
            overrides=overrides,
        )

    async def _load_sections(self) -> int:
        if self.loader is None:
            return 0
        return await self.loader.load()


def enhance_html(
    html: str,
    *,
    path: str,
    client: ContentApiClient,
    site_config: SiteConfig,
) -> str:
    """Apply dynamic sections, section order, and overrides to ``html``.

    Parameters
    ----------
    html : str
        Server-rendered page markup.
    path : str
        Request path the page is served under; used to derive the page slug.
    client : ContentApiClient
        Content API client shared by every step.
    site_config : SiteConfig
        Pinned sections, timeouts, and styling settings.

    Returns
    -------
    str
        The enhanced markup. When every step degrades, this is the input
        markup re-serialized without changes.
    """
    document = PageDocument.from_html(html, path=path)
    asyncio.run(PageEnhancer(document, client, site_config).run())
    return document.render()


__all__ = ["EnhancementReport", "PageEnhancer", "enhance_html"]
