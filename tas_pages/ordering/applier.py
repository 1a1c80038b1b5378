"""Realise the persisted section order on a parsed page.

:class:`SectionOrderApplier` waits for the page's sections to exist, fetches
the persisted order for the page slug, plans the permutation with
:func:`~tas_pages.ordering.permutation.plan_section_order`, and then moves the
section elements in a single synchronous pass. Every failure degrades to
leaving the document untouched; nothing propagates out of
:meth:`SectionOrderApplier.initialize`.

Example
-------
>>> import asyncio
>>> from tas_pages.content_api import ContentApiClient
>>> from tas_pages.page import PageDocument
>>> document = PageDocument.from_html(html, path="/")  # doctest: +SKIP
>>> applier = SectionOrderApplier(
...     document, ContentApiClient("https://example.org/api"), pinned={"landing"}
... )  # doctest: +SKIP
>>> asyncio.run(applier.initialize())  # doctest: +SKIP
OrderResult(page='index', order=('landing', 'hero', 'faq'), reordered_count=2, ...)
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

from tas_pages._constants import SECTION_ID_ATTR, SECTION_WAIT_TIMEOUT
from tas_pages.content_api import ContentApiError
from tas_pages.readiness import wait_for_sections

from .permutation import OrderPlan, plan_section_order

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from tas_pages.content_api import ContentApiClient
    from tas_pages.page import PageDocument
    from tas_pages.readiness import ReadySignal

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class OrderResult:
    """Summary of one ordering pass, reported back to the bootstrap routine."""

    page: str
    order: tuple[str, ...]
    reordered_count: int
    missing: tuple[str, ...] = ()
    unanchored: tuple[str, ...] = ()
    changed: bool = False


class SectionOrderApplier:
    """Bring the page's section order into agreement with the persisted order."""

    def __init__(
        self,
        document: PageDocument,
        client: ContentApiClient,
        *,
        page_slug: str | None = None,
        pinned: cabc.Iterable[str] = (),
        sections_ready: ReadySignal | None = None,
        wait_timeout: float = SECTION_WAIT_TIMEOUT,
    ) -> None:
        """Configure the applier for one page load.

        Parameters
        ----------
        document : PageDocument
            Page whose sections are reordered.
        client : ContentApiClient
            Source of the persisted order.
        page_slug : str, optional
            Slug used for the API lookup; defaults to ``document.slug``.
        pinned : Iterable[str], optional
            Section ids that must keep their position on this page.
        sections_ready : ReadySignal, optional
            Signal resolved by the dynamic section loader.
        wait_timeout : float, optional
            Upper bound in seconds on the wait for dynamic sections.
        """
        self.document = document
        self.client = client
        self.page_slug = (page_slug or document.slug).lower()
        self.pinned = frozenset(pinned)
        self.sections_ready = sections_ready
        self.wait_timeout = wait_timeout
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Return ``True`` once :meth:`initialize` has been called."""
        return self._initialized

    async def initialize(self) -> OrderResult | None:
        """Wait for sections, then fetch and apply the persisted order once.

        Returns
        -------
        OrderResult or None
            The outcome of the ordering pass, or ``None`` when this call was a
            repeat, no order is configured, or the order could not be loaded.
        """
        if self._initialized:
            logger.info(
                "Section ordering already initialized for page %s", self.page_slug
            )
            return None
        self._initialized = True
        try:
            await self.document.ready.wait()
            await wait_for_sections(
                self.document, self.sections_ready, self.wait_timeout
            )
            return await self._load_and_apply()
        except Exception:  # noqa: BLE001 - ordering must never break the page
            logger.exception(
                "Failed to apply section order for page %s", self.page_slug
            )
            return None

    async def _load_and_apply(self) -> OrderResult | None:
        try:
            order = await asyncio.to_thread(
                self.client.fetch_section_order, self.page_slug
            )
        except ContentApiError as exc:
            logger.warning(
                "No section order loaded for page %s: %s", self.page_slug, exc
            )
            return None
        if not order:
            logger.info("No section order defined for page %s", self.page_slug)
            return None
        return self.apply_order(order)

    def apply_order(self, order: cabc.Sequence[str]) -> OrderResult | None:
        """Move the page's sections to follow ``order`` in one synchronous pass.

        Parameters
        ----------
        order : Sequence[str]
            Desired section ids; unknown ids are skipped with a warning.

        Returns
        -------
        OrderResult or None
            ``None`` when the page has no ``<main>`` container.
        """
        if self.document.container is None:
            logger.warning(
                "No <main> element found for section ordering on %s", self.page_slug
            )
            return None

        lookup = self._section_lookup()
        plan = plan_section_order(list(lookup), order, self.pinned)
        for section_id in plan.missing:
            logger.warning(
                "Section not found on page %s: %s", self.page_slug, section_id
            )
        for section_id in plan.unanchored:
            logger.warning(
                "No earlier section to anchor %s on page %s; leaving it in place",
                section_id,
                self.page_slug,
            )
        if plan.changed:
            _permute(self.document, lookup, plan)
            logger.info(
                "Reordered %d sections on page %s", len(plan.displaced), self.page_slug
            )
        else:
            logger.info("Section order already current on page %s", self.page_slug)
        return OrderResult(
            page=self.page_slug,
            order=plan.order,
            reordered_count=len(plan.displaced),
            missing=plan.missing,
            unanchored=plan.unanchored,
            changed=plan.changed,
        )

    def _section_lookup(self) -> dict[str, Tag]:
        """Map section ids to elements, keeping the first of any duplicates."""
        lookup: dict[str, Tag] = {}
        for element in self.document.sections():
            section_id = element.get(SECTION_ID_ATTR)
            if not isinstance(section_id, str) or not section_id:
                continue
            if section_id in lookup:
                logger.warning(
                    "Duplicate section id %s on page %s; only the first is ordered",
                    section_id,
                    self.page_slug,
                )
                continue
            lookup[section_id] = element
        return lookup


def _permute(document: PageDocument, lookup: dict[str, Tag], plan: OrderPlan) -> None:
    """Fill each section slot with the section the plan assigns to it.

    A slot is the position a section occupied before the pass. Non-section
    siblings and containers stay where they are.
    """
    slots = []
    for section_id in plan.original:
        placeholder = document.new_tag("template")
        lookup[section_id].replace_with(placeholder)
        slots.append(placeholder)
    for placeholder, section_id in zip(slots, plan.order, strict=True):
        logger.debug("Placing section %s", section_id)
        placeholder.replace_with(lookup[section_id])


__all__ = ["OrderResult", "SectionOrderApplier"]
