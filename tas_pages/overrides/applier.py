"""Apply admin-authored content overrides to a parsed page.

:class:`ContentOverrideApplier` fetches the override records for the page slug,
decodes them with :func:`~tas_pages.overrides.models.parse_overrides`, and
patches every element matched by each selector. Application is idempotent per
element: content is replaced rather than appended to, and the optional
call-to-action button is keyed on a marker attribute so a second pass never
adds a second button.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import logging
import re
import typing as typ

from soupsieve import SelectorSyntaxError

from tas_pages._constants import MANAGED_ATTR, OVERRIDE_BUTTON_ATTR
from tas_pages.config.models import DEFAULT_BUTTON_CLASSES
from tas_pages.content_api import ContentApiError

from .models import (
    CallToAction,
    HtmlOverride,
    ImageOverride,
    LinkOverride,
    Override,
    TextOverride,
    parse_overrides,
)

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from tas_pages.content_api import ContentApiClient
    from tas_pages.page import PageDocument

logger = logging.getLogger(__name__)

_TAG_MARKER = re.compile(r"<[^>]+>")


@dc.dataclass(frozen=True, slots=True)
class OverrideResult:
    """Summary of one override pass, reported back to the bootstrap routine."""

    page: str
    applied_count: int
    selectors: tuple[str, ...] = ()
    unmatched: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


class ContentOverrideApplier:
    """Patch text, markup, images, and links on a page from stored overrides."""

    def __init__(
        self,
        document: PageDocument,
        client: ContentApiClient,
        *,
        page_slug: str | None = None,
        button_classes: cabc.Sequence[str] = DEFAULT_BUTTON_CLASSES,
    ) -> None:
        self.document = document
        self.client = client
        self.page_slug = (page_slug or document.slug).lower()
        self.button_classes = tuple(button_classes)
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Return ``True`` once :meth:`initialize` has been called."""
        return self._initialized

    async def initialize(self) -> OverrideResult | None:
        """Fetch and apply the page's overrides once.

        Returns
        -------
        OverrideResult or None
            The outcome of the pass, or ``None`` when this call was a repeat,
            no overrides exist, or they could not be loaded.
        """
        if self._initialized:
            logger.info(
                "Content overrides already initialized for page %s", self.page_slug
            )
            return None
        self._initialized = True
        try:
            await self.document.ready.wait()
            return await self._load_and_apply()
        except Exception:  # noqa: BLE001 - overrides must never break the page
            logger.exception(
                "Failed to apply content overrides for page %s", self.page_slug
            )
            return None

    async def _load_and_apply(self) -> OverrideResult | None:
        try:
            records = await asyncio.to_thread(
                self.client.fetch_overrides, self.page_slug
            )
        except ContentApiError as exc:
            logger.warning(
                "No content overrides loaded for page %s: %s", self.page_slug, exc
            )
            return None
        overrides = parse_overrides(records)
        if not overrides:
            logger.info("No content overrides defined for page %s", self.page_slug)
            return None
        return self.apply_overrides(overrides)

    def apply_overrides(self, overrides: cabc.Mapping[str, Override]) -> OverrideResult:
        """Apply every override to all elements its selector matches.

        A selector that matches nothing is logged and skipped. So is one that
        cannot be parsed or whose override raises; the others still apply.
        """
        applied = 0
        selectors: list[str] = []
        unmatched: list[str] = []
        failed: list[str] = []
        for selector, override in overrides.items():
            try:
                elements = self.document.select(selector)
            except (SelectorSyntaxError, NotImplementedError) as exc:
                logger.warning("Invalid override selector %r: %s", selector, exc)
                failed.append(selector)
                continue
            if not elements:
                logger.info("No elements found for selector %s", selector)
                unmatched.append(selector)
                continue
            try:
                count = sum(
                    1 for element in elements if self.apply_override(element, override)
                )
            except Exception:  # noqa: BLE001 - isolate each selector
                logger.exception("Failed to apply override for selector %s", selector)
                failed.append(selector)
                continue
            if count:
                selectors.append(selector)
                applied += count
                logger.debug(
                    "Applied override to %d element(s) for %s", count, selector
                )

        logger.info(
            "Applied %d content override(s) on page %s", applied, self.page_slug
        )
        return OverrideResult(
            page=self.page_slug,
            applied_count=applied,
            selectors=tuple(selectors),
            unmatched=tuple(unmatched),
            failed=tuple(failed),
        )

    def apply_override(self, element: Tag, override: Override) -> bool:
        """Apply ``override`` to ``element``; return ``False`` if it did not fit."""
        match override:
            case TextOverride():
                self._apply_text(element, override)
            case HtmlOverride():
                self._set_rich_content(element, override.html)
                self._attach_call_to_action(element, override.call_to_action)
            case ImageOverride():
                if not self._apply_image(element, override):
                    return False
            case LinkOverride():
                if not self._apply_link(element, override):
                    return False
        element[MANAGED_ATTR] = "true"
        return True

    def _apply_text(self, element: Tag, override: TextOverride) -> None:
        if override.is_html or _TAG_MARKER.search(override.text):
            self._set_rich_content(element, override.text.replace("\n", "<br>"))
        else:
            element.string = override.text
        self._attach_call_to_action(element, override.call_to_action)

    @staticmethod
    def _apply_image(element: Tag, override: ImageOverride) -> bool:
        image = element if element.name == "img" else element.find("img")
        if image is None:
            logger.info("No image found for selector %s", override.selector)
            return False
        image["src"] = override.src
        if override.alt:
            image["alt"] = override.alt
        return True

    def _apply_link(self, element: Tag, override: LinkOverride) -> bool:
        if element.name != "a":
            logger.info("Link override for %s targets a non-anchor", override.selector)
            return False
        element["href"] = override.href
        if override.text:
            element.string = override.text
        if override.is_button:
            current = element.get("class") or []
            classes = current.split() if isinstance(current, str) else list(current)
            classes.extend(name for name in self.button_classes if name not in classes)
            element["class"] = classes
        return True

    def _set_rich_content(self, element: Tag, html: str) -> None:
        element.clear()
        for node in self.document.fragment(html):
            element.append(node)

    def _attach_call_to_action(
        self, element: Tag, call_to_action: CallToAction | None
    ) -> None:
        """Append exactly one override button, replacing any earlier one."""
        for existing in element.find_all(
            "a", attrs={OVERRIDE_BUTTON_ATTR: True}, recursive=False
        ):
            existing.decompose()
        if call_to_action is None:
            return
        button = self.document.new_tag(
            "a",
            {
                "href": call_to_action.url,
                "style": "margin-left:10px",
                OVERRIDE_BUTTON_ATTR: "true",
            },
        )
        button["class"] = list(self.button_classes)
        button.string = call_to_action.label
        element.append(button)


__all__ = ["ContentOverrideApplier", "OverrideResult"]
