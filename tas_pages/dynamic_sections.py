"""Populate a page with admin-authored dynamic sections.

The loader fetches the sections published for a page slug, renders each one
through the ``dynamic_section.jinja`` template, and inserts the markup into
three position containers inside ``<main>`` (top, middle, bottom), creating
them when the page does not provide its own. Every rendered section carries a
``data-ve-section-id`` attribute so the order applier can move it.

When loading finishes, successfully or not, :attr:`DynamicSectionLoader.ready`
is resolved. The order applier awaits that signal before reordering.

Example
-------
>>> import asyncio
>>> loader = DynamicSectionLoader(document, client)  # doctest: +SKIP
>>> asyncio.run(loader.load())  # doctest: +SKIP
3
>>> loader.ready.is_resolved  # doctest: +SKIP
True
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .config.models import DEFAULT_BUTTON_CLASSES
from .content_api import ContentApiError
from .overrides.models import CallToAction, build_call_to_action
from .page import slugify
from .readiness import ReadySignal

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from .content_api import ContentApiClient
    from .page import PageDocument

logger = logging.getLogger(__name__)

POSITIONS = ("top", "middle", "bottom")
CONTAINER_IDS: dict[str, str] = {
    "top": "dynamicSectionsTop",
    "middle": "dynamicSectionsMiddle",
    "bottom": "dynamicSections",
}
CONTAINER_CLASS = "dynamic-section-container"
UNWRAPPED_LAYOUTS = frozenset({"team", "list"})
_MIDDLE_ANCHOR = ".two-col-content"


@dc.dataclass(frozen=True, slots=True)
class DynamicSection:
    """A published section rendered into one of the position containers."""

    section_id: str
    heading: str = ""
    text: str = ""
    image: str | None = None
    position: str = "bottom"
    layout: str = "standard"
    anchor: str | None = None
    button: CallToAction | None = None


def parse_dynamic_section(payload: cabc.Mapping[str, typ.Any]) -> DynamicSection | None:
    """Decode one section record; ``None`` for unpublished or unidentifiable ones."""
    if payload.get("isPublished") is False:
        return None
    heading = str(payload.get("heading") or "").strip()
    section_id = str(payload.get("_id") or payload.get("id") or "").strip()
    section_id = section_id or slugify(heading)
    if not section_id:
        return None
    position = str(payload.get("position") or "bottom").lower()
    if position not in POSITIONS:
        position = "bottom"
    anchor = payload.get("navAnchor") or (slugify(heading) if heading else None)
    return DynamicSection(
        section_id=section_id,
        heading=heading,
        text=str(payload.get("text") or ""),
        image=payload.get("image") or None,
        position=position,
        layout=str(payload.get("layout") or "standard"),
        anchor=anchor,
        button=build_call_to_action(payload),
    )


class DynamicSectionLoader:
    """Fetch and insert the dynamic sections for one page load."""

    def __init__(
        self,
        document: PageDocument,
        client: ContentApiClient,
        *,
        page_slug: str | None = None,
        templates_dir: Path | None = None,
        button_classes: cabc.Sequence[str] = DEFAULT_BUTTON_CLASSES,
    ) -> None:
        """Initialize the loader and its Jinja environment.

        Parameters
        ----------
        document : PageDocument
            Page that receives the rendered sections.
        client : ContentApiClient
            Source of the section records.
        page_slug : str, optional
            Slug used for the API lookup; defaults to ``document.slug``.
        templates_dir : Path, optional
            Directory containing ``dynamic_section.jinja``; defaults to the
            package templates.
        button_classes : Sequence[str], optional
            CSS classes for section call-to-action buttons.
        """
        self.document = document
        self.client = client
        self.page_slug = (page_slug or document.slug).lower()
        self.button_classes = tuple(button_classes)
        self.ready = ReadySignal(f"sections:{self.page_slug}")
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("dynamic_section.jinja")

    async def load(self) -> int:
        """Fetch and render the page's sections, always resolving :attr:`ready`.

        Returns
        -------
        int
            Number of sections inserted into the page.
        """
        try:
            records = await asyncio.to_thread(
                self.client.fetch_sections, self.page_slug
            )
            sections = [
                section
                for section in map(parse_dynamic_section, records)
                if section is not None
            ]
            return self.render(sections)
        except ContentApiError as exc:
            logger.warning(
                "Error loading dynamic sections for %s: %s", self.page_slug, exc
            )
            self._hide_existing_containers()
            return 0
        except Exception:  # noqa: BLE001 - a broken section must not break the page
            logger.exception(
                "Failed to render dynamic sections for %s", self.page_slug
            )
            return 0
        finally:
            self._mark_ready()

    def render(self, sections: cabc.Sequence[DynamicSection]) -> int:
        """Insert ``sections`` into their position containers."""
        if not sections:
            logger.info("No dynamic sections for page %s", self.page_slug)
            self._hide_existing_containers()
            return 0
        containers = self._ensure_containers()
        if not containers:
            return 0

        inserted = 0
        for position in POSITIONS:
            container = containers.get(position)
            members = [section for section in sections if section.position == position]
            if container is None:
                if members:
                    logger.warning(
                        "No %s container on page %s; dropping %d section(s)",
                        position,
                        self.page_slug,
                        len(members),
                    )
                continue
            container.clear()
            for section in members:
                container.append(self._render_section(section))
                inserted += 1
            _set_hidden(container, hidden=not members)

        body = self.document.body
        if body is not None and inserted:
            _add_class(body, "has-dynamic-sections")
        logger.info("Loaded %d dynamic section(s) on page %s", inserted, self.page_slug)
        return inserted

    def _render_section(self, section: DynamicSection) -> Tag:
        html = self.template.render(section=section, button_classes=self.button_classes)
        nodes = self.document.fragment(html)
        if section.layout in UNWRAPPED_LAYOUTS:
            return next(node for node in nodes if getattr(node, "name", None))
        wrapper = self.document.new_tag("div")
        wrapper["class"] = ["dyn-block", "fade-in-on-scroll"]
        for node in nodes:
            wrapper.append(node)
        return wrapper

    def _ensure_containers(self) -> dict[str, Tag]:
        """Return the position containers, creating any the page lacks."""
        soup = self.document.soup
        found: dict[str, Tag | None] = {
            position: soup.find(id=container_id)
            for position, container_id in CONTAINER_IDS.items()
        }
        body = self.document.body
        if body is not None and body.get("data-dyn-manual") == "true":
            logger.debug("Manual container placement on page %s", self.page_slug)
            return {position: tag for position, tag in found.items() if tag is not None}

        main = self.document.container
        if main is None:
            logger.error("No <main> element found on page %s", self.page_slug)
            return {}

        containers: dict[str, Tag] = {}
        for position in POSITIONS:
            existing = found[position]
            if existing is not None:
                _add_class(existing, CONTAINER_CLASS)
                containers[position] = existing
                continue
            container_id = CONTAINER_IDS[position]
            container = self.document.new_tag("section", {"id": container_id})
            container["class"] = [CONTAINER_CLASS]
            _set_hidden(container, hidden=True)
            _place_container(main, position, container)
            containers[position] = container
        return containers

    def _hide_existing_containers(self) -> None:
        for container_id in CONTAINER_IDS.values():
            container = self.document.soup.find(id=container_id)
            if container is not None:
                _set_hidden(container, hidden=True)

    def _mark_ready(self) -> None:
        body = self.document.body
        if body is not None:
            _add_class(body, "dyn-ready")
        self.ready.resolve()


def _place_container(main: Tag, position: str, container: Tag) -> None:
    """Insert a new position container at its default spot inside ``main``."""
    children = main.find_all(True, recursive=False)
    match position:
        case "top":
            main.insert(0, container)
        case "bottom":
            main.append(container)
        case _:
            anchor = main.select_one(_MIDDLE_ANCHOR)
            if anchor is None and len(children) >= 4:
                anchor = children[len(children) // 2]
            elif anchor is None:
                index = max(1, len(children) // 3)
                anchor = children[index] if index < len(children) else None
            if anchor is None:
                main.append(container)
            else:
                anchor.insert_after(container)


def _add_class(element: Tag, name: str) -> None:
    current = element.get("class") or []
    classes = current.split() if isinstance(current, str) else list(current)
    if name not in classes:
        classes.append(name)
    element["class"] = classes


def _set_hidden(element: Tag, *, hidden: bool) -> None:
    if hidden:
        element["hidden"] = ""
    elif "hidden" in element.attrs:
        del element["hidden"]


__all__ = [
    "CONTAINER_IDS",
    "DynamicSection",
    "DynamicSectionLoader",
    "parse_dynamic_section",
]
