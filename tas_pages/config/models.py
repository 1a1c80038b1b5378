"""Typed dataclasses describing tas-pages site configuration structures."""

from __future__ import annotations

import dataclasses as dc

from tas_pages._constants import DEFAULT_PAGE_SLUG, SECTION_WAIT_TIMEOUT

DEFAULT_API_BASE = "http://localhost:3000/api"
DEFAULT_BUTTON_CLASSES = ("button", "aurora")


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


def _default_pinned() -> dict[str, frozenset[str]]:
    return {DEFAULT_PAGE_SLUG: frozenset({"landing"})}


@dc.dataclass(slots=True)
class ApiConfig:
    """Connection settings for the Content API."""

    base_url: str = DEFAULT_API_BASE
    timeout: float = 10.0
    retries: int = 3


@dc.dataclass(slots=True)
class SiteConfig:
    """Settings shared by the loader, the order applier, and the override applier.

    Attributes
    ----------
    api : ApiConfig
        Content API connection settings.
    wait_timeout : float
        Seconds the order applier waits for dynamic sections before proceeding.
    pinned_sections : dict[str, frozenset[str]]
        Section ids per page slug that must never be moved.
    button_classes : tuple[str, ...]
        CSS classes applied to override buttons and button-styled links.
    dynamic_sections : bool
        Whether the bootstrap routine runs the dynamic section loader.
    """

    api: ApiConfig = dc.field(default_factory=ApiConfig)
    wait_timeout: float = SECTION_WAIT_TIMEOUT
    pinned_sections: dict[str, frozenset[str]] = dc.field(
        default_factory=_default_pinned
    )
    button_classes: tuple[str, ...] = DEFAULT_BUTTON_CLASSES
    dynamic_sections: bool = True

    def pinned_for(self, slug: str) -> frozenset[str]:
        """Return the pinned section ids configured for ``slug``."""
        return self.pinned_sections.get(slug.lower(), frozenset())


__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_BUTTON_CLASSES",
    "ApiConfig",
    "SiteConfig",
    "SiteConfigError",
]
