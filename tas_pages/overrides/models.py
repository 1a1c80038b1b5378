"""Typed content overrides decoded from Content API records.

Each record from ``GET /content-overrides`` names a ``contentType`` and reuses
a handful of loosely typed fields (``image`` doubles as a link's href). This
module decides the variant once, at the API boundary, so the applier only ever
sees a value carrying exactly the fields it needs.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

logger = logging.getLogger(__name__)


class OverrideDescriptorError(ValueError):
    """Raised when an override record cannot be decoded."""


@dc.dataclass(frozen=True, slots=True)
class CallToAction:
    """Button appended after replaced text content."""

    label: str
    url: str


@dc.dataclass(frozen=True, slots=True)
class TextOverride:
    """Replace an element's text; rich when flagged or when it carries tags."""

    selector: str
    text: str
    is_html: bool = False
    call_to_action: CallToAction | None = None


@dc.dataclass(frozen=True, slots=True)
class HtmlOverride:
    """Replace an element's markup verbatim with admin-authored HTML."""

    selector: str
    html: str
    call_to_action: CallToAction | None = None


@dc.dataclass(frozen=True, slots=True)
class ImageOverride:
    """Swap the source (and optionally alt text) of an image."""

    selector: str
    src: str
    alt: str | None = None


@dc.dataclass(frozen=True, slots=True)
class LinkOverride:
    """Retarget an anchor, optionally relabelling and styling it as a button."""

    selector: str
    href: str
    text: str | None = None
    is_button: bool = False


Override = TextOverride | HtmlOverride | ImageOverride | LinkOverride


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_call_to_action(payload: cabc.Mapping[str, typ.Any]) -> CallToAction | None:
    """Return the button described by ``buttonLabel``/``buttonUrl``, if both are set."""
    label = _optional_str(payload.get("buttonLabel"))
    url = _optional_str(payload.get("buttonUrl"))
    if label and url:
        return CallToAction(label=label, url=url)
    return None


def parse_override(payload: cabc.Mapping[str, typ.Any]) -> Override:
    """Decode one Content API record into its override variant.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Raw record with ``targetSelector``, ``contentType`` and the
        type-dependent ``text``/``image``/``isHTML``/``isButton`` fields.

    Returns
    -------
    Override
        One of :class:`TextOverride`, :class:`HtmlOverride`,
        :class:`ImageOverride`, or :class:`LinkOverride`.

    Raises
    ------
    OverrideDescriptorError
        If the selector is missing, the content type is unknown, or an image
        or link record carries no URL.

    Examples
    --------
    >>> parse_override(
    ...     {"targetSelector": "#hero h1", "contentType": "text", "text": "Hi"}
    ... )
    TextOverride(selector='#hero h1', text='Hi', is_html=False, call_to_action=None)
    """
    selector = _optional_str(payload.get("targetSelector"))
    if not selector:
        msg = "Override record is missing 'targetSelector'."
        raise OverrideDescriptorError(msg)

    content_type = payload.get("contentType", "text")
    raw_text = payload.get("text")
    text = "" if raw_text is None else str(raw_text)
    match content_type:
        case "text":
            return TextOverride(
                selector=selector,
                text=text,
                is_html=bool(payload.get("isHTML")),
                call_to_action=build_call_to_action(payload),
            )
        case "html":
            return HtmlOverride(
                selector=selector,
                html=text,
                call_to_action=build_call_to_action(payload),
            )
        case "image":
            src = _optional_str(payload.get("image"))
            if not src:
                msg = f"Image override for '{selector}' has no image URL."
                raise OverrideDescriptorError(msg)
            return ImageOverride(selector=selector, src=src, alt=_optional_str(text))
        case "link":
            href = _optional_str(payload.get("image"))
            if not href:
                msg = f"Link override for '{selector}' has no URL."
                raise OverrideDescriptorError(msg)
            return LinkOverride(
                selector=selector,
                href=href,
                text=_optional_str(text),
                is_button=bool(payload.get("isButton")),
            )
        case _:
            msg = f"Unknown content type {content_type!r} for '{selector}'."
            raise OverrideDescriptorError(msg)


def parse_overrides(
    records: cabc.Iterable[cabc.Mapping[str, typ.Any]],
) -> dict[str, Override]:
    """Decode records into a selector-keyed mapping, skipping bad entries.

    Inactive records (``isActive: false``) are ignored. When two records share
    a selector the later one wins but keeps the earlier one's position.
    """
    overrides: dict[str, Override] = {}
    for record in records:
        if record.get("isActive") is False:
            continue
        try:
            override = parse_override(record)
        except OverrideDescriptorError as exc:
            logger.warning("Skipping override: %s", exc)
            continue
        overrides[override.selector] = override
    return overrides


__all__ = [
    "CallToAction",
    "HtmlOverride",
    "ImageOverride",
    "LinkOverride",
    "Override",
    "OverrideDescriptorError",
    "TextOverride",
    "build_call_to_action",
    "parse_override",
    "parse_overrides",
]
