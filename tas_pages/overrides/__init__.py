"""Decode and apply selector-keyed content overrides."""

from .applier import ContentOverrideApplier, OverrideResult
from .models import (
    CallToAction,
    HtmlOverride,
    ImageOverride,
    LinkOverride,
    Override,
    OverrideDescriptorError,
    TextOverride,
    build_call_to_action,
    parse_override,
    parse_overrides,
)

__all__ = [
    "CallToAction",
    "ContentOverrideApplier",
    "HtmlOverride",
    "ImageOverride",
    "LinkOverride",
    "Override",
    "OverrideDescriptorError",
    "OverrideResult",
    "TextOverride",
    "build_call_to_action",
    "parse_override",
    "parse_overrides",
]
