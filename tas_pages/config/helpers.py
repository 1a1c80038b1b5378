"""Utility helpers shared by the tas-pages configuration loader."""

from __future__ import annotations

import typing as typ

from .models import SiteConfigError


def _normalize_classes(value: str | list[object] | None) -> tuple[str, ...]:
    """Normalize class definitions into a tuple of non-empty strings."""
    if isinstance(value, str):
        return tuple(segment for segment in value.split() if segment)
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return tuple(normalized)
    return ()


def _optional_mapping(
    value: object | None, *, name: str
) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` as a mapping, treating ``None`` as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{name}' configuration must be a mapping."
        raise SiteConfigError(msg)
    return value


def _positive_float(value: object, *, name: str) -> float:
    """Coerce ``value`` to a float greater than zero."""
    try:
        number = float(typ.cast("typ.SupportsFloat", value))
    except (TypeError, ValueError) as exc:
        msg = f"'{name}' must be a number, got {value!r}."
        raise SiteConfigError(msg) from exc
    if number <= 0:
        msg = f"'{name}' must be greater than zero, got {number}."
        raise SiteConfigError(msg)
    return number


def _build_pinned_sections(
    payload: typ.Mapping[str, typ.Any],
) -> dict[str, frozenset[str]]:
    """Build the per-page pinned section sets from a slug -> ids mapping."""
    result: dict[str, frozenset[str]] = {}
    for slug, ids in payload.items():
        match ids:
            case str():
                members = [ids]
            case list():
                members = [str(item).strip() for item in ids]
            case None:
                members = []
            case _:
                msg = f"Pinned sections for '{slug}' must be a list of ids."
                raise SiteConfigError(msg)
        result[str(slug).lower()] = frozenset(item for item in members if item)
    return result


__all__ = [
    "_build_pinned_sections",
    "_normalize_classes",
    "_optional_mapping",
    "_positive_float",
]
