"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from .helpers import (
    _build_pinned_sections,
    _normalize_classes,
    _optional_mapping,
    _positive_float,
)
from .models import DEFAULT_BUTTON_CLASSES, ApiConfig, SiteConfig, SiteConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing API access and page behaviour.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied for every omitted key.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the top-level structure or any section is malformed.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from tas_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.api.base_url  # doctest: +SKIP
    'https://tutorsalliancescotland.org.uk/api'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    return build_site_config(raw)


def build_site_config(raw: typ.Mapping[str, typ.Any]) -> SiteConfig:
    """Build a :class:`SiteConfig` from an already-parsed mapping."""
    base = SiteConfig()
    api_raw = _optional_mapping(raw.get("api"), name="api")
    ordering_raw = _optional_mapping(raw.get("ordering"), name="ordering")
    overrides_raw = _optional_mapping(raw.get("overrides"), name="overrides")
    dynamic_raw = _optional_mapping(
        raw.get("dynamic_sections"), name="dynamic_sections"
    )

    api = _build_api_config(api_raw, base.api)

    wait_timeout = base.wait_timeout
    if "wait_timeout" in ordering_raw:
        wait_timeout = _positive_float(
            ordering_raw["wait_timeout"], name="ordering.wait_timeout"
        )

    pinned = base.pinned_sections
    if "pinned_sections" in ordering_raw:
        pinned = _build_pinned_sections(
            _optional_mapping(
                ordering_raw["pinned_sections"], name="ordering.pinned_sections"
            )
        )

    button_classes = (
        _normalize_classes(overrides_raw.get("button_classes"))
        or DEFAULT_BUTTON_CLASSES
    )

    return SiteConfig(
        api=api,
        wait_timeout=wait_timeout,
        pinned_sections=pinned,
        button_classes=button_classes,
        dynamic_sections=bool(dynamic_raw.get("enabled", base.dynamic_sections)),
    )


def _build_api_config(payload: typ.Mapping[str, typ.Any], base: ApiConfig) -> ApiConfig:
    """Merge the ``api`` block over the default :class:`ApiConfig`."""
    base_url = str(payload.get("base_url") or base.base_url).rstrip("/")
    timeout = base.timeout
    if "timeout" in payload:
        timeout = _positive_float(payload["timeout"], name="api.timeout")
    retries = payload.get("retries", base.retries)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        msg = f"'api.retries' must be a non-negative integer, got {retries!r}."
        raise SiteConfigError(msg)
    return ApiConfig(base_url=base_url, timeout=timeout, retries=retries)


__all__ = ["build_site_config", "load_site_config"]
