"""Load and validate the tas-pages site configuration YAML.

This subpackage parses ``config/site.yaml``, merges it with built-in defaults,
and produces slotted dataclasses (:class:`SiteConfig`, :class:`ApiConfig`) that
the page enhancement pipeline consumes. The primary entry point is
:func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from tas_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> sorted(site.pinned_for("index"))  # doctest: +SKIP
['landing']
"""

from .loader import load_site_config
from .models import ApiConfig, SiteConfig, SiteConfigError

__all__ = [
    "ApiConfig",
    "SiteConfig",
    "SiteConfigError",
    "load_site_config",
]
