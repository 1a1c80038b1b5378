"""Cyclopts CLI entrypoint for enhancing Tutors Alliance Scotland pages.

The ``pages`` console script defined here applies admin-authored dynamic
sections, the persisted section order, and content overrides to a
server-rendered HTML file by talking to the Content API. It also exposes two
offline helpers: ``pages slug`` shows which slug a path resolves to, and
``pages plan-order`` previews how a persisted order would permute a page's
sections.

Every option can also be supplied through a ``TAS_PAGES_`` environment
variable (for example ``TAS_PAGES_CONFIG``).

Examples
--------
Enhance a rendered page in place:

>>> from tas_pages.cli import app
>>> app.run(["enhance", "--input", "public/about-us.html"])  # doctest: +SKIP

Preview an order without touching the network:

>>> app.run(
...     ["plan-order", "--current", "a,b,c,hero", "--desired", "hero,b,a,c",
...      "--pinned", "hero"]
... )  # doctest: +SKIP
b,a,c,hero
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import SiteConfig, load_site_config
from .content_api import ContentApiClient
from .ordering import plan_section_order
from .page import derive_page_slug
from .pipeline import enhance_html

DEFAULT_CONFIG = Path("config/site.yaml")

app = App(name="pages", config=cyclopts.config.Env("TAS_PAGES_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Path) -> SiteConfig:
    """Load ``path``, falling back to built-in defaults for a missing default file."""
    if not path.exists() and path == DEFAULT_CONFIG:
        return SiteConfig()
    return load_site_config(path)


def _split_ids(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@app.command(help="Apply dynamic sections, section order, and overrides to a page.")
def enhance(
    *,
    input_path: typ.Annotated[
        Path, Parameter(name="--input", help="Server-rendered HTML file")
    ],
    output: typ.Annotated[
        Path | None,
        Parameter(help="Where to write the result; defaults to the input file"),
    ] = None,
    path: typ.Annotated[
        str | None,
        Parameter(help="Request path used to derive the page slug"),
    ] = None,
    config: typ.Annotated[Path, Parameter(help="Path to site config")] = DEFAULT_CONFIG,
    api_base: typ.Annotated[
        str | None, Parameter(help="Override the Content API base URL")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log every step")] = False,
) -> None:
    """Enhance one server-rendered page through the Content API.

    Parameters
    ----------
    input_path : Path
        HTML file to read.
    output : Path or None, optional
        Destination file; when ``None`` (default) the input is overwritten.
    path : str or None, optional
        Request path the page is served under. Defaults to ``/<file name>``,
        so ``about-us.html`` resolves to the ``about-us`` slug.
    config : Path, optional
        Site configuration file; built-in defaults apply when the default
        path does not exist.
    api_base : str or None, optional
        Content API root overriding ``api.base_url`` from the config.
    verbose : bool, optional
        Emit debug logging for every move and patch.

    Returns
    -------
    None
        Writes the enhanced page and prints its path.
    """
    _configure_logging(verbose)
    site_config = _load_config(config)
    client = ContentApiClient(
        api_base or site_config.api.base_url,
        timeout=site_config.api.timeout,
        retries=site_config.api.retries,
    )
    page_path = path or f"/{input_path.name}"
    try:
        html = enhance_html(
            input_path.read_text(encoding="utf-8"),
            path=page_path,
            client=client,
            site_config=site_config,
        )
    finally:
        client.close()
    destination = output or input_path
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(html, encoding="utf-8")
    print(f"wrote {_format_path(destination)}")


@app.command(help="Show the page slug a request path resolves to.")
def slug(
    path: str,
    *,
    data_page: typ.Annotated[
        str | None, Parameter(help="Value of <body data-page>, if any")
    ] = None,
) -> None:
    """Print the slug used for Content API lookups of ``path``."""
    print(derive_page_slug(path, data_page=data_page))


@app.command(help="Preview how a persisted order permutes a page's sections.")
def plan_order(
    *,
    current: typ.Annotated[str, Parameter(help="Comma-separated ids in page order")],
    desired: typ.Annotated[str, Parameter(help="Comma-separated persisted order")],
    pinned: typ.Annotated[str, Parameter(help="Comma-separated pinned ids")] = "",
) -> None:
    """Print the planned order followed by any ids that could not be placed."""
    plan = plan_section_order(
        _split_ids(current), _split_ids(desired), _split_ids(pinned)
    )
    print(",".join(plan.order))
    for section_id in plan.missing:
        print(f"missing: {section_id}")
    for section_id in plan.unanchored:
        print(f"unanchored: {section_id}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``pages`` console command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
