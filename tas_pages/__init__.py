"""Page enhancement for the Tutors Alliance Scotland website.

This package applies admin-authored content to server-rendered pages: it
inserts dynamic sections, reorders sections to match the persisted order, and
patches text, images, and links from selector-keyed overrides.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``PageDocument``: Parsed page shared by every enhancement step.
- ``PageEnhancer`` / ``enhance_html``: Bootstrap routine for one page load.

Examples
--------
>>> from tas_pages import main
>>> main()  # doctest: +SKIP
>>> from tas_pages import PageDocument
>>> PageDocument.from_html("<main></main>", path="/tutors.html").slug
'tutors'
"""

from __future__ import annotations

from .cli import app, main
from .page import PageDocument
from .pipeline import PageEnhancer, enhance_html

__all__ = ["PageDocument", "PageEnhancer", "app", "enhance_html", "main"]
