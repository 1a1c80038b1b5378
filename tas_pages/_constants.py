"""Common literal values used across tas_pages.

These constants keep DOM attribute names and endpoint paths centralized so the
appliers, the dynamic section loader, and tests agree on the same contract with
the browser-side visual editor.

Examples
--------
>>> from tas_pages import _constants
>>> _constants.SECTION_ID_ATTR
'data-ve-section-id'
>>> f"[{_constants.SECTION_ID_ATTR}]"
'[data-ve-section-id]'
"""

SECTION_ID_ATTR = "data-ve-section-id"
MANAGED_ATTR = "data-ve-managed"
OVERRIDE_BUTTON_ATTR = "data-ve-override-button"

DEFAULT_PAGE_SLUG = "index"
SECTION_WAIT_TIMEOUT = 3.0

OVERRIDES_ENDPOINT = "content-overrides"
SECTION_ORDER_ENDPOINT = "section-order"
SECTIONS_ENDPOINT = "sections"
