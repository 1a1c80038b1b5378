r"""Client for the read-only Content API consumed during page enhancement.

This module wraps the three endpoints the enhancement pipeline needs: the
selector-keyed content overrides for a page, the persisted section order, and
the admin-authored dynamic sections. Transport errors, non-success statuses,
and malformed JSON are all surfaced as :class:`ContentApiError` so callers have
a single failure type to degrade on.

Example
-------
>>> from tas_pages.content_api import ContentApiClient
>>> client = ContentApiClient("https://example.org/api")  # doctest: +SKIP
>>> client.fetch_section_order("index")  # doctest: +SKIP
['landing', 'hero', 'tutor-zone']
"""

from __future__ import annotations

import logging
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ._constants import OVERRIDES_ENDPOINT, SECTION_ORDER_ENDPOINT, SECTIONS_ENDPOINT

logger = logging.getLogger(__name__)

_ACCEPT_HEADER = "application/json"


class ContentApiError(RuntimeError):
    """Raised when the Content API cannot be reached or returns a bad payload."""


class ContentApiClient:
    """Thin wrapper around the Content API endpoints used by the appliers.

    The client is synchronous; the appliers run it through
    :func:`asyncio.to_thread` so a slow response never blocks the event loop.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        retries: int = 3,
    ) -> None:
        """Initialise the client with a base URL and transport settings.

        Parameters
        ----------
        base_url : str
            Root of the Content API, for example ``"https://example.org/api"``.
        session : requests.Session, optional
            Preconfigured session to reuse. When omitted a new session is
            created with a retrying adapter mounted for HTTP and HTTPS.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        retries : int, optional
            Retry budget for idempotent GET requests on connection errors and
            5xx responses. Defaults to ``3``; ignored when ``session`` is given.
        """
        self._base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or _build_session(retries)
        self._headers = {
            "Accept": _ACCEPT_HEADER,
            "User-Agent": "tas-pages/0.1",
        }

    def close(self) -> None:
        """Release pooled connections held by the underlying session."""
        self._session.close()

    def fetch_overrides(self, slug: str) -> list[dict[str, typ.Any]]:
        """Return the raw override records for ``slug``.

        Raises
        ------
        ContentApiError
            If the request fails, the status is not 2xx, or the body is not a
            JSON array.
        """
        payload = self._get_json(OVERRIDES_ENDPOINT, slug)
        if not isinstance(payload, list):
            msg = f"Override payload for page '{slug}' must be a JSON array"
            raise ContentApiError(msg)
        return [record for record in payload if isinstance(record, dict)]

    def fetch_section_order(self, slug: str) -> list[str]:
        """Return the persisted section order for ``slug``.

        Returns
        -------
        list[str]
            Section ids in their desired order; empty when the page has no
            persisted order (HTTP 404 or a missing ``order`` key).
        """
        payload = self._get_json(SECTION_ORDER_ENDPOINT, slug, allow_missing=True)
        if payload is None:
            return []
        if not isinstance(payload, dict):
            msg = f"Section order payload for page '{slug}' must be a JSON object"
            raise ContentApiError(msg)
        order = payload.get("order") or []
        if not isinstance(order, list):
            msg = f"Section order for page '{slug}' must be a list"
            raise ContentApiError(msg)
        return [entry for entry in order if isinstance(entry, str) and entry]

    def fetch_sections(self, slug: str) -> list[dict[str, typ.Any]]:
        """Return the dynamic section records published for ``slug``."""
        payload = self._get_json(SECTIONS_ENDPOINT, slug, allow_missing=True)
        if payload is None:
            return []
        if not isinstance(payload, list):
            msg = f"Sections payload for page '{slug}' must be a JSON array"
            raise ContentApiError(msg)
        return [record for record in payload if isinstance(record, dict)]

    def _get_json(
        self, endpoint: str, slug: str, *, allow_missing: bool = False
    ) -> typ.Any:  # noqa: ANN401 - JSON payloads are untyped
        """GET ``endpoint`` for ``slug`` and decode the JSON body."""
        url = f"{self._base_url}/{endpoint}"
        logger.debug("GET %s?page=%s", url, slug)
        try:
            response = self._session.get(
                url,
                params={"page": slug},
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach {endpoint} for page '{slug}': {exc}"
            raise ContentApiError(msg) from exc

        if allow_missing and response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if not HTTPStatus.OK <= response.status_code < HTTPStatus.MULTIPLE_CHOICES:
            snippet = (response.text or "")[:200]
            msg = (
                f"{endpoint} lookup for page '{slug}' failed with "
                f"status {response.status_code}: {snippet}"
            )
            raise ContentApiError(msg)

        try:
            return response.json()
        except ValueError as exc:
            msg = f"{endpoint} response for page '{slug}' was not valid JSON"
            raise ContentApiError(msg) from exc


def _build_session(retries: int) -> requests.Session:
    """Create a session that retries idempotent requests on transient failures."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


__all__ = ["ContentApiClient", "ContentApiError"]
