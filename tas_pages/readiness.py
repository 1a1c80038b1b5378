"""Awaitable one-shot signals used to sequence page enhancement steps.

The dynamic section loader, the order applier, and the override applier run
concurrently on one event loop. They coordinate through :class:`ReadySignal`
objects instead of broadcast events: the producer calls
:meth:`ReadySignal.resolve` once, and consumers await
:meth:`ReadySignal.wait`, optionally bounded by a timeout so a signal that never
fires (a page without dynamic sections) cannot stall the pipeline.

Examples
--------
>>> import asyncio
>>> signal = ReadySignal("demo")
>>> asyncio.run(signal.wait(timeout=0.01))
False
>>> signal.resolve()
>>> asyncio.run(signal.wait())
True
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ

from ._constants import SECTION_WAIT_TIMEOUT

if typ.TYPE_CHECKING:
    from .page import PageDocument

logger = logging.getLogger(__name__)


class ReadySignal:
    """A flag that is resolved exactly once and can be awaited with a timeout."""

    def __init__(self, name: str, *, resolved: bool = False) -> None:
        self.name = name
        self._event = asyncio.Event()
        if resolved:
            self._event.set()

    def __repr__(self) -> str:
        state = "resolved" if self.is_resolved else "pending"
        return f"ReadySignal({self.name!r}, {state})"

    @property
    def is_resolved(self) -> bool:
        """Return ``True`` once :meth:`resolve` has been called."""
        return self._event.is_set()

    def resolve(self) -> None:
        """Mark the signal as resolved and wake every waiter."""
        self._event.set()

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for the signal, returning ``False`` if ``timeout`` elapses first."""
        if self._event.is_set():
            return True
        if timeout is None:
            await self._event.wait()
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except TimeoutError:
            return False
        return True


async def wait_for_sections(
    document: PageDocument,
    sections_ready: ReadySignal | None,
    timeout: float = SECTION_WAIT_TIMEOUT,
) -> bool:
    """Wait until the section loader has finished, or until time runs out.

    While a loader runs it may still be inserting sections, so its signal is
    awaited even when the page already carries static sections.

    Parameters
    ----------
    document : PageDocument
        Page whose tree is inspected for existing section elements.
    sections_ready : ReadySignal or None
        Signal resolved by the dynamic section loader; ``None`` when no loader
        runs for this page, in which case nothing else can add sections and
        the wait ends at once.
    timeout : float, optional
        Upper bound in seconds; defaults to ``SECTION_WAIT_TIMEOUT``.

    Returns
    -------
    bool
        ``True`` when the loader signalled, or when no loader runs and the page
        already has sections. ``False`` otherwise.
    """
    if sections_ready is None:
        present = document.has_sections()
        logger.debug(
            "No section loader for page %s (sections present: %s)",
            document.slug,
            present,
        )
        return present
    if await sections_ready.wait(timeout):
        logger.debug("Dynamic sections loaded for page %s", document.slug)
        return True
    logger.info(
        "Dynamic sections not signalled within %.1fs on page %s - proceeding anyway",
        timeout,
        document.slug,
    )
    return False


__all__ = ["ReadySignal", "wait_for_sections"]
