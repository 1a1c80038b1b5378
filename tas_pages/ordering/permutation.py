"""Compute section permutations without any document access.

Examples
--------
>>> plan = plan_section_order(
...     ["a", "b", "c", "hero"], ["hero", "b", "a", "c"], {"hero"}
... )
>>> list(plan.order)
['b', 'a', 'c', 'hero']
>>> plan.changed
True
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class OrderPlan:
    """Outcome of planning a section order.

    Attributes
    ----------
    original : tuple[str, ...]
        Section ids in their pre-apply document order.
    order : tuple[str, ...]
        Section ids in their planned order; same members as ``original``.
    moved : tuple[str, ...]
        Reorderable ids that were positioned, in processing order.
    missing : tuple[str, ...]
        Requested ids with no matching section on the page.
    unanchored : tuple[str, ...]
        Ids left in place because no earlier entry of the requested order
        exists on the page to anchor them.
    """

    original: tuple[str, ...]
    order: tuple[str, ...]
    moved: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    unanchored: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        """Return ``True`` when applying the plan would move anything."""
        return self.order != self.original

    @property
    def displaced(self) -> tuple[str, ...]:
        """Ids whose slot differs between ``original`` and ``order``."""
        return tuple(
            after
            for before, after in zip(self.original, self.order, strict=True)
            if before != after
        )


def plan_section_order(
    current: cabc.Sequence[str],
    desired: cabc.Sequence[str],
    pinned: cabc.Iterable[str] = frozenset(),
) -> OrderPlan:
    """Plan how ``current`` must be permuted to follow ``desired``.

    Pinned ids keep their slots and take no part in the permutation. Each
    other id named in ``desired`` is placed immediately after the closest
    earlier movable entry of the desired list that exists on the page. The
    first such id goes to the front when it opens the desired list or follows
    a pinned section on the page; otherwise it has no anchor and stays where
    it is. Ids not mentioned in ``desired`` keep their relative order. The
    permuted ids then refill the non-pinned slots, so planning again from the
    planned order changes nothing.

    Parameters
    ----------
    current : Sequence[str]
        Unique section ids in document order.
    desired : Sequence[str]
        Persisted order; may name absent ids and may omit present ones.
        Repeated entries after the first are ignored.
    pinned : Iterable[str], optional
        Ids that must never change position.

    Returns
    -------
    OrderPlan
        The planned order together with per-id diagnostics.

    Raises
    ------
    ValueError
        If ``current`` contains duplicate ids.
    """
    original = tuple(current)
    present = set(original)
    if len(present) != len(original):
        msg = "Section ids in the current order must be unique."
        raise ValueError(msg)
    pinned_ids = frozenset(pinned)

    movable = [section_id for section_id in original if section_id not in pinned_ids]
    moved: list[str] = []
    missing: list[str] = []
    unanchored: list[str] = []
    anchor: str | None = None
    seen_present = False
    for index, section_id in enumerate(dict.fromkeys(desired)):
        if section_id in pinned_ids:
            seen_present = seen_present or section_id in present
            continue
        if section_id not in present:
            missing.append(section_id)
            continue
        if anchor is None and not (index == 0 or seen_present):
            unanchored.append(section_id)
        else:
            movable.remove(section_id)
            position = 0 if anchor is None else movable.index(anchor) + 1
            movable.insert(position, section_id)
            moved.append(section_id)
        anchor = section_id
        seen_present = True

    return OrderPlan(
        original=original,
        order=_fill_unpinned_slots(original, movable, pinned_ids),
        moved=tuple(moved),
        missing=tuple(missing),
        unanchored=tuple(unanchored),
    )


def _fill_unpinned_slots(
    original: tuple[str, ...], movable: list[str], pinned: frozenset[str]
) -> tuple[str, ...]:
    """Keep pinned ids in their slots and fill the others from ``movable``."""
    remaining = iter(movable)
    return tuple(
        section_id if section_id in pinned else next(remaining)
        for section_id in original
    )


__all__ = ["OrderPlan", "plan_section_order"]
