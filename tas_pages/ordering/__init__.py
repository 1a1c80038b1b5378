"""Apply the persisted section order to a page.

The pure planner (:func:`plan_section_order`) decides the final sequence of
section ids without touching any markup; :class:`SectionOrderApplier` fetches
the order from the Content API and realises the plan on a
:class:`~tas_pages.page.PageDocument`.
"""

from .applier import OrderResult, SectionOrderApplier
from .permutation import OrderPlan, plan_section_order

__all__ = [
    "OrderPlan",
    "OrderResult",
    "SectionOrderApplier",
    "plan_section_order",
]
