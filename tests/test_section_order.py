"""Unit tests for section order planning and application.

The planner tests run without any markup; the applier tests build small pages
with :class:`~tas_pages.page.PageDocument` and a stub Content API client, and
drive the coroutine entry point with :func:`asyncio.run`.
"""

from __future__ import annotations

import asyncio
import itertools
import typing as typ

import pytest

from tas_pages.ordering import SectionOrderApplier, plan_section_order
from tas_pages.page import PageDocument
from tas_pages.readiness import ReadySignal

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from conftest import StubContentClient


def _ids(document: PageDocument) -> list[str]:
    return [str(element["data-ve-section-id"]) for element in document.sections()]


def test_plan_keeps_pinned_section_at_its_index() -> None:
    """The pinned hero stays last while the others follow the persisted order."""
    plan = plan_section_order(
        ["a", "b", "c", "hero"], ["hero", "b", "a", "c"], {"hero"}
    )
    assert list(plan.order) == ["b", "a", "c", "hero"], (
        f"expected ['b', 'a', 'c', 'hero'], got {list(plan.order)!r}"
    )
    assert plan.moved == ("b", "a", "c"), f"unexpected moved ids {plan.moved!r}"


def _plan_cases() -> cabc.Iterator[tuple[tuple[str, ...], tuple[str, ...], set[str]]]:
    """Yield every small page, persisted order and pinned set combination."""
    page_ids = ("a", "b", "c", "p")
    order_ids = (*page_ids, "ghost")
    orders = [
        desired
        for size in range(len(page_ids))
        for desired in itertools.permutations(order_ids, size)
    ]
    pinned_sets = [
        set(chosen)
        for size in range(3)
        for chosen in itertools.combinations(page_ids, size)
    ]
    for current in itertools.permutations(page_ids):
        for desired in orders:
            for pinned in pinned_sets:
                yield current, desired, pinned


def test_plan_is_idempotent_for_every_small_page() -> None:
    """Planning again from any planned order keeps it, with pinned slots intact."""
    for current, desired, pinned in _plan_cases():
        first = plan_section_order(current, desired, pinned)
        second = plan_section_order(first.order, desired, pinned)
        case = f"current={current!r} desired={desired!r} pinned={sorted(pinned)!r}"
        assert second.order == first.order, (
            f"{case}: expected a stable order, got {first.order!r} "
            f"then {second.order!r}"
        )
        assert not second.displaced, f"{case}: expected the second plan to move nothing"
        assert sorted(first.order) == sorted(current), (
            f"{case}: expected a permutation of the page, got {first.order!r}"
        )
        for section_id in pinned:
            assert first.order.index(section_id) == current.index(section_id), (
                f"{case}: expected pinned {section_id!r} to keep its slot"
            )


@pytest.mark.parametrize(
    ("current", "desired", "pinned", "expected"),
    [
        (["a", "p", "b", "c"], ["b", "p", "c"], {"p"}, ["b", "p", "c", "a"]),
        (
            ["s2", "s0", "s4", "s3", "s1"],
            ["s3", "m2", "s0", "m1", "s4", "s1"],
            {"s0", "s4"},
            ["s3", "s0", "s4", "s1", "s2"],
        ),
        (["x", "a", "hero", "b", "y"], ["b", "hero", "a"], {"hero"}, None),
    ],
)
def test_plan_places_ids_after_pinned_sections_stably(
    current: list[str],
    desired: list[str],
    pinned: set[str],
    expected: list[str] | None,
) -> None:
    """Ids listed after a pinned section settle in one pass and stay put."""
    first = plan_section_order(current, desired, pinned)
    second = plan_section_order(first.order, desired, pinned)
    if expected is not None:
        assert list(first.order) == expected, (
            f"expected {expected!r}, got {list(first.order)!r}"
        )
    assert second.order == first.order, (
        f"expected a stable order, got {first.order!r} then {second.order!r}"
    )
    assert not second.changed, "expected the second plan to be a no-op"


@pytest.mark.parametrize(
    ("current", "desired", "pinned"),
    [
        (["landing", "a", "b", "c"], ["c", "b", "a", "landing"], {"landing"}),
        (["a", "landing", "b"], ["b", "a"], {"landing"}),
        (["a", "p1", "b", "p2", "c"], ["p2", "c", "p1", "b", "a"], {"p1", "p2"}),
        (["a", "b"], ["b", "a"], {"absent"}),
    ],
)
def test_plan_never_moves_pinned_sections(
    current: list[str], desired: list[str], pinned: set[str]
) -> None:
    """Every pinned id keeps its pre-apply index whatever the order says."""
    plan = plan_section_order(current, desired, pinned)
    for section_id in pinned & set(current):
        before = current.index(section_id)
        after = plan.order.index(section_id)
        assert before == after, (
            f"expected pinned {section_id!r} to stay at {before}, moved to {after}"
        )
    assert sorted(plan.order) == sorted(current), "expected a permutation of the page"


def test_plan_skips_missing_ids_and_places_the_rest() -> None:
    """An id with no section is reported while the others are still ordered."""
    plan = plan_section_order(["a", "b", "c"], ["c", "ghost", "b", "a"])
    assert list(plan.order) == ["c", "b", "a"], (
        f"expected ['c', 'b', 'a'], got {list(plan.order)!r}"
    )
    assert plan.missing == ("ghost",), f"expected ghost to be missing, got {plan.missing!r}"


def test_plan_leaves_unanchored_ids_in_place() -> None:
    """Without any earlier entry on the page an id is skipped, not guessed."""
    plan = plan_section_order(["x", "a", "b"], ["ghost", "a", "b"])
    assert plan.unanchored == ("a",), f"expected 'a' unanchored, got {plan.unanchored!r}"
    assert list(plan.order) == ["x", "a", "b"], (
        f"expected order to be unchanged, got {list(plan.order)!r}"
    )


def test_plan_ignores_repeated_entries() -> None:
    """Duplicate ids in the persisted order count once, at their first position."""
    plan = plan_section_order(["a", "b"], ["b", "a", "b"])
    assert list(plan.order) == ["b", "a"], f"unexpected order {list(plan.order)!r}"


def test_plan_rejects_duplicate_current_ids() -> None:
    """The page-side ids must be unique for a permutation to be defined."""
    with pytest.raises(ValueError, match="unique"):
        plan_section_order(["a", "a"], ["a"])


def test_applier_reorders_sections_around_pinned_section(
    stub_client_factory: type[StubContentClient],
    sections_page: cabc.Callable[..., str],
) -> None:
    """The applier realises the planned order on the page."""
    document = PageDocument.from_html(sections_page("a", "b", "c", "hero"))
    client = stub_client_factory(order=["hero", "b", "a", "c"])
    applier = SectionOrderApplier(document, client, pinned={"hero"})

    result = asyncio.run(applier.initialize())

    assert _ids(document) == ["b", "a", "c", "hero"], (
        f"expected ['b', 'a', 'c', 'hero'], got {_ids(document)!r}"
    )
    assert result is not None, "expected an OrderResult"
    assert result.reordered_count == 2, (
        f"expected 2 displaced sections, got {result.reordered_count}"
    )
    assert client.calls == [("section-order", "index")], (
        f"expected one lookup for the index page, got {client.calls!r}"
    )


def test_applier_applying_twice_matches_applying_once(
    stub_client_factory: type[StubContentClient],
    sections_page: cabc.Callable[..., str],
) -> None:
    """Re-applying the same order leaves the markup byte-identical."""
    document = PageDocument.from_html(sections_page("a", "b", "c", "d"))
    applier = SectionOrderApplier(document, stub_client_factory())
    applier.apply_order(["d", "b", "a"])
    once = document.render()
    applier.apply_order(["d", "b", "a"])
    assert document.render() == once, "expected the second pass to change nothing"
    assert _ids(document) == ["d", "b", "a", "c"], f"unexpected order {_ids(document)!r}"


def test_applier_reports_no_reordering_for_current_order(
    stub_client_factory: type[StubContentClient],
    sections_page: cabc.Callable[..., str],
) -> None:
    """A page already in the saved order reports zero reordered sections."""
    document = PageDocument.from_html(sections_page("a", "b", "c"))
    applier = SectionOrderApplier(document, stub_client_factory())

    result = applier.apply_order(["a", "b", "c"])

    assert result is not None, "expected an OrderResult"
    assert not result.changed, "expected the order to be current already"
    assert result.reordered_count == 0, (
        f"expected no reordered sections, got {result.reordered_count}"
    )


def test_applier_fetch_failure_leaves_page_untouched(
    stub_client_factory: type[StubContentClient],
    sections_page: cabc.Callable[..., str],
) -> None:
    """A failing Content API degrades to the server-rendered order."""
    document = PageDocument.from_html(sections_page("a", "b", "c"))
    before = document.render()
    applier = SectionOrderApplier(document, stub_client_factory(error="boom"))

    result = asyncio.run(applier.initialize())

    assert result is None, "expected no result when the order cannot be fetched"
    assert document.render() == before, "expected the page to be byte-identical"


def test_applier_second_initialize_is_a_no_op(
    stub_client_factory: type[StubContentClient],
    sections_page: cabc.Callable[..., str],
) -> None:
    """Duplicate initialization neither refetches nor reapplies."""
    document = PageDocument.from_html(sections_page("a", "b"))
    client = stub_client_factory(order=["b", "a"])
    applier = SectionOrderApplier(document, client)

    async def _twice() -> tuple[object, object]:
        first = await applier.initialize()
        second = await applier.initialize()
        return first, second

    first, second = asyncio.run(_twice())

    assert first is not None, "expected the first call to apply the order"
    assert second is None, "expected the second call to be a no-op"
    assert len(client.calls) == 1, f"expected one fetch, got {client.calls!r}"


def test_applier_without_main_container_aborts(
    stub_client_factory: type[StubContentClient],
) -> None:
    """Ordering needs a <main> element; without one nothing moves."""
    html = (
        '<body><div data-ve-section-id="a"></div>'
        '<div data-ve-section-id="b"></div></body>'
    )
    document = PageDocument.from_html(html)
    applier = SectionOrderApplier(document, stub_client_factory(order=["b", "a"]))

    assert asyncio.run(applier.initialize()) is None, "expected the apply to abort"
    assert document.render() == html, "expected the page to be untouched"


def test_applier_keeps_non_section_nodes_in_their_slots(
    stub_client_factory: type[StubContentClient],
) -> None:
    """Only section elements swap places; separators and intros stay put."""
    document = PageDocument.from_html(
        '<main><p id="intro">Hi</p><article data-ve-section-id="a"></article>'
        '<hr/><article data-ve-section-id="b"></article></main>'
    )
    SectionOrderApplier(document, stub_client_factory()).apply_order(["b", "a"])

    main = document.container
    assert main is not None, "expected the page to keep its <main>"
    layout = [
        child.get("id") or child.get("data-ve-section-id") or child.name
        for child in main.find_all(True, recursive=False)
    ]
    assert layout == ["intro", "b", "hr", "a"], f"unexpected layout {layout!r}"


def test_applier_moves_sections_between_containers(
    stub_client_factory: type[StubContentClient],
) -> None:
    """Sections nested in position containers are reordered across them."""
    document = PageDocument.from_html(
        '<main><section id="top"><article data-ve-section-id="a"></article></section>'
        '<section id="bottom"><article data-ve-section-id="b"></article></section>'
        "</main>"
    )
    SectionOrderApplier(document, stub_client_factory()).apply_order(["b", "a"])

    top = document.soup.find(id="top")
    bottom = document.soup.find(id="bottom")
    assert top is not None and bottom is not None, "expected both containers"
    assert top.article["data-ve-section-id"] == "b", "expected 'b' in the top slot"
    assert bottom.article["data-ve-section-id"] == "a", "expected 'a' in the bottom slot"


def test_applier_orders_only_first_of_duplicate_ids(
    stub_client_factory: type[StubContentClient],
) -> None:
    """A repeated id is ordered once; the copy keeps its position."""
    document = PageDocument.from_html(
        '<main><article data-ve-section-id="a" class="first"></article>'
        '<article data-ve-section-id="b"></article>'
        '<article data-ve-section-id="a" class="copy"></article></main>'
    )
    SectionOrderApplier(document, stub_client_factory()).apply_order(["b", "a"])

    main = document.container
    assert main is not None, "expected the page to keep its <main>"
    children = main.find_all("article", recursive=False)
    labels = [
        " ".join(child.get("class") or []) or child["data-ve-section-id"]
        for child in children
    ]
    assert labels == ["b", "first", "copy"], f"unexpected layout {labels!r}"


def test_applier_waits_for_dynamic_sections(
    stub_client_factory: type[StubContentClient],
) -> None:
    """Ordering runs only after the loader signals that sections exist."""
    document = PageDocument.from_html("<main></main>")
    signal = ReadySignal("sections")
    applier = SectionOrderApplier(
        document,
        stub_client_factory(order=["b", "a"]),
        sections_ready=signal,
        wait_timeout=5.0,
    )

    async def _scenario() -> object:
        task = asyncio.create_task(applier.initialize())
        await asyncio.sleep(0)
        main = document.container
        assert main is not None, "expected a <main> element"
        for node in document.fragment(
            '<article data-ve-section-id="a"></article>'
            '<article data-ve-section-id="b"></article>'
        ):
            main.append(node)
        signal.resolve()
        return await task

    result = asyncio.run(_scenario())

    assert result is not None, "expected the order to be applied after the signal"
    assert _ids(document) == ["b", "a"], f"unexpected order {_ids(document)!r}"


def test_applier_proceeds_after_wait_timeout(
    stub_client_factory: type[StubContentClient],
) -> None:
    """A loader that never signals cannot stall ordering past the timeout."""
    document = PageDocument.from_html("<main></main>")
    client = stub_client_factory(order=["a"])
    applier = SectionOrderApplier(
        document, client, sections_ready=ReadySignal("never"), wait_timeout=0.05
    )

    result = asyncio.run(asyncio.wait_for(applier.initialize(), timeout=2.0))

    assert result is not None, "expected ordering to run after the timeout"
    assert result.missing == ("a",), f"expected 'a' to be missing, got {result.missing!r}"
    assert client.calls, "expected the order to be fetched after the timeout"
