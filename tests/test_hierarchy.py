from __future__ import annotations

import asyncio
import logging

import pytest

from fixtures import ControlledCatalog, StaticCatalog, document, folder, settle
from quizgen.errors import StateViolation, ValidationError
from quizgen.hierarchy import LevelStatus, ResourceHierarchyResolver


def _tree():
    return {
        None: [folder("class-10", "Class 10"), folder("class-11", "Class 11")],
        "class-10": [folder("phy-10", "Physics"), folder("chem-10", "Chemistry")],
        "class-11": [folder("phy-11", "Physics XI"), folder("bio-11", "Biology")],
        "phy-10": [document("ch1", "Light.pdf"), document("ch2", "Motion.pdf")],
        "chem-10": [document("ch3", "Acids.pdf")],
        "phy-11": [document("ch4", "Units.pdf")],
    }


def _ids(cache):
    return [node.id for node in cache.items]


def test_root_listing_loads_on_creation() -> None:
    async def scenario():
        catalog = StaticCatalog(_tree())
        resolver = ResourceHierarchyResolver(catalog)
        assert resolver.cache(0).status is LevelStatus.LOADING
        await resolver.wait_idle()
        return catalog, resolver

    catalog, resolver = asyncio.run(scenario())
    assert catalog.calls == [None]
    assert resolver.cache(0).status is LevelStatus.READY
    assert _ids(resolver.cache(0)) == ["class-10", "class-11"]
    assert resolver.selection == (None, None, None)


def test_selecting_a_level_clears_every_deeper_level() -> None:
    async def scenario():
        resolver = ResourceHierarchyResolver(StaticCatalog(_tree()))
        await resolver.wait_idle()
        resolver.select_level(0, "class-10")
        await resolver.wait_idle()
        resolver.select_level(1, "phy-10")
        await resolver.wait_idle()
        resolver.select_level(2, "ch1")
        assert resolver.is_complete()

        resolver.select_level(0, "class-11")
        snapshot = (resolver.selection, resolver.cache(1), resolver.cache(2))
        await resolver.wait_idle()
        return resolver, snapshot

    resolver, (selection, subjects, chapters) = asyncio.run(scenario())
    assert selection == ("class-11", None, None)
    assert subjects.status is LevelStatus.LOADING
    assert subjects.items == ()
    assert chapters.status is LevelStatus.IDLE
    assert chapters.items == ()
    assert _ids(resolver.cache(1)) == ["phy-11", "bio-11"]
    assert not resolver.is_complete()


def test_reselecting_same_node_still_clears_deeper_levels() -> None:
    async def scenario():
        catalog = StaticCatalog(_tree())
        resolver = ResourceHierarchyResolver(catalog)
        await resolver.wait_idle()
        resolver.select_level(0, "class-10")
        await resolver.wait_idle()
        resolver.select_level(1, "phy-10")
        await resolver.wait_idle()
        resolver.select_level(1, "phy-10")
        chapters = resolver.cache(2)
        await resolver.wait_idle()
        return catalog, resolver, chapters

    catalog, resolver, chapters = asyncio.run(scenario())
    assert chapters.status is LevelStatus.LOADING
    assert chapters.items == ()
    assert catalog.calls.count("phy-10") == 2
    assert resolver.selection == ("class-10", "phy-10", None)
    assert _ids(resolver.cache(2)) == ["ch1", "ch2"]


def test_superseded_subject_fetch_never_overwrites_newer_selection() -> None:
    async def scenario(resolve_order):
        catalog = ControlledCatalog()
        resolver = ResourceHierarchyResolver(catalog)
        await settle()
        catalog.take(None).resolve(
            [folder("class-10"), folder("class-11")]
        )
        await settle()

        resolver.select_level(0, "class-10")
        await settle()
        resolver.select_level(0, "class-11")
        await settle()
        pending = {
            "class-10": catalog.take("class-10"),
            "class-11": catalog.take("class-11"),
        }
        replies = {
            "class-10": [folder("phy-10"), folder("chem-10")],
            "class-11": [folder("phy-11"), folder("bio-11")],
        }
        for key in resolve_order:
            pending[key].resolve(replies[key])
            await settle()
        await resolver.wait_idle()
        return resolver

    for order in (("class-11", "class-10"), ("class-10", "class-11")):
        resolver = asyncio.run(scenario(order))
        assert resolver.cache(1).status is LevelStatus.READY
        assert _ids(resolver.cache(1)) == ["phy-11", "bio-11"]


def test_stale_failure_does_not_mark_newer_level_as_error() -> None:
    async def scenario():
        catalog = ControlledCatalog()
        resolver = ResourceHierarchyResolver(catalog)
        await settle()
        catalog.take(None).resolve([folder("a"), folder("b")])
        await settle()
        resolver.select_level(0, "a")
        await settle()
        resolver.select_level(0, "b")
        await settle()
        catalog.take("b").resolve([folder("b-sub")])
        await settle()
        catalog.take("a").fail("timeout")
        await resolver.wait_idle()
        return resolver

    resolver = asyncio.run(scenario())
    assert resolver.cache(1).status is LevelStatus.READY
    assert resolver.cache(1).error is None
    assert _ids(resolver.cache(1)) == ["b-sub"]


def test_inflight_chapter_fetch_is_dropped_when_ancestor_changes() -> None:
    async def scenario():
        catalog = ControlledCatalog()
        resolver = ResourceHierarchyResolver(catalog)
        await settle()
        catalog.take(None).resolve([folder("a"), folder("b")])
        await settle()
        resolver.select_level(0, "a")
        await settle()
        catalog.take("a").resolve([folder("a-phy")])
        await settle()
        resolver.select_level(1, "a-phy")
        await settle()
        resolver.select_level(0, "b")
        await settle()
        catalog.take("a-phy").resolve([document("late-chapter")])
        await settle()
        catalog.take("b").resolve([folder("b-phy")])
        await resolver.wait_idle()
        return resolver

    resolver = asyncio.run(scenario())
    assert resolver.cache(2).status is LevelStatus.IDLE
    assert resolver.cache(2).items == ()
    assert resolver.selection == ("b", None, None)
    assert _ids(resolver.cache(1)) == ["b-phy"]


def test_levels_filter_by_node_kind_and_document_type() -> None:
    tree = {
        None: [folder("c1"), document("stray.pdf")],
        "c1": [folder("s1"), document("notes", mime_type="text/plain")],
        "s1": [
            document("ch1"),
            document("ch2", mime_type="application/msword"),
            folder("appendix"),
        ],
    }

    async def scenario():
        resolver = ResourceHierarchyResolver(StaticCatalog(tree))
        await resolver.wait_idle()
        resolver.select_level(0, "c1")
        await resolver.wait_idle()
        resolver.select_level(1, "s1")
        await resolver.wait_idle()
        return resolver

    resolver = asyncio.run(scenario())
    assert _ids(resolver.cache(0)) == ["c1"]
    assert _ids(resolver.cache(1)) == ["s1"]
    assert _ids(resolver.cache(2)) == ["ch1"]


def test_failed_listing_is_isolated_and_retryable() -> None:
    catalog = StaticCatalog(_tree(), failures={"class-10": "Drive unavailable"})

    async def scenario():
        resolver = ResourceHierarchyResolver(catalog)
        await resolver.wait_idle()
        resolver.select_level(0, "class-10")
        await resolver.wait_idle()
        failed = resolver.cache(1)
        root = resolver.cache(0)
        catalog.failures.clear()
        resolver.select_level(0, "class-10")
        await resolver.wait_idle()
        return resolver, failed, root

    resolver, failed, root = asyncio.run(scenario())
    assert failed.status is LevelStatus.ERROR
    assert failed.error == "Drive unavailable"
    assert root.status is LevelStatus.READY
    assert _ids(root) == ["class-10", "class-11"]
    assert resolver.selection[0] == "class-10"
    assert resolver.cache(1).status is LevelStatus.READY
    assert _ids(resolver.cache(1)) == ["phy-10", "chem-10"]


def test_root_failure_can_be_refreshed() -> None:
    catalog = StaticCatalog(_tree(), failures={None: "offline"})

    async def scenario():
        resolver = ResourceHierarchyResolver(catalog)
        await resolver.wait_idle()
        status = resolver.cache(0).status
        catalog.failures.clear()
        resolver.refresh_root()
        await resolver.wait_idle()
        return resolver, status

    resolver, status = asyncio.run(scenario())
    assert status is LevelStatus.ERROR
    assert resolver.cache(0).status is LevelStatus.READY


def test_selecting_below_an_unselected_level_is_a_violation() -> None:
    async def scenario():
        resolver = ResourceHierarchyResolver(StaticCatalog(_tree()))
        await resolver.wait_idle()
        with pytest.raises(StateViolation):
            resolver.select_level(1, "phy-10")
        with pytest.raises(StateViolation):
            resolver.select_level(3, "x")
        return resolver

    resolver = asyncio.run(scenario())
    assert resolver.selection == (None, None, None)


def test_lenient_resolver_ignores_out_of_order_selection(caplog) -> None:
    async def scenario():
        resolver = ResourceHierarchyResolver(
            StaticCatalog(_tree()), strict=False
        )
        await resolver.wait_idle()
        resolver.select_level(2, "ch1")
        return resolver

    with caplog.at_level(logging.WARNING, logger="quizgen.hierarchy"):
        resolver = asyncio.run(scenario())
    assert resolver.selection == (None, None, None)
    assert "Ignored out-of-order operation" in caplog.text


def test_is_complete_tracks_every_slot() -> None:
    async def scenario():
        resolver = ResourceHierarchyResolver(StaticCatalog(_tree()))
        await resolver.wait_idle()
        observed = [resolver.is_complete()]
        for level, node in ((0, "class-10"), (1, "phy-10"), (2, "ch2")):
            resolver.select_level(level, node)
            await resolver.wait_idle()
            observed.append(resolver.is_complete())
        resolver.select_level(1, "chem-10")
        observed.append(resolver.is_complete())
        await resolver.wait_idle()
        return observed

    assert asyncio.run(scenario()) == [False, False, False, True, False]


def test_catalog_request_uses_selected_names() -> None:
    async def scenario():
        resolver = ResourceHierarchyResolver(StaticCatalog(_tree()))
        await resolver.wait_idle()
        with pytest.raises(ValidationError):
            resolver.catalog_request(num_questions=5)
        resolver.select_level(0, "class-10")
        await resolver.wait_idle()
        resolver.select_level(1, "phy-10")
        await resolver.wait_idle()
        resolver.select_level(2, "ch2")
        return resolver.catalog_request(num_questions=4, difficulty="hard")

    request = asyncio.run(scenario())
    assert request.to_payload() == {
        "fileId": "ch2",
        "numQuestions": 4,
        "pace": "average",
        "difficulty": "hard",
        "studentClass": "Class 10",
        "subject": "Physics",
        "chapter": "Motion.pdf",
    }


def test_unexpected_listing_error_marks_level_failed() -> None:
    async def scenario():
        catalog = ControlledCatalog()
        resolver = ResourceHierarchyResolver(catalog)
        await settle()
        catalog.take(None).resolve([folder("a"), folder("b")])
        await settle()
        resolver.select_level(0, "a")
        await settle()
        catalog.take("a").crash(RuntimeError("decoder exploded"))
        await resolver.wait_idle()
        failed = resolver.cache(1)
        resolver.select_level(0, "a")
        await settle()
        catalog.take("a").resolve([folder("a-sub")])
        await resolver.wait_idle()
        return resolver, failed

    resolver, failed = asyncio.run(scenario())
    assert failed.status is LevelStatus.ERROR
    assert "RuntimeError" in failed.error
    assert resolver.cache(1).status is LevelStatus.READY
    assert _ids(resolver.cache(1)) == ["a-sub"]


def test_stale_unexpected_error_is_ignored() -> None:
    async def scenario():
        catalog = ControlledCatalog()
        resolver = ResourceHierarchyResolver(catalog)
        await settle()
        catalog.take(None).resolve([folder("a"), folder("b")])
        await settle()
        resolver.select_level(0, "a")
        await settle()
        resolver.select_level(0, "b")
        await settle()
        catalog.take("b").resolve([folder("b-sub")])
        await settle()
        catalog.take("a").crash(KeyError("id"))
        await resolver.wait_idle()
        return resolver

    resolver = asyncio.run(scenario())
    assert resolver.cache(1).status is LevelStatus.READY
    assert _ids(resolver.cache(1)) == ["b-sub"]
