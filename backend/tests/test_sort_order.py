import asyncio

import pytest
from pydantic import BaseModel

from arkom.services.sort_order import (
    OTHER_CATEGORY_ID,
    REORDER_FAILED_MESSAGE,
    SortableList,
    SortOrderReconciliationError,
    SortOrderUpdate,
    move_item,
    plan_sort_order_updates,
    reconcile_sort_order,
)


class Item(BaseModel):
    id: int | str
    name: str
    sort_order: int


def items(*names: str) -> list[Item]:
    return [Item(id=index + 1, name=name, sort_order=index) for index, name in enumerate(names)]


class RecordingStore:
    """Fake sort-order writer that records calls and can fail on a given id."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.calls: list[tuple[int, int]] = []
        self.fail_on = fail_on
        self.in_flight = 0
        self.max_in_flight = 0

    async def update(self, item_id, sort_order: int) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if item_id == self.fail_on:
                raise RuntimeError("store unavailable")
            self.calls.append((item_id, sort_order))
        finally:
            self.in_flight -= 1


def test_move_item_removes_then_inserts() -> None:
    before = items("a", "b", "c", "d")

    moved_down = move_item(before, 0, 2)
    assert [item.name for item in moved_down] == ["b", "c", "a", "d"]

    moved_up = move_item(before, 3, 1)
    assert [item.name for item in moved_up] == ["a", "d", "b", "c"]

    assert [item.name for item in before] == ["a", "b", "c", "d"]


def test_move_item_same_index_is_identity_and_bad_index_raises() -> None:
    before = items("a", "b")
    assert move_item(before, 1, 1) == before
    with pytest.raises(IndexError):
        move_item(before, 0, 5)


def test_plan_only_writes_items_whose_position_changed() -> None:
    ordered = move_item(items("a", "b", "c", "d"), 0, 2)

    assert plan_sort_order_updates(ordered) == [
        SortOrderUpdate(id=2, sort_order=0),
        SortOrderUpdate(id=3, sort_order=1),
        SortOrderUpdate(id=1, sort_order=2),
    ]
    assert plan_sort_order_updates(items("a", "b", "c")) == []


def test_plan_skips_other_and_offsets_positions() -> None:
    ordered = [
        Item(id=OTHER_CATEGORY_ID, name="Other", sort_order=0),
        Item(id=7, name="Paintings", sort_order=2),
        Item(id=5, name="Sketches", sort_order=1),
    ]

    assert plan_sort_order_updates(ordered, start=1) == [
        SortOrderUpdate(id=7, sort_order=1),
        SortOrderUpdate(id=5, sort_order=2),
    ]


@pytest.mark.asyncio
async def test_reconcile_writes_one_at_a_time_in_position_order() -> None:
    store = RecordingStore()
    ordered = move_item(items("a", "b", "c", "d"), 3, 0)

    written = await reconcile_sort_order(ordered, store.update)

    assert written == 4
    assert store.calls == [(4, 0), (1, 1), (2, 2), (3, 3)]
    assert store.max_in_flight == 1


@pytest.mark.asyncio
async def test_reconcile_stops_at_first_failure() -> None:
    store = RecordingStore(fail_on=1)
    ordered = move_item(items("a", "b", "c", "d"), 3, 0)

    with pytest.raises(SortOrderReconciliationError) as exc_info:
        await reconcile_sort_order(ordered, store.update)

    assert exc_info.value.completed == 1
    assert exc_info.value.update == SortOrderUpdate(id=1, sort_order=1)
    assert store.calls == [(4, 0)]


class FakeBackend:
    def __init__(self, rows: list[Item], fail_on: int | None = None) -> None:
        self.rows = {row.id: row for row in rows}
        self.store = RecordingStore(fail_on=fail_on)
        self.loads = 0

    async def load(self) -> list[Item]:
        self.loads += 1
        return sorted(self.rows.values(), key=lambda row: row.sort_order)

    async def update(self, item_id, sort_order: int) -> None:
        await self.store.update(item_id, sort_order)
        self.rows[item_id] = self.rows[item_id].model_copy(update={"sort_order": sort_order})


@pytest.mark.asyncio
async def test_drop_persists_and_displays_new_positions() -> None:
    backend = FakeBackend(items("a", "b", "c"))
    notices: list[str] = []
    sortable = SortableList(load=backend.load, update=backend.update, notify=notices.append)
    await sortable.reload()

    assert sortable.start_drag(2)
    assert await sortable.drop(0) is True

    assert [(item.name, item.sort_order) for item in sortable.items] == [
        ("c", 0),
        ("a", 1),
        ("b", 2),
    ]
    assert [row.name for row in await backend.load()] == ["c", "a", "b"]
    assert notices == []
    assert sortable.dragged_index is None


@pytest.mark.asyncio
async def test_failed_reorder_notifies_once_and_reloads_server_state() -> None:
    backend = FakeBackend(items("a", "b", "c"), fail_on=1)
    notices: list[str] = []
    sortable = SortableList(load=backend.load, update=backend.update, notify=notices.append)
    await sortable.reload()

    sortable.start_drag(2)
    assert await sortable.drop(0) is False

    assert notices == [REORDER_FAILED_MESSAGE]
    assert backend.loads == 2
    # The first write landed before the failure; the display mirrors the store.
    assert [(item.name, item.sort_order) for item in sortable.items] == [
        ("a", 0),
        ("c", 0),
        ("b", 1),
    ]


@pytest.mark.asyncio
async def test_drop_on_same_index_does_nothing() -> None:
    backend = FakeBackend(items("a", "b"))
    sortable = SortableList(load=backend.load, update=backend.update)
    await sortable.reload()

    sortable.start_drag(1)
    assert await sortable.drop(1) is False
    assert backend.store.calls == []
    assert sortable.dragged_index is None


@pytest.mark.asyncio
async def test_item_being_edited_cannot_be_dragged() -> None:
    backend = FakeBackend(items("a", "b"))
    sortable = SortableList(load=backend.load, update=backend.update)
    await sortable.reload()

    sortable.editing_id = 1
    assert sortable.start_drag(0) is False
    assert sortable.start_drag(1) is True


@pytest.mark.asyncio
async def test_other_is_never_dragged_or_dropped_onto() -> None:
    other = Item(id=OTHER_CATEGORY_ID, name="Other", sort_order=0)
    rows = [Item(id=5, name="Sketches", sort_order=1), Item(id=7, name="Paintings", sort_order=2)]
    backend = FakeBackend(rows)

    async def load() -> list[Item]:
        return [other, *await backend.load()]

    sortable = SortableList(load=load, update=backend.update, start=1)
    await sortable.reload()

    assert sortable.start_drag(0) is False

    sortable.start_drag(2)
    assert await sortable.drop(0) is False
    assert backend.store.calls == []

    sortable.start_drag(2)
    assert await sortable.drop(1) is True
    assert backend.store.calls == [(7, 1), (5, 2)]
    assert [item.id for item in sortable.items] == [OTHER_CATEGORY_ID, 7, 5]


@pytest.mark.asyncio
async def test_reorder_by_ids_requires_every_item() -> None:
    backend = FakeBackend(items("a", "b", "c"))
    sortable = SortableList(load=backend.load, update=backend.update)
    await sortable.reload()

    with pytest.raises(ValueError):
        await sortable.reorder([1, 2])

    assert await sortable.reorder([3, 2, 1]) is True
    assert [item.name for item in sortable.items] == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_failed_reorder_with_failed_reload_restores_previous_list() -> None:
    backend = FakeBackend(items("a", "b", "c"), fail_on=1)
    load_rows = backend.load

    async def load_once() -> list[Item]:
        if backend.loads >= 1:
            raise RuntimeError("store unavailable")
        return await load_rows()

    notices: list[str] = []
    sortable = SortableList(load=load_once, update=backend.update, notify=notices.append)
    assert await sortable.reload()

    sortable.start_drag(2)
    assert await sortable.drop(0) is False

    assert notices == [REORDER_FAILED_MESSAGE]
    assert [(item.id, item.sort_order) for item in sortable.items] == [(1, 0), (2, 1), (3, 2)]
