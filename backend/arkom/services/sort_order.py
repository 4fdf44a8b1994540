"""
Sort-order reconciliation for sibling lists (catalogues, categories of one
catalogue, filters, options of one filter, an artist's service categories).

Reordering is split in two phases:

1. ``move_item`` applies the drag locally (remove at the dragged index,
   insert at the drop index).
2. ``reconcile_sort_order`` persists the new order by writing ``sort_order``
   for every item whose stored value differs from its position. Writes are
   awaited one at a time in ascending position order and the run stops at
   the first failure.

``SortableList`` ties both phases to a store: it keeps the displayed list,
refuses drags that would interrupt an inline rename, and reloads the
authoritative list after a failed run so the display never keeps a partial
reorder.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Client-side catch-all shelf; never persisted and never reordered.
OTHER_CATEGORY_ID = "other"

ItemT = TypeVar("ItemT", bound=BaseModel)

SortOrderWriter = Callable[[Any, int], Awaitable[object]]
ListLoader = Callable[[], Awaitable[Sequence[ItemT]]]
Notifier = Callable[[str], None]

REORDER_FAILED_MESSAGE = "Failed to update sort order. Reloading..."


@dataclass(frozen=True)
class SortOrderUpdate:
    id: Any
    sort_order: int


class SortOrderReconciliationError(RuntimeError):
    def __init__(self, update: SortOrderUpdate, completed: int) -> None:
        super().__init__(
            f"Failed to persist sort_order={update.sort_order} for item {update.id!r} "
            f"after {completed} successful write(s)"
        )
        self.update = update
        self.completed = completed


def is_pseudo_item(item: Any) -> bool:
    return getattr(item, "id", None) == OTHER_CATEGORY_ID


def move_item(items: Sequence[ItemT], dragged_index: int, drop_index: int) -> list[ItemT]:
    reordered = list(items)
    if dragged_index == drop_index:
        return reordered
    size = len(reordered)
    if not (0 <= dragged_index < size and 0 <= drop_index < size):
        raise IndexError(
            f"Cannot move item {dragged_index} to {drop_index} in a list of {size}"
        )
    dragged = reordered.pop(dragged_index)
    reordered.insert(drop_index, dragged)
    return reordered


def plan_sort_order_updates(
    ordered_items: Sequence[Any],
    *,
    start: int = 0,
) -> list[SortOrderUpdate]:
    """Return the writes needed so each persisted item's sort_order equals its position.

    Pseudo items are dropped before positions are counted; ``start`` offsets
    the first persisted position (1 when "Other" occupies slot 0).
    """
    persisted = [item for item in ordered_items if not is_pseudo_item(item)]
    return [
        SortOrderUpdate(id=item.id, sort_order=start + index)
        for index, item in enumerate(persisted)
        if item.sort_order != start + index
    ]


async def reconcile_sort_order(
    ordered_items: Sequence[Any],
    update: SortOrderWriter,
    *,
    start: int = 0,
) -> int:
    completed = 0
    for planned in plan_sort_order_updates(ordered_items, start=start):
        try:
            await update(planned.id, planned.sort_order)
        except Exception as exc:
            raise SortOrderReconciliationError(planned, completed) from exc
        completed += 1
    return completed


def log_notifier(message: str) -> None:
    logger.warning("User notice: %s", message)


class SortableList(Generic[ItemT]):
    """Displayed state of one sibling scope plus its drag/persist/revert cycle."""

    def __init__(
        self,
        *,
        load: ListLoader[ItemT],
        update: SortOrderWriter,
        notify: Notifier | None = None,
        start: int = 0,
        label: str = "items",
    ) -> None:
        self._load = load
        self._update = update
        self._notify = notify or log_notifier
        self._start = start
        self.label = label
        self.items: list[ItemT] = []
        self.dragged_index: int | None = None
        self.editing_id: Any = None

    async def reload(self) -> bool:
        try:
            loaded = await self._load()
        except Exception:
            logger.exception("Failed to load %s", self.label)
            return False
        self.items = list(loaded)
        return True

    def can_drag(self, index: int) -> bool:
        if not 0 <= index < len(self.items):
            return False
        item = self.items[index]
        if is_pseudo_item(item):
            return False
        return self.editing_id is None or item.id != self.editing_id

    def start_drag(self, index: int) -> bool:
        if not self.can_drag(index):
            return False
        self.dragged_index = index
        return True

    def cancel_drag(self) -> None:
        self.dragged_index = None

    async def drop(self, drop_index: int) -> bool:
        """Finish a drag at ``drop_index``; True when a new order was persisted."""
        dragged_index = self.dragged_index
        self.dragged_index = None
        if dragged_index is None or dragged_index == drop_index:
            return False
        if not 0 <= drop_index < len(self.items) or is_pseudo_item(self.items[drop_index]):
            return False
        return await self.apply_order(move_item(self.items, dragged_index, drop_index))

    async def reorder(self, ordered_ids: Sequence[Any]) -> bool:
        """Persist an order given as ids (keyboard moves, bulk API calls)."""
        by_id = {item.id: item for item in self.items}
        if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
            raise ValueError(f"Reorder of {self.label} must list every item exactly once")
        return await self.apply_order([by_id[item_id] for item_id in ordered_ids])

    async def apply_order(self, ordered_items: list[ItemT]) -> bool:
        previous = self.items
        self.items = ordered_items
        try:
            written = await reconcile_sort_order(ordered_items, self._update, start=self._start)
        except SortOrderReconciliationError as exc:
            logger.warning("Reordering %s failed: %s", self.label, exc)
            self._notify(REORDER_FAILED_MESSAGE)
            if not await self.reload():
                # Never leave the half-applied order on display.
                self.items = previous
            return False

        logger.debug("Reordered %s with %d write(s)", self.label, written)
        self.items = self._with_positions(ordered_items)
        return True

    def _with_positions(self, ordered_items: list[ItemT]) -> list[ItemT]:
        result: list[ItemT] = []
        position = self._start
        for item in ordered_items:
            if is_pseudo_item(item):
                result.append(item)
                continue
            if item.sort_order != position:
                item = item.model_copy(update={"sort_order": position})
            result.append(item)
            position += 1
        return result
