"""
Admin-side controllers for the search taxonomy and an artist's service shelves.

Each manager owns the displayed list for one sibling scope (through
``SortableList``) and performs CRUD through ``SearchCategoryClient``.
Failures are logged, reported once through ``notify`` and leave the last
known-good list in place; failed reorders reload from the server.
"""

from __future__ import annotations

import logging
from typing import Any

from arkom.schemas.search_categories import (
    CatalogueItem,
    CategoryItem,
    SubCategoryFilterItem,
    SubCategoryFilterOptionItem,
)
from arkom.schemas.service_categories import ServiceCategoryItem
from arkom.services.search_category_client import SearchCategoryClient, SearchCategoryClientError
from arkom.services.sort_order import (
    OTHER_CATEGORY_ID,
    Notifier,
    SortableList,
    log_notifier,
    move_item,
)

logger = logging.getLogger(__name__)

ASSIGN_FAILED_MESSAGE = "Failed to assign filter. It may already be assigned."


class _Manager:
    entity = "item"

    def __init__(self, client: SearchCategoryClient, *, notify: Notifier | None = None) -> None:
        self.client = client
        self.notify = notify or log_notifier

    async def _attempt(self, action: str, call) -> tuple[bool, Any]:
        try:
            return True, await call
        except SearchCategoryClientError as exc:
            logger.warning("Failed to %s %s: %s", action, self.entity, exc)
            self.notify(f"Failed to {action} {self.entity}")
            return False, None

    async def _succeeds(self, action: str, call) -> bool:
        ok, _ = await self._attempt(action, call)
        return ok

    def _require_name(self, name: str) -> str | None:
        cleaned = name.strip()
        if not cleaned:
            self.notify(f"Please enter a {self.entity} name")
            return None
        return cleaned


class CatalogueManager(_Manager):
    entity = "catalogue"

    def __init__(self, client: SearchCategoryClient, *, notify: Notifier | None = None) -> None:
        super().__init__(client, notify=notify)
        self.sortable: SortableList[CatalogueItem] = SortableList(
            load=lambda: client.list_catalogues(include_inactive=True),
            update=lambda catalogue_id, order: client.update_catalogue(
                catalogue_id, sort_order=order
            ),
            notify=self.notify,
            label="catalogues",
        )

    @property
    def catalogues(self) -> list[CatalogueItem]:
        return self.sortable.items

    async def load(self) -> bool:
        return await self.sortable.reload()

    async def create(self, name: str) -> CatalogueItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        ok, created = await self._attempt(
            "create",
            self.client.create_catalogue(cleaned, sort_order=len(self.catalogues)),
        )
        if ok:
            await self.load()
        return created if ok else None

    def start_edit(self, catalogue_id: int) -> None:
        self.sortable.editing_id = catalogue_id

    def cancel_edit(self) -> None:
        self.sortable.editing_id = None

    async def save(self, catalogue_id: int, name: str) -> CatalogueItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        ok, updated = await self._attempt(
            "update", self.client.update_catalogue(catalogue_id, name=cleaned)
        )
        if ok:
            self.cancel_edit()
            await self.load()
        return updated if ok else None

    async def delete(self, catalogue_id: int) -> bool:
        if not await self._succeeds("delete", self.client.delete_catalogue(catalogue_id)):
            return False
        await self.load()
        return True

    def start_drag(self, index: int) -> bool:
        return self.sortable.start_drag(index)

    async def drop(self, index: int) -> bool:
        return await self.sortable.drop(index)


class CategoryManager(_Manager):
    entity = "category"

    def __init__(self, client: SearchCategoryClient, *, notify: Notifier | None = None) -> None:
        super().__init__(client, notify=notify)
        self.catalogues: list[CatalogueItem] = []
        self.selected_catalogue_id: int | None = None
        self.sortable: SortableList[CategoryItem] = SortableList(
            load=self._load_categories,
            update=lambda category_id, order: client.update_category(
                category_id, sort_order=order
            ),
            notify=self.notify,
            label="categories",
        )

    @property
    def categories(self) -> list[CategoryItem]:
        return self.sortable.items

    async def _load_categories(self) -> list[CategoryItem]:
        if self.selected_catalogue_id is None:
            return []
        return await self.client.list_categories(self.selected_catalogue_id)

    async def load(self) -> bool:
        try:
            self.catalogues = await self.client.list_catalogues(include_inactive=True)
        except SearchCategoryClientError:
            logger.exception("Failed to load catalogues")
            return False
        if self.catalogues and self.selected_catalogue_id is None:
            return await self.select_catalogue(self.catalogues[0].id)
        return True

    async def select_catalogue(self, catalogue_id: int | None) -> bool:
        self.selected_catalogue_id = catalogue_id
        self.sortable.items = []
        self.sortable.editing_id = None
        self.sortable.cancel_drag()
        return await self.sortable.reload()

    async def create(self, name: str) -> CategoryItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        if self.selected_catalogue_id is None:
            self.notify("Please select a catalogue")
            return None
        ok, created = await self._attempt(
            "create",
            self.client.create_category(
                self.selected_catalogue_id, cleaned, sort_order=len(self.categories)
            ),
        )
        if ok:
            await self.sortable.reload()
        return created if ok else None

    def start_edit(self, category_id: int) -> None:
        self.sortable.editing_id = category_id

    def cancel_edit(self) -> None:
        self.sortable.editing_id = None

    async def save(self, category_id: int, name: str) -> CategoryItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        ok, updated = await self._attempt(
            "update", self.client.update_category(category_id, name=cleaned)
        )
        if ok:
            self.cancel_edit()
            await self.sortable.reload()
        return updated if ok else None

    async def delete(self, category_id: int) -> bool:
        if not await self._succeeds("delete", self.client.delete_category(category_id)):
            return False
        await self.sortable.reload()
        return True

    def start_drag(self, index: int) -> bool:
        return self.sortable.start_drag(index)

    async def drop(self, index: int) -> bool:
        return await self.sortable.drop(index)

    async def load_assigned_filters(self, category_id: int) -> list[SubCategoryFilterItem]:
        try:
            return await self.client.list_for_category(category_id)
        except SearchCategoryClientError:
            logger.exception("Failed to load filters for category %s", category_id)
            return []

    async def assign_filter(self, category_id: int, filter_id: int) -> bool:
        try:
            await self.client.assign(category_id, filter_id)
        except SearchCategoryClientError as exc:
            logger.warning(
                "Failed to assign filter %s to category %s: %s", filter_id, category_id, exc
            )
            self.notify(ASSIGN_FAILED_MESSAGE)
            return False
        return True

    async def unassign_filter(self, category_id: int, filter_id: int) -> bool:
        try:
            await self.client.unassign(category_id, filter_id)
        except SearchCategoryClientError as exc:
            logger.warning(
                "Failed to remove filter %s from category %s: %s", filter_id, category_id, exc
            )
            self.notify("Failed to remove filter")
            return False
        return True


class SubCategoryFilterManager(_Manager):
    entity = "filter"

    def __init__(self, client: SearchCategoryClient, *, notify: Notifier | None = None) -> None:
        super().__init__(client, notify=notify)
        self.expanded_filter_id: int | None = None
        self.sortable: SortableList[SubCategoryFilterItem] = SortableList(
            load=lambda: client.list_filters(include_inactive=True),
            update=lambda filter_id, order: client.update_filter(filter_id, sort_order=order),
            notify=self.notify,
            label="filters",
        )
        self.dragged_option_index: int | None = None
        self.editing_option_id: int | None = None

    @property
    def filters(self) -> list[SubCategoryFilterItem]:
        return self.sortable.items

    def get_filter(self, filter_id: int) -> SubCategoryFilterItem | None:
        return next((item for item in self.filters if item.id == filter_id), None)

    async def load(self) -> bool:
        return await self.sortable.reload()

    def toggle_filter(self, filter_id: int) -> None:
        self.expanded_filter_id = None if self.expanded_filter_id == filter_id else filter_id

    async def create_filter(self, name: str) -> SubCategoryFilterItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        ok, created = await self._attempt(
            "create", self.client.create_filter(cleaned, sort_order=len(self.filters))
        )
        if ok:
            await self.load()
        return created if ok else None

    def start_edit_filter(self, filter_id: int) -> None:
        self.sortable.editing_id = filter_id

    def cancel_edit_filter(self) -> None:
        self.sortable.editing_id = None

    async def save_filter(self, filter_id: int, name: str) -> SubCategoryFilterItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        ok, updated = await self._attempt("update", self.client.update_filter(filter_id, name=cleaned))
        if ok:
            self.cancel_edit_filter()
            await self.load()
        return updated if ok else None

    async def delete_filter(self, filter_id: int) -> bool:
        if not await self._succeeds("delete", self.client.delete_filter(filter_id)):
            return False
        if self.expanded_filter_id == filter_id:
            self.expanded_filter_id = None
        await self.load()
        return True

    def start_drag_filter(self, index: int) -> bool:
        return self.sortable.start_drag(index)

    async def drop_filter(self, index: int) -> bool:
        return await self.sortable.drop(index)

    # Options live inside their filter; reordering one filter's options never
    # touches another filter.

    async def create_option(self, filter_id: int, name: str) -> SubCategoryFilterOptionItem | None:
        cleaned = name.strip()
        if not cleaned:
            self.notify("Please enter an option name")
            return None
        parent = self.get_filter(filter_id)
        sort_order = len(parent.options) if parent is not None else None
        ok, created = await self._attempt(
            "create", self.client.create_option(filter_id, cleaned, sort_order=sort_order)
        )
        if ok:
            await self.load()
        return created if ok else None

    def start_edit_option(self, option_id: int) -> None:
        self.editing_option_id = option_id

    def cancel_edit_option(self) -> None:
        self.editing_option_id = None

    async def save_option(self, option_id: int, name: str) -> SubCategoryFilterOptionItem | None:
        cleaned = name.strip()
        if not cleaned:
            self.notify("Please enter an option name")
            return None
        ok, updated = await self._attempt("update", self.client.update_option(option_id, name=cleaned))
        if ok:
            self.cancel_edit_option()
            await self.load()
        return updated if ok else None

    async def delete_option(self, option_id: int) -> bool:
        if not await self._succeeds("delete", self.client.delete_option(option_id)):
            return False
        await self.load()
        return True

    def start_drag_option(self, filter_id: int, index: int) -> bool:
        parent = self.get_filter(filter_id)
        if parent is None or not 0 <= index < len(parent.options):
            return False
        if parent.options[index].id == self.editing_option_id:
            return False
        self.dragged_option_index = index
        return True

    async def drop_option(self, filter_id: int, drop_index: int) -> bool:
        dragged_index = self.dragged_option_index
        self.dragged_option_index = None
        parent = self.get_filter(filter_id)
        if parent is None or dragged_index is None or dragged_index == drop_index:
            return False
        if not 0 <= drop_index < len(parent.options):
            return False

        options = SortableList[SubCategoryFilterOptionItem](
            load=lambda: self._reload_options(filter_id),
            update=lambda option_id, order: self.client.update_option(option_id, sort_order=order),
            notify=self.notify,
            label=f"options of filter {filter_id}",
        )
        options.items = list(parent.options)
        persisted = await options.apply_order(move_item(parent.options, dragged_index, drop_index))
        if persisted:
            self._replace_options(filter_id, options.items)
        return persisted

    async def _reload_options(self, filter_id: int) -> list[SubCategoryFilterOptionItem]:
        await self.load()
        parent = self.get_filter(filter_id)
        return list(parent.options) if parent is not None else []

    def _replace_options(
        self,
        filter_id: int,
        options: list[SubCategoryFilterOptionItem],
    ) -> None:
        self.sortable.items = [
            item.model_copy(update={"options": options}) if item.id == filter_id else item
            for item in self.sortable.items
        ]


def other_category() -> ServiceCategoryItem:
    return ServiceCategoryItem(id=OTHER_CATEGORY_ID, name="Other", sort_order=0)


class ServiceCategoryManager(_Manager):
    """An artist's service shelves, with the built-in "Other" shelf pinned first."""

    entity = "category"

    def __init__(self, client: SearchCategoryClient, *, notify: Notifier | None = None) -> None:
        super().__init__(client, notify=notify)
        self.sortable: SortableList[ServiceCategoryItem] = SortableList(
            load=self._load_categories,
            update=self._persist_sort_order,
            notify=self.notify,
            start=1,
            label="service categories",
        )
        self.sortable.items = [other_category()]

    @property
    def categories(self) -> list[ServiceCategoryItem]:
        return self.sortable.items

    async def _load_categories(self) -> list[ServiceCategoryItem]:
        return [other_category(), *await self.client.list_service_categories()]

    async def _persist_sort_order(self, category_id: int, sort_order: int) -> None:
        await self.client.update_service_category_sort_order([(category_id, sort_order)])

    async def load(self) -> bool:
        loaded = await self.sortable.reload()
        if not loaded:
            self.notify("Failed to load categories")
        return loaded

    async def save(self, name: str, *, category_id: int | str | None = None) -> ServiceCategoryItem | None:
        cleaned = self._require_name(name)
        if cleaned is None:
            return None
        if category_id is not None and category_id != OTHER_CATEGORY_ID:
            ok, updated = await self._attempt(
                "save", self.client.update_service_category(int(category_id), name=cleaned)
            )
            if ok:
                self.sortable.items = [
                    updated if item.id == updated.id else item for item in self.sortable.items
                ]
            return updated if ok else None

        ok, created = await self._attempt(
            "save",
            self.client.create_service_category(cleaned, sort_order=len(self.categories)),
        )
        if ok:
            self.sortable.items = [*self.sortable.items, created]
        return created if ok else None

    async def delete(self, category_id: int | str) -> bool:
        if category_id == OTHER_CATEGORY_ID:
            return False
        shelf_id = int(category_id)
        if not await self._succeeds("delete", self.client.delete_service_category(shelf_id)):
            return False
        self.sortable.items = [item for item in self.sortable.items if item.id != shelf_id]
        return True

    def start_drag(self, index: int) -> bool:
        return self.sortable.start_drag(index)

    async def drop(self, index: int) -> bool:
        return await self.sortable.drop(index)
