"""
Browse-side state for the catalogue -> category -> option filter bar.

Selection changes go through ``FilterState`` so a new catalogue always clears
the category and the options, and a new category always clears the options.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeVar

from arkom.schemas.search_categories import CatalogueItem, CategoryItem, SubCategoryFilterItem
from arkom.services.filter_cascade import FilterState, applicable_filters, filter_listings
from arkom.services.search_category_client import SearchCategoryClient, SearchCategoryClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BrowseFilters:
    def __init__(self, client: SearchCategoryClient) -> None:
        self.client = client
        self.catalogues: list[CatalogueItem] = []
        self.categories: list[CategoryItem] = []
        self.all_filters: list[SubCategoryFilterItem] = []
        self.category_filter_ids: list[int] = []
        self.filters = FilterState()
        self.is_dropdown_open = False
        self.loading_catalogues = False
        self.loading_categories = False

    async def load(self) -> None:
        self.loading_catalogues = True
        try:
            self.catalogues = await self.client.list_catalogues()
        except SearchCategoryClientError:
            logger.exception("Failed to load catalogues")
        finally:
            self.loading_catalogues = False

        try:
            self.all_filters = await self.client.list_filters()
        except SearchCategoryClientError:
            logger.exception("Failed to load sub-category filters")

    async def _load_categories(self, catalogue_id: int) -> None:
        self.loading_categories = True
        try:
            categories = await self.client.list_categories(catalogue_id)
            # The endpoint also serves admins, so inactive categories come back too.
            self.categories = [item for item in categories if item.is_active]
        except SearchCategoryClientError:
            logger.exception("Failed to load categories for catalogue %s", catalogue_id)
            self.categories = []
        finally:
            self.loading_categories = False

    async def _load_category_filter_ids(self, category_id: int) -> None:
        try:
            assigned = await self.client.list_for_category(category_id)
        except SearchCategoryClientError:
            logger.exception("Failed to load filters for category %s", category_id)
            self.category_filter_ids = []
            return
        self.category_filter_ids = [item.id for item in assigned]

    async def set_catalogue_id(self, catalogue_id: int | None) -> None:
        self.filters = self.filters.set_catalogue_id(catalogue_id)
        self.categories = []
        self.category_filter_ids = []
        if catalogue_id is None:
            return
        await self._load_categories(catalogue_id)
        self.is_dropdown_open = True

    async def set_category_id(self, category_id: int | None) -> None:
        self.filters = self.filters.set_category_id(category_id)
        self.category_filter_ids = []
        if category_id is not None:
            await self._load_category_filter_ids(category_id)

    async def toggle_dropdown(self, catalogue_id: int | None = None) -> None:
        """Open the dropdown for ``catalogue_id``, or close it when that catalogue is already open."""
        if catalogue_id is not None and catalogue_id != self.filters.catalogue_id:
            await self.set_catalogue_id(catalogue_id)
            return
        self.is_dropdown_open = not self.is_dropdown_open

    def toggle_sub_category_option(self, option_id: int) -> None:
        self.filters = self.filters.toggle_sub_category_option(option_id)

    def clear_filters(self) -> None:
        self.filters = self.filters.clear()
        self.categories = []
        self.category_filter_ids = []
        self.is_dropdown_open = False

    def close_dropdown(self) -> None:
        self.is_dropdown_open = False

    @property
    def available_filters(self) -> list[SubCategoryFilterItem]:
        return applicable_filters(self.all_filters, self.category_filter_ids)

    @property
    def has_active_filters(self) -> bool:
        return self.filters.has_active_filters

    @property
    def selected_catalogue(self) -> CatalogueItem | None:
        return next(
            (item for item in self.catalogues if item.id == self.filters.catalogue_id), None
        )

    @property
    def selected_category(self) -> CategoryItem | None:
        return next(
            (item for item in self.categories if item.id == self.filters.category_id), None
        )

    def filter_listings(self, listings: Iterable[T]) -> list[T]:
        return filter_listings(listings, self.filters)
