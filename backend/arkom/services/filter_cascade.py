"""
Hierarchical browse filters: catalogue -> category -> sub-category options.

``FilterState`` is the browsing user's selection. Changing a higher level
clears everything below it. ``listing_matches`` decides whether a listing's
``SearchCategoryData`` passes the selection, and ``applicable_filters``
narrows the global filter list to the ones offered for a category.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from arkom.schemas.search_categories import SubCategoryFilterItem

T = TypeVar("T")


@dataclass(frozen=True)
class FilterState:
    catalogue_id: int | None = None
    category_id: int | None = None
    sub_category_selections: tuple[int, ...] = ()

    @property
    def has_active_filters(self) -> bool:
        return (
            self.catalogue_id is not None
            or self.category_id is not None
            or len(self.sub_category_selections) > 0
        )

    def set_catalogue_id(self, catalogue_id: int | None) -> FilterState:
        return FilterState(catalogue_id=catalogue_id)

    def set_category_id(self, category_id: int | None) -> FilterState:
        return replace(self, category_id=category_id, sub_category_selections=())

    def toggle_sub_category_option(self, option_id: int) -> FilterState:
        if option_id in self.sub_category_selections:
            selections = tuple(x for x in self.sub_category_selections if x != option_id)
        else:
            selections = (*self.sub_category_selections, option_id)
        return replace(self, sub_category_selections=selections)

    def clear(self) -> FilterState:
        return FilterState()


@dataclass(frozen=True)
class SearchCategoryData:
    """Taxonomy placement a listing opted into when it was created."""

    is_discoverable: bool = True
    catalogue_id: int | None = None
    category_id: int | None = None
    sub_category_selections: Sequence[int] = field(default_factory=tuple)


def listing_matches(filters: FilterState, data: Any | None) -> bool:
    """
    Return True when a listing with search data ``data`` belongs in the result.

    ``data`` is any object shaped like ``SearchCategoryData`` (API responses
    work as-is) or None for listings that never opted into the taxonomy.
    Discoverability is opt-out: only an explicit ``False`` hides a listing.
    Selected options are OR-ed, one shared option is enough. Option ids that
    no longer exist just never match.
    """
    if data is not None and data.is_discoverable is False:
        return False
    if not filters.has_active_filters:
        return True

    catalogue_id = data.catalogue_id if data is not None else None
    category_id = data.category_id if data is not None else None
    if filters.catalogue_id is not None and catalogue_id != filters.catalogue_id:
        return False
    if filters.category_id is not None and category_id != filters.category_id:
        return False

    if filters.sub_category_selections:
        listing_selections = set(data.sub_category_selections or ()) if data is not None else set()
        if not any(option_id in listing_selections for option_id in filters.sub_category_selections):
            return False
    return True


def filter_listings(
    listings: Iterable[T],
    filters: FilterState,
    *,
    key: Callable[[T], Any | None] = lambda listing: getattr(listing, "search_category_data", None),
) -> list[T]:
    return [listing for listing in listings if listing_matches(filters, key(listing))]


def applicable_filters(
    filters: Iterable[SubCategoryFilterItem],
    assigned_filter_ids: Iterable[int],
) -> list[SubCategoryFilterItem]:
    """
    Assigned filters in display order, each trimmed to its active options.

    A deactivated filter stays in the result while it is still assigned; callers
    that only want live filters pass in the active list.
    """
    assigned = set(assigned_filter_ids)
    if not assigned:
        return []

    result: list[SubCategoryFilterItem] = []
    for item in sorted(filters, key=lambda f: (f.sort_order, f.id)):
        if item.id not in assigned:
            continue
        options = sorted(
            (option for option in item.options if option.is_active),
            key=lambda option: (option.sort_order, option.id),
        )
        result.append(item.model_copy(update={"options": options}))
    return result
