from types import SimpleNamespace

from arkom.schemas.search_categories import SubCategoryFilterItem, SubCategoryFilterOptionItem
from arkom.services.filter_cascade import (
    FilterState,
    SearchCategoryData,
    applicable_filters,
    filter_listings,
    listing_matches,
)


def test_changing_catalogue_clears_category_and_options() -> None:
    state = FilterState(catalogue_id=1, category_id=10, sub_category_selections=(100, 101))

    switched = state.set_catalogue_id(2)
    assert switched == FilterState(catalogue_id=2)

    cleared = state.set_catalogue_id(None)
    assert cleared == FilterState()
    assert not cleared.has_active_filters


def test_changing_category_clears_options_only() -> None:
    state = FilterState(catalogue_id=1, category_id=10, sub_category_selections=(100,))

    assert state.set_category_id(11) == FilterState(catalogue_id=1, category_id=11)
    assert state.set_category_id(None) == FilterState(catalogue_id=1)


def test_toggle_option_adds_then_removes() -> None:
    state = FilterState(catalogue_id=1, category_id=10)

    state = state.toggle_sub_category_option(100).toggle_sub_category_option(101)
    assert state.sub_category_selections == (100, 101)

    state = state.toggle_sub_category_option(100)
    assert state.sub_category_selections == (101,)
    assert state.has_active_filters
    assert state.clear() == FilterState()


def test_no_active_filters_matches_everything_discoverable() -> None:
    filters = FilterState()
    assert listing_matches(filters, None)
    assert listing_matches(filters, SearchCategoryData(catalogue_id=3))
    assert not listing_matches(filters, SearchCategoryData(is_discoverable=False))


def test_discoverability_is_opt_out() -> None:
    filters = FilterState(catalogue_id=1)
    implicit = SimpleNamespace(
        is_discoverable=None, catalogue_id=1, category_id=None, sub_category_selections=[]
    )
    assert listing_matches(filters, implicit)
    assert not listing_matches(
        filters, SearchCategoryData(is_discoverable=False, catalogue_id=1)
    )


def test_catalogue_and_category_must_match_exactly() -> None:
    data = SearchCategoryData(catalogue_id=1, category_id=10)

    assert listing_matches(FilterState(catalogue_id=1), data)
    assert listing_matches(FilterState(catalogue_id=1, category_id=10), data)
    assert not listing_matches(FilterState(catalogue_id=2), data)
    assert not listing_matches(FilterState(catalogue_id=1, category_id=11), data)
    assert not listing_matches(FilterState(catalogue_id=1), None)


def test_selected_options_are_ored() -> None:
    data = SearchCategoryData(catalogue_id=1, category_id=10, sub_category_selections=(100, 102))
    base = FilterState(catalogue_id=1, category_id=10)

    assert listing_matches(base.toggle_sub_category_option(102), data)
    assert listing_matches(
        base.toggle_sub_category_option(101).toggle_sub_category_option(100), data
    )
    assert not listing_matches(base.toggle_sub_category_option(101), data)
    assert not listing_matches(
        base.toggle_sub_category_option(100), SearchCategoryData(catalogue_id=1, category_id=10)
    )


def test_filter_listings_uses_search_category_data_attribute() -> None:
    listings = [
        SimpleNamespace(title="portrait", search_category_data=SearchCategoryData(catalogue_id=1)),
        SimpleNamespace(title="mixing", search_category_data=SearchCategoryData(catalogue_id=2)),
        SimpleNamespace(title="untagged", search_category_data=None),
    ]

    assert [item.title for item in filter_listings(listings, FilterState())] == [
        "portrait",
        "mixing",
        "untagged",
    ]
    assert [item.title for item in filter_listings(listings, FilterState(catalogue_id=2))] == [
        "mixing"
    ]


def _option(option_id: int, filter_id: int, sort_order: int, *, active: bool = True):
    return SubCategoryFilterOptionItem(
        id=option_id,
        filter_id=filter_id,
        name=f"option-{option_id}",
        sort_order=sort_order,
        is_active=active,
    )


def test_applicable_filters_keep_every_assigned_filter_with_active_options() -> None:
    filters = [
        SubCategoryFilterItem(
            id=1,
            name="Medium",
            sort_order=1,
            is_active=True,
            options=[_option(10, 1, 0)],
        ),
        SubCategoryFilterItem(
            id=2,
            name="Style",
            sort_order=0,
            is_active=True,
            options=[_option(20, 2, 2), _option(21, 2, 0, active=False), _option(22, 2, 1)],
        ),
        SubCategoryFilterItem(id=3, name="Retired", sort_order=0, is_active=False),
        SubCategoryFilterItem(id=4, name="Unassigned", sort_order=0, is_active=True),
    ]

    result = applicable_filters(filters, [1, 2, 3])

    assert [item.name for item in result] == ["Style", "Retired", "Medium"]
    assert [option.id for option in result[0].options] == [22, 20]
    assert applicable_filters(filters, []) == []
