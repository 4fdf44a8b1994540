from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from arkom.services.browse_filters import BrowseFilters
from arkom.services.filter_cascade import FilterState, SearchCategoryData
from arkom.services.search_category_client import SearchCategoryClient


@pytest.fixture
async def seeded(client: AsyncClient, admin_token: str) -> dict:
    api = SearchCategoryClient(client, token=admin_token)
    art = await api.create_catalogue("Art")
    music = await api.create_catalogue("Music")
    hidden = await api.create_catalogue("Hidden")
    await api.update_catalogue(hidden.id, is_active=False)

    portrait = await api.create_category(art.id, "Portrait")
    landscape = await api.create_category(art.id, "Landscape")
    retired = await api.create_category(art.id, "Retired")
    await api.update_category(retired.id, is_active=False)
    style = await api.create_filter("Style")
    anime = await api.create_option(style.id, "Anime")
    realism = await api.create_option(style.id, "Realism")
    await api.assign(portrait.id, style.id)
    return {
        "art": art,
        "music": music,
        "portrait": portrait,
        "landscape": landscape,
        "style": style,
        "anime": anime,
        "realism": realism,
    }


@pytest.mark.asyncio
async def test_load_exposes_active_catalogues_and_filters(
    client: AsyncClient, seeded: dict
) -> None:
    browse = BrowseFilters(SearchCategoryClient(client))
    await browse.load()

    assert [item.name for item in browse.catalogues] == ["Art", "Music"]
    assert [item.name for item in browse.all_filters] == ["Style"]
    assert not browse.has_active_filters
    assert browse.available_filters == []


@pytest.mark.asyncio
async def test_selection_cascade_resets_lower_levels(client: AsyncClient, seeded: dict) -> None:
    browse = BrowseFilters(SearchCategoryClient(client))
    await browse.load()

    await browse.set_catalogue_id(seeded["art"].id)
    assert browse.is_dropdown_open
    assert browse.selected_catalogue.name == "Art"
    assert [item.name for item in browse.categories] == ["Portrait", "Landscape"]

    await browse.set_category_id(seeded["portrait"].id)
    assert browse.selected_category.name == "Portrait"
    assert [item.name for item in browse.available_filters] == ["Style"]
    assert [option.name for option in browse.available_filters[0].options] == [
        "Anime",
        "Realism",
    ]

    browse.toggle_sub_category_option(seeded["anime"].id)
    assert browse.filters.sub_category_selections == (seeded["anime"].id,)

    await browse.set_category_id(seeded["landscape"].id)
    assert browse.filters.sub_category_selections == ()
    assert browse.available_filters == []

    await browse.set_catalogue_id(seeded["music"].id)
    assert browse.filters == FilterState(catalogue_id=seeded["music"].id)
    assert browse.categories == []
    assert browse.selected_category is None


@pytest.mark.asyncio
async def test_dropdown_toggle_and_clear(client: AsyncClient, seeded: dict) -> None:
    browse = BrowseFilters(SearchCategoryClient(client))
    await browse.load()

    await browse.toggle_dropdown(seeded["art"].id)
    assert browse.is_dropdown_open
    await browse.toggle_dropdown(seeded["art"].id)
    assert not browse.is_dropdown_open
    await browse.toggle_dropdown()
    assert browse.is_dropdown_open
    browse.close_dropdown()
    assert not browse.is_dropdown_open

    await browse.set_category_id(seeded["portrait"].id)
    browse.clear_filters()
    assert browse.filters == FilterState()
    assert not browse.is_dropdown_open
    assert browse.available_filters == []


@pytest.mark.asyncio
async def test_filter_listings_applies_current_selection(
    client: AsyncClient, seeded: dict
) -> None:
    art, portrait = seeded["art"], seeded["portrait"]
    anime, realism = seeded["anime"], seeded["realism"]
    items = [
        SimpleNamespace(
            title="Anime portrait",
            search_category_data=SearchCategoryData(
                catalogue_id=art.id, category_id=portrait.id, sub_category_selections=(anime.id,)
            ),
        ),
        SimpleNamespace(
            title="Realism portrait",
            search_category_data=SearchCategoryData(
                catalogue_id=art.id, category_id=portrait.id, sub_category_selections=(realism.id,)
            ),
        ),
        SimpleNamespace(
            title="Opted out",
            search_category_data=SearchCategoryData(
                is_discoverable=False, catalogue_id=art.id, category_id=portrait.id
            ),
        ),
    ]
    browse = BrowseFilters(SearchCategoryClient(client))

    assert [item.title for item in browse.filter_listings(items)] == [
        "Anime portrait",
        "Realism portrait",
    ]

    await browse.set_catalogue_id(art.id)
    await browse.set_category_id(portrait.id)
    browse.toggle_sub_category_option(realism.id)
    assert [item.title for item in browse.filter_listings(items)] == ["Realism portrait"]
