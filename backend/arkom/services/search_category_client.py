"""
Async HTTP client for the search-category and service-category APIs.

This is the store the admin and browse controllers talk to. Every call is a
single request: failures raise ``SearchCategoryClientError`` straight away,
with no retry or backoff.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx

from arkom.core.config import get_settings
from arkom.schemas.search_categories import (
    CatalogueItem,
    CategoryFilterAssignmentItem,
    CategoryItem,
    SubCategoryFilterItem,
    SubCategoryFilterOptionItem,
)
from arkom.schemas.service_categories import ServiceCategoryItem
from arkom.schemas.services import ServiceResponse
from arkom.services.filter_cascade import FilterState

SEARCH_CATEGORIES = "/search-categories"
SERVICE_CATEGORIES = "/service-categories/categories"


class SearchCategoryClientError(RuntimeError):
    def __init__(self, status_code: int | None, detail: str) -> None:
        super().__init__(f"{status_code or 'network'} error: {detail}")
        self.status_code = status_code
        self.detail = detail

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return response.reason_phrase


def _fields(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class SearchCategoryClient:
    def __init__(self, http_client: httpx.AsyncClient, *, token: str | None = None) -> None:
        self._http = http_client
        self._token = token

    @classmethod
    def from_settings(cls, *, token: str | None = None) -> SearchCategoryClient:
        settings = get_settings()
        http_client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(settings.http_timeout_seconds),
        )
        return cls(http_client, token=token)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> SearchCategoryClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Any = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise SearchCategoryClientError(None, str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            raise SearchCategoryClientError(response.status_code, _error_detail(response))
        return response.json()

    # Catalogues

    async def list_catalogues(self, *, include_inactive: bool = False) -> list[CatalogueItem]:
        data = await self._request(
            "GET",
            f"{SEARCH_CATEGORIES}/catalogues",
            params={"include_inactive": "true"} if include_inactive else None,
        )
        return [CatalogueItem.model_validate(item) for item in data["catalogues"]]

    async def create_catalogue(self, name: str, *, sort_order: int | None = None) -> CatalogueItem:
        data = await self._request(
            "POST",
            f"{SEARCH_CATEGORIES}/catalogues",
            json=_fields(name=name, sort_order=sort_order),
        )
        return CatalogueItem.model_validate(data)

    async def update_catalogue(
        self,
        catalogue_id: int,
        *,
        name: str | None = None,
        sort_order: int | None = None,
        is_active: bool | None = None,
    ) -> CatalogueItem:
        data = await self._request(
            "PUT",
            f"{SEARCH_CATEGORIES}/catalogues/{catalogue_id}",
            json=_fields(name=name, sort_order=sort_order, is_active=is_active),
        )
        return CatalogueItem.model_validate(data)

    async def delete_catalogue(self, catalogue_id: int) -> None:
        await self._request("DELETE", f"{SEARCH_CATEGORIES}/catalogues/{catalogue_id}")

    # Categories

    async def list_categories(self, catalogue_id: int) -> list[CategoryItem]:
        data = await self._request(
            "GET", f"{SEARCH_CATEGORIES}/catalogues/{catalogue_id}/categories"
        )
        return [CategoryItem.model_validate(item) for item in data["categories"]]

    async def create_category(
        self,
        catalogue_id: int,
        name: str,
        *,
        sort_order: int | None = None,
    ) -> CategoryItem:
        data = await self._request(
            "POST",
            f"{SEARCH_CATEGORIES}/categories",
            json=_fields(catalogue_id=catalogue_id, name=name, sort_order=sort_order),
        )
        return CategoryItem.model_validate(data)

    async def update_category(
        self,
        category_id: int,
        *,
        name: str | None = None,
        sort_order: int | None = None,
        is_active: bool | None = None,
    ) -> CategoryItem:
        data = await self._request(
            "PUT",
            f"{SEARCH_CATEGORIES}/categories/{category_id}",
            json=_fields(name=name, sort_order=sort_order, is_active=is_active),
        )
        return CategoryItem.model_validate(data)

    async def delete_category(self, category_id: int) -> None:
        await self._request("DELETE", f"{SEARCH_CATEGORIES}/categories/{category_id}")

    # Sub-category filters and options

    async def list_filters(self, *, include_inactive: bool = False) -> list[SubCategoryFilterItem]:
        data = await self._request(
            "GET",
            f"{SEARCH_CATEGORIES}/sub-category-filters",
            params={"include_inactive": "true"} if include_inactive else None,
        )
        return [SubCategoryFilterItem.model_validate(item) for item in data["filters"]]

    async def create_filter(self, name: str, *, sort_order: int | None = None) -> SubCategoryFilterItem:
        data = await self._request(
            "POST",
            f"{SEARCH_CATEGORIES}/sub-category-filters",
            json=_fields(name=name, sort_order=sort_order),
        )
        return SubCategoryFilterItem.model_validate(data)

    async def update_filter(
        self,
        filter_id: int,
        *,
        name: str | None = None,
        sort_order: int | None = None,
        is_active: bool | None = None,
    ) -> SubCategoryFilterItem:
        data = await self._request(
            "PUT",
            f"{SEARCH_CATEGORIES}/sub-category-filters/{filter_id}",
            json=_fields(name=name, sort_order=sort_order, is_active=is_active),
        )
        return SubCategoryFilterItem.model_validate(data)

    async def delete_filter(self, filter_id: int) -> None:
        await self._request("DELETE", f"{SEARCH_CATEGORIES}/sub-category-filters/{filter_id}")

    async def create_option(
        self,
        filter_id: int,
        name: str,
        *,
        sort_order: int | None = None,
    ) -> SubCategoryFilterOptionItem:
        data = await self._request(
            "POST",
            f"{SEARCH_CATEGORIES}/sub-category-filter-options",
            json=_fields(filter_id=filter_id, name=name, sort_order=sort_order),
        )
        return SubCategoryFilterOptionItem.model_validate(data)

    async def update_option(
        self,
        option_id: int,
        *,
        name: str | None = None,
        sort_order: int | None = None,
        is_active: bool | None = None,
    ) -> SubCategoryFilterOptionItem:
        data = await self._request(
            "PUT",
            f"{SEARCH_CATEGORIES}/sub-category-filter-options/{option_id}",
            json=_fields(name=name, sort_order=sort_order, is_active=is_active),
        )
        return SubCategoryFilterOptionItem.model_validate(data)

    async def delete_option(self, option_id: int) -> None:
        await self._request(
            "DELETE", f"{SEARCH_CATEGORIES}/sub-category-filter-options/{option_id}"
        )

    # Category <-> filter assignments

    async def list_for_category(self, category_id: int) -> list[SubCategoryFilterItem]:
        data = await self._request(
            "GET", f"{SEARCH_CATEGORIES}/categories/{category_id}/filters"
        )
        return [SubCategoryFilterItem.model_validate(item) for item in data["filters"]]

    async def assign(self, category_id: int, filter_id: int) -> CategoryFilterAssignmentItem:
        data = await self._request(
            "POST",
            f"{SEARCH_CATEGORIES}/category-filters",
            json={"category_id": category_id, "filter_id": filter_id},
        )
        return CategoryFilterAssignmentItem.model_validate(data)

    async def unassign(self, category_id: int, filter_id: int) -> None:
        await self._request(
            "DELETE",
            f"{SEARCH_CATEGORIES}/categories/{category_id}/filters/{filter_id}",
        )

    # Artist service categories

    async def list_service_categories(self) -> list[ServiceCategoryItem]:
        data = await self._request("GET", SERVICE_CATEGORIES)
        return [ServiceCategoryItem.model_validate(item) for item in data["categories"]]

    async def create_service_category(
        self,
        name: str,
        *,
        sort_order: int | None = None,
    ) -> ServiceCategoryItem:
        data = await self._request(
            "POST", SERVICE_CATEGORIES, json=_fields(name=name, sort_order=sort_order)
        )
        return ServiceCategoryItem.model_validate(data)

    async def update_service_category(self, category_id: int, *, name: str) -> ServiceCategoryItem:
        data = await self._request(
            "PUT", f"{SERVICE_CATEGORIES}/{category_id}", json={"name": name}
        )
        return ServiceCategoryItem.model_validate(data)

    async def delete_service_category(self, category_id: int) -> None:
        await self._request("DELETE", f"{SERVICE_CATEGORIES}/{category_id}")

    async def update_service_category_sort_order(
        self,
        updates: Iterable[tuple[int, int]],
    ) -> int:
        data = await self._request(
            "PUT",
            f"{SERVICE_CATEGORIES}/sort-order",
            json={
                "updates": [
                    {"id": category_id, "sort_order": sort_order}
                    for category_id, sort_order in updates
                ]
            },
        )
        return int(data["updated"])

    # Listings

    async def browse_services(self, filters: FilterState) -> list[ServiceResponse]:
        params: list[tuple[str, Any]] = []
        if filters.catalogue_id is not None:
            params.append(("catalogue_id", filters.catalogue_id))
        if filters.category_id is not None:
            params.append(("category_id", filters.category_id))
        params.extend(
            ("sub_category_selections", option_id)
            for option_id in filters.sub_category_selections
        )
        data = await self._request("GET", "/services/browse", params=params or None)
        return [ServiceResponse.model_validate(item) for item in data["services"]]
