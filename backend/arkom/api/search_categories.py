from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from arkom.api.deps import get_current_admin
from arkom.core.db import get_session
from arkom.models.catalogue import Catalogue, Category
from arkom.models.sub_category_filter import (
    CategorySubCategoryFilter,
    SubCategoryFilter,
    SubCategoryFilterOption,
)
from arkom.models.user import User
from arkom.schemas.search_categories import (
    CatalogueCreateRequest,
    CatalogueItem,
    CatalogueListResponse,
    CategoryCreateRequest,
    CategoryFilterAssignmentItem,
    CategoryFilterAssignRequest,
    CategoryItem,
    CategoryListResponse,
    DeleteResponse,
    SubCategoryFilterCreateRequest,
    SubCategoryFilterItem,
    SubCategoryFilterListResponse,
    SubCategoryFilterOptionCreateRequest,
    SubCategoryFilterOptionItem,
    TaxonomyNodeUpdateRequest,
)
from arkom.services.search_category_service import (
    clean_taxonomy_name,
    delete_catalogue_cascade,
    delete_category_cascade,
    delete_filter_cascade,
    list_catalogues,
    list_categories,
    list_filters_with_options,
    load_category_filters,
    next_sort_order,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search-categories", tags=["search-categories"])


def _now() -> datetime:
    return datetime.now(UTC)


def _require_name(value: str, *, label: str) -> str:
    name = clean_taxonomy_name(value)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{label} name cannot be empty.",
        )
    return name


async def _get_or_404(
    session: AsyncSession,
    model: type[SQLModel],
    item_id: int,
    *,
    label: str,
):
    result = await session.execute(select(model).where(model.id == item_id))
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return item


async def _apply_update(
    session: AsyncSession,
    item,
    payload: TaxonomyNodeUpdateRequest,
    *,
    label: str,
):
    if payload.name is not None:
        item.name = _require_name(payload.name, label=label)
    if payload.sort_order is not None:
        item.sort_order = payload.sort_order
    if payload.is_active is not None:
        item.is_active = payload.is_active
    item.updated_at = _now()
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


# Public reads


@router.get("/catalogues", response_model=CatalogueListResponse)
async def get_catalogues(
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_session),
) -> CatalogueListResponse:
    catalogues = await list_catalogues(session, include_inactive=include_inactive)
    return CatalogueListResponse(
        catalogues=[CatalogueItem.model_validate(item) for item in catalogues]
    )


@router.get("/catalogues/{catalogue_id}/categories", response_model=CategoryListResponse)
async def get_categories_by_catalogue(
    catalogue_id: int,
    session: AsyncSession = Depends(get_session),
) -> CategoryListResponse:
    categories = await list_categories(session, catalogue_id=catalogue_id)
    return CategoryListResponse(
        categories=[CategoryItem.model_validate(item) for item in categories]
    )


@router.get("/sub-category-filters", response_model=SubCategoryFilterListResponse)
async def get_sub_category_filters(
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterListResponse:
    filters = await list_filters_with_options(session, include_inactive=include_inactive)
    return SubCategoryFilterListResponse(filters=filters)


@router.get("/categories/{category_id}/filters", response_model=SubCategoryFilterListResponse)
async def get_category_filters(
    category_id: int,
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterListResponse:
    return SubCategoryFilterListResponse(
        filters=await load_category_filters(session, category_id=category_id)
    )


# Catalogues


@router.post("/catalogues", response_model=CatalogueItem, status_code=status.HTTP_201_CREATED)
async def create_catalogue(
    payload: CatalogueCreateRequest,
    admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> CatalogueItem:
    name = _require_name(payload.name, label="Catalogue")
    sort_order = payload.sort_order
    if sort_order is None:
        sort_order = await next_sort_order(session, Catalogue.sort_order)
    catalogue = Catalogue(name=name, sort_order=sort_order)
    session.add(catalogue)
    await session.commit()
    await session.refresh(catalogue)
    logger.info("Catalogue %s created by %s", catalogue.id, admin.id)
    return CatalogueItem.model_validate(catalogue)


@router.put("/catalogues/{catalogue_id}", response_model=CatalogueItem)
async def update_catalogue(
    catalogue_id: int,
    payload: TaxonomyNodeUpdateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> CatalogueItem:
    catalogue = await _get_or_404(session, Catalogue, catalogue_id, label="Catalogue")
    catalogue = await _apply_update(session, catalogue, payload, label="Catalogue")
    return CatalogueItem.model_validate(catalogue)


@router.delete("/catalogues/{catalogue_id}", response_model=DeleteResponse)
async def delete_catalogue(
    catalogue_id: int,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    await _get_or_404(session, Catalogue, catalogue_id, label="Catalogue")
    await delete_catalogue_cascade(session, catalogue_id)
    await session.commit()
    return DeleteResponse(message="Catalogue deleted successfully")


# Categories


@router.post("/categories", response_model=CategoryItem, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> CategoryItem:
    await _get_or_404(session, Catalogue, payload.catalogue_id, label="Catalogue")
    name = _require_name(payload.name, label="Category")
    sort_order = payload.sort_order
    if sort_order is None:
        sort_order = await next_sort_order(
            session, Category.sort_order, Category.catalogue_id == payload.catalogue_id
        )
    category = Category(catalogue_id=payload.catalogue_id, name=name, sort_order=sort_order)
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return CategoryItem.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryItem)
async def update_category(
    category_id: int,
    payload: TaxonomyNodeUpdateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> CategoryItem:
    category = await _get_or_404(session, Category, category_id, label="Category")
    category = await _apply_update(session, category, payload, label="Category")
    return CategoryItem.model_validate(category)


@router.delete("/categories/{category_id}", response_model=DeleteResponse)
async def delete_category(
    category_id: int,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    await _get_or_404(session, Category, category_id, label="Category")
    await delete_category_cascade(session, [category_id])
    await session.commit()
    return DeleteResponse(message="Category deleted successfully")


# Sub-category filters


@router.post(
    "/sub-category-filters",
    response_model=SubCategoryFilterItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_category_filter(
    payload: SubCategoryFilterCreateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterItem:
    name = _require_name(payload.name, label="Filter")
    sort_order = payload.sort_order
    if sort_order is None:
        sort_order = await next_sort_order(session, SubCategoryFilter.sort_order)
    sub_filter = SubCategoryFilter(name=name, sort_order=sort_order)
    session.add(sub_filter)
    await session.commit()
    await session.refresh(sub_filter)
    return SubCategoryFilterItem.model_validate(sub_filter)


@router.put("/sub-category-filters/{filter_id}", response_model=SubCategoryFilterItem)
async def update_sub_category_filter(
    filter_id: int,
    payload: TaxonomyNodeUpdateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterItem:
    sub_filter = await _get_or_404(session, SubCategoryFilter, filter_id, label="Filter")
    sub_filter = await _apply_update(session, sub_filter, payload, label="Filter")
    return SubCategoryFilterItem.model_validate(sub_filter)


@router.delete("/sub-category-filters/{filter_id}", response_model=DeleteResponse)
async def delete_sub_category_filter(
    filter_id: int,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    await _get_or_404(session, SubCategoryFilter, filter_id, label="Filter")
    await delete_filter_cascade(session, filter_id)
    await session.commit()
    return DeleteResponse(message="Filter deleted successfully")


# Sub-category filter options


@router.post(
    "/sub-category-filter-options",
    response_model=SubCategoryFilterOptionItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_category_filter_option(
    payload: SubCategoryFilterOptionCreateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterOptionItem:
    await _get_or_404(session, SubCategoryFilter, payload.filter_id, label="Filter")
    name = _require_name(payload.name, label="Option")
    sort_order = payload.sort_order
    if sort_order is None:
        sort_order = await next_sort_order(
            session,
            SubCategoryFilterOption.sort_order,
            SubCategoryFilterOption.filter_id == payload.filter_id,
        )
    option = SubCategoryFilterOption(filter_id=payload.filter_id, name=name, sort_order=sort_order)
    session.add(option)
    await session.commit()
    await session.refresh(option)
    return SubCategoryFilterOptionItem.model_validate(option)


@router.put(
    "/sub-category-filter-options/{option_id}",
    response_model=SubCategoryFilterOptionItem,
)
async def update_sub_category_filter_option(
    option_id: int,
    payload: TaxonomyNodeUpdateRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> SubCategoryFilterOptionItem:
    option = await _get_or_404(session, SubCategoryFilterOption, option_id, label="Option")
    option = await _apply_update(session, option, payload, label="Option")
    return SubCategoryFilterOptionItem.model_validate(option)


@router.delete("/sub-category-filter-options/{option_id}", response_model=DeleteResponse)
async def delete_sub_category_filter_option(
    option_id: int,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    option = await _get_or_404(session, SubCategoryFilterOption, option_id, label="Option")
    await session.delete(option)
    await session.commit()
    return DeleteResponse(message="Option deleted successfully")


# Category <-> filter assignments


@router.post(
    "/category-filters",
    response_model=CategoryFilterAssignmentItem,
    status_code=status.HTTP_201_CREATED,
)
async def assign_filter_to_category(
    payload: CategoryFilterAssignRequest,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> CategoryFilterAssignmentItem:
    await _get_or_404(session, Category, payload.category_id, label="Category")
    await _get_or_404(session, SubCategoryFilter, payload.filter_id, label="Filter")

    assignment = CategorySubCategoryFilter(
        category_id=payload.category_id,
        filter_id=payload.filter_id,
    )
    session.add(assignment)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.info(
            "Filter %s already assigned to category %s",
            payload.filter_id,
            payload.category_id,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Filter may already be assigned to this category.",
        ) from exc
    await session.refresh(assignment)
    return CategoryFilterAssignmentItem.model_validate(assignment)


@router.delete(
    "/categories/{category_id}/filters/{filter_id}",
    response_model=DeleteResponse,
)
async def remove_filter_from_category(
    category_id: int,
    filter_id: int,
    _admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    result = await session.execute(
        select(CategorySubCategoryFilter).where(
            CategorySubCategoryFilter.category_id == category_id,
            CategorySubCategoryFilter.filter_id == filter_id,
        )
    )
    assignment = result.scalar_one_or_none()
    if not assignment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Filter is not assigned to this category",
        )
    await session.delete(assignment)
    await session.commit()
    return DeleteResponse(message="Filter removed from category successfully")
