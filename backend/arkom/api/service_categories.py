from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arkom.api.deps import get_current_user
from arkom.core.db import get_session
from arkom.models.service import Service, ServiceCategory
from arkom.models.user import User
from arkom.schemas.search_categories import DeleteResponse
from arkom.schemas.service_categories import (
    ServiceCategoryCreateRequest,
    ServiceCategoryItem,
    ServiceCategoryListResponse,
    ServiceCategorySortOrderRequest,
    ServiceCategorySortOrderResponse,
    ServiceCategoryUpdateRequest,
)
from arkom.services.search_category_service import clean_taxonomy_name, next_sort_order

router = APIRouter(prefix="/service-categories", tags=["service-categories"])


def _now() -> datetime:
    return datetime.now(UTC)


def _require_name(value: str) -> str:
    name = clean_taxonomy_name(value)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Category name is required",
        )
    return name


async def _get_owned_category(
    session: AsyncSession,
    *,
    user: User,
    category_id: int,
) -> ServiceCategory:
    result = await session.execute(
        select(ServiceCategory).where(
            ServiceCategory.id == category_id,
            ServiceCategory.user_id == user.id,
        )
    )
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )
    return category


@router.get("/categories", response_model=ServiceCategoryListResponse)
async def list_service_categories(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ServiceCategoryListResponse:
    result = await session.execute(
        select(ServiceCategory)
        .where(ServiceCategory.user_id == user.id)
        .order_by(ServiceCategory.sort_order.asc(), ServiceCategory.id.asc())
    )
    return ServiceCategoryListResponse(
        categories=[ServiceCategoryItem.model_validate(item) for item in result.scalars().all()]
    )


@router.post(
    "/categories",
    response_model=ServiceCategoryItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_service_category(
    payload: ServiceCategoryCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ServiceCategoryItem:
    name = _require_name(payload.name)
    sort_order = payload.sort_order
    if sort_order is None:
        # Slot 0 belongs to the client-side "Other" shelf.
        sort_order = max(
            1,
            await next_sort_order(
                session, ServiceCategory.sort_order, ServiceCategory.user_id == user.id
            ),
        )
    category = ServiceCategory(user_id=user.id, name=name, sort_order=sort_order)
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return ServiceCategoryItem.model_validate(category)


# Declared before "/categories/{category_id}" so "sort-order" is not parsed as an id.
@router.put("/categories/sort-order", response_model=ServiceCategorySortOrderResponse)
async def update_service_category_sort_order(
    payload: ServiceCategorySortOrderRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ServiceCategorySortOrderResponse:
    updated = 0
    now = _now()
    for entry in payload.updates:
        result = await session.execute(
            update(ServiceCategory)
            .where(
                ServiceCategory.id == entry.id,
                ServiceCategory.user_id == user.id,
            )
            .values(sort_order=entry.sort_order, updated_at=now)
        )
        updated += result.rowcount or 0
    await session.commit()
    return ServiceCategorySortOrderResponse(
        updated=updated,
        message="Sort order updated successfully",
    )


@router.put("/categories/{category_id}", response_model=ServiceCategoryItem)
async def update_service_category(
    category_id: int,
    payload: ServiceCategoryUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ServiceCategoryItem:
    category = await _get_owned_category(session, user=user, category_id=category_id)
    category.name = _require_name(payload.name)
    category.updated_at = _now()
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return ServiceCategoryItem.model_validate(category)


@router.delete("/categories/{category_id}", response_model=DeleteResponse)
async def delete_service_category(
    category_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    category = await _get_owned_category(session, user=user, category_id=category_id)
    # Services on a deleted shelf fall back to "Other".
    await session.execute(
        update(Service)
        .where(Service.service_category_id == category.id)
        .values(service_category_id=None)
    )
    await session.delete(category)
    await session.commit()
    return DeleteResponse(message="Category deleted successfully")
