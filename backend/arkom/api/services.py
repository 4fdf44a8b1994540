from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arkom.api.deps import get_current_user
from arkom.core.db import get_session
from arkom.models.service import (
    Service,
    ServiceCategory,
    ServiceSearchCategory,
    ServiceSubCategorySelection,
)
from arkom.models.user import User
from arkom.schemas.services import (
    SearchCategoryDataPayload,
    SearchCategoryDataResponse,
    ServiceCreateRequest,
    ServiceListResponse,
    ServiceResponse,
)
from arkom.services.filter_cascade import FilterState, SearchCategoryData, listing_matches
from arkom.services.search_category_service import load_search_category_data

router = APIRouter(prefix="/services", tags=["services"])


def _selected_option_ids(payload: SearchCategoryDataPayload) -> list[int]:
    if payload.selected_filters:
        option_ids: list[int] = []
        for values in payload.selected_filters.values():
            option_ids.extend(values)
    else:
        option_ids = list(payload.sub_category_selections)
    # Keep first-seen order, drop duplicates.
    return list(dict.fromkeys(option_ids))


def _to_search_data_response(data: SearchCategoryData | None) -> SearchCategoryDataResponse | None:
    if data is None:
        return None
    return SearchCategoryDataResponse(
        is_discoverable=data.is_discoverable,
        catalogue_id=data.catalogue_id,
        category_id=data.category_id,
        sub_category_selections=list(data.sub_category_selections),
    )


def _to_service_response(
    service: Service,
    data: SearchCategoryData | None,
) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        user_id=str(service.user_id),
        title=service.title,
        service_category_id=service.service_category_id,
        is_active=service.is_active,
        created_at=service.created_at.isoformat(),
        search_category_data=_to_search_data_response(data),
    )


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ServiceResponse:
    title = " ".join(payload.title.strip().split())
    if not title:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Service title cannot be empty.",
        )

    if payload.service_category_id is not None:
        owned = await session.execute(
            select(ServiceCategory.id).where(
                ServiceCategory.id == payload.service_category_id,
                ServiceCategory.user_id == user.id,
            )
        )
        if owned.scalar_one_or_none() is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )

    service = Service(
        user_id=user.id,
        title=title,
        service_category_id=payload.service_category_id,
    )
    session.add(service)
    await session.flush()

    data: SearchCategoryData | None = None
    search_payload = payload.search_category_data
    if search_payload is not None:
        is_discoverable = (
            search_payload.is_discoverable if search_payload.is_discoverable is not None else True
        )
        search_category = ServiceSearchCategory(
            service_id=service.id,
            catalogue_id=search_payload.catalogue_id,
            category_id=search_payload.category_id,
            is_discoverable=is_discoverable,
        )
        session.add(search_category)
        await session.flush()

        option_ids = _selected_option_ids(search_payload)
        for option_id in option_ids:
            session.add(
                ServiceSubCategorySelection(
                    service_search_category_id=search_category.id,
                    filter_option_id=option_id,
                )
            )
        data = SearchCategoryData(
            is_discoverable=is_discoverable,
            catalogue_id=search_payload.catalogue_id,
            category_id=search_payload.category_id,
            sub_category_selections=tuple(option_ids),
        )

    await session.commit()
    await session.refresh(service)
    return _to_service_response(service, data)


@router.get("/browse", response_model=ServiceListResponse)
async def browse_services(
    catalogue_id: int | None = None,
    category_id: int | None = None,
    sub_category_selections: list[int] | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> ServiceListResponse:
    filters = FilterState(
        catalogue_id=catalogue_id,
        category_id=category_id,
        sub_category_selections=tuple(sub_category_selections or ()),
    )
    result = await session.execute(
        select(Service)
        .where(Service.is_active.is_(True))
        .order_by(Service.created_at.desc(), Service.id.desc())
    )
    services = list(result.scalars().all())
    search_data = await load_search_category_data(session, [item.id for item in services])

    return ServiceListResponse(
        services=[
            _to_service_response(service, search_data.get(service.id))
            for service in services
            if listing_matches(filters, search_data.get(service.id))
        ]
    )


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    session: AsyncSession = Depends(get_session),
) -> ServiceResponse:
    result = await session.execute(select(Service).where(Service.id == service_id))
    service = result.scalar_one_or_none()
    if not service or not service.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found",
        )
    search_data = await load_search_category_data(session, [service.id])
    return _to_service_response(service, search_data.get(service.id))
