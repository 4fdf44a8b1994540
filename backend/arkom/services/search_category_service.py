from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arkom.models.catalogue import Catalogue, Category
from arkom.models.service import ServiceSearchCategory, ServiceSubCategorySelection
from arkom.models.sub_category_filter import (
    CategorySubCategoryFilter,
    SubCategoryFilter,
    SubCategoryFilterOption,
)
from arkom.schemas.search_categories import (
    SubCategoryFilterItem,
    SubCategoryFilterOptionItem,
)
from arkom.services.filter_cascade import SearchCategoryData, applicable_filters

logger = logging.getLogger(__name__)


def clean_taxonomy_name(name: str) -> str:
    return " ".join(name.strip().split())


async def next_sort_order(session: AsyncSession, column, *criteria) -> int:
    stmt = select(func.max(column))
    if criteria:
        stmt = stmt.where(*criteria)
    result = await session.execute(stmt)
    current = result.scalar_one_or_none()
    return 0 if current is None else int(current) + 1


async def list_catalogues(
    session: AsyncSession,
    *,
    include_inactive: bool = False,
) -> list[Catalogue]:
    stmt = select(Catalogue)
    if not include_inactive:
        stmt = stmt.where(Catalogue.is_active.is_(True))
    stmt = stmt.order_by(Catalogue.sort_order.asc(), Catalogue.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_categories(session: AsyncSession, *, catalogue_id: int) -> list[Category]:
    result = await session.execute(
        select(Category)
        .where(Category.catalogue_id == catalogue_id)
        .order_by(Category.sort_order.asc(), Category.id.asc())
    )
    return list(result.scalars().all())


async def _options_by_filter(
    session: AsyncSession,
    filter_ids: list[int],
) -> dict[int, list[SubCategoryFilterOption]]:
    if not filter_ids:
        return {}
    result = await session.execute(
        select(SubCategoryFilterOption)
        .where(SubCategoryFilterOption.filter_id.in_(filter_ids))
        .order_by(SubCategoryFilterOption.sort_order.asc(), SubCategoryFilterOption.id.asc())
    )
    grouped: dict[int, list[SubCategoryFilterOption]] = defaultdict(list)
    for option in result.scalars().all():
        grouped[option.filter_id].append(option)
    return dict(grouped)


def _to_filter_item(
    sub_filter: SubCategoryFilter,
    options: list[SubCategoryFilterOption],
    *,
    category_count: int | None = None,
) -> SubCategoryFilterItem:
    return SubCategoryFilterItem(
        id=sub_filter.id,
        name=sub_filter.name,
        sort_order=sub_filter.sort_order,
        is_active=sub_filter.is_active,
        options=[SubCategoryFilterOptionItem.model_validate(option) for option in options],
        category_count=category_count,
    )


async def list_filters_with_options(
    session: AsyncSession,
    *,
    include_inactive: bool = False,
) -> list[SubCategoryFilterItem]:
    stmt = select(SubCategoryFilter)
    if not include_inactive:
        stmt = stmt.where(SubCategoryFilter.is_active.is_(True))
    stmt = stmt.order_by(SubCategoryFilter.sort_order.asc(), SubCategoryFilter.id.asc())
    result = await session.execute(stmt)
    filters = list(result.scalars().all())

    filter_ids = [item.id for item in filters]
    options = await _options_by_filter(session, filter_ids)

    counts: dict[int, int] = {}
    if filter_ids:
        count_result = await session.execute(
            select(CategorySubCategoryFilter.filter_id, func.count())
            .where(CategorySubCategoryFilter.filter_id.in_(filter_ids))
            .group_by(CategorySubCategoryFilter.filter_id)
        )
        counts = {filter_id: int(count or 0) for filter_id, count in count_result.all()}

    return [
        _to_filter_item(item, options.get(item.id, []), category_count=counts.get(item.id, 0))
        for item in filters
    ]


async def assigned_filter_ids(session: AsyncSession, *, category_id: int) -> list[int]:
    result = await session.execute(
        select(CategorySubCategoryFilter.filter_id).where(
            CategorySubCategoryFilter.category_id == category_id
        )
    )
    return list(result.scalars().all())


async def load_category_filters(
    session: AsyncSession,
    *,
    category_id: int,
) -> list[SubCategoryFilterItem]:
    filter_ids = await assigned_filter_ids(session, category_id=category_id)
    if not filter_ids:
        return []
    result = await session.execute(
        select(SubCategoryFilter).where(SubCategoryFilter.id.in_(filter_ids))
    )
    filters = list(result.scalars().all())
    options = await _options_by_filter(session, [item.id for item in filters])
    return applicable_filters(
        [_to_filter_item(item, options.get(item.id, [])) for item in filters],
        filter_ids,
    )


async def delete_category_cascade(session: AsyncSession, category_ids: list[int]) -> None:
    if not category_ids:
        return
    await session.execute(
        delete(CategorySubCategoryFilter).where(
            CategorySubCategoryFilter.category_id.in_(category_ids)
        )
    )
    await session.execute(delete(Category).where(Category.id.in_(category_ids)))


async def delete_catalogue_cascade(session: AsyncSession, catalogue_id: int) -> int:
    category_result = await session.execute(
        select(Category.id).where(Category.catalogue_id == catalogue_id)
    )
    category_ids = list(category_result.scalars().all())
    await delete_category_cascade(session, category_ids)
    await session.execute(delete(Catalogue).where(Catalogue.id == catalogue_id))
    logger.info(
        "Deleted catalogue %s with %d categories", catalogue_id, len(category_ids)
    )
    return len(category_ids)


async def delete_filter_cascade(session: AsyncSession, filter_id: int) -> None:
    await session.execute(
        delete(CategorySubCategoryFilter).where(CategorySubCategoryFilter.filter_id == filter_id)
    )
    await session.execute(
        delete(SubCategoryFilterOption).where(SubCategoryFilterOption.filter_id == filter_id)
    )
    await session.execute(delete(SubCategoryFilter).where(SubCategoryFilter.id == filter_id))


async def load_search_category_data(
    session: AsyncSession,
    service_ids: list[int],
) -> dict[int, SearchCategoryData]:
    if not service_ids:
        return {}
    rows_result = await session.execute(
        select(ServiceSearchCategory).where(ServiceSearchCategory.service_id.in_(service_ids))
    )
    rows = list(rows_result.scalars().all())
    if not rows:
        return {}

    selections_result = await session.execute(
        select(ServiceSubCategorySelection)
        .where(ServiceSubCategorySelection.service_search_category_id.in_([row.id for row in rows]))
        .order_by(ServiceSubCategorySelection.id.asc())
    )
    selections: dict[int, list[int]] = defaultdict(list)
    for selection in selections_result.scalars().all():
        selections[selection.service_search_category_id].append(selection.filter_option_id)

    return {
        row.service_id: SearchCategoryData(
            is_discoverable=row.is_discoverable,
            catalogue_id=row.catalogue_id,
            category_id=row.category_id,
            sub_category_selections=tuple(selections.get(row.id, [])),
        )
        for row in rows
    }
