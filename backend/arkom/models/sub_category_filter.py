from datetime import UTC, datetime

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(UTC)


class SubCategoryFilter(SQLModel, table=True):
    __tablename__ = "sub_category_filters"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    sort_order: int = Field(default=0, nullable=False)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)


class SubCategoryFilterOption(SQLModel, table=True):
    __tablename__ = "sub_category_filter_options"

    id: int | None = Field(default=None, primary_key=True)
    filter_id: int = Field(
        foreign_key="sub_category_filters.id",
        nullable=False,
        index=True,
    )
    name: str = Field(sa_column=Column(String(100), nullable=False))
    sort_order: int = Field(default=0, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)


class CategorySubCategoryFilter(SQLModel, table=True):
    __tablename__ = "category_sub_category_filters"
    __table_args__ = (
        UniqueConstraint(
            "category_id",
            "filter_id",
            name="uq_category_sub_category_filter",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="categories.id", nullable=False, index=True)
    filter_id: int = Field(
        foreign_key="sub_category_filters.id",
        nullable=False,
        index=True,
    )
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
