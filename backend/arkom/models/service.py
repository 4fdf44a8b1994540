from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(UTC)


class ServiceCategory(SQLModel, table=True):
    """Artist-owned shelf used to group services on a profile."""

    __tablename__ = "service_categories"

    id: int | None = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(sa_column=Column(String(50), nullable=False))
    sort_order: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: int | None = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    service_category_id: int | None = Field(
        default=None,
        foreign_key="service_categories.id",
        nullable=True,
        index=True,
    )
    title: str = Field(sa_column=Column(String(200), nullable=False))
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)


# Taxonomy ids below carry no foreign keys: a listing keeps whatever it opted
# into at creation time even after the taxonomy node or option is removed.
class ServiceSearchCategory(SQLModel, table=True):
    __tablename__ = "service_search_categories"

    id: int | None = Field(default=None, primary_key=True)
    service_id: int = Field(foreign_key="services.id", nullable=False, unique=True, index=True)
    catalogue_id: int | None = Field(default=None, nullable=True, index=True)
    category_id: int | None = Field(default=None, nullable=True, index=True)
    is_discoverable: bool = Field(default=True, nullable=False)


class ServiceSubCategorySelection(SQLModel, table=True):
    __tablename__ = "service_sub_category_selections"

    id: int | None = Field(default=None, primary_key=True)
    service_search_category_id: int = Field(
        foreign_key="service_search_categories.id",
        nullable=False,
        index=True,
    )
    filter_option_id: int = Field(nullable=False, index=True)
