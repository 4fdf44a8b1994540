from pydantic import BaseModel, ConfigDict, Field


class CatalogueItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sort_order: int
    is_active: bool


class CategoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    catalogue_id: int
    name: str
    sort_order: int
    is_active: bool


class SubCategoryFilterOptionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filter_id: int
    name: str
    sort_order: int
    is_active: bool


class SubCategoryFilterItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sort_order: int
    is_active: bool
    options: list[SubCategoryFilterOptionItem] = Field(default_factory=list)
    category_count: int | None = None


class CategoryFilterAssignmentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    filter_id: int


class CatalogueListResponse(BaseModel):
    catalogues: list[CatalogueItem]


class CategoryListResponse(BaseModel):
    categories: list[CategoryItem]


class SubCategoryFilterListResponse(BaseModel):
    filters: list[SubCategoryFilterItem]


class DeleteResponse(BaseModel):
    message: str


class CatalogueCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    sort_order: int | None = None


class CategoryCreateRequest(BaseModel):
    catalogue_id: int
    name: str = Field(min_length=1, max_length=100)
    sort_order: int | None = None


class SubCategoryFilterCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    sort_order: int | None = None


class SubCategoryFilterOptionCreateRequest(BaseModel):
    filter_id: int
    name: str = Field(min_length=1, max_length=100)
    sort_order: int | None = None


class TaxonomyNodeUpdateRequest(BaseModel):
    """Partial update shared by catalogues, categories, filters and options."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    sort_order: int | None = None
    is_active: bool | None = None


class CategoryFilterAssignRequest(BaseModel):
    category_id: int
    filter_id: int
