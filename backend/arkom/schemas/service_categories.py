from pydantic import BaseModel, ConfigDict, Field


class ServiceCategoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    # The client-side "Other" shelf uses the string id "other".
    id: int | str
    name: str
    sort_order: int


class ServiceCategoryListResponse(BaseModel):
    categories: list[ServiceCategoryItem]


class ServiceCategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    sort_order: int | None = None


class ServiceCategoryUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class ServiceCategorySortOrderEntry(BaseModel):
    id: int
    sort_order: int


class ServiceCategorySortOrderRequest(BaseModel):
    updates: list[ServiceCategorySortOrderEntry]


class ServiceCategorySortOrderResponse(BaseModel):
    updated: int
    message: str
