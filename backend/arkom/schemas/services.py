from pydantic import BaseModel, Field


class SearchCategoryDataPayload(BaseModel):
    is_discoverable: bool | None = None
    catalogue_id: int | None = None
    category_id: int | None = None
    sub_category_selections: list[int] = Field(default_factory=list)
    # Older clients send {filter_id: [option_id, ...]}; it wins when non-empty.
    selected_filters: dict[str, list[int]] | None = None


class SearchCategoryDataResponse(BaseModel):
    is_discoverable: bool
    catalogue_id: int | None = None
    category_id: int | None = None
    sub_category_selections: list[int] = Field(default_factory=list)


class ServiceCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    service_category_id: int | None = None
    search_category_data: SearchCategoryDataPayload | None = None


class ServiceResponse(BaseModel):
    id: int
    user_id: str
    title: str
    service_category_id: int | None = None
    is_active: bool
    created_at: str
    search_category_data: SearchCategoryDataResponse | None = None


class ServiceListResponse(BaseModel):
    services: list[ServiceResponse]
