from arkom.models.catalogue import Catalogue, Category
from arkom.models.service import (
    Service,
    ServiceCategory,
    ServiceSearchCategory,
    ServiceSubCategorySelection,
)
from arkom.models.sub_category_filter import (
    CategorySubCategoryFilter,
    SubCategoryFilter,
    SubCategoryFilterOption,
)
from arkom.models.user import User, UserRole

__all__ = [
    "Catalogue",
    "Category",
    "CategorySubCategoryFilter",
    "Service",
    "ServiceCategory",
    "ServiceSearchCategory",
    "ServiceSubCategorySelection",
    "SubCategoryFilter",
    "SubCategoryFilterOption",
    "User",
    "UserRole",
]
