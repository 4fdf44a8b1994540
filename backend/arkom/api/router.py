from fastapi import APIRouter

from arkom.api.auth import router as auth_router
from arkom.api.search_categories import router as search_categories_router
from arkom.api.service_categories import router as service_categories_router
from arkom.api.services import router as services_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(search_categories_router)
api_router.include_router(service_categories_router)
api_router.include_router(services_router)
