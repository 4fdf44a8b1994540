"""
Arkom search-category API.

Run with:
    uvicorn arkom.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arkom.api.router import api_router
from arkom.core.config import get_settings
from arkom.core.db import init_db
from arkom.core.logging import configure_logging

settings = get_settings()
logger = configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_db()
    logger.info(
        "Starting %s (env=%s, cors_origins=%s)",
        settings.app_name,
        settings.app_env,
        settings.cors_origins,
    )
    yield
    logger.info("Stopping %s", settings.app_name)


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": settings.app_name}
