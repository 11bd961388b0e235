# main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import engine, Base
from app.core.logging import configure_logging

# Import the models so they register on Base.metadata
from app.models.customer import Customer  # noqa: F401
from app.models.item import Item, ItemPhoto  # noqa: F401
from app.models.system_settings import SystemSettings  # noqa: F401

from app.api.containers import router as containers_router
from app.api.customers import router as customers_router
from app.api.dashboard import router as dashboard_router
from app.api.items import router as items_router
from app.api.settings import router as settings_router

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="AFQ Shipping API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(items_router)
app.include_router(containers_router)
app.include_router(customers_router)
app.include_router(settings_router)
app.include_router(dashboard_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
