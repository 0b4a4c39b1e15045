"""FastAPI app for the development catalog backend."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from carcatalog.api.state import AppState, get_state
from carcatalog.config import CATALOG_RESOURCE, ensure_data_dir

from carcatalog.api.routes import cars

__all__ = ["app", "create_app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dir()
    logging.getLogger(__name__).info("Catalog backend serving /%s", CATALOG_RESOURCE)
    yield


def create_app(resource: str = CATALOG_RESOURCE) -> FastAPI:
    app = FastAPI(
        title="Car catalog API",
        description="Local stand-in for the remote car catalog",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(cars.router, prefix=f"/{resource.strip('/')}", tags=["cars"])
    return app


app = create_app()
