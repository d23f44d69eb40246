import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import db, settings
from core.errors import CatalogError
from core.logging_setup import configure_logging
from resource_types import router as types_router
from resources import router as resources_router
from transfer import router as transfer_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="resource-catalog", lifespan=lifespan if use_lifespan else None)

    # Allow the frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed method=%s path=%s error=%s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.include_router(resources_router.router, tags=["resources"])
    app.include_router(types_router.router, tags=["types"])
    app.include_router(transfer_router.router, tags=["transfer"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "resource-catalog api"}

    return app


app = create_app()
