import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from careerdocs.config import get_settings
from careerdocs.api.routes.health import router as health_router
from careerdocs.api.routes.generation import router as generation_router
from careerdocs.api.routes.downloads import router as downloads_router
from careerdocs.api.routes.documents import router as documents_router
from careerdocs.api.routes.drafts import router as drafts_router


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Career Documents API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(generation_router)
    app.include_router(downloads_router)
    app.include_router(documents_router)
    app.include_router(drafts_router)
    return app

app = create_app()
