import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from upload_intake.backend.app.api.v1.router import api_router
from upload_intake.backend.app.api.v1.uploads.router import form_router
from upload_intake.backend.app.core import settings
from upload_intake.backend.app.core.deps import get_upload_policy
from upload_intake.backend.app.core.logging import configure_logging
from upload_intake.backend.app.exception_handlers import register_exception_handlers

logger = logging.getLogger(__name__)


def create_app():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        policy = get_upload_policy()
        logger.info(
            "Accepting uploads for fields %s into %s",
            ", ".join(policy.field_names),
            settings.FILE_STORAGE_DIR,
        )
        yield

    app = FastAPI(lifespan=lifespan)
    app.include_router(form_router)
    app.include_router(api_router, prefix="/api/v1")
    @app.get("/health")
    def health():
        return {"status": "ok"}

    register_exception_handlers(app)
    return app

app = create_app()
