import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from upload_intake.backend.app.domain.uploads.errors import IntakeError, NoFilesUploaded

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IntakeError)
    async def intake_rejected(_: Request, exc: IntakeError):
        # client faults all answer 400; only storage failures are on us
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if exc.kind.is_client_fault
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(
            status_code=status_code,
            content={"reason": str(exc.kind), "detail": exc.detail},
        )

    @app.exception_handler(NoFilesUploaded)
    async def no_files_uploaded(_: Request, exc: NoFilesUploaded):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"reason": "NoFilesUploaded", "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception(_: Request, exc: Exception):
        logger.exception("Unhandled exception", exc_info=exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error"
            },
        )
