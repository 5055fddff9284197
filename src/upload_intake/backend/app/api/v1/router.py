from fastapi import APIRouter

from upload_intake.backend.app.api.v1.uploads import router as upload_router

api_router = APIRouter()
api_router.include_router(upload_router.router)
