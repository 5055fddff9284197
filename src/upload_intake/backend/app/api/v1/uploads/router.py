from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from upload_intake.backend.app.api.v1.uploads.deps import get_intake_upload_use_case
from upload_intake.backend.app.api.v1.uploads.mappers import accepted_to_schema, get_intake_request_dto, \
    policy_to_schema
from upload_intake.backend.app.api.v1.uploads.schemas import PolicyResponse, RejectionResponse, UploadResponse
from upload_intake.backend.app.application.uploads.use_cases import IntakeUploadUseCase
from upload_intake.backend.app.core.deps import get_intake_limits, get_upload_policy
from upload_intake.backend.app.domain.uploads.entities import Rejected
from upload_intake.backend.app.domain.uploads.errors import NoFilesUploaded, error_for
from upload_intake.backend.app.domain.uploads.value_objects import IntakeLimits, UploadPolicy

router = APIRouter(prefix="/uploads", tags=["uploads"])
form_router = APIRouter(tags=["form"])

intake_dep = Annotated[IntakeUploadUseCase, Depends(get_intake_upload_use_case)]
policy_dep = Annotated[UploadPolicy, Depends(get_upload_policy)]
limits_dep = Annotated[IntakeLimits, Depends(get_intake_limits)]

rejection_responses = {
    400: {"model": RejectionResponse},
    500: {"model": RejectionResponse},
}

UPLOAD_FORM = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Upload files</title></head>
<body>
  <h1>Upload files</h1>
  <form action="/submitform" method="post" enctype="multipart/form-data">
    <p><label>Image (JPEG/PNG): <input type="file" name="userfile"></label></p>
    <p><label>Documents (PDF, up to 3): <input type="file" name="userdocuments" multiple></label></p>
    <p><button type="submit">Upload</button></p>
  </form>
</body>
</html>
"""


async def run_intake(request: Request, use_case: IntakeUploadUseCase) -> UploadResponse:
    # the body is read straight from the ASGI stream, never through FastAPI's form parsing
    dto = get_intake_request_dto(request)
    result = await use_case.execute(dto)
    if isinstance(result, Rejected):
        raise error_for(result.reason, result.detail)
    if not result.files:
        raise NoFilesUploaded()
    return accepted_to_schema(result)


@router.post("", response_model=UploadResponse, responses=rejection_responses)
async def upload_files(
        request: Request,
        use_case: intake_dep,
):
    return await run_intake(request, use_case)


@router.get("/policy", response_model=PolicyResponse)
async def get_policy(
        policy: policy_dep,
        limits: limits_dep,
):
    return policy_to_schema(policy, limits)


@form_router.get("/", response_class=HTMLResponse)
async def upload_form():
    return HTMLResponse(UPLOAD_FORM)


@form_router.post("/submitform", response_model=UploadResponse, responses=rejection_responses)
async def submit_form(
        request: Request,
        use_case: intake_dep,
):
    return await run_intake(request, use_case)
