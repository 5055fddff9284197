from fastapi import Request

from upload_intake.backend.app.api.v1.uploads.schemas import PolicyResponse, StoredFileResponse, UploadResponse
from upload_intake.backend.app.application.uploads.dto import IntakeRequestDTO
from upload_intake.backend.app.application.uploads.mappers import group_by_field
from upload_intake.backend.app.domain.uploads.entities import Accepted
from upload_intake.backend.app.domain.uploads.value_objects import IntakeLimits, UploadPolicy


def get_intake_request_dto(request: Request) -> IntakeRequestDTO:
    return IntakeRequestDTO(
        content_type=request.headers.get("content-type"),
        body=request.stream(),
    )


def accepted_to_schema(accepted: Accepted) -> UploadResponse:
    grouped = group_by_field(accepted.files)
    return UploadResponse(
        files={
            name: [StoredFileResponse.model_validate(f) for f in files]
            for name, files in grouped.items()
        },
        fields=accepted.fields,
    )


def policy_to_schema(policy: UploadPolicy, limits: IntakeLimits) -> PolicyResponse:
    return PolicyResponse.model_validate(
        {"fields": policy.to_dict(), "limits": limits.to_dict()}
    )
