from typing import Annotated

from fastapi import Depends

from upload_intake.backend.app.application.uploads.use_cases import IntakeUploadUseCase
from upload_intake.backend.app.core.deps import build_intake_use_case, get_file_storage, get_intake_limits, \
    get_upload_policy
from upload_intake.backend.app.domain.files.interfaces import FileStorage
from upload_intake.backend.app.domain.uploads.value_objects import IntakeLimits, UploadPolicy


async def get_intake_upload_use_case(
        storage: Annotated[FileStorage, Depends(get_file_storage)],
        policy: Annotated[UploadPolicy, Depends(get_upload_policy)],
        limits: Annotated[IntakeLimits, Depends(get_intake_limits)],
) -> IntakeUploadUseCase:
    return build_intake_use_case(file_storage=storage, policy=policy, limits=limits)
