from functools import lru_cache
from pathlib import Path

from upload_intake.backend.app.application.uploads.use_cases import IntakeUploadUseCase
from upload_intake.backend.app.core.config import Settings, settings
from upload_intake.backend.app.domain.files.interfaces import FileStorage
from upload_intake.backend.app.domain.uploads.value_objects import FieldRule, IntakeLimits, UploadPolicy
from upload_intake.backend.app.infrastructure.files.filesystem_storage import FilesystemFileStorage
from upload_intake.backend.app.infrastructure.files.naming import TimestampNameGenerator


def build_upload_policy(cfg: Settings) -> UploadPolicy:
    return UploadPolicy(
        {
            name: FieldRule(
                allowed_mime_types=frozenset(rule.allowed_mime_types),
                max_count=rule.max_count,
                max_bytes_per_file=rule.max_bytes_per_file,
            )
            for name, rule in cfg.UPLOAD_POLICY.items()
        }
    )


def build_intake_limits(cfg: Settings) -> IntakeLimits:
    return IntakeLimits(
        max_header_bytes=cfg.MAX_HEADER_BYTES,
        max_field_bytes=cfg.MAX_FIELD_BYTES,
        max_parts=cfg.MAX_PARTS,
    )


@lru_cache
def get_upload_policy() -> UploadPolicy:
    """
    Loaded once at start-up; there is no hot reload.
    """
    return build_upload_policy(settings)


@lru_cache
def get_intake_limits() -> IntakeLimits:
    return build_intake_limits(settings)


@lru_cache
def get_file_storage() -> FileStorage:
    """
    Singleton file storage instance.
    Swap implementation here (FS / S3 / MinIO) without touching use cases.
    """
    base_dir = Path(settings.FILE_STORAGE_DIR)
    base_dir.mkdir(parents=True, exist_ok=True)
    return FilesystemFileStorage(base_dir, fsync=settings.FSYNC_UPLOADS)


@lru_cache
def get_name_generator() -> TimestampNameGenerator:
    return TimestampNameGenerator()


def build_intake_use_case(
    *,
    file_storage: FileStorage,
    policy: UploadPolicy,
    limits: IntakeLimits,
) -> IntakeUploadUseCase:
    return IntakeUploadUseCase(
        file_storage=file_storage,
        policy=policy,
        name_generator=get_name_generator(),
        limits=limits,
    )
