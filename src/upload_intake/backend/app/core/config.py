from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024


class FieldRuleSettings(BaseModel):
    allowed_mime_types: list[str] = Field(min_length=1)
    max_count: int = Field(ge=1)
    max_bytes_per_file: int = Field(ge=1)


def _default_upload_policy() -> dict[str, FieldRuleSettings]:
    return {
        "userfile": FieldRuleSettings(
            allowed_mime_types=["image/jpeg", "image/png"],
            max_count=1,
            max_bytes_per_file=3 * MB,
        ),
        "userdocuments": FieldRuleSettings(
            allowed_mime_types=["application/pdf"],
            max_count=3,
            max_bytes_per_file=3 * MB,
        ),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', case_sensitive=True, extra='ignore')
    FILE_STORAGE_DIR: str = 'uploads'
    # JSON in the environment: {"field": {"allowed_mime_types": [...], "max_count": 1, ...}}
    UPLOAD_POLICY: dict[str, FieldRuleSettings] = Field(default_factory=_default_upload_policy)
    MAX_HEADER_BYTES: int = Field(default=16 * 1024, ge=256)
    MAX_FIELD_BYTES: int = Field(default=1 * MB, ge=1)
    MAX_PARTS: int = Field(default=1000, ge=1)
    FSYNC_UPLOADS: bool = True
    LOG_LEVEL: str = 'INFO'
    API_HOST: str = '0.0.0.0'
    API_PORT: int = 3000


settings = Settings()
