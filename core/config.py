"""
Configuration - project settings management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class StorageSettings(BaseModel):
    bucket: Optional[str] = None
    region: Optional[str] = None
    endpoint: Optional[str] = None  # S3-compatible endpoint, e.g. https://obs.cn-north-4.myhuaweicloud.com
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    # URL generation
    domain: Optional[str] = None  # custom host used instead of the virtual-host name
    ssl: bool = True
    url_host_template: str = "{bucket}.s3.{region}.amazonaws.com"
    # Default header overrides applied to every write
    headers: dict[str, str] = Field(default_factory=dict)
    # Transport settings, passed through to the boto3 client
    max_retry_attempts: int = 3
    timeout: int = 30
    addressing_style: str = "auto"  # auto, virtual, path


class Settings(BaseSettings):
    """Project settings"""

    PROJECT_NAME: str = Field(default="bucketfs")
    VERSION: str = Field(default="0.1.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: Optional[str] = Field(default=None, description="Overrides the DEBUG-derived root level")

    storage: StorageSettings = Field(default_factory=StorageSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


settings = Settings()
