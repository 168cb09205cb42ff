"""Storage configuration models."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from .models import Visibility


class StorageConfig(BaseModel):
    """Adapter configuration, captured once at construction."""
    model_config = ConfigDict(frozen=True)

    bucket: str
    region: Optional[str] = None
    endpoint: Optional[str] = None

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    # URL generation
    domain: Optional[str] = None
    ssl: bool = True
    url_host_template: str = "{bucket}.s3.{region}.amazonaws.com"

    # Header overrides for uploads and directory markers, below per-call
    # headers. Copies keep the source metadata unless the call overrides it.
    headers: dict[str, str] = Field(default_factory=dict)

    # Transport pass-through
    max_retry_attempts: int = 3
    timeout: int = 30
    addressing_style: str = "auto"


class OperationConfig(BaseModel):
    """Per-call options.

    Unknown keys are accepted and ignored so callers can pass a shared
    option bag.
    """
    model_config = ConfigDict(extra="allow")

    headers: dict[str, str] = Field(default_factory=dict)
    visibility: Optional[Visibility] = None
    # URL generation overrides, falling back to the adapter config
    domain: Optional[str] = None
    ssl: Optional[bool] = None

    @classmethod
    def coerce(cls, config: Any = None) -> "OperationConfig":
        """Accept None, a mapping or an OperationConfig."""
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        return cls.model_validate(config)
