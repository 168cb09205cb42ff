"""Filesystem adapter entry point and lifecycle management."""
from typing import Optional
from functools import lru_cache

from core.config import settings
from core.logging_config import get_logger
from .base import FilesystemAdapter
from .config import StorageConfig
from .exceptions import ConfigurationError

logger = get_logger(__name__)

# Global adapter instance
_storage_adapter: Optional[FilesystemAdapter] = None


@lru_cache
def get_storage_config() -> StorageConfig:
    """Get storage configuration from settings.

    Assembles StorageConfig from core.config.settings to keep a single
    source of truth for configuration.

    Returns:
        Storage configuration instance

    Raises:
        ConfigurationError: If no bucket is configured
    """
    s = settings.storage
    if not s.bucket:
        raise ConfigurationError("STORAGE__BUCKET is not configured")

    return StorageConfig(
        bucket=s.bucket,
        region=s.region,
        endpoint=s.endpoint,
        aws_access_key_id=s.aws_access_key_id,
        aws_secret_access_key=s.aws_secret_access_key,
        domain=s.domain,
        ssl=s.ssl,
        url_host_template=s.url_host_template,
        headers=dict(s.headers),
        max_retry_attempts=s.max_retry_attempts,
        timeout=s.timeout,
        addressing_style=s.addressing_style,
    )


def init_storage_adapter(config: Optional[StorageConfig] = None) -> FilesystemAdapter:
    """Initialize the filesystem adapter.

    Args:
        config: Explicit configuration; defaults to the settings-derived one

    Returns:
        The initialized adapter
    """
    global _storage_adapter

    if _storage_adapter is not None:
        logger.warning("Storage adapter already initialized")
        return _storage_adapter

    from .providers.s3 import build_s3_adapter

    try:
        config = config or get_storage_config()
        _storage_adapter = build_s3_adapter(config)
    except Exception as e:
        logger.error("Failed to initialize storage adapter", error=str(e))
        raise

    logger.info(
        "Storage adapter initialized",
        bucket=config.bucket,
        endpoint=config.endpoint
    )
    return _storage_adapter


def get_storage_adapter() -> Optional[FilesystemAdapter]:
    """Get adapter instance, or None if not initialized."""
    return _storage_adapter


def shutdown_storage_adapter() -> None:
    """Drop the adapter; boto3 clients need no explicit cleanup."""
    global _storage_adapter

    if _storage_adapter is None:
        return
    _storage_adapter = None
    logger.info("Storage adapter shutdown")


def get_storage() -> FilesystemAdapter:
    """Return the initialized adapter.

    Raises:
        RuntimeError: If the adapter was not initialized
    """
    adapter = get_storage_adapter()
    if adapter is None:
        raise RuntimeError(
            "Storage adapter not initialized. "
            "Call init_storage_adapter() during startup."
        )
    return adapter


# Export public interface
__all__ = [
    # Lifecycle
    "init_storage_adapter",
    "get_storage_adapter",
    "shutdown_storage_adapter",
    "get_storage",

    # Configuration
    "get_storage_config",
    "StorageConfig",
    "OperationConfig",

    # Protocols
    "FilesystemAdapter",
    "ChecksumProvider",
    "PublicUrlGenerator",
    "TemporaryUrlGenerator",

    # Models
    "FileAttributes",
    "DirectoryAttributes",
    "StorageAttributes",
    "Visibility",
    "Permission",
    "Grant",
    "Acl",

    # Exceptions
    "StorageError",
    "ConfigurationError",
    "FilesystemOperationFailed",
    "UnableToCheckExistence",
    "UnableToCheckFileExistence",
    "UnableToCheckDirectoryExistence",
    "UnableToReadFile",
    "UnableToWriteFile",
    "UnableToDeleteFile",
    "UnableToDeleteDirectory",
    "UnableToCreateDirectory",
    "UnableToListContents",
    "UnableToCopyFile",
    "UnableToMoveFile",
    "UnableToSetVisibility",
    "UnableToRetrieveMetadata",
    "UnableToProvideChecksum",
    "UnableToGenerateTemporaryUrl",

    # Visibility translation
    "apply_visibility",
    "visibility_from_acl",
]

# Import models and exceptions for easier access
from .base import ChecksumProvider, PublicUrlGenerator, TemporaryUrlGenerator
from .config import OperationConfig
from .models import (
    FileAttributes,
    DirectoryAttributes,
    StorageAttributes,
    Visibility,
    Permission,
    Grant,
    Acl,
)
from .exceptions import (
    StorageError,
    FilesystemOperationFailed,
    UnableToCheckExistence,
    UnableToCheckFileExistence,
    UnableToCheckDirectoryExistence,
    UnableToReadFile,
    UnableToWriteFile,
    UnableToDeleteFile,
    UnableToDeleteDirectory,
    UnableToCreateDirectory,
    UnableToListContents,
    UnableToCopyFile,
    UnableToMoveFile,
    UnableToSetVisibility,
    UnableToRetrieveMetadata,
    UnableToProvideChecksum,
    UnableToGenerateTemporaryUrl,
)
from .visibility import apply_visibility, visibility_from_acl
