"""S3-compatible filesystem adapter implementation."""
import time
from datetime import datetime
from typing import Any, BinaryIO, Iterator, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from core.logging_config import get_logger
from ..base import ConfigLike
from ..config import OperationConfig, StorageConfig
from ..exceptions import (
    ConfigurationError,
    StorageError,
    UnableToCheckFileExistence,
    UnableToCopyFile,
    UnableToCreateDirectory,
    UnableToDeleteDirectory,
    UnableToDeleteFile,
    UnableToGenerateTemporaryUrl,
    UnableToMoveFile,
    UnableToProvideChecksum,
    UnableToReadFile,
    UnableToRetrieveMetadata,
    UnableToSetVisibility,
    UnableToWriteFile,
)
from ..listing import DirectoryLister
from ..metadata import map_head_response
from ..models import Acl, FileAttributes, StorageAttributes, Visibility
from ..utils import (
    ExtensionMimeTypeDetector,
    MimeTypeDetector,
    directory_key,
    has_header,
    headers_to_params,
    is_not_found,
    needs_metadata_replace,
)
from ..visibility import apply_visibility, visibility_from_acl

logger = get_logger(__name__)

# Per-request key limit of DeleteObjects
MAX_DELETE_BATCH = 1000


class S3FilesystemAdapter:
    """Filesystem adapter over an S3-compatible bucket."""

    def __init__(
        self,
        client: Any,  # boto3 S3 client
        config: StorageConfig,
        mime_type_detector: Optional[MimeTypeDetector] = None
    ):
        """Initialize S3 adapter.

        Args:
            client: Boto3 S3 client instance
            config: Storage configuration
            mime_type_detector: Content-Type fallback for writes
        """
        self.client = client
        self.config = config
        self.bucket = config.bucket
        self.region = config.region or "us-east-1"
        self.mime_type_detector = mime_type_detector or ExtensionMimeTypeDetector()
        self.lister = DirectoryLister(client, self.bucket)

    # Existence
    def file_exists(self, path: str) -> bool:
        """Check if an object exists; only a 404 means absent."""
        try:
            self.client.head_object(Bucket=self.bucket, Key=path)
        except Exception as e:
            if is_not_found(e):
                return False
            raise UnableToCheckFileExistence.at_location(path, e) from e
        return True

    def directory_exists(self, path: str) -> bool:
        """Check if a directory exists."""
        return self.lister.directory_exists(path)

    # Write / read
    def write(self, path: str, contents: Union[bytes, str], config: ConfigLike = None) -> None:
        """Write contents to an object."""
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        self._put_object(path, contents, config)

    def write_stream(self, path: str, contents: BinaryIO, config: ConfigLike = None) -> None:
        """Write a readable binary stream to an object."""
        self._put_object(path, contents, config)

    def read(self, path: str) -> bytes:
        """Read an object fully."""
        body = self._get_body(path)
        try:
            return body.read()
        except Exception as e:
            raise UnableToReadFile.at_location(path, e) from e
        finally:
            body.close()

    def read_stream(self, path: str) -> Any:
        """Open an object for streaming; the caller closes the returned body."""
        return self._get_body(path)

    # Delete
    def delete(self, path: str) -> None:
        """Delete an object."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except Exception as e:
            raise UnableToDeleteFile.at_location(path, e) from e
        logger.info("Deleted object", bucket=self.bucket, key=path)

    def delete_directory(self, path: str) -> None:
        """Delete a directory marker and every key below it.

        Keys are discovered through a deep listing and removed in batches
        of at most ``MAX_DELETE_BATCH``, one request at a time. There is no
        rollback: batches flushed before a failure stay deleted.

        Args:
            path: Directory path

        Raises:
            UnableToDeleteDirectory: If listing or any batch fails
        """
        batch = [directory_key(path)]
        flushed = 0
        try:
            for item in self.list_contents(path, deep=True):
                # Listed directory paths are exact common prefixes
                batch.append(item.path)
                if len(batch) == MAX_DELETE_BATCH:
                    self._delete_batch(batch)
                    flushed += len(batch)
                    batch = []

            if batch:
                self._delete_batch(batch)
                flushed += len(batch)
        except Exception as e:
            raise UnableToDeleteDirectory.at_location(path, e) from e

        logger.info("Deleted directory", bucket=self.bucket, path=path, keys=flushed)

    def _delete_batch(self, keys: list[str]) -> None:
        logger.debug("Deleting key batch", bucket=self.bucket, count=len(keys))
        response = self.client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True}
        )
        errors = (response or {}).get("Errors") or []
        if errors:
            first = errors[0]
            raise StorageError(
                f"Failed to delete {len(errors)} of {len(keys)} keys, "
                f"first {first.get('Key')}: {first.get('Code')} {first.get('Message', '')}".rstrip()
            )

    # Directories
    def create_directory(self, path: str, config: ConfigLike = None) -> None:
        """Create a directory marker object."""
        config = OperationConfig.coerce(config)
        key = directory_key(path)
        try:
            params = headers_to_params({**self.config.headers, **config.headers})
            self.client.put_object(Bucket=self.bucket, Key=key, Body=b"", **params)
        except Exception as e:
            raise UnableToCreateDirectory.at_location(key, e) from e
        logger.info("Created directory", bucket=self.bucket, key=key)

    def list_contents(self, path: str, deep: bool = False) -> Iterator[StorageAttributes]:
        """Lazily list directory contents."""
        return self.lister.list_contents(path, deep)

    # Visibility
    def set_visibility(self, path: str, visibility: Visibility) -> None:
        """Rewrite the canned grants of an object's ACL.

        Grants to specific accounts are preserved as they are.
        """
        try:
            acl = Acl.from_response(self.client.get_object_acl(Bucket=self.bucket, Key=path))
            updated = apply_visibility(acl, visibility)
            self.client.put_object_acl(
                Bucket=self.bucket,
                Key=path,
                AccessControlPolicy=updated.to_policy()
            )
        except Exception as e:
            raise UnableToSetVisibility.at_location(path, e) from e
        logger.info("Set visibility", bucket=self.bucket, key=path, visibility=Visibility(visibility).value)

    def visibility(self, path: str) -> FileAttributes:
        """Get object visibility."""
        try:
            acl = Acl.from_response(self.client.get_object_acl(Bucket=self.bucket, Key=path))
        except Exception as e:
            raise UnableToRetrieveMetadata.visibility(path, e) from e
        return FileAttributes(path=path, visibility=visibility_from_acl(acl))

    # Metadata
    def mime_type(self, path: str) -> FileAttributes:
        """Get object mime type."""
        try:
            return self._get_object_metadata(path)
        except Exception as e:
            raise UnableToRetrieveMetadata.mime_type(path, e) from e

    def last_modified(self, path: str) -> FileAttributes:
        """Get object modification time."""
        try:
            return self._get_object_metadata(path)
        except Exception as e:
            raise UnableToRetrieveMetadata.last_modified(path, e) from e

    def file_size(self, path: str) -> FileAttributes:
        """Get object size."""
        try:
            return self._get_object_metadata(path)
        except Exception as e:
            raise UnableToRetrieveMetadata.file_size(path, e) from e

    def checksum(self, path: str, config: ConfigLike = None) -> str:
        """Return the object's ETag without quotes."""
        try:
            etag = (self._get_object_metadata(path).extra_metadata or {}).get("ETag")
        except Exception as e:
            raise UnableToProvideChecksum.at_location(path, e) from e
        if not etag:
            raise UnableToProvideChecksum(path, "The object has no ETag.")
        return etag

    # Copy / move
    def copy(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Server-side copy, then replicate the source ACL onto the copy.

        CopyObject does not carry ACLs over, so the source ACL is read
        first and written to the destination afterwards.
        """
        config = OperationConfig.coerce(config)
        try:
            params = headers_to_params(config.headers)
            if needs_metadata_replace(params):
                params["MetadataDirective"] = "REPLACE"

            acl = Acl.from_response(self.client.get_object_acl(Bucket=self.bucket, Key=source))
            self.client.copy_object(
                Bucket=self.bucket,
                Key=destination,
                CopySource={"Bucket": self.bucket, "Key": source.lstrip("/")},
                **params
            )
            self.client.put_object_acl(
                Bucket=self.bucket,
                Key=destination,
                AccessControlPolicy=acl.to_policy()
            )
        except Exception as e:
            raise UnableToCopyFile.from_location_to(source, destination, e) from e
        logger.info("Copied object", bucket=self.bucket, source=source, dest=destination)

    def move(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Copy then delete the source; not atomic.

        A failure in either step is reported as a move failure chained to
        the underlying error. A failed delete leaves both objects in place.
        """
        try:
            self.copy(source, destination, config)
            self.delete(source)
        except (UnableToCopyFile, UnableToDeleteFile) as e:
            cause = e.__cause__ or e
            raise UnableToMoveFile.from_location_to(source, destination, cause) from cause
        logger.info("Moved object", bucket=self.bucket, source=source, dest=destination)

    # URLs
    def public_url(self, path: str, config: ConfigLike = None) -> str:
        """Unsigned URL of an object."""
        config = OperationConfig.coerce(config)
        scheme = "https" if self._ssl(config) else "http"
        host = self._domain(config) or self.config.url_host_template.format(
            bucket=self.bucket,
            region=self.region
        )
        return f"{scheme}://{host}/{path.lstrip('/')}"

    def temporary_url(
        self,
        path: str,
        expires_at: datetime,
        config: ConfigLike = None
    ) -> str:
        """Presigned GET URL valid until ``expires_at``."""
        config = OperationConfig.coerce(config)
        expires_in = int(expires_at.timestamp() - time.time())
        if expires_in <= 0:
            raise UnableToGenerateTemporaryUrl(path, "The expiry time is not in the future.")

        try:
            url = self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": path},
                ExpiresIn=expires_in
            )
        except Exception as e:
            raise UnableToGenerateTemporaryUrl.at_location(path, e) from e

        domain = self._domain(config)
        if domain:
            url = self._with_domain(url, domain)
        if not self._ssl(config):
            url = url.replace("https://", "http://", 1)
        return url

    def _with_domain(self, url: str, domain: str) -> str:
        parts = urlsplit(url)
        url_path = parts.path
        # Path-style URLs carry the bucket as the first segment
        bucket_segment = f"/{self.bucket}/"
        if not parts.netloc.startswith(f"{self.bucket}.") and url_path.startswith(bucket_segment):
            url_path = url_path[len(bucket_segment) - 1:]
        return urlunsplit((parts.scheme, domain, url_path, parts.query, parts.fragment))

    def _domain(self, config: OperationConfig) -> Optional[str]:
        return config.domain or self.config.domain

    def _ssl(self, config: OperationConfig) -> bool:
        return self.config.ssl if config.ssl is None else config.ssl

    # Internals
    def _get_body(self, path: str) -> Any:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=path)
        except Exception as e:
            raise UnableToReadFile.at_location(path, e) from e
        return response["Body"]

    def _get_object_metadata(self, path: str) -> FileAttributes:
        response = self.client.head_object(Bucket=self.bucket, Key=path)
        return map_head_response(path, response)

    def _put_object(self, path: str, contents: Any, config: ConfigLike) -> None:
        config = OperationConfig.coerce(config)
        headers = {**self.config.headers, **config.headers}
        if config.visibility == Visibility.PUBLIC:
            headers["x-amz-acl"] = "public-read"
        if not has_header(headers, "Content-Type"):
            headers["Content-Type"] = self.mime_type_detector.detect_mime_type(path, contents)

        try:
            params = headers_to_params(headers)
            self.client.put_object(Bucket=self.bucket, Key=path, Body=contents, **params)
        except Exception as e:
            raise UnableToWriteFile.at_location(path, e) from e
        logger.info("Wrote object", bucket=self.bucket, key=path, content_type=params.get("ContentType"))


def build_s3_adapter(
    config: StorageConfig,
    mime_type_detector: Optional[MimeTypeDetector] = None
) -> S3FilesystemAdapter:
    """Build S3 filesystem adapter.

    Args:
        config: Storage configuration
        mime_type_detector: Optional Content-Type detector for writes

    Returns:
        Configured adapter instance
    """
    if not config.bucket:
        raise ConfigurationError("S3 bucket name is required")

    try:
        import boto3
        from botocore.config import Config as BotoConfig
    except ImportError:
        raise ConfigurationError("boto3 is required for S3 storage")

    boto_config = BotoConfig(
        region_name=config.region,
        signature_version="s3v4",
        retries={
            "max_attempts": config.max_retry_attempts,
            "mode": "standard"
        },
        connect_timeout=config.timeout,
        read_timeout=config.timeout,
        s3={"addressing_style": config.addressing_style}
    )

    client_args = {
        "service_name": "s3",
        "config": boto_config
    }

    if config.aws_access_key_id and config.aws_secret_access_key:
        client_args.update({
            "aws_access_key_id": config.aws_access_key_id,
            "aws_secret_access_key": config.aws_secret_access_key
        })

    if config.endpoint:
        client_args["endpoint_url"] = config.endpoint
        client_args["use_ssl"] = config.ssl

    client = boto3.client(**client_args)
    return S3FilesystemAdapter(client, config, mime_type_detector)
