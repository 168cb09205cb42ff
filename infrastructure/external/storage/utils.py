"""Storage utility functions."""
import mimetypes
from typing import Any, Optional, Protocol, runtime_checkable

from botocore.exceptions import ClientError


# Path helpers
def listing_prefix(path: str) -> str:
    """Turn a directory path into the prefix used to list its children.

    Example:
        listing_prefix("a/b/") -> "a/b/"; listing_prefix("") -> ""
    """
    path = path.rstrip("/")
    return f"{path}/" if path else ""


def parent_prefix(path: str) -> str:
    """Listing prefix of the directory containing ``path``."""
    segments = path.rstrip("/").split("/")
    segments.pop()
    return listing_prefix("/".join(segments))


def directory_key(path: str) -> str:
    """Key of the marker object that stands for a directory."""
    return path.rstrip("/") + "/"


def strip_etag(etag: Optional[str]) -> Optional[str]:
    """Remove the quotes S3 puts around ETag values."""
    if not etag:
        return None
    return etag.strip('"') or None


# Error helpers
def status_code(error: BaseException) -> Optional[int]:
    """HTTP status code carried by a botocore ClientError, if any."""
    if not isinstance(error, ClientError):
        return None
    return (error.response or {}).get("ResponseMetadata", {}).get("HTTPStatusCode")


def is_not_found(error: BaseException) -> bool:
    """True when the store answered 404 for the request."""
    if status_code(error) == 404:
        return True
    response = getattr(error, "response", None) or {}
    code = (response.get("Error") or {}).get("Code", "")
    return code in ("404", "NoSuchKey", "NotFound")


# Header overrides
_HEADER_PARAMS = {
    "content-type": "ContentType",
    "cache-control": "CacheControl",
    "content-disposition": "ContentDisposition",
    "content-encoding": "ContentEncoding",
    "content-language": "ContentLanguage",
    "expires": "Expires",
    "x-amz-acl": "ACL",
    "x-amz-storage-class": "StorageClass",
    "x-amz-server-side-encryption": "ServerSideEncryption",
    "x-amz-server-side-encryption-aws-kms-key-id": "SSEKMSKeyId",
    "x-amz-website-redirect-location": "WebsiteRedirectLocation",
    "x-amz-tagging": "Tagging",
}

_METADATA_PREFIX = "x-amz-meta-"

# Params that only take effect on copy when the metadata is replaced
_REPLACE_DIRECTIVE_PARAMS = {
    "ContentType",
    "CacheControl",
    "ContentDisposition",
    "ContentEncoding",
    "ContentLanguage",
    "Expires",
    "Metadata",
}


def has_header(headers: dict[str, str], name: str) -> bool:
    """Case-insensitive header presence check."""
    name = name.lower()
    return any(key.lower() == name for key in headers)


def headers_to_params(headers: dict[str, str]) -> dict[str, Any]:
    """Translate HTTP header overrides into boto3 request parameters.

    Args:
        headers: Header name to value, names matched case-insensitively

    Returns:
        Keyword arguments for ``put_object``/``copy_object``

    Raises:
        ValueError: For a header with no corresponding parameter
    """
    params: dict[str, Any] = {}
    metadata: dict[str, str] = {}
    for name, value in headers.items():
        lowered = name.lower()
        if lowered.startswith(_METADATA_PREFIX):
            metadata[lowered[len(_METADATA_PREFIX):]] = value
        elif lowered in _HEADER_PARAMS:
            params[_HEADER_PARAMS[lowered]] = value
        else:
            raise ValueError(f"Unsupported header override: {name}")
    if metadata:
        params["Metadata"] = metadata
    return params


def needs_metadata_replace(params: dict[str, Any]) -> bool:
    """Whether copy params must be sent with ``MetadataDirective=REPLACE``."""
    return any(key in _REPLACE_DIRECTIVE_PARAMS for key in params)


# Mime detection
def guess_content_type(filename: str) -> str:
    """Guess content type from filename.

    Args:
        filename: File name or path

    Returns:
        MIME type string
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


@runtime_checkable
class MimeTypeDetector(Protocol):
    """Collaborator that picks a Content-Type for a write."""

    def detect_mime_type(self, path: str, contents: Any) -> str:
        ...


class ExtensionMimeTypeDetector:
    """Detect by file extension, falling back to a text/binary sniff of byte contents."""

    def detect_mime_type(self, path: str, contents: Any) -> str:
        content_type, _ = mimetypes.guess_type(path)
        if content_type:
            return content_type
        if isinstance(contents, str):
            return "text/plain"
        if isinstance(contents, (bytes, bytearray)) and contents:
            sample = bytes(contents[:1024])
            try:
                sample.decode("utf-8")
            except UnicodeDecodeError as e:
                # A multi-byte sequence cut by the sample boundary is still text
                if e.start < len(sample) - 3:
                    return "application/octet-stream"
            return "text/plain"
        return guess_content_type(path)
