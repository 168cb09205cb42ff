"""Mapping of object store responses onto file attributes."""
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Union

from .models import FileAttributes, ListingEntry
from .utils import strip_etag


def _raw_headers(response: dict[str, Any]) -> dict[str, str]:
    headers = response.get("ResponseMetadata", {}).get("HTTPHeaders") or {}
    return {str(k).lower(): v for k, v in headers.items()}


def to_epoch(value: Union[str, datetime, None]) -> Optional[int]:
    """Convert an HTTP date, ISO-8601 string or datetime to epoch seconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    if not isinstance(value, str):
        return None
    try:
        return int(parsedate_to_datetime(value).timestamp())
    except (TypeError, ValueError):
        pass
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


def _to_int(value: Any) -> int:
    # Missing or malformed lengths count as zero
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def map_head_response(path: str, response: dict[str, Any]) -> FileAttributes:
    """Build file attributes from a ``head_object`` response.

    The raw HTTP headers are authoritative; the parsed boto3 fields are
    only consulted when the response carries no header block.

    Args:
        path: Object key the response belongs to
        response: boto3 ``head_object`` response

    Returns:
        File attributes with size, mime type, last modified and ETag
    """
    headers = _raw_headers(response)
    if headers:
        mime_type = headers.get("content-type")
        size = headers.get("content-length")
        last_modified = headers.get("last-modified")
        etag = headers.get("etag")
    else:
        mime_type = response.get("ContentType")
        size = response.get("ContentLength")
        last_modified = response.get("LastModified")
        etag = response.get("ETag")

    return FileAttributes(
        path=path,
        file_size=_to_int(size),
        last_modified=to_epoch(last_modified),
        mime_type=mime_type or None,
        extra_metadata={"ETag": strip_etag(etag)},
    )


def parse_listing_entry(row: dict[str, Any]) -> ListingEntry:
    """Parse one ``Contents`` row of a ``list_objects`` response."""
    return ListingEntry(
        key=row["Key"],
        size=_to_int(row.get("Size")),
        last_modified=to_epoch(row.get("LastModified")),
        etag=strip_etag(row.get("ETag")),
    )


def map_listing_entry(entry: ListingEntry) -> FileAttributes:
    """File attributes for a listed object."""
    return FileAttributes(
        path=entry.key,
        file_size=entry.size,
        last_modified=entry.last_modified,
        extra_metadata={"ETag": entry.etag},
    )
