"""Directory emulation on top of prefix/delimiter listings."""
from typing import Any, Iterator, Optional

from core.logging_config import get_logger
from .exceptions import UnableToCheckDirectoryExistence, UnableToListContents
from .metadata import map_listing_entry, parse_listing_entry
from .models import DirectoryAttributes, ListingPage, StorageAttributes
from .utils import listing_prefix, parent_prefix

logger = get_logger(__name__)

DELIMITER = "/"


def parse_listing_page(response: dict[str, Any]) -> ListingPage:
    """Parse a ``list_objects`` response into a listing page.

    Stores only send ``NextMarker`` reliably when a delimiter is used; if
    it is missing on a truncated page, listing resumes after the greatest
    key or common prefix on the page.
    """
    contents = [parse_listing_entry(row) for row in response.get("Contents", [])]
    prefixes = [entry["Prefix"] for entry in response.get("CommonPrefixes", [])]

    truncated = response.get("IsTruncated", False)
    if isinstance(truncated, str):
        truncated = truncated.lower() == "true"

    next_marker: Optional[str] = None
    if truncated:
        next_marker = response.get("NextMarker")
        if not next_marker:
            candidates = [c.key for c in contents[-1:]] + prefixes[-1:]
            if not candidates:
                raise ValueError("Truncated listing page without a continuation marker")
            next_marker = max(candidates)

    return ListingPage(
        is_truncated=bool(truncated),
        next_marker=next_marker,
        contents=contents,
        common_prefixes=prefixes,
    )


class DirectoryLister:
    """Lazily walks the emulated directory tree of one bucket."""

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def fetch_page(self, prefix: str, marker: Optional[str] = None) -> ListingPage:
        """Fetch one delimiter-grouped page under ``prefix``."""
        params = {"Bucket": self.bucket, "Prefix": prefix, "Delimiter": DELIMITER}
        if marker:
            params["Marker"] = marker
        logger.debug("Listing page", bucket=self.bucket, prefix=prefix, marker=marker)
        return parse_listing_page(self.client.list_objects(**params))

    def _list_level(self, prefix: str, pending: list[str]) -> Iterator[StorageAttributes]:
        marker: Optional[str] = None
        while True:
            try:
                page = self.fetch_page(prefix, marker)
            except Exception as e:
                raise UnableToListContents.at_location(prefix, e) from e

            for entry in page.contents:
                # The directory marker object itself
                if entry.key == prefix:
                    continue
                yield map_listing_entry(entry)

            for common_prefix in page.common_prefixes:
                pending.append(common_prefix)
                yield DirectoryAttributes(path=common_prefix)

            if not page.is_truncated:
                return
            marker = page.next_marker

    def list_contents(self, path: str, deep: bool = False) -> Iterator[StorageAttributes]:
        """Yield files and directories under ``path``.

        Pages are fetched as the consumer advances. With ``deep``, each
        discovered directory is expanded depth-first after its parent level
        is exhausted, in the order the directories were found. Nothing is
        snapshotted: concurrent writes may or may not be observed.

        Args:
            path: Directory path, "" for the bucket root
            deep: Recurse into subdirectories

        Yields:
            FileAttributes and DirectoryAttributes

        Raises:
            UnableToListContents: If a page fetch fails
        """
        stack = [listing_prefix(path)]
        while stack:
            prefix = stack.pop()
            discovered: list[str] = []
            yield from self._list_level(prefix, discovered)
            if deep:
                stack.extend(reversed(discovered))

    def directory_exists(self, path: str) -> bool:
        """Check whether ``path`` shows up as a common prefix of its parent."""
        target = listing_prefix(path)
        if target == "":
            return True

        parent = parent_prefix(path)
        marker: Optional[str] = None
        while True:
            try:
                page = self.fetch_page(parent, marker)
            except Exception as e:
                raise UnableToCheckDirectoryExistence.at_location(path, e) from e
            if target in page.common_prefixes:
                return True
            if not page.is_truncated:
                return False
            marker = page.next_marker
