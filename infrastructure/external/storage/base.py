"""Filesystem adapter protocol definitions."""
from datetime import datetime
from typing import Any, BinaryIO, Iterator, Protocol, Union, runtime_checkable

from .config import OperationConfig
from .models import FileAttributes, StorageAttributes, Visibility

ConfigLike = Union[OperationConfig, dict, None]


@runtime_checkable
class FilesystemAdapter(Protocol):
    """Hierarchical filesystem contract for duck typing."""

    def file_exists(self, path: str) -> bool:
        """Check if a file exists."""
        ...

    def directory_exists(self, path: str) -> bool:
        """Check if a directory exists."""
        ...

    def write(self, path: str, contents: Union[bytes, str], config: ConfigLike = None) -> None:
        """Write contents to a file."""
        ...

    def write_stream(self, path: str, contents: BinaryIO, config: ConfigLike = None) -> None:
        """Write a stream to a file."""
        ...

    def read(self, path: str) -> bytes:
        """Read a file."""
        ...

    def read_stream(self, path: str) -> Any:
        """Open a file for streaming reads."""
        ...

    def delete(self, path: str) -> None:
        """Delete a file."""
        ...

    def delete_directory(self, path: str) -> None:
        """Delete a directory and everything below it."""
        ...

    def create_directory(self, path: str, config: ConfigLike = None) -> None:
        """Create a directory."""
        ...

    def set_visibility(self, path: str, visibility: Visibility) -> None:
        """Make a file public or private."""
        ...

    def visibility(self, path: str) -> FileAttributes:
        """Get file visibility."""
        ...

    def mime_type(self, path: str) -> FileAttributes:
        """Get file mime type."""
        ...

    def last_modified(self, path: str) -> FileAttributes:
        """Get file modification time."""
        ...

    def file_size(self, path: str) -> FileAttributes:
        """Get file size."""
        ...

    def list_contents(self, path: str, deep: bool = False) -> Iterator[StorageAttributes]:
        """List directory contents."""
        ...

    def move(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Move a file."""
        ...

    def copy(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Copy a file."""
        ...


@runtime_checkable
class ChecksumProvider(Protocol):
    """Adapters that can report a content checksum."""

    def checksum(self, path: str, config: ConfigLike = None) -> str:
        ...


@runtime_checkable
class PublicUrlGenerator(Protocol):
    """Adapters that can build unsigned public URLs."""

    def public_url(self, path: str, config: ConfigLike = None) -> str:
        ...


@runtime_checkable
class TemporaryUrlGenerator(Protocol):
    """Adapters that can build signed, expiring URLs."""

    def temporary_url(
        self,
        path: str,
        expires_at: datetime,
        config: ConfigLike = None
    ) -> str:
        ...
