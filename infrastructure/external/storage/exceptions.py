"""Filesystem adapter exceptions.

One class per failed capability so callers can branch on the kind of
failure. Every operation failure keeps the path it was about and chains
the underlying transport error as ``__cause__``.
"""
from typing import Optional


class StorageError(Exception):
    """Base storage exception."""
    pass


class ConfigurationError(StorageError):
    """Storage configuration error."""
    pass


class FilesystemOperationFailed(StorageError):
    """Base class for failed filesystem operations."""

    operation: str = "unknown"

    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        message = f"Unable to {self.operation} at location: {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)

    @classmethod
    def at_location(cls, location: str, cause: Optional[BaseException] = None):
        return cls(location, str(cause) if cause else "")


class UnableToCheckExistence(FilesystemOperationFailed):
    operation = "check existence"


class UnableToCheckFileExistence(UnableToCheckExistence):
    operation = "check file existence"


class UnableToCheckDirectoryExistence(UnableToCheckExistence):
    operation = "check directory existence"


class UnableToReadFile(FilesystemOperationFailed):
    operation = "read file"


class UnableToWriteFile(FilesystemOperationFailed):
    operation = "write file"


class UnableToDeleteFile(FilesystemOperationFailed):
    operation = "delete file"


class UnableToDeleteDirectory(FilesystemOperationFailed):
    operation = "delete directory"


class UnableToCreateDirectory(FilesystemOperationFailed):
    operation = "create directory"


class UnableToListContents(FilesystemOperationFailed):
    operation = "list contents"


class UnableToSetVisibility(FilesystemOperationFailed):
    operation = "set visibility"


class UnableToProvideChecksum(FilesystemOperationFailed):
    operation = "provide checksum"


class UnableToGenerateTemporaryUrl(FilesystemOperationFailed):
    operation = "generate temporary url"


class UnableToRetrieveMetadata(FilesystemOperationFailed):
    """Metadata query failed; ``metadata_type`` names the query."""

    def __init__(self, location: str, metadata_type: str = "", reason: str = ""):
        self.metadata_type = metadata_type
        self.operation = f"retrieve the {metadata_type} metadata" if metadata_type else "retrieve metadata"
        super().__init__(location, reason)

    @classmethod
    def visibility(cls, location: str, cause: Optional[BaseException] = None):
        return cls(location, "visibility", str(cause) if cause else "")

    @classmethod
    def mime_type(cls, location: str, cause: Optional[BaseException] = None):
        return cls(location, "mime_type", str(cause) if cause else "")

    @classmethod
    def last_modified(cls, location: str, cause: Optional[BaseException] = None):
        return cls(location, "last_modified", str(cause) if cause else "")

    @classmethod
    def file_size(cls, location: str, cause: Optional[BaseException] = None):
        return cls(location, "file_size", str(cause) if cause else "")


class _TransferFailed(FilesystemOperationFailed):
    """Failure of an operation with a source and a destination."""

    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        self.location = source
        self.reason = reason
        message = f"Unable to {self.operation} from {source} to {destination}."
        if reason:
            message = f"{message} {reason}"
        Exception.__init__(self, message)

    @classmethod
    def from_location_to(
        cls,
        source: str,
        destination: str,
        cause: Optional[BaseException] = None
    ):
        return cls(source, destination, str(cause) if cause else "")


class UnableToCopyFile(_TransferFailed):
    operation = "copy file"


class UnableToMoveFile(_TransferFailed):
    operation = "move file"
