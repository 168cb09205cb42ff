"""Filesystem data transfer objects."""
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


class Visibility(str, Enum):
    """Coarse object visibility."""
    PUBLIC = "public"
    PRIVATE = "private"


class Permission(str, Enum):
    """ACL grant permissions."""
    READ = "READ"
    WRITE = "WRITE"
    READ_ACP = "READ_ACP"
    WRITE_ACP = "WRITE_ACP"
    FULL_CONTROL = "FULL_CONTROL"


class FileAttributes(BaseModel):
    """Attributes of a stored object."""
    type: Literal["file"] = "file"
    path: str
    file_size: Optional[int] = None
    last_modified: Optional[int] = None  # Epoch seconds
    mime_type: Optional[str] = None
    visibility: Optional[Visibility] = None
    extra_metadata: Optional[dict[str, Optional[str]]] = None

    @property
    def is_file(self) -> bool:
        return True

    @property
    def is_dir(self) -> bool:
        return False


class DirectoryAttributes(BaseModel):
    """A directory emulated by a common prefix (path keeps its trailing slash)."""
    type: Literal["dir"] = "dir"
    path: str

    @property
    def is_file(self) -> bool:
        return False

    @property
    def is_dir(self) -> bool:
        return True


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


class Grant(BaseModel):
    """Single ACL grant; the grantee mapping is kept exactly as the store sent it."""
    model_config = ConfigDict(frozen=True)

    grantee: dict[str, Any]
    permission: Permission

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.grantee.items())), self.permission))

    @property
    def is_canned(self) -> bool:
        """True for grants to the well-known "everyone" group."""
        return (
            self.grantee.get("Type") == "Group"
            and self.grantee.get("URI") == ALL_USERS_URI
        )

    @classmethod
    def everyone(cls, permission: Permission) -> "Grant":
        return cls(grantee={"Type": "Group", "URI": ALL_USERS_URI}, permission=permission)

    def to_boto(self) -> dict[str, Any]:
        return {"Grantee": dict(self.grantee), "Permission": self.permission.value}


class Acl(BaseModel):
    """Object access control list."""
    model_config = ConfigDict(frozen=True)

    owner: Optional[dict[str, Any]] = None
    grants: tuple[Grant, ...] = ()

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "Acl":
        """Build from a ``get_object_acl`` response."""
        return cls(
            owner=response.get("Owner"),
            grants=tuple(
                Grant(grantee=g.get("Grantee", {}), permission=g["Permission"])
                for g in response.get("Grants", [])
            ),
        )

    def to_policy(self) -> dict[str, Any]:
        """Render as an ``AccessControlPolicy`` for ``put_object_acl``."""
        policy: dict[str, Any] = {"Grants": [g.to_boto() for g in self.grants]}
        if self.owner is not None:
            policy["Owner"] = dict(self.owner)
        return policy


class ListingEntry(BaseModel):
    """One ``Contents`` row of a listing page."""
    key: str
    size: Optional[int] = None
    last_modified: Optional[int] = None
    etag: Optional[str] = None


class ListingPage(BaseModel):
    """One page of a prefix/delimiter listing."""
    is_truncated: bool = False
    next_marker: Optional[str] = None
    contents: list[ListingEntry] = Field(default_factory=list)
    common_prefixes: list[str] = Field(default_factory=list)
