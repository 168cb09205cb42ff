"""Translation between ACL grant lists and public/private visibility.

Only grants to the "everyone" group (canned grants) express visibility.
Grants to specific accounts or other groups are carried through every
transformation untouched and in their original order.
"""
from .models import Acl, Grant, Permission, Visibility


def _canned_permissions(acl: Acl) -> list[Permission]:
    permissions: list[Permission] = []
    for grant in acl.grants:
        if grant.is_canned and grant.permission not in permissions:
            permissions.append(grant.permission)
    return permissions


def apply_visibility(acl: Acl, visibility: Visibility) -> Acl:
    """Return a copy of ``acl`` whose canned grants express ``visibility``.

    Public adds READ for everyone, folding into a single FULL_CONTROL
    grant when FULL_CONTROL is already present. Private drops READ, or
    narrows FULL_CONTROL down to READ_ACP + WRITE_ACP so ACL management
    rights survive while data access goes away.

    Args:
        acl: Current object ACL
        visibility: Target visibility

    Returns:
        New ACL: explicit grants followed by one canned grant per permission
    """
    explicit = tuple(grant for grant in acl.grants if not grant.is_canned)
    permissions = _canned_permissions(acl)

    if Visibility(visibility) is Visibility.PUBLIC:
        if Permission.READ not in permissions:
            permissions.append(Permission.READ)
        if Permission.FULL_CONTROL in permissions:
            permissions = [Permission.FULL_CONTROL]
    else:
        if Permission.FULL_CONTROL in permissions:
            permissions = [Permission.READ_ACP, Permission.WRITE_ACP]
        else:
            permissions = [p for p in permissions if p is not Permission.READ]

    canned = tuple(Grant.everyone(permission) for permission in permissions)
    return Acl(owner=acl.owner, grants=explicit + canned)


def visibility_from_acl(acl: Acl) -> Visibility:
    """Public when everyone may read the object, private otherwise."""
    for grant in acl.grants:
        if grant.is_canned and grant.permission in (Permission.READ, Permission.FULL_CONTROL):
            return Visibility.PUBLIC
    return Visibility.PRIVATE
