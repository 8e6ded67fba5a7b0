"""Static role to permission table."""

from typing import Dict, FrozenSet, Iterable

WILDCARD = "*"

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": frozenset({WILDCARD}),
    "manager": frozenset({
        "users:read",
        "users:create",
        "users:update",
        "operations:read",
        "operations:create",
        "operations:update",
        "operations:delete",
        "locations:read",
        "locations:create",
        "locations:update",
        "locations:delete",
        "integration-jobs:read",
        "integration-jobs:create",
        "integration-jobs:update",
        "integration-jobs:delete",
    }),
    "user": frozenset({
        "operations:read",
        "operations:create",
        "operations:update",
        "locations:read",
        "integration-jobs:read",
    }),
}


def permissions_for_role(role: str) -> FrozenSet[str]:
    """Permissions granted to ``role``; unknown roles get nothing."""
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_all_permissions(granted: Iterable[str], required: Iterable[str]) -> bool:
    granted = set(granted)
    if WILDCARD in granted:
        return True
    return all(permission in granted for permission in required)


def has_any_role(held: Iterable[str], required: Iterable[str]) -> bool:
    held = set(held)
    return any(role in held for role in required)


def role_grants(role: str, permission: str) -> bool:
    return has_all_permissions(permissions_for_role(role), [permission])
