"""Role sets and role scopes.

A caller holds at most one role per organization and one per department;
permission checks work on the union of those roles rather than on a
hierarchy.
"""
from __future__ import annotations
from typing import Iterable

from .enums import Role

ADMIN_ROLES = frozenset({Role.DEPARTMENT_ADMIN, Role.ORGANIZATION_ADMIN, Role.ENTERPRISE_ADMIN})
ORGANIZATION_ADMIN_ROLES = frozenset({Role.ORGANIZATION_ADMIN, Role.ENTERPRISE_ADMIN})

ORGANIZATION_ROLES = (
    Role.ORGANIZATION_MEMBER,
    Role.ORGANIZATION_ADMIN,
    Role.ENTERPRISE_ADMIN,
    Role.NONE,
)

DEPARTMENT_ROLES = (
    Role.DEPARTMENT_MEMBER,
    Role.DEPARTMENT_ADMIN,
    Role.NONE,
)


class RoleSet(frozenset):
    """Immutable set of :class:`Role` values.

    Accepts ``Role`` members or their string values, so role claims coming
    from the database or a token can be passed in directly.
    """

    def __new__(cls, roles: Iterable[Role | str] = ()):
        return super().__new__(cls, (Role(r) for r in roles))

    def has_any(self, *roles: Role) -> bool:
        return any(r in self for r in roles)

    @property
    def is_admin(self) -> bool:
        return not self.isdisjoint(ADMIN_ROLES)

    @property
    def is_organization_admin(self) -> bool:
        return not self.isdisjoint(ORGANIZATION_ADMIN_ROLES)

    def union(self, *others: Iterable[Role | str]) -> "RoleSet":
        merged = set(self)
        for other in others:
            merged.update(Role(r) for r in other)
        return RoleSet(merged)

    __or__ = union

    def __repr__(self) -> str:
        return f"RoleSet({sorted(r.value for r in self)})"


def is_organization_role(role: Role | str) -> bool:
    return Role(role) in ORGANIZATION_ROLES


def is_department_role(role: Role | str) -> bool:
    return Role(role) in DEPARTMENT_ROLES
