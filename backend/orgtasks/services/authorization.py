"""Centralized permission checks.

Every endpoint builds one :class:`CallerContext` for the authenticated user
and asks it questions; no handler compares role values inline. The context
is created per request and passed explicitly, so nothing about the caller is
kept in module state.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional
import logging

from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import Role
from ..domain.roles import RoleSet
from ..errors import ForbiddenError
from ..repositories.membership_repository import MembershipRepository, SqlAlchemyMembershipRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    user: models.User
    organization_roles: Dict[int, Role] = field(default_factory=dict)
    department_roles: Dict[int, Role] = field(default_factory=dict)

    @property
    def user_id(self) -> str:
        return self.user.id

    def roles_for_organization(self, organization_id: int) -> RoleSet:
        role = self.organization_roles.get(organization_id)
        return RoleSet([role] if role else [])

    def roles_for_department(self, department: models.Department) -> RoleSet:
        """Union of the caller's role in the department and in its organization."""
        roles = self.roles_for_organization(department.organization_id)
        role = self.department_roles.get(department.id)
        return roles | ([role] if role else [])

    def belongs_to_organization(self, organization_id: int) -> bool:
        return organization_id in self.organization_roles

    def belongs_to_department(self, department_id: int) -> bool:
        role = self.department_roles.get(department_id)
        return role is not None and role != Role.NONE

    @property
    def is_enterprise_admin(self) -> bool:
        return Role.ENTERPRISE_ADMIN in self.organization_roles.values()

    def can_manage_organization(self, organization_id: int) -> bool:
        return self.roles_for_organization(organization_id).is_organization_admin

    def can_manage_department(self, department: models.Department) -> bool:
        return self.roles_for_department(department).is_admin

    def can_view_department(self, department: models.Department) -> bool:
        return self.belongs_to_department(department.id) or self.can_manage_department(department)

    def shares_admin_organization(self, other_organization_ids: Iterable[int]) -> bool:
        """True when the caller administers an organization the other user belongs to."""
        return any(self.can_manage_organization(org_id) for org_id in other_organization_ids)


def build_caller_context(
    db: Session,
    user: models.User,
    repository: Optional[MembershipRepository] = None,
) -> CallerContext:
    repo = repository or SqlAlchemyMembershipRepository()
    org_roles = {m.organization_id: Role(m.role) for m in repo.list_user_organizations(db, user.id)}
    dept_roles = {m.department_id: Role(m.role) for m in repo.list_user_departments(db, user.id)}
    return CallerContext(user=user, organization_roles=org_roles, department_roles=dept_roles)


def require(allowed: bool, caller: CallerContext, message: str = "forbidden") -> None:
    if not allowed:
        logger.warning("permission denied for user %s: %s", caller.user_id, message)
        raise ForbiddenError(message)
