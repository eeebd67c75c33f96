from __future__ import annotations
from typing import Protocol, List
from sqlalchemy.orm import Session

from ..db import models


class MembershipRepository(Protocol):
    def list_user_organizations(self, db: Session, user_id: str) -> List[models.UserOrganization]: ...
    def list_user_departments(self, db: Session, user_id: str) -> List[models.UserDepartment]: ...
    def list_users_in_organization(self, db: Session, organization_id: int) -> List[models.User]: ...
    def list_users_in_department(self, db: Session, department_id: int) -> List[models.User]: ...


class SqlAlchemyMembershipRepository:
    def list_user_organizations(self, db: Session, user_id: str) -> List[models.UserOrganization]:
        return (
            db.query(models.UserOrganization)
            .filter(models.UserOrganization.user_id == user_id)
            .all()
        )

    def list_user_departments(self, db: Session, user_id: str) -> List[models.UserDepartment]:
        return (
            db.query(models.UserDepartment)
            .filter(models.UserDepartment.user_id == user_id)
            .all()
        )

    def list_users_in_organization(self, db: Session, organization_id: int) -> List[models.User]:
        return (
            db.query(models.User)
            .join(models.UserOrganization, models.UserOrganization.user_id == models.User.id)
            .filter(models.UserOrganization.organization_id == organization_id)
            .order_by(models.User.email)
            .all()
        )

    def list_users_in_department(self, db: Session, department_id: int) -> List[models.User]:
        return (
            db.query(models.User)
            .join(models.UserDepartment, models.UserDepartment.user_id == models.User.id)
            .filter(models.UserDepartment.department_id == department_id)
            .order_by(models.User.email)
            .all()
        )
