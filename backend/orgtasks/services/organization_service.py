"""Organizations, departments and the memberships linking users to them."""
from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import Role
from ..domain.roles import is_department_role, is_organization_role
from ..errors import NotFoundError, ValidationAppError

logger = logging.getLogger(__name__)


class OrganizationNotFound(Exception):
    pass

class DepartmentNotFound(Exception):
    pass

class MembershipNotFound(Exception):
    pass


def list_organizations(db: Session) -> List[models.Organization]:
    return db.query(models.Organization).order_by(models.Organization.name).all()

def get_organization(db: Session, organization_id: int) -> models.Organization:
    org = db.query(models.Organization).filter(models.Organization.id == organization_id).first()
    if not org:
        raise OrganizationNotFound()
    return org

def save_organization(db: Session, organization_id: Optional[int] = None, **fields) -> models.Organization:
    if organization_id is None:
        org = models.Organization(**fields)
        db.add(org)
    else:
        org = get_organization(db, organization_id)
        for key, value in fields.items():
            setattr(org, key, value)
        org.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(org)
    return org

def delete_organization(db: Session, organization_id: int) -> None:
    org = get_organization(db, organization_id)
    db.delete(org)
    db.commit()
    logger.info("deleted organization %s", organization_id)


def list_departments(db: Session, organization_id: int) -> List[models.Department]:
    return (
        db.query(models.Department)
        .filter(models.Department.organization_id == organization_id)
        .order_by(models.Department.name)
        .all()
    )

def get_department(db: Session, department_id: int) -> models.Department:
    dept = db.query(models.Department).filter(models.Department.id == department_id).first()
    if not dept:
        raise DepartmentNotFound()
    return dept

def save_department(db: Session, department_id: Optional[int] = None, **fields) -> models.Department:
    if department_id is None:
        dept = models.Department(**fields)
        db.add(dept)
    else:
        dept = get_department(db, department_id)
        for key, value in fields.items():
            setattr(dept, key, value)
    db.commit()
    db.refresh(dept)
    return dept

def delete_department(db: Session, department: models.Department) -> None:
    db.delete(department)
    db.commit()
    logger.info("deleted department %s", department.id)


def add_organization_member(db: Session, user_id: str, organization_id: int, role: Role) -> models.UserOrganization:
    """Add or update the user's single role in an organization."""
    if not is_organization_role(role):
        raise ValidationAppError("INVALID_ROLE", f"{Role(role).value} is not an organization role")
    membership = (
        db.query(models.UserOrganization)
        .filter(
            models.UserOrganization.user_id == user_id,
            models.UserOrganization.organization_id == organization_id,
        )
        .first()
    )
    if membership:
        membership.role = Role(role).value
    else:
        membership = models.UserOrganization(user_id=user_id, organization_id=organization_id, role=Role(role).value)
        db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership

def get_organization_membership(db: Session, membership_id: int) -> models.UserOrganization:
    membership = db.query(models.UserOrganization).filter(models.UserOrganization.id == membership_id).first()
    if not membership:
        raise MembershipNotFound()
    return membership

def add_department_member(db: Session, user_id: str, department_id: int, role: Role) -> models.UserDepartment:
    """Add or update the user's single role in a department."""
    if not is_department_role(role):
        raise ValidationAppError("INVALID_ROLE", f"{Role(role).value} is not a department role")
    membership = (
        db.query(models.UserDepartment)
        .filter(
            models.UserDepartment.user_id == user_id,
            models.UserDepartment.department_id == department_id,
        )
        .first()
    )
    if membership:
        membership.role = Role(role).value
    else:
        membership = models.UserDepartment(user_id=user_id, department_id=department_id, role=Role(role).value)
        db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership

def get_department_membership(db: Session, membership_id: int) -> models.UserDepartment:
    membership = db.query(models.UserDepartment).filter(models.UserDepartment.id == membership_id).first()
    if not membership:
        raise MembershipNotFound()
    return membership

def delete_membership(db: Session, membership) -> None:
    db.delete(membership)
    db.commit()


def ensure_user_exists(db: Session, user_id: str) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise NotFoundError.for_entity("User")
    return user
