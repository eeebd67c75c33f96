from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..domain.enums import Role
from ..errors import NotFoundError, ValidationAppError
from ..services import organization_service
from ..services.authorization import CallerContext, require
from .auth import get_caller

router = APIRouter(prefix="/v1/api", tags=["memberships"])

class OrganizationMembershipIn(BaseModel):
    userId: str
    organizationId: int
    role: Role = Role.ORGANIZATION_MEMBER

class DepartmentMembershipIn(BaseModel):
    userId: str
    departmentId: int
    role: Role = Role.DEPARTMENT_MEMBER

class MembershipOut(BaseModel):
    id: int
    userId: str
    role: Role
    organizationId: Optional[int] = None
    departmentId: Optional[int] = None


@router.post("/AppUserOrganization", response_model=MembershipOut)
def add_organization_member(body: OrganizationMembershipIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        organization_service.get_organization(db, body.organizationId)
    except organization_service.OrganizationNotFound:
        raise NotFoundError.for_entity("Organization")
    require(caller.can_manage_organization(body.organizationId), caller, "organization admin required")
    organization_service.ensure_user_exists(db, body.userId)
    m = organization_service.add_organization_member(db, body.userId, body.organizationId, body.role)
    return MembershipOut(id=m.id, userId=m.user_id, role=Role(m.role), organizationId=m.organization_id)

@router.delete("/AppUserOrganization/{membership_id}", status_code=204)
def remove_organization_member(membership_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        m = organization_service.get_organization_membership(db, membership_id)
    except organization_service.MembershipNotFound:
        raise NotFoundError.for_entity("Membership")
    require(caller.can_manage_organization(m.organization_id), caller, "organization admin required")
    organization_service.delete_membership(db, m)
    return Response(status_code=204)

@router.post("/AppUserDepartment", response_model=MembershipOut)
def add_department_member(body: DepartmentMembershipIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        department = organization_service.get_department(db, body.departmentId)
    except organization_service.DepartmentNotFound:
        raise NotFoundError.for_entity("Department")
    require(caller.can_manage_department(department), caller, "department admin required")
    user = organization_service.ensure_user_exists(db, body.userId)
    if not any(o.organization_id == department.organization_id for o in user.organization_memberships):
        raise ValidationAppError("USER_NOT_IN_ORGANIZATION", "user is not a member of the department's organization")
    m = organization_service.add_department_member(db, body.userId, body.departmentId, body.role)
    return MembershipOut(id=m.id, userId=m.user_id, role=Role(m.role), departmentId=m.department_id)

@router.delete("/AppUserDepartment/{membership_id}", status_code=204)
def remove_department_member(membership_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        m = organization_service.get_department_membership(db, membership_id)
    except organization_service.MembershipNotFound:
        raise NotFoundError.for_entity("Membership")
    require(caller.can_manage_department(m.department), caller, "department admin required")
    organization_service.delete_membership(db, m)
    return Response(status_code=204)
