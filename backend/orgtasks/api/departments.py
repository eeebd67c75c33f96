from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..db import models
from ..errors import NotFoundError
from ..services import organization_service
from ..services.authorization import CallerContext, require
from .auth import get_caller

router = APIRouter(prefix="/v1/api/department", tags=["departments"])

class DepartmentIn(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=2000)
    isActive: bool = True
    organizationId: int

class DepartmentOut(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    isActive: bool
    organizationId: int


def _dept_out(dept: models.Department) -> DepartmentOut:
    return DepartmentOut(
        id=dept.id,
        name=dept.name,
        code=dept.code,
        description=dept.description,
        isActive=dept.is_active,
        organizationId=dept.organization_id,
    )

def _ensure_organization(db: Session, organization_id: int) -> None:
    try:
        organization_service.get_organization(db, organization_id)
    except organization_service.OrganizationNotFound:
        raise NotFoundError.for_entity("Organization")

def _department(db: Session, department_id: int) -> models.Department:
    try:
        return organization_service.get_department(db, department_id)
    except organization_service.DepartmentNotFound:
        raise NotFoundError.for_entity("Department")


@router.get("/{organization_id}", response_model=List[DepartmentOut])
def list_departments(organization_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    _ensure_organization(db, organization_id)
    require(caller.belongs_to_organization(organization_id), caller, "organization is not visible to you")
    return [_dept_out(d) for d in organization_service.list_departments(db, organization_id)]

@router.post("", response_model=DepartmentOut)
def save_department(body: DepartmentIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    _ensure_organization(db, body.organizationId)
    require(caller.can_manage_organization(body.organizationId), caller, "organization admin required")
    fields = dict(
        name=body.name,
        code=body.code,
        description=body.description,
        is_active=body.isActive,
        organization_id=body.organizationId,
    )
    if body.id is not None:
        existing = _department(db, body.id)
        require(caller.can_manage_organization(existing.organization_id), caller, "organization admin required")
    dept = organization_service.save_department(db, department_id=body.id, **fields)
    return _dept_out(dept)

@router.delete("/{department_id}", status_code=204)
def delete_department(department_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    dept = _department(db, department_id)
    require(caller.can_manage_organization(dept.organization_id), caller, "organization admin required")
    organization_service.delete_department(db, dept)
    return Response(status_code=204)
