from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..db import models
from ..domain.enums import Role
from ..errors import NotFoundError
from ..services import organization_service
from ..services.authorization import CallerContext, require
from .auth import get_caller

router = APIRouter(prefix="/v1/api/organization", tags=["organizations"])

class OrganizationIn(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    contactEmail: Optional[str] = Field(default=None, max_length=100)
    contactPhone: Optional[str] = Field(default=None, max_length=20)
    isActive: bool = True

class OrganizationOut(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    contactEmail: Optional[str] = None
    contactPhone: Optional[str] = None
    isActive: bool
    createdAt: datetime
    updatedAt: Optional[datetime] = None


def _org_out(org: models.Organization) -> OrganizationOut:
    return OrganizationOut(
        id=org.id,
        name=org.name,
        address=org.address,
        contactEmail=org.contact_email,
        contactPhone=org.contact_phone,
        isActive=org.is_active,
        createdAt=org.created_at,
        updatedAt=org.updated_at,
    )

def _organization(db: Session, organization_id: int) -> models.Organization:
    try:
        return organization_service.get_organization(db, organization_id)
    except organization_service.OrganizationNotFound:
        raise NotFoundError.for_entity("Organization")


@router.get("/all", response_model=List[OrganizationOut])
def list_organizations(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    require(caller.is_enterprise_admin, caller, "enterprise admin required")
    return [_org_out(o) for o in organization_service.list_organizations(db)]

@router.get("/{organization_id}", response_model=OrganizationOut)
def get_organization(organization_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    org = _organization(db, organization_id)
    require(
        caller.belongs_to_organization(organization_id) or caller.is_enterprise_admin,
        caller,
        "organization is not visible to you",
    )
    return _org_out(org)

@router.put("", response_model=OrganizationOut)
def save_organization(body: OrganizationIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    require(caller.is_enterprise_admin, caller, "enterprise admin required")
    fields = dict(
        name=body.name,
        address=body.address,
        contact_email=body.contactEmail,
        contact_phone=body.contactPhone,
        is_active=body.isActive,
    )
    if body.id is not None:
        _organization(db, body.id)
        return _org_out(organization_service.save_organization(db, organization_id=body.id, **fields))
    org = organization_service.save_organization(db, **fields)
    # the creator administers the organization they created
    organization_service.add_organization_member(db, caller.user_id, org.id, Role.ENTERPRISE_ADMIN)
    return _org_out(org)

@router.delete("/{organization_id}", status_code=204)
def delete_organization(organization_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    _organization(db, organization_id)
    require(caller.is_enterprise_admin, caller, "enterprise admin required")
    organization_service.delete_organization(db, organization_id)
    return Response(status_code=204)
