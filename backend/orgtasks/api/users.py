from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..db import models
from ..domain.enums import Role
from ..errors import NotFoundError, UnauthorizedError, ValidationAppError
from ..services.auth_service import AuthService, create_access_token
from ..services.authorization import CallerContext, require
from ..services import organization_service
from ..services.user_service import UserInfo, UserNotFound, UserService
from .auth import get_caller

router = APIRouter(prefix="/v1/api/users", tags=["users"])

class LoginIn(BaseModel):
    email: str
    password: str

class UserOut(BaseModel):
    id: str
    email: str
    userName: Optional[str] = None
    displayName: Optional[str] = None
    memberNumber: Optional[str] = None

class LoginOut(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    user: UserOut

class OrganizationRoleOut(BaseModel):
    id: int
    organizationId: int
    role: Role

class DepartmentRoleOut(BaseModel):
    id: int
    departmentId: int
    role: Role

class UserInfoOut(UserOut):
    points: int = 0
    organizations: List[OrganizationRoleOut] = []
    departments: List[DepartmentRoleOut] = []

class RegisterIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=256)
    password: str
    confirmPassword: str
    organizationId: int
    userName: Optional[str] = None
    displayName: Optional[str] = Field(default=None, max_length=200)

class UserUpdateIn(BaseModel):
    id: str
    email: Optional[str] = None
    userName: Optional[str] = None
    displayName: Optional[str] = Field(default=None, max_length=200)
    memberNumber: Optional[str] = None

class PasswordChangeIn(BaseModel):
    currentPassword: str
    newPassword: str
    confirmPassword: str

class PasswordResetIn(BaseModel):
    userId: str
    newPassword: str


def _user_out(user: models.User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        userName=user.user_name,
        displayName=user.display_name,
        memberNumber=user.member_number,
    )

def _info_out(info: UserInfo) -> UserInfoOut:
    return UserInfoOut(
        **_user_out(info.user).model_dump(),
        points=info.points,
        organizations=[
            OrganizationRoleOut(id=m.id, organizationId=m.organization_id, role=Role(m.role))
            for m in info.organizations
        ],
        departments=[
            DepartmentRoleOut(id=m.id, departmentId=m.department_id, role=Role(m.role))
            for m in info.departments
        ],
    )

def _user_info(db: Session, user_id: str) -> UserInfo:
    try:
        return UserService().get_user_info(db, user_id)
    except UserNotFound:
        raise NotFoundError.for_entity("User")

def _require_user_admin(db: Session, caller: CallerContext, user_id: str) -> UserInfo:
    """The target user's info, provided the caller administers one of their organizations."""
    info = _user_info(db, user_id)
    require(caller.shares_admin_organization(info.organization_ids), caller, "you cannot manage this user")
    return info

def _check_confirmation(password: str, confirmation: str) -> None:
    if password != confirmation:
        raise ValidationAppError("PASSWORD_MISMATCH", "The password and confirmation password do not match.")


@router.post("/login", response_model=LoginOut)
def login(body: LoginIn, db: Session = Depends(get_db)):
    user = AuthService(db).authenticate_user(body.email, body.password)
    if not user:
        raise UnauthorizedError("invalid credentials")
    return LoginOut(accessToken=create_access_token(user.id), user=_user_out(user))

@router.get("/info", response_model=UserInfoOut)
def get_info(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return _info_out(_user_info(db, caller.user_id))

@router.post("/register", response_model=UserOut, status_code=201)
def register(body: RegisterIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        organization_service.get_organization(db, body.organizationId)
    except organization_service.OrganizationNotFound:
        raise NotFoundError.for_entity("Organization")
    require(caller.can_manage_organization(body.organizationId), caller, "organization admin required")
    _check_confirmation(body.password, body.confirmPassword)
    user = AuthService(db).register_user(
        body.email,
        body.password,
        body.organizationId,
        user_name=body.userName,
        display_name=body.displayName,
    )
    return _user_out(user)

@router.post("/password", status_code=204)
def change_password(body: PasswordChangeIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    _check_confirmation(body.newPassword, body.confirmPassword)
    AuthService(db).change_password(caller.user, body.currentPassword, body.newPassword)
    return Response(status_code=204)

@router.post("/password/reset", status_code=204)
def reset_password(body: PasswordResetIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    info = _require_user_admin(db, caller, body.userId)
    AuthService(db).set_password(info.user, body.newPassword)
    return Response(status_code=204)

@router.get("/organizations/{organization_id}", response_model=List[UserOut])
def list_organization_users(organization_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    require(caller.can_manage_organization(organization_id), caller, "organization admin required")
    return [_user_out(u) for u in UserService().list_in_organization(db, organization_id)]

@router.get("/departments/{department_id}", response_model=List[UserOut])
def list_department_users(department_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        department = organization_service.get_department(db, department_id)
    except organization_service.DepartmentNotFound:
        raise NotFoundError.for_entity("Department")
    require(caller.can_manage_department(department), caller, "department admin required")
    return [_user_out(u) for u in UserService().list_in_department(db, department_id)]

@router.get("/{user_id}", response_model=UserInfoOut)
def get_user(user_id: str, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    if user_id == caller.user_id:
        return _info_out(_user_info(db, user_id))
    return _info_out(_require_user_admin(db, caller, user_id))

@router.put("", response_model=UserOut)
def update_user(body: UserUpdateIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    if body.id != caller.user_id:
        _require_user_admin(db, caller, body.id)
    try:
        user = UserService().update_user(
            db,
            body.id,
            email=body.email,
            user_name=body.userName,
            display_name=body.displayName,
            member_number=body.memberNumber,
        )
    except UserNotFound:
        raise NotFoundError.for_entity("User")
    return _user_out(user)

@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    if user_id == caller.user_id:
        raise ValidationAppError("CANNOT_DELETE_SELF", "you cannot delete your own account")
    _require_user_admin(db, caller, user_id)
    UserService().delete_user(db, user_id)
    return Response(status_code=204)
