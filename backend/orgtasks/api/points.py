from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..errors import NotFoundError
from ..repositories.task_repository import PointsAwardedRow
from ..services import points_service
from ..services.authorization import CallerContext, require
from ..services.organization_service import DepartmentNotFound, get_department
from ..services.user_service import UserNotFound, UserService
from .auth import get_caller

router = APIRouter(prefix="/v1/api/TaskPointsAwarded", tags=["points"])

class PointsAwardedOut(BaseModel):
    userId: str
    userName: str
    userEmail: str
    userDisplayName: Optional[str] = None
    departmentId: int
    departmentName: str
    taskPointsAwarded: int
    taskId: Optional[int] = None
    taskName: Optional[str] = None
    taskDescription: Optional[str] = None
    taskStatus: Optional[str] = None
    userRanking: int = 0


def _row_out(row: PointsAwardedRow) -> PointsAwardedOut:
    return PointsAwardedOut(
        userId=row.user_id,
        userName=row.user_name,
        userEmail=row.user_email,
        userDisplayName=row.user_display_name,
        departmentId=row.department_id,
        departmentName=row.department_name,
        taskPointsAwarded=row.task_points_awarded,
        taskId=row.task_id,
        taskName=row.task_name,
        taskDescription=row.task_description,
        taskStatus=row.task_status,
        userRanking=row.user_ranking,
    )

def _viewable_department(db: Session, caller: CallerContext, department_id: int):
    try:
        department = get_department(db, department_id)
    except DepartmentNotFound:
        raise NotFoundError.for_entity("Department")
    require(caller.can_view_department(department), caller, "department is not visible to you")
    return department


@router.get("/ByDepartment/{department_id}", response_model=List[PointsAwardedOut])
def points_by_department(department_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    _viewable_department(db, caller, department_id)
    return [_row_out(r) for r in points_service.points_by_department(db, department_id)]

@router.get("/ByUser/{user_id}", response_model=List[PointsAwardedOut])
def points_by_user(user_id: str, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    if user_id != caller.user_id:
        try:
            info = UserService().get_user_info(db, user_id)
        except UserNotFound:
            raise NotFoundError.for_entity("User")
        require(caller.shares_admin_organization(info.organization_ids), caller, "you cannot view this user's points")
    return [_row_out(r) for r in points_service.points_by_user(db, user_id)]

@router.get("/TopUsers/{department_id}", response_model=List[PointsAwardedOut])
def top_users(
    department_id: int,
    top: int = Query(default=points_service.DEFAULT_TOP_COUNT, ge=1, le=100),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    _viewable_department(db, caller, department_id)
    return [_row_out(r) for r in points_service.top_users(db, caller.user_id, department_id, top)]
