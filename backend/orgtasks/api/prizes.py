from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..db import models
from ..domain.enums import PrizeStatus
from ..domain.workflows import is_prize_transition_allowed
from ..errors import NotFoundError
from ..services.authorization import CallerContext, require
from ..services.organization_service import DepartmentNotFound, ensure_user_exists, get_department
from ..services.prize_service import PrizeNotFound, PrizeService
from .auth import get_caller

router = APIRouter(prefix="/v1/api/Prize", tags=["prizes"])

class PrizeIn(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    pointsCost: int = Field(default=0, ge=0)
    departmentId: int
    assignedUserId: Optional[str] = None
    status: Optional[PrizeStatus] = None

class PrizeOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    pointsCost: int
    departmentId: int
    creatorUserId: Optional[str] = None
    assignedUserId: Optional[str] = None
    status: PrizeStatus

class NextStatusOut(BaseModel):
    label: str
    nextStatus: Optional[PrizeStatus] = None
    allowed: bool

class AdvanceIn(BaseModel):
    assignedUserId: Optional[str] = None


def _prize_out(prize: models.Prize) -> PrizeOut:
    return PrizeOut(
        id=prize.id,
        name=prize.name,
        description=prize.description,
        pointsCost=prize.points_cost,
        departmentId=prize.department_id,
        creatorUserId=prize.creator_user_id,
        assignedUserId=prize.assigned_user_id,
        status=PrizeStatus(prize.status),
    )

def _department(db: Session, department_id: int) -> models.Department:
    try:
        return get_department(db, department_id)
    except DepartmentNotFound:
        raise NotFoundError.for_entity("Department")

def _prize_and_department(db: Session, prize_id: int):
    try:
        prize = PrizeService().get_prize(db, prize_id)
    except PrizeNotFound:
        raise NotFoundError.for_entity("Prize")
    return prize, _department(db, prize.department_id)


@router.post("", response_model=PrizeOut)
def save_prize(body: PrizeIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    department = _department(db, body.departmentId)
    require(caller.can_manage_department(department), caller, "you cannot manage prizes in this department")
    if body.assignedUserId:
        ensure_user_exists(db, body.assignedUserId)
    fields = dict(
        name=body.name,
        description=body.description,
        points_cost=body.pointsCost,
        department_id=body.departmentId,
        assigned_user_id=body.assignedUserId,
    )
    if body.status is not None:
        fields["status"] = body.status
    if body.id is None:
        fields["creator_user_id"] = caller.user_id
    else:
        _, existing_department = _prize_and_department(db, body.id)
        require(caller.can_manage_department(existing_department), caller, "you cannot manage this prize")
    prize = PrizeService().save_prize(db, prize_id=body.id, **fields)
    return _prize_out(prize)

@router.get("/ByDepartment/{department_id}", response_model=List[PrizeOut])
def list_prizes(department_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    department = _department(db, department_id)
    require(caller.can_view_department(department), caller, "department is not visible to you")
    return [_prize_out(p) for p in PrizeService().list_for_department(db, department_id)]

@router.get("/{prize_id}", response_model=PrizeOut)
def get_prize(prize_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    prize, department = _prize_and_department(db, prize_id)
    require(caller.can_view_department(department), caller, "prize is not visible to you")
    return _prize_out(prize)

@router.delete("/{prize_id}", status_code=204)
def delete_prize(prize_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    prize, department = _prize_and_department(db, prize_id)
    require(caller.can_manage_department(department), caller, "you cannot manage this prize")
    PrizeService().delete_prize(db, prize)
    return Response(status_code=204)

@router.get("/{prize_id}/NextStatus", response_model=NextStatusOut)
def get_next_status(prize_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    prize, department = _prize_and_department(db, prize_id)
    require(caller.can_view_department(department), caller, "prize is not visible to you")
    action = PrizeService().next_action(caller, department, prize)
    return NextStatusOut(
        label=action.label,
        nextStatus=action.next_status,
        allowed=is_prize_transition_allowed(action, PrizeStatus(prize.status)),
    )

@router.post("/{prize_id}/Advance", response_model=PrizeOut)
def advance_prize(
    prize_id: int,
    body: Optional[AdvanceIn] = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    prize, department = _prize_and_department(db, prize_id)
    require(caller.can_view_department(department), caller, "prize is not visible to you")
    assigned_user_id = body.assignedUserId if body else None
    if assigned_user_id:
        ensure_user_exists(db, assigned_user_id)
    prize = PrizeService().advance(db, caller, department, prize, assigned_user_id)
    return _prize_out(prize)
