from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..db import models
from ..domain.enums import TaskStatus
from ..errors import NotFoundError
from ..services import task_service
from ..services.authorization import CallerContext, require
from ..services.organization_service import DepartmentNotFound, ensure_user_exists, get_department
from .auth import get_caller

router = APIRouter(prefix="/v1/api", tags=["tasks"])

class TaskIn(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    estimatedTimeMinutes: int = Field(default=0, ge=0)
    dueDateUtc: datetime
    departmentId: int
    assignedUserId: Optional[str] = None
    pointsAwarded: int = Field(default=0, ge=0)
    status: Optional[TaskStatus] = None

class TaskOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    estimatedTimeMinutes: int
    dueDateUtc: datetime
    departmentId: int
    creatorUserId: Optional[str] = None
    assignedUserId: Optional[str] = None
    pointsAwarded: int
    status: TaskStatus

class StatusOptionOut(BaseModel):
    label: str
    status: TaskStatus

class StatusChange(BaseModel):
    status: TaskStatus

class TaskDepartmentIn(BaseModel):
    taskId: int
    departmentId: int

class TaskDepartmentOut(BaseModel):
    id: int
    taskId: int
    departmentId: int


def _task_out(task: models.Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        name=task.name,
        description=task.description,
        estimatedTimeMinutes=task.estimated_time_minutes,
        dueDateUtc=task.due_date_utc,
        departmentId=task.department_id,
        creatorUserId=task.creator_user_id,
        assignedUserId=task.assigned_user_id,
        pointsAwarded=task.points_awarded,
        status=TaskStatus(task.status),
    )

def _department(db: Session, department_id: int) -> models.Department:
    try:
        return get_department(db, department_id)
    except DepartmentNotFound:
        raise NotFoundError.for_entity("Department")

def _task(db: Session, task_id: int) -> models.Task:
    try:
        return task_service.get_task(db, task_id)
    except task_service.TaskNotFound:
        raise NotFoundError.for_entity("Task")

def _viewable_departments(db: Session, caller: CallerContext, task: models.Task) -> List[models.Department]:
    departments = task_service.task_departments(db, task)
    require(any(caller.can_view_department(d) for d in departments), caller, "task is not visible to you")
    return departments


@router.post("/Task", response_model=TaskOut)
def save_task(body: TaskIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    department = _department(db, body.departmentId)
    require(caller.can_manage_department(department), caller, "you cannot manage tasks in this department")
    if body.assignedUserId:
        ensure_user_exists(db, body.assignedUserId)
    fields = dict(
        name=body.name,
        description=body.description,
        estimated_time_minutes=body.estimatedTimeMinutes,
        due_date_utc=body.dueDateUtc,
        department_id=body.departmentId,
        assigned_user_id=body.assignedUserId,
        points_awarded=body.pointsAwarded,
    )
    if body.status is not None:
        fields["status"] = body.status
    if body.id is None:
        fields["creator_user_id"] = caller.user_id
    else:
        existing = _task(db, body.id)
        require(caller.can_manage_department(existing.department), caller, "you cannot manage this task")
    task = task_service.save_task(db, task_id=body.id, **fields)
    return _task_out(task)

@router.get("/Task/ByDepartment/{department_id}", response_model=List[TaskOut])
def list_tasks(department_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    department = _department(db, department_id)
    require(caller.can_view_department(department), caller, "department is not visible to you")
    return [_task_out(t) for t in task_service.list_tasks_for_department(db, department_id)]

@router.get("/Task/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    task = _task(db, task_id)
    _viewable_departments(db, caller, task)
    return _task_out(task)

@router.delete("/Task/{task_id}", status_code=204)
def delete_task(task_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    task = _task(db, task_id)
    require(caller.can_manage_department(task.department), caller, "you cannot manage this task")
    task_service.delete_task(db, task)
    return Response(status_code=204)

@router.get("/Task/{task_id}/StatusOptions", response_model=List[StatusOptionOut])
def get_status_options(task_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    task = _task(db, task_id)
    departments = _viewable_departments(db, caller, task)
    return [
        StatusOptionOut(label=option.label, status=option.status)
        for option in task_service.status_options(caller, departments, task)
    ]

@router.put("/Task/{task_id}/Status", response_model=TaskOut)
def change_task_status(task_id: int, body: StatusChange, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    task = _task(db, task_id)
    departments = _viewable_departments(db, caller, task)
    task = task_service.change_status(db, caller, departments, task, body.status)
    return _task_out(task)

@router.post("/TaskDepartment", response_model=TaskDepartmentOut)
def share_task(body: TaskDepartmentIn, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    department = _department(db, body.departmentId)
    require(caller.can_manage_department(department), caller, "you cannot manage tasks in this department")
    _task(db, body.taskId)
    link = task_service.share_task(db, body.taskId, body.departmentId)
    return TaskDepartmentOut(id=link.id, taskId=link.task_id, departmentId=link.department_id)

@router.delete("/TaskDepartment/{link_id}", status_code=204)
def unshare_task(link_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    try:
        link = task_service.get_task_department(db, link_id)
    except task_service.TaskDepartmentNotFound:
        raise NotFoundError.for_entity("TaskDepartment")
    department = _department(db, link.department_id)
    require(caller.can_manage_department(department), caller, "you cannot manage tasks in this department")
    task_service.unshare_task(db, link)
    return Response(status_code=204)
