from typing import Iterable, List, Optional
import logging

from prometheus_client import Counter
from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import TaskStatus
from ..domain.roles import RoleSet
from ..domain.workflows import StatusOption, get_available_task_status
from ..errors import ConflictError
from ..repositories.task_repository import SqlAlchemyTaskRepository, TaskRepository
from .authorization import CallerContext, require

logger = logging.getLogger(__name__)

TASK_STATUS_CHANGES = Counter(
    "orgtasks_task_status_changes_total", "Task status transitions", ["from_status", "to_status"]
)

class TaskNotFound(Exception):
    pass

class TaskDepartmentNotFound(Exception):
    pass

def get_task(db: Session, task_id: int) -> models.Task:
    task = db.query(models.Task).filter(models.Task.id == task_id).first()
    if not task:
        raise TaskNotFound()
    return task

def save_task(db: Session, task_id: Optional[int] = None, **fields) -> models.Task:
    """Create a task, or update the one with ``task_id``."""
    if "status" in fields and fields["status"] is not None:
        fields["status"] = TaskStatus(fields["status"]).value
    if task_id is None:
        task = models.Task(**fields)
        db.add(task)
    else:
        task = get_task(db, task_id)
        for key, value in fields.items():
            setattr(task, key, value)
    db.commit()
    db.refresh(task)
    return task

def delete_task(db: Session, task: models.Task) -> None:
    db.query(models.TaskDepartment).filter(models.TaskDepartment.task_id == task.id).delete()
    db.delete(task)
    db.commit()

def list_tasks_for_department(db: Session, department_id: int, repository: Optional[TaskRepository] = None) -> List[models.Task]:
    repo = repository or SqlAlchemyTaskRepository()
    return repo.list_by_department(db, department_id)

def task_departments(db: Session, task: models.Task) -> List[models.Department]:
    """The task's own department followed by the departments it is shared with."""
    shared = (
        db.query(models.Department)
        .join(models.TaskDepartment, models.TaskDepartment.department_id == models.Department.id)
        .filter(models.TaskDepartment.task_id == task.id, models.Department.id != task.department_id)
        .order_by(models.Department.id)
        .all()
    )
    return [task.department] + shared

def caller_roles(caller: CallerContext, departments: Iterable[models.Department]) -> RoleSet:
    roles = RoleSet()
    for department in departments:
        roles = roles | caller.roles_for_department(department)
    return roles

def status_options(caller: CallerContext, departments: Iterable[models.Department], task: models.Task) -> List[StatusOption]:
    return get_available_task_status(
        TaskStatus(task.status),
        caller_roles(caller, departments),
        task.assigned_user_id is not None and task.assigned_user_id == caller.user_id,
    )

def change_status(
    db: Session,
    caller: CallerContext,
    departments: Iterable[models.Department],
    task: models.Task,
    new_status: TaskStatus,
) -> models.Task:
    """Move the task to ``new_status`` if it is one of the caller's options."""
    new_status = TaskStatus(new_status)
    allowed = {option.status for option in status_options(caller, departments, task)}
    require(new_status in allowed, caller, f"status {new_status.value} is not available")
    old_status = task.status
    if old_status != new_status.value:
        task.status = new_status.value
        db.commit()
        db.refresh(task)
        TASK_STATUS_CHANGES.labels(from_status=old_status, to_status=new_status.value).inc()
        logger.info("task %s status %s -> %s by user %s", task.id, old_status, new_status.value, caller.user_id)
    return task

def share_task(db: Session, task_id: int, department_id: int) -> models.TaskDepartment:
    existing = (
        db.query(models.TaskDepartment)
        .filter(models.TaskDepartment.task_id == task_id, models.TaskDepartment.department_id == department_id)
        .first()
    )
    if existing:
        raise ConflictError("TASK_ALREADY_SHARED", "task is already linked to this department")
    link = models.TaskDepartment(task_id=task_id, department_id=department_id)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link

def get_task_department(db: Session, link_id: int) -> models.TaskDepartment:
    link = db.query(models.TaskDepartment).filter(models.TaskDepartment.id == link_id).first()
    if not link:
        raise TaskDepartmentNotFound()
    return link

def unshare_task(db: Session, link: models.TaskDepartment) -> None:
    db.delete(link)
    db.commit()
