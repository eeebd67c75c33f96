from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, List, Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import TaskStatus


@dataclass
class PointsAwardedRow:
    """One verified task (or, for leaderboards, one user's total) with its points."""

    user_id: str
    user_name: str
    user_email: str
    user_display_name: Optional[str]
    department_id: int
    department_name: str
    task_points_awarded: int
    task_id: Optional[int] = None
    task_name: Optional[str] = None
    task_description: Optional[str] = None
    task_status: Optional[str] = None
    user_ranking: int = 0


class TaskRepository(Protocol):
    def list_by_department(self, db: Session, department_id: int) -> List[models.Task]: ...
    def list_points_awarded_by_department(self, db: Session, department_id: int) -> List[PointsAwardedRow]: ...
    def list_points_awarded_by_user(self, db: Session, user_id: str) -> List[PointsAwardedRow]: ...
    def rank_users_by_points(self, db: Session, department_id: int) -> List[PointsAwardedRow]: ...


class SqlAlchemyTaskRepository:
    """SQLAlchemy-backed task queries; only verified tasks count towards points."""

    def list_by_department(self, db: Session, department_id: int) -> List[models.Task]:
        shared_ids = select(models.TaskDepartment.task_id).where(
            models.TaskDepartment.department_id == department_id
        )
        q = db.query(models.Task)
        q = q.filter((models.Task.department_id == department_id) | (models.Task.id.in_(shared_ids)))
        q = q.order_by(models.Task.due_date_utc, models.Task.id)
        return q.all()

    def _verified_points_query(self, db: Session):
        q = db.query(models.Task, models.User, models.Department)
        q = q.join(models.User, models.User.id == models.Task.assigned_user_id)
        q = q.join(models.Department, models.Department.id == models.Task.department_id)
        q = q.filter(models.Task.status == TaskStatus.VERIFIED_COMPLETED.value)
        return q

    @staticmethod
    def _to_row(task: models.Task, user: models.User, department: models.Department) -> PointsAwardedRow:
        return PointsAwardedRow(
            user_id=user.id,
            user_name=user.user_name or user.email,
            user_email=user.email,
            user_display_name=user.display_name,
            department_id=department.id,
            department_name=department.name,
            task_points_awarded=task.points_awarded or 0,
            task_id=task.id,
            task_name=task.name,
            task_description=task.description,
            task_status=task.status,
        )

    def list_points_awarded_by_department(self, db: Session, department_id: int) -> List[PointsAwardedRow]:
        q = self._verified_points_query(db).filter(models.Task.department_id == department_id)
        return [self._to_row(t, u, d) for t, u, d in q.order_by(models.Task.id).all()]

    def list_points_awarded_by_user(self, db: Session, user_id: str) -> List[PointsAwardedRow]:
        q = self._verified_points_query(db).filter(models.Task.assigned_user_id == user_id)
        return [self._to_row(t, u, d) for t, u, d in q.order_by(models.Task.id).all()]

    def rank_users_by_points(self, db: Session, department_id: int) -> List[PointsAwardedRow]:
        total = func.sum(models.Task.points_awarded).label("total")
        q = db.query(
            models.User.id,
            models.User.user_name,
            models.User.email,
            models.User.display_name,
            models.Department.id,
            models.Department.name,
            total,
        )
        q = q.join(models.Task, models.Task.assigned_user_id == models.User.id)
        q = q.join(models.Department, models.Department.id == models.Task.department_id)
        q = q.filter(
            models.Task.department_id == department_id,
            models.Task.status == TaskStatus.VERIFIED_COMPLETED.value,
        )
        q = q.group_by(
            models.User.id,
            models.User.user_name,
            models.User.email,
            models.User.display_name,
            models.Department.id,
            models.Department.name,
        )
        q = q.order_by(total.desc(), models.User.email)
        rows = []
        for rank, (uid, uname, email, display, dept_id, dept_name, points) in enumerate(q.all(), start=1):
            rows.append(
                PointsAwardedRow(
                    user_id=uid,
                    user_name=uname or email,
                    user_email=email,
                    user_display_name=display,
                    department_id=dept_id,
                    department_name=dept_name,
                    task_points_awarded=int(points or 0),
                    user_ranking=rank,
                )
            )
        return rows
